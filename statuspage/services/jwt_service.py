import datetime

import jwt
import structlog

from statuspage.config import settings
from statuspage.services.policy import Actor

logger = structlog.get_logger()


class JWTService:
    """Validate identity provider tokens (and sign development ones)."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expiry_seconds: int | None = None,
    ):
        self._secret_key = secret_key or settings.statuspage_jwt_secret
        self._algorithm = algorithm or settings.statuspage_jwt_algorithm
        self._expiry_seconds = expiry_seconds or settings.statuspage_jwt_expiry_seconds

    def create_token(self, user_id: str, email: str, name: str = "") -> str:
        """Create a signed JWT with identity claims."""
        now = datetime.datetime.now(datetime.timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "name": name,
            "iat": now,
            "exp": now + datetime.timedelta(seconds=self._expiry_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> dict | None:
        """Decode and validate a JWT. Returns claims dict or None if invalid/expired."""
        try:
            return jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            logger.debug("jwt_expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug("jwt_invalid", error=str(e))
            return None

    def actor_from_token(self, token: str) -> Actor | None:
        claims = self.decode_token(token)
        if not claims or not claims.get("sub"):
            return None
        return actor_from_claims(claims)


def actor_from_claims(claims: dict) -> Actor:
    name = claims.get("name") or " ".join(
        part for part in (claims.get("first_name"), claims.get("last_name")) if part
    )
    return Actor(id=str(claims["sub"]), email=claims.get("email", ""), name=name)
