"""Unit tests for JWT service."""

import jwt as pyjwt

from statuspage.services.jwt_service import JWTService, actor_from_claims


class TestJWTService:
    """JWT token creation and validation."""

    def setup_method(self):
        self.jwt = JWTService(
            secret_key="test-secret-key-for-unit-tests",
            algorithm="HS256",
            expiry_seconds=3600,
        )

    def test_create_token_returns_string(self):
        token = self.jwt.create_token(user_id="user-123", email="ada@acme.test", name="Ada")
        assert isinstance(token, str)
        assert len(token) > 0

    def test_decode_valid_token(self):
        token = self.jwt.create_token(user_id="user-123", email="ada@acme.test", name="Ada")
        claims = self.jwt.decode_token(token)
        assert claims is not None
        assert claims["sub"] == "user-123"
        assert claims["email"] == "ada@acme.test"
        assert claims["name"] == "Ada"

    def test_decode_expired_token(self):
        jwt_short = JWTService(
            secret_key="test-secret-key-for-unit-tests",
            algorithm="HS256",
            expiry_seconds=-1,  # Already expired
        )
        token = jwt_short.create_token(user_id="user-123", email="a@b.test")
        assert jwt_short.decode_token(token) is None

    def test_decode_invalid_signature(self):
        other = JWTService(secret_key="a-different-secret", algorithm="HS256", expiry_seconds=3600)
        token = other.create_token(user_id="user-123", email="a@b.test")
        assert self.jwt.decode_token(token) is None

    def test_decode_garbage(self):
        assert self.jwt.decode_token("not.a.jwt") is None

    def test_actor_from_token(self):
        token = self.jwt.create_token(user_id="user-123", email="ada@acme.test", name="Ada")
        actor = self.jwt.actor_from_token(token)
        assert actor.id == "user-123"
        assert actor.email == "ada@acme.test"

    def test_token_without_subject_has_no_actor(self):
        token = pyjwt.encode({"email": "x@y.test"}, "test-secret-key-for-unit-tests", algorithm="HS256")
        assert self.jwt.actor_from_token(token) is None


def test_actor_name_falls_back_to_first_and_last_name():
    actor = actor_from_claims({"sub": "u1", "email": "e@x.test", "first_name": "Grace", "last_name": "Hopper"})
    assert actor.name == "Grace Hopper"
