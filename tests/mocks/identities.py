"""Actors used across the test suite, one per role plus an outsider."""

from statuspage.services.jwt_service import JWTService
from statuspage.services.policy import Actor

ADMIN = Actor(id="user-admin", email="admin@acme.test", name="Ada Admin")
EDITOR = Actor(id="user-editor", email="editor@acme.test", name="Ed Editor")
VIEWER = Actor(id="user-viewer", email="viewer@acme.test", name="Vi Viewer")
OUTSIDER = Actor(id="user-outsider", email="someone@elsewhere.test", name="Out Sider")


def token_for(actor: Actor) -> str:
    return JWTService().create_token(user_id=actor.id, email=actor.email, name=actor.name)
