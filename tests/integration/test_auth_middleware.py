"""Bearer token enforcement on the dashboard API."""

from statuspage.services.jwt_service import JWTService


class TestAuthMiddleware:
    async def test_missing_token(self, anon_client):
        resp = await anon_client.get("/api/organizations")
        assert resp.status_code == 401
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "authentication_required"

    async def test_invalid_token(self, client_for):
        client = client_for(None)
        client.headers["Authorization"] = "Bearer not-a-token"
        resp = await client.get("/api/organizations")
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token."

    async def test_expired_token(self, client_for):
        client = client_for(None)
        token = JWTService(expiry_seconds=-1).create_token(user_id="u1", email="u1@x.test")
        client.headers["Authorization"] = f"Bearer {token}"
        resp = await client.get("/api/organizations")
        assert resp.status_code == 401

    async def test_public_routes_skip_auth(self, anon_client, org):
        resp = await anon_client.get("/api/public/acme/status")
        assert resp.status_code == 200

    async def test_valid_token(self, admin_client, org):
        resp = await admin_client.get("/api/organizations")
        assert resp.status_code == 200
        assert resp.json()["success"] is True
