from tests.mocks.identities import OUTSIDER


class TestOrganizationsEndpoint:
    async def test_create_and_list(self, client_for):
        client = client_for(OUTSIDER)
        resp = await client.post("/api/organizations", json={"name": "Globex", "domain": "Globex"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["domain"] == "globex"

        resp = await client.get("/api/organizations")
        assert [o["role"] for o in resp.json()["data"]] == ["Admin"]

    async def test_duplicate_domain(self, admin_client, org):
        resp = await admin_client.post("/api/organizations", json={"name": "Acme", "domain": "acme"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "conflict"

    async def test_invalid_domain_is_422(self, admin_client):
        resp = await admin_client.post("/api/organizations", json={"name": "Acme", "domain": "acme.com"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "validation_error"
        assert body["error"]["details"]["errors"]

    async def test_get_requires_membership(self, client_for, org):
        resp = await client_for(OUTSIDER).get(f"/api/organizations/{org.id}")
        assert resp.status_code == 403
        assert resp.json()["message"] == "You are not a member of this organization."

    async def test_update_is_admin_only(self, admin_client, editor_client, org):
        resp = await editor_client.put(f"/api/organizations/{org.id}", json={"name": "Nope"})
        assert resp.status_code == 403
        resp = await admin_client.put(
            f"/api/organizations/{org.id}", json={"settings": {"timezone": "Europe/Berlin"}}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["settings"]["timezone"] == "Europe/Berlin"

    async def test_delete(self, admin_client, org):
        resp = await admin_client.delete(f"/api/organizations/{org.id}")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "data": None, "message": "Organization deleted."}
        resp = await admin_client.get(f"/api/organizations/{org.id}")
        assert resp.status_code == 404

    async def test_subscribers_list(self, anon_client, viewer_client, org):
        await anon_client.post("/api/public/acme/subscribers", json={"email": "fan@example.com"})
        resp = await viewer_client.get(f"/api/organizations/{org.id}/subscribers")
        assert [s["email"] for s in resp.json()["data"]] == ["fan@example.com"]
