class TestServicesEndpoint:
    async def _create(self, client, org, **extra):
        resp = await client.post("/api/services", json={"organization_id": org.id, "name": "API", **extra})
        assert resp.status_code == 201
        return resp.json()["data"]

    async def test_create_and_get(self, editor_client, viewer_client, org):
        service = await self._create(editor_client, org, group="Core")
        assert service["status"] == "Operational"
        assert service["order"] == 0

        resp = await viewer_client.get(f"/api/services/{service['id']}")
        assert resp.status_code == 200
        assert resp.json()["data"]["history"] == []

    async def test_viewer_cannot_create(self, viewer_client, org):
        resp = await viewer_client.post("/api/services", json={"organization_id": org.id, "name": "API"})
        assert resp.status_code == 403

    async def test_status_update_broadcasts(self, app_with_db, editor_client, org, transport):
        service = await self._create(editor_client, org)
        resp = await editor_client.put(f"/api/services/{service['id']}/status", json={"status": "Major Outage"})
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "Major Outage"

        await app_with_db.state.broadcaster.flush()
        assert transport.events(f"org-{org.id}") == ["service-created", "status-update"]
        assert transport.events("public-acme") == ["service-created", "status-update"]

    async def test_invalid_status_is_rejected(self, editor_client, org):
        service = await self._create(editor_client, org)
        resp = await editor_client.put(f"/api/services/{service['id']}/status", json={"status": "Down"})
        assert resp.status_code == 422

    async def test_list_for_organization(self, editor_client, viewer_client, org):
        await self._create(editor_client, org)
        resp = await viewer_client.get(f"/api/organizations/{org.id}/services")
        assert [s["name"] for s in resp.json()["data"]] == ["API"]

    async def test_uptime(self, editor_client, viewer_client, org):
        service = await self._create(editor_client, org)
        resp = await viewer_client.get(f"/api/services/{service['id']}/uptime", params={"window_hours": 24})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["availability"] == 100.0
        assert data["window_hours"] == 24

    async def test_delete_is_admin_only(self, admin_client, editor_client, org):
        service = await self._create(editor_client, org)
        assert (await editor_client.delete(f"/api/services/{service['id']}")).status_code == 403
        assert (await admin_client.delete(f"/api/services/{service['id']}")).status_code == 200
        assert (await admin_client.get(f"/api/services/{service['id']}")).status_code == 404
