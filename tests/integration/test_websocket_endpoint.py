import pytest
import pytest_asyncio
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from tests.mocks.identities import OUTSIDER, VIEWER, token_for


@pytest_asyncio.fixture
async def ws_client(app_with_db):
    return TestClient(app_with_db)


class TestOrganizationSocket:
    async def test_missing_token_rejected(self, ws_client, org):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect(f"/ws/organizations/{org.id}"):
                pass
        assert exc_info.value.code == 4001

    async def test_invalid_token_rejected(self, ws_client, org):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect(f"/ws/organizations/{org.id}?token=invalid"):
                pass
        assert exc_info.value.code == 4001

    async def test_non_member_rejected(self, ws_client, org):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect(f"/ws/organizations/{org.id}?token={token_for(OUTSIDER)}"):
                pass
        assert exc_info.value.code == 4003

    async def test_member_subscribes_to_org_channel(self, ws_client, app_with_db, org):
        with ws_client.websocket_connect(f"/ws/organizations/{org.id}?token={token_for(VIEWER)}") as ws:
            frame = ws.receive_json()
            assert frame == {"event": "subscribed", "data": {"channel": f"org-{org.id}"}}
            assert app_with_db.state.hub.subscriber_count(f"org-{org.id}") == 1


class TestPublicSocket:
    async def test_unknown_domain_rejected(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect("/ws/public/nowhere"):
                pass
        assert exc_info.value.code == 4004

    async def test_subscribes_to_public_channel(self, ws_client, org):
        with ws_client.websocket_connect("/ws/public/ACME") as ws:
            assert ws.receive_json() == {"event": "subscribed", "data": {"channel": "public-acme"}}
