"""
WebSocket handshake and event tests
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from dintask.api.v1.endpoints import websocket as ws_endpoints
from dintask.main import app


@pytest.fixture
def ws_client():
    return TestClient(app)


@pytest.fixture
def known_user(monkeypatch):
    user = SimpleNamespace(id="user-1", name="Asha", workspace_id="admin-1", role="employee")
    monkeypatch.setattr(ws_endpoints, "get_user_from_token", AsyncMock(return_value=user))
    return user


class TestHandshake:

    @pytest.mark.parametrize("path", ["/api/v1/ws/chat", "/api/v1/ws/support"])
    def test_bad_token_closes_with_4001(self, ws_client, path):
        with pytest.raises(WebSocketDisconnect) as exc:
            with ws_client.websocket_connect(f"{path}?token=bad"):
                pass

        assert exc.value.code == 4001

    def test_missing_token(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with ws_client.websocket_connect("/api/v1/ws/chat"):
                pass

        assert exc.value.code == 4001


class TestChatSocket:

    def test_setup_and_ping(self, ws_client, known_user):
        with ws_client.websocket_connect("/api/v1/ws/chat?token=ok") as socket:
            socket.send_json({"type": "setup"})
            connected = socket.receive_json()
            assert connected["type"] == "connected"
            assert connected["data"] == {"userId": "user-1"}

            socket.send_json({"type": "ping"})
            assert socket.receive_json()["type"] == "pong"

    def test_invalid_json_reports_error(self, ws_client, known_user):
        with ws_client.websocket_connect("/api/v1/ws/chat?token=ok") as socket:
            socket.send_text("{not json")
            reply = socket.receive_json()

            assert reply["type"] == "error"
            assert reply["data"]["error"] == "invalid_json"

    def test_join_refused_outside_conversation(self, ws_client, known_user, monkeypatch):
        lookup = AsyncMock(return_value=None)
        monkeypatch.setattr(ws_endpoints, "_joined_conversation", lookup)

        with ws_client.websocket_connect("/api/v1/ws/chat?token=ok") as socket:
            socket.send_json({"type": "join_chat", "data": {"conversationId": "user:user-2"}})
            reply = socket.receive_json()

        assert reply["type"] == "error"
        assert reply["data"]["error"] == "forbidden"
        lookup.assert_awaited_once_with(known_user, "user:user-2")

    def test_message_goes_to_stored_participants(self, ws_client, known_user, monkeypatch):
        conversation = SimpleNamespace(participants=[SimpleNamespace(user_id="user-1"), SimpleNamespace(user_id="user-2")])
        monkeypatch.setattr(ws_endpoints, "_joined_conversation", AsyncMock(return_value=conversation))
        fan_out = AsyncMock(return_value=1)
        monkeypatch.setattr(ws_endpoints.chat_websocket_manager, "fan_out_message", fan_out)

        with ws_client.websocket_connect("/api/v1/ws/chat?token=ok") as socket:
            socket.send_json({"type": "new_message", "data": {
                "conversationId": "conv-1", "text": "hi", "participants": ["user-3"],
            }})
            socket.send_json({"type": "ping"})
            assert socket.receive_json()["type"] == "pong"

        message, participants, sender = fan_out.await_args.args
        assert participants == ["user-1", "user-2"]
        assert sender == "user-1"


class TestSupportSocket:

    def test_ping(self, ws_client, known_user):
        with ws_client.websocket_connect("/api/v1/ws/support?token=ok") as socket:
            assert socket.receive_json()["type"] == "connected"

            socket.send_json({"type": "ping"})
            assert socket.receive_json()["type"] == "pong"

    def test_join_refused_for_foreign_ticket(self, ws_client, known_user, monkeypatch):
        monkeypatch.setattr(ws_endpoints, "_may_watch_ticket", AsyncMock(return_value=False))

        with ws_client.websocket_connect("/api/v1/ws/support?token=ok") as socket:
            socket.receive_json()
            socket.send_json({"type": "join_ticket", "data": {"ticketId": "ticket-9"}})
            reply = socket.receive_json()

        assert reply["type"] == "error"
        assert reply["data"]["message"] == "Not authorized to access this ticket"
