"""
Room bookkeeping and fan-out of the chat and support socket managers
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from dintask.services.chat_websocket import ChatEventType, ChatWebSocketManager, conversation_room, user_room
from dintask.services.support_websocket import (
    SUPERADMIN_ROOM,
    SupportEventType,
    SupportWebSocketManager,
    company_room,
    ticket_room,
)


def fake_socket():
    websocket = MagicMock()
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock()
    return websocket


def sent_types(websocket):
    return [call.args[0]["type"] for call in websocket.send_json.await_args_list]


class TestChatWebSocketManager:

    @pytest.mark.asyncio
    async def test_setup_joins_personal_room(self):
        manager = ChatWebSocketManager()
        socket = fake_socket()
        connection = await manager.connect(socket, "user-1", "Asha", "tenant-1")

        await manager.setup(connection)

        socket.accept.assert_awaited_once()
        assert connection.rooms == {user_room("user-1")}
        assert sent_types(socket) == [ChatEventType.CONNECTED.value]
        assert manager.is_online("user-1")

    @pytest.mark.asyncio
    async def test_fan_out_skips_sender(self):
        manager = ChatWebSocketManager()
        sender_socket, receiver_socket = fake_socket(), fake_socket()
        sender = await manager.connect(sender_socket, "user-1", "Asha")
        receiver = await manager.connect(receiver_socket, "user-2", "Ravi")
        await manager.setup(sender)
        await manager.setup(receiver)

        delivered = await manager.fan_out_message({"text": "hi"}, ["user-1", "user-2", "user-3"], "user-1")

        assert delivered == 1
        assert sent_types(receiver_socket)[-1] == ChatEventType.MESSAGE_RECEIVED.value
        assert sent_types(sender_socket) == [ChatEventType.CONNECTED.value]

    @pytest.mark.asyncio
    async def test_typing_reaches_others_in_conversation(self):
        manager = ChatWebSocketManager()
        first_socket, second_socket = fake_socket(), fake_socket()
        first = await manager.connect(first_socket, "user-1", "Asha")
        second = await manager.connect(second_socket, "user-2", "Ravi")
        await manager.join_chat(first, "conv-1")
        await manager.join_chat(second, "conv-1")

        await manager.typing(first, "conv-1")

        first_socket.send_json.assert_not_awaited()
        assert sent_types(second_socket) == [ChatEventType.TYPING.value]

    @pytest.mark.asyncio
    async def test_typing_needs_joined_conversation(self):
        manager = ChatWebSocketManager()
        member_socket = fake_socket()
        member = await manager.connect(member_socket, "user-1", "Asha")
        outsider = await manager.connect(fake_socket(), "user-9", "Mallory")
        await manager.join_chat(member, "conv-1")

        await manager.typing(outsider, "conv-1")

        member_socket.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_personal_and_conversation_rooms_do_not_collide(self):
        manager = ChatWebSocketManager()
        socket = fake_socket()
        connection = await manager.connect(socket, "user-1", "Asha")
        await manager.join_chat(connection, "user-2")

        assert await manager.notify_user("user-2", {"title": "x"}) == 0
        socket.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disconnect_clears_rooms(self):
        manager = ChatWebSocketManager()
        connection = await manager.connect(fake_socket(), "user-1", "Asha")
        await manager.join_chat(connection, "conv-1")

        await manager.disconnect(connection)

        assert manager.room_members(conversation_room("conv-1")) == []
        assert not manager.is_online("user-1")

    @pytest.mark.asyncio
    async def test_failed_send_drops_connection(self):
        manager = ChatWebSocketManager()
        socket = fake_socket()
        socket.send_json.side_effect = RuntimeError("socket closed")
        connection = await manager.connect(socket, "user-1", "Asha")
        await manager.join(connection, user_room("user-1"))

        assert await manager.notify_user("user-1", {"title": "x"}) == 0
        assert not manager.is_online("user-1")


class TestSupportWebSocketManager:

    @pytest.mark.asyncio
    async def test_register_rooms(self):
        manager = SupportWebSocketManager()
        operator = await manager.connect(fake_socket(), "root-1", "Root")
        member = await manager.connect(fake_socket(), "user-1", "Asha", "tenant-1")

        await manager.register(operator, is_platform=True)
        await manager.register(member, is_platform=False)

        assert operator.rooms == {SUPERADMIN_ROOM}
        assert member.rooms == {company_room("tenant-1")}

    @pytest.mark.asyncio
    async def test_escalated_ticket_reaches_company_and_platform(self):
        manager = SupportWebSocketManager()
        operator_socket, admin_socket, outsider_socket = fake_socket(), fake_socket(), fake_socket()
        await manager.register(await manager.connect(operator_socket, "root-1", "Root"), is_platform=True)
        await manager.register(await manager.connect(admin_socket, "admin-1", "Asha", "tenant-1"), is_platform=False)
        await manager.register(await manager.connect(outsider_socket, "admin-2", "Ravi", "tenant-2"), is_platform=False)

        delivered = await manager.broadcast_new_ticket({"ticketId": "#TKT-123456"}, "tenant-1", escalated=True)

        assert delivered == 2
        assert sent_types(operator_socket)[-1] == SupportEventType.NEW_SUPPORT_TICKET.value
        assert sent_types(admin_socket)[-1] == SupportEventType.NEW_SUPPORT_TICKET.value
        assert sent_types(outsider_socket) == [SupportEventType.CONNECTED.value]

    @pytest.mark.asyncio
    async def test_member_ticket_stays_in_company(self):
        manager = SupportWebSocketManager()
        operator_socket = fake_socket()
        await manager.register(await manager.connect(operator_socket, "root-1", "Root"), is_platform=True)

        delivered = await manager.broadcast_new_ticket({"ticketId": "#TKT-654321"}, "tenant-1", escalated=False)

        assert delivered == 0
        assert sent_types(operator_socket) == [SupportEventType.CONNECTED.value]

    @pytest.mark.asyncio
    async def test_responses_go_to_ticket_room(self):
        manager = SupportWebSocketManager()
        watcher_socket = fake_socket()
        watcher = await manager.connect(watcher_socket, "user-1", "Asha", "tenant-1")
        await manager.join_ticket(watcher, "ticket-1")

        assert await manager.broadcast_response("ticket-1", {"status": "Open"}) == 1

        assert watcher.rooms == {ticket_room("ticket-1")}
        await manager.leave_ticket(watcher, "ticket-1")
        assert await manager.broadcast_response("ticket-1", {"status": "Open"}) == 0

    @pytest.mark.asyncio
    async def test_typing_needs_joined_ticket(self):
        manager = SupportWebSocketManager()
        watcher_socket = fake_socket()
        watcher = await manager.connect(watcher_socket, "user-1", "Asha", "tenant-1")
        outsider = await manager.connect(fake_socket(), "user-9", "Mallory", "tenant-2")
        await manager.join_ticket(watcher, "ticket-1")

        await manager.typing(outsider, "ticket-1")

        watcher_socket.send_json.assert_not_awaited()
