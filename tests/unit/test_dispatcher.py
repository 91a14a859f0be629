import pytest

from jobwire.core.entities import MessageStatus
from jobwire.protocol.frame import Frame, FrameType


@pytest.mark.asyncio
async def test_every_inbound_type_has_one_route(client) -> None:
    inbound = {
        "connection_ack",
        "authenticated",
        "room_joined",
        "user_joined_room",
        "user_left_room",
        "new_message",
        "message_sent",
        "message_delivered",
        "message_read",
        "user_typing",
        "user_stopped_typing",
        "user_status_change",
        "ping",
        "pong",
        "error",
    }
    assert client._dispatcher.known_types == inbound


@pytest.mark.asyncio
async def test_unknown_type_is_ignored(client) -> None:
    assert await client._dispatcher.dispatch(Frame("brand_new_type", {"x": 1})) is False


@pytest.mark.asyncio
async def test_new_message_then_status_updates(client) -> None:
    client.user_id = 42
    dispatch = client._dispatcher.dispatch

    await dispatch(
        Frame(
            FrameType.NEW_MESSAGE,
            {
                "messageId": 5,
                "senderId": 7,
                "recipientId": 42,
                "content": "hello",
                "jobId": 3,
                "senderName": "Ada",
                "timestamp": "2024-01-01T00:00:00Z",
            },
        )
    )
    await dispatch(Frame(FrameType.MESSAGE_DELIVERED, {"messageId": 5}))

    [record] = client.messages
    assert record.id == 5
    assert record.sender_name == "Ada"
    assert record.job_id == 3
    assert record.status is MessageStatus.DELIVERED
    assert client.unread_counts == {7: 1}

    await dispatch(Frame(FrameType.MESSAGE_READ, {"messageId": 5}))
    await dispatch(Frame(FrameType.MESSAGE_SENT, {"messageId": 5}))
    assert client.messages[0].status is MessageStatus.READ


@pytest.mark.asyncio
async def test_new_message_accepts_nested_message_object(client) -> None:
    await client._dispatcher.dispatch(
        Frame(FrameType.NEW_MESSAGE, {"message": {"id": 9, "senderId": 7, "content": "nested"}})
    )

    assert [m.content for m in client.messages] == ["nested"]


@pytest.mark.asyncio
async def test_new_message_without_id_is_dropped(client) -> None:
    await client._dispatcher.dispatch(Frame(FrameType.NEW_MESSAGE, {"senderId": 7, "content": "x"}))

    assert client.messages == ()


@pytest.mark.asyncio
async def test_status_for_unknown_message_is_noop(client) -> None:
    assert await client._dispatcher.dispatch(Frame(FrameType.MESSAGE_DELIVERED, {"messageId": 404})) is True
    assert client.messages == ()


@pytest.mark.asyncio
async def test_presence_and_rooms_routes(client) -> None:
    client.user_id = 42
    dispatch = client._dispatcher.dispatch

    await dispatch(Frame(FrameType.USER_STATUS_CHANGE, {"userId": 7, "status": "online"}))
    await dispatch(Frame(FrameType.ROOM_JOINED, {"jobId": 3, "members": [42]}))
    await dispatch(Frame(FrameType.USER_JOINED_ROOM, {"jobId": 3, "userId": 7}))

    assert client.online_users == frozenset({7})
    assert client.room_members(3) == frozenset({42, 7})

    await dispatch(Frame(FrameType.USER_LEFT_ROOM, {"jobId": 3, "userId": 42}))
    assert client.rooms == frozenset()


@pytest.mark.asyncio
async def test_authenticated_outside_open_state_is_ignored(client) -> None:
    await client._dispatcher.dispatch(Frame(FrameType.AUTHENTICATED, {"userId": 42}))

    assert client.is_connected() is False


@pytest.mark.asyncio
async def test_handler_failure_is_contained(client) -> None:
    # ping without a transport cannot be answered
    assert await client._dispatcher.dispatch(Frame(FrameType.PING)) is False
