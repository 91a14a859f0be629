from jobwire.client.presence import PresenceTracker
from jobwire.client.rooms import RoomTracker


def test_presence_online_and_offline() -> None:
    presence = PresenceTracker()

    assert presence.apply_status(7, "online") is True
    assert presence.apply_status(7, "online") is False
    assert presence.apply_status(8, "online") is True
    assert presence.online() == frozenset({7, 8})

    assert presence.apply_status(7, "offline") is True
    assert presence.apply_status(7, "offline") is False
    assert presence.is_online(7) is False


def test_presence_treats_any_other_status_as_offline() -> None:
    presence = PresenceTracker()
    presence.apply_status(7, "online")

    presence.apply_status(7, "away")

    assert presence.online() == frozenset()


def test_presence_clear() -> None:
    presence = PresenceTracker()
    presence.apply_status(1, "online")
    presence.clear()
    assert presence.online() == frozenset()


def test_rooms_track_membership() -> None:
    rooms = RoomTracker()
    rooms.joined(3, [42, 7])
    rooms.user_joined(3, 8)
    rooms.user_left(3, 7, local_user_id=42)

    assert rooms.rooms() == frozenset({3})
    assert rooms.members(3) == frozenset({42, 8})


def test_rooms_forget_room_when_local_user_leaves() -> None:
    rooms = RoomTracker()
    rooms.joined(3, None)
    rooms.user_joined(3, 7)

    rooms.user_left(3, 42, local_user_id=42)

    assert rooms.rooms() == frozenset()
    assert rooms.members(3) == frozenset()


def test_rooms_ignore_leave_for_unknown_room() -> None:
    rooms = RoomTracker()
    rooms.user_left(99, 7, local_user_id=42)
    assert rooms.rooms() == frozenset()
