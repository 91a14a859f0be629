import pytest

from jobwire.core.errors import StateTransitionError
from jobwire.core.state import TRANSITIONS, ConnectionState, ConnectionStateMachine, can_transition


def test_every_state_has_a_transition_row() -> None:
    assert set(TRANSITIONS) == set(ConnectionState)


def test_happy_path_and_reconnect_cycle() -> None:
    machine = ConnectionStateMachine()

    for target in (
        ConnectionState.CONNECTING,
        ConnectionState.OPEN,
        ConnectionState.AUTHENTICATED,
        ConnectionState.RECONNECTING,
        ConnectionState.CONNECTING,
        ConnectionState.OPEN,
        ConnectionState.DISCONNECTED,
    ):
        machine.transition(target)

    assert machine.state is ConnectionState.DISCONNECTED


def test_transition_returns_previous_state() -> None:
    machine = ConnectionStateMachine()

    assert machine.transition(ConnectionState.CONNECTING) is ConnectionState.DISCONNECTED


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (ConnectionState.DISCONNECTED, ConnectionState.AUTHENTICATED),
        (ConnectionState.CONNECTING, ConnectionState.AUTHENTICATED),
        (ConnectionState.CLOSED, ConnectionState.RECONNECTING),
        (ConnectionState.AUTHENTICATED, ConnectionState.OPEN),
    ],
)
def test_illegal_transitions_raise(current: ConnectionState, target: ConnectionState) -> None:
    machine = ConnectionStateMachine(current)

    assert can_transition(current, target) is False
    with pytest.raises(StateTransitionError):
        machine.transition(target)
    assert machine.state is current
