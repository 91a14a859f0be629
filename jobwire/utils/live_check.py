"""End-to-end live connection reliability checker."""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass
from typing import Any, Callable

from jobwire.client.client import ChatClient
from jobwire.core.state import ConnectionState
from jobwire.protocol.frame import FrameType
from jobwire.utils.live_probe import LiveProbe


@dataclass
class LiveCheckConfig:
    ws_url: str = "ws://localhost:5000/ws"
    user_id: str = "1"
    test_recipient: str | None = None
    test_text: str = "jobwire live reliability probe"
    timeout_s: float = 30.0
    close_timeout_s: float = 10.0
    ack_timeout_s: float = 15.0
    reconnect_delay_s: float = 1.0
    require_reconnect: bool = True


@dataclass
class LiveCheckReport:
    authenticated_ok: bool = False
    connection_id: str | None = None
    send_attempted: bool = False
    sent_message_id: Any = None
    close_ok: bool = False
    reconnect_authenticated_ok: bool = False


class LiveCheckError(RuntimeError):
    pass


def config_from_env() -> LiveCheckConfig:
    return LiveCheckConfig(
        ws_url=os.getenv("JOBWIRE_WS_URL", "ws://localhost:5000/ws"),
        user_id=os.getenv("JOBWIRE_USER_ID", "1"),
        test_recipient=os.getenv("JOBWIRE_TEST_RECIPIENT"),
        test_text=os.getenv("JOBWIRE_TEST_TEXT", "jobwire live reliability probe"),
        timeout_s=float(os.getenv("JOBWIRE_LIVE_TIMEOUT", "30")),
        close_timeout_s=float(os.getenv("JOBWIRE_LIVE_CLOSE_TIMEOUT", "10")),
        ack_timeout_s=float(os.getenv("JOBWIRE_ACK_TIMEOUT", os.getenv("JOBWIRE_LIVE_TIMEOUT", "15"))),
        reconnect_delay_s=float(os.getenv("JOBWIRE_LIVE_RECONNECT_DELAY", "1")),
        require_reconnect=os.getenv("JOBWIRE_LIVE_RECONNECT", "1") not in {"0", "false", "False"},
    )


def _coerce_id(value: str) -> Any:
    return int(value) if value.isdigit() else value


async def run_live_check(
    config: LiveCheckConfig,
    *,
    client_factory: Callable[..., Any] = ChatClient,
) -> LiveCheckReport:
    client = client_factory(ws_url=config.ws_url)
    probe = LiveProbe()
    report = LiveCheckReport()

    client.on_state_change = probe.handle_state_change
    client.on_frame = probe.handle_frame
    user_id = _coerce_id(config.user_id)

    try:
        await client.connect(user_id)
        try:
            await probe.wait_state(ConnectionState.AUTHENTICATED, timeout=config.timeout_s)
        except asyncio.TimeoutError as exc:
            raise LiveCheckError(f"timeout waiting for authentication ({config.timeout_s:.1f}s)") from exc
        report.authenticated_ok = True
        report.connection_id = client.connection_id

        if config.test_recipient:
            report.send_attempted = True
            await client.send_message(config.test_text, _coerce_id(config.test_recipient))
            try:
                confirmation = await probe.wait_for_frame(FrameType.MESSAGE_SENT.value, timeout=config.ack_timeout_s)
            except asyncio.TimeoutError as exc:
                raise LiveCheckError(f"timeout waiting for message_sent ({config.ack_timeout_s:.1f}s)") from exc
            report.sent_message_id = confirmation.get("messageId")

        await client.disconnect()
        try:
            await probe.wait_state(ConnectionState.CLOSED, timeout=config.close_timeout_s)
        except asyncio.TimeoutError as exc:
            raise LiveCheckError(f"timeout waiting for close ({config.close_timeout_s:.1f}s)") from exc
        report.close_ok = True

        if config.require_reconnect:
            if config.reconnect_delay_s > 0:
                await asyncio.sleep(config.reconnect_delay_s)

            await client.connect(user_id)
            try:
                await probe.wait_state(ConnectionState.AUTHENTICATED, timeout=config.timeout_s)
            except asyncio.TimeoutError as exc:
                raise LiveCheckError(f"timeout waiting for re-authentication ({config.timeout_s:.1f}s)") from exc
            report.reconnect_authenticated_ok = True

        return report
    finally:
        with contextlib.suppress(Exception):
            await client.disconnect()


def format_report(report: LiveCheckReport) -> str:
    lines = [
        f"authenticated_ok={report.authenticated_ok}",
        f"connection_id={report.connection_id}",
        f"send_attempted={report.send_attempted}",
        f"sent_message_id={report.sent_message_id}",
        f"close_ok={report.close_ok}",
        f"reconnect_authenticated_ok={report.reconnect_authenticated_ok}",
    ]
    return "\n".join(lines)
