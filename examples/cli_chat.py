"""Interactive terminal chat against a jobwire backend.

Usage:
    JOBWIRE_USER_ID=42 python examples/cli_chat.py

Commands:
    <recipient_id> <text>   send a direct message
    /join <job_id>          join a job room
    /leave <job_id>         leave a job room
    /online                 list online users
    /reconnect              drop the socket and start over
    quit | exit
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from jobwire.client.client import ChatClient
from jobwire.core.events import ConnectionEvent
from jobwire.core.errors import ReconnectExhaustedError, ServerError
from jobwire.infra.logger import get_logger
from jobwire.protocol.frame import Frame, FrameType

get_logger("jobwire", logging.WARNING)


def _as_id(value: str):
    return int(value) if value.isdigit() else value


def _prompt() -> None:
    print("> ", end="", flush=True)


async def on_state_change(event: ConnectionEvent) -> None:
    print(f"\n[state] {event.previous.value} -> {event.state.value}")
    if event.reason is not None:
        print(f"[state] reason: {event.reason}")
    _prompt()


async def on_frame(frame: Frame) -> None:
    if frame.type == FrameType.NEW_MESSAGE.value:
        sender = frame.get("senderName") or frame.get("senderId")
        print(f"\n[message] {sender}: {frame.get('content')}")
        _prompt()
    elif frame.type == FrameType.MESSAGE_SENT.value:
        print(f"\n[sent] id={frame.get('messageId')}")
        _prompt()


async def on_server_error(error: ServerError) -> None:
    print(f"\n[server] {error}")
    _prompt()


async def on_reconnect_exhausted(error: ReconnectExhaustedError) -> None:
    print(f"\n[system] {error}")
    _prompt()


async def cli_input_loop(client: ChatClient) -> None:
    loop = asyncio.get_running_loop()
    while True:
        try:
            line = await loop.run_in_executor(None, input, "> ")
        except (EOFError, KeyboardInterrupt):
            return
        line = line.strip()
        if not line:
            continue
        if line.lower() in ("quit", "exit"):
            return

        command, _, rest = line.partition(" ")
        if command == "/join" and rest:
            await client.join_room(_as_id(rest.strip()))
        elif command == "/leave" and rest:
            await client.leave_room(_as_id(rest.strip()))
        elif command == "/online":
            print(f"[system] online: {sorted(map(str, client.online_users))}")
        elif command == "/reconnect":
            await client.force_reconnect()
        elif rest:
            sent_now = await client.send_message(rest, _as_id(command))
            if not sent_now:
                print(f"[system] queued ({client.queued_frames} pending) until reconnected")
        else:
            print("[system] usage: <recipient_id> <text>")


async def main() -> None:
    user_id = _as_id(os.getenv("JOBWIRE_USER_ID", "1"))
    ws_url = os.getenv("JOBWIRE_WS_URL")
    async with ChatClient(os.getenv("JOBWIRE_HOST"), ws_url=ws_url) as client:
        client.on_state_change = on_state_change
        client.on_frame = on_frame
        client.on_server_error = on_server_error
        client.on_reconnect_exhausted = on_reconnect_exhausted
        await client.connect(user_id)
        await cli_input_loop(client)
    print("Exited.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExited.")
