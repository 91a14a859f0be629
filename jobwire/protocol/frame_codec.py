import json
from typing import Any

from jobwire.core.errors import ProtocolError
from jobwire.protocol.frame import Frame


def encode_frame(frame: Frame) -> str:
    """Serializes a frame to compact JSON with ``type`` as the first key."""
    return json.dumps(frame.to_dict(), separators=(",", ":"), ensure_ascii=False, default=str)


def decode_frame(data: str | bytes) -> Frame:
    """Parses one inbound frame. Raises ProtocolError on any malformed body."""
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"frame is not valid UTF-8: {exc}") from exc

    try:
        parsed: Any = json.loads(data)
    except (ValueError, RecursionError) as exc:
        raise ProtocolError(f"frame is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ProtocolError(f"frame must be a JSON object, got {type(parsed).__name__}")

    frame_type = parsed.pop("type", None)
    if not isinstance(frame_type, str) or not frame_type:
        raise ProtocolError("frame is missing a string 'type' discriminator")
    return Frame(type=frame_type, payload=parsed)
