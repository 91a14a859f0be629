"""Wire frames and their JSON codec."""

from .frame import Frame, FrameType, make_frame
from .frame_codec import decode_frame, encode_frame

__all__ = ["Frame", "FrameType", "decode_frame", "encode_frame", "make_frame"]
