"""Default constants and configuration values for jobwire."""

from .config import DEFAULT_CONNECTION_CONFIG, WS_PATH, build_ws_url

__all__ = ["DEFAULT_CONNECTION_CONFIG", "WS_PATH", "build_ws_url"]
