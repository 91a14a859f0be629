"""Default connection constants."""

WS_PATH = "/ws"

DEFAULT_CONNECTION_CONFIG = {
    "host": "localhost:5000",
    "secure": False,
    "ws_path": WS_PATH,
    "open_timeout": 10.0,
    "close_timeout": 5.0,
    "reconnect_base_delay_ms": 1000.0,
    "reconnect_multiplier": 1.5,
    "reconnect_max_delay_ms": 15000.0,
    "reconnect_jitter_ms": 1000.0,
    "max_reconnect_attempts": 15,
    "typing_timeout_ms": 3000.0,
}


def build_ws_url(host: str, *, secure: bool = True, path: str = WS_PATH) -> str:
    scheme = "wss" if secure else "ws"
    host = host.strip().rstrip("/")
    if not path.startswith("/"):
        path = "/" + path
    return f"{scheme}://{host}{path}"
