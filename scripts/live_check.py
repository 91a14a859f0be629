"""One-command live reliability check runner.

Usage examples:
  python scripts/live_check.py --ws-url ws://localhost:5000/ws --user-id 42
  python scripts/live_check.py --user-id 42 --test-recipient 7 --test-text "hello"

Environment fallbacks:
  JOBWIRE_WS_URL
  JOBWIRE_USER_ID
  JOBWIRE_TEST_RECIPIENT
  JOBWIRE_TEST_TEXT
  JOBWIRE_LIVE_TIMEOUT
  JOBWIRE_LIVE_CLOSE_TIMEOUT
  JOBWIRE_ACK_TIMEOUT
  JOBWIRE_LIVE_RECONNECT_DELAY
  JOBWIRE_LIVE_RECONNECT
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from jobwire.utils.live_check import LiveCheckConfig, LiveCheckError, config_from_env, format_report, run_live_check


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run jobwire live reliability check.")
    parser.add_argument("--ws-url", help="WebSocket endpoint, e.g. ws://localhost:5000/ws")
    parser.add_argument("--user-id", help="User id sent in the authenticate frame")
    parser.add_argument("--test-recipient", help="Optional recipient id for send+confirmation verification")
    parser.add_argument("--test-text", help="Message text used for send verification")
    parser.add_argument("--timeout", type=float, help="Authentication timeout seconds")
    parser.add_argument("--close-timeout", type=float, help="Close timeout seconds")
    parser.add_argument("--ack-timeout", type=float, help="message_sent timeout seconds")
    parser.add_argument("--reconnect-delay", type=float, help="Delay before reconnect (seconds)")
    parser.add_argument("--no-reconnect", action="store_true", help="Skip reconnect phase")
    return parser


def _merge_config(defaults: LiveCheckConfig, args: argparse.Namespace) -> LiveCheckConfig:
    return LiveCheckConfig(
        ws_url=args.ws_url or defaults.ws_url,
        user_id=args.user_id or defaults.user_id,
        test_recipient=args.test_recipient if args.test_recipient is not None else defaults.test_recipient,
        test_text=args.test_text or defaults.test_text,
        timeout_s=float(args.timeout) if args.timeout is not None else defaults.timeout_s,
        close_timeout_s=float(args.close_timeout) if args.close_timeout is not None else defaults.close_timeout_s,
        ack_timeout_s=float(args.ack_timeout) if args.ack_timeout is not None else defaults.ack_timeout_s,
        reconnect_delay_s=float(args.reconnect_delay)
        if args.reconnect_delay is not None
        else defaults.reconnect_delay_s,
        require_reconnect=False if args.no_reconnect else defaults.require_reconnect,
    )


async def _main_async() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    config = _merge_config(config_from_env(), args)

    print("[live-check] starting")
    print(
        f"[live-check] ws_url={config.ws_url} user_id={config.user_id} "
        f"test_recipient={config.test_recipient} reconnect={config.require_reconnect}"
    )

    try:
        report = await run_live_check(config)
    except LiveCheckError as exc:
        print(f"[live-check] FAILED: {exc}")
        return 1
    except Exception as exc:
        print(f"[live-check] ERROR: {exc}")
        return 1

    print("[live-check] PASSED")
    print(format_report(report))
    return 0


def main() -> int:
    with contextlib.suppress(KeyboardInterrupt):
        return asyncio.run(_main_async())
    return 130


if __name__ == "__main__":
    raise SystemExit(main())
