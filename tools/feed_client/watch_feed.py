from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Allow running from repo root without installing as a package.
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

import websockets  # type: ignore

from mockfeed.contracts.validation import FeedStateChecker, parse_server_msg


async def watch(url: str, *, max_messages: int, keep_going: bool, quiet: bool) -> int:
    checker = FeedStateChecker()
    violations = 0
    async with websockets.connect(url, max_size=None) as ws:
        print(f"connected to {url}")
        async for raw in ws:
            try:
                msg = parse_server_msg(raw)
                checker.apply(msg)
            except ValueError as e:
                violations += 1
                print(f"[violation] message #{checker.messages + 1}: {e}")
                if not keep_going:
                    return 1
                continue
            if not quiet:
                print(
                    f"#{checker.messages} contracts={len(msg['contracts'])} quotes={len(msg['quotes'])} "
                    f"live={len(checker.live_ids)} removed={len(checker.removed_ids)}"
                )
            if max_messages and checker.messages >= max_messages:
                break

    print(f"done: messages={checker.messages} quotes={checker.quote_count} violations={violations}")
    return 1 if violations else 0


def main() -> None:
    ap = argparse.ArgumentParser(description="Connect to a mockfeed server and check every message.")
    ap.add_argument("--url", default="ws://127.0.0.1:8080/")
    ap.add_argument("--messages", type=int, default=0, help="Stop after N messages (0 = run until closed).")
    ap.add_argument(
        "--keep-going",
        action="store_true",
        help="By default the first violation stops the watcher. Use this flag to report and continue.",
    )
    ap.add_argument("--quiet", action="store_true")
    args = ap.parse_args()

    try:
        code = asyncio.run(
            watch(args.url, max_messages=args.messages, keep_going=args.keep_going, quiet=args.quiet)
        )
    except KeyboardInterrupt:
        code = 0
    raise SystemExit(code)


if __name__ == "__main__":
    main()
