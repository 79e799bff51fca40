"""Download a session's positions from OpenF1 and write a frame file.

Settings come from ``LED_CIRCUIT_*`` environment variables (or ``.env``);
command-line flags override them.

Usage:
    uv run python scripts/fetch_frames.py --out dutch_gp.json
    uv run python scripts/fetch_frames.py --session 9149 --drivers 1,44 --out two_cars.json
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from led_circuit.config import ReplayConfig, parse_timestamp  # noqa: E402
from led_circuit.frames.export import save_frames  # noqa: E402
from led_circuit.track.layout import InputDataError  # noqa: E402
from led_circuit.web.service import ReplaySession  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Fetch OpenF1 positions and build LED frames")
    ap.add_argument("--out", required=True, help="Frame file to write")
    ap.add_argument("--session", help="OpenF1 session key")
    ap.add_argument("--start", help="Range start (RFC 3339)")
    ap.add_argument("--end", help="Range end (RFC 3339)")
    ap.add_argument("--drivers", help="Comma-separated driver numbers (default: roster)")
    ap.add_argument("--concurrency", type=int, help="Drivers fetched in parallel")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every retry")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.session:
        overrides["session_key"] = args.session
    if args.start:
        overrides["start"] = parse_timestamp(args.start)
    if args.end:
        overrides["end"] = parse_timestamp(args.end)
    if args.drivers:
        overrides["drivers"] = tuple(int(d) for d in args.drivers.split(","))
    if args.concurrency:
        overrides["max_concurrency"] = args.concurrency

    try:
        config = dataclasses.replace(ReplayConfig.from_env(), **overrides)
        session = ReplaySession(config)
    except (InputDataError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    report = session.acquire()
    frames = session.frames.snapshot()
    save_frames(args.out, frames, config.update_rate_ms)

    print(f"{len(report.samples)} samples → {len(frames)} frames written to {args.out}")
    if report.abandoned:
        print(f"WARNING: {len(report.abandoned)} window(s) abandoned; replay has gaps.", file=sys.stderr)


if __name__ == "__main__":
    main()
