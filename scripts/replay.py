"""Replay a frame file in the terminal.

Prints the race clock and lit LEDs once per tick.  Press Ctrl+C to quit.

Usage:
    uv run python scripts/replay.py dutch_gp.json
    uv run python scripts/replay.py dutch_gp.json --speed 5 --hz 10
"""

from __future__ import annotations

import argparse
import sys
import time

from dotenv import load_dotenv

load_dotenv()

from led_circuit.frames.export import load_frames  # noqa: E402
from led_circuit.frames.store import FrameSequence  # noqa: E402
from led_circuit.playback.clock import PlaybackClock  # noqa: E402
from led_circuit.playback.render import RenderSnapshot  # noqa: E402
from led_circuit.playback.ticker import PlaybackTicker  # noqa: E402
from led_circuit.telemetry.roster import load_roster, roster_by_id  # noqa: E402
from led_circuit.track.layout import InputDataError  # noqa: E402


def _print_snapshot(snapshot: RenderSnapshot) -> None:
    lit = " ".join(f"{led}:{color}" for led, color in sorted(snapshot.leds.items()))
    print(
        f"\r{snapshot.race_time_label}  x{snapshot.speed}  "
        f"[{snapshot.current_index + 1}/{snapshot.frame_count}]  {lit}",
        end="",
        flush=True,
    )


def main() -> None:
    ap = argparse.ArgumentParser(description="Terminal replay of an LED frame file")
    ap.add_argument("frames", help="Frame file written by fetch_frames.py")
    ap.add_argument("--roster", default=None, help="Roster JSON (default: built-in 2023 grid)")
    ap.add_argument("--speed", type=int, default=1, help="Playback speed multiplier (1-5)")
    ap.add_argument("--hz", type=float, default=10.0, help="Render ticks per second")
    args = ap.parse_args()

    try:
        frames, update_rate_ms = load_frames(args.frames)
        roster = roster_by_id(load_roster(args.roster))
    except InputDataError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    store = FrameSequence(frames)
    clock = PlaybackClock(store, frame_duration=update_rate_ms / 1000.0)
    try:
        clock.set_speed(args.speed)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    ticker = PlaybackTicker(clock, store, roster, on_render=_print_snapshot, target_hz=args.hz)
    clock.start()
    ticker.start()
    try:
        while clock.state.current_index < len(store) - 1:
            time.sleep(0.1)
        time.sleep(1.0 / args.hz)
    except KeyboardInterrupt:
        pass
    finally:
        ticker.stop()
        clock.stop()
        print("\nReplay stopped.")


if __name__ == "__main__":
    main()
