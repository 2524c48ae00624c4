"""Command line entry point: print obstacle heights until Enter is pressed."""

from __future__ import annotations

import argparse
import sys

from .calculator import LaserHeightCalculator
from .sensor import DEFAULT_BAUDRATE, SensorError


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command."""
    parser = argparse.ArgumentParser(
        prog="laserheight",
        description="Measure obstacle height with two laser range sensors.",
    )
    parser.add_argument("device1", nargs="?", default="/dev/ttyUSB4", help="first sensor port")
    parser.add_argument("device2", nargs="?", default="/dev/ttyUSB5", help="second sensor port")
    parser.add_argument(
        "--angle", type=float, default=6.0, help="angle between the sensors in degrees"
    )
    parser.add_argument(
        "--center-buff",
        type=float,
        default=55.0,
        help="offset from the sensors to the centre of rotation in mm",
    )
    parser.add_argument("--baudrate", type=int, default=DEFAULT_BAUDRATE, help="serial baud rate")
    return parser


def _print_height(height: float) -> None:
    print(f"Obstacle height: {height:g} mm", flush=True)


def main(argv: list[str] | None = None) -> int:
    """Run the height calculation until a line is read from standard input."""
    args = build_parser().parse_args(argv)
    try:
        calculator = LaserHeightCalculator.from_devices(
            args.device1, args.device2, args.angle, args.center_buff, args.baudrate
        )
    except SensorError as exc:
        print(exc, file=sys.stderr)
        return 1

    with calculator:
        if calculator.start(_print_height):
            print("Height calculation started, press Enter to stop...", flush=True)
            try:
                sys.stdin.readline()
            except KeyboardInterrupt:
                pass
    return 0


if __name__ == "__main__":
    sys.exit(main())