"""
Command-line caster.

    python -m opele cast --source mock --gesture drop
    python -m opele cast --source serial --port /dev/ttyUSB0 --timeout 30
    python -m opele profile 153
    python -m opele table
"""

import argparse
import asyncio
import json
import logging
import platform
import sys
import threading

import numpy as np

from .config import CasterConfig
from .data.models import LegMark
from .data.source import MockMotionSource
from .entropy import EntropyCollector
from .errors import CastError
from .event_logger import CastLogger
from .mapper import SignMapper, get_profile
from .verses import VerseLibrary


def _detect_serial_port() -> str:
    system = platform.system()
    if system == "Darwin":  # macOS
        return "/dev/tty.usbserial-DN04ABAX"
    elif system == "Windows":
        return "COM3"
    return "/dev/ttyUSB0"


def _build_source(args, rng):
    if args.source == "serial":
        from .data.live.serial_source import SerialMotionSource
        return SerialMotionSource(port=args.port or _detect_serial_port(), baudrate=args.baudrate)
    return MockMotionSource(rng=rng)


def _play_gesture(source: MockMotionSource, gesture: str) -> None:
    if gesture == "none":
        return
    source.play(source.rest(10))
    source.play(source.shake(30))
    if gesture == "drop":
        source.play(source.drop())


def _print_reading(result, descriptor, entry) -> None:
    legs = "  ".join(
        "".join("I" if mark is LegMark.OPEN else "II" for mark in leg).ljust(8)
        for leg in (descriptor.right_leg, descriptor.left_leg)
    )
    print("=" * 50)
    print(f"{descriptor.name}  [{descriptor.binary_signature}]  index {descriptor.index}")
    print(f"Source: {result.source.value} ({result.sample_count} samples"
          f"{', drop detected' if result.impact else ''})")
    print(f"Chain:  {legs}")
    print("-" * 50)
    verse = entry.first_verse if entry else None
    if verse is None:
        print(f"The verse for this sign (index {descriptor.index}) is not yet in the library.")
        return
    print(f'"{verse.chant_yoruba}"')
    print(f'"{verse.translation}"')
    print(f"Message: {verse.message}")
    print(f"Prescription: {verse.prescription}")


def cmd_cast(args) -> int:
    rng = np.random.default_rng(args.rng_seed)
    config = CasterConfig(jitter=args.jitter)
    cast_logger = CastLogger()
    collector = EntropyCollector(config=config, rng=rng, event_logger=cast_logger)

    landed = threading.Event()
    collector.impact.connect(landed.set)

    source = _build_source(args, rng)
    try:
        try:
            asyncio.run(collector.start_session(source))
        except CastError as e:
            print(f"Sensors unavailable ({e}). Casting from the fallback generator.")
        else:
            if isinstance(source, MockMotionSource):
                _play_gesture(source, args.gesture)
            else:
                print("SHAKE DEVICE OR DROP ON PAD (Ctrl+C to cast now)")
                try:
                    if not landed.wait(timeout=args.timeout):
                        print("No drop detected, casting now.")
                except KeyboardInterrupt:
                    print("\nManual stop")

        result = collector.cast()
    finally:
        source.close()

    descriptor = get_profile(result.seed)
    cast_logger.log_sign(descriptor)
    library = VerseLibrary.load(args.verses) if args.verses else VerseLibrary.default()
    entry = library.lookup(descriptor.index)

    if args.json:
        print(json.dumps({
            "seed": result.seed,
            "source": result.source.value,
            "sample_count": result.sample_count,
            "impact": result.impact,
            "sign": descriptor.to_dict(),
            "has_verse": entry is not None,
        }, indent=2))
    else:
        _print_reading(result, descriptor, entry)
    return 0


def cmd_profile(args) -> int:
    print(json.dumps(get_profile(args.seed).to_dict(), indent=2))
    return 0


def cmd_table(args) -> int:
    for descriptor in SignMapper().all_profiles():
        print(f"{descriptor.index:3d}  {descriptor.binary_signature}  {descriptor.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="opele", description="Cast an opele chain from motion entropy")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    cast = sub.add_parser("cast", help="collect motion entropy and reveal a sign")
    cast.add_argument("--source", choices=["mock", "serial"], default="mock")
    cast.add_argument("--gesture", choices=["drop", "shake", "none"], default="drop",
                      help="simulated gesture for the mock source")
    cast.add_argument("--port", help="serial port (default: platform guess)")
    cast.add_argument("--baudrate", type=int, default=9600)
    cast.add_argument("--timeout", type=float, default=30.0, help="seconds to wait for a drop")
    cast.add_argument("--jitter", type=float, default=0.0, help="random perturbation per sample")
    cast.add_argument("--rng-seed", type=int, default=None, help="seed the random generator")
    cast.add_argument("--verses", help="path to a verse database JSON file")
    cast.add_argument("--json", action="store_true", help="print the result as JSON")
    cast.set_defaults(func=cmd_cast)

    profile = sub.add_parser("profile", help="describe the sign for a seed")
    profile.add_argument("seed", type=int)
    profile.set_defaults(func=cmd_profile)

    table = sub.add_parser("table", help="list all 256 signs")
    table.set_defaults(func=cmd_table)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
