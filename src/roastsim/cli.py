"""
Command line entry point.

Usage:
    roastsim run "https://sim.example/?session_id=s-1&api_key=...&callback_url=https://cb.example/x"
    roastsim run "<launch url>" --target-seconds 30 --tick-seconds 0.1

Exit codes: 0 when the result was delivered, 1 when delivery failed,
2 on missing or invalid launch parameters.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from roastsim.config.settings import settings
from roastsim.delivery.errors import ConfigurationError
from roastsim.session.params import parse_launch_url
from roastsim.session.runner import SessionRunner
from roastsim.storage.session_cache import SessionParamsCache, build_store

EXIT_DELIVERED = 0
EXIT_FAILED = 1
EXIT_CONFIGURATION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roastsim",
        description="Coffee roaster training simulator"
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    run = subcommands.add_parser("run", help="Run one simulation and deliver its result")
    run.add_argument("launch_url", help="Launch URL (or query string) carrying the session parameters")
    run.add_argument(
        "--target-seconds",
        type=int,
        default=settings.default_target_seconds,
        help=f"Roast target time in simulated seconds (default: {settings.default_target_seconds})"
    )
    run.add_argument(
        "--tick-seconds",
        type=float,
        default=settings.tick_interval_seconds,
        help=f"Wall-clock seconds per simulated second (default: {settings.tick_interval_seconds})"
    )
    run.add_argument(
        "--initial-temperature",
        type=float,
        default=settings.initial_temperature,
        help=f"Initial temperature in degrees Celsius (default: {settings.initial_temperature})"
    )
    return parser


async def run_session(args: argparse.Namespace) -> int:
    params = parse_launch_url(args.launch_url)
    print(json.dumps({'session': params.masked()}, ensure_ascii=False))

    runner = SessionRunner(
        params,
        cache=SessionParamsCache(build_store(settings)),
        target_seconds=args.target_seconds,
        initial_temperature=args.initial_temperature,
        tick_interval_seconds=args.tick_seconds
    )
    try:
        runner.start()
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION

    print(runner.message)
    outcome = await runner.wait()

    print(outcome.message)
    return EXIT_DELIVERED if outcome.delivered else EXIT_FAILED


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.target_seconds < 1:
        print("ERROR: --target-seconds must be at least 1", file=sys.stderr)
        return EXIT_CONFIGURATION

    return asyncio.run(run_session(args))


if __name__ == "__main__":
    sys.exit(main())
