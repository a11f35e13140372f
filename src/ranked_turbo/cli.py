# Area: Shared
"""
ranked_turbo.cli — Command-line interface
=========================================

Operator commands against the rating store, plus a local replay of a
scripted match through the full pipeline.

Usage:
    ranked-turbo get 76561198                  # Print a stored rating
    ranked-turbo put 76561198 540              # Overwrite a rating
    ranked-turbo init 76561198                 # Read, initializing if absent
    ranked-turbo simulate match.json           # Replay a scripted match

The store URL comes from --store-url, the config file, or the
RANKED_TURBO_STORE_URL environment variable (``.env`` is honoured).
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ._config import load_config, validate_config
from ._match.publisher import POSTGAME_TABLE
from ._shared.logging_config import setup_logging
from ._store.client import RatingStoreClient
from .host import AsyncioScheduler, UnitInfo
from .local_host import LocalHost
from .runner import MatchRunner


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="ranked-turbo",
        description="Ranked Turbo rating store and settlement tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ranked-turbo get 76561198
  ranked-turbo --store-url https://example.firebaseio.com put 76561198 540
  ranked-turbo --config config.json simulate match.json
        """,
    )
    parser.add_argument("--config", type=str, help="Path to JSON config file")
    parser.add_argument("--store-url", type=str, help="Rating store base URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    get_cmd = sub.add_parser("get", help="Print the stored rating of an identity")
    get_cmd.add_argument("identity")

    put_cmd = sub.add_parser("put", help="Overwrite the rating of an identity")
    put_cmd.add_argument("identity")
    put_cmd.add_argument("value", type=int)

    init_cmd = sub.add_parser("init", help="Read a rating, initializing it if absent")
    init_cmd.add_argument("identity")

    sim_cmd = sub.add_parser("simulate", help="Replay a scripted match (JSON)")
    sim_cmd.add_argument("script", type=str)

    return parser.parse_args(argv)


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    config = load_config(args.config)
    if args.store_url:
        config["store_base_url"] = args.store_url
    validate_config(config)
    return config


def _store_from_config(config: Dict[str, Any]) -> RatingStoreClient:
    return RatingStoreClient(
        base_url=config["store_base_url"],
        baseline=config["baseline"],
        timeout=config["http_timeout_seconds"],
    )


async def _run_store_command(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    async with _store_from_config(config) as store:
        if args.command == "get":
            value = await store.read(args.identity)
            if value is None:
                print(f"{args.identity}: not found", file=sys.stderr)
                return 1
            print(value)
            return 0

        if args.command == "put":
            ok = await store.write(args.identity, args.value)
            if not ok:
                print(f"{args.identity}: write failed", file=sys.stderr)
                return 1
            print(args.value)
            return 0

        print(await store.get_or_init(args.identity))
        return 0


def load_script(path: str) -> Dict[str, Any]:
    """Load a match script: players, units and a timed event list."""
    with open(Path(path), encoding="utf-8") as f:
        script = json.load(f)
    for key in ("players", "events"):
        if key not in script:
            raise ValueError(f"Match script is missing '{key}'")
    return script


def build_local_host(script: Dict[str, Any]) -> LocalHost:
    host = LocalHost()
    for player in script["players"]:
        if player.get("bot"):
            host.add_bot(player["slot"], player["team"], player.get("name", ""))
        else:
            host.add_player(player["slot"], player["identity"], player["team"], player.get("name", ""))
    for unit in script.get("units", []):
        host.add_unit(unit["index"], UnitInfo(
            team=unit["team"],
            unit_name=unit.get("unit_name", ""),
            is_building=unit.get("is_building", False),
            is_real_hero=unit.get("is_real_hero", False),
        ))
    return host


async def simulate(script: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    """Replay ``script`` through a ``MatchRunner`` and return the postgame table."""
    host = build_local_host(script)
    runner = MatchRunner(config, host=host, scheduler=AsyncioScheduler())
    try:
        for step in script["events"]:
            await asyncio.sleep(step.get("wait", 0))
            runner.dispatch(step["event"], step.get("payload", {}))
        drain = (
            runner.config["settle_delay_seconds"]
            + runner.config["verify_delay_seconds"]
            + script.get("drain_seconds", 1.0)
        )
        await asyncio.sleep(drain)
    finally:
        await runner.aclose()
    return host.table(POSTGAME_TABLE)


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    try:
        config = build_config_from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Set via --store-url, config file or environment variables.", file=sys.stderr)
        return 1

    level = logging.DEBUG if args.verbose else logging.INFO
    config["log_level"] = level
    setup_logging(log_file_path=config.get("log_file"), level=level)

    if args.command == "simulate":
        try:
            script = load_script(args.script)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        table = asyncio.run(simulate(script, config))
        print(json.dumps(table, indent=2, sort_keys=True))
        return 0

    return asyncio.run(_run_store_command(args, config))
