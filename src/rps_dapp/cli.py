# Area: Shared
"""
rps_dapp.cli — Command-line interface
=====================================

Provides CLI entry point for the RPS client.

Usage:
    python -m rps_dapp watch                         # Follow rounds live
    python -m rps_dapp jackpot                       # Print the jackpot
    python -m rps_dapp solo rock 0.1                 # Play against the house
    python -m rps_dapp create paper 0.1              # Commit a hidden move
    python -m rps_dapp join 5 scissors 0.1           # Join open round 5
    python -m rps_dapp reveal 5 paper <secret>       # Reveal round 5

Connection settings come from --config (JSON) and the environment
(RPS_RPC_URL, RPS_CONTRACT_ADDRESS, RPS_ABI_PATH, ...). A .env file in
the working directory is loaded first.

Stakes are given in display units (ether).
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ._chain.units import format_display, from_display
from ._runner_config import ENV_MAPPINGS
from ._shared import log_error
from .errors import RpsDappError, TransactionRejected
from .types import Choice


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Commit-reveal Rock-Paper-Scissors ledger client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rps_dapp --config config.json watch
  python -m rps_dapp create rock 0.5
  RPS_RPC_URL=http://localhost:8545 python -m rps_dapp jackpot
        """,
    )
    parser.add_argument("--config", type=str, help="Path to JSON config file")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("watch", help="Synchronize and print rounds until interrupted")
    sub.add_parser("jackpot", help="Print the current jackpot")

    solo = sub.add_parser("solo", help="Play a solo round against the house")
    solo.add_argument("choice", type=Choice.parse)
    solo.add_argument("stake", type=str)

    create = sub.add_parser("create", help="Create a secret round")
    create.add_argument("choice", type=Choice.parse)
    create.add_argument("stake", type=str)

    join = sub.add_parser("join", help="Join an open secret round")
    join.add_argument("round_id", type=int)
    join.add_argument("choice", type=Choice.parse)
    join.add_argument("stake", type=str)

    reveal = sub.add_parser("reveal", help="Reveal your move for a round you created")
    reveal.add_argument("round_id", type=int)
    reveal.add_argument("choice", type=Choice.parse)
    reveal.add_argument("secret", type=str)

    return parser.parse_args(argv)


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load config from file, then override from environment."""
    load_dotenv()
    config: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                config = json.load(f)

    for env_key, config_key in ENV_MAPPINGS.items():
        if env_key in os.environ:
            config[config_key] = os.environ[env_key]

    return config


async def _run_action(runner, args: argparse.Namespace) -> None:
    account = await runner.connect()
    lifecycle = runner.lifecycle

    if args.command == "jackpot":
        print(f"Jackpot: {format_display(await lifecycle.jackpot())}")
        return

    print(f"Account: {account or 'none'}")
    if args.command == "solo":
        outcome = await lifecycle.play_solo(args.choice, from_display(args.stake))
        rnd = outcome.round
        print(f"Solo round {rnd.round_id} settled (tx {outcome.tx_hash})")
    elif args.command == "create":
        created = await lifecycle.create_secret_round(args.choice, from_display(args.stake))
        print(f"New round {created.round_id} created")
        print(f"Secret (keep it, needed to reveal): {created.secret}")
    elif args.command == "join":
        await lifecycle.join_secret_round(args.round_id, args.choice, from_display(args.stake))
        print(f"Joined round {args.round_id}")
    elif args.command == "reveal":
        await lifecycle.reveal_choice(args.round_id, args.choice, args.secret)
        print(f"Revealed round {args.round_id}")

    print(f"Jackpot: {format_display(await lifecycle.jackpot())}")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    config = load_config(args.config)

    # Import runner here to keep --help free of web3 start-up cost
    from .runner import RpsClientRunner

    try:
        runner = RpsClientRunner(config=config)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Set via config file or environment variables.", file=sys.stderr)
        return 1

    try:
        if args.command == "watch":
            runner.run()
        else:
            asyncio.run(_run_action(runner, args))
    except TransactionRejected as e:
        log_error(e)
        return 2
    except (RpsDappError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
