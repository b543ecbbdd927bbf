"""
Module 07 - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m coverpass_cli hash --file docs.json [--index I]
    python -m coverpass_cli build (--file docs.json | --sample) [--out merkle_data.json]
    python -m coverpass_cli prove --file docs.json (--index I | --leaf 0x..)
    python -m coverpass_cli verify --root 0x.. --leaf 0x.. --proof 0x.. [0x.. ...]
    python -m coverpass_cli publish --file docs.json --insurer 0x..
    python -m coverpass_cli ledger current|history|stats|verify-chain
    python -m coverpass_cli respond --block N --leaf 0x..
    python -m coverpass_cli trees list|export [--out PATH]
    python -m coverpass_cli coverage --verifier 0x.. --user 0x.. --leaf 0x.. --proof 0x.. [--block N]
    python -m coverpass_cli roles grant|revoke|list [insurer|verifier] [ACCOUNT] [--admin 0x..]
    python -m coverpass_cli events [--limit N] [--export PATH] [--clear]
    python -m coverpass_cli config --init|--show

Environment Variables:
    COVERPASS_DATA_DIR          Directory holding ledger/tree/role/event files (default: data)
    COVERPASS_ADMIN             Admin account address
    COVERPASS_LOG_LEVEL         Log level (default: INFO)
    COVERPASS_LOG_FILE          Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from coverpass_cli import __version__
from coverpass_cli.commands import admin, ledger, merkle
from coverpass_cli.config import get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_documents_source(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--file", "-f",
        type=str,
        default=None,
        help="JSON file with a list of documents (or a merkle_data.json)",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        default=False,
        help="Use the built-in sample policies instead of --file",
    )


def _add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="coverpass",
        description="CoverPass CLI - Commit insurance documents to Merkle roots and verify coverage proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./coverpass.json or ~/.config/coverpass/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- hash command ---
    hash_parser = subparsers.add_parser(
        "hash",
        help="Print document leaf hashes",
    )
    _add_documents_source(hash_parser)
    hash_parser.add_argument("--index", type=int, default=None, help="Only this document")
    _add_json_flag(hash_parser)
    hash_parser.set_defaults(func=merkle.hash_cmd)

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a Merkle tree over documents",
        description="Compute the root and every document's proof.",
    )
    _add_documents_source(build_parser)
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write {root, documents} to this file (e.g. merkle_data.json)",
    )
    _add_json_flag(build_parser)
    build_parser.set_defaults(func=merkle.build_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate a membership proof",
    )
    _add_documents_source(prove_parser)
    target = prove_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--index", type=int, help="Document index")
    target.add_argument("--leaf", type=str, help="Leaf hash (0x..)")
    _add_json_flag(prove_parser)
    prove_parser.set_defaults(func=merkle.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof against a root",
        description="Exit code 2 if the proof does not reproduce the root.",
    )
    verify_parser.add_argument("--root", type=str, required=True, help="Claimed root (0x..)")
    verify_parser.add_argument("--leaf", type=str, required=True, help="Leaf hash (0x..)")
    verify_parser.add_argument("--proof", type=str, nargs="*", default=[], help="Sibling hashes, leaf level first")
    _add_json_flag(verify_parser)
    verify_parser.set_defaults(func=merkle.verify_cmd)

    # --- publish command ---
    publish_parser = subparsers.add_parser(
        "publish",
        help="Publish a documents batch as a new root record",
        description="Requires the insurer role.",
    )
    _add_documents_source(publish_parser)
    publish_parser.add_argument("--insurer", type=str, required=True, help="Insurer account")
    publish_parser.add_argument("--out", "-o", type=str, default=None, help="Also write merkle_data.json here")
    _add_json_flag(publish_parser)
    publish_parser.set_defaults(func=ledger.publish_cmd)

    # --- ledger command ---
    ledger_parser = subparsers.add_parser(
        "ledger",
        help="Inspect the root-record chain",
    )
    ledger_parser.add_argument(
        "action",
        choices=["current", "history", "stats", "verify-chain"],
        help="What to show",
    )
    _add_json_flag(ledger_parser)
    ledger_parser.set_defaults(func=ledger.ledger_cmd)

    # --- respond command ---
    respond_parser = subparsers.add_parser(
        "respond",
        help="Answer a proof request from a stored tree",
    )
    respond_parser.add_argument("--block", type=int, required=True, help="Block number")
    respond_parser.add_argument("--leaf", type=str, required=True, help="Leaf hash (0x..)")
    _add_json_flag(respond_parser)
    respond_parser.set_defaults(func=ledger.respond_cmd)

    # --- trees command ---
    trees_parser = subparsers.add_parser(
        "trees",
        help="List or export the stored Merkle trees",
    )
    trees_parser.add_argument("action", choices=["list", "export"])
    trees_parser.add_argument("--out", "-o", type=str, default=None, help="Export destination")
    _add_json_flag(trees_parser)
    trees_parser.set_defaults(func=ledger.trees_cmd)

    # --- coverage command ---
    coverage_parser = subparsers.add_parser(
        "coverage",
        help="Verify a user's coverage against a published root",
        description="Requires the verifier role. Exit code 2 if coverage is not proven.",
    )
    coverage_parser.add_argument("--verifier", type=str, required=True, help="Verifier account")
    coverage_parser.add_argument("--user", type=str, required=True, help="Policy holder account")
    coverage_parser.add_argument("--leaf", type=str, required=True, help="Document hash (0x..)")
    coverage_parser.add_argument("--proof", type=str, nargs="*", default=[], help="Sibling hashes")
    coverage_parser.add_argument("--block", type=int, default=None, help="Block number (default: current)")
    _add_json_flag(coverage_parser)
    coverage_parser.set_defaults(func=ledger.coverage_cmd)

    # --- roles command ---
    roles_parser = subparsers.add_parser(
        "roles",
        help="Whitelist or revoke insurers and verifiers",
    )
    roles_parser.add_argument("action", choices=["grant", "revoke", "list"])
    roles_parser.add_argument("role", nargs="?", choices=sorted(admin.ROLE_NAMES), default=None)
    roles_parser.add_argument("account", nargs="?", default=None)
    roles_parser.add_argument("--admin", type=str, default=None, help="Admin account (default: COVERPASS_ADMIN)")
    _add_json_flag(roles_parser)
    roles_parser.set_defaults(func=admin.roles_cmd)

    # --- events command ---
    events_parser = subparsers.add_parser(
        "events",
        help="Show the event history",
    )
    events_parser.add_argument("--limit", type=int, default=20, help="Most recent N events (default: 20)")
    events_parser.add_argument("--export", type=str, default=None, help="Write all events to this file")
    events_parser.add_argument("--clear", action="store_true", default=False, help="Clear the event history")
    _add_json_flag(events_parser)
    events_parser.set_defaults(func=admin.events_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="coverpass.json",
        help="Path for config file (default: coverpass.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (COVERPASS_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: coverpass config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
