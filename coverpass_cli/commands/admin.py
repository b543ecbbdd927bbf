"""
Module 07 - CLI Admin Commands

Role whitelisting and the event history.

Usage:
    coverpass roles grant insurer 0x.. --admin 0x..
    coverpass roles revoke verifier 0x.. --admin 0x..
    coverpass roles list
    coverpass events [--limit 20] [--export events.json] [--clear]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.access.roles import Role

from coverpass_cli.commands.ledger import open_service


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1

ROLE_NAMES = {
    "insurer": Role.INSURER,
    "verifier": Role.VERIFIER,
}


def roles_cmd(args: Namespace) -> int:
    """Handle roles command."""
    service = open_service(args)

    if args.action == "list":
        data = service.roles.to_dict()
        if args.json:
            print(json.dumps(data, indent=2))
        else:
            for role_name, accounts in data.items():
                print(f"{role_name}:")
                for account in accounts:
                    print(f"  - {account}")
                if not accounts:
                    print("  (none)")
        return EXIT_SUCCESS

    if not args.role or not args.account:
        print("Error: role and account are required for grant/revoke", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    admin = args.admin or args.cli_config.admin
    if not admin:
        print("Error: --admin (or COVERPASS_ADMIN) is required", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    role = ROLE_NAMES[args.role]
    if args.action == "grant":
        changed = service.grant_role(admin, role, args.account)
    else:
        changed = service.revoke_role(admin, role, args.account)

    if args.json:
        print(json.dumps({
            "action": args.action,
            "role": role.value,
            "account": args.account,
            "changed": changed,
        }, indent=2))
    else:
        state = "done" if changed else "no change"
        print(f"{args.action} {role.value} {args.account}: {state}")
    return EXIT_SUCCESS


def events_cmd(args: Namespace) -> int:
    """Handle events command."""
    service = open_service(args)
    events = service.events

    if args.export:
        path = events.export(Path(args.export))
        print(f"Exported {len(events)} events to {path}")

    if args.clear:
        removed = events.clear()
        print(f"Cleared {removed} events")
        return EXIT_SUCCESS

    recent = events.recent(args.limit)
    if args.json:
        print(json.dumps([e.model_dump(mode="json") for e in recent], indent=2))
    elif not recent:
        print("No events recorded")
    else:
        for event in recent:
            block = f" block={event.block_number}" if event.block_number is not None else ""
            details = " ".join(f"{k}={v}" for k, v in sorted(event.data.items()))
            print(f"{event.timestamp.isoformat()} {event.event_type.value}{block} {details}")
    return EXIT_SUCCESS
