"""
Module 07 - CLI Ledger Commands

Commands that read or write the data directory:
- publish:  insurer commits a documents file and publishes its root
- ledger:   inspect or audit the root-record chain
- respond:  insurer answers a proof request from a stored tree
- trees:    list or export the stored trees
- coverage: verifier checks a document hash against a published root

Usage:
    coverpass publish --file docs.json --insurer 0x..
    coverpass ledger current|history|stats|verify-chain
    coverpass respond --block 1 --leaf 0x..
    coverpass trees list|export [--out trees.json]
    coverpass coverage --verifier 0x.. --user 0x.. --leaf 0x.. --proof 0x.. [--block 1]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.coverpass import CoverPassService
from core.schemas.records import RootRecord

from coverpass_cli.commands.merkle import documents_from_args, parse_digest


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def open_service(args: Namespace) -> CoverPassService:
    """Service over the data files named by the loaded configuration."""
    return CoverPassService.from_config(args.cli_config)


def _record_lines(record: RootRecord) -> list[str]:
    return [
        f"block_number: {record.block_number}",
        f"merkle_root: {record.merkle_root}",
        f"timestamp: {record.timestamp.isoformat()}",
        f"insurer: {record.insurer}",
        f"insurance_count: {record.insurance_count}",
        f"previous_block_hash: {record.previous_block_hash}",
        f"block_hash: {record.block_hash}",
    ]


def publish_cmd(args: Namespace) -> int:
    """Handle publish command."""
    service = open_service(args)
    result = service.publish_documents(args.insurer, documents_from_args(args))

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        merkle_data = {
            "root": result.record.merkle_root,
            "documents": [d.model_dump(mode="json", by_alias=True) for d in result.documents],
        }
        out_path.write_text(json.dumps(merkle_data, indent=2) + "\n", encoding="utf-8")

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print("published")
        for line in _record_lines(result.record):
            print(f"  {line}")
    return EXIT_SUCCESS


def ledger_cmd(args: Namespace) -> int:
    """Handle ledger command."""
    service = open_service(args)
    ledger = service.ledger

    if args.action == "current":
        record = ledger.current()
        if args.json:
            print(json.dumps(record.model_dump(mode="json") if record else None, indent=2))
        elif record is None:
            print("No blocks published")
        else:
            for line in _record_lines(record):
                print(line)
        return EXIT_SUCCESS

    if args.action == "history":
        records = ledger.history()
        if args.json:
            print(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
        elif not records:
            print("No blocks published")
        else:
            for r in records:
                print(f"#{r.block_number} {r.merkle_root} count={r.insurance_count} insurer={r.insurer}")
        return EXIT_SUCCESS

    if args.action == "stats":
        stats = ledger.statistics()
        if args.json:
            print(json.dumps(stats.model_dump(), indent=2))
        else:
            print(f"total_blocks: {stats.total_blocks}")
            print(f"total_insurance_documents: {stats.total_insurance_documents}")
        return EXIT_SUCCESS

    # verify-chain
    result = ledger.verify_chain()
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        print(f"chain_ok: {str(result.ok).lower()}")
        print(f"blocks: {len(ledger)}")
        for message in result.get_error_messages():
            print(f"  ✗ {message}")
    return EXIT_SUCCESS if result.ok else EXIT_VERIFICATION_FAILED


def respond_cmd(args: Namespace) -> int:
    """Handle respond command."""
    service = open_service(args)
    proof = service.respond_proof(args.block, parse_digest(args.leaf, "leaf"))
    data = proof.to_dict()
    data["block_number"] = args.block

    if args.json:
        print(json.dumps(data, indent=2))
    else:
        print(f"block_number: {args.block}")
        print(f"root: {data['root']}")
        print(f"index: {data['index']}")
        print("proof:")
        for p in data["proof"]:
            print(f"  {p}")
    return EXIT_SUCCESS


def trees_cmd(args: Namespace) -> int:
    """Handle trees command."""
    service = open_service(args)

    if args.action == "export":
        if not args.out:
            print("Error: trees export requires --out", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        path = service.trees.export(Path(args.out))
        print(f"Exported {len(service.trees)} trees to {path}")
        return EXIT_SUCCESS

    records = service.trees.records()
    if args.json:
        print(json.dumps([t.model_dump(mode="json") for t in records], indent=2))
    elif not records:
        print("No Merkle trees stored")
    else:
        for t in records:
            print(f"#{t.block_number} {t.merkle_root} documents={len(t.documents)}")
    return EXIT_SUCCESS


def coverage_cmd(args: Namespace) -> int:
    """Handle coverage command."""
    service = open_service(args)
    result = service.verify_coverage(
        verifier=args.verifier,
        user=args.user,
        leaf=args.leaf,
        proof=list(args.proof or []),
        block_number=args.block,
    )

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        print(f"user: {result.user}")
        print(f"document_hash: {result.document_hash}")
        print(f"block_number: {result.block_number}")
        print(f"valid: {str(result.valid).lower()}")
    return EXIT_SUCCESS if result.valid else EXIT_VERIFICATION_FAILED
