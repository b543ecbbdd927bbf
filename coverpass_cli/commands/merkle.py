"""
Module 07 - CLI Merkle Commands

Offline commands over a documents file:
- hash:   print each document's leaf hash
- build:  build the tree and write merkle_data.json
- prove:  print the proof for one document or leaf
- verify: check a proof against a root

Usage:
    coverpass hash --file docs.json
    coverpass build --sample --out merkle_data.json
    coverpass prove --file docs.json --index 1
    coverpass verify --root 0x.. --leaf 0x.. --proof 0x.. 0x..
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path
from typing import Any

from core.crypto.hashing import digest_from_hex, to_hex
from core.merkle.merkle_proofs import MerkleProver, MerkleVerifier
from core.merkle.merkle_tree import build_merkle_tree, compute_tree_depth
from core.schemas.documents import InsuranceDocument, hash_documents, sample_documents
from core.schemas.errors import InvalidDigestError


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

# Keys added by the build output that are not document fields
_PROOF_KEYS = ("hash", "proof")


def load_documents(path: Path) -> list[InsuranceDocument]:
    """
    Load documents from a JSON file.

    Accepts a plain list of documents or a merkle_data.json object
    ({"root": ..., "documents": [...]}); hash/proof entries are ignored.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("documents", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of documents in {path}")

    documents = []
    for item in data:
        fields = {k: v for k, v in item.items() if k not in _PROOF_KEYS}
        documents.append(InsuranceDocument.model_validate(fields))
    logger.debug("Loaded %d documents from %s", len(documents), path)
    return documents


def documents_from_args(args: Namespace) -> list[InsuranceDocument]:
    if getattr(args, "sample", False):
        return sample_documents()
    if not args.file:
        raise ValueError("Either --file or --sample is required")
    return load_documents(Path(args.file))


def parse_digest(value: str, name: str) -> bytes:
    try:
        return digest_from_hex(value)
    except ValueError as e:
        raise InvalidDigestError(f"Invalid {name}: {e}") from e


def _emit(data: Any, as_json: bool, lines: list[str]) -> None:
    if as_json:
        print(json.dumps(data, indent=2))
    else:
        for line in lines:
            print(line)


def hash_cmd(args: Namespace) -> int:
    """Handle hash command."""
    documents = documents_from_args(args)
    hashes = [to_hex(h) for h in hash_documents(documents)]

    if args.index is not None:
        if not 0 <= args.index < len(hashes):
            raise IndexError(f"Index {args.index} out of range for {len(hashes)} documents")
        hashes = [hashes[args.index]]
        documents = [documents[args.index]]

    rows = [
        {"policyNumber": doc.policy_number, "hash": h}
        for doc, h in zip(documents, hashes)
    ]
    _emit(rows, args.json, [f"{r['policyNumber']}: {r['hash']}" for r in rows])
    return EXIT_SUCCESS


def build_cmd(args: Namespace) -> int:
    """Handle build command."""
    documents = documents_from_args(args)
    root, enriched = MerkleProver.documents_with_proofs(documents)

    output = {
        "root": to_hex(root),
        "documents": [d.model_dump(mode="json", by_alias=True) for d in enriched],
    }

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(output, indent=2) + "\n", encoding="utf-8")
        logger.info("Wrote Merkle data to %s", out_path)

    lines = [
        f"root: {output['root']}",
        f"documents: {len(enriched)}",
        f"depth: {compute_tree_depth(len(enriched))}",
    ]
    for doc in enriched:
        lines.append(f"  {doc.policy_number}: {doc.hash}")
    if args.out:
        lines.append(f"saved: {args.out}")

    _emit(output, args.json, lines)
    return EXIT_SUCCESS


def prove_cmd(args: Namespace) -> int:
    """Handle prove command."""
    leaves = hash_documents(documents_from_args(args))
    tree = build_merkle_tree(leaves)

    if args.leaf:
        proof = tree.proof_for_leaf(parse_digest(args.leaf, "leaf"))
    else:
        proof = tree.proof(args.index)

    data = proof.to_dict()
    lines = [
        f"root: {data['root']}",
        f"leaf: {data['leaf']}",
        f"index: {data['index']}",
        "proof:",
    ] + [f"  {p}" for p in data["proof"]]

    _emit(data, args.json, lines)
    return EXIT_SUCCESS


def verify_cmd(args: Namespace) -> int:
    """Handle verify command. Malformed input is reported as invalid."""
    valid = MerkleVerifier.verify_hex(list(args.proof or []), args.root, args.leaf)

    _emit(
        {"valid": valid, "root": args.root, "leaf": args.leaf},
        args.json,
        [f"valid: {str(valid).lower()}"],
    )
    return EXIT_SUCCESS if valid else EXIT_VERIFICATION_FAILED
