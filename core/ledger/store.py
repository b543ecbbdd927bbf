"""
Module 03 - Ledger Storage
File: store.py

Purpose: JSON persistence for the ledger and the insurer's off-chain
tree records (the leaf lists needed to answer proof requests later).

Files are pretty-printed so operators can inspect them; writes go through
a temporary file and an atomic rename.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from core.crypto.hashing import from_hex, to_hex
from core.schemas.errors import ErrorCodes, RootChainException
from core.schemas.records import TreeRecord


logger = logging.getLogger(__name__)


class StoreIOError(Exception):
    """Error reading or writing a ledger data file."""
    pass


def read_json_file(path: Path) -> Any:
    """Read and parse a JSON file."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StoreIOError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise StoreIOError(f"Cannot read {path}: {e}") from e


def write_json_file(path: Path, data: Any) -> None:
    """Write data as indented JSON, replacing the file atomically."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    except OSError as e:
        raise StoreIOError(f"Cannot write {path}: {e}") from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise StoreIOError(f"Cannot write {path}: {e}") from e


class TreeStore:
    """
    Off-chain tree records keyed by block number.

    Mutations hold a lock across update and save, and are undone in memory
    if the file cannot be written.

    Usage:
        store = TreeStore(Path("data/insurer_merkle_trees.json"))
        store.put(1, root, leaves)
        leaves = store.leaves(1)
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._trees: dict[int, TreeRecord] = {}
        self._lock = threading.Lock()
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        data = read_json_file(self.path)
        if not isinstance(data, dict):
            raise StoreIOError(f"Expected an object keyed by block number in {self.path}")
        for key, value in data.items():
            self._trees[int(key)] = TreeRecord.model_validate(value)
        logger.info("Loaded %d Merkle trees from %s", len(self._trees), self.path)

    def _save(self) -> None:
        if self.path is None:
            return
        write_json_file(
            self.path,
            {str(n): tree.model_dump(mode="json") for n, tree in sorted(self._trees.items())},
        )

    def _replace(self, block_number: int, record: TreeRecord | None) -> None:
        """Set or drop one entry and save; the old entry is restored on failure."""
        with self._lock:
            previous = self._trees.get(block_number)
            if record is None:
                self._trees.pop(block_number, None)
            else:
                self._trees[block_number] = record
            try:
                self._save()
            except Exception:
                if previous is None:
                    self._trees.pop(block_number, None)
                else:
                    self._trees[block_number] = previous
                raise

    def put(self, block_number: int, merkle_root: bytes, leaves: list[bytes]) -> TreeRecord:
        """Store (or replace) the leaf list published under a block."""
        record = TreeRecord(
            block_number=block_number,
            merkle_root=to_hex(merkle_root),
            documents=[to_hex(leaf) for leaf in leaves],
        )
        self._replace(block_number, record)
        logger.info("Stored tree for block %d (%d leaves)", block_number, len(leaves))
        return record

    def discard(self, block_number: int) -> None:
        """Forget the tree stored for a block, if any."""
        if block_number in self._trees:
            self._replace(block_number, None)
            logger.info("Discarded tree for block %d", block_number)

    def get(self, block_number: int) -> TreeRecord:
        """
        Tree record for a block.

        Raises:
            RootChainException: If no tree is stored for the block
        """
        try:
            return self._trees[block_number]
        except KeyError:
            raise RootChainException(
                f"No Merkle tree stored for block {block_number}",
                block_number=block_number,
                code=ErrorCodes.TREE_NOT_FOUND,
            ) from None

    def leaves(self, block_number: int) -> list[bytes]:
        return [from_hex(h) for h in self.get(block_number).documents]

    def records(self) -> list[TreeRecord]:
        with self._lock:
            return [self._trees[n] for n in sorted(self._trees)]

    def export(self, path: Path) -> Path:
        """Write every stored tree to another file."""
        write_json_file(
            path,
            {str(tree.block_number): tree.model_dump(mode="json") for tree in self.records()},
        )
        return path

    def __contains__(self, block_number: object) -> bool:
        return block_number in self._trees

    def __len__(self) -> int:
        return len(self._trees)
