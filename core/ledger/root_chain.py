"""
Module 03 - Root Ledger
File: root_chain.py

Purpose: Append-only, hash-linked chain of published Merkle roots.

Each RootRecord carries the block hash of its predecessor, so rewriting any
earlier record breaks every later link. Publishing is the only operation
that needs serialization; it holds a lock across read-previous -> append.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from core.crypto.hashing import ZERO_DIGEST, digest_from_hex, is_digest, to_hex
from core.ledger.store import read_json_file, write_json_file, StoreIOError
from core.schemas.errors import ErrorCodes, InvalidDigestError, RootChainException
from core.schemas.records import LedgerStatistics, RootRecord
from core.schemas.verification import CheckResult, VerificationResult


logger = logging.getLogger(__name__)


GENESIS_PREVIOUS_HASH: str = to_hex(ZERO_DIGEST)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _root_hex(merkle_root: bytes | str) -> str:
    """Normalize a root given as bytes or 0x hex to lowercase 0x hex."""
    if isinstance(merkle_root, str):
        try:
            return to_hex(digest_from_hex(merkle_root.lower()))
        except ValueError as e:
            raise InvalidDigestError(f"Invalid Merkle root: {e}") from e
    if not is_digest(merkle_root):
        raise InvalidDigestError("Merkle root must be a 32-byte digest")
    return to_hex(merkle_root)


def verify_records(records: list[RootRecord]) -> VerificationResult:
    """
    Audit a sequence of root records.

    Checks per record: sequence number, block hash, link to the predecessor.
    """
    checks: list[CheckResult] = []
    previous_hash = GENESIS_PREVIOUS_HASH

    for position, record in enumerate(records, start=1):
        n = record.block_number
        prefix = f"block_{n}"

        if n == position:
            checks.append(CheckResult.passed(f"{prefix}_sequence", n))
        else:
            checks.append(CheckResult.failed(
                f"{prefix}_sequence",
                f"Expected block number {position}, found {n}",
                block_number=n,
            ))

        expected_hash = record.compute_block_hash()
        if record.block_hash == expected_hash:
            checks.append(CheckResult.passed(f"{prefix}_hash", n))
        else:
            checks.append(CheckResult.failed(
                f"{prefix}_hash",
                f"Block {n} hash does not match its contents",
                block_number=n,
                details={"expected": expected_hash, "actual": record.block_hash},
            ))

        if record.previous_block_hash == previous_hash:
            checks.append(CheckResult.passed(f"{prefix}_link", n))
        else:
            checks.append(CheckResult.failed(
                f"{prefix}_link",
                f"Block {n} does not reference its predecessor",
                block_number=n,
                details={"expected": previous_hash, "actual": record.previous_block_hash},
            ))

        previous_hash = record.block_hash

    return VerificationResult.from_checks(checks)


class RootLedger:
    """
    Append-only chain of root records.

    The ledger is an explicit object owned by the caller; pass it to whatever
    needs to publish or read roots.

    Usage:
        ledger = RootLedger(Path("data/ledger.json"))
        record = ledger.publish(root, insurer="0x...", insurance_count=3)
        current = ledger.current()
    """

    def __init__(
        self,
        path: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.path = path
        self._clock = clock or _utcnow
        self._records: list[RootRecord] = []
        self._lock = threading.Lock()
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        data = read_json_file(self.path)
        if not isinstance(data, list):
            raise StoreIOError(f"Expected a list of root records in {self.path}")
        records = [RootRecord.model_validate(item) for item in data]

        result = verify_records(records)
        if not result.ok:
            raise RootChainException(
                f"Root chain in {self.path} is broken: "
                + "; ".join(result.get_error_messages()),
                block_number=result.first_broken_block,
                details={"failed_checks": [c.check_id for c in result.get_failed_checks()]},
            )
        self._records = records
        logger.info("Loaded %d root records from %s", len(records), self.path)

    def _save(self) -> None:
        if self.path is None:
            return
        write_json_file(self.path, [r.model_dump(mode="json") for r in self._records])

    def publish(
        self,
        merkle_root: bytes | str,
        insurer: str,
        insurance_count: int,
        before_save: Callable[[RootRecord], object] | None = None,
    ) -> RootRecord:
        """
        Append a new root record linked to the current head.

        before_save runs under the lock once the block number is assigned and
        before the record is written. If it raises, nothing is appended; a
        failed ledger write also leaves the chain unchanged.

        Raises:
            InvalidDigestError: If merkle_root is not a 32-byte digest
        """
        root_hex = _root_hex(merkle_root)

        with self._lock:
            previous = self._records[-1] if self._records else None
            record = RootRecord.create(
                block_number=(previous.block_number + 1) if previous else 1,
                merkle_root=root_hex,
                timestamp=self._clock(),
                insurer=insurer,
                previous_block_hash=previous.block_hash if previous else GENESIS_PREVIOUS_HASH,
                insurance_count=insurance_count,
            )
            if before_save is not None:
                before_save(record)
            self._records.append(record)
            try:
                self._save()
            except Exception:
                self._records.pop()
                raise

        logger.info(
            "Published block %d: root=%s count=%d insurer=%s",
            record.block_number, root_hex[:18], insurance_count, insurer,
        )
        return record

    def current(self) -> RootRecord | None:
        """The most recently published record, or None for an empty ledger."""
        return self._records[-1] if self._records else None

    def get(self, block_number: int) -> RootRecord:
        """
        Record by block number.

        Raises:
            RootChainException: If the block does not exist
        """
        if 1 <= block_number <= len(self._records):
            return self._records[block_number - 1]
        raise RootChainException(
            f"Block {block_number} not found",
            block_number=block_number,
            code=ErrorCodes.BLOCK_NOT_FOUND,
        )

    def history(self) -> list[RootRecord]:
        return list(self._records)

    def statistics(self) -> LedgerStatistics:
        return LedgerStatistics(
            total_blocks=len(self._records),
            total_insurance_documents=sum(r.insurance_count for r in self._records),
        )

    def verify_chain(self) -> VerificationResult:
        """Audit the whole chain without raising."""
        return verify_records(self.history())

    def __len__(self) -> int:
        return len(self._records)
