"""
Module 05 - CoverPass Service

Composes the access policy, the Merkle engine, the root ledger, the tree
store and the event log into the insurer / verifier / admin workflows.

Flow:
    insurer:  documents -> leaves -> build -> TreeStore.put -> RootLedger.publish
    verifier: RootLedger.get/current -> respond_proof -> verify
    admin:    grant / revoke roles

The policy check always runs before the engine or the ledger is touched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Sequence

from core.access.events import EventLog, EventType
from core.access.roles import Role, RoleRegistry, normalize_account
from core.config.runtime import RuntimeConfig
from core.crypto.hashing import digest_from_hex, to_hex
from core.ledger.root_chain import RootLedger
from core.ledger.store import TreeStore
from core.merkle.merkle_proofs import MerkleProver, MerkleVerifier
from core.merkle.merkle_tree import MerkleProof, build_merkle_tree
from core.schemas.documents import DocumentWithProof, InsuranceDocument, hash_documents
from core.schemas.errors import (
    ErrorCodes,
    InvalidAccountError,
    InvalidDigestError,
    RootChainException,
)
from core.schemas.records import RootRecord, TreeRecord
from core.schemas.verification import CoverageResult


logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================

@dataclass
class PublishResult:
    """Everything produced by one publish."""
    record: RootRecord
    tree: TreeRecord
    documents: list[DocumentWithProof] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "record": self.record.model_dump(mode="json"),
            "tree": self.tree.model_dump(mode="json"),
            "documents": [d.model_dump(mode="json", by_alias=True) for d in self.documents],
        }


def _as_hex(value: bytes | str) -> str:
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    return value


# =============================================================================
# Service
# =============================================================================

class CoverPassService:
    """
    Insurer, verifier and admin operations over explicitly owned components.

    Usage:
        service = CoverPassService.from_config(config)
        result = service.publish_documents(insurer, documents)
        proof = service.respond_proof(result.record.block_number, leaf)
        coverage = service.verify_coverage(verifier, user, leaf, proof.siblings)
    """

    def __init__(
        self,
        ledger: RootLedger,
        trees: TreeStore,
        roles: RoleRegistry,
        events: EventLog,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.ledger = ledger
        self.trees = trees
        self.roles = roles
        self.events = events
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_config(cls, config: RuntimeConfig) -> "CoverPassService":
        """Open every data file named by the configuration."""
        paths = config.ledger
        return cls(
            ledger=RootLedger(paths.ledger_path),
            trees=TreeStore(paths.trees_path),
            roles=RoleRegistry(admin=config.admin, path=paths.roles_path),
            events=EventLog(paths.events_path),
        )

    # -------------------------------------------------------------------------
    # Insurer
    # -------------------------------------------------------------------------

    def publish_leaves(self, insurer: str, leaves: Sequence[bytes]) -> PublishResult:
        """
        Commit a batch of leaves and publish its root.

        Raises:
            AuthorizationException: If insurer lacks INSURER_ROLE
            EmptyInputError: If leaves is empty
            InvalidDigestError: If a leaf is not 32 bytes
        """
        insurer = self.roles.require(Role.INSURER, insurer)
        tree = build_merkle_tree(leaves)

        # The leaf list is stored before the root record is written
        stored: list[TreeRecord] = []

        def store_tree(record: RootRecord) -> None:
            stored.append(self.trees.put(record.block_number, tree.root, list(tree.leaves)))

        try:
            record = self.ledger.publish(
                tree.root,
                insurer=insurer,
                insurance_count=len(tree),
                before_save=store_tree,
            )
        except Exception:
            if stored:
                self.trees.discard(stored[0].block_number)
            raise

        tree_record = stored[0]
        self.events.emit(
            EventType.INSURANCE_PUBLISHED,
            block_number=record.block_number,
            insurer=insurer,
            merkle_root=record.merkle_root,
            insurance_count=record.insurance_count,
        )
        return PublishResult(record=record, tree=tree_record)

    def publish_documents(
        self,
        insurer: str,
        documents: Sequence[InsuranceDocument],
    ) -> PublishResult:
        """Hash, commit and publish a batch of insurance documents."""
        result = self.publish_leaves(insurer, hash_documents(documents))
        _, result.documents = MerkleProver.documents_with_proofs(documents)
        return result

    def respond_proof(self, block_number: int, leaf: bytes | str) -> MerkleProof:
        """
        Answer a proof request from the tree stored for a block.

        Raises:
            RootChainException: If no tree is stored for the block
            LeafNotFoundError: If the leaf was not committed in that block
        """
        leaves = self.trees.leaves(block_number)
        if isinstance(leaf, str):
            try:
                leaf = digest_from_hex(leaf)
            except ValueError as e:
                raise InvalidDigestError(f"Invalid leaf: {e}") from e
        proof = MerkleProver.prove_leaf(leaves, leaf)
        logger.info("Responded proof for block %d (index %d)", block_number, proof.index)
        return proof

    # -------------------------------------------------------------------------
    # Verifier
    # -------------------------------------------------------------------------

    def verify_coverage(
        self,
        verifier: str,
        user: str,
        leaf: bytes | str,
        proof: Sequence[bytes | str],
        block_number: int | None = None,
    ) -> CoverageResult:
        """
        Check a document hash against a published root.

        The current root is used unless block_number is given. A proof that
        does not reproduce the root yields valid=False.

        Raises:
            AuthorizationException: If verifier lacks VERIFIER_ROLE
            InvalidAccountError: If user is not a valid address
            RootChainException: If no root has been published (or the block is missing)
        """
        verifier = self.roles.require(Role.VERIFIER, verifier)
        try:
            user = normalize_account(user)
        except ValueError as e:
            raise InvalidAccountError(str(user)) from e

        if block_number is None:
            record = self.ledger.current()
            if record is None:
                raise RootChainException(
                    "No Merkle root has been published",
                    code=ErrorCodes.BLOCK_NOT_FOUND,
                )
        else:
            record = self.ledger.get(block_number)

        leaf_hex = _as_hex(leaf)
        valid = MerkleVerifier.verify_hex(
            [_as_hex(p) for p in proof], record.merkle_root, leaf_hex
        )
        result = CoverageResult(
            user=user,
            document_hash=str(leaf_hex),
            valid=valid,
            block_number=record.block_number,
            merkle_root=record.merkle_root,
            verifier=verifier,
            checked_at=self._clock(),
        )
        self.events.emit(
            EventType.COVERAGE_VERIFIED,
            block_number=record.block_number,
            user=result.user,
            document_hash=result.document_hash,
            valid=valid,
            verifier=verifier,
        )
        logger.info(
            "Coverage for %s in block %d: %s",
            result.user, record.block_number, "valid" if valid else "INVALID",
        )
        return result

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    def grant_role(self, admin: str, role: Role, account: str) -> bool:
        changed = self.roles.grant(role, account, by=admin)
        if changed:
            self.events.emit(
                EventType.ROLE_GRANTED,
                role=role.value,
                account=account,
                sender=admin,
            )
        return changed

    def revoke_role(self, admin: str, role: Role, account: str) -> bool:
        changed = self.roles.revoke(role, account, by=admin)
        if changed:
            self.events.emit(
                EventType.ROLE_REVOKED,
                role=role.value,
                account=account,
                sender=admin,
            )
        return changed
