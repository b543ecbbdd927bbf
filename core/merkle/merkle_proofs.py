"""
Module 02 - Merkle Proofs Convenience Wrappers
Thin wrappers around core Merkle tree functions for cleaner API.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides class-based interfaces:
- MerkleProver: Generate roots and proofs from leaves or insurance documents
- MerkleVerifier: Verify proofs, including hex input from untrusted callers
"""
from __future__ import annotations

from typing import Any, Sequence

from core.crypto.hashing import digest_from_hex, to_hex
from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_proof,
    build_merkle_proof_for_leaf,
    build_merkle_root,
    build_merkle_tree,
    verify_merkle_proof,
)
from core.schemas.documents import DocumentWithProof, InsuranceDocument, hash_document, hash_documents


class MerkleProver:
    """
    Convenience class for generating Merkle roots and proofs.

    Provides static methods for proof generation from:
    - Pre-hashed leaves (bytes)
    - Insurance documents (hashed with hash_document)

    Example:
        >>> leaves = [hash_text("a"), hash_text("b"), hash_text("c")]
        >>> proof = MerkleProver.prove(leaves, index=1)
        >>> proof.leaf == leaves[1]
        True
    """

    @staticmethod
    def prove(leaves: Sequence[bytes], index: int) -> MerkleProof:
        """
        Generate a Merkle proof for the leaf at the given index.

        Raises:
            EmptyInputError: If leaves is empty
            IndexError: If index is out of range
        """
        return build_merkle_proof(leaves, index)

    @staticmethod
    def prove_leaf(leaves: Sequence[bytes], leaf: bytes) -> MerkleProof:
        """
        Generate a Merkle proof for a leaf given by value.

        Raises:
            EmptyInputError: If leaves is empty
            LeafNotFoundError: If leaf is not in leaves
        """
        return build_merkle_proof_for_leaf(leaves, leaf)

    @staticmethod
    def prove_document(documents: Sequence[InsuranceDocument], index: int) -> MerkleProof:
        """Generate a Merkle proof for the document at the given index."""
        return build_merkle_proof(hash_documents(documents), index)

    @staticmethod
    def compute_root(leaves: Sequence[bytes]) -> bytes:
        """Compute the 32-byte Merkle root for a sequence of leaves."""
        return build_merkle_root(leaves)

    @staticmethod
    def compute_root_from_documents(documents: Sequence[InsuranceDocument]) -> bytes:
        """Compute the Merkle root for a batch of insurance documents."""
        return build_merkle_root(hash_documents(documents))

    @staticmethod
    def documents_with_proofs(
        documents: Sequence[InsuranceDocument],
    ) -> tuple[bytes, list[DocumentWithProof]]:
        """
        Build one tree over the documents and attach each document's proof.

        Returns:
            (root, documents with hash and proof) in input order
        """
        tree = build_merkle_tree(hash_documents(documents))
        enriched: list[DocumentWithProof] = []
        for index, doc in enumerate(documents):
            proof = tree.proof(index)
            enriched.append(
                DocumentWithProof(
                    **doc.model_dump(),
                    hash=to_hex(proof.leaf),
                    proof=[to_hex(s) for s in proof.siblings],
                )
            )
        return tree.root, enriched


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Every method returns a bool and never raises on malformed input.

    Example:
        >>> proof = MerkleProver.prove(leaves, index=1)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        """Verify a MerkleProof against its own root."""
        return proof.verify()

    @staticmethod
    def verify_leaf_in_root(
        leaf: bytes,
        siblings: Sequence[bytes],
        root: bytes,
    ) -> bool:
        """Verify a leaf is included in a Merkle root using raw components."""
        return verify_merkle_proof(list(siblings), root, leaf)

    @staticmethod
    def verify_document_in_root(
        document: InsuranceDocument,
        siblings: Sequence[bytes],
        root: bytes,
    ) -> bool:
        """Verify an insurance document is included in a Merkle root."""
        return verify_merkle_proof(list(siblings), root, hash_document(document))

    @staticmethod
    def verify_hex(proof: Any, root: Any, leaf: Any) -> bool:
        """
        Verify 0x-prefixed hex input from an untrusted caller.

        Anything that does not decode to 32-byte digests (wrong types,
        bad hex, wrong widths) is reported as False.
        """
        if not isinstance(proof, (list, tuple)):
            return False
        try:
            siblings = [digest_from_hex(s) for s in proof]
            root_bytes = digest_from_hex(root)
            leaf_bytes = digest_from_hex(leaf)
        except ValueError:
            return False
        return verify_merkle_proof(siblings, root_bytes, leaf_bytes)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
