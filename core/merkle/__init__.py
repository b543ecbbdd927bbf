"""
Module 02 - Merkle Tree and Commitments
Deterministic Merkle tree construction + proof generation/verification.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- MerkleTree / MerkleProof: immutable tree and detached inclusion proof
- build_merkle_root: Compute root from leaf hashes
- build_merkle_proof: Generate proof for a specific leaf
- verify_merkle_proof: Verify (proof, root, leaf), returning a bool

Canonical Commitment Rules:
1. Leaf hashing: keccak256(record bytes)
2. Parent hashing: keccak256(min(a, b) + max(a, b))
3. Odd node: promoted unchanged to the next level
4. Empty tree: EmptyInputError
5. Single leaf: root = leaf

Usage:
    from core.merkle import build_merkle_root, build_merkle_proof, verify_merkle_proof
    from core.crypto import hash_text

    leaves = [hash_text(name) for name in ("bob", "alice", "david", "eve")]
    root = build_merkle_root(leaves)
    proof = build_merkle_proof(leaves, index=0)
    assert verify_merkle_proof(proof.siblings, root, leaves[0])
"""
from .merkle_tree import (
    MerkleProof,
    MerkleTree,
    merkle_parent,
    build_merkle_levels,
    build_merkle_root,
    build_merkle_tree,
    build_merkle_proof,
    build_merkle_proof_for_leaf,
    find_leaf_index,
    verify_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "MerkleProof",
    "MerkleTree",
    # Core functions
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_tree",
    "build_merkle_proof",
    "build_merkle_proof_for_leaf",
    "find_leaf_index",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
