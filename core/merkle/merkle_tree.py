"""
Module 02 - Merkle Tree Implementation
Deterministic Merkle tree construction, proof generation, and verification.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Deterministic Merkle root computation
- A MerkleTree value retaining every level for repeated proof generation
- Merkle proof generation by leaf index or by leaf value
- Merkle proof verification that never raises

Canonical Commitment Rules (Hard Contracts):
1. Leaves are 32-byte digests produced by core.crypto.hashing.hash_record()
2. Parent hashing (sorted pair): parent = keccak256(min(a, b) + max(a, b))
3. Odd node: a lone trailing node is promoted unchanged to the next level
4. Empty leaves: building raises EmptyInputError
5. Single leaf: root = leaf, proof = []

Determinism Notes:
- This module never sorts leaves; the root depends on leaf order
- Sorted pairs only make a parent independent of its two children's order,
  so swapping two siblings keeps the root; other permutations generally don't
- Proofs carry no left/right flags; verification sorts each pair again
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from core.crypto.hashing import DIGEST_SIZE, hash_pair, is_digest, to_hex, digest_from_hex
from core.schemas.errors import EmptyInputError, InvalidDigestError, LeafNotFoundError


def merkle_parent(a: bytes, b: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Sorted pair: keccak256(min(a, b) + max(a, b)), so
    merkle_parent(a, b) == merkle_parent(b, a).
    """
    return hash_pair(a, b)


def _validate_leaves(leaves: Sequence[bytes]) -> list[bytes]:
    """Copy the leaves as bytes, enforcing the non-empty and 32-byte rules."""
    if len(leaves) == 0:
        raise EmptyInputError()

    validated: list[bytes] = []
    for position, leaf in enumerate(leaves):
        if not is_digest(leaf):
            size = len(leaf) if isinstance(leaf, (bytes, bytearray)) else None
            raise InvalidDigestError(
                f"Leaf at position {position} is not a {DIGEST_SIZE}-byte digest",
                position=position,
                details={"type": type(leaf).__name__, "size": size},
            )
        validated.append(bytes(leaf))
    return validated


def _next_level(level: Sequence[bytes]) -> list[bytes]:
    """Pair adjacent nodes left-to-right; promote a lone trailing node."""
    parents: list[bytes] = []
    for i in range(0, len(level), 2):
        if i + 1 < len(level):
            parents.append(merkle_parent(level[i], level[i + 1]))
        else:
            parents.append(level[i])
    return parents


def build_merkle_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first, root level last.

    Example: [a, b, c] -> [[a, b, c], [parent(a, b), c], [parent(parent(a, b), c)]]

    Raises:
        EmptyInputError: If leaves is empty
        InvalidDigestError: If a leaf is not a 32-byte digest
    """
    levels: list[list[bytes]] = [_validate_leaves(leaves)]
    while len(levels[-1]) > 1:
        levels.append(_next_level(levels[-1]))
    return levels


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Only the current level is kept in memory.

    Args:
        leaves: Sequence of 32-byte leaf hashes. Order matters and is preserved.

    Returns:
        32-byte Merkle root

    Raises:
        EmptyInputError: If leaves is empty
        InvalidDigestError: If a leaf is not a 32-byte digest
    """
    current_level = _validate_leaves(leaves)
    while len(current_level) > 1:
        current_level = _next_level(current_level)
    return current_level[0]


def find_leaf_index(leaves: Sequence[bytes], leaf: bytes) -> int:
    """
    Return the index of the first occurrence of leaf.

    Raises:
        LeafNotFoundError: If leaf is not in leaves
    """
    target = bytes(leaf) if isinstance(leaf, (bytes, bytearray)) else leaf
    for index, candidate in enumerate(leaves):
        if candidate == target:
            return index
    leaf_hex = to_hex(target) if isinstance(target, bytes) else repr(target)
    raise LeafNotFoundError(leaf_hex, details={"leaf_count": len(leaves)})


def _siblings_from_levels(levels: Sequence[Sequence[bytes]], index: int) -> list[bytes]:
    """Walk from leaf index to the root, collecting the sibling at each level."""
    siblings: list[bytes] = []
    current_index = index
    for level in levels[:-1]:
        sibling_index = current_index ^ 1
        # The promoted odd node has no sibling at this level
        if sibling_index < len(level):
            siblings.append(level[sibling_index])
        current_index //= 2
    return siblings


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf.

    Verification uses only (siblings, root, leaf); index is kept so callers
    can tell which of several equal leaves the proof was generated for.

    Attributes:
        leaf: The leaf hash being proven (32 bytes)
        index: The 0-based index of the leaf in the original leaf list
        siblings: Sibling hashes from the leaf level upward
        root: The Merkle root this proof is against
    """
    leaf: bytes
    index: int
    siblings: tuple[bytes, ...]
    root: bytes

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "siblings", tuple(self.siblings))

    def verify(self) -> bool:
        """Check this proof against its own root."""
        return verify_merkle_proof(self.siblings, self.root, self.leaf)

    def to_dict(self) -> dict[str, Any]:
        """Hex representation used by the CLI, the API and stored files."""
        return {
            "leaf": to_hex(self.leaf),
            "index": self.index,
            "proof": [to_hex(s) for s in self.siblings],
            "root": to_hex(self.root),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerkleProof":
        """
        Parse the to_dict() representation.

        Raises:
            ValueError: If a digest is malformed or a key is missing
        """
        try:
            return cls(
                leaf=digest_from_hex(data["leaf"]),
                index=int(data.get("index", 0)),
                siblings=tuple(digest_from_hex(s) for s in data["proof"]),
                root=digest_from_hex(data["root"]),
            )
        except KeyError as e:
            raise ValueError(f"Missing proof field: {e}") from e


@dataclass(frozen=True)
class MerkleTree:
    """
    An immutable Merkle tree over an ordered leaf list.

    levels[0] holds the leaves and levels[-1] holds only the root.
    Membership changes require building a new tree.
    """
    levels: tuple[tuple[bytes, ...], ...] = field(repr=False)

    @classmethod
    def build(cls, leaves: Sequence[bytes]) -> "MerkleTree":
        """
        Build a tree from leaf digests.

        Raises:
            EmptyInputError: If leaves is empty
            InvalidDigestError: If a leaf is not a 32-byte digest
        """
        levels = build_merkle_levels(leaves)
        return cls(levels=tuple(tuple(level) for level in levels))

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self.levels[0]

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def depth(self) -> int:
        """Number of levels including leaves and root."""
        return len(self.levels)

    def __len__(self) -> int:
        return len(self.levels[0])

    def index_of(self, leaf: bytes) -> int:
        """
        Index of the first occurrence of leaf.

        Raises:
            LeafNotFoundError: If leaf is not in the tree
        """
        return find_leaf_index(self.leaves, leaf)

    def proof(self, index: int) -> MerkleProof:
        """
        Proof for the leaf at index.

        Raises:
            IndexError: If index is out of range
        """
        if index < 0 or index >= len(self):
            raise IndexError(f"Leaf index {index} out of range for {len(self)} leaves")
        return MerkleProof(
            leaf=self.leaves[index],
            index=index,
            siblings=tuple(_siblings_from_levels(self.levels, index)),
            root=self.root,
        )

    def proof_for_leaf(self, leaf: bytes) -> MerkleProof:
        """
        Proof for the first occurrence of leaf.

        Raises:
            LeafNotFoundError: If leaf is not in the tree
        """
        return self.proof(self.index_of(leaf))


def build_merkle_tree(leaves: Sequence[bytes]) -> MerkleTree:
    """Build a MerkleTree retaining every level."""
    return MerkleTree.build(leaves)


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Algorithm:
    1. Build all levels from the leaves
    2. At each level record the sibling (index XOR 1) if it exists;
       a promoted odd node contributes nothing at that level
    3. Move up: index = index // 2

    Args:
        leaves: Sequence of leaf hashes (read only)
        index: 0-based index of the leaf to prove

    Returns:
        MerkleProof with leaf, index, siblings (bottom-up), and root

    Raises:
        EmptyInputError: If leaves is empty
        IndexError: If index is out of range
    """
    return build_merkle_tree(leaves).proof(index)


def build_merkle_proof_for_leaf(leaves: Sequence[bytes], leaf: bytes) -> MerkleProof:
    """
    Generate a Merkle proof for a leaf given by value (first occurrence).

    Raises:
        EmptyInputError: If leaves is empty
        LeafNotFoundError: If leaf is not in leaves
    """
    return build_merkle_tree(leaves).proof_for_leaf(leaf)


def verify_merkle_proof(proof: Sequence[bytes], root: bytes, leaf: bytes) -> bool:
    """
    Verify a Merkle proof against a claimed root.

    Algorithm:
    1. current = leaf
    2. For each sibling (bottom-up): current = merkle_parent(current, sibling)
    3. Compare current with the claimed root byte for byte

    This runs on untrusted input and never raises: a proof that is empty,
    too short, too long, holds entries of the wrong type or width, or is
    paired with a malformed root or leaf simply returns False.

    Args:
        proof: Sibling hashes, leaf level first
        root: Claimed Merkle root
        leaf: Leaf hash being proven

    Returns:
        True iff the recomputed root equals the claimed root
    """
    if not is_digest(root) or not is_digest(leaf):
        return False
    if not isinstance(proof, (list, tuple)):
        return False

    current = bytes(leaf)
    for sibling in proof:
        if not is_digest(sibling):
            return False
        current = merkle_parent(current, bytes(sibling))

    return current == bytes(root)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the depth of a Merkle tree with given number of leaves.

    Depth is the number of levels from leaves to root (inclusive).
    A single leaf has depth 1, two leaves depth 2, three or four leaves depth 3.

    Returns:
        Tree depth (0 for empty tree)
    """
    if num_leaves <= 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


__all__ = [
    "MerkleProof",
    "MerkleTree",
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_tree",
    "build_merkle_proof",
    "build_merkle_proof_for_leaf",
    "find_leaf_index",
    "verify_merkle_proof",
    "compute_tree_depth",
]
