"""
Module 02 - Merkle Prover/Verifier Unit Tests
Tests for core/merkle/merkle_proofs.py
"""
import pytest

from core.crypto.hashing import hash_text, to_hex
from core.merkle.merkle_proofs import MerkleProver, MerkleVerifier
from core.merkle.merkle_tree import build_merkle_root
from core.schemas.documents import hash_document, hash_documents
from core.schemas.errors import LeafNotFoundError

from fixtures.common import make_documents, make_leaves


class TestMerkleProver:

    def test_prove(self):
        leaves = make_leaves(5)
        proof = MerkleProver.prove(leaves, index=1)
        assert proof.leaf == leaves[1]
        assert MerkleVerifier.verify(proof)

    def test_prove_leaf(self):
        leaves = make_leaves(5)
        assert MerkleProver.prove_leaf(leaves, leaves[3]).index == 3

    def test_prove_leaf_missing(self):
        with pytest.raises(LeafNotFoundError):
            MerkleProver.prove_leaf(make_leaves(2), hash_text("missing"))

    def test_compute_root(self):
        leaves = make_leaves(6)
        assert MerkleProver.compute_root(leaves) == build_merkle_root(leaves)

    def test_compute_root_from_documents(self):
        docs = make_documents(3)
        assert MerkleProver.compute_root_from_documents(docs) == build_merkle_root(
            hash_documents(docs)
        )

    def test_prove_document(self):
        docs = make_documents(3)
        proof = MerkleProver.prove_document(docs, 2)
        assert proof.leaf == hash_document(docs[2])
        assert proof.verify()


class TestDocumentsWithProofs:

    def test_each_document_carries_valid_proof(self):
        docs = make_documents(3)
        root, enriched = MerkleProver.documents_with_proofs(docs)

        assert root == MerkleProver.compute_root_from_documents(docs)
        assert len(enriched) == 3
        for doc, item in zip(docs, enriched):
            assert item.policy_number == doc.policy_number
            assert item.hash == to_hex(hash_document(doc))
            assert MerkleVerifier.verify_hex(item.proof, to_hex(root), item.hash)

    def test_json_uses_original_field_names(self):
        _, enriched = MerkleProver.documents_with_proofs(make_documents(2))
        data = enriched[0].model_dump(by_alias=True)
        assert set(data) == {"user", "policyNumber", "coverage", "expiryDate", "amount", "hash", "proof"}


class TestMerkleVerifier:

    def test_verify_leaf_in_root(self):
        leaves = make_leaves(4)
        proof = MerkleProver.prove(leaves, 2)
        assert MerkleVerifier.verify_leaf_in_root(leaves[2], proof.siblings, proof.root)
        assert not MerkleVerifier.verify_leaf_in_root(leaves[1], proof.siblings, proof.root)

    def test_verify_document_in_root(self):
        docs = make_documents(3)
        proof = MerkleProver.prove_document(docs, 0)
        assert MerkleVerifier.verify_document_in_root(docs[0], proof.siblings, proof.root)
        assert not MerkleVerifier.verify_document_in_root(docs[1], proof.siblings, proof.root)

    def test_verify_hex_valid(self):
        data = MerkleProver.prove(make_leaves(7), 6).to_dict()
        assert MerkleVerifier.verify_hex(data["proof"], data["root"], data["leaf"])

    def test_verify_hex_uppercase_digits(self):
        data = MerkleProver.prove(make_leaves(3), 0).to_dict()
        upper = "0x" + data["leaf"][2:].upper()
        assert MerkleVerifier.verify_hex(data["proof"], data["root"], upper)

    @pytest.mark.parametrize("proof, root, leaf", [
        ("0xabc", "0x" + "00" * 32, "0x" + "00" * 32),
        (["nothex"], "0x" + "00" * 32, "0x" + "00" * 32),
        ([], "00" * 32, "0x" + "00" * 32),
        ([], "0x" + "00" * 31, "0x" + "00" * 31),
        ([], None, None),
        ([None], "0x" + "00" * 32, "0x" + "00" * 32),
        ({"a": 1}, "0x" + "00" * 32, "0x" + "00" * 32),
    ])
    def test_verify_hex_malformed_is_false(self, proof, root, leaf):
        assert MerkleVerifier.verify_hex(proof, root, leaf) is False
