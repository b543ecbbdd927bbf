"""
Module 03 - Tree Store Unit Tests
Tests for core/ledger/store.py
"""
import json
import threading

import pytest

from core.crypto.hashing import to_hex
from core.ledger.store import StoreIOError, TreeStore, read_json_file, write_json_file
from core.merkle.merkle_tree import build_merkle_root
from core.schemas.errors import ErrorCodes, RootChainException

from fixtures.common import make_leaves


class TestJsonFiles:

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "nested" / "data.json"
        write_json_file(path, {"b": 1, "a": [1, 2]})
        assert read_json_file(path) == {"a": [1, 2], "b": 1}

    def test_written_file_is_indented_and_sorted(self, tmp_path):
        path = tmp_path / "data.json"
        write_json_file(path, {"b": 1, "a": 2})
        text = path.read_text()
        assert text.index('"a"') < text.index('"b"')
        assert "\n  " in text

    def test_no_temp_files_left(self, tmp_path):
        write_json_file(tmp_path / "data.json", [1])
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(StoreIOError, match="Invalid JSON"):
            read_json_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(StoreIOError, match="Cannot read"):
            read_json_file(tmp_path / "missing.json")


class TestTreeStore:

    def test_put_and_get(self):
        store = TreeStore()
        leaves = make_leaves(3)
        root = build_merkle_root(leaves)
        record = store.put(1, root, leaves)

        assert record.block_number == 1
        assert record.merkle_root == to_hex(root)
        assert record.documents == [to_hex(leaf) for leaf in leaves]
        assert store.get(1) == record
        assert store.leaves(1) == leaves

    def test_missing_block(self):
        with pytest.raises(RootChainException) as exc_info:
            TreeStore().get(7)
        assert exc_info.value.code == ErrorCodes.TREE_NOT_FOUND
        assert exc_info.value.details["block_number"] == 7

    def test_contains_and_len(self):
        store = TreeStore()
        leaves = make_leaves(2)
        store.put(1, build_merkle_root(leaves), leaves)
        assert 1 in store
        assert 2 not in store
        assert len(store) == 1

    def test_records_sorted(self):
        store = TreeStore()
        for n in (3, 1, 2):
            leaves = make_leaves(2, prefix=f"b{n}")
            store.put(n, build_merkle_root(leaves), leaves)
        assert [r.block_number for r in store.records()] == [1, 2, 3]

    def test_persistence(self, tmp_path):
        path = tmp_path / "insurer_merkle_trees.json"
        leaves = make_leaves(4)
        TreeStore(path).put(1, build_merkle_root(leaves), leaves)

        reloaded = TreeStore(path)
        assert reloaded.leaves(1) == leaves
        assert json.loads(path.read_text())["1"]["block_number"] == 1

    def test_export(self, tmp_path):
        store = TreeStore()
        leaves = make_leaves(2)
        store.put(1, build_merkle_root(leaves), leaves)
        out = store.export(tmp_path / "export.json")
        assert set(json.loads(out.read_text())) == {"1"}

    def test_wrong_shape_rejected(self, tmp_path):
        path = tmp_path / "trees.json"
        path.write_text("[]")
        with pytest.raises(StoreIOError):
            TreeStore(path)

    def test_discard(self, tmp_path):
        path = tmp_path / "trees.json"
        store = TreeStore(path)
        leaves = make_leaves(2)
        store.put(1, build_merkle_root(leaves), leaves)
        store.discard(1)
        store.discard(5)
        assert 1 not in store
        assert TreeStore(path).records() == []


class TestTreeStoreFailures:

    @pytest.fixture
    def blocker(self, tmp_path):
        path = tmp_path / "blocker"
        path.write_text("")
        return path

    def test_write_under_file_raises_store_error(self, blocker):
        with pytest.raises(StoreIOError, match="Cannot write"):
            write_json_file(blocker / "data.json", {})

    def test_failed_put_is_undone(self, blocker):
        store = TreeStore(blocker / "trees.json")
        leaves = make_leaves(2)
        with pytest.raises(StoreIOError):
            store.put(1, build_merkle_root(leaves), leaves)
        assert 1 not in store
        assert len(store) == 0

    def test_failed_replace_keeps_previous(self, tmp_path, blocker):
        store = TreeStore(tmp_path / "trees.json")
        original = make_leaves(2)
        store.put(1, build_merkle_root(original), original)

        store.path = blocker / "trees.json"
        replacement = make_leaves(3, prefix="other")
        with pytest.raises(StoreIOError):
            store.put(1, build_merkle_root(replacement), replacement)
        assert store.leaves(1) == original


class TestTreeStoreConcurrency:

    def test_parallel_puts_all_saved(self, tmp_path):
        path = tmp_path / "trees.json"
        store = TreeStore(path)

        def put(n: int) -> None:
            leaves = make_leaves(2, prefix=f"b{n}")
            store.put(n, build_merkle_root(leaves), leaves)

        threads = [threading.Thread(target=put, args=(n,)) for n in range(1, 33)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 32
        assert [r.block_number for r in TreeStore(path).records()] == list(range(1, 33))
