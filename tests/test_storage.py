"""
Tests for the in-memory storage backend and its unit of work
"""

import threading
import pytest

from account_service.storage import InMemoryStorage


test_data = {
    "id": "acc_001",
    "owner_id": "owner_1",
    "balance": "100.50",
}


class TestInMemoryStorage:
    """Test basic table operations"""

    def test_basic_operations(self):
        """Test CRUD operations"""
        storage = InMemoryStorage()

        storage.save("accounts", "acc_001", test_data)
        assert storage.load("accounts", "acc_001") == test_data
        assert storage.exists("accounts", "acc_001")
        assert not storage.exists("accounts", "missing")
        assert storage.load("accounts", "missing") is None

        storage.save("accounts", "acc_002", {"id": "acc_002", "owner_id": "owner_2"})
        assert storage.count("accounts") == 2

        results = storage.find("accounts", {"owner_id": "owner_1"})
        assert len(results) == 1
        assert results[0]["id"] == "acc_001"

        assert storage.delete("accounts", "acc_001")
        assert not storage.delete("accounts", "acc_001")
        assert storage.count("accounts") == 1

        storage.clear_table("accounts")
        assert storage.count("accounts") == 0
        storage.close()

    def test_returned_records_are_copies(self):
        """Mutating a loaded record must not change the stored one"""
        storage = InMemoryStorage()
        storage.save("accounts", "acc_001", test_data)

        loaded = storage.load("accounts", "acc_001")
        loaded["balance"] = "999"
        storage.load_all("accounts")[0]["balance"] = "999"

        assert storage.load("accounts", "acc_001")["balance"] == "100.50"

    def test_insertion_order_preserved(self):
        """load_all and find return records in insertion order"""
        storage = InMemoryStorage()
        for i in range(5):
            storage.save("t", f"r{i}", {"id": f"r{i}", "kind": "x"})

        # Overwriting keeps the original position
        storage.save("t", "r2", {"id": "r2", "kind": "x", "updated": True})

        assert [r["id"] for r in storage.load_all("t")] == ["r0", "r1", "r2", "r3", "r4"]
        assert [r["id"] for r in storage.find("t", {"kind": "x"})] == ["r0", "r1", "r2", "r3", "r4"]


class TestAtomic:
    """Test unit of work semantics"""

    def test_commit_keeps_writes(self):
        storage = InMemoryStorage()
        with storage.atomic():
            storage.save("t", "a", {"id": "a"})
            storage.save("t", "b", {"id": "b"})
        assert storage.count("t") == 2

    def test_rollback_undoes_all_writes(self):
        """An exception inside atomic() restores inserts, updates and deletes"""
        storage = InMemoryStorage()
        storage.save("t", "a", {"id": "a", "v": 1})
        storage.save("t", "b", {"id": "b", "v": 1})
        storage.save("t", "c", {"id": "c", "v": 1})

        with pytest.raises(RuntimeError, match="boom"):
            with storage.atomic():
                storage.save("t", "a", {"id": "a", "v": 2})
                storage.delete("t", "b")
                storage.save("t", "d", {"id": "d", "v": 1})
                storage.save("other", "x", {"id": "x"})
                raise RuntimeError("boom")

        assert [r["id"] for r in storage.load_all("t")] == ["a", "b", "c"]
        assert storage.load("t", "a")["v"] == 1
        assert storage.count("other") == 0

    def test_nested_atomic_rolls_back_outermost(self):
        storage = InMemoryStorage()
        with pytest.raises(ValueError):
            with storage.atomic():
                storage.save("t", "a", {"id": "a"})
                with storage.atomic():
                    storage.save("t", "b", {"id": "b"})
                raise ValueError("outer failure")

        assert storage.count("t") == 0

    def test_lock_released_after_rollback(self):
        """Another thread can use the storage after a failed unit of work"""
        storage = InMemoryStorage()
        with pytest.raises(RuntimeError):
            with storage.atomic():
                raise RuntimeError("fail")

        done = threading.Event()

        def writer():
            storage.save("t", "a", {"id": "a"})
            done.set()

        thread = threading.Thread(target=writer)
        thread.start()
        thread.join(timeout=5)
        assert done.is_set()

    def test_atomic_excludes_other_threads(self):
        """Writes from another thread wait until the unit of work finishes"""
        storage = InMemoryStorage()
        entered = threading.Event()
        release = threading.Event()
        order = []

        def holder():
            with storage.atomic():
                entered.set()
                release.wait(timeout=5)
                order.append("holder")

        def writer():
            storage.save("t", "a", {"id": "a"})
            order.append("writer")

        first = threading.Thread(target=holder)
        first.start()
        assert entered.wait(timeout=5)

        second = threading.Thread(target=writer)
        second.start()
        second.join(timeout=0.2)
        assert second.is_alive()

        release.set()
        first.join(timeout=5)
        second.join(timeout=5)
        assert order == ["holder", "writer"]
