"""Unit tests for the in-memory assignment store."""

import threading

from abgate.adapters.assignment.in_memory import InMemoryAssignmentStore


def test_get_returns_none_for_unassigned_pair() -> None:
    store = InMemoryAssignmentStore()

    assert store.get("s", "exp") is None
    assert len(store) == 0


def test_first_write_wins() -> None:
    store = InMemoryAssignmentStore()

    assert store.set_if_absent("s", "exp", "a") == "a"
    assert store.set_if_absent("s", "exp", "b") == "a"
    assert store.get("s", "exp") == "a"


def test_assignments_for_returns_copy() -> None:
    store = InMemoryAssignmentStore()
    store.set_if_absent("s", "exp1", "a")
    store.set_if_absent("s", "exp2", "b")

    snapshot = store.assignments_for("s")
    snapshot["exp1"] = "mutated"

    assert store.assignments_for("s") == {"exp1": "a", "exp2": "b"}
    assert store.assignments_for("other") == {}


def test_concurrent_writers_agree_on_one_variant() -> None:
    store = InMemoryAssignmentStore()
    results: list[str] = []
    results_lock = threading.Lock()

    def _writer(idx: int) -> None:
        stored = store.set_if_absent("s", "exp", f"variant-{idx}")
        with results_lock:
            results.append(stored)

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(32)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(results)) == 1
    assert store.get("s", "exp") == results[0]
