"""Readers see a consistent ring while a writer mutates it."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from flexiring import DuplicateTargetError, HashRing


@pytest.mark.unit
def test_lookups_during_churn_see_whole_snapshots():
    ring = HashRing(replicas=16).add_targets(["a", "b", "c"])
    stop = threading.Event()
    errors: list[BaseException] = []

    def churn() -> None:
        try:
            for _ in range(200):
                ring.add_target("d", 2)
                ring.remove_target("d")
        except BaseException as exc:  # pragma: no cover - reported below
            errors.append(exc)
        finally:
            stop.set()

    def read() -> int:
        checked = 0
        while not stop.is_set() or checked == 0:
            for i in range(20):
                result = ring.lookup_list(f"key{i}", 5)
                assert len(result) in (3, 4)
                assert len(set(result)) == len(result)
                assert set(result) <= {"a", "b", "c", "d"}
                checked += 1
        return checked

    writer = threading.Thread(target=churn)
    with ThreadPoolExecutor(max_workers=4) as pool:
        readers = [pool.submit(read) for _ in range(4)]
        writer.start()
        writer.join()
        counts = [f.result() for f in readers]

    assert not errors
    assert all(count > 0 for count in counts)
    assert ring.get_all_targets() == ["a", "b", "c"]


@pytest.mark.unit
def test_concurrent_adds_of_same_target_register_once():
    ring = HashRing(replicas=8)
    barrier = threading.Barrier(8)

    def add() -> bool:
        barrier.wait()
        try:
            ring.add_target("shared")
        except DuplicateTargetError:
            return False
        return True

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(lambda _: add(), range(8)))

    assert outcomes.count(True) == 1
    assert ring.get_all_targets() == ["shared"]
    assert "positions=8" in repr(ring)
