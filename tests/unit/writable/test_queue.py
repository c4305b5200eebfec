"""
Unit tests for RecordQueue.
"""

import threading

from kinesis_writable import RecordQueue


def test_append_returns_length_and_preserves_order():
    q = RecordQueue[str]()
    assert q.append("a") == 1
    assert q.append("b") == 2
    assert len(q) == 2
    assert q.snapshot() == ["a", "b"]


def test_drain_all_empties_queue():
    q = RecordQueue[int]([1, 2, 3])
    assert q.drain_all() == [1, 2, 3]
    assert len(q) == 0
    assert not q
    assert q.drain_all() == []


def test_drain_with_limit_takes_head_only():
    q = RecordQueue[int]([1, 2, 3, 4, 5])
    assert q.drain_all(limit=2) == [1, 2]
    assert q.snapshot() == [3, 4, 5]
    assert q.drain_all(limit=10) == [3, 4, 5]


def test_requeue_goes_ahead_of_later_appends():
    """Failed records re-enter ahead of records appended after the drain."""
    q = RecordQueue[str](["a", "b", "c"])
    drained = q.drain_all()
    q.append("d")
    q.append("e")

    q.requeue_subset([drained[0], drained[2]])

    assert q.snapshot() == ["a", "c", "d", "e"]


def test_records_are_not_copied():
    record = {"id": 1}
    q = RecordQueue[dict]()
    q.append(record)
    (out,) = q.drain_all()
    assert out is record


def test_concurrent_append_and_drain_lose_nothing():
    q = RecordQueue[int]()
    drained = []
    stop = threading.Event()

    def producer(start):
        for i in range(start, start + 2000):
            q.append(i)

    def consumer():
        while not stop.is_set():
            drained.extend(q.drain_all())

    threads = [threading.Thread(target=producer, args=(n * 2000,)) for n in range(4)]
    c = threading.Thread(target=consumer)
    c.start()
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    stop.set()
    c.join()
    drained.extend(q.drain_all())

    assert sorted(drained) == list(range(8000))
