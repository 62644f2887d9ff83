import threading

import pytest

from resizebench.benchmarks.collector import SampleSink


def test_concurrent_records_are_all_kept():
    sink = SampleSink()

    def worker(offset):
        for i in range(250):
            sink.record(offset + i)

    threads = [threading.Thread(target=worker, args=(n * 1000,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    samples = sink.snapshot()
    assert len(sink) == 2000
    assert sorted(samples) == sorted(n * 1000 + i for n in range(8) for i in range(250))


def test_snapshot_is_a_copy():
    sink = SampleSink()
    sink.record(1.5)
    snapshot = sink.snapshot()
    sink.record(2.5)

    assert snapshot == (1.5,)
    assert sink.snapshot() == (1.5, 2.5)


def test_capacity_refuses_extra_samples():
    sink = SampleSink(capacity=2)
    sink.record(1.0)
    sink.record(2.0)

    with pytest.raises(OverflowError):
        sink.record(3.0)
    assert sink.snapshot() == (1.0, 2.0)
