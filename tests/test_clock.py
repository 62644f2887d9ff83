import time

from resizebench.clock import Clock


def test_elapsed_is_monotonic():
    clock = Clock()
    token = clock.start()
    readings = [clock.elapsed_millis(token) for _ in range(100)]

    assert readings[0] >= 0.0
    assert readings == sorted(readings)


def test_elapsed_tracks_sleep_with_sub_millisecond_precision():
    clock = Clock()
    token = clock.start()
    time.sleep(0.02)
    elapsed = clock.elapsed_millis(token)

    assert elapsed >= 19.0
    assert clock.resolution_ms < 1.0


def test_measure_context_records_interval():
    clock = Clock()

    with clock.measure() as interval:
        assert interval.elapsed_ms is None
        time.sleep(0.005)

    assert interval.elapsed_ms >= 4.0
