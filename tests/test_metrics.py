import time

from statdir.metrics import metrics


def test_counters_and_timings():
    metrics.inc("a")
    metrics.inc("a", 2)
    with metrics.timed("t"):
        time.sleep(0.01)
    with metrics.timed("t"):
        pass

    assert metrics.count("a") == 3
    assert metrics.count("missing") == 0
    snap = metrics.snapshot()
    assert snap["counters"] == {"a": 3}
    t = snap["timings"]["t"]
    assert t["calls"] == 2
    assert t["max"] >= 0.01
    assert t["mean"] == t["total"] / 2


def test_timed_records_even_when_body_raises():
    try:
        with metrics.timed("boom"):
            raise RuntimeError("x")
    except RuntimeError:
        pass
    assert metrics.snapshot()["timings"]["boom"]["calls"] == 1


def test_reset():
    metrics.inc("a")
    metrics.reset()
    assert metrics.snapshot() == {"counters": {}, "timings": {}}
