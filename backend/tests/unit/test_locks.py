"""Unit Tests: per-identity locks."""

import threading
import time

from friday.services.locks import IdentityLocks


def test_entries_are_dropped_after_release():
    locks = IdentityLocks()
    with locks.hold("handle:alice", "instance:friday-a"):
        assert len(locks) == 2
    assert len(locks) == 0


def test_none_names_are_ignored():
    locks = IdentityLocks()
    with locks.hold(None, "instance:friday-a"):
        assert len(locks) == 1


def test_release_on_exception():
    locks = IdentityLocks()
    try:
        with locks.hold("instance:friday-a"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0


def test_shared_name_serializes_holders():
    locks = IdentityLocks()
    active = 0
    peak = 0
    guard = threading.Lock()

    def worker(names):
        nonlocal active, peak
        with locks.hold(*names):
            with guard:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with guard:
                active -= 1

    # Overlapping identity sets in opposite orders must not deadlock.
    threads = [
        threading.Thread(target=worker, args=(["handle:alice", "instance:friday-a"],)),
        threading.Thread(target=worker, args=(["instance:friday-a", "handle:alice"],)),
        threading.Thread(target=worker, args=(["instance:friday-a"],)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert not any(thread.is_alive() for thread in threads)
    assert peak == 1
    assert len(locks) == 0
