"""Tests for the readers-writer lock."""

import threading
import time

from lazyindex.utils.rwlock import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)

    def reader():
        with lock.read_locked():
            inside.wait()  # all three readers hold the lock at once

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not inside.broken


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events = []
    writer_in = threading.Event()

    def writer():
        with lock.write_locked():
            writer_in.set()
            time.sleep(0.05)
            events.append("write-done")

    def reader():
        writer_in.wait(timeout=5)
        with lock.read_locked():
            events.append("read")

    w = threading.Thread(target=writer)
    r = threading.Thread(target=reader)
    w.start()
    r.start()
    w.join(timeout=5)
    r.join(timeout=5)

    assert events == ["write-done", "read"]


def test_lock_released_on_error():
    lock = ReadWriteLock()
    try:
        with lock.write_locked():
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    with lock.write_locked():
        pass
    with lock.read_locked():
        pass
