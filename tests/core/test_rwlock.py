"""Unit tests for catrust.core.locks.ReadWriteLock."""

from __future__ import annotations

import threading
import time

from catrust.core.locks import ReadWriteLock


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=5)

        def reader():
            with lock.reader():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert not any(t.is_alive() for t in threads)

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events: list[str] = []
        writer_in = threading.Event()

        def writer():
            with lock.writer():
                writer_in.set()
                time.sleep(0.05)
                events.append("writer-done")

        def reader():
            writer_in.wait(timeout=5)
            with lock.reader():
                events.append("reader")

        w = threading.Thread(target=writer)
        r = threading.Thread(target=reader)
        w.start()
        r.start()
        w.join(timeout=5)
        r.join(timeout=5)
        assert events == ["writer-done", "reader"]

    def test_released_after_exception(self):
        lock = ReadWriteLock()
        try:
            with lock.writer():
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        with lock.reader():
            pass
        with lock.writer():
            pass
