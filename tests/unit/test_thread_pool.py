"""
Unit tests for the worker thread pool.
"""

import threading

import pytest

from tinyhttp.core.thread_pool import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(min_workers=2, max_workers=4, idle_timeout=0.1)
    pool.start()
    yield pool
    pool.shutdown(wait=False)


class TestThreadPool:

    def test_starts_min_workers(self, pool):
        assert pool.worker_count == 2
        assert pool.is_running

    def test_runs_task_with_args(self, pool):
        done = threading.Event()
        results = []

        def task(a, b):
            results.append(a + b)
            done.set()

        pool.submit(task, 2, 3)

        assert done.wait(timeout=5.0)
        assert results == [5]

    def test_failing_task_does_not_kill_worker(self, pool):
        done = threading.Event()

        def broken():
            raise RuntimeError("boom")

        for _ in range(4):
            pool.submit(broken)
        pool.submit(done.set)

        assert done.wait(timeout=5.0)

    def test_scales_up_to_max(self, pool):
        release = threading.Event()
        started = threading.Semaphore(0)

        def blocker():
            started.release()
            release.wait(timeout=5.0)

        for _ in range(6):
            pool.submit(blocker)

        for _ in range(4):
            assert started.acquire(timeout=5.0)

        assert pool.worker_count == 4
        release.set()

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool().submit(print)

    def test_submit_after_shutdown(self):
        pool = ThreadPool(min_workers=1, max_workers=1, idle_timeout=0.1)
        pool.start()
        pool.shutdown()

        with pytest.raises(RuntimeError):
            pool.submit(print)

    def test_shutdown_drains_queue(self):
        pool = ThreadPool(min_workers=1, max_workers=1, idle_timeout=0.1)
        pool.start()
        results = []

        for i in range(10):
            pool.submit(results.append, i)
        pool.shutdown(wait=True, timeout=5.0)

        assert results == list(range(10))
        assert pool.worker_count == 0

    def test_stats(self):
        pool = ThreadPool(min_workers=1, max_workers=1, idle_timeout=0.1)
        pool.start()

        def broken():
            raise RuntimeError("boom")

        pool.submit(broken)
        pool.submit(print)
        pool._task_queue.join()

        assert pool.stats == {
            "workers": {"total": 1, "busy": 0, "idle": 1},
            "tasks": {"queued": 0, "completed": 1, "failed": 1},
        }
        pool.shutdown(wait=True, timeout=5.0)

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            ThreadPool(min_workers=4, max_workers=2)
