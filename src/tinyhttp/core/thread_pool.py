"""
=============================================================================
THREAD POOL
=============================================================================

Worker threads that take connection tasks from a shared queue. Each
accepted connection becomes exactly one task; the task owns its request
and response from start to finish, so nothing is shared between workers
and no locks are needed around request handling.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ThreadPool                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop                                                        │
    │        │ submit(process_connection, conn)                            │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────┐                       │
    │   │ Task Queue (unbounded)                  │                       │
    │   │ [task] [task] [task] ...                │                       │
    │   └─────────────────────────────────────────┘                       │
    │        │            │            │                                   │
    │        ▼            ▼            ▼                                   │
    │   ┌────────┐   ┌────────┐   ┌────────┐                              │
    │   │Worker-0│   │Worker-1│   │Worker-2│   ... up to max_workers      │
    │   └────────┘   └────────┘   └────────┘                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The pool starts with min_workers threads and adds one each time a task is
submitted while every worker is busy, until max_workers. The queue has no
size limit, so submit() never blocks the accept loop; under sustained
overload connections wait in the queue instead of being refused.

=============================================================================
SHUTDOWN: POISON PILLS
=============================================================================

    1. Reject new tasks
    2. Wait (bounded) for the queue to drain
    3. Put one None per worker on the queue
    4. Each worker exits when it takes a None
    5. Join workers

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call: func(*args) on some worker, later.
    """
    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the queue.

        loop:
            task = queue.get()
            None?  → exit
            else   → task.func(*task.args), exceptions logged, never raised
            queue.task_done()

    A failing task never kills its worker.
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int, idle_timeout: float = 1.0):
        """
        Args:
            task_queue: Queue to pull tasks from.
            worker_id: Number used in the thread name and logs.
            idle_timeout: Seconds between shutdown-flag checks when idle.
        """
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s "
                f"(queued {start_time - task.submitted_at:.3f}s)"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        """Signal the worker to stop after its current task."""
        self._shutdown.set()


class ThreadPool:
    """
    Thread pool for per-connection tasks.

        pool = ThreadPool(min_workers=4, max_workers=32)
        pool.start()

        pool.submit(process_connection, conn)

        pool.shutdown(wait=True, timeout=5.0)

    Raises RuntimeError from submit() when not started or shutting down.
    """

    def __init__(self, min_workers: int = 4, max_workers: int = 32, idle_timeout: float = 1.0):
        if min_workers < 1 or max_workers < min_workers:
            raise ValueError(
                f"Invalid worker bounds: min={min_workers}, max={max_workers}"
            )

        self.min_workers = min_workers
        self.max_workers = max_workers
        self.idle_timeout = idle_timeout

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue()

        self._workers: List[Worker] = []
        self._lock = threading.Lock()  # guards _workers
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        """Start min_workers threads. Calling it again is a no-op."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")

        self._shutdown = False
        with self._lock:
            for _ in range(self.min_workers):
                self._spawn_worker()

        self._started = True

    def _spawn_worker(self) -> Worker:
        # caller holds self._lock
        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout,
        )
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(self, func: Callable[..., Any], *args: Any) -> None:
        """
        Queue func(*args) for execution on a worker.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        self._task_queue.put(Task(func=func, args=args))
        self._maybe_scale_up()

    def _maybe_scale_up(self):
        """
        Add one worker when none is idle and work is waiting.
        """
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return

            idle = sum(1 for w in self._workers if w.state == WorkerState.IDLE)
            if idle < self._task_queue.qsize():
                logger.debug(
                    f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
                )
                self._spawn_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish first. With False they are
                  abandoned.
            timeout: Upper bound on the wait for the queue to drain.
                     None waits until it is empty.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = time.time() + timeout if timeout is not None else None
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Shutdown timeout, abandoning queued tasks")
                    break
                time.sleep(0.05)

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()

        for _ in workers:
            self._task_queue.put(None)

        for worker in workers:
            worker.shutdown()
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.IDLE)

    @property
    def stats(self) -> dict:
        """Worker and task counts, e.g. for debug logging."""
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self._task_queue.qsize(),
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
