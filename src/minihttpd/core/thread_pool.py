"""
=============================================================================
WORKER THREAD POOL
=============================================================================

A fixed number of worker threads pulling tasks from a bounded queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop ──submit()──►  ┌───────────────────────┐               │
    │                              │ Task Queue (bounded)  │               │
    │                              │ [conn][conn][conn]... │               │
    │                              └──────────┬────────────┘               │
    │                                         │ get()                      │
    │                   ┌─────────────────────┼─────────────────────┐      │
    │                   ▼                     ▼                     ▼      │
    │              Worker-0              Worker-1      ...     Worker-N-1  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The pool size is fixed at construction. When the queue is full, submit()
returns False instead of growing, and the caller decides what to do
(the HTTP server answers 503).

=============================================================================
SHUTDOWN: POISON PILLS
=============================================================================

Shutdown first waits (bounded) for the queue to drain, then puts one None
per worker on the queue. A worker that takes a None exits its loop:

    queue: [task][task][None][None][None]
                        ───────────────── one per worker

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """One queued call: func(*args, **kwargs)."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Daemon thread that runs tasks until it takes a None off the queue.

    A task that raises is logged with its traceback and counted in
    tasks_failed; the worker carries on with the next one.
    """

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"{self.name} started")

        for task in iter(self.task_queue.get, None):
            try:
                self._run_task(task)
            finally:
                self.task_queue.task_done()

        # The poison pill itself still counts as a queue item
        self.task_queue.task_done()
        self.state = WorkerState.STOPPED
        logger.debug(f"{self.name} stopped")

    def _run_task(self, task: Task):
        self.state = WorkerState.BUSY
        started = time.perf_counter()
        waited = time.time() - task.submitted_at

        try:
            task.func(*task.args, **task.kwargs)
        except Exception:
            self.tasks_failed += 1
            logger.exception(f"{self.name}: task failed after {time.perf_counter() - started:.3f}s")
        else:
            self.tasks_completed += 1
            logger.debug(
                f"{self.name}: task done in {time.perf_counter() - started:.3f}s "
                f"(waited {waited:.3f}s in queue)"
            )
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool with a bounded task queue.

    Usage:
        pool = ThreadPool(workers=5, queue_size=100)
        pool.start()

        if not pool.submit(handle, args=(conn,), block=False):
            ...  # Queue full

        pool.shutdown(wait=True, timeout=5.0)
    """

    def __init__(self, workers: int = 5, queue_size: int = 100):
        """
        Args:
            workers: Number of worker threads. Must be at least 1.
            queue_size: Maximum number of waiting tasks.

        Raises:
            ValueError: If workers is less than 1.
        """
        if workers < 1:
            raise ValueError(f"Worker count must be at least 1, got {workers}")

        self.workers = workers
        self.max_queue_size = queue_size

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        """Create and start all worker threads. Idempotent."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.workers} workers")
            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()

            self._started = True
            self._shutdown = False

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = True,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue a task for execution.

        Args:
            func: The function to execute.
            args: Positional arguments.
            kwargs: Keyword arguments.
            block: Whether to wait for queue space.
            queue_timeout: How long to wait when blocking.

        Returns:
            True if queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
            return True
        except queue.Full:
            return False

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish before stopping. If False, tasks
                  still in the queue are discarded.
            timeout: Upper bound in seconds for draining the queue and for
                     joining the workers. None waits indefinitely.
        """
        if not self._started or self._shutdown:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True
        deadline = time.time() + timeout if timeout is not None else None

        if wait:
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Shutdown timeout, forcing stop")
                    self._discard_pending()
                    break
                time.sleep(0.05)
        else:
            self._discard_pending()

        for _ in self._workers:
            self._task_queue.put(None)

        for worker in self._workers:
            remaining = None
            if deadline is not None:
                remaining = max(deadline - time.time(), 0.1)
            worker.join(timeout=remaining)
            if worker.is_alive():
                logger.warning(f"Worker {worker.worker_id} did not stop in time")

        self._workers.clear()
        self._started = False
        logger.info("Thread pool shutdown complete")

    def _discard_pending(self):
        discarded = 0
        while True:
            try:
                self._task_queue.get_nowait()
            except queue.Empty:
                break
            self._task_queue.task_done()
            discarded += 1

        if discarded:
            logger.warning(f"Discarded {discarded} queued tasks")

    def _count(self, state: WorkerState) -> int:
        return sum(1 for w in self._workers if w.state == state)

    @property
    def active_workers(self) -> int:
        """Workers whose thread has not exited."""
        return len(self._workers) - self._count(WorkerState.STOPPED)

    @property
    def queue_size(self) -> int:
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """
        Point-in-time counters, e.g.

            {"workers": {"total": 5, "active": 5, "busy": 1, "idle": 4},
             "tasks": {"queued": 0, "completed": 12, "failed": 0}}
        """
        return {
            "workers": {
                "total": len(self._workers),
                "active": self.active_workers,
                "busy": self._count(WorkerState.BUSY),
                "idle": self._count(WorkerState.IDLE),
            },
            "tasks": {
                "queued": self.queue_size,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
