"""
Task queue seam

Jobs are handed to a queue and executed later by a worker; the request that
enqueued them never waits. InMemoryTaskQueue is the in-process
implementation; QueueWorker drains it on a daemon thread of the same
process, inside an application context.
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, List, Tuple

from cycle_admin.data.base import utcnow
from cycle_admin.logger import get_logger

logger = get_logger("cycle_admin.services.task_queue")


@dataclass
class QueuedJob:
    job_class: type
    args: Tuple[Any, ...] = ()
    enqueued_at: Any = field(default_factory=utcnow)

    @property
    def name(self):
        return self.job_class.__name__

    def perform(self):
        return self.job_class(*self.args).perform()


class TaskQueue:
    """Interface: enqueue(job_class, *args) hands a job to a worker"""

    def enqueue(self, job_class, *args) -> QueuedJob:
        raise NotImplementedError


class InMemoryTaskQueue(TaskQueue):
    """Thread-safe FIFO of jobs waiting for a worker"""

    def __init__(self):
        self._jobs = deque()
        self._lock = threading.Lock()

    def enqueue(self, job_class, *args) -> QueuedJob:
        job = QueuedJob(job_class=job_class, args=args)
        with self._lock:
            self._jobs.append(job)
        logger.info(f"Enqueued {job.name} with args {args}")
        return job

    @property
    def jobs(self) -> List[QueuedJob]:
        with self._lock:
            return list(self._jobs)

    def drain(self) -> List[Any]:
        """
        Run every queued job in order. A failing job is logged and dropped;
        its failure never reaches whoever enqueued it.
        """
        results = []
        while True:
            with self._lock:
                if not self._jobs:
                    break
                job = self._jobs.popleft()
            try:
                results.append(job.perform())
            except Exception as e:
                logger.error(f"Job {job.name}{job.args} failed: {e}", exc_info=True)
        return results


class QueueWorker:
    """Background thread that drains an app's task queue every `interval` seconds"""

    def __init__(self, app, interval: float = 5.0):
        self.app = app
        self.interval = interval
        self._stopping = threading.Event()
        self._thread = None

    @property
    def queue(self) -> TaskQueue:
        return self.app.extensions['task_queue']

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> List[Any]:
        """Drain whatever is queued right now"""
        with self.app.app_context():
            return self.queue.drain()

    def start(self):
        if self.is_running:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._run, name='cycle-admin-task-worker', daemon=True)
        self._thread.start()
        logger.info(f"Task worker started, polling every {self.interval}s")

    def stop(self, timeout: float = 10.0):
        """Signal the thread to stop and run any jobs still queued"""
        if not self.is_running:
            return
        self._stopping.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("Task worker stopped")

    def _run(self):
        while not self._stopping.wait(self.interval):
            self._drain_logged()
        self._drain_logged()

    def _drain_logged(self):
        try:
            results = self.run_once()
        except Exception as e:
            logger.error(f"Task worker pass failed: {e}", exc_info=True)
            return
        if results:
            logger.info(f"Task worker ran {len(results)} job(s)")
