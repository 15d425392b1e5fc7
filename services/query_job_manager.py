import asyncio
import structlog
from typing import Coroutine, Dict, Set

logger = structlog.get_logger()


class QueryJobManager:
    """
    Tracks in-flight pipeline runs per connection.

    A connection may have several questions running at once; each is its own
    task. Disconnecting cancels all of them.
    """

    def __init__(self):
        # sid -> running tasks
        self._active_jobs: Dict[str, Set[asyncio.Task]] = {}

    def submit_job(self, sid: str, coro: Coroutine) -> asyncio.Task:
        """Start a run as an independent task owned by `sid`."""
        task = asyncio.create_task(coro)
        self._active_jobs.setdefault(sid, set()).add(task)

        # Cleanup callback
        def cleanup(f: asyncio.Task):
            jobs = self._active_jobs.get(sid)
            if jobs is not None:
                jobs.discard(f)
                if not jobs:
                    del self._active_jobs[sid]

            if f.cancelled():
                logger.info("Job cancelled", sid=sid)
            elif f.exception() is not None:
                logger.error("Job failed", sid=sid, error=str(f.exception()))

        task.add_done_callback(cleanup)
        logger.info("Job submitted", sid=sid, active=len(self._active_jobs[sid]))
        return task

    def cancel_jobs(self, sid: str) -> int:
        """Cancel every running task of a connection; returns how many were cancelled."""
        cancelled = 0
        for task in list(self._active_jobs.get(sid, ())):
            if not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.info("Cancelled running jobs", sid=sid, count=cancelled)
        return cancelled

    def get_jobs(self, sid: str) -> Set[asyncio.Task]:
        return set(self._active_jobs.get(sid, ()))

    def is_running(self, sid: str) -> bool:
        return any(not task.done() for task in self._active_jobs.get(sid, ()))
