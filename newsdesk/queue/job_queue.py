"""Single-consumer job queue, one instance per job category.

All methods run on one asyncio event loop. At most one job per queue is
in flight: the in-flight job id doubles as the busy flag. Every mutation
ends with advance(), which starts the first queued job when the queue is
idle.

The completion callback is a coroutine and must run its blocking work
(history writes) off the loop. The busy flag is held until it returns.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import fields

from newsdesk.inference.models import InferenceResult
from newsdesk.logging.logger import Log
from newsdesk.queue.executor import JobExecutor
from newsdesk.queue.models import Job, JobCategory, JobStatus

# (result, file_name, mime_type) -> history entry id
CompletionCallback = Callable[[InferenceResult, str, str], Awaitable[str | None]]

_PROTECTED_FIELDS = frozenset({"id", "status"})
_JOB_FIELDS = frozenset(f.name for f in fields(Job))


class JobQueue:
    """Drives jobs of one category from queued to completed/failed, one at a time."""

    def __init__(
        self,
        category: JobCategory,
        executor: JobExecutor,
        on_completed: CompletionCallback,
    ) -> None:
        self._category = category
        self._executor = executor
        self._on_completed = on_completed
        self._jobs: list[Job] = []
        self._active_job_id: str | None = None
        self._in_flight_id: str | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def category(self) -> JobCategory:
        return self._category

    @property
    def jobs(self) -> list[Job]:
        """Snapshot of the collection in append order."""
        return list(self._jobs)

    @property
    def active_job_id(self) -> str | None:
        return self._active_job_id

    @property
    def active_job(self) -> Job | None:
        if self._active_job_id is None:
            return None
        return self._find(self._active_job_id)

    @property
    def is_processing(self) -> bool:
        return self._in_flight_id is not None

    def enqueue(self, job: Job) -> None:
        """Append a job in queued status. Must be called on the event loop."""
        job.status = JobStatus.QUEUED
        self._jobs.append(job)
        if self._active_job_id is None:
            self._active_job_id = job.id
        Log.info(f"Queued {self._category.value} job {job.id} ({job.file_name})")
        self.advance()

    def restore(self, job: Job) -> None:
        """Append an already completed job and make it active.

        Used to reopen a history entry; the job is never processed.
        """
        if job.status is not JobStatus.COMPLETED or job.result is None:
            raise ValueError(
                f"Only completed jobs with a result can be restored, got {job.status.value}"
            )
        self._jobs.append(job)
        self._active_job_id = job.id
        Log.info(f"Restored {self._category.value} job {job.id} ({job.file_name})")

    def set_active(self, job_id: str | None) -> None:
        self._active_job_id = job_id

    def update_job(self, job_id: str, **changes: object) -> None:
        """Merge fields into a job. Status and id cannot be changed this way."""
        protected = _PROTECTED_FIELDS.intersection(changes)
        if protected:
            raise ValueError(f"update_job cannot change {sorted(protected)}")
        unknown = set(changes) - _JOB_FIELDS
        if unknown:
            raise ValueError(f"Unknown job fields: {sorted(unknown)}")
        job = self._find(job_id)
        if job is None:
            Log.debug(f"update_job ignored, job {job_id} is no longer queued")
            return
        for name, value in changes.items():
            setattr(job, name, value)
        self.advance()

    def remove_job(self, job_id: str) -> None:
        """Drop one job. An in-flight call keeps the queue busy until it settles."""
        self._jobs = [j for j in self._jobs if j.id != job_id]
        if self._active_job_id == job_id:
            self._active_job_id = None
        self.advance()

    def clear_queue(self) -> None:
        """Forget every job and clear the busy flag.

        An outstanding remote call is not cancelled; its settlement is
        ignored when it arrives.
        """
        if self._in_flight_id is not None:
            Log.info(
                f"Clearing {self._category.value} queue with job {self._in_flight_id} in flight"
            )
        self._jobs = []
        self._active_job_id = None
        self._in_flight_id = None
        self.advance()

    def advance(self) -> None:
        """Start the first queued job unless one is already in flight."""
        if self._in_flight_id is not None:
            return
        job = next((j for j in self._jobs if j.status is JobStatus.QUEUED), None)
        if job is None:
            self._idle.set()
            return

        self._idle.clear()
        self._in_flight_id = job.id
        job.status = JobStatus.PROCESSING
        Log.info(f"Processing {self._category.value} job {job.id} ({job.file_name})")
        task = asyncio.get_running_loop().create_task(self._run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def join(self) -> None:
        """Wait until nothing is queued or processing."""
        await self._idle.wait()

    async def _run(self, job: Job) -> None:
        try:
            result = await self._executor(job)
        except Exception as exc:
            self._settle_failure(job.id, exc)
        else:
            await self._settle_success(job.id, result)

    async def _settle_success(self, job_id: str, result: InferenceResult) -> None:
        if self._in_flight_id != job_id:
            Log.debug(f"Ignoring late settlement for discarded job {job_id}")
            return
        job = self._find(job_id)
        if job is None:
            Log.debug(f"Job {job_id} was removed while in flight, result dropped")
            self._release(job_id)
            self.advance()
            return

        job.status = JobStatus.COMPLETED
        job.result = result
        Log.info(f"Job {job_id} completed")
        try:
            history_id = await self._on_completed(
                result, job.file_name, job.payload.mime_type
            )
        except Exception as exc:
            Log.exception(f"Completion callback failed for job {job_id}: {exc}")
        else:
            if history_id is not None:
                job.history_id = history_id
        if self._release(job_id):
            self.advance()

    def _settle_failure(self, job_id: str, exc: Exception) -> None:
        Log.error(f"Error processing {self._category.value} job {job_id}: {exc}")
        if not self._release(job_id):
            return
        job = self._find(job_id)
        if job is not None:
            job.status = JobStatus.FAILED
            job.error_message = str(exc)
        self.advance()

    def _release(self, job_id: str) -> bool:
        """Clear the busy flag if job_id still owns it.

        False means the queue was cleared after this job started; the
        settlement must then leave everything untouched.
        """
        if self._in_flight_id != job_id:
            Log.debug(f"Ignoring late settlement for discarded job {job_id}")
            return False
        self._in_flight_id = None
        return True

    def _find(self, job_id: str) -> Job | None:
        return next((j for j in self._jobs if j.id == job_id), None)
