"""Wires the per-category job queues to the shared history and auth gate."""

import asyncio
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from newsdesk.auth.session import AuthGate, Session
from newsdesk.config.settings import Settings
from newsdesk.database.repositories.history_repository import HistoryRepository
from newsdesk.database.repositories.profile_repository import ProfileRepository
from newsdesk.history.exceptions import HistoryRecordNotFoundError
from newsdesk.history.history import History
from newsdesk.history.local_cache import LocalCache
from newsdesk.history.models import HistoryEntry
from newsdesk.inference.base import BaseInferenceGateway
from newsdesk.inference.exceptions import InferenceError
from newsdesk.inference.factory import GatewayFactory
from newsdesk.inference.models import (
    AnalysisResult,
    ChatTurn,
    FactCheck,
    FilePayload,
    InferenceResult,
)
from newsdesk.inference.validator import build_press_release_result, build_stored_analysis_result
from newsdesk.logging.logger import Log
from newsdesk.queue.exceptions import JobNotFoundError
from newsdesk.queue.executor import GatewayExecutor
from newsdesk.queue.job_queue import CompletionCallback, JobQueue
from newsdesk.queue.models import Job, JobCategory, JobStatus

GatewayBuilder = Callable[[str], BaseInferenceGateway]

_UNKNOWN_MIME_TYPE = "application/octet-stream"


class Newsroom:
    """Application core consumed by the presentation layer.

    Must be driven from a running asyncio event loop. History and auth
    calls block on the database, so they run through asyncio.to_thread.
    """

    def __init__(
        self,
        *,
        auth: AuthGate,
        history: History,
        gateway: BaseInferenceGateway,
        gateway_builder: GatewayBuilder | None = None,
    ) -> None:
        self._auth = auth
        self._history = history
        self._gateway = gateway
        self._gateway_builder = gateway_builder
        self._gateway_key = auth.api_key

        executor = GatewayExecutor(lambda: self._gateway)
        self._queues = {
            category: JobQueue(category, executor, self._completion_callback(category))
            for category in JobCategory
        }
        auth.add_listener(self._on_session_changed)

    @property
    def auth(self) -> AuthGate:
        return self._auth

    @property
    def history(self) -> History:
        return self._history

    @property
    def gateway(self) -> BaseInferenceGateway:
        return self._gateway

    @property
    def transcriptions(self) -> JobQueue:
        return self._queues[JobCategory.TRANSCRIPTION]

    @property
    def press_releases(self) -> JobQueue:
        return self._queues[JobCategory.PRESS_RELEASE]

    def queue(self, category: JobCategory) -> JobQueue:
        return self._queues[category]

    def submit_file(
        self,
        source: Path | FilePayload,
        category: JobCategory,
        user_angle: str | None = None,
    ) -> Job:
        """Create a job for a file and enqueue it in its category's queue."""
        payload = source if isinstance(source, FilePayload) else FilePayload.from_path(source)
        job = Job(
            payload=payload,
            category=category,
            auxiliary_input=(user_angle or None) if category is JobCategory.PRESS_RELEASE else None,
        )
        self.queue(category).enqueue(job)
        return job

    def clear(self, category: JobCategory) -> None:
        self.queue(category).clear_queue()

    async def join(self) -> None:
        """Wait until every queue is drained."""
        await asyncio.gather(*(q.join() for q in self._queues.values()))

    async def sign_in(self, session: Session) -> None:
        """Sign in off the loop. Session listeners run on the same worker thread.

        Raises:
            AccountDeactivatedError: if the account has been deactivated.
        """
        await asyncio.to_thread(self._auth.sign_in, session)

    async def sign_out(self) -> None:
        await asyncio.to_thread(self._auth.sign_out)

    async def load_history(self) -> list[HistoryEntry]:
        return await asyncio.to_thread(self._history.load)

    async def delete_history(self, entry_id: str) -> None:
        await asyncio.to_thread(self._history.delete, entry_id)

    def open_history(self, entry_id: str) -> Job:
        """Reopen a history entry as the active job of its category's queue.

        A job already holding the entry is made active. Otherwise a
        completed job is rebuilt from the stored payload, so it can be
        fact-checked or chatted about like a fresh one.

        Raises:
            HistoryRecordNotFoundError: if no loaded entry has entry_id.
            InferenceValidationError: if the stored payload is malformed.
        """
        entry = self._history.find(entry_id)
        if entry is None:
            raise HistoryRecordNotFoundError(f"No history entry {entry_id}")
        queue = self.queue(entry.category)
        existing = next((j for j in queue.jobs if j.history_id == entry_id), None)
        if existing is not None:
            queue.set_active(existing.id)
            return existing

        if entry.category is JobCategory.TRANSCRIPTION:
            result: InferenceResult = build_stored_analysis_result(entry.payload)
            user_angle = None
        else:
            user_angle = entry.payload.get("userAngle") or None
            result = build_press_release_result(entry.payload, user_angle=user_angle)
        job = Job(
            payload=FilePayload(
                file_name=entry.file_name, data_base64="", mime_type=_UNKNOWN_MIME_TYPE
            ),
            category=entry.category,
            auxiliary_input=user_angle,
            status=JobStatus.COMPLETED,
            result=result,
            history_id=entry.id,
        )
        queue.restore(job)
        return job

    async def verify_selection(self, job_id: str, claim: str) -> FactCheck | None:
        """Fact-check text selected in a completed transcription.

        Returns None when the verification call fails.

        Raises:
            JobNotFoundError: if job_id is not a completed transcription job.
        """
        queue = self.transcriptions
        job = self._completed_transcription(job_id)
        if job is None:
            raise JobNotFoundError(f"No completed transcription job {job_id}")
        history_id, file_name = job.history_id, job.file_name
        self._set_verifying(queue, job_id, True)

        try:
            fact_check = await asyncio.to_thread(self._gateway.verify_claim, claim)
        except InferenceError as exc:
            Log.error(f"Manual verification failed for job {job_id}: {exc}")
            self._set_verifying(queue, job_id, False)
            return None

        current = self._completed_transcription(job_id)
        if current is not None and isinstance(current.result, AnalysisResult):
            queue.update_job(
                job_id,
                result=replace(
                    current.result,
                    manual_fact_checks=[*current.result.manual_fact_checks, fact_check],
                    is_verifying_manual=False,
                ),
            )

        if history_id is not None:
            await asyncio.to_thread(
                self._history.append_fact_check, fact_check, entry_id=history_id
            )
        else:
            await asyncio.to_thread(
                self._history.append_fact_check,
                fact_check,
                file_name=file_name,
                category=JobCategory.TRANSCRIPTION,
            )
        return fact_check

    async def chat(
        self,
        history: list[ChatTurn],
        message: str,
        *,
        transcript: str | None = None,
        sources: list[FilePayload] | None = None,
        job_id: str | None = None,
    ) -> str:
        """Writing-assistant chat, run off the event loop.

        With job_id, the chat is grounded on that completed transcription.

        Raises:
            JobNotFoundError: if job_id is not a completed transcription job.
        """
        if job_id is not None:
            job = self._completed_transcription(job_id)
            if job is None or not isinstance(job.result, AnalysisResult):
                raise JobNotFoundError(f"No completed transcription job {job_id}")
            transcript = job.result.transcript_text()
        return await asyncio.to_thread(
            self._gateway.chat, history, message, transcript=transcript, sources=sources
        )

    def _completed_transcription(self, job_id: str) -> Job | None:
        job = next((j for j in self.transcriptions.jobs if j.id == job_id), None)
        if job is None or not isinstance(job.result, AnalysisResult):
            return None
        return job

    @staticmethod
    def _set_verifying(queue: JobQueue, job_id: str, verifying: bool) -> None:
        job = next((j for j in queue.jobs if j.id == job_id), None)
        if job is not None and isinstance(job.result, AnalysisResult):
            queue.update_job(job_id, result=replace(job.result, is_verifying_manual=verifying))

    def _completion_callback(self, category: JobCategory) -> CompletionCallback:
        async def on_completed(result: InferenceResult, file_name: str, mime_type: str) -> str:
            entry = await asyncio.to_thread(
                self._history.record, result, file_name, category, mime_type
            )
            return entry.id

        return on_completed

    def _on_session_changed(self, session: Session | None) -> None:
        _ = session
        self._history.load()
        api_key = self._auth.api_key
        if self._gateway_builder is not None and api_key != self._gateway_key:
            Log.info("API key changed, rebuilding inference gateway")
            self._gateway = self._gateway_builder(api_key)
            self._gateway_key = api_key


def build_newsroom(settings: Settings) -> Newsroom:
    """Build a Newsroom with all required adapters."""
    cache = LocalCache(Path(settings.local_cache_dir))
    auth = AuthGate(
        profile_repo=ProfileRepository(),
        cache=cache,
        api_key_cache_key=settings.api_key_cache_key,
    )
    auth.refresh_profile()
    history = History(
        cache=cache,
        repo=HistoryRepository(),
        auth=auth,
        cache_key=settings.history_cache_key,
        limit=settings.history_limit,
    )

    def build_gateway(api_key: str) -> BaseInferenceGateway:
        return GatewayFactory.create(settings, api_key=api_key or None)

    return Newsroom(
        auth=auth,
        history=history,
        gateway=build_gateway(auth.api_key),
        gateway_builder=build_gateway,
    )
