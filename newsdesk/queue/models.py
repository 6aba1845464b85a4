import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from newsdesk.inference.models import FilePayload, InferenceResult


class JobCategory(str, Enum):
    """Kind of work a job represents. Each category has its own queue."""

    TRANSCRIPTION = "transcription"
    PRESS_RELEASE = "press_release"

    @property
    def job_type(self) -> str:
        """Value stored in audio_jobs.job_type."""
        return "audio" if self is JobCategory.TRANSCRIPTION else "press_release"

    @property
    def mode(self) -> str:
        """Value stored as a history entry's mode."""
        return "AUDIO" if self is JobCategory.TRANSCRIPTION else "PRESS_RELEASE"

    @classmethod
    def from_job_type(cls, job_type: str) -> "JobCategory":
        return cls.PRESS_RELEASE if job_type == "press_release" else cls.TRANSCRIPTION

    @classmethod
    def from_mode(cls, mode: str) -> "JobCategory":
        return cls.PRESS_RELEASE if mode == "PRESS_RELEASE" else cls.TRANSCRIPTION


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def _display_time() -> str:
    return datetime.now().strftime("%H:%M:%S")


@dataclass
class Job:
    """One uploaded file waiting for, or undergoing, remote processing.

    Callers must provide a non-empty payload (data and media type)
    before enqueueing; the queue does not validate it.
    """

    payload: FilePayload
    category: JobCategory
    auxiliary_input: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: JobStatus = JobStatus.QUEUED
    result: InferenceResult | None = None
    error_message: str | None = None
    created_at: str = field(default_factory=_display_time)
    history_id: str | None = None

    @property
    def file_name(self) -> str:
        return self.payload.file_name
