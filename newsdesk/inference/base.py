from abc import ABC, abstractmethod

from newsdesk.inference.models import (
    AnalysisResult,
    ChatTurn,
    FactCheck,
    FilePayload,
    InferenceResult,
    PressReleaseResult,
)
from newsdesk.queue.models import JobCategory


class BaseInferenceGateway(ABC):
    """Contract for the remote inference service."""

    def submit(
        self,
        category: JobCategory,
        payload: FilePayload,
        auxiliary_input: str | None = None,
    ) -> InferenceResult:
        """Run the operation that matches a job category."""
        if category is JobCategory.TRANSCRIPTION:
            return self.transcribe(payload)
        if category is JobCategory.PRESS_RELEASE:
            return self.rewrite_press_release(payload, auxiliary_input)
        raise ValueError(f"Unsupported job category: {category!r}")

    @abstractmethod
    def transcribe(self, payload: FilePayload) -> AnalysisResult:
        """Transcribe an audio/video file and analyse it.

        Raises:
            InferenceError: on any failure, after retries.
        """

    @abstractmethod
    def rewrite_press_release(
        self, payload: FilePayload, user_angle: str | None = None
    ) -> PressReleaseResult:
        """Rewrite a press release (PDF, Word, image) as a wire story."""

    @abstractmethod
    def verify_claim(self, text: str) -> FactCheck:
        """Fact-check a snippet selected by the user."""

    @abstractmethod
    def chat(
        self,
        history: list[ChatTurn],
        message: str,
        *,
        transcript: str | None = None,
        sources: list[FilePayload] | None = None,
    ) -> str:
        """Answer a chat message, optionally grounded on a transcript or documents."""
