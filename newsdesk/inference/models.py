import base64
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

VERDICTS = ("Verdadero", "Falso", "Engañoso", "Inconsistente", "Dudoso")


@dataclass(frozen=True)
class FilePayload:
    """A user file ready to be sent to the model."""

    file_name: str
    data_base64: str
    mime_type: str

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> "FilePayload":
        """Read a file from disk and base64-encode it."""
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            mime_type = guessed or "application/octet-stream"
        data = base64.b64encode(path.read_bytes()).decode("ascii")
        return cls(file_name=path.name, data_base64=data, mime_type=mime_type)

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data_base64)


@dataclass(frozen=True)
class Source:
    title: str
    url: str


@dataclass(frozen=True)
class FactCheck:
    """Verdict on a single claim."""

    claim: str
    verdict: str
    explanation: str
    sources: list[Source] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "claim": self.claim,
            "verdict": self.verdict,
            "explanation": self.explanation,
        }
        if self.sources:
            payload["sources"] = [{"title": s.title, "url": s.url} for s in self.sources]
        return payload


@dataclass(frozen=True)
class TranscriptionSegment:
    timestamp: str
    text: str


@dataclass(frozen=True)
class Topic:
    name: str
    description: str


@dataclass
class AnalysisResult:
    """Transcript of an audio/video file plus its editorial analysis.

    manual_fact_checks grows as the user verifies selected snippets;
    is_verifying_manual is a display flag while such a check is running.
    """

    transcription: list[TranscriptionSegment] = field(default_factory=list)
    topics: list[Topic] = field(default_factory=list)
    suggested_headlines: list[str] = field(default_factory=list)
    social_threads: list[str] = field(default_factory=list)
    fact_checks: list[FactCheck] = field(default_factory=list)
    manual_fact_checks: list[FactCheck] = field(default_factory=list)
    is_verifying_manual: bool = False

    def transcript_text(self) -> str:
        return "\n".join(f"[{s.timestamp}] {s.text}" for s in self.transcription)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "transcription": [
                {"timestamp": s.timestamp, "text": s.text} for s in self.transcription
            ],
            "topics": [{"name": t.name, "description": t.description} for t in self.topics],
            "suggestedHeadlines": list(self.suggested_headlines),
            "socialThreads": list(self.social_threads),
            "factChecks": [fc.to_payload() for fc in self.fact_checks],
        }
        if self.manual_fact_checks:
            payload["manualFactChecks"] = [fc.to_payload() for fc in self.manual_fact_checks]
        return payload


@dataclass
class PressReleaseResult:
    """A press release rewritten as an agency wire story."""

    headline: str = ""
    lead: str = ""
    body: str = ""
    source_text: str = ""
    user_angle: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "headline": self.headline,
            "lead": self.lead,
            "body": self.body,
            "originalText": self.source_text,
        }
        if self.user_angle:
            payload["userAngle"] = self.user_angle
        return payload


InferenceResult = AnalysisResult | PressReleaseResult


@dataclass(frozen=True)
class ChatTurn:
    """One message of a chat conversation. role is 'user' or 'model'."""

    role: str
    text: str
