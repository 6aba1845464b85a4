from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from newsdesk.inference.models import FilePayload

MessagePart = str | FilePayload


@dataclass(frozen=True)
class ChatMessage:
    """Provider-neutral message: a role plus text and inline-file parts."""

    role: str
    parts: list[MessagePart] = field(default_factory=list)


class BaseInferenceClient(ABC):
    """Contract for provider-specific inference clients."""

    @abstractmethod
    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        messages: list[ChatMessage],
        json_schema: dict[str, object] | None = None,
        schema_name: str = "result",
    ) -> str:
        """Return the provider's reply as plain text.

        When json_schema is given, the provider is asked for a JSON reply
        matching it.
        """
