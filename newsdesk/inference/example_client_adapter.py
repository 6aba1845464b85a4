"""Offline inference client.

Returns canned replies shaped like the real ones. Handy for local runs,
tests, and as a template for new provider adapters: implement
BaseInferenceClient and register the provider in GatewayFactory.
"""

import json
from typing import ClassVar

from newsdesk.inference.client_base import BaseInferenceClient, ChatMessage


class ExampleClientAdapter(BaseInferenceClient):
    """Adapter that answers from fixed responses keyed by schema name."""

    RESPONSES: ClassVar[dict[str, dict[str, object]]] = {
        "transcription_result": {
            "transcription": [{"timestamp": "00:00", "text": "Example transcript."}],
            "topics": [{"name": "Example", "description": "Placeholder topic."}],
            "suggestedHeadlines": ["Example headline"],
            "socialThreads": ["Example thread"],
            "factChecks": [],
        },
        "press_release_result": {
            "headline": "Example headline",
            "lead": "Example lead.",
            "body": "Example body.",
            "originalText": "",
        },
        "fact_check": {
            "claim": "Example claim",
            "verdict": "Dudoso",
            "explanation": "Offline adapter; nothing was verified.",
            "sources": [],
        },
    }
    CHAT_REPLY: ClassVar[str] = "Example reply."

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
        _ = model, temperature, system_prompt, messages
        if json_schema is None:
            return self.CHAT_REPLY
        return json.dumps(self.RESPONSES.get(schema_name, {}))
