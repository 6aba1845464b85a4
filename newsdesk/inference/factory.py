from typing import ClassVar

from newsdesk.config.settings import Settings
from newsdesk.documents.factory import TextExtractorFactory
from newsdesk.inference.base import BaseInferenceGateway
from newsdesk.inference.example_client_adapter import ExampleClientAdapter
from newsdesk.inference.gateway import InferenceGateway
from newsdesk.inference.openai_client_adapter import OpenAIClientAdapter


class GatewayFactory:
    """Creates the configured inference gateway."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings, api_key: str | None = None) -> BaseInferenceGateway:
        """Create a gateway from settings.

        A non-empty api_key (resolved from the user's profile) replaces the
        key configured for the provider.
        """
        provider = settings.inference_provider.lower()
        text_extractors = TextExtractorFactory.from_settings(settings)
        if provider == "example":
            return InferenceGateway(
                client=ExampleClientAdapter(),
                model="example",
                text_extractors=text_extractors,
                max_retries=0,
            )
        client = OpenAIClientAdapter(
            api_key=api_key or cls._resolve_api_key(provider, settings),
            timeout_seconds=cls._resolve_timeout_seconds(provider, settings),
            base_url=cls._resolve_base_url(provider, settings),
        )
        model = cls._resolve_model_name(provider, settings)
        fast_model = settings.inference_openai_fast_model_name if provider == "openai" else model
        return InferenceGateway(
            client=client,
            model=model,
            fast_model=fast_model,
            text_extractors=text_extractors,
            max_retries=settings.inference_max_retries,
            retry_delay_seconds=settings.inference_retry_initial_delay_seconds,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.inference_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "inference_openai_compatible_base_url is required for "
                    "inference_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown inference provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _provider_setting(cls, provider: str, settings: Settings, suffix: str) -> object:
        return getattr(settings, f"inference_{provider}_{suffix}", None)

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        return str(cls._provider_setting(provider, settings, "api_key") or "")

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        return str(cls._provider_setting(provider, settings, "model_name") or "")

    @classmethod
    def _resolve_timeout_seconds(cls, provider: str, settings: Settings) -> int:
        value = cls._provider_setting(provider, settings, "timeout_seconds")
        return value if isinstance(value, int) and value > 0 else 300
