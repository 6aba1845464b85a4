from unittest.mock import MagicMock, patch

import pytest

from newsdesk.config.settings import Settings
from newsdesk.inference.example_client_adapter import ExampleClientAdapter
from newsdesk.inference.factory import GatewayFactory
from newsdesk.inference.gateway import InferenceGateway
from newsdesk.inference.models import FilePayload


def _settings(**overrides: object) -> Settings:
    return Settings(**overrides)  # type: ignore[arg-type]


class TestGatewayFactory:
    def test_example_provider_works_offline(self) -> None:
        gateway = GatewayFactory.create(_settings(inference_provider="example"))

        result = gateway.transcribe(FilePayload("a.mp3", "ZGF0YQ==", "audio/mpeg"))

        assert isinstance(gateway, InferenceGateway)
        assert isinstance(gateway._client, ExampleClientAdapter)
        assert result.transcription[0].text == "Example transcript."

    @patch("newsdesk.inference.factory.OpenAIClientAdapter")
    def test_openai_provider(self, mock_adapter: MagicMock) -> None:
        settings = _settings(
            inference_provider="openai",
            inference_openai_api_key="sk-env",
            inference_openai_model_name="gpt-x",
            inference_openai_fast_model_name="gpt-x-mini",
            inference_openai_timeout_seconds=120,
        )

        gateway = GatewayFactory.create(settings)

        mock_adapter.assert_called_once_with(api_key="sk-env", timeout_seconds=120, base_url=None)
        assert gateway._model == "gpt-x"
        assert gateway._fast_model == "gpt-x-mini"

    @patch("newsdesk.inference.factory.OpenAIClientAdapter")
    def test_profile_key_replaces_configured_key(self, mock_adapter: MagicMock) -> None:
        settings = _settings(inference_provider="openai", inference_openai_api_key="sk-env")

        GatewayFactory.create(settings, api_key="sk-profile")

        assert mock_adapter.call_args.kwargs["api_key"] == "sk-profile"

    @patch("newsdesk.inference.factory.OpenAIClientAdapter")
    def test_hosted_provider_uses_default_base_url(self, mock_adapter: MagicMock) -> None:
        settings = _settings(
            inference_provider="groq",
            inference_groq_api_key="gsk",
            inference_groq_model_name="llama",
        )

        gateway = GatewayFactory.create(settings)

        mock_adapter.assert_called_once_with(
            api_key="gsk",
            timeout_seconds=300,
            base_url="https://api.groq.com/openai/v1",
        )
        assert gateway._fast_model == "llama"

    @patch("newsdesk.inference.factory.OpenAIClientAdapter")
    def test_openai_compatible_uses_configured_url(self, mock_adapter: MagicMock) -> None:
        settings = _settings(
            inference_provider="openai_compatible",
            inference_openai_compatible_base_url=" https://llm.internal/v1 ",
            inference_openai_compatible_model_name="local",
        )

        GatewayFactory.create(settings)

        assert mock_adapter.call_args.kwargs["base_url"] == "https://llm.internal/v1"

    def test_openai_compatible_requires_url(self) -> None:
        settings = _settings(inference_provider="openai_compatible")

        with pytest.raises(ValueError, match="base_url is required"):
            GatewayFactory.create(settings)

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown inference provider 'nope'"):
            GatewayFactory.create(_settings(inference_provider="nope"))

    @patch("newsdesk.inference.factory.OpenAIClientAdapter")
    def test_retry_policy_comes_from_settings(self, mock_adapter: MagicMock) -> None:
        settings = _settings(
            inference_provider="openai",
            inference_max_retries=5,
            inference_retry_initial_delay_seconds=0.5,
        )

        gateway = GatewayFactory.create(settings)

        assert gateway._max_retries == 5
        assert gateway._retry_delay_seconds == 0.5
