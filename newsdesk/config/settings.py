from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "newsdesk"
    db_username: str = "newsdesk"
    db_password: str = "secret"
    db_sslmode: str = "prefer"

    inference_provider: str = "openai"
    inference_max_retries: int = 3
    inference_retry_initial_delay_seconds: float = 2.0

    inference_openai_api_key: str = ""
    inference_openai_model_name: str = "gpt-4o"
    inference_openai_fast_model_name: str = "gpt-4o-mini"
    inference_openai_timeout_seconds: int = 300

    inference_openai_compatible_base_url: str = ""
    inference_openai_compatible_api_key: str = ""
    inference_openai_compatible_model_name: str = ""
    inference_openai_compatible_timeout_seconds: int = 300

    inference_openrouter_api_key: str = ""
    inference_openrouter_model_name: str = ""
    inference_openrouter_timeout_seconds: int = 300

    inference_groq_api_key: str = ""
    inference_groq_model_name: str = ""
    inference_groq_timeout_seconds: int = 300

    inference_together_api_key: str = ""
    inference_together_model_name: str = ""
    inference_together_timeout_seconds: int = 300

    inference_deepseek_api_key: str = ""
    inference_deepseek_model_name: str = ""
    inference_deepseek_timeout_seconds: int = 300

    inference_ollama_api_key: str = "ollama"
    inference_ollama_model_name: str = ""
    inference_ollama_timeout_seconds: int = 600

    text_engine: str = "pdfplumber"

    history_limit: int = 50
    history_cache_key: str = "servimedia_history_v5"
    api_key_cache_key: str = "GEMINI_API_KEY"
    local_cache_dir: str = ".newsdesk"

    auth_url: str = ""
    auth_service_role_key: str = ""
    auth_timeout_seconds: int = 10
