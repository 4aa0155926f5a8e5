from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(ValueError):
    """Invalid job or client configuration. Raised before any platform call is made."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Platform API keys (empty = platform unavailable unless mocked)
    openai_api_key: str = ""
    perplexity_api_key: str = ""
    gemini_api_key: str = ""
    anthropic_api_key: str = ""
    xai_api_key: str = ""

    # Platform models
    openai_model: str = "gpt-4o"
    perplexity_model: str = "sonar"
    gemini_model: str = "gemini-2.0-flash"
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    xai_model: str = "grok-2-latest"

    # Platform calls
    platform_timeout_seconds: float = 60.0  # per-call bound, never unlimited
    platform_temperature: float = 0.7
    platform_max_tokens: int = 1000

    # Canned responses instead of real API calls (local runs, demos)
    use_mock_responses: bool = True
    mock_latency_seconds: float = 0.0

    # Tracking job defaults
    default_platforms: str = "chatgpt,perplexity"  # comma-separated
    max_queries: int = 20
    runs_per_query: int = 1

    # App
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool | None = None  # unset: JSON everywhere except development

    @property
    def json_logs(self) -> bool:
        if self.log_json is not None:
            return self.log_json
        return self.app_env.lower() != "development"

    @property
    def default_platform_list(self) -> list[str]:
        return [p.strip() for p in self.default_platforms.split(",") if p.strip()]

    def api_keys(self) -> dict[str, str]:
        """Mapping of platform name → API key for the configured platforms."""
        keys = {
            "chatgpt": self.openai_api_key,
            "chatgpt_search": self.openai_api_key,
            "perplexity": self.perplexity_api_key,
            "gemini": self.gemini_api_key,
            "claude": self.anthropic_api_key,
            "grok": self.xai_api_key,
        }
        return {platform: key for platform, key in keys.items() if key}

    def models(self) -> dict[str, str]:
        return {
            "chatgpt": self.openai_model,
            "chatgpt_search": self.openai_model,
            "perplexity": self.perplexity_model,
            "gemini": self.gemini_model,
            "claude": self.anthropic_model,
            "grok": self.xai_model,
        }


settings = Settings()
