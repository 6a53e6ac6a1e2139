"""Settings for the intent classification service, loaded from env vars / .env."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama3-70b-8192"


class IntentServiceConfig(BaseSettings):
    """Credentials and call options for the intent classification service.

    Environment variables use the ``SERVICE_SEARCH_`` prefix, e.g.
    ``SERVICE_SEARCH_API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVICE_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = DEFAULT_API_URL
    api_key: str = ""
    model: str = DEFAULT_MODEL
    timeout_seconds: float = Field(10.0, gt=0)
    temperature: float = Field(0.1, ge=0.0, le=2.0)

    @property
    def has_credentials(self) -> bool:
        """True when an API key is configured."""
        return bool(self.api_key.strip())
