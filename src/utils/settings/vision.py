"""Vision model settings configuration."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class VisionModelSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Empty key means the analyzer is not configured
    VISION_MODEL_API_KEY: SecretStr = SecretStr("")
    VISION_MODEL_URL: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    VISION_MODEL_NAME: str = "google/gemini-2.5-flash"
    VISION_MODEL_TIMEOUT: int = 60

    @property
    def is_configured(self) -> bool:
        return bool(self.VISION_MODEL_API_KEY.get_secret_value().strip())


vision_settings = VisionModelSettings()
