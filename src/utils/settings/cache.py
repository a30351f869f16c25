"""Image analysis cache settings configuration."""

from datetime import timedelta

from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisCacheSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # None keeps entries forever
    ANALYSIS_CACHE_MAX_AGE_DAYS: int | None = None

    @property
    def max_age(self) -> timedelta | None:
        if self.ANALYSIS_CACHE_MAX_AGE_DAYS is None:
            return None
        return timedelta(days=self.ANALYSIS_CACHE_MAX_AGE_DAYS)


__all__ = ["AnalysisCacheSettings"]
