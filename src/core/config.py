"""Application configuration."""

from typing import Literal, Self

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "cricfeed"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Remote content API
    API_BASE_URL: str = "http://localhost:3000/api/"
    API_TIMEOUT_SEC: float = 30.0
    API_USER_AGENT: str = "cricfeed/0.1 (+https://github.com/cricfeed)"
    API_RETRY_ATTEMPTS: int = 3
    API_RETRY_WAIT_MIN_SEC: float = 0.5
    API_RETRY_WAIT_MAX_SEC: float = 4.0

    # Paging
    MAX_PAGE_SIZE: int = 50
    HOME_FEED_PAGE_SIZE: int = 50
    HOME_FEED_INITIAL_LOAD_SIZE: int = 18
    HOME_FEED_PREFETCH_DISTANCE: int = 1
    UPCOMING_PAGE_SIZE: int = 10
    UPCOMING_PREFETCH_DISTANCE: int = 1
    RESULTS_PAGE_SIZE: int = 5
    RESULTS_PREFETCH_DISTANCE: int = 1

    @computed_field
    @property
    def api_base_url(self) -> str:
        """Base URL normalised with a trailing slash so relative paths join."""
        return self.API_BASE_URL.rstrip("/") + "/"

    @model_validator(mode="after")
    def _check_page_sizes(self) -> Self:
        for name in (
            "HOME_FEED_PAGE_SIZE",
            "HOME_FEED_INITIAL_LOAD_SIZE",
            "UPCOMING_PAGE_SIZE",
            "RESULTS_PAGE_SIZE",
        ):
            value = getattr(self, name)
            if value <= 0 or value > self.MAX_PAGE_SIZE:
                raise ValueError(
                    f"{name} must be between 1 and {self.MAX_PAGE_SIZE}, got {value}"
                )
        if self.API_RETRY_ATTEMPTS < 1:
            raise ValueError("API_RETRY_ATTEMPTS must be at least 1")
        return self


settings = Settings()
