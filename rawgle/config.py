from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # App
    APP_NAME: str = "Rawgle"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = ""  # Empty = INFO in debug mode, WARNING otherwise

    # Backend API
    API_BASE_URL: str = "http://localhost:8787"
    API_PREFIX: str = "/api"
    API_TIMEOUT: float = Field(default=10.0, gt=0, description="Request timeout in seconds")

    # Initial bearer token (optional, normally set after login)
    API_TOKEN: str = ""

    # Pagination
    REVIEWS_PAGE_SIZE: int = Field(default=10, ge=1)
    MAX_PAGE_SIZE: int = Field(default=50, ge=1)

    # Reviews
    REVIEW_MAX_PHOTOS: int = 5
    REVIEW_TITLE_MIN_LENGTH: int = 5
    REVIEW_TITLE_MAX_LENGTH: int = 100
    REVIEW_COMMENT_MIN_LENGTH: int = 10
    REVIEW_COMMENT_MAX_LENGTH: int = 1000

    # PAWS rewards
    REVIEW_REWARD_PAWS: int = 50

    @field_validator("API_BASE_URL", "API_PREFIX", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value):
        """Base URL and prefix are joined as-is, so drop trailing slashes."""
        if isinstance(value, str):
            return value.strip().rstrip("/")
        return value

    @property
    def api_url(self) -> str:
        return f"{self.API_BASE_URL}{self.API_PREFIX}"


settings = Settings()
