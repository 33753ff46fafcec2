from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    DEBUG: bool = True
    PORT: int = 3001

    # Meta Graph API
    FACEBOOK_ACCESS_TOKEN: Optional[str] = None
    META_API_VERSION: str = "v20.0"
    META_GRAPH_URL: str = "https://graph.facebook.com"
    META_CAMPAIGN_LIMIT: int = 500
    META_BATCH_SIZE: int = 50  # Graph API batch request limit
    META_TIMEOUT_SECONDS: float = 30.0

    # Dashboard
    DEFAULT_DATE_RANGE_DAYS: int = 30

    # CORS (comma-separated string, will be split)
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text, json

    @property
    def graph_base_url(self) -> str:
        return f"{self.META_GRAPH_URL.rstrip('/')}/{self.META_API_VERSION}"

    class Config:
        env_file = ".env"

settings = Settings()
