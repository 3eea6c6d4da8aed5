"""
Configuration Management
Loads and validates environment variables
"""
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class AddonSeed(BaseModel):
    """Addon loaded at startup (one entry of the ADDONS env var)"""
    url: str
    enabled: bool = True
    id: Optional[str] = None
    name: Optional[str] = None
    description: str = ""


class Settings(BaseSettings):
    """Application settings from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )
    BASE_URL: str = "http://localhost:3001"

    # Seed addons, e.g. ADDONS='[{"url": "https://v3-cinemeta.strem.io/manifest.json"}]'
    ADDONS: List[AddonSeed] = []

    # Addon transport
    ADDON_REQUEST_TIMEOUT: float = 10.0  # seconds, per outbound call
    ADDON_USER_AGENT: str = "CRMB/1.0"

    # Cache TTLs (seconds)
    CACHE_TTL_ADDONS: int = 1800  # 30 minutes

    # Fallback data
    MOCK_CATALOG_SIZE: int = 20

    # MDbList passthrough
    MDBLIST_API_URL: str = "https://mdblist.com/api/"
    MDBLIST_RATE_LIMIT: int = 30  # requests per second

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Development
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    DISABLE_RATE_LIMITING: bool = False


settings = Settings()
