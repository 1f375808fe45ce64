"""
Application configuration using Pydantic Settings
"""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = Field(default="Gridboard")
    APP_VERSION: str = Field(default="1.0.0")
    APP_DESCRIPTION: str = Field(
        default="Dashboard composition service: shared dashboards, widget layouts and permissions"
    )
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3003)

    # Database (transactions need a replica set)
    MONGODB_URL: str = Field(default="mongodb://localhost:27017/?replicaSet=rs0")
    MONGODB_DB_NAME: str = Field(default="gridboard")
    MONGODB_MAX_CONNECTIONS: int = Field(default=10)
    MONGODB_MIN_CONNECTIONS: int = Field(default=1)
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = Field(default=5000)

    # CORS
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://localhost:3003"])
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default=["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default=["*"])

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    # Authorization
    # Roles allowed to delete any dashboard and manage any dashboard's shares.
    ELEVATED_ROLES: List[str] = Field(default=["admin"])

    # Rate Limiting (empty REDIS_URL keeps counters in memory)
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    REDIS_URL: str = Field(default="")
    RATE_LIMIT_DEFAULT: str = Field(default="200/minute")
    RATE_LIMIT_BULK: str = Field(default="60/minute")

    # Layouts
    DASHBOARD_COPY_SUFFIX: str = Field(default=" (Copy)")
    MAX_BULK_LAYOUTS: int = Field(default=500)

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"


# Global settings instance
settings = Settings()
