# 📄 File: app/shared/config/settings.py
#
# 🧭 Purpose (Layman Explanation):
# The main configuration center that reads all settings from environment variables
# and hands them to the plant scanner: where the classifier lives, how long to
# remember results, how big photos may be, and how patient to be with slow services.
#
# 🧪 Purpose (Technical Summary):
# Pydantic-based settings management with environment variable loading,
# validation, and type safety for all application configuration parameters.
#
# 🔗 Dependencies:
# - pydantic-settings for configuration management
# - python-dotenv for .env file loading (via pydantic-settings)
# - typing for type hints
#
# 🔄 Connected Modules / Calls From:
# - app.main (application startup)
# - app.modules.plant_identification (pipeline construction)
# - Database connection and storage modules

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety. Settings are loaded
    from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================

    APP_NAME: str = Field(default="Plant Scanner API", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    APP_DESCRIPTION: str = Field(
        default="Photo-based plant identification service",
        description="Application description"
    )
    ENVIRONMENT: str = Field(default="development", description="Runtime environment")
    DEBUG: bool = Field(default=True, description="Debug mode flag")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log output format (json or text)")
    LOG_FILE: Optional[str] = Field(None, description="Optional log file path")

    # =========================================================================
    # SERVER CONFIGURATION
    # =========================================================================

    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, description="Server port")
    RELOAD: bool = Field(default=True, description="Auto-reload on changes")
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000,http://localhost:8080",
        description="CORS allowed origins"
    )

    # =========================================================================
    # DATABASE CONFIGURATION
    # =========================================================================

    DATABASE_URL: Optional[str] = Field(None, description="Async SQLAlchemy database URL")
    DB_HOST: str = Field(default="localhost", description="Database host")
    DB_PORT: int = Field(default=5432, description="Database port")
    DB_NAME: str = Field(default="plantscan_db", description="Database name")
    DB_USER: str = Field(default="postgres", description="Database user")
    DB_PASSWORD: str = Field(default="", description="Database password")
    DB_POOL_SIZE: int = Field(default=10, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database pool overflow")

    # =========================================================================
    # REDIS / CACHE CONFIGURATION
    # =========================================================================

    REDIS_URL: str = Field(default="redis://localhost:6379/0", description="Redis URL")

    IDENTIFICATION_CACHE_BACKEND: str = Field(
        default="memory",
        description="Result cache backend: 'memory' or 'redis'"
    )
    IDENTIFICATION_CACHE_TTL: int = Field(
        default=300,
        description="TTL (seconds) for accepted identification results"
    )
    IDENTIFICATION_LOW_CONFIDENCE_TTL: int = Field(
        default=60,
        description="TTL (seconds) for low-confidence identification results"
    )
    IDENTIFICATION_CACHE_MAX_ENTRIES: int = Field(
        default=1000,
        description="Maximum number of cached identification results"
    )

    # =========================================================================
    # SUPABASE STORAGE
    # =========================================================================

    SUPABASE_URL: Optional[str] = Field(None, description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, description="Supabase service role key")
    SUPABASE_STORAGE_BUCKET: str = Field(
        default="plant-images",
        description="Supabase storage bucket for scan photos"
    )

    # =========================================================================
    # PLANT IDENTIFICATION API
    # =========================================================================

    PLANTNET_API_KEY: Optional[str] = Field(None, description="PlantNet API key")
    PLANTNET_API_URL: str = Field(
        default="https://my-api.plantnet.org/v2/identify/all",
        description="PlantNet identify endpoint"
    )

    CLASSIFIER_MAX_ATTEMPTS: int = Field(default=3, description="Classifier attempts per call")
    CLASSIFIER_BASE_DELAY: float = Field(
        default=1.0,
        description="Base backoff delay (seconds), doubled after every failed attempt"
    )
    CLASSIFIER_ATTEMPT_TIMEOUT: float = Field(
        default=15.0,
        description="Timeout (seconds) for a single classifier attempt"
    )
    CLASSIFIER_DEFAULT_ORGAN: str = Field(default="leaf", description="Default organ hint")

    IDENTIFICATION_CONFIDENCE_THRESHOLD: float = Field(
        default=0.5,
        description="Minimum top-suggestion confidence for an accepted identification"
    )
    IDENTIFICATION_MAX_SUGGESTIONS: int = Field(
        default=5,
        description="Number of ranked suggestions kept per identification"
    )
    CATALOG_LOOKUP_TIMEOUT: float = Field(
        default=2.0,
        description="Timeout (seconds) for a single species catalog lookup"
    )
    SCAN_RECORD_TIMEOUT: float = Field(
        default=3.0,
        description="Timeout (seconds) for persisting a scan record"
    )
    STORAGE_UPLOAD_TIMEOUT: float = Field(
        default=10.0,
        description="Timeout (seconds) for uploading a scan photo"
    )

    # =========================================================================
    # IMAGE PROCESSING
    # =========================================================================

    MAX_IMAGE_SIZE: int = Field(default=10485760, description="Max input image size (10MB)")
    IMAGE_MAX_DIMENSION: int = Field(default=1024, description="Max width/height after resizing")
    IMAGE_QUALITY: int = Field(default=80, description="JPEG re-encoding quality")
    IMAGE_FETCH_TIMEOUT: float = Field(
        default=10.0,
        description="Timeout (seconds) for downloading an image URL"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed_environments = ["development", "staging", "production", "test"]
        if v.lower() not in allowed_environments:
            raise ValueError(f"Environment must be one of {allowed_environments}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v.upper()

    @field_validator("CORS_ORIGINS")
    @classmethod
    def validate_cors_origins(cls, v: str) -> str:
        """Validate CORS origins format."""
        origins = [origin.strip() for origin in v.split(",")]
        for origin in origins:
            if not origin.startswith(("http://", "https://", "*")):
                raise ValueError(f"Invalid CORS origin format: {origin}")
        return v

    @field_validator("IDENTIFICATION_CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        """Validate result cache backend."""
        allowed_backends = ["memory", "redis"]
        if v.lower() not in allowed_backends:
            raise ValueError(f"Cache backend must be one of {allowed_backends}")
        return v.lower()

    @field_validator("IDENTIFICATION_CONFIDENCE_THRESHOLD")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("Confidence threshold must be between 0 and 1")
        return v

    @field_validator("IMAGE_QUALITY")
    @classmethod
    def validate_image_quality(cls, v: int) -> int:
        if not 1 <= v <= 95:
            raise ValueError("Image quality must be between 1 and 95")
        return v

    @field_validator(
        "CLASSIFIER_MAX_ATTEMPTS",
        "IDENTIFICATION_MAX_SUGGESTIONS",
        "IDENTIFICATION_CACHE_MAX_ENTRIES",
        "IMAGE_MAX_DIMENSION",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================

    @property
    def database_url(self) -> str:
        """Get the database URL, preferring explicit DATABASE_URL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.ENVIRONMENT == "test"

    @property
    def storage_enabled(self) -> bool:
        """Scan photos are uploaded only when Supabase credentials are present."""
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)

    def get_identification_config(self) -> dict:
        """Get plant identification pipeline configuration."""
        return {
            "classifier": {
                "api_url": self.PLANTNET_API_URL,
                "max_attempts": self.CLASSIFIER_MAX_ATTEMPTS,
                "base_delay": self.CLASSIFIER_BASE_DELAY,
                "attempt_timeout": self.CLASSIFIER_ATTEMPT_TIMEOUT,
                "default_organ": self.CLASSIFIER_DEFAULT_ORGAN,
            },
            "cache": {
                "backend": self.IDENTIFICATION_CACHE_BACKEND,
                "ttl": self.IDENTIFICATION_CACHE_TTL,
                "low_confidence_ttl": self.IDENTIFICATION_LOW_CONFIDENCE_TTL,
                "max_entries": self.IDENTIFICATION_CACHE_MAX_ENTRIES,
            },
            "gate": {
                "threshold": self.IDENTIFICATION_CONFIDENCE_THRESHOLD,
                "max_suggestions": self.IDENTIFICATION_MAX_SUGGESTIONS,
            },
            "image": {
                "max_dimension": self.IMAGE_MAX_DIMENSION,
                "quality": self.IMAGE_QUALITY,
                "max_bytes": self.MAX_IMAGE_SIZE,
            },
            "storage_enabled": self.storage_enabled,
        }


# ============================================================================
# SETTINGS FACTORY
# ============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Uses lru_cache to ensure settings are loaded only once
    and reused throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
