"""
Base settings class for environment configuration.

Uses Pydantic Settings for automatic environment variable loading.
Extend this class for application-specific settings.

Example:
    from common.config import BaseAppSettings

    class Settings(BaseAppSettings):
        # App-specific settings
        GATEWAY_TIMEOUT_SECONDS: float = 10.0

    settings = Settings()
    print(settings.MONGODB_URI)
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    """
    Base settings class with common configuration options.

    Automatically loads values from environment variables.
    Extend this class for application-specific settings.
    """

    # ==========================================================================
    # Database Settings
    # ==========================================================================
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "edumate"

    # ==========================================================================
    # Authentication Settings
    # ==========================================================================
    AUTH_PROVIDER: str = "firebase"  # "jwt" or "firebase"

    # JWT Settings (used when AUTH_PROVIDER = "jwt")
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"

    # Firebase Settings (used when AUTH_PROVIDER = "firebase")
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None
    FIREBASE_PROJECT_ID: Optional[str] = None

    # ==========================================================================
    # Server Settings
    # ==========================================================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # CORS Settings
    CORS_ORIGINS: str = "*"  # Comma-separated origins or "*"
    CORS_ALLOW_CREDENTIALS: bool = True

    # ==========================================================================
    # Pydantic Settings Configuration
    # ==========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",  # Allow app-specific settings
        case_sensitive=True,
    )

    def get_cors_origins(self) -> list:
        """Parse CORS_ORIGINS into a list."""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT.lower() == "development"

    def validate_required(self) -> None:
        """
        Validate that required settings are configured.

        Raises:
            ValueError: If required settings are missing
        """
        errors = []

        if self.AUTH_PROVIDER not in ("jwt", "firebase"):
            errors.append(f"Unknown AUTH_PROVIDER: {self.AUTH_PROVIDER}")

        if self.AUTH_PROVIDER == "jwt" and not self.JWT_SECRET:
            errors.append("JWT_SECRET is required when using JWT authentication")

        if self.AUTH_PROVIDER == "firebase" and not (
            self.FIREBASE_CREDENTIALS_PATH or self.FIREBASE_PROJECT_ID
        ):
            errors.append(
                "FIREBASE_CREDENTIALS_PATH or FIREBASE_PROJECT_ID is required "
                "when using Firebase authentication"
            )

        if errors:
            raise ValueError("Configuration errors:\n- " + "\n- ".join(errors))
