"""
EduMate study group settings.

Extends the base settings with study-group-specific configuration.
"""

from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Study group service settings."""

    # ==========================================================================
    # Store Access
    # ==========================================================================
    # Upper bound for a single gateway call (read or write), in seconds
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # Motor connection pool
    MONGODB_MAX_POOL_SIZE: int = 50
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # ==========================================================================
    # Membership Settings
    # ==========================================================================
    # Re-reads allowed when a concurrent writer moves the group version
    MEMBERSHIP_WRITE_ATTEMPTS: int = 5

    # Capacity used when a new group does not specify one
    DEFAULT_MAX_MEMBERS: int = 10

    # ==========================================================================
    # Catalog Settings
    # ==========================================================================
    ACADEMIC_YEARS: str = "SD1,SD2,SD3,SD4"  # Comma-separated

    def get_academic_years(self) -> list:
        """Parse ACADEMIC_YEARS into a list."""
        return [year.strip() for year in self.ACADEMIC_YEARS.split(",") if year.strip()]


# Global settings instance
settings = Settings()
