"""
Configuration module - Pydantic settings shared by every service.
"""

from common.config.base_settings import BaseAppSettings

__all__ = ["BaseAppSettings"]
