"""
Ashes registry configuration — all environment variables in one place.

Read from environment at import time. A missing gateway URL or key is not an
error: the registry runs on its seed data until a backend is configured.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


class Settings:
    """Application settings from environment variables."""

    # Hosted backend (PostgREST-style REST endpoint)
    GATEWAY_URL: str = os.environ.get("ASHES_GATEWAY_URL", "")
    GATEWAY_KEY: str = os.environ.get("ASHES_GATEWAY_KEY", "")
    GATEWAY_TIMEOUT: float = float(os.environ.get("ASHES_GATEWAY_TIMEOUT", "30"))

    # Tables
    RECORDS_TABLE: str = os.environ.get("ASHES_RECORDS_TABLE", "ashes_storage")
    LOCATIONS_TABLE: str = os.environ.get("ASHES_LOCATIONS_TABLE", "ashes_locations")
    USERS_TABLE: str = os.environ.get("ASHES_USERS_TABLE", "app_users")

    # Listing
    PAGE_SIZE: int = int(os.environ.get("ASHES_PAGE_SIZE", "10"))

    # Shared admin identity, used when the credentials table can't answer
    ADMIN_USER: str = os.environ.get("ASHES_ADMIN_USER", "admin")
    ADMIN_PASSWORD: str = os.environ.get("ASHES_ADMIN_PASSWORD", "admin123")

    # Application
    LOG_LEVEL: str = os.environ.get("ASHES_LOG_LEVEL", "WARNING")

    @property
    def is_gateway_configured(self) -> bool:
        return bool(self.GATEWAY_URL and self.GATEWAY_KEY)


# Singleton instance
settings = Settings()

if not settings.is_gateway_configured:
    logger.warning("Gateway credentials missing. Set ASHES_GATEWAY_URL and ASHES_GATEWAY_KEY.")
