"""
Login check for the single shared admin identity.

Looks the pair up in the credentials table. When the table can't answer
(missing, unreachable, or no match) the configured admin credential is
accepted instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ashes.config import settings
from ashes.errors import GatewayUnavailable
from ashes.gateway import TableGateway

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login name or password"
LOGIN_FAILED = "Login failed. Please try again."


@dataclass
class LoginResult:
    ok: bool
    error: str | None = None


def _is_admin(username: str, password: str) -> bool:
    return username == settings.ADMIN_USER and password == settings.ADMIN_PASSWORD


async def authenticate(gateway: TableGateway, username: str, password: str) -> LoginResult:
    """
    Check a login name and password.

    Args:
        gateway: Gateway holding the credentials table
        username: Login name as typed
        password: Password as typed

    Returns:
        LoginResult with ok=True, or the message to show
    """
    try:
        rows = await gateway.select(
            settings.USERS_TABLE,
            filters={"username": username, "password": password},
        )
    except GatewayUnavailable as e:
        logger.warning("auth: credentials lookup failed: %s", e)
        if _is_admin(username, password):
            return LoginResult(ok=True)
        return LoginResult(ok=False, error=LOGIN_FAILED)

    if isinstance(rows, list) and rows:
        return LoginResult(ok=True)
    if _is_admin(username, password):
        return LoginResult(ok=True)
    return LoginResult(ok=False, error=INVALID_CREDENTIALS)
