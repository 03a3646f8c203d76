"""Admin session helpers."""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from litestar import Request

SESSION_IS_ADMIN = "is_admin"


def is_admin(request: Request) -> bool:
    """True when the session belongs to an authenticated administrator."""
    return request.session.get(SESSION_IS_ADMIN) is True


def check_admin_password(configured: str | None, submitted: str) -> bool:
    """Constant-time comparison; always False when no password is configured."""
    if not configured or not submitted:
        return False
    return hmac.compare_digest(configured.encode(), submitted.encode())


def grant_admin(request: Request) -> None:
    request.session[SESSION_IS_ADMIN] = True


def revoke_admin(request: Request) -> None:
    request.session.pop(SESSION_IS_ADMIN, None)
