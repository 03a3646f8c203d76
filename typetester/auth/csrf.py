"""Per-session authenticity tokens for admin form posts."""

from __future__ import annotations

import hmac
import secrets
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from litestar import Request

CSRF_SESSION_KEY = "_csrf_token"
CSRF_FIELD_NAME = "_csrf"


def get_csrf_token(request: Request) -> str:
    """Return the session's token, creating one if needed."""
    if CSRF_SESSION_KEY not in request.session:
        request.session[CSRF_SESSION_KEY] = secrets.token_urlsafe(32)
    return request.session[CSRF_SESSION_KEY]


def verify_csrf(request: Request, form_data: Mapping[str, Any]) -> bool:
    """Check the submitted ``_csrf`` field against the session token.

    Tokens stay valid for the whole session so the admin panel can issue
    several requests after fetching one token.
    """
    submitted_token = form_data.get(CSRF_FIELD_NAME, "")
    stored_token = request.session.get(CSRF_SESSION_KEY, "")

    if not stored_token or not isinstance(submitted_token, str):
        return False
    return hmac.compare_digest(submitted_token.encode(), str(stored_token).encode())
