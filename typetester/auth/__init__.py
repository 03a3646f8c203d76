"""Host-side authorization: admin session and authenticity tokens."""

from typetester.auth.csrf import CSRF_FIELD_NAME, get_csrf_token, verify_csrf
from typetester.auth.session import check_admin_password, grant_admin, is_admin, revoke_admin

__all__ = [
    "CSRF_FIELD_NAME",
    "check_admin_password",
    "get_csrf_token",
    "grant_admin",
    "is_admin",
    "revoke_admin",
    "verify_csrf",
]
