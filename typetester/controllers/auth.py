"""Minimal admin login standing in for the host's authentication."""

from __future__ import annotations

from litestar import Controller, Request, get, post
from litestar.response import Response

from typetester.auth.csrf import get_csrf_token
from typetester.auth.session import check_admin_password, grant_admin, is_admin, revoke_admin
from typetester.controllers.helpers import get_runtime, read_form, success
from typetester.fonts.errors import FailureReason, FontOperationError


class AuthController(Controller):
    path = "/auth"

    @get("/token")
    async def token(self, request: Request) -> Response:
        """Issue the session's authenticity token."""
        return success({"token": get_csrf_token(request), "isAdmin": is_admin(request)})

    @post("/login", status_code=200)
    async def login(self, request: Request) -> Response:
        form_data = await read_form(request)
        password = form_data.get("password")
        configured = get_runtime(request).settings.admin_password

        if not isinstance(password, str) or not check_admin_password(configured, password):
            revoke_admin(request)
            raise FontOperationError(FailureReason.PERMISSION_DENIED, "Invalid credentials")

        grant_admin(request)
        return success({"token": get_csrf_token(request), "isAdmin": True})

    @post("/logout", status_code=200)
    async def logout(self, request: Request) -> Response:
        revoke_admin(request)
        return success({"isAdmin": False})
