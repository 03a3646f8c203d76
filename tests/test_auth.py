"""Tests for authenticity tokens and admin session helpers."""

from unittest.mock import MagicMock

import pytest

from typetester.auth.csrf import CSRF_FIELD_NAME, CSRF_SESSION_KEY, get_csrf_token, verify_csrf
from typetester.auth.session import check_admin_password, grant_admin, is_admin, revoke_admin
from typetester.controllers.helpers import parse_font_id, require_admin
from typetester.fonts.errors import FailureReason, FontOperationError


@pytest.fixture
def make_request():
    def _make(session=None):
        request = MagicMock()
        request.session = session if session is not None else {}
        return request
    return _make


class TestCsrf:
    def test_token_is_created_once(self, make_request):
        request = make_request()
        token = get_csrf_token(request)
        assert request.session[CSRF_SESSION_KEY] == token
        assert get_csrf_token(request) == token

    def test_verify(self, make_request):
        request = make_request({CSRF_SESSION_KEY: "abc"})
        assert verify_csrf(request, {CSRF_FIELD_NAME: "abc"})
        assert not verify_csrf(request, {CSRF_FIELD_NAME: "abd"})
        assert not verify_csrf(request, {})

    def test_token_survives_verification(self, make_request):
        request = make_request({CSRF_SESSION_KEY: "abc"})
        verify_csrf(request, {CSRF_FIELD_NAME: "abc"})
        assert verify_csrf(request, {CSRF_FIELD_NAME: "abc"})

    def test_non_ascii_token_is_rejected(self, make_request):
        request = make_request({CSRF_SESSION_KEY: "abc"})
        assert not verify_csrf(request, {CSRF_FIELD_NAME: "\u00e9t\u00e9"})

    def test_no_session_token(self, make_request):
        assert not verify_csrf(make_request(), {CSRF_FIELD_NAME: ""})


class TestAdminSession:
    def test_grant_and_revoke(self, make_request):
        request = make_request()
        assert not is_admin(request)
        grant_admin(request)
        assert is_admin(request)
        revoke_admin(request)
        assert not is_admin(request)

    def test_password_check(self):
        assert check_admin_password("secret", "secret")
        assert not check_admin_password("secret", "guess")
        assert not check_admin_password(None, "anything")
        assert not check_admin_password("", "")


class TestRequireAdmin:
    def test_token_is_checked_first(self, make_request):
        with pytest.raises(FontOperationError) as exc_info:
            require_admin(make_request({"is_admin": True}), {})
        assert exc_info.value.reason is FailureReason.BAD_AUTHENTICITY_TOKEN

    def test_permission_denied(self, make_request):
        request = make_request({CSRF_SESSION_KEY: "abc"})
        with pytest.raises(FontOperationError) as exc_info:
            require_admin(request, {CSRF_FIELD_NAME: "abc"})
        assert exc_info.value.reason is FailureReason.PERMISSION_DENIED

    def test_admin_with_token(self, make_request):
        request = make_request({CSRF_SESSION_KEY: "abc", "is_admin": True})
        require_admin(request, {CSRF_FIELD_NAME: "abc"})


class TestParseFontId:
    def test_valid(self):
        assert parse_font_id("42") == 42

    @pytest.mark.parametrize("raw", ["abc", "0", "-1", "1.5", ""])
    def test_invalid(self, raw):
        with pytest.raises(FontOperationError) as exc_info:
            parse_font_id(raw)
        assert exc_info.value.reason is FailureReason.INVALID_ID
