"""Account authentication and session lifecycle."""

from classfolio.auth.http import handle_http_exception
from classfolio.auth.models import LoginRequest
from classfolio.auth.models import RegisterRequest
from classfolio.auth.service import login_account
from classfolio.auth.service import refresh_session
from classfolio.auth.service import register_account

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "handle_http_exception",
    "login_account",
    "refresh_session",
    "register_account",
]
