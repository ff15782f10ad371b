"""Admin authorization for the storefront.

There is one role (admin) and one predicate: "is this caller allowed to run
admin operations". The configured authenticator keeps the flag in the Flask
session after a successful credential check.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar, Any

from flask import current_app, session
from werkzeug.security import generate_password_hash, check_password_hash

from storefront.app.common.errors import abort_json

F = TypeVar("F", bound=Callable[..., Any])

SESSION_KEY = "is_admin"


class Authenticator:
    def check_credentials(self, username: str, password: str) -> bool:
        raise NotImplementedError

    def is_authorized(self) -> bool:
        raise NotImplementedError

    def login(self, username: str, password: str) -> bool:
        ok = self.check_credentials(username, password)
        if ok:
            session[SESSION_KEY] = True
        return ok

    def logout(self) -> None:
        session.pop(SESSION_KEY, None)


class ConfiguredAuthenticator(Authenticator):
    def __init__(self, username: str, password: str):
        self.username = username
        self.password_hash = generate_password_hash(password)

    def check_credentials(self, username: str, password: str) -> bool:
        if (username or "").strip() != self.username:
            return False
        return check_password_hash(self.password_hash, password or "")

    def is_authorized(self) -> bool:
        return bool(session.get(SESSION_KEY))


class StaticAuthenticator(Authenticator):
    """Fixed answer, for tests and local demos."""

    def __init__(self, allowed: bool):
        self.allowed = allowed

    def check_credentials(self, username: str, password: str) -> bool:
        return self.allowed

    def is_authorized(self) -> bool:
        return self.allowed


def current_authenticator() -> Authenticator:
    return current_app.extensions["storefront.authenticator"]


def admin_required(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_authenticator().is_authorized():
            abort_json(401, "unauthorized", "Admin authentication required")
        return fn(*args, **kwargs)

    return wrapper  # type: ignore
