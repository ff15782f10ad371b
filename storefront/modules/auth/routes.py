from __future__ import annotations

from flask import Blueprint, current_app, flash, request

from storefront.app.common.auth import current_authenticator
from storefront.app.common.context import go
from storefront.app.common.errors import abort_json
from storefront.app.common.validation import get_json, require_fields
from storefront.modules.cart.state import end_view_state
from storefront.modules.navigation.address import View

bp = Blueprint("auth", __name__)


@bp.post("/login")
def login():
    username = request.form.get("username") or ""
    password = request.form.get("password") or ""
    if not current_authenticator().login(username, password):
        current_app.logger.info("admin login rejected")
        flash("Invalid credentials", "error")
        return go(View.LOGIN)
    return go(View.ADMIN)


@bp.post("/logout")
def logout():
    current_authenticator().logout()
    end_view_state()
    return go(View.HOME)


@bp.post("/api/auth/login")
def api_login():
    """POST /api/auth/login - Start an admin session."""
    data = get_json()
    require_fields(data, ["username", "password"])
    if not current_authenticator().login(str(data["username"]), str(data["password"])):
        abort_json(401, "unauthorized", "Invalid credentials")
    return {"message": "logged_in"}, 200


@bp.post("/api/auth/logout")
def api_logout():
    """POST /api/auth/logout - End the admin session."""
    current_authenticator().logout()
    end_view_state()
    return {"message": "logged_out"}, 200
