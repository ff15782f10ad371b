from __future__ import annotations

from flask import current_app, redirect, request, url_for

from storefront.app.common.auth import current_authenticator
from storefront.modules.cart.state import ViewState, current_view_state
from storefront.modules.catalog.service import Catalog
from storefront.modules.navigation.address import View
from storefront.modules.navigation.history import RedirectHistory
from storefront.modules.navigation.navigator import Navigator


def current_catalog() -> Catalog:
    return current_app.extensions["storefront.catalog"]


def request_navigator(state: ViewState | None = None) -> Navigator:
    """Navigator whose history is the current request URL."""
    history = RedirectHistory(request.full_path, base_path=url_for("pages.index"))
    return Navigator(
        state or current_view_state(),
        current_catalog(),
        history,
        can_enter_admin=current_authenticator().is_authorized,
    )


def go(view: View, product_id: int | None = None, navigator: Navigator | None = None):
    """navigate_to + the redirect that makes the browser record it."""
    navigator = navigator or request_navigator()
    navigator.navigate_to(view, product_id)
    return redirect(navigator.history.redirect_target)
