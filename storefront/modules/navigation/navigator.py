"""Keeps ``{view, selected product}`` and the address in step.

Every ``navigate_to`` resolves the request, pushes exactly one history entry
for the screen it resolved to and updates the view state right away. Every
history pop (or page load) goes through ``sync_from_address``. Both use the
same resolution rules, so reading the address back after a navigation always
lands on the same state.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from storefront.modules.cart.state import ViewState
from storefront.modules.catalog.records import Product
from storefront.modules.catalog.service import Catalog
from storefront.modules.navigation.address import View, build_address, parse_address
from storefront.modules.navigation.history import History

logger = logging.getLogger(__name__)


class Navigator:
    def __init__(
        self,
        state: ViewState,
        catalog: Catalog,
        history: History,
        can_enter_admin: Callable[[], bool] = lambda: False,
    ):
        self.state = state
        self.catalog = catalog
        self.history = history
        self.can_enter_admin = can_enter_admin

    def navigate_to(self, view: View, product_id: Optional[int] = None) -> str:
        """Show ``view`` and push one history entry for what is actually shown.

        A request that falls back (stale product, admin without rights)
        pushes the fallback's address, so the address bar always matches
        the screen.
        """
        view, product, pending_id = self._resolve(View(view), product_id)
        address = build_address(view, product.id if product is not None else pending_id)
        self.history.push(address)
        self._show(view, product, pending_id)
        return address

    def sync_from_address(self) -> None:
        view, product_id = parse_address(self.history.location)
        self._show(*self._resolve(view, product_id))

    def _resolve(
        self, view: View, product_id: Optional[int]
    ) -> Tuple[View, Optional[Product], Optional[int]]:
        if view is View.ADMIN and not self.can_enter_admin():
            return View.LOGIN, None, None
        if view is not View.DETAIL:
            return view, None, None
        if product_id is None:
            return View.HOME, None, None
        if not self.catalog.loaded:
            return View.DETAIL, None, product_id

        product = self.catalog.find(product_id)
        if product is None:
            logger.info("product %s not in catalog, showing home", product_id)
            return View.HOME, None, None
        return View.DETAIL, product, None

    def _show(self, view: View, product: Optional[Product], pending_id: Optional[int]) -> None:
        if pending_id is not None:
            self.state.show_pending(pending_id)
        else:
            self.state.show(view, product)

    def watch(self) -> Callable[[], None]:
        """Follow history pops and catalog reloads. Returns a function that stops both."""
        stop_pop = self.history.on_pop(self.sync_from_address)
        stop_reload = self.catalog.on_reload(lambda catalog, ok: self.sync_from_address())

        def stop() -> None:
            stop_pop()
            stop_reload()

        return stop
