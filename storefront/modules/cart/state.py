from __future__ import annotations

import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, List, Optional, Tuple

from flask import current_app, session

from storefront.modules.catalog.records import Product, filter_by_title
from storefront.modules.navigation.address import View


@dataclass(frozen=True)
class CartItem:
    product: Product
    quantity: int = 1

    @classmethod
    def snapshot(cls, product: Product, quantity: int = 1) -> "CartItem":
        # own copy: later catalog reloads must not change a line already in the cart
        return cls(product=replace(product), quantity=max(1, int(quantity)))

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


@dataclass
class ViewState:
    """Screen state of one browser session.

    ``pending_product_id`` is set when the detail screen was requested before
    the catalog was loaded; the navigator resolves it after the next reload.
    """

    view: View = View.HOME
    selected_product: Optional[Product] = None
    pending_product_id: Optional[int] = None
    cart: List[CartItem] = field(default_factory=list)
    search_term: str = ""

    @property
    def selected_product_id(self) -> Optional[int]:
        if self.selected_product is not None:
            return self.selected_product.id
        return self.pending_product_id

    def show(self, view: View, product: Optional[Product] = None) -> None:
        self.view = view
        self.selected_product = product
        self.pending_product_id = None

    def show_pending(self, product_id: int) -> None:
        self.view = View.DETAIL
        self.selected_product = None
        self.pending_product_id = product_id

    # --- cart ---

    def add_to_cart(self, product: Product) -> CartItem:
        # no merging: the same product added twice gives two lines
        item = CartItem.snapshot(product)
        self.cart.append(item)
        return item

    def remove_from_cart(self, index: int) -> bool:
        if not 0 <= index < len(self.cart):
            return False
        del self.cart[index]
        return True

    def clear_cart(self) -> None:
        self.cart.clear()

    @property
    def cart_count(self) -> int:
        return sum(i.quantity for i in self.cart)

    @property
    def cart_subtotal(self) -> float:
        return round(sum(i.line_total for i in self.cart), 2)

    # --- search ---

    def filtered_products(self, products: Iterable[Product]) -> List[Product]:
        return filter_by_title(products, self.search_term)


class ViewStateRegistry:
    """Per-session view states, in process memory only.

    Holds at most ``max_sessions`` states and drops any state idle for longer
    than ``idle_seconds``. The least recently used state goes first.
    """

    def __init__(
        self,
        max_sessions: int = 1000,
        idle_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_sessions = max_sessions
        self.idle_seconds = idle_seconds
        self.clock = clock
        self._states: "OrderedDict[str, Tuple[float, ViewState]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._states)

    def get(self, sid: str) -> ViewState:
        with self._lock:
            now = self.clock()
            self._expire(now)
            entry = self._states.pop(sid, None)
            state = entry[1] if entry is not None else ViewState()
            self._states[sid] = (now, state)
            while len(self._states) > self.max_sessions:
                self._states.popitem(last=False)
            return state

    def discard(self, sid: str) -> None:
        with self._lock:
            self._states.pop(sid, None)

    def _expire(self, now: float) -> None:
        # oldest first, so stop at the first live entry
        while self._states:
            sid, (seen, _) = next(iter(self._states.items()))
            if now - seen <= self.idle_seconds:
                break
            del self._states[sid]


SESSION_ID_KEY = "sid"


def _registry() -> ViewStateRegistry:
    return current_app.extensions["storefront.view_states"]


def current_view_state() -> ViewState:
    sid = session.get(SESSION_ID_KEY)
    if not sid:
        sid = session[SESSION_ID_KEY] = uuid.uuid4().hex
    return _registry().get(sid)


def end_view_state() -> None:
    """Forget this session's view state; the next request starts a fresh one."""
    sid = session.pop(SESSION_ID_KEY, None)
    if sid:
        _registry().discard(sid)
