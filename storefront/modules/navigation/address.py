"""Address-bar codec: ``?view=<name>&product=<id>``."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple
from urllib.parse import parse_qs, urlencode


class View(str, Enum):
    HOME = "home"
    DETAIL = "detail"
    CART = "cart"
    LOGIN = "login"
    ADMIN = "admin"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "View":
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.HOME


VIEW_PARAM = "view"
PRODUCT_PARAM = "product"


def build_address(view: View, product_id: Optional[int] = None) -> str:
    params = {VIEW_PARAM: View(view).value}
    if product_id is not None:
        params[PRODUCT_PARAM] = str(int(product_id))
    return "?" + urlencode(params)


def _first(params: dict, name: str) -> Optional[str]:
    values = params.get(name)
    return values[0] if values else None


def parse_product_id(raw: Optional[str]) -> Optional[int]:
    raw = (raw or "").strip()
    if raw.isascii() and raw.isdigit():
        return int(raw)
    return None


def parse_address(address: Optional[str]) -> Tuple[View, Optional[int]]:
    """Read ``(view, product_id)`` from a URL, path+query or bare query string.

    A product parameter without a view parameter means the detail screen,
    which is how older links (``?product=7``) were written.
    """
    address = address or ""
    query = address.split("?", 1)[1] if "?" in address else address
    query = query.split("#", 1)[0]
    params = parse_qs(query)

    product_id = parse_product_id(_first(params, PRODUCT_PARAM))
    raw_view = _first(params, VIEW_PARAM)
    if raw_view is None and product_id is not None:
        return View.DETAIL, product_id
    return View.parse(raw_view), product_id
