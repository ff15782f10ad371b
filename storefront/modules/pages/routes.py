from __future__ import annotations

import json

from flask import Blueprint, flash, render_template, request, url_for

from storefront.app.common.context import current_catalog, go, request_navigator
from storefront.app.common.validation import is_truthy, parse_int
from storefront.modules.cart.state import ViewState, current_view_state
from storefront.modules.catalog.records import (
    average_rating,
    rating_distribution,
    related_products,
    sort_products,
)
from storefront.modules.catalog.service import Catalog
from storefront.modules.navigation.address import View, build_address

bp = Blueprint("pages", __name__)

DEFAULT_HERO = "https://m.media-amazon.com/images/I/71Ie3JXGfVL._SX3000_.jpg"


@bp.get("/")
def index():
    """Single screen entry point; ``?view=`` and ``?product=`` pick what to show."""
    catalog = current_catalog()
    catalog.ensure_loaded()
    state = current_view_state()
    request_navigator(state).sync_from_address()
    return render_screen(state, catalog)


def render_screen(state: ViewState, catalog: Catalog):
    common = {
        "state": state,
        "catalog": catalog,
        "address_for": build_address,
        "root": url_for("pages.index"),
        "View": View,
    }

    if state.view is View.DETAIL and state.selected_product is not None:
        product = state.selected_product
        reviews = catalog.fetch_reviews(product.id)
        return render_template(
            "pages/detail.html",
            product=product,
            reviews=reviews,
            avg_rating=average_rating(reviews, product.rating),
            distribution=rating_distribution(reviews),
            related=related_products(catalog.products, product),
            **common,
        )

    if state.view is View.CART:
        return render_template("pages/cart.html", **common)

    if state.view is View.LOGIN:
        return render_template("pages/login.html", **common)

    if state.view is View.ADMIN:
        sort = request.args.get("sort")
        descending = request.args.get("dir") == "desc"
        return render_template(
            "pages/admin.html",
            products=sort_products(catalog.products, sort, descending),
            sort=sort,
            descending=descending,
            editing=catalog.find(parse_int(request.args.get("edit"))),
            categories_json=json.dumps([c.to_dict() for c in catalog.categories], indent=2),
            **common,
        )

    # home; also a detail request still waiting for the catalog
    return render_template(
        "pages/home.html",
        products=state.filtered_products(catalog.products),
        hero=catalog.heroes[0] if catalog.heroes else DEFAULT_HERO,
        waiting=not catalog.loaded,
        **common,
    )


@bp.post("/navigate")
def navigate():
    view = View.parse(request.form.get("view"))
    product_id = parse_int(request.form.get("product"))
    if view is View.HOME:
        current_view_state().search_term = ""
    return go(view, product_id)


@bp.post("/search")
def search():
    current_view_state().search_term = (request.form.get("q") or "").strip()
    return go(View.HOME)


@bp.post("/cart/add")
def cart_add():
    state = current_view_state()
    product = current_catalog().find(parse_int(request.form.get("product_id")))
    if product is None:
        flash("That product is no longer available.", "error")
        return go(View.HOME)
    state.add_to_cart(product)
    flash("Added to cart.", "success")
    return go(View.CART)


@bp.post("/cart/remove")
def cart_remove():
    index = parse_int(request.form.get("index"), -1)
    current_view_state().remove_from_cart(index)
    return go(View.CART)


@bp.post("/cart/checkout")
def cart_checkout():
    state = current_view_state()
    if not state.cart:
        return go(View.CART)
    if not is_truthy(request.form.get("confirm")):
        flash("Please confirm the order.", "info")
        return go(View.CART)
    state.clear_cart()
    flash("Order successful!", "success")
    return go(View.HOME)
