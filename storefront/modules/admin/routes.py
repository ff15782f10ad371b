from __future__ import annotations

import json

from flask import Blueprint, flash, request

from storefront.app.common.auth import admin_required, current_authenticator
from storefront.app.common.context import current_catalog, go
from storefront.app.common.errors import StoreError, abort_json
from storefront.app.common.validation import get_json, is_truthy, parse_int, split_lines
from storefront.modules.catalog.records import NEW_PRODUCT_ID, Product, parse_categories
from storefront.modules.catalog.service import CATEGORIES_KEY, HEROES_KEY
from storefront.modules.navigation.address import View

bp = Blueprint("admin", __name__)


def _product_form() -> dict:
    data = request.form.to_dict()
    data.pop("reviews", None)
    # the review set is only replaced when the form actually carries one
    raw_reviews = (data.pop("reviews_json", "") or "").strip()
    if raw_reviews:
        reviews = json.loads(raw_reviews)
        if not isinstance(reviews, list):
            raise ValueError("reviews must be a JSON list")
        data["reviews"] = reviews

    # columns missing from the form keep their stored values
    stored = current_catalog().find(parse_int(data.get("id"), NEW_PRODUCT_ID) or None)
    if stored is None:
        return data
    merged = stored.column_payload()
    merged.update(data)
    merged["id"] = stored.id
    return merged


# --- HTML forms ---

@bp.post("/admin/products")
def save_product_form():
    if not current_authenticator().is_authorized():
        return go(View.LOGIN)
    try:
        product = Product.from_submission(_product_form())
    except ValueError:
        flash("Reviews must be a JSON list.", "error")
        return go(View.ADMIN)
    try:
        current_catalog().save_product(product)
        flash("Product saved.", "success")
    except StoreError:
        flash("Saving the product did not complete. The list shows what is stored now.", "error")
    return go(View.ADMIN)


@bp.post("/admin/products/<int:product_id>/delete")
def delete_product_form(product_id: int):
    if not current_authenticator().is_authorized():
        return go(View.LOGIN)
    try:
        if current_catalog().delete_product(product_id, confirmed=is_truthy(request.form.get("confirm"))):
            flash("Product deleted.", "success")
    except StoreError:
        flash("Deleting the product did not complete. The list shows what is stored now.", "error")
    return go(View.ADMIN)


@bp.post("/admin/site-assets")
def save_site_assets_form():
    if not current_authenticator().is_authorized():
        return go(View.LOGIN)
    catalog = current_catalog()
    try:
        if "heroes" in request.form:
            catalog.save_heroes(split_lines(request.form.get("heroes")))
        raw_categories = (request.form.get("categories") or "").strip()
        if raw_categories:
            catalog.save_categories(parse_categories(json.loads(raw_categories)))
        flash("Site assets saved.", "success")
    except ValueError:
        flash("Categories must be valid JSON.", "error")
    except StoreError:
        flash("Saving site assets did not complete.", "error")
    return go(View.ADMIN)


# --- JSON ---

@bp.post("/api/admin/products")
@admin_required
def api_save_product():
    """POST /api/admin/products - Create (id 0 or absent) or update a product."""
    data = get_json()
    reviews = data.get("reviews")
    if reviews is not None and not isinstance(reviews, list):
        abort_json(400, "validation_error", "reviews must be a list")
    product = Product.from_submission(data)
    product_id = current_catalog().save_product(product)
    return {"id": product_id}, 201 if product.is_new else 200


@bp.delete("/api/admin/products/<int:product_id>")
@admin_required
def api_delete_product(product_id: int):
    """DELETE /api/admin/products/<id>?confirm=true"""
    if not is_truthy(request.args.get("confirm")):
        abort_json(400, "confirmation_required", "Pass confirm=true to delete")
    current_catalog().delete_product(product_id, confirmed=True)
    return {"deleted": product_id}, 200


@bp.put("/api/admin/site-config/<key>")
@admin_required
def api_save_site_config(key: str):
    data = get_json()
    value = data.get("value")
    if not isinstance(value, list):
        abort_json(400, "validation_error", "value must be a list")
    catalog = current_catalog()
    if key == CATEGORIES_KEY:
        catalog.save_categories(parse_categories(value))
    elif key == HEROES_KEY:
        catalog.save_heroes([v for v in value if isinstance(v, str)])
    else:
        abort_json(404, "not_found", f"unknown site config key {key!r}")
    return {"key": key, "saved": True}, 200


@bp.post("/api/admin/reload")
@admin_required
def api_reload():
    catalog = current_catalog()
    ok = catalog.reload()
    return {"reloaded": ok, "products": len(catalog.products)}, 200 if ok else 502
