from __future__ import annotations

from flask import Blueprint, request

from storefront.app.common.context import current_catalog
from storefront.app.common.errors import abort_json
from storefront.modules.catalog.records import (
    average_rating,
    filter_by_title,
    rating_distribution,
)

bp = Blueprint("catalog_api", __name__)


@bp.get("/products")
def list_products():
    catalog = current_catalog()
    catalog.ensure_loaded()

    search = (request.args.get("q") or "").strip()
    products = filter_by_title(catalog.products, search) if search else list(catalog.products)

    return {
        "items": [p.to_dict() for p in products],
        "loaded": catalog.loaded,
        "total": len(products),
    }, 200


@bp.get("/products/<int:product_id>")
def product_detail(product_id: int):
    catalog = current_catalog()
    catalog.ensure_loaded()
    product = catalog.find(product_id)
    if product is None:
        abort_json(404, "not_found", "product not found")

    reviews = catalog.fetch_reviews(product_id)
    data = product.to_dict()
    data["reviews"] = [r.to_dict() for r in reviews]
    data["reviews_summary"] = {
        "avg_rating": average_rating(reviews, product.rating),
        "distribution": rating_distribution(reviews),
        "count": len(reviews),
    }
    return data, 200


@bp.get("/site-config")
def site_config():
    catalog = current_catalog()
    catalog.ensure_loaded()
    return {
        "categories": [c.to_dict() for c in catalog.categories],
        "heroes": list(catalog.heroes),
    }, 200
