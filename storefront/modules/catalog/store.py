from __future__ import annotations

from typing import Any, Dict, Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from storefront.app.common.errors import StoreError
from storefront.app.extensions import db
from storefront.app.models import (
    PRODUCT_COLUMNS,
    REVIEW_COLUMNS,
    Product,
    Review,
    SiteConfig,
    product_row,
    review_row,
)


class CatalogStore:
    """Table-level access to products, reviews and site configuration.

    Rows go in and out as plain dicts. Implementations raise ``StoreError``
    for every failed call.
    """

    def fetch_products(self) -> List[Dict[str, Any]]:
        """All products, highest id first, each with an embedded ``reviews`` list."""
        raise NotImplementedError

    def fetch_reviews(self, product_id: int) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def fetch_site_config(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def insert_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def update_product(self, product_id: int, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_product(self, product_id: int) -> None:
        raise NotImplementedError

    def delete_reviews(self, product_id: int) -> None:
        raise NotImplementedError

    def insert_reviews(self, rows: Iterable[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def upsert_site_config(self, key: str, value: Any) -> None:
        raise NotImplementedError


def _check_columns(payload: Dict[str, Any], allowed: Iterable[str], operation: str) -> None:
    unknown = sorted(set(payload) - set(allowed))
    if unknown:
        raise StoreError(operation, f"unknown columns {unknown}")


class SqlCatalogStore(CatalogStore):
    """Store backed by the Flask-SQLAlchemy models. Needs an app context."""

    def _read(self, operation: str, fn):
        try:
            return fn()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(operation, str(exc)) from exc

    def _write(self, operation: str, fn):
        try:
            result = fn()
            db.session.commit()
            return result
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(operation, str(exc)) from exc

    def fetch_products(self) -> List[Dict[str, Any]]:
        def run():
            products = (
                Product.query.options(selectinload(Product.reviews))
                .order_by(Product.id.desc())
                .all()
            )
            rows = []
            for p in products:
                row = product_row(p)
                row["reviews"] = [review_row(r) for r in p.reviews]
                rows.append(row)
            return rows

        return self._read("fetch_products", run)

    def fetch_reviews(self, product_id: int) -> List[Dict[str, Any]]:
        def run():
            reviews = (
                Review.query.filter(Review.product_id == product_id)
                .order_by(Review.id.desc())
                .all()
            )
            return [review_row(r) for r in reviews]

        return self._read("fetch_reviews", run)

    def fetch_site_config(self) -> List[Dict[str, Any]]:
        return self._read(
            "fetch_site_config",
            lambda: [{"key": c.key, "value": c.value} for c in SiteConfig.query.all()],
        )

    def insert_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        _check_columns(payload, PRODUCT_COLUMNS, "insert_product")

        def run():
            product = Product(**payload)
            db.session.add(product)
            db.session.flush()
            return product

        product = self._write("insert_product", run)
        return product_row(product)

    def update_product(self, product_id: int, payload: Dict[str, Any]) -> None:
        _check_columns(payload, PRODUCT_COLUMNS, "update_product")

        def run():
            changed = Product.query.filter(Product.id == product_id).update(payload)
            if not changed:
                raise StoreError("update_product", f"product {product_id} not found")

        self._write("update_product", run)

    def delete_product(self, product_id: int) -> None:
        def run():
            product = db.session.get(Product, product_id)
            if product is not None:
                db.session.delete(product)

        self._write("delete_product", run)

    def delete_reviews(self, product_id: int) -> None:
        self._write(
            "delete_reviews",
            lambda: Review.query.filter(Review.product_id == product_id).delete(),
        )

    def insert_reviews(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = list(rows)
        for row in rows:
            _check_columns(row, REVIEW_COLUMNS, "insert_reviews")
        self._write("insert_reviews", lambda: db.session.add_all([Review(**r) for r in rows]))

    def upsert_site_config(self, key: str, value: Any) -> None:
        def run():
            row = db.session.get(SiteConfig, key)
            if row is None:
                db.session.add(SiteConfig(key=key, value=value))
            else:
                row.value = value

        self._write("upsert_site_config", run)
