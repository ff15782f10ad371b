import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.app.config import TestConfig
from storefront.app.common.auth import StaticAuthenticator
from storefront.app.common.errors import StoreError
from storefront.app.extensions import db
from storefront.app.factory import create_app
from storefront.modules.catalog.service import Catalog
from storefront.modules.catalog.store import CatalogStore, SqlCatalogStore


class RecordingStore(SqlCatalogStore):
    """SQL store that records every call and can fail on demand."""

    def __init__(self):
        self.calls = []
        self.fail_on = set()

    def _guard(self, operation, *args):
        self.calls.append((operation, args))
        if operation in self.fail_on:
            raise StoreError(operation, "injected failure")

    def calls_to(self, operation):
        return [args for op, args in self.calls if op == operation]

    def fetch_products(self):
        self._guard("fetch_products")
        return super().fetch_products()

    def fetch_reviews(self, product_id):
        self._guard("fetch_reviews", product_id)
        return super().fetch_reviews(product_id)

    def fetch_site_config(self):
        self._guard("fetch_site_config")
        return super().fetch_site_config()

    def insert_product(self, payload):
        self._guard("insert_product", dict(payload))
        return super().insert_product(payload)

    def update_product(self, product_id, payload):
        self._guard("update_product", product_id, dict(payload))
        return super().update_product(product_id, payload)

    def delete_product(self, product_id):
        self._guard("delete_product", product_id)
        return super().delete_product(product_id)

    def delete_reviews(self, product_id):
        self._guard("delete_reviews", product_id)
        return super().delete_reviews(product_id)

    def insert_reviews(self, rows):
        rows = list(rows)
        self._guard("insert_reviews", rows)
        return super().insert_reviews(rows)

    def upsert_site_config(self, key, value):
        self._guard("upsert_site_config", key, value)
        return super().upsert_site_config(key, value)


class StaticStore(CatalogStore):
    """Read-only rows held in memory; no Flask app needed."""

    def __init__(self, products=None, config=None):
        self.products = products or []
        self.config = config or []
        self.fail = False

    def fetch_products(self):
        if self.fail:
            raise StoreError("fetch_products", "offline")
        return [dict(p) for p in self.products]

    def fetch_reviews(self, product_id):
        for p in self.products:
            if p["id"] == product_id:
                return list(p.get("reviews") or [])
        return []

    def fetch_site_config(self):
        return list(self.config)


def product_rows():
    return [
        {"id": 3, "title": "Smartphone X 128GB", "price": 699.0, "reviews": [
            {"id": 11, "product_id": 3, "user_name": "Sam", "rating": 5, "comment": "Great"},
        ]},
        {"id": 2, "title": "Bluetooth Speaker", "price": 59.99, "reviews": None},
        {"id": 1, "title": "Noise-Cancelling Headphones", "price": 199.99},
    ]


@pytest.fixture()
def static_store():
    return StaticStore(products=product_rows())


@pytest.fixture()
def static_catalog(static_store):
    catalog = Catalog(static_store)
    catalog.reload()
    return catalog


@pytest.fixture()
def store():
    return RecordingStore()


@pytest.fixture()
def app(store):
    # Use SQLite in tests for simplicity.
    app = create_app(TestConfig, store=store)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def catalog(app):
    return app.extensions["storefront.catalog"]


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


# admin-enabled app for the JSON admin endpoints
@pytest.fixture()
def admin_app(store):
    app = create_app(TestConfig, store=store, authenticator=StaticAuthenticator(True))

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture()
def admin_client(admin_app):
    with admin_app.test_client() as client:
        yield client


@pytest.fixture()
def admin_catalog(admin_app):
    with admin_app.app_context():
        yield admin_app.extensions["storefront.catalog"]
