# Catalog store for a hosted PostgREST table service (e.g. a Supabase project).
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import requests

from storefront.app.common.errors import StoreError
from storefront.modules.catalog.store import CatalogStore


class RestCatalogStore(CatalogStore):
    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        if api_key:
            self.session.headers.update({"apikey": api_key, "Authorization": f"Bearer {api_key}"})

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _call(self, operation: str, method: str, table: str, **kwargs) -> Any:
        try:
            r = self.session.request(method, self._url(table), timeout=self.timeout, **kwargs)
            r.raise_for_status()
        except requests.RequestException as exc:
            raise StoreError(operation, str(exc)) from exc
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as exc:
            raise StoreError(operation, f"invalid JSON from {table}") from exc

    def fetch_products(self) -> List[Dict[str, Any]]:
        rows = self._call(
            "fetch_products", "GET", "products",
            params={"select": "*,reviews(*)", "order": "id.desc"},
        )
        return rows or []

    def fetch_reviews(self, product_id: int) -> List[Dict[str, Any]]:
        rows = self._call(
            "fetch_reviews", "GET", "reviews",
            params={"select": "*", "product_id": f"eq.{product_id}", "order": "id.desc"},
        )
        return rows or []

    def fetch_site_config(self) -> List[Dict[str, Any]]:
        return self._call("fetch_site_config", "GET", "site_config", params={"select": "*"}) or []

    def insert_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._call(
            "insert_product", "POST", "products",
            json=[payload],
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise StoreError("insert_product", "no row returned")
        return rows[0]

    def update_product(self, product_id: int, payload: Dict[str, Any]) -> None:
        self._call("update_product", "PATCH", "products", params={"id": f"eq.{product_id}"}, json=payload)

    def delete_product(self, product_id: int) -> None:
        self._call("delete_product", "DELETE", "products", params={"id": f"eq.{product_id}"})

    def delete_reviews(self, product_id: int) -> None:
        self._call("delete_reviews", "DELETE", "reviews", params={"product_id": f"eq.{product_id}"})

    def insert_reviews(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = list(rows)
        if rows:
            self._call("insert_reviews", "POST", "reviews", json=rows)

    def upsert_site_config(self, key: str, value: Any) -> None:
        self._call(
            "upsert_site_config", "POST", "site_config",
            json=[{"key": key, "value": value}],
            headers={"Prefer": "resolution=merge-duplicates"},
        )
