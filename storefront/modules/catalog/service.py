"""Catalog reconciliation.

The catalog keeps one immutable snapshot of what the store held on the last
successful reload. Every write goes to the store and is followed by a full
reload; nothing is merged into the snapshot by hand. Readers always see
either the previous snapshot or the next one, never a mix.

Review edits replace the whole review set of a product (delete, then insert).
Two admins saving the same product at once can interleave and a reload in
between can see an empty review set. Single-admin use is assumed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from storefront.app.common.errors import StoreError
from storefront.modules.catalog.records import (
    CategoryCard,
    Product,
    Review,
    parse_categories,
    parse_heroes,
)
from storefront.modules.catalog.store import CatalogStore

logger = logging.getLogger(__name__)

CATEGORIES_KEY = "categories"
HEROES_KEY = "heroes"

DEFAULT_REVIEWER = "Customer"
DEFAULT_REVIEW_RATING = 5


@dataclass(frozen=True)
class CatalogSnapshot:
    products: Tuple[Product, ...] = ()
    categories: Tuple[CategoryCard, ...] = ()
    heroes: Tuple[str, ...] = ()
    loaded: bool = False

    def find(self, product_id: Optional[int]) -> Optional[Product]:
        if product_id is None:
            return None
        for p in self.products:
            if p.id == product_id:
                return p
        return None


ReloadListener = Callable[["Catalog", bool], None]


@dataclass
class Catalog:
    store: CatalogStore
    today: Callable[[], date] = date.today
    snapshot: CatalogSnapshot = field(default_factory=CatalogSnapshot)
    loading: bool = False
    _listeners: List[ReloadListener] = field(default_factory=list)

    # --- reads ---

    @property
    def products(self) -> Tuple[Product, ...]:
        return self.snapshot.products

    @property
    def categories(self) -> Tuple[CategoryCard, ...]:
        return self.snapshot.categories

    @property
    def heroes(self) -> Tuple[str, ...]:
        return self.snapshot.heroes

    @property
    def loaded(self) -> bool:
        return self.snapshot.loaded

    def find(self, product_id: Optional[int]) -> Optional[Product]:
        return self.snapshot.find(product_id)

    def on_reload(self, listener: ReloadListener) -> Callable[[], None]:
        """Call ``listener(catalog, ok)`` after every reload attempt. Returns an unsubscribe."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def reload(self) -> bool:
        """Refetch everything and swap the snapshot. False if the fetch failed."""
        self.loading = True
        ok = False
        try:
            rows = self.store.fetch_products()
            config = {row.get("key"): row.get("value") for row in self.store.fetch_site_config()}
            self.snapshot = CatalogSnapshot(
                products=tuple(Product.from_row(r) for r in rows),
                categories=parse_categories(config.get(CATEGORIES_KEY)),
                heroes=parse_heroes(config.get(HEROES_KEY)),
                loaded=True,
            )
            ok = True
            logger.info("catalog reloaded: %d products", len(self.snapshot.products))
        except StoreError:
            logger.exception("catalog reload failed, keeping previous snapshot")
        finally:
            self.loading = False
            for listener in list(self._listeners):
                listener(self, ok)
        return ok

    def ensure_loaded(self) -> None:
        if not self.loaded and not self.loading:
            self.reload()

    def fetch_reviews(self, product_id: int) -> Tuple[Review, ...]:
        """Fresh reviews for one product, or the cached ones if the store is unreachable."""
        try:
            return tuple(Review.from_row(r) for r in self.store.fetch_reviews(product_id))
        except StoreError:
            logger.exception("fetching reviews for product %s failed", product_id)
            cached = self.find(product_id)
            if cached is None or cached.reviews is None:
                return ()
            return cached.reviews

    # --- writes ---

    def save_product(self, product: Product) -> int:
        """Insert or update a product and, if given, replace its reviews.

        Returns the stored product id. Store errors propagate after the
        closing reload.
        """
        try:
            payload = product.column_payload()
            if product.is_new:
                row = self.store.insert_product(payload)
                product_id = row.get("id")
                if product_id is None:
                    raise StoreError("insert_product", "store did not return an id")
                product_id = int(product_id)
                logger.info("created product %s", product_id)
            else:
                product_id = product.id
                self.store.update_product(product_id, payload)
                logger.info("updated product %s", product_id)

            if product.reviews is not None:
                self._replace_reviews(product_id, product.reviews)
            return product_id
        except StoreError:
            logger.exception("saving product %s failed", product.id)
            raise
        finally:
            self.reload()

    def _replace_reviews(self, product_id: int, reviews: Sequence[Review]) -> None:
        rows = [self._review_row(product_id, r) for r in reviews if r.comment.strip()]
        self.store.delete_reviews(product_id)
        if rows:
            self.store.insert_reviews(rows)
        logger.info("replaced reviews of product %s (%d kept)", product_id, len(rows))

    def _review_row(self, product_id: int, review: Review) -> Dict[str, Any]:
        return {
            "product_id": product_id,
            "user_name": review.user_name.strip() or DEFAULT_REVIEWER,
            "rating": review.rating or DEFAULT_REVIEW_RATING,
            "date": review.date.strip() or self.today().isoformat(),
            "comment": review.comment.strip(),
            "images": list(review.images),
            "verified": review.verified,
        }

    def delete_product(self, product_id: int, confirmed: bool = False) -> bool:
        """Delete a product. Does nothing unless the caller confirmed."""
        if not confirmed:
            logger.info("delete of product %s not confirmed, skipped", product_id)
            return False
        try:
            self.store.delete_product(product_id)
            logger.info("deleted product %s", product_id)
            return True
        except StoreError:
            logger.exception("deleting product %s failed", product_id)
            raise
        finally:
            self.reload()

    def save_categories(self, cards: Sequence[CategoryCard]) -> None:
        self._save_config(CATEGORIES_KEY, [c.to_dict() for c in cards])

    def save_heroes(self, urls: Sequence[str]) -> None:
        self._save_config(HEROES_KEY, list(parse_heroes(list(urls))))

    def _save_config(self, key: str, value: Any) -> None:
        try:
            self.store.upsert_site_config(key, value)
            logger.info("saved site config %r", key)
        except StoreError:
            logger.exception("saving site config %r failed", key)
            raise
        finally:
            self.reload()
