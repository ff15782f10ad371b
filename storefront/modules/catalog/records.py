"""In-memory catalog records.

These are immutable copies of what the store returned on the last reload.
Screens and the cart hold them by reference; nothing mutates them in place,
an edit always goes through the store and comes back as a new record.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from storefront.app.common.validation import parse_int, parse_price, parse_rating, split_lines

# id of a product that has not been stored yet
NEW_PRODUCT_ID = 0

MAX_CATEGORY_TILES = 4
DEFAULT_RATING = 4.5


def _text(raw: Any) -> str:
    return "" if raw is None else str(raw)


@dataclass(frozen=True)
class Review:
    id: Optional[int] = None
    product_id: Optional[int] = None
    user_name: str = ""
    rating: Optional[float] = None
    date: str = ""
    comment: str = ""
    images: Tuple[str, ...] = ()
    verified: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Review":
        return cls(
            id=parse_int(row.get("id")),
            product_id=parse_int(row.get("product_id")),
            user_name=_text(row.get("user_name")),
            rating=parse_rating(row.get("rating")),
            date=_text(row.get("date")),
            comment=_text(row.get("comment")),
            images=tuple(split_lines(row.get("images"))),
            verified=bool(row.get("verified")),
        )

    @property
    def in_range(self) -> bool:
        return self.rating is not None and 1 <= self.rating <= 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "user_name": self.user_name,
            "rating": self.rating,
            "date": self.date,
            "comment": self.comment,
            "images": list(self.images),
            "verified": self.verified,
        }


@dataclass(frozen=True)
class Product:
    id: int = NEW_PRODUCT_ID
    title: str = ""
    price: float = 0.0
    rating: Optional[float] = None
    reviews_count: int = 0
    images: Tuple[str, ...] = ()
    category: str = ""
    description: str = ""
    brand_info: str = ""
    product_info: str = ""
    features: str = ""
    buy_now_url: Optional[str] = None
    # None only on an admin submission that did not carry a review set
    reviews: Optional[Tuple[Review, ...]] = ()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Product":
        raw_reviews = row.get("reviews")
        if isinstance(raw_reviews, (list, tuple)):
            reviews = tuple(Review.from_row(r) for r in raw_reviews if isinstance(r, Mapping))
        else:
            reviews = ()
        return cls(
            id=parse_int(row.get("id"), NEW_PRODUCT_ID),
            title=_text(row.get("title")),
            price=parse_price(row.get("price")),
            rating=parse_rating(row.get("rating")),
            reviews_count=parse_int(row.get("reviews_count"), 0) or 0,
            images=tuple(split_lines(row.get("images"))),
            category=_text(row.get("category")),
            description=_text(row.get("description")),
            brand_info=_text(row.get("brand_info")),
            product_info=_text(row.get("product_info")),
            features=_text(row.get("features")),
            buy_now_url=_text(row.get("buy_now_url")).strip() or None,
            reviews=reviews,
        )

    @classmethod
    def from_submission(cls, data: Mapping[str, Any]) -> "Product":
        """Build a product from an admin form or JSON body.

        A missing ``reviews`` key means "leave the stored reviews alone",
        an empty list means "this product has no reviews".
        """
        product = cls.from_row(data)
        if "reviews" not in data:
            return replace(product, reviews=None)
        return product

    @property
    def is_new(self) -> bool:
        return self.id == NEW_PRODUCT_ID

    @property
    def display_rating(self) -> float:
        return self.rating if self.rating is not None else DEFAULT_RATING

    def column_payload(self) -> Dict[str, Any]:
        """Flat column values for an insert/update. Never includes id or reviews."""
        return {
            "title": self.title,
            "price": self.price,
            "rating": self.rating,
            "reviews_count": self.reviews_count,
            "images": list(self.images),
            "category": self.category,
            "description": self.description,
            "brand_info": self.brand_info,
            "product_info": self.product_info,
            "features": self.features,
            "buy_now_url": self.buy_now_url,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id}
        data.update(self.column_payload())
        data["reviews"] = [r.to_dict() for r in self.reviews or ()]
        return data


@dataclass(frozen=True)
class CategoryTile:
    label: str
    image: str


@dataclass(frozen=True)
class CategoryCard:
    id: Optional[int]
    title: str
    items: Tuple[CategoryTile, ...] = ()

    @classmethod
    def from_value(cls, value: Any) -> Optional["CategoryCard"]:
        if not isinstance(value, Mapping) or not _text(value.get("title")).strip():
            return None
        raw_items = value.get("items")
        tiles = []
        if isinstance(raw_items, (list, tuple)):
            for item in raw_items:
                if isinstance(item, Mapping):
                    tiles.append(CategoryTile(label=_text(item.get("label")), image=_text(item.get("image"))))
        return cls(
            id=parse_int(value.get("id")),
            title=_text(value.get("title")),
            items=tuple(tiles[:MAX_CATEGORY_TILES]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "items": [{"label": t.label, "image": t.image} for t in self.items],
        }


def parse_categories(value: Any) -> Tuple[CategoryCard, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    cards = (CategoryCard.from_value(v) for v in value)
    return tuple(c for c in cards if c is not None)


def parse_heroes(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(v.strip() for v in value if isinstance(v, str) and v.strip())


# --- read-side helpers used by the screens ---

def filter_by_title(products: Iterable[Product], term: str | None) -> List[Product]:
    needle = (term or "").strip().lower()
    return [p for p in products if p.title and needle in p.title.lower()]


def average_rating(reviews: Iterable[Review], fallback: float | None = None) -> float:
    """Mean of the 1..5 ratings. Out-of-range ratings are left out, not clamped."""
    ratings = [r.rating for r in reviews if r.in_range]
    if not ratings:
        return fallback if fallback is not None else DEFAULT_RATING
    return sum(ratings) / len(ratings)


def rating_distribution(reviews: Iterable[Review]) -> Dict[int, int]:
    """Percentage of in-range reviews per star, keyed 5..1."""
    counts = {star: 0 for star in (5, 4, 3, 2, 1)}
    for r in reviews:
        if r.in_range:
            counts[int(r.rating)] += 1
    total = sum(counts.values()) or 1
    return {star: round(n * 100 / total) for star, n in counts.items()}


def related_products(products: Sequence[Product], product: Product, limit: int = 4) -> List[Product]:
    return [p for p in products if p.id != product.id][:limit]


SORTABLE_KEYS = ("title", "price", "category", "rating", "id")


def sort_products(products: Iterable[Product], key: str | None, descending: bool = False) -> List[Product]:
    """Admin table ordering. Products missing the key always sort last."""
    items = list(products)
    if key not in SORTABLE_KEYS:
        return items
    present = [p for p in items if getattr(p, key) not in (None, "")]
    missing = [p for p in items if getattr(p, key) in (None, "")]
    present.sort(key=lambda p: getattr(p, key), reverse=descending)
    return present + missing
