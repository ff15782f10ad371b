from __future__ import annotations

from storefront.app.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(500), nullable=False, default="")
    price = db.Column(db.Float, nullable=False, default=0.0)
    rating = db.Column(db.Float, nullable=True)
    reviews_count = db.Column(db.Integer, nullable=False, default=0)
    images = db.Column(db.JSON, nullable=False, default=list)
    category = db.Column(db.String(100), nullable=True)
    description = db.Column(db.Text, nullable=True)
    brand_info = db.Column(db.Text, nullable=True)
    product_info = db.Column(db.Text, nullable=True)
    features = db.Column(db.Text, nullable=True)
    buy_now_url = db.Column(db.String(1024), nullable=True)

    reviews = db.relationship(
        "Review",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Review.id.desc()",
    )


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user_name = db.Column(db.String(200), nullable=False, default="Customer")
    rating = db.Column(db.Float, nullable=True)  # 1..5
    date = db.Column(db.String(40), nullable=True)
    comment = db.Column(db.Text, nullable=True)
    images = db.Column(db.JSON, nullable=False, default=list)
    verified = db.Column(db.Boolean, nullable=False, default=False)


class SiteConfig(db.Model):
    __tablename__ = "site_config"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.JSON, nullable=True)


PRODUCT_COLUMNS = (
    "title",
    "price",
    "rating",
    "reviews_count",
    "images",
    "category",
    "description",
    "brand_info",
    "product_info",
    "features",
    "buy_now_url",
)

REVIEW_COLUMNS = ("product_id", "user_name", "rating", "date", "comment", "images", "verified")


def product_row(p: Product) -> dict:
    row = {"id": p.id}
    row.update({c: getattr(p, c) for c in PRODUCT_COLUMNS})
    return row


def review_row(r: Review) -> dict:
    row = {"id": r.id}
    row.update({c: getattr(r, c) for c in REVIEW_COLUMNS})
    return row
