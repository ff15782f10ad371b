from __future__ import annotations

from flask import Blueprint

from storefront.app.extensions import db
from storefront.app.models import Product, Review, SiteConfig

cli_bp = Blueprint("cli", __name__, cli_group=None)


@cli_bp.cli.command("init-db")
def init_db() -> None:
    """Create tables."""
    db.create_all()
    print("DB initialized (tables created).")


@cli_bp.cli.command("seed")
def seed_data() -> None:
    """Seed demo catalog data.

    Safe to run multiple times; it will no-op if data exists.
    """
    db.create_all()

    if Product.query.count() == 0:
        headphones = Product(
            title="Noise-Cancelling Headphones",
            price=199.99,
            rating=4.8,
            reviews_count=2,
            images=["https://images.unsplash.com/photo-1518441902113-c1d3b87b73dc?w=1200"],
            category="Audio",
            description="Immersive sound with active noise cancellation.",
            features="30-hour battery\nUSB-C fast charging",
        )
        phone = Product(
            title="Smartphone X 128GB",
            price=699.0,
            rating=4.5,
            images=["https://images.unsplash.com/photo-1511707171634-5f897ff02aa9?w=1200"],
            category="Phones",
            description="6.1-inch display, dual camera.",
        )
        speaker = Product(
            title="Portable Bluetooth Speaker",
            price=59.99,
            rating=4.5,
            images=["https://images.unsplash.com/photo-1585386959984-a4155223168f?w=1200"],
            category="Audio",
            description="Rich bass and 12-hour battery.",
        )
        db.session.add_all([headphones, phone, speaker])
        db.session.flush()
        db.session.add_all([
            Review(product_id=headphones.id, user_name="Sam", rating=5, date="2024-05-02",
                   comment="Best headphones I have owned.", verified=True),
            Review(product_id=headphones.id, user_name="Ana", rating=4, date="2024-06-11",
                   comment="Great sound, a bit tight.", verified=False),
        ])

    if db.session.get(SiteConfig, "categories") is None:
        db.session.add(SiteConfig(key="categories", value=[
            {
                "id": 1,
                "title": "Shop Audio",
                "items": [
                    {"label": "Headphones", "image": "https://images.unsplash.com/photo-1518441902113-c1d3b87b73dc?w=400"},
                    {"label": "Speakers", "image": "https://images.unsplash.com/photo-1585386959984-a4155223168f?w=400"},
                ],
            }
        ]))

    if db.session.get(SiteConfig, "heroes") is None:
        db.session.add(SiteConfig(key="heroes", value=[
            "https://images.unsplash.com/photo-1607082348824-0a96f2a4b9da?w=3000",
        ]))

    db.session.commit()
    print(f"Seed complete. {Product.query.count()} products.")
