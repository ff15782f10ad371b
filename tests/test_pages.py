import pytest

from storefront.app.config import TestConfig
from storefront.app.extensions import db
from storefront.app.factory import create_app
from storefront.modules.catalog.records import Product, Review


@pytest.fixture()
def lamp_id(ctx, catalog):
    catalog.save_product(Product(title="Desk Fan", price=15.0))
    return catalog.save_product(Product(
        title="Desk Lamp",
        price=25.0,
        description="Warm light",
        reviews=(Review(user_name="Ana", rating=4, comment="Bright enough"),),
    ))


def add_to_cart(client, product_id):
    return client.post("/cart/add", data={"product_id": str(product_id)})


def test_home_lists_products(client, lamp_id):
    r = client.get("/")
    assert r.status_code == 200
    assert b"Desk Lamp" in r.data
    assert b"Desk Fan" in r.data


def test_home_with_empty_catalog(client):
    r = client.get("/")
    assert r.status_code == 200
    assert b"No products found." in r.data


def test_detail_page(client, lamp_id):
    r = client.get(f"/?view=detail&product={lamp_id}")
    assert r.status_code == 200
    assert b"<h1>Desk Lamp</h1>" in r.data
    assert b"Bright enough" in r.data
    assert b"Add to Cart" in r.data
    # other products are offered as related items
    assert b"Desk Fan" in r.data


def test_legacy_product_link_opens_detail(client, lamp_id):
    r = client.get(f"/?product={lamp_id}")
    assert b"<h1>Desk Lamp</h1>" in r.data


def test_stale_product_link_renders_home(client, lamp_id):
    r = client.get("/?view=detail&product=999")
    assert r.status_code == 200
    assert b"Deals &amp; Trending" in r.data
    assert b"<h1>" not in r.data


def test_unknown_view_renders_home(client, lamp_id):
    r = client.get("/?view=wishlist")
    assert b"Deals &amp; Trending" in r.data


def test_empty_cart_has_no_checkout(client):
    r = client.get("/?view=cart")
    assert b"Your cart is empty." in r.data
    assert b"Continue shopping" in r.data
    assert b"Proceed to checkout" not in r.data


def test_add_to_cart_redirects_to_cart(client, lamp_id):
    r = add_to_cart(client, lamp_id)
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/?view=cart")

    r = client.get("/?view=cart")
    assert b"Desk Lamp" in r.data
    assert b"Added to cart." in r.data
    assert b"Cart (1)" in r.data
    assert b"Proceed to checkout" in r.data


def test_add_unknown_product_goes_home(client, lamp_id):
    r = add_to_cart(client, 999)
    assert r.headers["Location"].endswith("/?view=home")

    r = client.get("/?view=cart")
    assert b"Your cart is empty." in r.data


def test_cart_is_per_session(app, client, lamp_id):
    add_to_cart(client, lamp_id)

    other = app.test_client()
    r = other.get("/?view=cart")
    assert b"Your cart is empty." in r.data


def test_remove_cart_line(client, lamp_id):
    add_to_cart(client, lamp_id)
    add_to_cart(client, lamp_id)

    client.post("/cart/remove", data={"index": "0"})
    r = client.get("/?view=cart")
    assert b"Cart (1)" in r.data


def test_checkout_requires_confirmation(client, lamp_id):
    add_to_cart(client, lamp_id)

    r = client.post("/cart/checkout", data={}, follow_redirects=True)
    assert b"Please confirm the order." in r.data
    assert b"Cart (1)" in r.data

    r = client.post("/cart/checkout", data={"confirm": "yes"}, follow_redirects=True)
    assert b"Order successful!" in r.data
    assert b"Cart (0)" in r.data


def test_search_filters_home(client, lamp_id):
    r = client.post("/search", data={"q": "lamp"}, follow_redirects=True)
    assert b"Desk Lamp" in r.data
    assert b"Desk Fan" not in r.data

    r = client.post("/navigate", data={"view": "home"}, follow_redirects=True)
    assert b"Desk Fan" in r.data


def test_navigate_form_redirects_to_address(client, lamp_id):
    r = client.post("/navigate", data={"view": "detail", "product": str(lamp_id)})
    assert r.headers["Location"].endswith(f"/?view=detail&product={lamp_id}")


# admin screens

def test_admin_view_without_login_shows_login(client):
    r = client.get("/?view=admin")
    assert b"Sign in" in r.data
    assert b"Admin Control" not in r.data


def test_wrong_credentials(client):
    r = client.post("/login", data={"username": "admin", "password": "nope"}, follow_redirects=True)
    assert b"Invalid credentials" in r.data
    assert b"Sign in" in r.data


def test_login_then_logout(client, lamp_id):
    r = client.post("/login", data={"username": "admin", "password": "admin123"}, follow_redirects=True)
    assert b"Admin Control" in r.data
    assert b"Desk Lamp" in r.data

    client.post("/logout")
    r = client.get("/?view=admin")
    assert b"Sign in" in r.data


def test_admin_form_requires_login(client, catalog):
    r = client.post("/admin/products", data={"id": "0", "title": "Sneaky"})
    assert r.headers["Location"].endswith("/?view=login")
    assert all(p.title != "Sneaky" for p in catalog.products)


def test_admin_form_creates_product(admin_client, admin_catalog):
    r = admin_client.post("/admin/products", data={
        "id": "0",
        "title": "Standing Desk",
        "price": "349.5",
        "images": "a.jpg\nb.jpg\n",
        "reviews_json": '[{"user_name": "Kim", "rating": 5, "comment": "Solid"}]',
    }, follow_redirects=True)

    assert b"Product saved." in r.data
    (product,) = admin_catalog.products
    assert product.title == "Standing Desk"
    assert product.price == 349.5
    assert product.images == ("a.jpg", "b.jpg")
    assert [rv.comment for rv in product.reviews] == ["Solid"]


def test_admin_form_rejects_bad_reviews_json(admin_client, admin_catalog):
    r = admin_client.post("/admin/products", data={
        "id": "0", "title": "Broken", "reviews_json": "{not json",
    }, follow_redirects=True)
    assert b"Reviews must be a JSON list." in r.data
    assert admin_catalog.products == ()


def test_admin_delete_needs_confirm(admin_client, admin_catalog):
    pid = admin_catalog.save_product(Product(title="Old Stock", price=1.0))

    admin_client.post(f"/admin/products/{pid}/delete", data={})
    assert admin_catalog.find(pid) is not None

    r = admin_client.post(f"/admin/products/{pid}/delete", data={"confirm": "yes"}, follow_redirects=True)
    assert b"Product deleted." in r.data
    assert admin_catalog.find(pid) is None


def test_admin_site_assets(admin_client, admin_catalog):
    admin_client.post("/admin/site-assets", data={
        "heroes": "one.jpg\n\ntwo.jpg",
        "categories": '[{"id": 1, "title": "Audio", "items": [{"label": "Buds", "image": "b.jpg"}]}]',
    })
    assert admin_catalog.heroes == ("one.jpg", "two.jpg")
    assert admin_catalog.categories[0].title == "Audio"

    r = admin_client.get("/")
    assert b'src="one.jpg"' in r.data
    assert b"Buds" in r.data


def test_admin_failed_save_flashes_error(admin_client, store, admin_catalog):
    store.fail_on = {"insert_product"}
    r = admin_client.post("/admin/products", data={"id": "0", "title": "Nope"}, follow_redirects=True)
    assert b"Saving the product did not complete." in r.data


def test_admin_edit_link_prefills_form(admin_client, admin_catalog):
    pid = admin_catalog.save_product(Product(
        title="Reading Lamp", price=30.0, rating=4.2, reviews_count=17, description="Clamp-on",
    ))

    r = admin_client.get("/?view=admin")
    assert f"&edit={pid}\">Edit</a>".encode() in r.data

    r = admin_client.get(f"/?view=admin&edit={pid}")
    assert f"Edit product #{pid}".encode() in r.data
    assert b'value="Reading Lamp"' in r.data
    assert b'name="rating" type="number" step="0.1" min="0" max="5" value="4.2"' in r.data
    assert b">Clamp-on</textarea>" in r.data


def test_admin_form_edit_keeps_untouched_columns(admin_client, admin_catalog):
    pid = admin_catalog.save_product(Product(
        title="Lamp",
        price=10.0,
        rating=4.2,
        reviews_count=17,
        images=("lamp.jpg",),
        description="Warm light",
        reviews=(Review(user_name="Ana", rating=4, comment="Bright"),),
    ))

    admin_client.post("/admin/products", data={"id": str(pid), "title": "Lamp v2", "price": "12"})

    product = admin_catalog.find(pid)
    assert product.title == "Lamp v2"
    assert product.price == 12.0
    assert product.rating == 4.2
    assert product.reviews_count == 17
    assert product.images == ("lamp.jpg",)
    assert product.description == "Warm light"
    assert [rv.comment for rv in product.reviews] == ["Bright"]


def test_view_states_stay_bounded_for_cookieless_clients():
    class FewSessions(TestConfig):
        VIEW_STATE_MAX_SESSIONS = 5

    app = create_app(FewSessions)
    with app.app_context():
        db.create_all()

    for _ in range(50):
        app.test_client().get("/")

    assert len(app.extensions["storefront.view_states"]) == 5


def test_logout_forgets_view_state(app, client, lamp_id):
    add_to_cart(client, lamp_id)
    registry = app.extensions["storefront.view_states"]
    assert len(registry) == 1

    client.post("/logout")

    r = client.get("/?view=cart")
    assert b"Your cart is empty." in r.data
    assert len(registry) == 1
