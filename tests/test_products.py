from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from products import repository as product_repository
from products import service as product_service
from profiles import repository as profile_repository

NEW_PRODUCT = {
    "title": "Virgin brazilian wavy 60cm",
    "description": "Never colored.",
    "hair_type": "wavy",
    "hair_color": "dark brown",
    "hair_length": 60,
    "weight_grams": 120,
    "hair_origin": "brazil",
    "hair_texture": "",
    "price_cents": 45000,
}


def _product(**overrides) -> dict:
    row = {
        "id": 7,
        "seller_id": "seller-1",
        "title": "Virgin brazilian wavy 60cm",
        "price_cents": 45000,
        "is_available": True,
        "created_at": datetime.now(timezone.utc),
    }
    row.update(overrides)
    return row


def test_edit_window_boundaries():
    created = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert product_service.is_within_edit_window(created, now=created + timedelta(minutes=30))
    assert not product_service.is_within_edit_window(created, now=created + timedelta(minutes=30, seconds=1))
    # Naive timestamps are treated as UTC.
    assert product_service.is_within_edit_window(created.replace(tzinfo=None), now=created + timedelta(minutes=5))


def test_list_products_clamps_paging(client, monkeypatch, returns):
    fake = returns([_product(featured_type="premium", featured_priority=3)])
    monkeypatch.setattr(product_repository, "list_products", fake)

    resp = client.get("/api/products", params={"page": 3, "limit": 20, "search": "  wavy ", "hair_type": "wavy"})

    assert resp.status_code == 200
    assert resp.json()[0]["featured_type"] == "premium"
    _, kwargs = fake.calls[0]
    assert kwargs["limit"] == 20
    assert kwargs["offset"] == 40
    assert kwargs["search"] == "wavy"
    assert kwargs["hair_color"] == ""


def test_get_product_includes_images_and_can_edit(client, monkeypatch, returns):
    old = _product(created_at=datetime.now(timezone.utc) - timedelta(hours=2))
    monkeypatch.setattr(product_repository, "get_product_detail", returns(old))
    monkeypatch.setattr(product_repository, "list_product_images", returns([{"id": 1, "image_url": "data:x"}]))

    resp = client.get("/api/products/7")

    assert resp.status_code == 200
    body = resp.json()
    assert body["can_edit"] is False
    assert body["images"] == [{"id": 1, "image_url": "data:x"}]


def test_get_missing_product_is_404(client, monkeypatch, returns):
    monkeypatch.setattr(product_repository, "get_product_detail", returns(None))
    assert client.get("/api/products/999").status_code == 404


def test_create_product_requires_seller(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(profile_repository, "is_seller", returns(False))

    resp = client.post("/api/products", json=NEW_PRODUCT)

    assert resp.status_code == 403
    assert resp.json()["detail"] == "User must be a seller to create products"


def test_create_product_normalizes_blank_fields(client, login, monkeypatch, returns, seller):
    login(seller)
    monkeypatch.setattr(profile_repository, "is_seller", returns(True))
    create = returns(_product())
    monkeypatch.setattr(product_repository, "create_product", create)

    resp = client.post("/api/products", json=NEW_PRODUCT)

    assert resp.status_code == 200
    args, _ = create.calls[0]
    assert args[0] == "seller-1"
    assert args[1]["hair_texture"] is None
    assert args[1]["title"] == NEW_PRODUCT["title"]


def test_create_product_validates_price(client, login, seller):
    login(seller)
    resp = client.post("/api/products", json={**NEW_PRODUCT, "price_cents": 0})
    assert resp.status_code == 422


def test_update_after_window_is_403(client, login, monkeypatch, returns, seller):
    login(seller)
    stale = _product(created_at=datetime.now(timezone.utc) - timedelta(minutes=31))
    monkeypatch.setattr(product_repository, "get_owned_product", returns(stale))
    update = returns(_product())
    monkeypatch.setattr(product_repository, "update_product", update)

    resp = client.put("/api/products/7", json=NEW_PRODUCT)

    assert resp.status_code == 403
    assert "30 minutes" in resp.json()["detail"]
    assert update.calls == []


def test_update_within_window(client, login, monkeypatch, returns, seller):
    login(seller)
    monkeypatch.setattr(product_repository, "get_owned_product", returns(_product()))
    monkeypatch.setattr(product_repository, "update_product", returns(_product(title="Updated title")))

    resp = client.put("/api/products/7", json={**NEW_PRODUCT, "title": "Updated title"})

    assert resp.status_code == 200
    assert resp.json()["title"] == "Updated title"


def test_update_someone_elses_product_is_404(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(product_repository, "get_owned_product", returns(None))
    assert client.put("/api/products/7", json=NEW_PRODUCT).status_code == 404


def test_delete_own_product_cascades(client, login, monkeypatch, returns, seller):
    login(seller)
    monkeypatch.setattr(product_repository, "get_owned_product", returns(_product()))
    cascade = returns(True)
    monkeypatch.setattr(product_repository, "delete_product_cascade", cascade)

    resp = client.delete("/api/products/7")

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert cascade.calls == [((7,), {})]


def test_add_image_to_foreign_product_is_403(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(product_repository, "get_product", returns(_product()))
    resp = client.post("/api/products/images", json={"product_id": 7, "image_url": "data:image/png;base64,AA=="})
    assert resp.status_code == 403


def test_toggle_like(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(product_repository, "get_product", returns(_product()))
    monkeypatch.setattr(product_repository, "toggle_like", returns(True))

    resp = client.post("/api/products/7/like")

    assert resp.status_code == 200
    assert resp.json() == {"liked": True}


def test_like_unknown_product_is_404(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(product_repository, "get_product", returns(None))
    assert client.post("/api/products/7/like").status_code == 404


def test_fractional_length_and_weight_are_accepted(client, login, monkeypatch, returns, seller):
    login(seller)
    monkeypatch.setattr(profile_repository, "is_seller", returns(True))
    create = returns(_product())
    monkeypatch.setattr(product_repository, "create_product", create)

    resp = client.post("/api/products", json={**NEW_PRODUCT, "hair_length": 55.5, "weight_grams": 100.25})

    assert resp.status_code == 200
    assert create.calls[0][0][1]["hair_length"] == 55.5
    assert create.calls[0][0][1]["weight_grams"] == 100.25
    assert client.post("/api/products", json={**NEW_PRODUCT, "hair_length": -1.5}).status_code == 422


def test_listing_ranks_only_live_placements(sql_log):
    asyncio.run(product_repository.list_products(search="wavy", limit=20, offset=40))

    sql, args = sql_log.statements[0]
    assert "f.is_active = true" in sql
    assert "f.expires_at > now()" in sql
    assert sql.index("WHEN 'premium' THEN 3") < sql.index("WHEN 'standard' THEN 2") < sql.index("WHEN 'highlight' THEN 1")
    assert "ORDER BY featured_priority DESC, p.created_at DESC" in sql
    assert "p.is_available = true" in sql
    assert args == ("wavy", "", "", "", 20, 40)


def test_like_counts_only_a_new_like_row(sql_log):
    # The user's like already exists (concurrent request won the insert).
    assert asyncio.run(product_repository.toggle_like(7, user_id="buyer-1")) is True
    assert sql_log.sql("INSERT INTO product_likes")
    assert sql_log.sql("like_count + 1") == []


def test_like_increments_count(sql_log):
    sql_log.on("INSERT INTO product_likes", {"id": 1})

    assert asyncio.run(product_repository.toggle_like(7, user_id="buyer-1")) is True
    assert len(sql_log.sql("like_count + 1")) == 1


def test_unlike_never_drops_count_below_zero(sql_log):
    sql_log.on("DELETE FROM product_likes", {"id": 1})

    assert asyncio.run(product_repository.toggle_like(7, user_id="buyer-1")) is False
    (decrement,) = sql_log.sql("like_count - 1")
    assert "like_count > 0" in decrement
    assert sql_log.sql("INSERT INTO product_likes") == []
