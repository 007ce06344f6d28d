from __future__ import annotations

import asyncio

from products import repository as product_repository
from profiles import repository as profile_repository
from reviews import repository as review_repository
from transactions import repository as transaction_repository


def _delivered(**overrides) -> dict:
    row = {"id": 11, "buyer_id": "buyer-1", "seller_id": "seller-1", "status": "delivered"}
    row.update(overrides)
    return row


def test_buyer_reviews_seller_and_rating_is_recomputed(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(transaction_repository, "get_transaction", returns(_delivered()))
    insert = returns({"id": 3, "rating": 5, "review_type": "buyer_to_seller"})
    monkeypatch.setattr(review_repository, "insert_transaction_review", insert)
    monkeypatch.setattr(review_repository, "rating_stats", returns((4.5, 2)))
    apply = returns(None)
    monkeypatch.setattr(profile_repository, "apply_rating", apply)

    resp = client.post("/api/reviews", json={"transaction_id": 11, "rating": 5, "comment": "Lovely hair"})

    assert resp.status_code == 200
    _, kwargs = insert.calls[0]
    assert kwargs["reviewed_id"] == "seller-1"
    assert kwargs["review_type"] == "buyer_to_seller"
    assert apply.calls == [(("seller-1",), {"rating_avg": 4.5, "rating_count": 2})]


def test_seller_reviews_buyer(client, login, monkeypatch, returns, seller):
    login(seller)
    monkeypatch.setattr(transaction_repository, "get_transaction", returns(_delivered(status="completed")))
    insert = returns({"id": 4})
    monkeypatch.setattr(review_repository, "insert_transaction_review", insert)
    monkeypatch.setattr(review_repository, "rating_stats", returns((5.0, 1)))
    monkeypatch.setattr(profile_repository, "apply_rating", returns(None))

    assert client.post("/api/reviews", json={"transaction_id": 11, "rating": 4}).status_code == 200
    assert insert.calls[0][1]["review_type"] == "seller_to_buyer"
    assert insert.calls[0][1]["reviewed_id"] == "buyer-1"


def test_review_before_delivery_is_400(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(transaction_repository, "get_transaction", returns(_delivered(status="shipped")))
    assert client.post("/api/reviews", json={"transaction_id": 11, "rating": 4}).status_code == 400


def test_duplicate_transaction_review_is_409(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(transaction_repository, "get_transaction", returns(_delivered()))
    monkeypatch.setattr(review_repository, "insert_transaction_review", returns(None))
    assert client.post("/api/reviews", json={"transaction_id": 11, "rating": 4}).status_code == 409


def test_rating_out_of_range_is_422(client, login, buyer):
    login(buyer)
    assert client.post("/api/reviews", json={"transaction_id": 11, "rating": 6}).status_code == 422


def test_cannot_review_own_profile(client, login, buyer):
    login(buyer)
    resp = client.post("/api/profile-reviews", json={"reviewed_id": "buyer-1", "rating": 5})
    assert resp.status_code == 400


def test_profile_review_once_per_pair(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(review_repository, "get_profile_review_by_pair", returns({"id": 1}))
    resp = client.post("/api/profile-reviews", json={"reviewed_id": "seller-1", "rating": 5})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "You have already reviewed this profile"


def test_only_reviewed_user_may_respond(client, login, monkeypatch, returns, buyer, seller):
    monkeypatch.setattr(review_repository, "get_review_target", returns("seller-1"))
    insert = returns({"id": 9, "response_text": "Thanks!"})
    monkeypatch.setattr(review_repository, "insert_review_response", insert)

    login(buyer)
    payload = {"review_id": 3, "review_type": "transaction", "response_text": "Thanks!"}
    assert client.post("/api/review-responses", json=payload).status_code == 403

    login(seller)
    resp = client.post("/api/review-responses", json=payload)
    assert resp.status_code == 200
    assert insert.calls[0][1]["responder_id"] == "seller-1"


def test_public_profile_attaches_responses(client, monkeypatch, returns):
    monkeypatch.setattr(profile_repository, "get_profile", returns({"user_id": "seller-1", "name": "Sol"}))
    monkeypatch.setattr(profile_repository, "is_blocked", returns(False))
    monkeypatch.setattr(product_repository, "list_seller_products", returns([{"id": 7}]))
    monkeypatch.setattr(review_repository, "list_transaction_reviews_for", returns([{"id": 3}, {"id": 4}]))
    monkeypatch.setattr(review_repository, "list_profile_reviews_for", returns([]))

    async def _responses(review_type, review_ids):
        if review_type == "transaction":
            return [{"id": 1, "review_id": 4, "response_text": "Thanks"}]
        return []

    monkeypatch.setattr(review_repository, "list_responses", _responses)

    resp = client.get("/api/public-profile/seller-1")

    assert resp.status_code == 200
    body = resp.json()
    assert body["is_blocked"] is False
    assert [r["responses"] for r in body["reviews_received"]] == [[], [{"id": 1, "review_id": 4, "response_text": "Thanks"}]]
    assert body["profile_reviews"] == []


def test_rating_stats_combines_visible_profile_and_transaction_reviews(sql_log):
    sql_log.on("UNION ALL", {"rating_avg": 4.5, "rating_count": 2})

    assert asyncio.run(review_repository.rating_stats("seller-1")) == (4.5, 2)

    sql, args = sql_log.statements[0]
    assert "COALESCE(avg(x.rating), 0)" in sql
    profile_part, transaction_part = sql.split("UNION ALL")
    assert "FROM profile_reviews WHERE reviewed_id = $1 AND is_visible = true" in profile_part
    assert "FROM reviews WHERE reviewed_id = $1" in transaction_part
    assert args == ("seller-1",)


def test_rating_stats_without_reviews_is_zero(sql_log):
    sql_log.on("UNION ALL", {"rating_avg": 0.0, "rating_count": 0})
    assert asyncio.run(review_repository.rating_stats("nobody")) == (0.0, 0)

    sql_log.on("UNION ALL", None)
    assert asyncio.run(review_repository.rating_stats("nobody")) == (0.0, 0)
