from __future__ import annotations

from admin import dependencies as admin_dependencies
from admin import repository as admin_repository
from admin import service as admin_service
from auth import security
from auth import service as auth_service
from products import repository as product_repository
from profiles import repository as profile_repository
from reviews import repository as review_repository
from transactions import repository as transaction_repository


def _admin_cookie(client) -> None:
    token = security.build_session_token(subject="site_admin", token_type=security.ADMIN_TOKEN)
    client.cookies.set(admin_dependencies.ADMIN_COOKIE_NAME, token)


def _user_session(client, monkeypatch, user: dict) -> None:
    async def _resolve(session_token):
        return user

    monkeypatch.setattr(auth_service, "get_user_from_session", _resolve)
    client.cookies.set("session_token", "user-token")


def test_direct_login_disabled_without_password(client, monkeypatch, returns):
    upsert = returns(None)
    monkeypatch.setattr(admin_repository, "upsert_admin_user", upsert)

    resp = client.post("/api/admin/direct-login", json={"username": "admin", "password": "anything"})

    assert resp.status_code == 401
    assert upsert.calls == []


def test_direct_login_sets_signed_cookie(client, monkeypatch, returns):
    monkeypatch.setenv("ADMIN_PASSWORD", "correct horse")
    upsert = returns(None)
    monkeypatch.setattr(admin_repository, "upsert_admin_user", upsert)

    bad = client.post("/api/admin/direct-login", json={"username": "admin", "password": "wrong"})
    assert bad.status_code == 401

    resp = client.post("/api/admin/direct-login", json={"username": "admin", "password": "correct horse"})
    assert resp.status_code == 200
    token = resp.cookies.get("admin_session")
    assert security.decode_session_token(token, token_type=security.ADMIN_TOKEN)["sub"] == "site_admin"
    assert upsert.calls == [(("site_admin",), {"role": "super_admin", "permissions": {"all": True}})]

    check = client.get("/api/admin/check")
    assert check.status_code == 200
    assert check.json()["role"] == "super_admin"
    assert check.json()["source"] == "cookie"


def test_check_without_session_is_401(client):
    assert client.get("/api/admin/check").status_code == 401


def test_forged_cookie_is_not_admin(client):
    client.cookies.set("admin_session", "gabriel_admin_session")
    assert client.get("/api/admin/check").status_code == 401
    assert client.get("/api/admin/stats").status_code == 403


def test_regular_user_is_403(client, monkeypatch, returns, buyer):
    _user_session(client, monkeypatch, buyer)
    monkeypatch.setattr(admin_repository, "get_admin_user", returns(None))

    assert client.get("/api/admin/check").status_code == 403
    resp = client.get("/api/admin/users")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Not an admin"


def test_admin_users_row_grants_access(client, monkeypatch, returns, buyer):
    _user_session(client, monkeypatch, buyer)
    monkeypatch.setattr(
        admin_repository,
        "get_admin_user",
        returns({"user_id": "buyer-1", "role": "moderator", "permissions": '{"reviews": true}'}),
    )

    resp = client.get("/api/admin/check")

    assert resp.status_code == 200
    assert resp.json() == {
        "admin_id": "buyer-1",
        "role": "moderator",
        "source": "database",
        "permissions": {"reviews": True},
    }


def test_admin_cookie_takes_precedence(client, monkeypatch, returns):
    _admin_cookie(client)
    lookup = returns(None)
    monkeypatch.setattr(admin_repository, "get_admin_user", lookup)
    monkeypatch.setattr(profile_repository, "list_profiles_with_block_status", returns([{"user_id": "u1", "is_blocked": True}]))

    resp = client.get("/api/admin/users")

    assert resp.status_code == 200
    assert resp.json() == [{"user_id": "u1", "is_blocked": True}]
    assert lookup.calls == []


def test_setup_key(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(admin_repository, "consume_setup_key", returns(False))
    assert client.post("/api/admin/setup", json={"setup_key": "used"}).status_code == 400

    consume = returns(True)
    monkeypatch.setattr(admin_repository, "consume_setup_key", consume)
    resp = client.post("/api/admin/setup", json={"setup_key": " fresh "})
    assert resp.status_code == 200
    assert consume.calls == [(("fresh",), {"user_id": "buyer-1"})]


def test_stats_commission(client, monkeypatch, returns):
    _admin_cookie(client)
    monkeypatch.setattr(
        admin_repository,
        "marketplace_counts",
        returns(
            {
                "total_users": 10,
                "total_sellers": 4,
                "total_buyers": 8,
                "total_products": 12,
                "total_transactions": 3,
                "gross_volume_cents": 12345,
                "featured_revenue_cents": 2000,
            }
        ),
    )

    body = client.get("/api/admin/stats").json()

    assert body["total_revenue_cents"] == 617
    assert body["featured_revenue_cents"] == 2000
    assert body["total_products"] == 12


def test_commission_uses_configured_rate(monkeypatch):
    monkeypatch.setenv("COMMISSION_RATE", "0.1")
    assert admin_service.commission_cents(999) == 99
    assert admin_service.commission_cents(0) == 0


def test_block_action_with_duration(client, monkeypatch, returns):
    _admin_cookie(client)
    record = returns({"id": 1, "action_type": "block"})
    monkeypatch.setattr(admin_repository, "record_action", record)

    resp = client.post(
        "/api/admin/actions",
        json={"target_user_id": "buyer-1", "action_type": "block", "reason": "spam", "duration_days": 7},
    )

    assert resp.status_code == 200
    kwargs = record.calls[0][1]
    assert kwargs["admin_id"] == "site_admin"
    assert kwargs["block_reason"] == "spam"
    assert kwargs["block_expires_at"] is not None


def test_unknown_action_is_422(client):
    _admin_cookie(client)
    resp = client.post("/api/admin/actions", json={"target_user_id": "buyer-1", "action_type": "ban"})
    assert resp.status_code == 422


def test_feature_product(client, monkeypatch, returns):
    _admin_cookie(client)
    monkeypatch.setattr(product_repository, "get_product", returns({"id": 7, "seller_id": "seller-1"}))
    create = returns({"id": 2, "featured_type": "premium"})
    monkeypatch.setattr(admin_repository, "create_featured_product", create)

    resp = client.post(
        "/api/admin/featured-products",
        json={"product_id": 7, "featured_type": "premium", "duration_days": 14, "price_cents": 5000},
    )

    assert resp.status_code == 200
    kwargs = create.calls[0][1]
    assert kwargs["seller_id"] == "seller-1"
    assert kwargs["price_paid_cents"] == 5000


def test_feature_unknown_product_is_404(client, monkeypatch, returns):
    _admin_cookie(client)
    monkeypatch.setattr(product_repository, "get_product", returns(None))
    resp = client.post(
        "/api/admin/featured-products",
        json={"product_id": 7, "featured_type": "standard", "duration_days": 1, "price_cents": 0},
    )
    assert resp.status_code == 404


def test_delete_review_recomputes_rating(client, monkeypatch, returns):
    _admin_cookie(client)
    delete = returns("seller-1")
    monkeypatch.setattr(review_repository, "delete_review", delete)
    monkeypatch.setattr(review_repository, "rating_stats", returns((0.0, 0)))
    apply = returns(None)
    monkeypatch.setattr(profile_repository, "apply_rating", apply)

    resp = client.delete("/api/admin/reviews/3", params={"type": "profile"})

    assert resp.status_code == 200
    assert delete.calls == [(("profile", 3), {})]
    assert apply.calls == [(("seller-1",), {"rating_avg": 0.0, "rating_count": 0})]


def test_delete_review_requires_type(client):
    _admin_cookie(client)
    assert client.delete("/api/admin/reviews/3").status_code == 422


def test_delete_user_recomputes_affected_ratings(client, monkeypatch, returns):
    _admin_cookie(client)
    monkeypatch.setattr(admin_repository, "reviewed_by", returns(["seller-1", "seller-2"]))
    cascade = returns(True)
    monkeypatch.setattr(admin_repository, "delete_user_cascade", cascade)
    monkeypatch.setattr(review_repository, "rating_stats", returns((4.0, 1)))
    apply = returns(None)
    monkeypatch.setattr(profile_repository, "apply_rating", apply)

    resp = client.delete("/api/admin/users/buyer-1")

    assert resp.status_code == 200
    assert cascade.calls == [(("buyer-1",), {})]
    assert [c[0][0] for c in apply.calls] == ["seller-1", "seller-2"]


def test_release_escrow_endpoint(client, monkeypatch, returns):
    _admin_cookie(client)
    monkeypatch.setattr(
        transaction_repository,
        "get_transaction",
        returns({"id": 11, "status": "delivered", "escrow_released": False}),
    )
    release = returns({"id": 11, "status": "completed", "escrow_released": True})
    monkeypatch.setattr(transaction_repository, "release_escrow", release)

    resp = client.post("/api/admin/transactions/11/release-escrow", json={"comment": "delivery verified"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert release.calls == [((11,), {"admin_id": "site_admin", "comment": "delivery verified"})]


def test_send_message_and_inbox(client, login, monkeypatch, returns, buyer):
    _admin_cookie(client)
    send = returns({"id": 1, "message": "Please update your listing"})
    monkeypatch.setattr(admin_repository, "send_admin_message", send)

    resp = client.post("/api/admin/send-message", json={"user_id": "buyer-1", "message": "Please update your listing"})
    assert resp.status_code == 200
    assert send.calls[0][1]["message_type"] == "notification"
    assert send.calls[0][1]["subject"] is None

    login(buyer)
    monkeypatch.setattr(admin_repository, "mark_admin_message_read", returns(False))
    assert client.post("/api/admin-messages/1/read").status_code == 404

    monkeypatch.setattr(admin_repository, "list_inbox", returns([{"id": 1, "is_read": False}]))
    assert client.get("/api/admin-messages").json() == [{"id": 1, "is_read": False}]


def test_blank_admin_message_is_422(client, monkeypatch, returns):
    _admin_cookie(client)
    send = returns({"id": 1})
    monkeypatch.setattr(admin_repository, "send_admin_message", send)

    resp = client.post("/api/admin/send-message", json={"user_id": "buyer-1", "message": "   "})

    assert resp.status_code == 422
    assert send.calls == []
