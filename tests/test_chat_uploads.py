from __future__ import annotations

import asyncio
import base64

from chat import repository as chat_repository
from products import repository as product_repository
from uploads import repository as upload_repository

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_start_conversation_about_own_product_is_400(client, login, monkeypatch, returns, seller):
    login(seller)
    monkeypatch.setattr(product_repository, "get_product", returns({"id": 7, "seller_id": "seller-1"}))
    resp = client.post("/api/chat/conversations", json={"product_id": 7})
    assert resp.status_code == 400


def test_start_conversation_reuses_existing(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(product_repository, "get_product", returns({"id": 7, "seller_id": "seller-1"}))
    monkeypatch.setattr(chat_repository, "get_conversation_by_parties", returns({"id": 5}))
    create = returns({"id": 6})
    monkeypatch.setattr(chat_repository, "create_conversation", create)

    resp = client.post("/api/chat/conversations", json={"product_id": 7, "initial_message": "Hi!"})

    assert resp.status_code == 200
    assert resp.json() == {"id": 5}
    assert create.calls == []


def test_start_conversation_with_opening_message(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(product_repository, "get_product", returns({"id": 7, "seller_id": "seller-1"}))
    monkeypatch.setattr(chat_repository, "get_conversation_by_parties", returns(None))
    create = returns({"id": 6})
    monkeypatch.setattr(chat_repository, "create_conversation", create)

    resp = client.post("/api/chat/conversations", json={"product_id": 7, "initial_message": "  Is it still available? "})

    assert resp.status_code == 200
    assert create.calls[0][1] == {
        "buyer_id": "buyer-1",
        "seller_id": "seller-1",
        "product_id": 7,
        "initial_message": "Is it still available?",
    }


def test_reading_messages_marks_them_read(client, login, monkeypatch, returns, buyer):
    login(buyer)
    monkeypatch.setattr(chat_repository, "get_conversation_for_participant", returns({"id": 5}))
    monkeypatch.setattr(chat_repository, "list_messages", returns([{"id": 1, "is_read": False}]))
    mark = returns(1)
    monkeypatch.setattr(chat_repository, "mark_read", mark)

    resp = client.get("/api/chat/conversations/5/messages")

    assert resp.status_code == 200
    assert resp.json() == [{"id": 1, "is_read": False}]
    assert mark.calls == [((5,), {"reader_id": "buyer-1"})]


def test_outsider_cannot_post(client, login, monkeypatch, returns):
    login({"id": "stranger"})
    monkeypatch.setattr(chat_repository, "get_conversation_for_participant", returns(None))
    resp = client.post("/api/chat/conversations/5/messages", json={"message": "hello"})
    assert resp.status_code == 404


def test_upload_stores_data_url(client, login, monkeypatch, returns, seller):
    login(seller)
    insert = returns(None)
    monkeypatch.setattr(upload_repository, "insert_image", insert)

    resp = client.post("/api/upload", files={"file": ("hair.png", PNG_BYTES, "image/png")})

    assert resp.status_code == 200
    body = resp.json()
    assert body["url"] == "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")
    assert body["size"] == len(PNG_BYTES)
    assert insert.calls[0][1]["user_id"] == "seller-1"
    assert insert.calls[0][1]["image_id"] == body["id"]


def test_upload_rejects_non_images(client, login, seller):
    login(seller)
    resp = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400


def test_upload_enforces_size_limit(client, login, monkeypatch, seller):
    login(seller)
    monkeypatch.setenv("MAX_IMAGE_UPLOAD_BYTES", "16")
    resp = client.post("/api/upload", files={"file": ("hair.png", PNG_BYTES, "image/png")})
    assert resp.status_code == 413


def test_get_image(client, monkeypatch, returns):
    monkeypatch.setattr(upload_repository, "get_image", returns({"data_url": "data:image/png;base64,AA=="}))
    assert client.get("/api/images/abc").json() == {"url": "data:image/png;base64,AA=="}

    monkeypatch.setattr(upload_repository, "get_image", returns(None))
    assert client.get("/api/images/abc").status_code == 404


def test_unread_count_skips_own_and_read_messages(sql_log):
    asyncio.run(chat_repository.list_conversations_for("buyer-1"))

    sql, args = sql_log.statements[0]
    unread = sql[sql.index("SELECT count(*)") : sql.index("AS unread_count")]
    assert "m.sender_id <> $1" in unread
    assert "m.is_read = false" in unread
    assert "cc.buyer_id = $1 OR cc.seller_id = $1" in sql
    assert args == ("buyer-1",)
