"""
Transaction lifecycle.

States and who may move a transaction between them:

    pending   -> paid       (buyer)
    pending   -> cancelled  (buyer, seller)
    paid      -> shipped    (seller)
    paid      -> cancelled  (seller)
    shipped   -> delivered  (buyer, stamps delivery_confirmed_at)
    delivered -> completed  (admin only, via escrow release)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException

from products import repository as product_repository

from . import repository, schemas

logger = logging.getLogger(__name__)

BUYER = "buyer"
SELLER = "seller"

TRANSITIONS: dict[tuple[str, str], frozenset[str]] = {
    ("pending", "paid"): frozenset({BUYER}),
    ("pending", "cancelled"): frozenset({BUYER, SELLER}),
    ("paid", "shipped"): frozenset({SELLER}),
    ("paid", "cancelled"): frozenset({SELLER}),
    ("shipped", "delivered"): frozenset({BUYER}),
}


def party_role(transaction: dict[str, Any], user_id: str) -> str | None:
    if str(transaction["buyer_id"]) == user_id:
        return BUYER
    if str(transaction["seller_id"]) == user_id:
        return SELLER
    return None


def check_transition(current: str, target: str, role: str) -> None:
    """
    Raise unless `role` may move a transaction from `current` to `target`.
    """
    allowed_roles = TRANSITIONS.get((current, target))
    if allowed_roles is None:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change transaction status from '{current}' to '{target}'",
        )
    if role not in allowed_roles:
        raise HTTPException(
            status_code=403,
            detail=f"Only the {' or '.join(sorted(allowed_roles))} can set status '{target}'",
        )


async def create_transaction(buyer_id: str, payload: schemas.CreateTransactionRequest) -> dict[str, Any]:
    product = await product_repository.get_product(payload.product_id)
    if product is None or not bool(product["is_available"]):
        raise HTTPException(status_code=404, detail="Product not found or not available")

    if str(product["seller_id"]) == buyer_id:
        raise HTTPException(status_code=400, detail="Cannot buy your own product")

    transaction = await repository.create_transaction(
        buyer_id=buyer_id,
        seller_id=str(product["seller_id"]),
        product_id=int(product["id"]),
        amount_cents=int(product["price_cents"]),
        notes=payload.notes,
        payment_method=payload.payment_method,
    )
    logger.info(
        "transaction_created transaction_id=%s product_id=%s buyer_id=%s amount_cents=%s",
        transaction["id"],
        product["id"],
        buyer_id,
        transaction["amount_cents"],
    )
    return transaction


async def list_transactions(user_id: str) -> list[dict[str, Any]]:
    return await repository.list_for_user(user_id)


async def _get_for_party(transaction_id: int, user_id: str) -> tuple[dict[str, Any], str]:
    transaction = await repository.get_transaction(transaction_id)
    role = party_role(transaction, user_id) if transaction is not None else None
    if transaction is None or role is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction, role


async def get_transaction(transaction_id: int, user_id: str) -> dict[str, Any]:
    transaction, _ = await _get_for_party(transaction_id, user_id)
    return {**transaction, "updates": await repository.list_updates(transaction_id)}


async def update_status(
    transaction_id: int,
    user_id: str,
    payload: schemas.StatusUpdateRequest,
) -> dict[str, Any]:
    transaction, role = await _get_for_party(transaction_id, user_id)
    current = str(transaction["status"])
    check_transition(current, payload.status, role)

    updated = await repository.change_status(
        transaction_id,
        from_status=current,
        to_status=payload.status,
        updated_by=user_id,
        comment=payload.comment,
    )
    if updated is None:
        raise HTTPException(status_code=409, detail="Transaction status changed concurrently, reload and retry")

    logger.info(
        "transaction_status_changed transaction_id=%s from=%s to=%s by=%s",
        transaction_id,
        current,
        payload.status,
        user_id,
    )
    return updated


async def release_escrow(transaction_id: int, admin_id: str, comment: str | None = None) -> dict[str, Any]:
    transaction = await repository.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    if bool(transaction["escrow_released"]):
        raise HTTPException(status_code=400, detail="Escrow already released")
    if str(transaction["status"]) != "delivered":
        raise HTTPException(status_code=400, detail="Escrow can only be released after delivery is confirmed")

    released = await repository.release_escrow(transaction_id, admin_id=admin_id, comment=comment)
    if released is None:
        raise HTTPException(status_code=409, detail="Transaction status changed concurrently, reload and retry")

    logger.info("escrow_released transaction_id=%s admin_id=%s", transaction_id, admin_id)
    return released
