"""
Chat business logic.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException

from products import repository as product_repository

from . import repository, schemas


async def _require_participant(conversation_id: int, user_id: str) -> dict[str, Any]:
    conversation = await repository.get_conversation_for_participant(conversation_id, user_id=user_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found or unauthorized")
    return conversation


async def list_conversations(user_id: str) -> list[dict[str, Any]]:
    return await repository.list_conversations_for(user_id)


async def read_messages(conversation_id: int, user_id: str) -> list[dict[str, Any]]:
    """
    Return the thread, then mark the other party's messages as read.

    The returned rows reflect read state before this call.
    """
    await _require_participant(conversation_id, user_id)
    messages = await repository.list_messages(conversation_id)
    await repository.mark_read(conversation_id, reader_id=user_id)
    return messages


async def send_message(conversation_id: int, user_id: str, payload: schemas.SendMessageRequest) -> dict[str, Any]:
    await _require_participant(conversation_id, user_id)
    return await repository.insert_message(
        conversation_id,
        sender_id=user_id,
        message=payload.message,
        message_type=payload.message_type,
        image_url=payload.image_url,
    )


async def start_conversation(user_id: str, payload: schemas.StartConversationRequest) -> dict[str, Any]:
    product = await product_repository.get_product(payload.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    seller_id = str(product["seller_id"])
    if seller_id == user_id:
        raise HTTPException(status_code=400, detail="Cannot start a conversation about your own product")

    existing = await repository.get_conversation_by_parties(
        buyer_id=user_id,
        seller_id=seller_id,
        product_id=payload.product_id,
    )
    if existing is not None:
        return existing

    initial_message = (payload.initial_message or "").strip() or None
    return await repository.create_conversation(
        buyer_id=user_id,
        seller_id=seller_id,
        product_id=payload.product_id,
        initial_message=initial_message,
    )
