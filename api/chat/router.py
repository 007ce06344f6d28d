"""
Chat API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.get("/chat/conversations")
async def list_conversations(current_user: dict = Depends(auth_dependencies.get_current_user)) -> list[dict]:
    return await service.list_conversations(auth_dependencies.user_id(current_user))


@router.post("/chat/conversations")
async def start_conversation(
    request: schemas.StartConversationRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.start_conversation(auth_dependencies.user_id(current_user), request)


@router.get("/chat/conversations/{conversation_id}/messages")
async def read_messages(
    conversation_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> list[dict]:
    return await service.read_messages(conversation_id, auth_dependencies.user_id(current_user))


@router.post("/chat/conversations/{conversation_id}/messages")
async def send_message(
    conversation_id: int,
    request: schemas.SendMessageRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.send_message(conversation_id, auth_dependencies.user_id(current_user), request)
