"""
Transaction API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.post("/transactions")
async def create_transaction(
    request: schemas.CreateTransactionRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.create_transaction(auth_dependencies.user_id(current_user), request)


@router.get("/transactions")
async def list_transactions(current_user: dict = Depends(auth_dependencies.get_current_user)) -> list[dict]:
    return await service.list_transactions(auth_dependencies.user_id(current_user))


@router.get("/transactions/{transaction_id}")
async def get_transaction(
    transaction_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.get_transaction(transaction_id, auth_dependencies.user_id(current_user))


@router.put("/transactions/{transaction_id}/status")
async def update_status(
    transaction_id: int,
    request: schemas.StatusUpdateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.update_status(transaction_id, auth_dependencies.user_id(current_user), request)
