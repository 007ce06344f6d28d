"""
Support desk API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from auth import dependencies as auth_dependencies

from . import dependencies, schemas, service

router = APIRouter()


@router.post("/support/login")
async def login(request: schemas.StaffLoginRequest, response: Response) -> dict:
    return await service.login(request, response)


@router.get("/support/check")
async def check(staff: dict = Depends(dependencies.get_current_staff)) -> dict:
    return service.staff_summary(staff)


@router.post("/support/logout")
async def logout(response: Response) -> dict:
    return service.logout(response)


@router.get("/support/tickets")
async def list_tickets(_: dict = Depends(dependencies.get_current_staff)) -> list[dict]:
    return await service.list_tickets()


@router.post("/support/tickets")
async def create_ticket(payload: schemas.CreateTicketRequest, request: Request) -> dict:
    user = await auth_dependencies.get_optional_user(request)
    user_id = auth_dependencies.user_id(user) if user is not None else None
    return await service.create_ticket(payload, user_id)


@router.get("/support/tickets/{ticket_id}/responses")
async def list_responses(ticket_id: int, _: dict = Depends(dependencies.get_current_staff)) -> list[dict]:
    return await service.list_responses(ticket_id)


@router.post("/support/tickets/{ticket_id}/responses")
async def add_response(
    ticket_id: int,
    request: schemas.TicketResponseRequest,
    staff: dict = Depends(dependencies.get_current_staff),
) -> dict:
    return await service.add_response(ticket_id, staff, request)


@router.put("/support/tickets/{ticket_id}/status")
async def update_status(
    ticket_id: int,
    request: schemas.TicketStatusRequest,
    _: dict = Depends(dependencies.get_current_staff),
) -> dict:
    return await service.update_status(ticket_id, request)
