"""mp_escrow REST API — reserve, confirm, release, cancel."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_booking.application.schemas import BookingOut
from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_escrow.application.schemas import (
    ConfirmReservationRequest,
    EscrowActionRequest,
    EscrowConfirmResponse,
    EscrowReserveResponse,
)
from src.mp_escrow.application.service import EscrowController
from src.mp_gateway.auth.dependencies import get_current_identity
from src.mp_gateway.auth.identity import Identity

router = APIRouter(prefix="/escrow", tags=["escrow"])

_controller = EscrowController()


def _respond(data: object, request: Request) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/reserve")
async def reserve(
    body: EscrowActionRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        result = await _controller.reserve(db, identity, body.booking_id)
    return _respond(EscrowReserveResponse.from_domain(result).model_dump(), request)


@router.post("/confirm-reservation")
async def confirm_reservation(
    body: ConfirmReservationRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        result = await _controller.confirm_reservation(db, identity, body.booking_id, body.session_id)
    return _respond(EscrowConfirmResponse.from_domain(result).model_dump(), request)


@router.post("/release")
async def release(
    body: EscrowActionRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        booking = await _controller.release(db, identity, body.booking_id)
    return _respond(BookingOut.from_domain(booking).model_dump(), request)


@router.post("/cancel")
async def cancel(
    body: EscrowActionRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        booking = await _controller.cancel_escrow(db, identity, body.booking_id)
    return _respond(BookingOut.from_domain(booking).model_dump(), request)
