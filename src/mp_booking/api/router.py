"""mp_booking REST API — lifecycle actions, all require authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_booking.application.schemas import (
    BookingOut,
    CreateBookingRequest,
    InstallmentRequest,
    PaymentInfoOut,
)
from src.mp_booking.application.service import BookingApplicationService
from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_gateway.auth.dependencies import get_current_identity
from src.mp_gateway.auth.identity import Identity

router = APIRouter(prefix="/bookings", tags=["bookings"])

_service = BookingApplicationService()


def _respond(data: object, request: Request) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


def _installment(body: InstallmentRequest | None) -> str | None:
    if body is None or body.installment is None:
        return None
    return body.installment.value


@router.post("", status_code=201)
async def create_booking(
    body: CreateBookingRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        booking = await _service.create_booking(db, identity.user_id, body)
    return _respond(BookingOut.from_domain(booking).model_dump(), request)


@router.get("/mine")
async def list_my_bookings(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    bookings = await _service.list_my_bookings(db, identity.user_id)
    return _respond([BookingOut.from_domain(b).model_dump() for b in bookings], request)


@router.get("")
async def list_all_bookings(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    bookings = await _service.list_all_bookings(db, identity, limit, offset)
    return _respond([BookingOut.from_domain(b).model_dump() for b in bookings], request)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    booking = await _service.get_booking(db, identity, booking_id)
    return _respond(BookingOut.from_domain(booking).model_dump(), request)


@router.get("/{booking_id}/payment-info")
async def get_payment_info(
    booking_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    handle = await _service.get_payment_info(db, identity, booking_id)
    return _respond(PaymentInfoOut(cash_app_handle=handle).model_dump(), request)


@router.post("/{booking_id}/mark-paid")
async def mark_paid(
    booking_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: InstallmentRequest | None = None,
) -> ApiResponse:
    async with db.begin():
        booking = await _service.mark_paid(db, identity, booking_id, _installment(body))
    return _respond(BookingOut.from_domain(booking).model_dump(), request)


@router.post("/{booking_id}/confirm")
async def confirm(
    booking_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: InstallmentRequest | None = None,
) -> ApiResponse:
    async with db.begin():
        booking = await _service.confirm(db, identity, booking_id, _installment(body))
    return _respond(BookingOut.from_domain(booking).model_dump(), request)


@router.post("/{booking_id}/cancel")
async def cancel(
    booking_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        booking = await _service.cancel(db, identity, booking_id)
    return _respond(BookingOut.from_domain(booking).model_dump(), request)
