"""Credit purchase endpoints (checkout + fulfil)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_gateway.auth.dependencies import get_current_identity
from src.mp_gateway.auth.identity import Identity
from src.mp_payments.application.schemas import CreditCheckoutRequest, FulfillCreditsRequest
from src.mp_payments.application.service import CreditPurchaseService

router = APIRouter(prefix="/credits", tags=["credits"])

_service = CreditPurchaseService()


@router.post("/checkout")
async def start_checkout(
    body: CreditCheckoutRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    request: Request,
) -> ApiResponse:
    data = await _service.start_credit_checkout(identity.user_id, body.credits)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/fulfill")
async def fulfill(
    body: FulfillCreditsRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        data = await _service.fulfill_credit_purchase(db, identity.user_id, body.session_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
