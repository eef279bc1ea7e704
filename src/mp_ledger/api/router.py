"""mp_ledger REST API — balance and history, both require authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_gateway.auth.dependencies import get_current_identity
from src.mp_gateway.auth.identity import Identity
from src.mp_ledger.application.schemas import CreditBalanceResponse
from src.mp_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/credits", tags=["credits"])

_service = LedgerApplicationService()


@router.get("")
async def get_credits(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        credit = await _service.ensure_credits(db, identity.user_id)
    resp = success_response(CreditBalanceResponse.from_domain(credit).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/logs")
async def list_credit_logs(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_log(db, identity.user_id, cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
