"""mp_eligibility REST API — verification status and submissions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_eligibility.application.schemas import (
    SubmitProfessionalVerificationRequest,
    SubmitVerificationRequest,
)
from src.mp_eligibility.application.service import EligibilityGate
from src.mp_gateway.auth.dependencies import get_current_identity
from src.mp_gateway.auth.identity import Identity

router = APIRouter(prefix="/verification", tags=["verification"])

_gate = EligibilityGate()


def _with_request_id(resp: ApiResponse, request: Request) -> ApiResponse:
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/eligibility")
async def get_eligibility(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _gate.summary(db, identity.user_id)
    return _with_request_id(success_response(data.model_dump()), request)


@router.get("")
async def list_verification_requests(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _gate.list_verification_requests(db, identity.user_id)
    return _with_request_id(success_response([i.model_dump() for i in items]), request)


@router.post("", status_code=201)
async def submit_verification_request(
    body: SubmitVerificationRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        data = await _gate.submit_verification_request(db, identity.user_id, body)
    return _with_request_id(success_response(data.model_dump()), request)


@router.get("/professional")
async def list_professional_verifications(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _gate.list_professional_verifications(db, identity.user_id)
    return _with_request_id(success_response([i.model_dump() for i in items]), request)


@router.post("/professional", status_code=201)
async def submit_professional_verification(
    body: SubmitProfessionalVerificationRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        data = await _gate.submit_professional_verification(db, identity.user_id, body)
    return _with_request_id(success_response(data.model_dump()), request)


@router.get("/professional/check/{category:path}")
async def check_category(
    category: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _gate.check_category(db, identity.user_id, category)
    return _with_request_id(success_response(data.model_dump()), request)
