"""Applications REST API — apply, respond, list. All require authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_gateway.auth.dependencies import get_current_identity
from src.mp_gateway.auth.identity import Identity
from src.mp_listing.api.deps import listing_service
from src.mp_listing.application.schemas import ApplicationOut, ApplyRequest, RespondRequest

router = APIRouter(prefix="/applications", tags=["applications"])


def _respond(data: object, request: Request) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def apply(
    body: ApplyRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        application = await listing_service.apply(db, identity.user_id, body.post_id)
    return _respond(ApplicationOut.from_domain(application).model_dump(), request)


@router.get("/mine")
async def list_my_applications(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    apps = await listing_service.list_my_applications(db, identity.user_id)
    return _respond([ApplicationOut.from_domain(a).model_dump() for a in apps], request)


@router.get("/post/{post_id}")
async def list_applications_for_post(
    post_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    apps = await listing_service.list_applications_for_post(db, identity.user_id, post_id)
    return _respond([ApplicationOut.from_domain(a).model_dump() for a in apps], request)


@router.post("/{application_id}/respond")
async def respond(
    application_id: int,
    body: RespondRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        application = await listing_service.respond(
            db, identity.user_id, application_id, body.status, body.poster_response
        )
    return _respond(ApplicationOut.from_domain(application).model_dump(), request)
