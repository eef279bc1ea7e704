"""Posts REST API — public feed, authenticated creation."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.database import get_db_session
from src.mp_common.response import ApiResponse, success_response
from src.mp_gateway.auth.dependencies import get_current_identity, get_optional_identity
from src.mp_gateway.auth.identity import Identity
from src.mp_listing.api.deps import listing_service
from src.mp_listing.application.schemas import CreatePostRequest, PostOut

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("")
async def list_posts(
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    search: str | None = Query(None, max_length=100),
    category: str | None = Query(None),
    post_type: str | None = Query(None, pattern="^(all|gig|event)$"),
    sort_by: str = Query("Newest", pattern="^(Newest|Pay)$"),
    include_nsfw: bool = Query(False),
    limit: int = Query(100, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    posts = await listing_service.list_posts(
        db,
        identity.user_id if identity else None,
        search=search,
        category=category,
        post_type=post_type,
        sort_by=sort_by,
        include_nsfw=include_nsfw,
        limit=limit,
        offset=offset,
    )
    resp = success_response([PostOut.from_domain(p).model_dump() for p in posts])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def create_post(
    body: CreatePostRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    async with db.begin():
        post = await listing_service.create_post(db, identity.user_id, body)
    resp = success_response(PostOut.from_domain(post, show_full_address=True).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{post_id}")
async def get_post(
    post_id: int,
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    post, show_full = await listing_service.get_post(
        db, identity.user_id if identity else None, post_id
    )
    resp = success_response(PostOut.from_domain(post, show_full_address=show_full).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
