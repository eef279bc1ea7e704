"""mp_pricing REST API — public price tables and quotes."""

from fastapi import APIRouter, Request

from src.mp_common.catalog import get_catalog
from src.mp_common.response import ApiResponse, success_response
from src.mp_pricing.application.schemas import ListingCostRequest, PricingCatalogResponse
from src.mp_pricing.application.service import compute_listing_cost

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get("")
async def get_pricing(request: Request) -> ApiResponse:
    resp = success_response(PricingCatalogResponse.from_catalog(get_catalog()).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/quote")
async def quote(body: ListingCostRequest, request: Request) -> ApiResponse:
    resp = success_response(compute_listing_cost(body).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
