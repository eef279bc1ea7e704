"""Shared service instance for the posts and applications routers."""

from src.mp_listing.application.service import ListingApplicationService

listing_service = ListingApplicationService()
