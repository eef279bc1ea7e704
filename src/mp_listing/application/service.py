"""ListingApplicationService — posts and applications.

create_post runs, in order and inside the caller's transaction:
    category check -> nsfw normalization -> age gate -> licence gate ->
    boost/plan check -> credit debit -> insert -> follower notifications
Every check raises before the debit, and the debit and insert commit or roll
back together. Follower notifications run in a SAVEPOINT; if they fail only
the savepoint rolls back and the post stands.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.catalog import Catalog, get_catalog
from src.mp_common.cents import cents_to_display
from src.mp_common.datetime_utils import utc_now
from src.mp_common.enums import ApplicationStatus, CreditAction, PostType
from src.mp_common.errors import (
    ApplicationNotFoundError,
    DuplicateApplicationError,
    ForbiddenError,
    InvalidStateTransitionError,
    PostNotFoundError,
    ValidationFailedError,
)
from src.mp_eligibility.application.service import EligibilityGate
from src.mp_gateway.user.service import get_user_plan
from src.mp_ledger.application.service import LedgerApplicationService
from src.mp_listing.application.schemas import CreatePostRequest
from src.mp_listing.domain.models import Application, NewPost, Post, PostFilters
from src.mp_listing.domain.repository import FollowerNotifierProtocol, ListingRepositoryProtocol
from src.mp_listing.infrastructure.notifications import FollowerNotifier
from src.mp_listing.infrastructure.persistence import ListingRepository
from src.mp_pricing.domain import calculator

logger = logging.getLogger(__name__)

PlanLookup = Callable[[AsyncSession, str], Awaitable[str]]
Clock = Callable[[], datetime]


class ListingApplicationService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        ledger: LedgerApplicationService | None = None,
        gate: EligibilityGate | None = None,
        notifier: FollowerNotifierProtocol | None = None,
        catalog: Catalog | None = None,
        plan_lookup: PlanLookup | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._catalog = catalog or get_catalog()
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._ledger = ledger or LedgerApplicationService(catalog=self._catalog)
        self._gate = gate or EligibilityGate(catalog=self._catalog)
        self._notifier: FollowerNotifierProtocol = notifier or FollowerNotifier()
        self._plan_lookup: PlanLookup = plan_lookup or get_user_plan
        self._clock = clock

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def _check_category(self, category: str, is_event: bool) -> None:
        if is_event:
            if category not in self._catalog.event_categories:
                raise ValidationFailedError("category", f"Invalid event category: {category}")
        elif category not in self._catalog.categories:
            raise ValidationFailedError("category", f"Invalid category: {category}")

    async def create_post(self, db: AsyncSession, user_id: str, req: CreatePostRequest) -> Post:
        pricing = self._catalog.pricing
        is_event = req.post_type == PostType.EVENT
        self._check_category(req.category, is_event)

        nsfw = self._gate.normalize_nsfw(req.category, is_event, req.nsfw)
        if self._gate.requires_age_gate(req.category, nsfw):
            await self._gate.require_age_verified(db, user_id)
        await self._gate.require_can_post(db, user_id, req.category, is_event)

        boost = req.boost_level or "None"
        if boost not in pricing.boosts:
            raise ValidationFailedError("boost_level", f"Unknown boost level: {boost}")
        plan = await self._plan_lookup(db, user_id)
        if boost != "None" and not calculator.can_use_boosts(plan, pricing):
            raise ForbiddenError("Boosts require a Pro or Elite plan.")

        cost = calculator.total_credit_cost(
            is_event, is_event and nsfw, req.tier.value, boost, pricing
        )
        if not calculator.has_unlimited_posts(plan, pricing):
            if is_event:
                action = CreditAction.CREATE_EVENT.value
                label = f"Posted event: {req.title} ({req.category}, boost: {boost})"
            else:
                action = CreditAction.CREATE_POST.value
                label = f"Created post: {req.title} (tier: {req.tier.value}, boost: {boost})"
            await self._ledger.debit_for_listing(db, user_id, cost, label, action=action)

        post = await self._repo.create_post(
            db,
            NewPost(
                user_id=user_id,
                post_type=req.post_type.value,
                title=req.title,
                category=req.category,
                tier=req.tier.value,
                pay=req.pay_cents,
                promoter_name=req.promoter_name,
                nsfw=nsfw,
                boost_level=boost,
                boost_expires_at=calculator.boost_expiry(boost, self._clock(), pricing),
                payment_structure=req.payment_structure.value,
                venue=req.venue,
                address=req.address,
                full_address=req.full_address,
                date=req.date,
                description=req.description,
            ),
        )
        logger.info("post %d created user=%s category=%s nsfw=%s cost=%d plan=%s",
                    post.id, user_id, post.category, post.nsfw, cost, plan)
        await self._notify_followers(db, post)
        return post

    async def _notify_followers(self, db: AsyncSession, post: Post) -> None:
        if post.is_event:
            title = "New Event"
            message = f'{post.promoter_name} posted an event: "{post.title}" ({post.category})'
        else:
            title = "New Opportunity"
            message = (
                f'{post.promoter_name} posted: "{post.title}" ({post.category})'
                f" - {cents_to_display(post.pay)}"
            )
        try:
            async with db.begin_nested():
                sent = await self._notifier.notify_followers(
                    db, post.user_id, title, message, f"/opportunity/{post.id}"
                )
        except Exception:
            logger.warning("follower notifications failed for post %d", post.id, exc_info=True)
            return
        logger.debug("post %d notified %d followers", post.id, sent)

    async def list_posts(
        self,
        db: AsyncSession,
        viewer_id: str | None,
        search: str | None = None,
        category: str | None = None,
        post_type: str | None = None,
        sort_by: str = "Newest",
        include_nsfw: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Post]:
        """Feed. NSFW posts appear only if asked for and the viewer is age-verified."""
        show_nsfw = include_nsfw and await self._gate.can_view_nsfw(db, viewer_id)
        filters = PostFilters(
            search=search,
            category=category,
            post_type=post_type,
            sort_by=sort_by,
            include_nsfw=show_nsfw,
            limit=limit,
            offset=offset,
        )
        return await self._repo.list_posts(db, filters)

    async def get_post(
        self, db: AsyncSession, viewer_id: str | None, post_id: int
    ) -> tuple[Post, bool]:
        """Returns the post and whether the viewer may see its full address
        (owner, or an applicant whose application was accepted)."""
        post = await self._repo.get_post(db, post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        if viewer_id == post.user_id:
            return post, True
        if post.nsfw and not await self._gate.can_view_nsfw(db, viewer_id):
            raise PostNotFoundError(post_id)
        if viewer_id is None:
            return post, False
        application = await self._repo.find_application(db, post_id, viewer_id)
        accepted = application is not None and application.status == ApplicationStatus.ACCEPTED
        return post, accepted

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    async def apply(self, db: AsyncSession, applicant_id: str, post_id: int) -> Application:
        post = await self._repo.get_post(db, post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        if post.nsfw:
            await self._gate.require_age_verified(db, applicant_id)
        if post.user_id == applicant_id:
            raise ValidationFailedError("post_id", "You cannot apply to your own post.")
        if await self._repo.find_application(db, post_id, applicant_id) is not None:
            raise DuplicateApplicationError(post_id)

        pricing = self._catalog.pricing
        plan = await self._plan_lookup(db, applicant_id)
        cost = calculator.apply_cost(pricing)
        if not calculator.can_afford(0, cost, plan):
            await self._ledger.debit_for_listing(
                db, applicant_id, cost, f"Applied to: {post.title}", action=CreditAction.APPLY.value
            )

        application = await self._repo.create_application(db, post_id, applicant_id)
        if application is None:
            raise DuplicateApplicationError(post_id)
        logger.info("application %d created post=%d applicant=%s", application.id, post_id, applicant_id)
        return application

    async def respond(
        self,
        db: AsyncSession,
        owner_id: str,
        application_id: int,
        status: str,
        poster_response: str | None = None,
    ) -> Application:
        if status not in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED):
            raise ValidationFailedError("status", "status must be accepted or rejected")
        application = await self._repo.get_application_for_update(db, application_id)
        if application is None:
            raise ApplicationNotFoundError(application_id)
        post = await self._repo.get_post(db, application.post_id)
        if post is None or post.user_id != owner_id:
            raise ForbiddenError("Not authorized to respond to this application")
        if application.status != ApplicationStatus.PENDING:
            raise InvalidStateTransitionError(
                f"Application {application_id} is already {application.status}"
            )
        updated = await self._repo.respond_to_application(db, application_id, status, poster_response)
        logger.info("application %d %s by %s", application_id, status, owner_id)
        return updated

    async def list_applications_for_post(
        self, db: AsyncSession, owner_id: str, post_id: int
    ) -> list[Application]:
        post = await self._repo.get_post(db, post_id)
        if post is None or post.user_id != owner_id:
            raise ForbiddenError("Not authorized to view applications for this post")
        return await self._repo.list_applications_for_post(db, post_id)

    async def list_my_applications(self, db: AsyncSession, applicant_id: str) -> list[Application]:
        return await self._repo.list_applications_by_applicant(db, applicant_id)
