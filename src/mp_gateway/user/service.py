"""Profile lookups for the credit, boost and booking rules."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.enums import Plan
from src.mp_gateway.user.db_models import ProfileModel


async def get_user_plan(db: AsyncSession, user_id: str) -> str:
    """Plan from the user's profile; users without a profile are on free."""
    result = await db.execute(select(ProfileModel.plan).where(ProfileModel.user_id == user_id))
    plan = result.scalar_one_or_none()
    return plan or Plan.FREE.value


async def get_payout_handle(db: AsyncSession, slug: str) -> str | None:
    """Cash App handle of the profile with this slug, None if unset or unknown."""
    result = await db.execute(
        select(ProfileModel.cash_app_handle).where(ProfileModel.slug == slug)
    )
    return result.scalar_one_or_none()
