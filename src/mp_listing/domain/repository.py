"""Repository Protocols — dependency inversion for testability.

Unit tests inject mocks that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_listing.domain.models import Application, NewPost, Post, PostFilters


class ListingRepositoryProtocol(Protocol):
    async def create_post(self, db: AsyncSession, post: NewPost) -> Post: ...

    async def get_post(self, db: AsyncSession, post_id: int) -> Post | None: ...

    async def list_posts(self, db: AsyncSession, filters: PostFilters) -> list[Post]: ...

    async def create_application(
        self, db: AsyncSession, post_id: int, applicant_id: str
    ) -> Application | None: ...

    async def get_application(self, db: AsyncSession, application_id: int) -> Application | None: ...

    async def get_application_for_update(
        self, db: AsyncSession, application_id: int
    ) -> Application | None: ...

    async def find_application(
        self, db: AsyncSession, post_id: int, applicant_id: str
    ) -> Application | None: ...

    async def respond_to_application(
        self, db: AsyncSession, application_id: int, status: str, poster_response: str | None
    ) -> Application: ...

    async def list_applications_for_post(self, db: AsyncSession, post_id: int) -> list[Application]: ...

    async def list_applications_by_applicant(
        self, db: AsyncSession, applicant_id: str
    ) -> list[Application]: ...


class FollowerNotifierProtocol(Protocol):
    async def notify_followers(
        self,
        db: AsyncSession,
        followed_user_id: str,
        title: str,
        message: str,
        link_url: str,
    ) -> int: ...
