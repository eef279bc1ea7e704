"""ListingRepository — posts and applications.

Transaction ownership: The CALLER (application service or router) is responsible for
starting and committing the transaction via `async with db.begin()`.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.errors import ApplicationNotFoundError, InternalError
from src.mp_listing.domain.models import Application, NewPost, Post, PostFilters
from src.mp_listing.domain.ordering import order_by_clause

_POST_COLUMNS = """
    id, user_id, post_type, title, category, tier, pay, promoter_name, nsfw,
    boost_level, boost_expires_at, verified, payment_structure, venue, address,
    full_address, date, description, created_at
"""

_APP_COLUMNS = """
    id, post_id, applicant_id, status, poster_response, created_at, responded_at
"""

_INSERT_POST_SQL = text(f"""
    INSERT INTO posts
        (user_id, post_type, title, category, tier, pay, promoter_name, nsfw,
         boost_level, boost_expires_at, payment_structure, venue, address,
         full_address, date, description)
    VALUES
        (:user_id, :post_type, :title, :category, :tier, :pay, :promoter_name, :nsfw,
         :boost_level, :boost_expires_at, :payment_structure, :venue, :address,
         :full_address, :date, :description)
    RETURNING {_POST_COLUMNS}
""")

_GET_POST_SQL = text(f"SELECT {_POST_COLUMNS} FROM posts WHERE id = :id")

# ON CONFLICT covers the race between the duplicate check and the insert.
_INSERT_APP_SQL = text(f"""
    INSERT INTO applications (post_id, applicant_id)
    VALUES (:post_id, :applicant_id)
    ON CONFLICT (post_id, applicant_id) DO NOTHING
    RETURNING {_APP_COLUMNS}
""")

_GET_APP_SQL = text(f"SELECT {_APP_COLUMNS} FROM applications WHERE id = :id")

_GET_APP_FOR_UPDATE_SQL = text(f"SELECT {_APP_COLUMNS} FROM applications WHERE id = :id FOR UPDATE")

_FIND_APP_SQL = text(f"""
    SELECT {_APP_COLUMNS} FROM applications
    WHERE post_id = :post_id AND applicant_id = :applicant_id
""")

_RESPOND_APP_SQL = text(f"""
    UPDATE applications
    SET status = :status,
        poster_response = :poster_response,
        responded_at = NOW()
    WHERE id = :id
    RETURNING {_APP_COLUMNS}
""")

_LIST_APPS_BY_POST_SQL = text(f"""
    SELECT {_APP_COLUMNS} FROM applications
    WHERE post_id = :post_id
    ORDER BY created_at DESC, id DESC
""")

_LIST_APPS_BY_APPLICANT_SQL = text(f"""
    SELECT {_APP_COLUMNS} FROM applications
    WHERE applicant_id = :applicant_id
    ORDER BY created_at DESC, id DESC
""")


def build_list_posts_query(filters: PostFilters) -> tuple[str, dict[str, Any]]:
    """SELECT for the public feed. Only bound parameters carry user input."""
    conditions: list[str] = []
    params: dict[str, Any] = {"limit": filters.limit, "offset": filters.offset}

    if not filters.include_nsfw:
        conditions.append("nsfw = FALSE")
    if filters.post_type and filters.post_type != "all":
        conditions.append("post_type = :post_type")
        params["post_type"] = filters.post_type
    if filters.category and filters.category != "All":
        conditions.append("category = :category")
        params["category"] = filters.category
    if filters.search:
        conditions.append(
            "(title ILIKE :search OR venue ILIKE :search"
            " OR promoter_name ILIKE :search OR address ILIKE :search)"
        )
        params["search"] = f"%{filters.search.lower()}%"

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    sql = (
        f"SELECT {_POST_COLUMNS} FROM posts {where} "
        f"ORDER BY {order_by_clause(filters.sort_by)} "
        "LIMIT :limit OFFSET :offset"
    )
    return sql, params


def _row_to_post(row: object) -> Post:
    return Post(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        post_type=row.post_type,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        tier=row.tier,  # type: ignore[attr-defined]
        pay=row.pay,  # type: ignore[attr-defined]
        promoter_name=row.promoter_name,  # type: ignore[attr-defined]
        nsfw=row.nsfw,  # type: ignore[attr-defined]
        boost_level=row.boost_level,  # type: ignore[attr-defined]
        boost_expires_at=row.boost_expires_at,  # type: ignore[attr-defined]
        verified=row.verified,  # type: ignore[attr-defined]
        payment_structure=row.payment_structure,  # type: ignore[attr-defined]
        venue=row.venue,  # type: ignore[attr-defined]
        address=row.address,  # type: ignore[attr-defined]
        full_address=row.full_address,  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_application(row: object) -> Application:
    return Application(
        id=row.id,  # type: ignore[attr-defined]
        post_id=row.post_id,  # type: ignore[attr-defined]
        applicant_id=row.applicant_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        poster_response=row.poster_response,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        responded_at=row.responded_at,  # type: ignore[attr-defined]
    )


class ListingRepository:
    async def create_post(self, db: AsyncSession, post: NewPost) -> Post:
        result = await db.execute(
            _INSERT_POST_SQL,
            {
                "user_id": post.user_id,
                "post_type": post.post_type,
                "title": post.title,
                "category": post.category,
                "tier": post.tier,
                "pay": post.pay,
                "promoter_name": post.promoter_name,
                "nsfw": post.nsfw,
                "boost_level": post.boost_level,
                "boost_expires_at": post.boost_expires_at,
                "payment_structure": post.payment_structure,
                "venue": post.venue,
                "address": post.address,
                "full_address": post.full_address,
                "date": post.date,
                "description": post.description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Post insert returned no rows — this should never happen")
        return _row_to_post(row)

    async def get_post(self, db: AsyncSession, post_id: int) -> Post | None:
        result = await db.execute(_GET_POST_SQL, {"id": post_id})
        row = result.fetchone()
        return _row_to_post(row) if row else None

    async def list_posts(self, db: AsyncSession, filters: PostFilters) -> list[Post]:
        sql, params = build_list_posts_query(filters)
        result = await db.execute(text(sql), params)
        return [_row_to_post(row) for row in result.fetchall()]

    async def create_application(
        self, db: AsyncSession, post_id: int, applicant_id: str
    ) -> Application | None:
        """None when the applicant already applied to this post."""
        result = await db.execute(
            _INSERT_APP_SQL, {"post_id": post_id, "applicant_id": applicant_id}
        )
        row = result.fetchone()
        return _row_to_application(row) if row else None

    async def get_application(self, db: AsyncSession, application_id: int) -> Application | None:
        result = await db.execute(_GET_APP_SQL, {"id": application_id})
        row = result.fetchone()
        return _row_to_application(row) if row else None

    async def get_application_for_update(
        self, db: AsyncSession, application_id: int
    ) -> Application | None:
        result = await db.execute(_GET_APP_FOR_UPDATE_SQL, {"id": application_id})
        row = result.fetchone()
        return _row_to_application(row) if row else None

    async def find_application(
        self, db: AsyncSession, post_id: int, applicant_id: str
    ) -> Application | None:
        result = await db.execute(
            _FIND_APP_SQL, {"post_id": post_id, "applicant_id": applicant_id}
        )
        row = result.fetchone()
        return _row_to_application(row) if row else None

    async def respond_to_application(
        self, db: AsyncSession, application_id: int, status: str, poster_response: str | None
    ) -> Application:
        result = await db.execute(
            _RESPOND_APP_SQL,
            {"id": application_id, "status": status, "poster_response": poster_response},
        )
        row = result.fetchone()
        if row is None:
            raise ApplicationNotFoundError(application_id)
        return _row_to_application(row)

    async def list_applications_for_post(self, db: AsyncSession, post_id: int) -> list[Application]:
        result = await db.execute(_LIST_APPS_BY_POST_SQL, {"post_id": post_id})
        return [_row_to_application(row) for row in result.fetchall()]

    async def list_applications_by_applicant(
        self, db: AsyncSession, applicant_id: str
    ) -> list[Application]:
        result = await db.execute(_LIST_APPS_BY_APPLICANT_SQL, {"applicant_id": applicant_id})
        return [_row_to_application(row) for row in result.fetchall()]
