"""BookingRepository — concrete implementation of BookingRepositoryProtocol.

Transitions read the row with SELECT ... FOR UPDATE and write with
UPDATE ... RETURNING, so the service always sees the post-write row.

Transaction ownership: The CALLER (application service or router) is responsible for
starting and committing the transaction via `async with db.begin()`.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_booking.domain.models import Booking, NewBooking
from src.mp_common.enums import Installment
from src.mp_common.errors import BookingNotFoundError, InternalError

_COLUMNS = """
    id, post_id, worker_slug, buyer_uid, tier, base_pay, platform_fee, boost,
    boost_fee, total_amount, status, payment_structure, deposit_amount,
    final_amount, deposit_status, final_status, payment_method, escrow_status,
    provider_session_id, provider_payment_intent_id, deposit_session_id,
    final_session_id, escrow_authorized_at, escrow_captured_at, created_at,
    updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO bookings
        (post_id, worker_slug, buyer_uid, tier, base_pay, platform_fee, boost,
         boost_fee, total_amount, status, payment_structure, deposit_amount,
         final_amount, deposit_status, final_status)
    VALUES
        (:post_id, :worker_slug, :buyer_uid, :tier, :base_pay, :platform_fee, :boost,
         :boost_fee, :total_amount, 'pending_payment', :payment_structure, :deposit_amount,
         :final_amount, :deposit_status, :final_status)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM bookings WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM bookings WHERE id = :id FOR UPDATE")

_UPDATE_DEPOSIT_SQL = text(f"""
    UPDATE bookings
    SET deposit_status = :status,
        deposit_session_id = COALESCE(:session_id, deposit_session_id),
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_UPDATE_FINAL_SQL = text(f"""
    UPDATE bookings
    SET final_status = :status,
        final_session_id = COALESCE(:session_id, final_session_id),
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_UPDATE_STATUS_SQL = text(f"""
    UPDATE bookings
    SET status = :status,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_UPDATE_PROVIDER_SQL = text(f"""
    UPDATE bookings
    SET provider_session_id = COALESCE(:session_id, provider_session_id),
        provider_payment_intent_id = COALESCE(:payment_intent_id, provider_payment_intent_id),
        payment_method = COALESCE(:payment_method, payment_method),
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_UPDATE_ESCROW_SQL = text(f"""
    UPDATE bookings
    SET escrow_status = CAST(:escrow_status AS VARCHAR),
        escrow_authorized_at = CASE WHEN CAST(:escrow_status AS VARCHAR) = 'authorized'
                                    THEN NOW() ELSE escrow_authorized_at END,
        escrow_captured_at = CASE WHEN CAST(:escrow_status AS VARCHAR) = 'captured'
                                  THEN NOW() ELSE escrow_captured_at END,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_LIST_BY_BUYER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM bookings
    WHERE buyer_uid = :buyer_uid
    ORDER BY created_at DESC, id DESC
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM bookings
    ORDER BY created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")


def _row_to_booking(row: object) -> Booking:
    return Booking(
        id=row.id,  # type: ignore[attr-defined]
        post_id=row.post_id,  # type: ignore[attr-defined]
        worker_slug=row.worker_slug,  # type: ignore[attr-defined]
        buyer_uid=row.buyer_uid,  # type: ignore[attr-defined]
        tier=row.tier,  # type: ignore[attr-defined]
        base_pay=row.base_pay,  # type: ignore[attr-defined]
        platform_fee=row.platform_fee,  # type: ignore[attr-defined]
        boost=row.boost,  # type: ignore[attr-defined]
        boost_fee=row.boost_fee,  # type: ignore[attr-defined]
        total_amount=row.total_amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        payment_structure=row.payment_structure,  # type: ignore[attr-defined]
        deposit_amount=row.deposit_amount,  # type: ignore[attr-defined]
        final_amount=row.final_amount,  # type: ignore[attr-defined]
        deposit_status=row.deposit_status,  # type: ignore[attr-defined]
        final_status=row.final_status,  # type: ignore[attr-defined]
        payment_method=row.payment_method,  # type: ignore[attr-defined]
        escrow_status=row.escrow_status,  # type: ignore[attr-defined]
        provider_session_id=row.provider_session_id,  # type: ignore[attr-defined]
        provider_payment_intent_id=row.provider_payment_intent_id,  # type: ignore[attr-defined]
        deposit_session_id=row.deposit_session_id,  # type: ignore[attr-defined]
        final_session_id=row.final_session_id,  # type: ignore[attr-defined]
        escrow_authorized_at=row.escrow_authorized_at,  # type: ignore[attr-defined]
        escrow_captured_at=row.escrow_captured_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class BookingRepository:
    async def _update_one(self, db: AsyncSession, sql: object, params: dict) -> Booking:
        result = await db.execute(sql, params)  # type: ignore[arg-type]
        row = result.fetchone()
        if row is None:
            raise BookingNotFoundError(params["id"])
        return _row_to_booking(row)

    async def create(self, db: AsyncSession, booking: NewBooking) -> Booking:
        result = await db.execute(
            _INSERT_SQL,
            {
                "post_id": booking.post_id,
                "worker_slug": booking.worker_slug,
                "buyer_uid": booking.buyer_uid,
                "tier": booking.tier,
                "base_pay": booking.base_pay,
                "platform_fee": booking.platform_fee,
                "boost": booking.boost,
                "boost_fee": booking.boost_fee,
                "total_amount": booking.total_amount,
                "payment_structure": booking.payment_structure,
                "deposit_amount": booking.deposit_amount,
                "final_amount": booking.final_amount,
                "deposit_status": booking.deposit_status,
                "final_status": booking.final_status,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Booking insert returned no rows — this should never happen")
        return _row_to_booking(row)

    async def get(self, db: AsyncSession, booking_id: int) -> Booking | None:
        result = await db.execute(_GET_SQL, {"id": booking_id})
        row = result.fetchone()
        return _row_to_booking(row) if row else None

    async def get_for_update(self, db: AsyncSession, booking_id: int) -> Booking | None:
        result = await db.execute(_GET_FOR_UPDATE_SQL, {"id": booking_id})
        row = result.fetchone()
        return _row_to_booking(row) if row else None

    async def update_installment(
        self,
        db: AsyncSession,
        booking_id: int,
        which: str,
        status: str,
        session_id: str | None = None,
    ) -> Booking:
        sql = _UPDATE_DEPOSIT_SQL if which == Installment.DEPOSIT else _UPDATE_FINAL_SQL
        return await self._update_one(
            db, sql, {"id": booking_id, "status": status, "session_id": session_id}
        )

    async def update_status(self, db: AsyncSession, booking_id: int, status: str) -> Booking:
        return await self._update_one(db, _UPDATE_STATUS_SQL, {"id": booking_id, "status": status})

    async def update_provider_info(
        self,
        db: AsyncSession,
        booking_id: int,
        session_id: str | None = None,
        payment_intent_id: str | None = None,
        payment_method: str | None = None,
    ) -> Booking:
        return await self._update_one(
            db,
            _UPDATE_PROVIDER_SQL,
            {
                "id": booking_id,
                "session_id": session_id,
                "payment_intent_id": payment_intent_id,
                "payment_method": payment_method,
            },
        )

    async def update_escrow(self, db: AsyncSession, booking_id: int, escrow_status: str) -> Booking:
        return await self._update_one(
            db, _UPDATE_ESCROW_SQL, {"id": booking_id, "escrow_status": escrow_status}
        )

    async def list_by_buyer(self, db: AsyncSession, buyer_uid: str) -> list[Booking]:
        result = await db.execute(_LIST_BY_BUYER_SQL, {"buyer_uid": buyer_uid})
        return [_row_to_booking(row) for row in result.fetchall()]

    async def list_all(self, db: AsyncSession, limit: int, offset: int) -> list[Booking]:
        result = await db.execute(_LIST_ALL_SQL, {"limit": limit, "offset": offset})
        return [_row_to_booking(row) for row in result.fetchall()]
