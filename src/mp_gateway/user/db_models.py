"""SQLAlchemy ORM model for the profiles table.

Table is created by Alembic migration: alembic/versions/003_create_profiles_follows_notifications.py
Profiles are owned by the profile service; this core only reads the plan and
the payee details a booking buyer may see.
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.mp_common.database import Base


class ProfileModel(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    slug: Mapped[str | None] = mapped_column(String(128), nullable=True, unique=True)
    plan: Mapped[str] = mapped_column(String(16), nullable=False, default="free")
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cash_app_handle: Mapped[str | None] = mapped_column(String(64), nullable=True)
