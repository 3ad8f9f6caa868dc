import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base


class User(Base):
    """Community account. Suspension is the account-level hidden flag."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    nickname: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    bio: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(sa.String(500), nullable=True)
    is_public: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    is_suspended: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    suspended_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        sa.Index("ix_users_nickname", "nickname"),
        sa.Index("ix_users_created_at", "created_at"),
    )
