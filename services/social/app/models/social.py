"""
Relationship store — directional edges between accounts.

Tables:
  follows  — follower → following
  blocks   — blocker blocks blocked
  mutes    — muter mutes muted
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _user_fk() -> sa.ForeignKey:
    return sa.ForeignKey("users.id", ondelete="CASCADE")


class Follow(Base):
    __tablename__ = "follows"

    follow_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    follower_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, _user_fk(), nullable=False)
    following_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, _user_fk(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    follower = relationship("User", foreign_keys=[follower_id], lazy="raise")
    following = relationship("User", foreign_keys=[following_id], lazy="raise")

    __table_args__ = (
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="ck_follows_no_self"),
        sa.Index("ix_follows_following_id", "following_id"),
    )


class Block(Base):
    __tablename__ = "blocks"

    block_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    blocker_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, _user_fk(), nullable=False)
    blocked_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, _user_fk(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    blocked = relationship("User", foreign_keys=[blocked_id], lazy="raise")

    __table_args__ = (
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id != blocked_id", name="ck_blocks_no_self"),
        sa.Index("ix_blocks_blocked_id", "blocked_id"),
    )


class Mute(Base):
    __tablename__ = "mutes"

    mute_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    muter_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, _user_fk(), nullable=False)
    muted_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, _user_fk(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    muted = relationship("User", foreign_keys=[muted_id], lazy="raise")

    __table_args__ = (
        sa.UniqueConstraint("muter_id", "muted_id", name="uq_mutes_pair"),
        sa.CheckConstraint("muter_id != muted_id", name="ck_mutes_no_self"),
    )
