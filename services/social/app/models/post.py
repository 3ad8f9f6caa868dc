import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Genre(Base):
    """Bonsai genre; grouped by ``category`` in the catalog."""

    __tablename__ = "genres"

    genre_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    sort_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)


class Post(Base):
    __tablename__ = "posts"

    post_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    is_hidden: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    hidden_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    author = relationship("User", lazy="raise")
    genres = relationship("Genre", secondary="post_genres", lazy="raise", viewonly=True)

    __table_args__ = (
        sa.Index("ix_posts_user_created_at", "user_id", "created_at"),
        sa.Index("ix_posts_created_at", "created_at"),
    )


class PostGenre(Base):
    __tablename__ = "post_genres"

    post_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("posts.post_id", ondelete="CASCADE"), primary_key=True
    )
    genre_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("genres.genre_id", ondelete="CASCADE"), primary_key=True
    )


class Hashtag(Base):
    """Hashtag with a running usage counter maintained on post create/delete."""

    __tablename__ = "hashtags"

    hashtag_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )


class PostHashtag(Base):
    __tablename__ = "post_hashtags"

    post_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("posts.post_id", ondelete="CASCADE"), primary_key=True
    )
    hashtag_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("hashtags.hashtag_id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )
