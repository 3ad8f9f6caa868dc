"""
Exclusion-set resolver.

Turns the viewer's block and mute edges into the set of account ids whose
content must not be shown to them. Every list endpoint that renders other
people's content resolves this set once per request.
"""
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.social import Block, Mute


async def get_excluded_user_ids(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    *,
    blocked: bool = False,
    blocked_by: bool = False,
    muted: bool = False,
) -> set[uuid.UUID]:
    """Ids hidden from *viewer_id* under the requested relationship kinds.

    blocked:    accounts the viewer blocked
    blocked_by: accounts that blocked the viewer
    muted:      accounts the viewer muted

    Block and mute edges are fetched in one UNION ALL round trip; nothing is
    queried when every flag is off. The viewer is never part of the result.
    """
    branches: list[sa.Select] = []
    if blocked:
        branches.append(
            sa.select(Block.blocked_id.label("user_id")).where(Block.blocker_id == viewer_id)
        )
    if blocked_by:
        branches.append(
            sa.select(Block.blocker_id.label("user_id")).where(Block.blocked_id == viewer_id)
        )
    if muted:
        branches.append(
            sa.select(Mute.muted_id.label("user_id")).where(Mute.muter_id == viewer_id)
        )
    if not branches:
        return set()

    stmt = branches[0] if len(branches) == 1 else sa.union_all(*branches)
    result = await session.execute(stmt)
    excluded = set(result.scalars().all())
    excluded.discard(viewer_id)
    return excluded


async def get_blocked_user_ids(session: AsyncSession, viewer_id: uuid.UUID) -> set[uuid.UUID]:
    """Block exclusion in both directions."""
    return await get_excluded_user_ids(session, viewer_id, blocked=True, blocked_by=True)


async def get_muted_user_ids(session: AsyncSession, viewer_id: uuid.UUID) -> set[uuid.UUID]:
    return await get_excluded_user_ids(session, viewer_id, muted=True)


async def is_block_between(
    session: AsyncSession, user_a: uuid.UUID, user_b: uuid.UUID
) -> bool:
    """True when either account has blocked the other."""
    result = await session.execute(
        sa.select(
            sa.exists().where(
                sa.or_(
                    sa.and_(Block.blocker_id == user_a, Block.blocked_id == user_b),
                    sa.and_(Block.blocker_id == user_b, Block.blocked_id == user_a),
                )
            )
        )
    )
    return bool(result.scalar())
