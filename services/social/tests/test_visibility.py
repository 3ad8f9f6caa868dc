from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.models.post import Post
from app.models.social import Block, Mute
from app.visibility.filters import apply_exclusion, order_by_ids, visible_posts
from app.visibility.service import (
    get_blocked_user_ids,
    get_excluded_user_ids,
    get_muted_user_ids,
    is_block_between,
)


@pytest.mark.asyncio
async def test_no_flags_runs_no_query() -> None:
    session = AsyncMock()
    excluded = await get_excluded_user_ids(session, uuid4())
    assert excluded == set()
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_viewer_is_discarded_from_result() -> None:
    viewer, other = uuid4(), uuid4()
    result = MagicMock()
    result.scalars.return_value.all.return_value = [viewer, other]
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)

    excluded = await get_excluded_user_ids(session, viewer, blocked=True, muted=True)

    assert excluded == {other}
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_store_failure_propagates() -> None:
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

    with pytest.raises(OperationalError):
        await get_excluded_user_ids(session, uuid4(), blocked=True, blocked_by=True, muted=True)


@pytest.mark.asyncio
async def test_blocked_and_muted_account_appears_once(db_session, make_user) -> None:
    viewer = await make_user("viewer")
    pest = await make_user("pest")
    db_session.add_all(
        [
            Block(blocker_id=viewer.id, blocked_id=pest.id),
            Block(blocker_id=pest.id, blocked_id=viewer.id),
            Mute(muter_id=viewer.id, muted_id=pest.id),
        ]
    )
    await db_session.flush()

    first = await get_excluded_user_ids(
        db_session, viewer.id, blocked=True, blocked_by=True, muted=True
    )
    second = await get_excluded_user_ids(
        db_session, viewer.id, blocked=True, blocked_by=True, muted=True
    )

    assert first == {pest.id}
    assert second == first


@pytest.mark.asyncio
async def test_flags_select_edge_kinds(db_session, make_user) -> None:
    viewer = await make_user("viewer")
    blocked = await make_user("blocked")
    blocker = await make_user("blocker")
    muted = await make_user("muted")
    db_session.add_all(
        [
            Block(blocker_id=viewer.id, blocked_id=blocked.id),
            Block(blocker_id=blocker.id, blocked_id=viewer.id),
            Mute(muter_id=viewer.id, muted_id=muted.id),
        ]
    )
    await db_session.flush()

    assert await get_excluded_user_ids(db_session, viewer.id, blocked=True) == {blocked.id}
    assert await get_excluded_user_ids(db_session, viewer.id, blocked_by=True) == {blocker.id}
    assert await get_excluded_user_ids(db_session, viewer.id, muted=True) == {muted.id}
    assert await get_excluded_user_ids(
        db_session, viewer.id, blocked=True, blocked_by=True, muted=True
    ) == {blocked.id, blocker.id, muted.id}
    assert await get_blocked_user_ids(db_session, viewer.id) == {blocked.id, blocker.id}
    assert await get_muted_user_ids(db_session, viewer.id) == {muted.id}


@pytest.mark.asyncio
async def test_mute_is_one_directional(db_session, make_user) -> None:
    a = await make_user("a")
    b = await make_user("b")
    db_session.add(Mute(muter_id=a.id, muted_id=b.id))
    await db_session.flush()

    assert await get_muted_user_ids(db_session, b.id) == set()


@pytest.mark.asyncio
async def test_is_block_between_checks_both_directions(db_session, make_user) -> None:
    a = await make_user("a")
    b = await make_user("b")
    c = await make_user("c")
    db_session.add(Block(blocker_id=b.id, blocked_id=a.id))
    await db_session.flush()

    assert await is_block_between(db_session, a.id, b.id)
    assert await is_block_between(db_session, b.id, a.id)
    assert not await is_block_between(db_session, a.id, c.id)


@pytest.mark.asyncio
async def test_apply_exclusion_filters_authors(db_session, make_user, make_post) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")
    kept = await make_post(alice, "juniper")
    await make_post(bob, "maple")
    await make_post(alice, "hidden", is_hidden=True)

    stmt = apply_exclusion(select(Post.post_id).where(visible_posts()), Post.user_id, {bob.id})
    rows = (await db_session.execute(stmt)).scalars().all()

    assert rows == [kept.post_id]


def test_apply_exclusion_empty_set_is_noop() -> None:
    stmt = select(Post.post_id)
    assert apply_exclusion(stmt, Post.user_id, set()) is stmt


def test_order_by_ids_follows_rank_and_skips_missing() -> None:
    a, b, c = uuid4(), uuid4(), uuid4()
    rows = [{"id": a}, {"id": b}]
    ordered = order_by_ids(rows, [b, c, a], key=lambda r: r["id"])
    assert [r["id"] for r in ordered] == [b, a]
