import pytest
from sqlalchemy import select

from app.models.enums import NotificationType
from app.models.notification import Notification
from app.models.social import Block, Follow
from app.social_graph import service
from app.social_graph.exceptions import (
    AlreadyBlockedError,
    AlreadyMutedError,
    BlockedRelationshipError,
    CannotBlockSelfError,
    CannotFollowSelfError,
    CannotMuteSelfError,
    HiddenByBlockError,
    NotBlockedError,
    NotFollowingError,
)


@pytest.mark.asyncio
async def test_toggle_follow_creates_and_removes_notification(db_session, make_user) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")

    assert await service.toggle_follow(db_session, alice.id, bob.id) is True
    notes = (await db_session.execute(select(Notification))).scalars().all()
    assert [(n.user_id, n.actor_id, n.type) for n in notes] == [
        (bob.id, alice.id, NotificationType.FOLLOW)
    ]

    assert await service.toggle_follow(db_session, alice.id, bob.id) is False
    assert (await db_session.execute(select(Notification))).scalars().all() == []


@pytest.mark.asyncio
async def test_follow_guards(db_session, make_user) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")

    with pytest.raises(CannotFollowSelfError):
        await service.toggle_follow(db_session, alice.id, alice.id)
    with pytest.raises(NotFollowingError):
        await service.unfollow(db_session, alice.id, bob.id)

    db_session.add(Block(blocker_id=bob.id, blocked_id=alice.id))
    await db_session.flush()
    with pytest.raises(BlockedRelationshipError):
        await service.toggle_follow(db_session, alice.id, bob.id)


@pytest.mark.asyncio
async def test_block_removes_follows_both_ways(db_session, make_user) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")
    await service.toggle_follow(db_session, alice.id, bob.id)
    await service.toggle_follow(db_session, bob.id, alice.id)

    await service.block(db_session, alice.id, bob.id)

    assert (await db_session.execute(select(Follow))).scalars().all() == []
    assert (await db_session.execute(select(Notification))).scalars().all() == []
    with pytest.raises(AlreadyBlockedError):
        await service.block(db_session, alice.id, bob.id)
    with pytest.raises(CannotBlockSelfError):
        await service.block(db_session, alice.id, alice.id)

    await service.unblock(db_session, alice.id, bob.id)
    with pytest.raises(NotBlockedError):
        await service.unblock(db_session, alice.id, bob.id)


@pytest.mark.asyncio
async def test_mute_and_relationship(db_session, make_user) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")

    await service.mute(db_session, alice.id, bob.id)
    with pytest.raises(AlreadyMutedError):
        await service.mute(db_session, alice.id, bob.id)
    with pytest.raises(CannotMuteSelfError):
        await service.mute(db_session, alice.id, alice.id)

    rel = await service.get_relationship(db_session, alice.id, bob.id)
    assert rel.is_muting is True
    assert rel.is_following is False
    assert rel.is_blocked_by is False

    await service.unmute(db_session, alice.id, bob.id)
    assert (await service.get_relationship(db_session, alice.id, bob.id)).is_muting is False


@pytest.mark.asyncio
async def test_follower_list_hidden_from_blocked_viewer(db_session, make_user) -> None:
    owner = await make_user("owner")
    fan = await make_user("fan")
    viewer = await make_user("viewer")
    await service.toggle_follow(db_session, fan.id, owner.id)

    rows = await service.get_followers(
        db_session, owner.id, viewer_id=viewer.id, cursor=None, limit=10
    )
    assert [user.id for _, user in rows] == [fan.id]

    await service.block(db_session, owner.id, viewer.id)
    with pytest.raises(HiddenByBlockError):
        await service.get_followers(
            db_session, owner.id, viewer_id=viewer.id, cursor=None, limit=10
        )


@pytest.mark.asyncio
async def test_follow_lists_skip_suspended_and_blocked(db_session, make_user) -> None:
    owner = await make_user("owner")
    active = await make_user("active")
    suspended = await make_user("suspended", is_suspended=True)
    blocked = await make_user("blocked")
    viewer = await make_user("viewer")
    for user in (active, suspended, blocked):
        db_session.add(Follow(follower_id=owner.id, following_id=user.id))
    db_session.add(Block(blocker_id=viewer.id, blocked_id=blocked.id))
    await db_session.flush()

    rows = await service.get_following(
        db_session, owner.id, viewer_id=viewer.id, cursor=None, limit=10
    )

    assert [user.id for _, user in rows] == [active.id]
    assert await service.batch_followed_by(db_session, owner.id, [active.id, viewer.id]) == {
        active.id
    }


@pytest.mark.asyncio
async def test_blocked_list(db_session, make_user) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")
    await service.block(db_session, alice.id, bob.id)

    rows = await service.get_blocked(db_session, alice.id, cursor=None, limit=10)

    assert [user.nickname for _, user in rows] == ["bob"]
