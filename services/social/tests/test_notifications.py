import pytest

from app.models.enums import NotificationType
from app.models.social import Block, Mute
from app.notifications import service
from app.notifications.exceptions import NotificationNotFoundError


@pytest.mark.asyncio
async def test_create_notification_guards(db_session, make_user) -> None:
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    db_session.add(Block(blocker_id=carol.id, blocked_id=alice.id))
    await db_session.flush()

    follow = NotificationType.FOLLOW
    assert await service.create_notification(alice.id, alice.id, follow, db_session) is None
    assert await service.create_notification(alice.id, carol.id, follow, db_session) is None

    first = await service.create_notification(alice.id, bob.id, follow, db_session)
    assert first is not None
    duplicate = await service.create_notification(
        alice.id, bob.id, NotificationType.FOLLOW, db_session
    )
    assert duplicate is None


@pytest.mark.asyncio
async def test_list_and_count_hide_muted_actors(db_session, make_user) -> None:
    me = await make_user("me")
    friend = await make_user("friend")
    noisy = await make_user("noisy")
    await service.create_notification(me.id, friend.id, NotificationType.FOLLOW, db_session)
    await service.create_notification(me.id, noisy.id, NotificationType.FOLLOW, db_session)
    db_session.add(Mute(muter_id=me.id, muted_id=noisy.id))
    await db_session.flush()

    items = await service.list_notifications(me.id, db_session, limit=10)

    assert [n.actor.nickname for n in items] == ["friend"]
    assert await service.get_unread_count(me.id, db_session) == 1


@pytest.mark.asyncio
async def test_mark_read(db_session, make_user) -> None:
    me = await make_user("me")
    friend = await make_user("friend")
    other = await make_user("other")
    note = await service.create_notification(me.id, friend.id, NotificationType.FOLLOW, db_session)

    with pytest.raises(NotificationNotFoundError):
        await service.mark_read(other.id, note.notification_id, db_session)

    await service.mark_read(me.id, note.notification_id, db_session)
    assert await service.get_unread_count(me.id, db_session) == 0
    assert await service.mark_all_read(me.id, db_session) == 0
