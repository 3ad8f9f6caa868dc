from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from app.models.comment import Comment
from app.models.enums import AdminNotificationType, ReportReason, ReportStatus, ReportTargetType
from app.models.event import Event
from app.models.moderation import AdminLog, AdminNotification, Report
from app.models.shop import Shop
from app.moderation import service
from app.moderation.exceptions import AdminNotificationNotFoundError, TargetNotFoundError


def _at(minutes: int) -> datetime:
    return datetime(2026, 5, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)


def _report(reporter, target_type, target_id, status=ReportStatus.AUTO_HIDDEN) -> Report:
    return Report(
        reporter_id=reporter.id,
        target_type=target_type,
        target_id=target_id,
        reason=ReportReason.SPAM,
        status=status,
    )


@pytest.mark.asyncio
async def test_hidden_queue_mixes_variants_newest_first(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    post = await make_post(owner, "bad post", is_hidden=True, hidden_at=_at(1))
    await make_post(owner, "fine post")
    comment = Comment(
        post_id=post.post_id, user_id=owner.id, content="bad comment",
        is_hidden=True, hidden_at=_at(3),
    )
    event = Event(
        created_by=owner.id, title="Spring show", description="free bonsai",
        is_hidden=True, hidden_at=_at(2),
    )
    db_session.add_all([comment, event])
    await db_session.flush()
    db_session.add(_report(reporter, ReportTargetType.POST, post.post_id))
    await db_session.flush()

    items = await service.get_hidden_content(db_session)

    assert [(i.target_type, i.target_id) for i in items] == [
        (ReportTargetType.COMMENT, comment.comment_id),
        (ReportTargetType.EVENT, event.event_id),
        (ReportTargetType.POST, post.post_id),
    ]
    assert items[1].summary == "Spring show: free bonsai"
    assert items[2].report_count == 1
    assert items[0].report_count == 0
    assert items[0].owner.id == owner.id


@pytest.mark.asyncio
async def test_hidden_queue_type_filter(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    await make_post(owner, "hidden", is_hidden=True, hidden_at=_at(1))
    shop = Shop(
        created_by=owner.id, name="Green Nursery", address="Omiya",
        is_hidden=True, hidden_at=_at(2),
    )
    db_session.add(shop)
    await db_session.flush()

    items = await service.get_hidden_content(db_session, ReportTargetType.SHOP)

    assert len(items) == 1
    assert items[0].summary == "Green Nursery (Omiya)"


@pytest.mark.asyncio
async def test_hidden_accounts_list_suspended_users(db_session, make_user) -> None:
    await make_user("active")
    troll = await make_user("troll", is_suspended=True, suspended_at=_at(5))

    items = await service.get_hidden_content(db_session, ReportTargetType.USER)

    assert [(i.target_id, i.summary) for i in items] == [(troll.id, "troll")]
    assert items[0].owner.id == troll.id


@pytest.mark.asyncio
async def test_restore_clears_flag_and_resolves(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    admin = await make_user("admin")
    post = await make_post(owner, is_hidden=True, hidden_at=_at(0))
    db_session.add_all(
        [
            _report(reporter, ReportTargetType.POST, post.post_id),
            AdminNotification(
                type=AdminNotificationType.AUTO_HIDDEN,
                target_type=ReportTargetType.POST,
                target_id=post.post_id,
                message="Post was automatically hidden after receiving 10 reports",
                report_count=10,
            ),
        ]
    )
    await db_session.flush()

    await service.restore_content(
        db_session, admin_id=admin.id, target_type=ReportTargetType.POST, target_id=post.post_id
    )

    await db_session.refresh(post)
    assert post.is_hidden is False
    assert post.hidden_at is None
    statuses = (await db_session.execute(select(Report.status))).scalars().all()
    assert statuses == [ReportStatus.RESOLVED]
    resolved = (await db_session.execute(select(AdminNotification.is_resolved))).scalar_one()
    assert resolved is True
    log = (await db_session.execute(select(AdminLog))).scalar_one()
    assert log.action == "restore_content"
    assert log.admin_id == admin.id


@pytest.mark.asyncio
async def test_restore_missing_target(db_session) -> None:
    with pytest.raises(TargetNotFoundError):
        await service.restore_content(
            db_session, admin_id=uuid4(), target_type=ReportTargetType.REVIEW, target_id=uuid4()
        )


@pytest.mark.asyncio
async def test_delete_hidden_content(db_session, make_user) -> None:
    owner = await make_user("owner")
    event = Event(created_by=owner.id, title="Spam", is_hidden=True, hidden_at=_at(0))
    db_session.add(event)
    await db_session.flush()
    event_id = event.event_id

    await service.delete_hidden_content(
        db_session, admin_id=uuid4(), target_type=ReportTargetType.EVENT, target_id=event_id
    )

    remaining = (
        await db_session.execute(select(func.count()).select_from(Event))
    ).scalar_one()
    assert remaining == 0
    log = (await db_session.execute(select(AdminLog))).scalar_one()
    assert log.action == "delete_hidden_content"
    assert log.target_id == event_id


@pytest.mark.asyncio
async def test_admin_notifications_inbox(db_session) -> None:
    for i in range(3):
        db_session.add(
            AdminNotification(
                type=AdminNotificationType.AUTO_HIDDEN,
                target_type=ReportTargetType.POST,
                target_id=uuid4(),
                message=f"hidden {i}",
                report_count=10,
                created_at=_at(i),
            )
        )
    await db_session.flush()

    items, unread = await service.list_admin_notifications(db_session, limit=2)
    assert [n.message for n in items] == ["hidden 2", "hidden 1"]
    assert unread == 3

    await service.mark_admin_notification_read(db_session, items[0].admin_notification_id)
    unread_items, unread = await service.list_admin_notifications(db_session, unread_only=True)
    assert unread == 2
    assert {n.message for n in unread_items} == {"hidden 0", "hidden 1"}

    assert await service.mark_all_admin_notifications_read(db_session) == 2
    _, unread = await service.list_admin_notifications(db_session)
    assert unread == 0


@pytest.mark.asyncio
async def test_mark_missing_admin_notification(db_session) -> None:
    with pytest.raises(AdminNotificationNotFoundError):
        await service.mark_admin_notification_read(db_session, uuid4())
