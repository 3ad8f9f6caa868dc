from uuid import uuid4

import pytest
from sqlalchemy import func, select

from app.models.comment import Comment
from app.models.enums import ReportReason, ReportStatus, ReportTargetType
from app.models.moderation import AdminLog, AdminNotification, Report
from app.models.post import Post
from app.models.user import User
from app.moderation.exceptions import TargetNotFoundError
from app.reports import service
from app.reports.exceptions import (
    DuplicateReportError,
    InvalidStatusTransitionError,
    ReportAlreadyProcessedError,
    ReportNotFoundError,
    SelfReportError,
)


async def _report(db, reporter, target_type, target_id, threshold=10, reason=ReportReason.SPAM):
    return await service.create_report(
        db,
        reporter_id=reporter.id,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
        threshold=threshold,
    )


async def _count(db, model, *criteria) -> int:
    return (await db.execute(select(func.count()).select_from(model).where(*criteria))).scalar_one()


@pytest.mark.asyncio
async def test_report_is_filed_pending(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    post = await make_post(owner)

    outcome = await _report(db_session, reporter, ReportTargetType.POST, post.post_id)

    assert outcome.report.status == ReportStatus.PENDING
    assert outcome.report_count == 1
    assert outcome.auto_hidden is False


@pytest.mark.asyncio
async def test_self_report_is_rejected_without_insert(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    post = await make_post(owner)

    with pytest.raises(SelfReportError):
        await _report(db_session, owner, ReportTargetType.POST, post.post_id)
    with pytest.raises(SelfReportError):
        await _report(db_session, owner, ReportTargetType.USER, owner.id)

    assert await _count(db_session, Report) == 0


@pytest.mark.asyncio
async def test_missing_target(db_session, make_user) -> None:
    reporter = await make_user("reporter")
    with pytest.raises(TargetNotFoundError):
        await _report(db_session, reporter, ReportTargetType.COMMENT, uuid4())


@pytest.mark.asyncio
async def test_duplicate_report_is_rejected(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    post = await make_post(owner)

    await _report(db_session, reporter, ReportTargetType.POST, post.post_id)
    with pytest.raises(DuplicateReportError):
        await _report(
            db_session, reporter, ReportTargetType.POST, post.post_id, reason=ReportReason.OTHER
        )

    assert await _count(db_session, Report) == 1


@pytest.mark.asyncio
async def test_concurrent_duplicate_maps_integrity_error(
    db_session, make_user, make_post, monkeypatch
) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    post = await make_post(owner)
    await _report(db_session, reporter, ReportTargetType.POST, post.post_id)

    async def _never_exists(*args, **kwargs) -> bool:
        return False

    monkeypatch.setattr(service, "_report_exists", _never_exists)
    with pytest.raises(DuplicateReportError):
        await _report(db_session, reporter, ReportTargetType.POST, post.post_id)

    # The savepoint rollback keeps the first report
    assert await _count(db_session, Report) == 1


@pytest.mark.asyncio
async def test_threshold_hides_once_and_notifies_once(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporters = [await make_user(f"r{i}") for i in range(4)]
    post = await make_post(owner)

    outcomes = [
        await _report(db_session, r, ReportTargetType.POST, post.post_id, threshold=3)
        for r in reporters
    ]

    assert [o.auto_hidden for o in outcomes] == [False, False, True, False]
    await db_session.refresh(post)
    assert post.is_hidden is True
    assert post.hidden_at is not None

    statuses = (
        await db_session.execute(select(Report.status).where(Report.target_id == post.post_id))
    ).scalars().all()
    assert set(statuses) == {ReportStatus.AUTO_HIDDEN}

    notifications = (await db_session.execute(select(AdminNotification))).scalars().all()
    assert len(notifications) == 1
    assert notifications[0].report_count == 3
    assert notifications[0].target_id == post.post_id
    assert "3 reports" in notifications[0].message


@pytest.mark.asyncio
async def test_account_reports_suspend_the_account(db_session, make_user) -> None:
    target = await make_user("spammer")
    reporter = await make_user("reporter")

    outcome = await _report(db_session, reporter, ReportTargetType.USER, target.id, threshold=1)

    assert outcome.auto_hidden is True
    await db_session.refresh(target)
    assert target.is_suspended is True
    assert target.suspended_at is not None


@pytest.mark.asyncio
async def test_already_hidden_target_gets_no_new_notification(
    db_session, make_user, make_post
) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    post = await make_post(owner, is_hidden=True)

    outcome = await _report(db_session, reporter, ReportTargetType.POST, post.post_id, threshold=1)

    assert outcome.auto_hidden is False
    assert outcome.report.status == ReportStatus.AUTO_HIDDEN
    assert await _count(db_session, AdminNotification) == 0


@pytest.mark.asyncio
async def test_status_machine(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    admin = await make_user("admin")
    post = await make_post(owner)
    report = (await _report(db_session, reporter, ReportTargetType.POST, post.post_id)).report

    with pytest.raises(InvalidStatusTransitionError):
        await service.update_report_status(
            db_session, admin_id=admin.id, report_id=report.report_id,
            new_status=ReportStatus.AUTO_HIDDEN,
        )

    reviewed = await service.update_report_status(
        db_session, admin_id=admin.id, report_id=report.report_id,
        new_status=ReportStatus.REVIEWED, note="looking",
    )
    assert reviewed.status == ReportStatus.REVIEWED

    resolved = await service.update_report_status(
        db_session, admin_id=admin.id, report_id=report.report_id,
        new_status=ReportStatus.RESOLVED,
    )
    assert resolved.status == ReportStatus.RESOLVED

    with pytest.raises(ReportAlreadyProcessedError):
        await service.update_report_status(
            db_session, admin_id=admin.id, report_id=report.report_id,
            new_status=ReportStatus.DISMISSED,
        )

    logs = (
        await db_session.execute(select(AdminLog).order_by(AdminLog.created_at))
    ).scalars().all()
    transitions = [(e.details["previous_status"], e.details["new_status"]) for e in logs]
    assert transitions == [
        ("pending", "reviewed"),
        ("reviewed", "resolved"),
    ]
    assert logs[0].details["note"] == "looking"
    assert all(entry.admin_id == admin.id for entry in logs)


@pytest.mark.asyncio
async def test_auto_hidden_report_is_terminal(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    post = await make_post(owner)
    report = (
        await _report(db_session, reporter, ReportTargetType.POST, post.post_id, threshold=1)
    ).report

    with pytest.raises(ReportAlreadyProcessedError):
        await service.update_report_status(
            db_session, admin_id=uuid4(), report_id=report.report_id,
            new_status=ReportStatus.RESOLVED,
        )


@pytest.mark.asyncio
async def test_update_missing_report(db_session) -> None:
    with pytest.raises(ReportNotFoundError):
        await service.update_report_status(
            db_session, admin_id=uuid4(), report_id=uuid4(), new_status=ReportStatus.REVIEWED
        )


@pytest.mark.asyncio
async def test_delete_reported_post_purges_reports(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    admin = await make_user("admin")
    post = await make_post(owner, "#pine styling")
    post_id = post.post_id
    await _report(db_session, reporter, ReportTargetType.POST, post_id, threshold=1)

    await service.delete_reported_content(
        db_session, admin_id=admin.id, target_type=ReportTargetType.POST, target_id=post_id
    )

    assert await _count(db_session, Post, Post.post_id == post_id) == 0
    assert await _count(db_session, Report, Report.target_id == post_id) == 0
    notification = (await db_session.execute(select(AdminNotification))).scalar_one()
    await db_session.refresh(notification)
    assert notification.is_resolved is True
    assert notification.resolved_at is not None
    log = (await db_session.execute(select(AdminLog))).scalar_one()
    assert log.action == "delete_reported_content"
    assert log.target_type == "post"


@pytest.mark.asyncio
async def test_delete_reported_comment(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    post = await make_post(owner)
    comment = Comment(post_id=post.post_id, user_id=owner.id, content="rude")
    db_session.add(comment)
    await db_session.flush()

    await service.delete_reported_content(
        db_session, admin_id=uuid4(), target_type=ReportTargetType.COMMENT,
        target_id=comment.comment_id,
    )

    assert await _count(db_session, Comment) == 0


@pytest.mark.asyncio
async def test_delete_reported_account_suspends(db_session, make_user) -> None:
    target = await make_user("troll")

    await service.delete_reported_content(
        db_session, admin_id=uuid4(), target_type=ReportTargetType.USER, target_id=target.id
    )

    await db_session.refresh(target)
    assert target.is_suspended is True
    assert await _count(db_session, User, User.id == target.id) == 1


@pytest.mark.asyncio
async def test_delete_missing_content(db_session) -> None:
    with pytest.raises(TargetNotFoundError):
        await service.delete_reported_content(
            db_session, admin_id=uuid4(), target_type=ReportTargetType.EVENT, target_id=uuid4()
        )
    assert await _count(db_session, AdminLog) == 0


@pytest.mark.asyncio
async def test_listing_and_stats(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporters = [await make_user(f"r{i}") for i in range(3)]
    post = await make_post(owner)
    for r in reporters:
        await _report(db_session, r, ReportTargetType.POST, post.post_id)
    await _report(db_session, reporters[0], ReportTargetType.USER, owner.id)

    items, total = await service.get_reports(db_session, target_type=ReportTargetType.POST, limit=2)
    assert total == 3
    assert len(items) == 2

    stats = await service.get_report_stats(db_session)
    assert stats["total"] == 4
    assert stats["by_status"][ReportStatus.PENDING] == 4
    assert stats["by_status"][ReportStatus.RESOLVED] == 0
    assert stats["by_target_type"][ReportTargetType.POST] == 3
    assert stats["by_target_type"][ReportTargetType.USER] == 1
