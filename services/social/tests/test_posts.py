from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.models.comment import Comment
from app.models.enums import ReportReason, ReportTargetType
from app.models.post import Genre, Hashtag, PostHashtag
from app.models.social import Block
from app.posts import service
from app.posts.exceptions import (
    GenreNotFoundError,
    NotPostOwnerError,
    PostNotFoundError,
    TooManyGenresError,
)
from app.posts.hashtags import extract_hashtags, normalize_tag
from app.reports.service import create_report


def test_extract_hashtags_dedupes_in_order() -> None:
    text = "#Pine and #盆栽 then #pine again, #もみじ_2024 #"
    assert extract_hashtags(text) == ["pine", "盆栽", "もみじ_2024"]


def test_extract_hashtags_empty() -> None:
    assert extract_hashtags(None) == []
    assert extract_hashtags("no tags here") == []


def test_normalize_tag() -> None:
    assert normalize_tag(" #Juniper ") == "juniper"


async def _counts(db) -> dict[str, int]:
    rows = (await db.execute(select(Hashtag.name, Hashtag.count))).all()
    return {name: count for name, count in rows}


@pytest.mark.asyncio
async def test_hashtag_counts_follow_posts(db_session, make_user) -> None:
    user = await make_user("author")

    first = await service.create_post(user.id, "#pine #maple", db_session)
    second = await service.create_post(user.id, "more #pine", db_session)
    assert await _counts(db_session) == {"pine": 2, "maple": 1}

    await service.delete_own_post(user.id, first.post_id, db_session)
    assert await _counts(db_session) == {"pine": 1}

    await service.delete_own_post(user.id, second.post_id, db_session)
    assert await _counts(db_session) == {}
    assert (await db_session.execute(select(PostHashtag))).scalars().all() == []


@pytest.mark.asyncio
async def test_create_post_links_genres(db_session, make_user) -> None:
    user = await make_user("author")
    genre = Genre(name="黒松", category="松柏類")
    db_session.add(genre)
    await db_session.flush()

    post = await service.create_post(user.id, "new tree", db_session, genre_ids=[genre.genre_id])

    assert [g.name for g in post.genres] == ["黒松"]
    assert post.author.nickname == "author"


@pytest.mark.asyncio
async def test_create_post_genre_validation(db_session, make_user) -> None:
    user = await make_user("author")
    genres = [Genre(name=f"g{i}", category="その他") for i in range(4)]
    db_session.add_all(genres)
    await db_session.flush()

    with pytest.raises(TooManyGenresError):
        await service.create_post(
            user.id, "x", db_session, genre_ids=[g.genre_id for g in genres]
        )
    with pytest.raises(GenreNotFoundError):
        await service.create_post(user.id, "x", db_session, genre_ids=[user.id])


@pytest.mark.asyncio
async def test_delete_own_post_checks_owner(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    other = await make_user("other")
    post = await make_post(owner)

    with pytest.raises(NotPostOwnerError):
        await service.delete_own_post(other.id, post.post_id, db_session)
    with pytest.raises(PostNotFoundError):
        await service.delete_own_post(owner.id, other.id, db_session)


def _comment(post, author, content: str, minutes: int, **kwargs) -> Comment:
    created = datetime(2026, 5, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    return Comment(
        post_id=post.post_id, user_id=author.id, content=content, created_at=created, **kwargs
    )


@pytest.mark.asyncio
async def test_comments_skip_hidden_and_blocked_authors(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    viewer = await make_user("viewer")
    blocker = await make_user("blocker")
    post = await make_post(owner)
    db_session.add_all(
        [
            _comment(post, owner, "first", 1),
            _comment(post, owner, "spam", 2, is_hidden=True),
            _comment(post, blocker, "rude", 3),
            _comment(post, viewer, "nice tree", 4),
            Block(blocker_id=blocker.id, blocked_id=viewer.id),
        ]
    )
    await db_session.flush()

    anonymous = await service.get_comments(post.post_id, db_session)
    assert [c.content for c, _ in anonymous] == ["nice tree", "rude", "first"]

    rows = await service.get_comments(post.post_id, db_session, viewer_id=viewer.id)
    assert [c.content for c, _ in rows] == ["nice tree", "first"]
    assert rows[0][1].id == viewer.id

    page = await service.get_comments(
        post.post_id, db_session, viewer_id=viewer.id, cursor=rows[0][0].comment_id, limit=1
    )
    assert [c.content for c, _ in page] == ["first"]
    assert await service.get_comment_count(post.post_id, db_session) == 3


@pytest.mark.asyncio
async def test_auto_hidden_comment_leaves_the_listing(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    reporter = await make_user("reporter")
    post = await make_post(owner)
    comment = _comment(post, owner, "buy cheap pots here", 1)
    db_session.add(comment)
    await db_session.flush()

    outcome = await create_report(
        db_session,
        reporter_id=reporter.id,
        target_type=ReportTargetType.COMMENT,
        target_id=comment.comment_id,
        reason=ReportReason.SPAM,
        threshold=1,
    )

    assert outcome.auto_hidden is True
    assert await service.get_comments(post.post_id, db_session) == []
    assert await service.get_comment_count(post.post_id, db_session) == 0


@pytest.mark.asyncio
async def test_comments_on_hidden_post(db_session, make_user, make_post) -> None:
    owner = await make_user("owner")
    post = await make_post(owner, is_hidden=True)

    with pytest.raises(PostNotFoundError):
        await service.get_comments(post.post_id, db_session)
