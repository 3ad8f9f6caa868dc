import json
import re
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.dialects import postgresql

from app.cache import POPULAR_TAGS_KEY
from app.models.post import Genre, PostGenre
from app.models.social import Block, Mute
from app.posts.service import create_post
from app.search import fulltext, service
from app.search.constants import SearchMode
from app.search.exceptions import HashtagNotFoundError


@pytest.mark.asyncio
async def test_like_search_matches_case_insensitively(db_session, make_user, make_post) -> None:
    author = await make_user("author")
    match = await make_post(author, "Repotting my JUNIPER today")
    await make_post(author, "maple leaves")
    await make_post(author, "juniper but hidden", is_hidden=True)

    posts = await service.search_posts("juniper", db_session, SearchMode.LIKE)

    assert [p.post_id for p in posts] == [match.post_id]
    assert posts[0].author.nickname == "author"


@pytest.mark.asyncio
async def test_like_search_escapes_wildcards(db_session, make_user, make_post) -> None:
    author = await make_user("author")
    literal = await make_post(author, "100% moss cover")
    await make_post(author, "100 pots of moss")

    posts = await service.search_posts("100%", db_session, SearchMode.LIKE)

    assert [p.post_id for p in posts] == [literal.post_id]


@pytest.mark.asyncio
async def test_search_drops_blocked_and_muted_authors(db_session, make_user, make_post) -> None:
    viewer = await make_user("viewer")
    friend = await make_user("friend")
    blocker = await make_user("blocker")
    muted = await make_user("muted")
    kept = await make_post(friend, "pine")
    await make_post(blocker, "pine")
    await make_post(muted, "pine")
    db_session.add_all(
        [
            Block(blocker_id=blocker.id, blocked_id=viewer.id),
            Mute(muter_id=viewer.id, muted_id=muted.id),
        ]
    )
    await db_session.flush()

    anonymous = await service.search_posts("pine", db_session, SearchMode.LIKE)
    as_viewer = await service.search_posts(
        "pine", db_session, SearchMode.LIKE, viewer_id=viewer.id
    )

    assert len(anonymous) == 3
    assert [p.post_id for p in as_viewer] == [kept.post_id]


@pytest.mark.asyncio
async def test_genre_filter(db_session, make_user, make_post) -> None:
    author = await make_user("author")
    genre = Genre(name="五葉松", category="松柏類")
    db_session.add(genre)
    tagged = await make_post(author, "styling")
    await make_post(author, "styling")
    db_session.add(PostGenre(post_id=tagged.post_id, genre_id=genre.genre_id))
    await db_session.flush()

    posts = await service.search_posts(
        None, db_session, SearchMode.LIKE, genre_ids=[genre.genre_id]
    )

    assert [p.post_id for p in posts] == [tagged.post_id]


@pytest.mark.asyncio
async def test_indexed_mode_falls_back_to_like(db_session, make_user, make_post) -> None:
    # SQLite has no similarity(), so the trigram query fails inside its savepoint
    author = await make_user("author")
    match = await make_post(author, "black pine")

    posts = await service.search_posts("pine", db_session, SearchMode.TRGM)
    users = await service.search_users("auth", db_session, SearchMode.TRGM)

    assert [p.post_id for p in posts] == [match.post_id]
    assert [u.id for u in users] == [author.id]


def test_trigram_user_query_matches_nickname_and_bio() -> None:
    stmt = fulltext._trgm_users("pine", set(), None, 20)
    sql = str(stmt.compile(dialect=postgresql.dialect()))

    assert re.search(r"users\.nickname %+ ", sql)
    assert re.search(r"users\.bio %+ ", sql)


@pytest.mark.asyncio
async def test_hydration_keeps_rank_order(db_session, make_user, make_post, monkeypatch) -> None:
    author = await make_user("author")
    first = await make_post(author, "a")
    second = await make_post(author, "b")
    ranked = [second.post_id, author.id, first.post_id]

    async def _ranked_ids(*args, **kwargs):
        return ranked

    monkeypatch.setattr(fulltext, "search_post_ids", _ranked_ids)
    posts = await service.search_posts("x", db_session, SearchMode.TRGM)

    assert [p.post_id for p in posts] == [second.post_id, first.post_id]


@pytest.mark.asyncio
async def test_user_search_excludes_viewer_blocked_and_suspended(db_session, make_user) -> None:
    viewer = await make_user("pine_viewer")
    friend = await make_user("pine_friend")
    await make_user("pine_suspended", is_suspended=True)
    blocked = await make_user("pine_blocked")
    db_session.add(Block(blocker_id=viewer.id, blocked_id=blocked.id))
    await db_session.flush()

    users = await service.search_users("pine", db_session, SearchMode.LIKE, viewer_id=viewer.id)

    assert [u.id for u in users] == [friend.id]
    assert await service.search_users("   ", db_session, SearchMode.LIKE) == []


@pytest.mark.asyncio
async def test_search_by_tag(db_session, make_user) -> None:
    author = await make_user("author")
    post = await create_post(author.id, "Morning #Shohin session", db_session)
    await create_post(author.id, "no tag", db_session)

    hashtag, posts = await service.search_by_tag("#SHOHIN", db_session)

    assert hashtag.name == "shohin"
    assert [p.post_id for p in posts] == [post.post_id]
    with pytest.raises(HashtagNotFoundError):
        await service.search_by_tag("unknown", db_session)


@pytest.mark.asyncio
async def test_popular_tags_and_cache(db_session, make_user) -> None:
    author = await make_user("author")
    await create_post(author.id, "#pine #moss", db_session)
    await create_post(author.id, "#pine", db_session)

    redis = AsyncMock()
    redis.get.return_value = None
    tags = await service.get_popular_tags(db_session, redis, limit=5)

    assert tags == [{"tag": "pine", "count": 2}, {"tag": "moss", "count": 1}]
    key, ttl, payload = redis.setex.await_args.args
    assert key == POPULAR_TAGS_KEY
    assert json.loads(payload) == tags

    redis.get.return_value = json.dumps([{"tag": "cached", "count": 9}])
    assert await service.get_popular_tags(db_session, redis) == [{"tag": "cached", "count": 9}]


@pytest.mark.asyncio
async def test_redis_outage_falls_through_to_db(db_session, make_user) -> None:
    author = await make_user("author")
    await create_post(author.id, "#maple", db_session)
    redis = AsyncMock()
    redis.get.side_effect = RedisConnectionError("down")
    redis.setex.side_effect = RedisConnectionError("down")

    assert await service.get_popular_tags(db_session, redis) == [{"tag": "maple", "count": 1}]


@pytest.mark.asyncio
async def test_genre_catalog_grouped_in_category_order(db_session) -> None:
    db_session.add_all(
        [
            Genre(name="道具A", category="用品・道具", sort_order=1),
            Genre(name="黒松", category="松柏類", sort_order=2),
            Genre(name="真柏", category="松柏類", sort_order=1),
            Genre(name="謎", category="未分類"),
        ]
    )
    await db_session.flush()

    catalog = await service.get_all_genres(db_session)

    assert list(catalog) == ["松柏類", "用品・道具"]
    assert [g["name"] for g in catalog["松柏類"]] == ["真柏", "黒松"]


@pytest.mark.asyncio
async def test_search_status_without_extensions(db_session) -> None:
    like = await service.get_search_status(db_session, SearchMode.LIKE)
    trgm = await service.get_search_status(db_session, SearchMode.TRGM)

    assert like["ready"] is True
    assert trgm["ready"] is False
    assert trgm["extensions"] == {"pg_bigm": False, "pg_trgm": False}
