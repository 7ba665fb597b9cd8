from datetime import datetime, timedelta, timezone

import pytest

from reddit_clone.config import LISTING_LIMIT
from reddit_clone.errors import NotFound, ValidationError
from reddit_clone.models.posts import transform_post
from reddit_clone.utils import utcnow_iso


def flat_row(**overrides):
    row = {
        "posts_id": 7,
        "posts_title": "cute",
        "posts_url": "http://x",
        "posts_created_at": "2024-01-02T00:00:00.000000+00:00",
        "posts_updated_at": "2024-01-02T00:00:00.000000+00:00",
        "users_id": 1,
        "users_username": "alice",
        "users_created_at": "2024-01-01T00:00:00.000000+00:00",
        "users_updated_at": "2024-01-01T00:00:00.000000+00:00",
        "subreddits_id": 3,
        "subreddits_name": "cats",
        "subreddits_description": None,
        "subreddits_created_at": "2024-01-01T00:00:00.000000+00:00",
        "subreddits_updated_at": "2024-01-01T00:00:00.000000+00:00",
        "vote_score": 2,
        "num_upvotes": 3,
        "num_downvotes": 1,
    }
    row.update(overrides)
    return row


async def set_created_at(database, post_id, when):
    await database.execute(
        "UPDATE posts SET created_at = :ts WHERE id = :id",
        {"ts": utcnow_iso(when), "id": post_id},
    )


# ── flat -> nested ─────────────────────────────────────────
def test_transform_post_nests_author_and_subreddit():
    post = transform_post(flat_row())

    assert post.id == 7
    assert post.title == "cute"
    assert post.user.id == 1
    assert post.user.username == "alice"
    assert post.subreddit.id == 3
    assert post.subreddit.name == "cats"
    assert post.vote_score == 2
    assert (post.num_upvotes, post.num_downvotes) == (3, 1)
    assert post.created_at == datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert "password" not in post.user.model_dump()


def test_transform_post_null_tallies_become_zero():
    post = transform_post(flat_row(vote_score=None, num_upvotes=None, num_downvotes=None))
    assert (post.vote_score, post.num_upvotes, post.num_downvotes) == (0, 0, 0)


# ── create / get ───────────────────────────────────────────
@pytest.mark.asyncio
async def test_get_post_round_trip(forum, alice, cats, cute_post):
    post = await forum.posts.get_post(cute_post)

    assert post.id == cute_post
    assert post.title == "cute"
    assert post.url == "http://x"
    assert post.user.username == "alice"
    assert post.subreddit.name == "cats"
    assert post.subreddit.description == "all about cats"
    assert (post.vote_score, post.num_upvotes, post.num_downvotes) == (0, 0, 0)


@pytest.mark.asyncio
async def test_get_missing_post_is_none(forum):
    assert await forum.posts.get_post(12345) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("subreddit_id", [None, 0])
async def test_create_post_requires_subreddit(forum, alice, subreddit_id):
    with pytest.raises(ValidationError):
        await forum.posts.create_post(alice.id, "t", "http://x", subreddit_id)


@pytest.mark.asyncio
async def test_create_post_unknown_subreddit(forum, alice):
    with pytest.raises(NotFound):
        await forum.posts.create_post(alice.id, "t", "http://x", 999)


# ── tallies ────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_opposite_votes_cancel_out(forum, alice, bob, cute_post):
    await forum.votes.cast_vote(alice.id, cute_post, 1)
    await forum.votes.cast_vote(bob.id, cute_post, -1)

    post = await forum.posts.get_post(cute_post)
    assert post.vote_score == 0
    assert post.num_upvotes == 1
    assert post.num_downvotes == 1


@pytest.mark.asyncio
async def test_score_equals_upvotes_minus_downvotes(forum, cats):
    voters = [await forum.users.create_user(f"user{i}", "pw") for i in range(4)]
    first = await forum.posts.create_post(voters[0], "one", "http://1", cats.id)
    second = await forum.posts.create_post(voters[0], "two", "http://2", cats.id)

    for voter, direction in zip(voters, (1, 1, -1, 0)):
        await forum.votes.cast_vote(voter, first, direction)
    await forum.votes.cast_vote(voters[1], second, -1)

    for post in await forum.posts.list_posts():
        assert post.vote_score == post.num_upvotes - post.num_downvotes

    post = await forum.posts.get_post(first)
    assert (post.vote_score, post.num_upvotes, post.num_downvotes) == (1, 2, 1)


# ── listings ───────────────────────────────────────────────
@pytest.mark.asyncio
async def test_list_new_is_newest_first(forum, database, alice, cats):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for offset in (5, 1, 3):
        post_id = await forum.posts.create_post(alice.id, f"p{offset}", "http://x", cats.id)
        await set_created_at(database, post_id, base + timedelta(hours=offset))

    posts = await forum.posts.list_posts(sort="new")

    assert [p.title for p in posts] == ["p5", "p3", "p1"]
    stamps = [p.created_at for p in posts]
    assert stamps == sorted(stamps, reverse=True)


@pytest.mark.asyncio
async def test_list_top_is_non_increasing(forum, alice, bob, cats):
    low = await forum.posts.create_post(alice.id, "low", "http://x", cats.id)
    high = await forum.posts.create_post(alice.id, "high", "http://x", cats.id)
    await forum.posts.create_post(alice.id, "none", "http://x", cats.id)

    await forum.votes.cast_vote(alice.id, high, 1)
    await forum.votes.cast_vote(bob.id, high, 1)
    await forum.votes.cast_vote(alice.id, low, -1)

    posts = await forum.posts.list_posts(sort="top")

    scores = [p.vote_score for p in posts]
    assert scores == sorted(scores, reverse=True)
    assert [p.title for p in posts] == ["high", "none", "low"]


@pytest.mark.asyncio
async def test_list_hot_decays_with_age(forum, database, alice, bob, cats):
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    old = await forum.posts.create_post(alice.id, "old", "http://x", cats.id)
    fresh = await forum.posts.create_post(alice.id, "fresh", "http://x", cats.id)
    await set_created_at(database, old, now - timedelta(hours=1))
    await set_created_at(database, fresh, now - timedelta(seconds=10))

    await forum.votes.cast_vote(alice.id, old, 1)
    await forum.votes.cast_vote(bob.id, old, 1)
    await forum.votes.cast_vote(alice.id, fresh, 1)

    # old: 2 / 3600, fresh: 1 / 10
    hot = await forum.posts.list_posts(sort="hot", now=now)
    top = await forum.posts.list_posts(sort="top")

    assert [p.title for p in hot] == ["fresh", "old"]
    assert [p.title for p in top] == ["old", "fresh"]


@pytest.mark.asyncio
async def test_list_hot_zero_age_is_clamped(forum, database, alice, bob, cats):
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    brand_new = await forum.posts.create_post(alice.id, "brand-new", "http://x", cats.id)
    future = await forum.posts.create_post(alice.id, "future", "http://x", cats.id)
    older = await forum.posts.create_post(alice.id, "older", "http://x", cats.id)
    await set_created_at(database, brand_new, now)
    await set_created_at(database, future, now + timedelta(minutes=5))
    await set_created_at(database, older, now - timedelta(seconds=30))

    await forum.votes.cast_vote(alice.id, brand_new, 1)
    await forum.votes.cast_vote(alice.id, future, 1)
    await forum.votes.cast_vote(bob.id, future, 1)
    await forum.votes.cast_vote(alice.id, older, 1)

    # ages clamp to 1s: future 2/1, brand-new 1/1, older 1/30
    hot = await forum.posts.list_posts(sort="hot", now=now)
    assert [p.title for p in hot] == ["future", "brand-new", "older"]


@pytest.mark.asyncio
async def test_list_filters_by_subreddit(forum, alice, cats):
    dogs_id = await forum.subreddits.create_subreddit("dogs")
    await forum.posts.create_post(alice.id, "meow", "http://x", cats.id)
    await forum.posts.create_post(alice.id, "woof", "http://x", dogs_id)

    only_dogs = await forum.posts.list_posts(subreddit_id=dogs_id)
    everything = await forum.posts.list_posts()

    assert [p.title for p in only_dogs] == ["woof"]
    assert {p.title for p in everything} == {"meow", "woof"}


@pytest.mark.asyncio
async def test_list_is_capped(forum, alice, cats):
    for i in range(LISTING_LIMIT + 5):
        await forum.posts.create_post(alice.id, f"post {i}", "http://x", cats.id)

    for sort in ("new", "top", "hot"):
        assert len(await forum.posts.list_posts(sort=sort)) == LISTING_LIMIT


@pytest.mark.asyncio
async def test_list_empty(forum):
    assert await forum.posts.list_posts() == []


@pytest.mark.asyncio
async def test_list_unknown_sort(forum):
    with pytest.raises(ValidationError):
        await forum.posts.list_posts(sort="controversial")
