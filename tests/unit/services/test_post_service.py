"""
Unit tests for Post Service: feeds, pagination, likes and deletion.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from socialnet.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from socialnet.models.comment import Comment
from socialnet.models.notification import Notification
from socialnet.models.post import Post, PostLike
from socialnet.repositories.post_repository import FeedMode, FeedQuery
from socialnet.schemas.common import PageOptions
from socialnet.services.post_service import PostService, build_feed_query


async def count_rows(db_session, model, *criteria) -> int:
    result = await db_session.execute(select(func.count(model.id)).where(*criteria))
    return result.scalar()


@pytest.mark.unit
class TestFeedQuery:
    """Listing parameters map to exactly one feed mode."""

    def test_no_parameters_lists_everything(self):
        assert build_feed_query() == FeedQuery.all()

    @pytest.mark.parametrize(
        "kwargs,expected",
        [
            ({"following": True}, FeedQuery(FeedMode.FOLLOWING)),
            ({"suggested": True}, FeedQuery(FeedMode.SUGGESTED)),
            ({"user_id": 3}, FeedQuery(FeedMode.BY_USER, user_id=3)),
            ({"search": "Sport"}, FeedQuery(FeedMode.SEARCH, term="Sport")),
        ],
    )
    def test_single_mode(self, kwargs, expected):
        assert build_feed_query(**kwargs) == expected

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"following": True, "suggested": True},
            {"following": True, "search": "x"},
            {"user_id": 1, "suggested": True},
        ],
    )
    def test_more_than_one_mode_is_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            build_feed_query(**kwargs)


@pytest.mark.unit
class TestFeeds:
    @pytest.fixture
    def service(self, db_session, image_store):
        return PostService(db_session, image_store)

    @pytest_asyncio.fixture
    async def graph(self, make_user, make_post, follow):
        me = await make_user("me")
        friend = await make_user("friend")
        pal = await make_user("pal")
        stranger = await make_user("stranger")
        await follow(me.id, friend.id)
        await follow(me.id, pal.id)

        posts = {
            "friend": await make_post(friend.id, "Sports"),
            "friend_anonymous": await make_post(friend.id, "confessions", is_anonymous=True),
            "pal": await make_post(pal.id, "cooking"),
            "stranger": await make_post(stranger.id, "motorsports"),
            "mine": await make_post(me.id, "sports"),
        }
        return {
            "me": me.id,
            "friend": friend.id,
            "pal": pal.id,
            "stranger": stranger.id,
            "following": {friend.id, pal.id},
            "posts": {name: post.id for name, post in posts.items()},
        }

    @pytest.mark.asyncio
    async def test_following_feed_only_followed_and_never_anonymous(self, service, graph):
        page = await service.find_all(FeedQuery.following(), graph["me"], PageOptions())

        assert page["data"]
        for post in page["data"]:
            assert post["author"]["id"] in graph["following"]
            assert post["is_anonymous"] is False
        assert {p["id"] for p in page["data"]} == {
            graph["posts"]["friend"],
            graph["posts"]["pal"],
        }
        assert page["results_count"] == 2
        assert page["total"] == 5

    @pytest.mark.asyncio
    async def test_suggested_feed_excludes_own_posts(self, service, graph):
        page = await service.find_all(FeedQuery.suggested(), graph["me"], PageOptions())

        ids = {p["id"] for p in page["data"]}
        assert graph["posts"]["mine"] not in ids
        assert len(ids) == 4

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_and_excludes_own_posts(self, service, graph):
        page = await service.find_all(FeedQuery.search("SPORTS"), graph["me"], PageOptions())

        assert {p["id"] for p in page["data"]} == {
            graph["posts"]["friend"],
            graph["posts"]["stranger"],
        }

    @pytest.mark.asyncio
    async def test_by_user_hides_anonymous_posts_from_others(self, service, graph):
        seen_by_me = await service.find_all(
            FeedQuery.by_user(graph["friend"]), graph["me"], PageOptions()
        )
        seen_by_author = await service.find_all(
            FeedQuery.by_user(graph["friend"]), graph["friend"], PageOptions()
        )

        assert [p["id"] for p in seen_by_me["data"]] == [graph["posts"]["friend"]]
        assert {p["id"] for p in seen_by_author["data"]} == {
            graph["posts"]["friend"],
            graph["posts"]["friend_anonymous"],
        }

    @pytest.mark.asyncio
    async def test_anonymous_author_only_shown_to_author(self, service, graph):
        anonymous_id = graph["posts"]["friend_anonymous"]

        as_other = await service.find_by_id(anonymous_id, graph["me"])
        as_author = await service.find_by_id(anonymous_id, graph["friend"])

        assert as_other["author"] is None
        assert as_author["author"]["id"] == graph["friend"]

    @pytest.mark.asyncio
    async def test_second_page_of_twenty_five(self, service, make_user, make_post):
        author = await make_user()
        author_id = author.id
        for n in range(25):
            await make_post(author_id, title=f"Post {n}")

        first = await service.find_all(FeedQuery.all(), author_id, PageOptions(page=1, limit=10))
        second = await service.find_all(FeedQuery.all(), author_id, PageOptions(page=2, limit=10))

        assert len(second["data"]) == 10
        assert second["page"] == 2
        assert second["results_count"] == 25
        assert second["total"] == 25
        first_ids = {p["id"] for p in first["data"]}
        second_ids = {p["id"] for p in second["data"]}
        assert first_ids.isdisjoint(second_ids)

    @pytest.mark.asyncio
    async def test_feed_is_newest_first(self, service, make_user, make_post):
        author = await make_user()
        older = await make_post(author.id)
        newer = await make_post(author.id)

        page = await service.find_all(FeedQuery.all(), author.id, PageOptions())

        assert [p["id"] for p in page["data"]] == [newer.id, older.id]


@pytest.mark.unit
class TestPostWrites:
    @pytest.fixture
    def service(self, db_session, image_store):
        return PostService(db_session, image_store)

    @pytest.mark.asyncio
    async def test_create_uploads_image_first(self, service, make_user, image_store):
        author = await make_user()

        result = await service.create_one(
            author.id,
            {"title": "Hello", "topic": "life", "description": "First post"},
            b"jpeg-bytes",
            "image/jpeg",
        )

        image_store.upload.assert_awaited_once_with("posts", b"jpeg-bytes", "image/jpeg")
        assert result["data"]["image"] == "https://cdn.test/posts/new.png"
        assert result["data"]["author"]["id"] == author.id

    @pytest.mark.asyncio
    async def test_failed_upload_creates_nothing(self, service, make_user, image_store, db_session):
        author = await make_user()
        author_id = author.id
        image_store.upload = AsyncMock(
            side_effect=ExternalServiceError("image store", "Image upload failed")
        )

        with pytest.raises(ExternalServiceError):
            await service.create_one(
                author_id,
                {"title": "Hello", "topic": "life", "description": "First post"},
                b"jpeg-bytes",
            )

        assert await count_rows(db_session, Post) == 0

    @pytest.mark.asyncio
    async def test_update_without_image_keeps_url(self, service, make_user, make_post, image_store):
        author = await make_user()
        post = await make_post(author.id, image="https://cdn.test/posts/kept.png")

        result = await service.update_one(post.id, {"title": "Renamed", "topic": None})

        image_store.replace.assert_not_awaited()
        assert result["data"]["title"] == "Renamed"
        assert result["data"]["topic"] == "general"
        assert result["data"]["image"] == "https://cdn.test/posts/kept.png"

    @pytest.mark.asyncio
    async def test_update_with_image_replaces_old_one(
        self, service, make_user, make_post, image_store
    ):
        author = await make_user()
        post = await make_post(author.id, image="https://cdn.test/posts/old.png")

        result = await service.update_one(post.id, {}, b"new-bytes", "image/png")

        image_store.replace.assert_awaited_once_with(
            "posts", b"new-bytes", "https://cdn.test/posts/old.png", "image/png"
        )
        assert result["data"]["image"] == "https://cdn.test/posts/replaced.png"

    @pytest.mark.asyncio
    async def test_update_missing_post(self, service):
        with pytest.raises(NotFoundError):
            await service.update_one(999, {"title": "Nope"})

    @pytest.mark.asyncio
    async def test_delete_cascades_comments_and_likes_and_detaches_notifications(
        self, service, make_user, make_post, db_session, image_store
    ):
        author = await make_user()
        fan = await make_user()
        post = await make_post(author.id, image="https://cdn.test/posts/gone.png")
        post_id, author_id, fan_id = post.id, author.id, fan.id

        comment = Comment(content="Nice", author_id=fan_id, post_id=post_id)
        db_session.add(comment)
        db_session.add(PostLike(user_id=fan_id, post_id=post_id))
        await db_session.commit()
        db_session.add(
            Notification(
                note="fan commented on your post",
                recipient_id=author_id,
                sender_id=fan_id,
                post_id=post_id,
                comment_id=comment.id,
            )
        )
        await db_session.commit()

        await service.delete_one(post_id)

        image_store.delete.assert_awaited_once_with("posts", "https://cdn.test/posts/gone.png")
        assert await count_rows(db_session, Post) == 0
        assert await count_rows(db_session, Comment) == 0
        assert await count_rows(db_session, PostLike) == 0
        notification = (
            await db_session.execute(
                select(Notification).execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert notification.post_id is None
        assert notification.comment_id is None

    @pytest.mark.asyncio
    async def test_failed_image_delete_keeps_post(
        self, service, make_user, make_post, image_store, db_session
    ):
        author = await make_user()
        post = await make_post(author.id, image="https://cdn.test/posts/stuck.png")
        post_id = post.id
        image_store.delete = AsyncMock(
            side_effect=ExternalServiceError("image store", "Image deletion failed")
        )

        with pytest.raises(ExternalServiceError):
            await service.delete_one(post_id)

        assert await count_rows(db_session, Post, Post.id == post_id) == 1


@pytest.mark.unit
class TestLikes:
    @pytest.fixture
    def service(self, db_session):
        return PostService(db_session)

    @pytest_asyncio.fixture
    async def setup(self, make_user, make_post):
        author = await make_user("author")
        fan = await make_user("fan")
        post = await make_post(author.id)
        return author.id, fan.id, post.id

    @pytest.mark.asyncio
    async def test_like_twice_keeps_one_like(self, service, setup, db_session):
        author_id, fan_id, post_id = setup

        await service.like_one(post_id, fan_id)
        result = await service.like_one(post_id, fan_id)

        assert result["data"]["likes"] == [fan_id]
        assert result["data"]["liked_by_me"] is True
        assert await count_rows(db_session, PostLike, PostLike.post_id == post_id) == 1

    @pytest.mark.asyncio
    async def test_failed_like_notification_keeps_no_like(self, service, setup, db_session):
        author_id, fan_id, post_id = setup
        service.notifications.notification_repo.create = AsyncMock(
            side_effect=RuntimeError("notifications table locked")
        )

        with pytest.raises(ServiceError):
            await service.like_one(post_id, fan_id)

        assert await count_rows(db_session, PostLike, PostLike.post_id == post_id) == 0

    @pytest.mark.asyncio
    async def test_like_then_unlike_restores_state(self, service, setup):
        author_id, fan_id, post_id = setup
        before = (await service.find_by_id(post_id, fan_id))["likes"]

        await service.like_one(post_id, fan_id)
        result = await service.remove_like_one(post_id, fan_id)

        assert result["data"]["likes"] == before == []

    @pytest.mark.asyncio
    async def test_removing_missing_like_is_a_no_op(self, service, setup):
        author_id, fan_id, post_id = setup

        result = await service.remove_like_one(post_id, fan_id)

        assert result["data"]["likes_count"] == 0

    @pytest.mark.asyncio
    async def test_new_like_notifies_author_once(self, service, setup, db_session):
        author_id, fan_id, post_id = setup

        await service.like_one(post_id, fan_id)
        await service.like_one(post_id, fan_id)

        notes = (
            await db_session.execute(
                select(Notification).where(Notification.recipient_id == author_id)
            )
        ).scalars().all()
        assert len(notes) == 1
        assert notes[0].sender_id == fan_id
        assert notes[0].post_id == post_id

    @pytest.mark.asyncio
    async def test_liking_own_post_does_not_notify(self, service, setup, db_session):
        author_id, fan_id, post_id = setup

        await service.like_one(post_id, author_id)

        assert await count_rows(db_session, Notification) == 0

    @pytest.mark.asyncio
    async def test_like_missing_post(self, service, setup):
        author_id, fan_id, post_id = setup

        with pytest.raises(NotFoundError):
            await service.like_one(999, fan_id)

    @pytest.mark.asyncio
    async def test_likers_filter_keeps_raw_total(self, service, setup, make_user):
        author_id, fan_id, post_id = setup
        other = await make_user("otto")
        other_id = other.id
        await service.like_one(post_id, fan_id)
        await service.like_one(post_id, other_id)

        everyone = await service.get_likes(post_id, None, PageOptions())
        filtered = await service.get_likes(post_id, "OTT", PageOptions())

        assert [u["id"] for u in everyone["data"]] == [fan_id, other_id]
        assert [u["id"] for u in filtered["data"]] == [other_id]
        assert filtered["results_count"] == 1
        assert filtered["total"] == 2
