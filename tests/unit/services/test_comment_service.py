"""
Unit tests for Comment Service.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from socialnet.core.exceptions import NotFoundError, ServiceError
from socialnet.models.comment import Comment
from socialnet.models.notification import Notification
from socialnet.services.comment_service import CommentService
from socialnet.services.post_service import PostService


@pytest.mark.unit
class TestCommentService:
    @pytest.fixture
    def service(self, db_session):
        return CommentService(db_session)

    @pytest_asyncio.fixture
    async def setup(self, make_user, make_post):
        author = await make_user("author")
        commenter = await make_user("commenter")
        post = await make_post(author.id)
        return author.id, commenter.id, post.id

    @pytest.mark.asyncio
    async def test_comment_on_missing_post(self, service, setup):
        _, commenter_id, _ = setup

        with pytest.raises(NotFoundError):
            await service.create_one(commenter_id, 999, "Hello?")

    @pytest.mark.asyncio
    async def test_failed_notification_keeps_no_comment(self, service, setup, db_session):
        _, commenter_id, post_id = setup
        service.notifications.notification_repo.create = AsyncMock(
            side_effect=RuntimeError("notifications table locked")
        )

        with pytest.raises(ServiceError):
            await service.create_one(commenter_id, post_id, "Lost words")

        result = await db_session.execute(
            select(func.count(Comment.id)).where(Comment.post_id == post_id)
        )
        assert result.scalar() == 0

    @pytest.mark.asyncio
    async def test_comment_shows_up_on_post_and_notifies_author(
        self, service, setup, db_session
    ):
        author_id, commenter_id, post_id = setup

        result = await service.create_one(commenter_id, post_id, "Great post")

        comment_id = result["data"]["id"]
        assert result["data"]["author"]["id"] == commenter_id
        post = await PostService(db_session).find_by_id(post_id)
        assert post["comments_count"] == 1

        notification = (
            await db_session.execute(
                select(Notification).where(Notification.recipient_id == author_id)
            )
        ).scalar_one()
        assert notification.sender_id == commenter_id
        assert notification.post_id == post_id
        assert notification.comment_id == comment_id

    @pytest.mark.asyncio
    async def test_commenting_on_own_post_does_not_notify(self, service, setup, db_session):
        author_id, _, post_id = setup

        await service.create_one(author_id, post_id, "Bumping my own post")

        count = await db_session.execute(select(func.count(Notification.id)))
        assert count.scalar() == 0

    @pytest.mark.asyncio
    async def test_delete_removes_comment_from_post(self, service, setup, db_session):
        _, commenter_id, post_id = setup
        created = await service.create_one(commenter_id, post_id, "Soon gone")
        comment_id = created["data"]["id"]

        await service.delete_one(comment_id)

        post = await PostService(db_session).find_by_id(post_id)
        assert post["comments_count"] == 0
        assert await db_session.get(Comment, comment_id, populate_existing=True) is None
        notification = (await db_session.execute(select(Notification))).scalar_one()
        assert notification.comment_id is None

    @pytest.mark.asyncio
    async def test_delete_missing_comment(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_one(999)

    @pytest.mark.asyncio
    async def test_update_and_list(self, service, setup):
        _, commenter_id, post_id = setup
        first = await service.create_one(commenter_id, post_id, "one")
        await service.create_one(commenter_id, post_id, "two")

        updated = await service.update_one(first["data"]["id"], "one, edited")
        listed = await service.find_all(post_id)

        assert updated["data"]["content"] == "one, edited"
        assert [c["content"] for c in listed] == ["one, edited", "two"]

    @pytest.mark.asyncio
    async def test_list_for_missing_post(self, service):
        with pytest.raises(NotFoundError):
            await service.find_all(999)
