"""
Unit tests for Notification Service.
"""

import pytest
import pytest_asyncio

from socialnet.core.exceptions import BadRequestError, NotFoundError
from socialnet.schemas.common import PageOptions
from socialnet.services.notification_service import NotificationService


@pytest.mark.unit
class TestNotificationService:
    @pytest.fixture
    def service(self, db_session):
        return NotificationService(db_session)

    @pytest_asyncio.fixture
    async def pair(self, make_user):
        recipient = await make_user("recipient")
        sender = await make_user("sender")
        return recipient.id, sender.id

    @pytest.mark.asyncio
    async def test_notify_skips_self(self, service, pair):
        recipient_id, _ = pair

        assert await service.notify(recipient_id, recipient_id, "talking to myself") is None

        inbox = await service.find_all(recipient_id, PageOptions())
        assert inbox["total"] == 0

    @pytest.mark.asyncio
    async def test_create_for_yourself_is_bad_request(self, service, pair):
        recipient_id, _ = pair

        with pytest.raises(BadRequestError):
            await service.create_one(recipient_id, recipient_id, "hi me")

    @pytest.mark.asyncio
    async def test_create_for_missing_recipient(self, service, pair):
        _, sender_id = pair

        with pytest.raises(NotFoundError):
            await service.create_one(sender_id, 999, "anyone there?")

    @pytest.mark.asyncio
    async def test_create_with_missing_post(self, service, pair):
        recipient_id, sender_id = pair

        with pytest.raises(NotFoundError):
            await service.create_one(sender_id, recipient_id, "look", post_id=999)

    @pytest.mark.asyncio
    async def test_inbox_newest_first_with_sender(self, service, pair):
        recipient_id, sender_id = pair
        await service.notify(recipient_id, sender_id, "first")
        await service.notify(recipient_id, sender_id, "second")

        inbox = await service.find_all(recipient_id, PageOptions())

        assert [n["note"] for n in inbox["data"]] == ["second", "first"]
        assert inbox["data"][0]["sender"]["username"] == "sender"
        assert inbox["data"][0]["has_read"] is False

    @pytest.mark.asyncio
    async def test_unread_filter_keeps_inbox_total(self, service, pair):
        recipient_id, sender_id = pair
        first = await service.notify(recipient_id, sender_id, "first")
        await service.notify(recipient_id, sender_id, "second")
        await service.mark_read(first.id)

        unread = await service.find_all(recipient_id, PageOptions(), unread_only=True)

        assert [n["note"] for n in unread["data"]] == ["second"]
        assert unread["results_count"] == 1
        assert unread["total"] == 2

    @pytest.mark.asyncio
    async def test_mark_all_read(self, service, pair):
        recipient_id, sender_id = pair
        await service.notify(recipient_id, sender_id, "first")
        await service.notify(recipient_id, sender_id, "second")

        result = await service.mark_all_read(recipient_id)

        assert result["updated"] == 2
        unread = await service.find_all(recipient_id, PageOptions(), unread_only=True)
        assert unread["results_count"] == 0

    @pytest.mark.asyncio
    async def test_mark_unread_again(self, service, pair):
        recipient_id, sender_id = pair
        note = await service.notify(recipient_id, sender_id, "first")
        note_id = note.id
        await service.mark_read(note_id)

        result = await service.mark_read(note_id, has_read=False)

        assert result["data"]["has_read"] is False

    @pytest.mark.asyncio
    async def test_delete(self, service, pair):
        recipient_id, sender_id = pair
        note = await service.notify(recipient_id, sender_id, "bye")
        note_id = note.id

        await service.delete_one(note_id)

        with pytest.raises(NotFoundError):
            await service.find_by_id(note_id)
