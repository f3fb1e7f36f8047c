"""
Unit tests for the Celery-backed email sender.
"""

import asyncio
import time
from unittest.mock import patch

import pytest

from socialnet.core.exceptions import ExternalServiceError
from socialnet.core.mailer import EmailSender
from socialnet.tasks.email_tasks import send_email


@pytest.mark.unit
class TestEmailSender:
    @pytest.mark.asyncio
    async def test_send_queues_the_email_task(self):
        with patch.object(send_email, "delay") as delay:
            await EmailSender().send("no-reply@x.test", "ada@x.test", "Hi", "<p>Hi</p>")

        delay.assert_called_once_with("no-reply@x.test", "ada@x.test", "Hi", "<p>Hi</p>")

    @pytest.mark.asyncio
    async def test_slow_broker_does_not_block_the_event_loop(self):
        gaps = []

        async def ticker():
            last = time.monotonic()
            for _ in range(6):
                await asyncio.sleep(0.05)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        with patch.object(send_email, "delay", side_effect=lambda *args: time.sleep(0.4)):
            await asyncio.gather(
                EmailSender().send("no-reply@x.test", "ada@x.test", "Hi", "<p>Hi</p>"),
                ticker(),
            )

        assert max(gaps) < 0.2

    @pytest.mark.asyncio
    async def test_broker_failure_is_an_external_service_error(self):
        with patch.object(send_email, "delay", side_effect=ConnectionError("broker down")):
            with pytest.raises(ExternalServiceError):
                await EmailSender().send("no-reply@x.test", "ada@x.test", "Hi", "<p>Hi</p>")
