"""
Outbound email sender.

`send` hands the rendered email to the Celery worker and returns once the
task is queued; delivery happens out of band.
"""

import asyncio
import logging

from socialnet.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class EmailSender:
    """
    Dispatches emails to the `send_email` Celery task.

    Publishing to the broker is blocking (and retries while the broker is
    down), so it runs in the default thread pool.
    """

    async def send(self, sender: str, recipient: str, subject: str, html_body: str) -> None:
        from socialnet.tasks.email_tasks import send_email

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(
                None, lambda: send_email.delay(sender, recipient, subject, html_body)
            )
        except Exception as e:
            logger.error(f"Could not queue email to {recipient}: {e}")
            raise ExternalServiceError("email", "Could not send the email") from e

        logger.info(f"Queued email '{subject}' to {recipient}")
