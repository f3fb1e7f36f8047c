"""
Background tasks for outbound email.

Emails are rendered by the API process and handed to a worker, which
delivers them over SMTP.
"""

import logging
import smtplib
from email.message import EmailMessage

from socialnet.config import settings
from socialnet.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def build_message(sender: str, recipient: str, subject: str, html_body: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = subject
    message.set_content(html_body)
    message.add_alternative(html_body, subtype="html")
    return message


@celery_app.task(name="socialnet.tasks.email_tasks.send_email")
def send_email(sender: str, recipient: str, subject: str, html_body: str) -> None:
    """
    Deliver one email over SMTP.

    Args:
        sender: From address
        recipient: To address
        subject: Subject line
        html_body: HTML body (also used as the plain-text part)
    """
    message = build_message(sender, recipient, subject, html_body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_username:
                smtp.login(settings.smtp_username, settings.smtp_password or "")
            smtp.send_message(message)

    except (smtplib.SMTPException, OSError) as exc:
        logger.error(f"Error sending email to {recipient}: {exc}")
        raise

    logger.info(f"Email '{subject}' sent to {recipient}")
