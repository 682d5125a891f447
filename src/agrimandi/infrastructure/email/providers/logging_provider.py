from __future__ import annotations

import logging

from agrimandi.infrastructure.email.models import EmailMessage, EmailService

logger = logging.getLogger(__name__)


class LoggingEmailService(EmailService):
    """Development provider: writes the envelope and plain-text body to the log."""

    async def send(self, message: EmailMessage) -> None:
        logger.info(
            "Email (logging provider) to=%s from=%s <%s> subject=%r html=%s",
            ",".join(message.to),
            message.from_name or "",
            message.from_email or "",
            message.subject,
            "yes" if message.html else "no",
        )
        if message.text:
            logger.debug("Email body:\n%s", message.text)
