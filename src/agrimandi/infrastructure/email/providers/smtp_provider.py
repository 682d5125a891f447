from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from agrimandi.infrastructure.email.models import EmailMessage, EmailService


def build_mime(message: EmailMessage) -> MIMEMultipart:
    mime = MIMEMultipart("alternative")
    mime["Subject"] = message.subject
    if message.from_email:
        mime["From"] = f"{message.from_name or ''} <{message.from_email}>".strip()
    mime["To"] = ", ".join(message.to)
    # Plain part first; clients render the last alternative they understand.
    if message.text:
        mime.attach(MIMEText(message.text, "plain", "utf-8"))
    if message.html:
        mime.attach(MIMEText(message.html, "html", "utf-8"))
    return mime


class SMTPEmailService(EmailService):
    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        use_ssl: bool = False,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.use_ssl = use_ssl
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.ehlo()
        if self.use_tls:
            server.starttls(context=context)
            server.ehlo()
        return server

    def _deliver(self, message: EmailMessage) -> None:
        payload = build_mime(message).as_string()
        with self._connect() as server:
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(message.from_email or "", list(message.to), payload)

    async def send(self, message: EmailMessage) -> None:
        if not message.to:
            return
        await asyncio.to_thread(self._deliver, message)
