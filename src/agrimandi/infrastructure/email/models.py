from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence


@dataclass(slots=True)
class EmailMessage:
    subject: str
    to: Sequence[str] = field(default_factory=list)
    text: str | None = None
    html: str | None = None
    from_email: str | None = None
    from_name: str | None = None

    def addressed_to(self, *recipients: str) -> EmailMessage:
        return EmailMessage(
            subject=self.subject,
            to=list(recipients),
            text=self.text,
            html=self.html,
            from_email=self.from_email,
            from_name=self.from_name,
        )


class EmailService:
    async def send(self, message: EmailMessage) -> None:  # pragma: no cover - interface
        raise NotImplementedError
