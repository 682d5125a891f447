from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound, select_autoescape

from agrimandi.config.settings import Settings
from agrimandi.infrastructure.email.models import EmailMessage

FALLBACK_LOCALE = "en"


@dataclass(slots=True)
class EmailTemplateRenderer:
    base_path: Path
    env: Environment

    @classmethod
    def create_default(cls) -> EmailTemplateRenderer:
        base = Path(__file__).resolve().parent.parent / "templates"
        env = Environment(
            loader=FileSystemLoader(str(base)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
        )
        return cls(base_path=base, env=env)

    def _load(self, kind: str, locale: str, name: str):
        # e.g. en/request_accepted/subject.txt.j2
        try:
            return self.env.get_template(f"{locale}/{kind}/{name}")
        except TemplateNotFound:
            if locale == FALLBACK_LOCALE:
                raise
            return self.env.get_template(f"{FALLBACK_LOCALE}/{kind}/{name}")

    def _load_optional(self, kind: str, locale: str, name: str):
        try:
            return self._load(kind, locale, name)
        except TemplateNotFound:
            return None

    def render(
        self,
        *,
        kind: str,
        settings: Settings,
        context: dict[str, Any],
        locale: str | None = None,
    ) -> EmailMessage:
        loc = (locale or settings.email_default_locale or FALLBACK_LOCALE).lower()
        ctx = {
            "app": {"name": settings.email_from_name, "url": settings.app_url.rstrip("/")},
            **context,
        }
        subject = self._load(kind, loc, "subject.txt.j2").render(ctx).strip()
        text = self._load(kind, loc, "body.txt.j2").render(ctx).strip()
        html = None
        html_tpl = self._load_optional(kind, loc, "body.html.j2")
        if html_tpl is not None:
            inner = html_tpl.render(ctx)
            layout = self._load_optional("_layout", loc, "layout.html.j2")
            html = layout.render({**ctx, "content": inner}) if layout is not None else inner
        return EmailMessage(
            subject=subject,
            text=text,
            html=html,
            from_email=settings.email_from_address,
            from_name=settings.email_from_name,
        )
