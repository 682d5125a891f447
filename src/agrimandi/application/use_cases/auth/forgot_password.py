from __future__ import annotations

import logging
from secrets import token_urlsafe

from agrimandi.application.events.models import PasswordResetRequestedEvent
from agrimandi.application.interfaces.unit_of_work import UnitOfWork
from agrimandi.domain.models.one_time_token import OneTimeToken, TokenPurpose

logger = logging.getLogger(__name__)


async def execute(*, uow: UnitOfWork, email: str, token_ttl_minutes: int = 24 * 60) -> str | None:
    """Issue a reset token for a known email.

    Callers always answer with the same message so the endpoint cannot be used
    to find out which emails are registered. Returns the token for known accounts.
    """
    account = await uow.accounts.get_by_email((email or "").strip().lower())
    if not account:
        logger.info("Password reset requested for unknown email")
        return None
    await uow.one_time_tokens.invalidate_all_for_purpose(account.id, TokenPurpose.RESET_PASSWORD)
    token = OneTimeToken.create(
        token=token_urlsafe(32),
        account_id=account.id,
        purpose=TokenPurpose.RESET_PASSWORD,
        expires_in_minutes=token_ttl_minutes,
    )
    await uow.one_time_tokens.add(token)
    uow.add_event(PasswordResetRequestedEvent(account_id=account.id, token=token.token))
    await uow.commit()
    return token.token
