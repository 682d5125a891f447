"""Import every ORM module so ``Base.metadata`` knows all tables."""

from agrimandi.infrastructure.db.orm import (  # noqa: F401
    account,
    commodity,
    connection_request,
    mandi_price,
    one_time_token,
)
