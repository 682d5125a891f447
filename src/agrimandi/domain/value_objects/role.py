from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    BUYER = "buyer"
    FARMER = "farmer"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str | None, *, default: Role | None = None) -> Role | None:
        if value is None:
            return default
        try:
            return cls(value.strip().lower())
        except ValueError:
            return default
