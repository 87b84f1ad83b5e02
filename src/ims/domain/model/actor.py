"""The verified identity on whose behalf an operation runs.

Authentication happens outside the engine; callers hand in an Actor
that is trusted for ledger and audit attribution and for role guards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ims.domain.exceptions import ValidationError


class Role(Enum):
    ADMIN = "admin"
    STOREKEEPER = "storekeeper"
    HOD = "hod"
    ACCOUNTS = "accounts"


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: Role

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValidationError("Actor user id is required")

    @staticmethod
    def of(user_id: str, role: str | Role) -> Actor:
        if isinstance(role, Role):
            return Actor(user_id=user_id, role=role)
        try:
            return Actor(user_id=user_id, role=Role(role.lower()))
        except ValueError as exc:
            raise ValidationError(f"Unknown role: {role!r}") from exc
