"""
Authenticated principal.

Accounts live in the external account service; this service only sees the
identity and role carried by a verified bearer token.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Principal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
