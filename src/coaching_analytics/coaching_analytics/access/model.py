from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class SessionContext:
    """Tenant and actor of the current request (issued by the auth collaborator)."""

    management_id: str
    role: Role
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
