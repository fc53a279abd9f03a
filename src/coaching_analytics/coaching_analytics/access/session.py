from __future__ import annotations

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import SessionContext


def current_session() -> SessionContext:
    """Read the tenant context from the signed Flask session cookie."""

    management_id = session.get("management_id")
    if not management_id:
        raise AuthenticationError("Unauthorized")

    try:
        role = Role(session.get("role") or Role.USER.value)
    except ValueError:
        role = Role.USER

    return SessionContext(
        management_id=str(management_id),
        role=role,
        email=session.get("email") or None,
    )
