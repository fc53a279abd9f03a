from __future__ import annotations

import structlog

from ..core.exceptions import AuthorizationError
from ..directory.repository import ClassRepository, CoachRepository
from .model import SessionContext

logger = structlog.get_logger(__name__)


class AccessPolicy:
    """Write permission: admins, or the coach assigned to the target class."""

    def __init__(self, classes: ClassRepository, coaches: CoachRepository):
        self._classes = classes
        self._coaches = coaches

    def ensure_can_write_class(self, session: SessionContext, class_id: str) -> None:
        if session.is_admin:
            return

        section = self._classes.get_by_id(session.management_id, class_id) if class_id else None
        if not section or not section.coach_id:
            logger.info("write_denied", reason="no_assigned_coach", class_id=class_id, email=session.email)
            raise AuthorizationError("Only admins can update records for classes without an assigned coach")

        if not session.email or not self._coaches.is_assigned(
            session.management_id, email=session.email, coach_id=section.coach_id
        ):
            logger.info("write_denied", reason="not_assigned_coach", class_id=class_id, email=session.email)
            raise AuthorizationError("Only admins or the assigned coach can update records for this class")
