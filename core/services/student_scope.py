# =============================================================================
# core/services/student_scope.py - Student-Bound Service Base
# =============================================================================
# Meal, learning and health services each act on behalf of exactly one
# student. The student is bound once with set_student_id(); every
# student-scoped operation fails fast until then.
# =============================================================================

from uuid import UUID

from agents.assistant import AssistantClient
from app.exceptions import StudentIdNotSetError
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid


class StudentScopedService:
    """
    Base for services bound to a single student.

    Example:
        service = HealthService(db, assistant)
        service.set_student_id(user.id)
        service.get_health_history()
    """

    def __init__(
        self,
        db: SupabaseClient,
        assistant: AssistantClient,
        student_id: str | UUID | None = None,
    ):
        self.db = db
        self.assistant = assistant
        self._student_id: str | None = None
        if student_id:
            self.set_student_id(student_id)

    def set_student_id(self, student_id: str | UUID) -> None:
        self._student_id = normalize_uuid(student_id)

    @property
    def student_id(self) -> str:
        """
        The bound student.

        Raises:
            StudentIdNotSetError: If set_student_id() hasn't been called
        """
        if not self._student_id:
            raise StudentIdNotSetError()
        return self._student_id
