# =============================================================================
# core/services/health_service.py - Symptom Assessment and Health History
# =============================================================================
# Severity and urgency are read off the assistant's free text by keyword:
#
#   "emergency" / "immediate" -> emergency
#   "severe"                  -> severe
#   "moderate"                -> moderate
#   otherwise                 -> mild
#
# Emergency assessment fails SAFE: if anything goes wrong (including the
# assistant falling back to a canned reply) the student is told to call
# emergency services.
#
# Health records are append-only.
# =============================================================================

import logging
import re
from uuid import UUID

from agents.assistant import AssistantClient
from agents.guardrails import UnsafeResponseError, is_fallback_response
from agents.prompts.service_prompts import (
    build_emergency_prompt,
    build_health_tips_prompt,
    build_symptoms_prompt,
    build_wellness_prompt,
)
from agents.structured_output import extract_list_items
from core.models.health import (
    EmergencyAssessment,
    HealthRecord,
    Severity,
    SymptomAssessment,
    Urgency,
)
from core.services.student_scope import StudentScopedService
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now

logger = logging.getLogger(__name__)

PROFESSIONAL_RECOMMENDATION = (
    "IMPORTANT: This is not medical advice. Please consult a qualified healthcare "
    "professional for proper diagnosis and treatment. If symptoms are severe or "
    "worsening, seek immediate medical attention."
)

DEFAULT_SUGGESTIONS = "Please consult a healthcare professional for personalized advice."

EMERGENCY_ACTION = "CALL EMERGENCY SERVICES (911 or local emergency number) IMMEDIATELY"
NON_EMERGENCY_ACTION = "Contact a healthcare provider as soon as possible"
FAILSAFE_ACTION = "CALL EMERGENCY SERVICES IMMEDIATELY"

DEFAULT_HEALTH_TIPS = [
    "Drink at least 8 glasses of water daily",
    "Get 7-9 hours of sleep each night",
    "Take short breaks during study sessions",
    "Eat balanced meals with fruits and vegetables",
    "Practice deep breathing for stress relief",
]

WELLNESS_FALLBACK = (
    "Thank you for checking in. Remember to prioritize self-care and reach out "
    "to counselors or healthcare providers when needed."
)

_SUGGESTION_MARKERS = ("suggestion", "recommend", "try")

_YES_PATTERN = re.compile(r"\byes\b", re.IGNORECASE)


# =============================================================================
# Keyword Extraction
# =============================================================================

def extract_severity(text: str) -> Severity:
    lower_text = (text or "").lower()
    if "emergency" in lower_text or "immediate" in lower_text:
        return Severity.EMERGENCY
    if "severe" in lower_text:
        return Severity.SEVERE
    if "moderate" in lower_text:
        return Severity.MODERATE
    return Severity.MILD


def extract_urgency(text: str) -> Urgency:
    lower_text = (text or "").lower()
    if "immediate" in lower_text or "emergency" in lower_text:
        return Urgency.IMMEDIATE
    if "urgent" in lower_text:
        return Urgency.URGENT
    return Urgency.ROUTINE


def extract_suggestions(text: str) -> str:
    """Lines that suggest, recommend or ask the student to try something."""
    lines = [
        line for line in (text or "").splitlines()
        if any(marker in line.lower() for marker in _SUGGESTION_MARKERS)
    ]
    return "\n".join(lines) or DEFAULT_SUGGESTIONS


def answers_yes(text: str) -> bool:
    """A "yes" to the emergency prompt's own yes/no question."""
    return _YES_PATTERN.search(text or "") is not None


def failsafe_emergency() -> EmergencyAssessment:
    return EmergencyAssessment(
        is_emergency=True,
        urgency=Urgency.IMMEDIATE,
        action=FAILSAFE_ACTION,
    )


# =============================================================================
# Service
# =============================================================================

class HealthService(StudentScopedService):
    """
    Health advice and history for one student.

    Example:
        service = HealthService(db, assistant, student_id=user.id)
        assessment = service.assess_symptoms("headache and fever", duration=2)
        service.save_health_record(HealthRecord(symptoms="...", severity=assessment.severity, ...))
    """

    def __init__(
        self,
        db: SupabaseClient,
        assistant: AssistantClient,
        student_id: str | UUID | None = None,
    ):
        super().__init__(db, assistant, student_id=student_id)

    # -------------------------------------------------------------------------
    # Assessment
    # -------------------------------------------------------------------------

    def assess_symptoms(
        self,
        symptoms: str,
        duration: int,
        notes: str = "",
    ) -> SymptomAssessment:
        reply = self.assistant.send_message(build_symptoms_prompt(symptoms, duration, notes))

        return SymptomAssessment(
            severity=extract_severity(reply),
            ai_suggestions=extract_suggestions(reply),
            professional_recommendation=PROFESSIONAL_RECOMMENDATION,
        )

    def assess_emergency(self, symptoms: str) -> EmergencyAssessment:
        """
        Decide whether the symptoms need emergency care.

        Never raises. Any failure returns is_emergency=True with urgency
        'immediate'.
        """
        try:
            reply = self.assistant.send_message(build_emergency_prompt(symptoms))
            if is_fallback_response(reply):
                raise UnsafeResponseError("Assistant unavailable for emergency assessment")

            is_emergency = extract_severity(reply) == Severity.EMERGENCY or answers_yes(reply)
            return EmergencyAssessment(
                is_emergency=is_emergency,
                urgency=Urgency.IMMEDIATE if is_emergency else extract_urgency(reply),
                action=EMERGENCY_ACTION if is_emergency else NON_EMERGENCY_ACTION,
            )
        except Exception as e:
            logger.error(f"Emergency assessment failed, defaulting to emergency: {e}")
            return failsafe_emergency()

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def save_health_record(self, record: HealthRecord) -> HealthRecord:
        """Append a record to the student's health history."""
        student_id = self.student_id
        now = utc_now().isoformat()

        row = self.db.insert("health_monitoring", {
            "student_id": student_id,
            "symptoms": record.symptoms,
            "severity": Severity(record.severity).value,
            "duration_days": record.duration,
            "additional_notes": record.notes,
            "ai_suggestions": record.ai_suggestions,
            "professional_recommendation": record.professional_recommendation,
            "reported_at": now,
            "last_updated": now,
        })

        logger.info(f"Saved {record.severity} health record for student {student_id}")
        return self._to_record(row)

    def get_health_history(self) -> list[HealthRecord]:
        """Newest first."""
        response = (
            self.db.table("health_monitoring")
            .select("*")
            .eq("student_id", self.student_id)
            .order("reported_at", desc=True)
            .execute()
        )
        return [self._to_record(row) for row in response.data or []]

    @staticmethod
    def _to_record(row: dict) -> HealthRecord:
        return HealthRecord(
            id=str(row["id"]) if row.get("id") else None,
            student_id=row.get("student_id"),
            symptoms=row.get("symptoms", ""),
            severity=row.get("severity", Severity.MILD),
            duration=row.get("duration_days") or 0,
            notes=row.get("additional_notes") or "",
            ai_suggestions=row.get("ai_suggestions") or "",
            professional_recommendation=row.get("professional_recommendation") or "",
            reported_at=row.get("reported_at"),
            last_updated=row.get("last_updated"),
        )

    # -------------------------------------------------------------------------
    # Wellness
    # -------------------------------------------------------------------------

    def get_health_tips(self, category: str | None = None) -> list[str]:
        reply = self.assistant.send_message(build_health_tips_prompt(category))
        tips = [] if is_fallback_response(reply) else extract_list_items(reply, limit=5)
        return tips or list(DEFAULT_HEALTH_TIPS)

    def wellness_check_in(self, mood: str, energy: str, sleep: str, stress: str) -> str:
        reply = self.assistant.send_message(build_wellness_prompt(mood, energy, sleep, stress))
        if is_fallback_response(reply):
            return WELLNESS_FALLBACK
        return reply
