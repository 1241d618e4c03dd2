# =============================================================================
# app/routers/wellbeing.py - Student Health Endpoints
# =============================================================================
# Symptom assessment, emergency triage, health history and wellness.
# None of this is a diagnosis: every assessment recommends professional care
# and the emergency check errs toward "call emergency services".
# =============================================================================

import logging

from fastapi import APIRouter, Query
from pydantic import BaseModel

from app.dependencies import HealthServiceDep
from core.models.health import (
    EmergencyAssessment,
    EmergencyCheck,
    HealthRecord,
    SymptomAssessment,
    SymptomReport,
    WellnessCheckIn,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class AssessmentResponse(BaseModel):
    """An assessment and, if it was saved, the stored record."""
    assessment: SymptomAssessment
    record: HealthRecord | None = None


class WellnessResponse(BaseModel):
    content: str


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/assess", response_model=AssessmentResponse)
async def assess_symptoms(report: SymptomReport, health: HealthServiceDep):
    """
    Assess reported symptoms and, unless `save` is false, store the result.
    """
    assessment = health.assess_symptoms(report.symptoms, report.duration, report.notes)

    record = None
    if report.save:
        record = health.save_health_record(HealthRecord(
            symptoms=report.symptoms,
            severity=assessment.severity,
            duration=report.duration,
            notes=report.notes,
            ai_suggestions=assessment.ai_suggestions,
            professional_recommendation=assessment.professional_recommendation,
        ))

    return AssessmentResponse(assessment=assessment, record=record)


@router.post("/emergency", response_model=EmergencyAssessment)
async def emergency_check(request: EmergencyCheck, health: HealthServiceDep):
    """
    Triage symptoms for urgency.

    If the assistant can't answer, the result is always an emergency.
    """
    result = health.assess_emergency(request.symptoms)
    if result.is_emergency:
        logger.warning(f"Emergency flagged for student {health.student_id}")
    return result


@router.get("/records", response_model=list[HealthRecord])
async def health_history(health: HealthServiceDep):
    """Stored assessments, most recent first."""
    return health.get_health_history()


@router.get("/tips", response_model=list[str])
async def health_tips(
    health: HealthServiceDep,
    category: str | None = Query(default=None, description="e.g. sleep, nutrition, stress"),
):
    return health.get_health_tips(category)


@router.post("/wellness", response_model=WellnessResponse)
async def wellness_check_in(check_in: WellnessCheckIn, health: HealthServiceDep):
    content = health.wellness_check_in(
        check_in.mood, check_in.energy, check_in.sleep, check_in.stress
    )
    return WellnessResponse(content=content)
