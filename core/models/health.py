# =============================================================================
# core/models/health.py - Health Monitoring Schemas
# =============================================================================
# Health records are append-only: a student's history is never edited or
# auto-deleted. Severity and urgency labels are derived from the assistant's
# free text by keyword search.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Symptom severity, from least to most serious."""
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    EMERGENCY = "emergency"


class Urgency(str, Enum):
    """How soon the student should get help."""
    IMMEDIATE = "immediate"
    URGENT = "urgent"
    ROUTINE = "routine"


class SymptomAssessment(BaseModel):
    severity: Severity
    ai_suggestions: str
    professional_recommendation: str


class EmergencyAssessment(BaseModel):
    is_emergency: bool
    urgency: Urgency
    action: str


class HealthRecord(BaseModel):
    """A row from the health_monitoring table."""

    id: str | None = None
    student_id: str | None = None
    symptoms: str
    severity: Severity
    duration: int = Field(default=0, ge=0, description="Days the symptoms have lasted")
    notes: str = ""
    ai_suggestions: str = ""
    professional_recommendation: str = ""
    reported_at: datetime | None = None
    last_updated: datetime | None = None


class SymptomReport(BaseModel):
    """Request body for a symptom assessment."""

    symptoms: str = Field(..., min_length=1)
    duration: int = Field(default=1, ge=0)
    notes: str = ""
    save: bool = Field(default=True, description="Store the assessment in the health history")


class EmergencyCheck(BaseModel):
    symptoms: str = Field(..., min_length=1)


class WellnessCheckIn(BaseModel):
    mood: str
    energy: str
    sleep: str
    stress: str
