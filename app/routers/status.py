# =============================================================================
# app/routers/status.py - Service Status Endpoints
# =============================================================================
# Liveness and readiness checks for load balancers and monitoring. These
# describe the API process itself; student health lives in wellbeing.py.
#
# Readiness checks each external dependency SmartHub needs to serve
# requests: the database, the payment gateway and the assistant backend.
# =============================================================================

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import SupabaseDep
from app.websocket.manager import websocket_manager
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class StatusResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str
    realtime_connections: int


class DependencyChecks(BaseModel):
    """One entry per external dependency."""
    database: str
    payments: str
    assistant: str


class ReadinessResponse(BaseModel):
    status: str
    checks: DependencyChecks
    timestamp: str


# =============================================================================
# Checks
# =============================================================================

def check_database(db: SupabaseClient) -> str:
    """Run the cheapest possible query against profiles."""
    try:
        db.table("profiles").select("id").limit(1).execute()
    except Exception as e:
        logger.warning(f"Readiness: database check failed: {e}")
        return f"unhealthy: {str(e)[:50]}"
    return "healthy"


def check_configured(value: str) -> str:
    return "configured" if value else "not configured"


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=StatusResponse)
async def service_status():
    """Basic status for load balancers and monitoring."""
    return StatusResponse(
        status="healthy",
        timestamp=utc_now().isoformat(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
        realtime_connections=websocket_manager.get_connection_count(),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(db: SupabaseDep):
    """
    Ready only when the database answers and both the payment gateway and
    the assistant backend have credentials. Otherwise "degraded"; the API
    still serves what it can (assistant calls fall back to canned replies).
    """
    checks = DependencyChecks(
        database=check_database(db),
        payments=check_configured(settings.PAYSTACK_SECRET_KEY),
        assistant=check_configured(settings.OPENAI_API_KEY),
    )

    ready = (
        checks.database == "healthy"
        and checks.payments == "configured"
        and checks.assistant == "configured"
    )

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=utc_now().isoformat(),
    )


@router.get("/health/live")
async def liveness():
    """The process is up."""
    return {"status": "alive", "timestamp": utc_now().isoformat()}
