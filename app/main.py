# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the SmartHub API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import SmartHubException, smarthub_exception_handler
from app.routers import assistant, funding, hooks, learning, meals, notifications, status, wellbeing
from app.auth import routes as auth_routes
from app.websocket import routes as websocket_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the effective configuration on startup and warns about settings
    that leave features degraded.
    """
    logger.info(f"Starting SmartHub API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Assistant model: {settings.OPENAI_MODEL} (timeout {settings.ASSISTANT_TIMEOUT_SECONDS}s)")

    if not settings.PAYSTACK_SECRET_KEY:
        logger.warning("PAYSTACK_SECRET_KEY is not set; donations and top-ups will fail")
    if not settings.SUPABASE_JWT_SECRET:
        logger.warning("SUPABASE_JWT_SECRET is not set; only JWKS-signed tokens will verify")

    yield

    logger.info("Shutting down SmartHub API")


# Create FastAPI application
app = FastAPI(
    title="SmartHub API",
    description="""
## Student Support API

SmartHub helps students with meals, learning and health, and lets donors
fund the meals students request.

### Features

| Area | What it does |
|------|--------------|
| **Assistant** | Chat with an AI assistant that knows the student's grade and school |
| **Meals** | Budget meal plans, quick meal ideas, grocery lists, meal requests |
| **Learning** | Generated quizzes, lessons, questions and per-topic progress |
| **Health** | Symptom assessment, emergency triage, health history, wellness check-ins |
| **Funding** | Admin approval, donor payments, donor balance top-ups |

### Meal Request Lifecycle

```
pending --approve--> approved --donor pays--> funded
pending --reject---> rejected
```

### Quick Start

```bash
# 1. Sign in
curl -X POST http://localhost:8000/api/v1/auth/signin \\
  -H "Content-Type: application/json" \\
  -d '{"email": "student@example.com", "password": "secret123"}'

# 2. Ask the assistant
curl -X POST http://localhost:8000/api/v1/assistant/chat \\
  -H "Authorization: Bearer $TOKEN" \\
  -H "Content-Type: application/json" \\
  -d '{"message": "Help me revise fractions"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Sign up, sign in and profile endpoints",
        },
        {
            "name": "Assistant",
            "description": "Conversational AI assistant",
        },
        {
            "name": "Meals",
            "description": "Meal plans, meal ideas and meal requests",
        },
        {
            "name": "Learning",
            "description": "Quizzes, lessons and learning progress",
        },
        {
            "name": "Wellbeing",
            "description": "Symptom assessment and wellness",
        },
        {
            "name": "Funding",
            "description": "Approvals, donations and donor balances",
        },
        {
            "name": "Notifications",
            "description": "User inbox",
        },
        {
            "name": "Hooks",
            "description": "Database webhooks",
        },
        {
            "name": "WebSocket",
            "description": "Real-time meal request and donation changes",
        },
        {
            "name": "Status",
            "description": "API liveness and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(SmartHubException)
async def handle_smarthub_exception(request: Request, exc: SmartHubException):
    """Handle custom SmartHub exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    return await smarthub_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Service status endpoints
app.include_router(
    status.router,
    prefix="/api/v1",
    tags=["Status"]
)

# Assistant chat endpoints
app.include_router(
    assistant.router,
    prefix="/api/v1/assistant",
    tags=["Assistant"]
)

# Meal planning and meal request endpoints
app.include_router(
    meals.router,
    prefix="/api/v1/meals",
    tags=["Meals"]
)

# Learning endpoints
app.include_router(
    learning.router,
    prefix="/api/v1/learning",
    tags=["Learning"]
)

# Student health and wellbeing endpoints
app.include_router(
    wellbeing.router,
    prefix="/api/v1/wellbeing",
    tags=["Wellbeing"]
)

# Approval, donation and balance endpoints
app.include_router(
    funding.router,
    prefix="/api/v1/funding",
    tags=["Funding"]
)

# Notification endpoints
app.include_router(
    notifications.router,
    prefix="/api/v1/notifications",
    tags=["Notifications"]
)

# Database webhooks
app.include_router(
    hooks.router,
    prefix="/api/v1/hooks",
    tags=["Hooks"]
)

# WebSocket endpoints (Real-time updates)
app.include_router(
    websocket_routes.router,
    tags=["WebSocket"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "SmartHub API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
