# =============================================================================
# core/models/chat.py - Assistant Chat Schemas
# =============================================================================
# These models define the contract for the student assistant:
# - ChatMessage: one turn in the in-memory conversation history
# - StudentContext: who the assistant is talking to (prompt-only, never stored)
# - ChatTurn: a persisted user/assistant exchange in ai_chat_history
#
# History is append-only: messages are added, never edited.
# =============================================================================

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """
    Who sent the message in a conversation.

    - user: The student
    - assistant: The AI assistant (including fallback replies)
    """
    USER = "user"
    ASSISTANT = "assistant"


class InteractionType(str, Enum):
    """What kind of assistant feature produced a chat turn."""
    GENERAL = "general"
    QUIZ = "quiz"
    MEAL_PLAN = "meal_plan"
    HEALTH = "health"


class ChatMessage(BaseModel):
    """A single message in the assistant's conversation history."""

    role: MessageRole = Field(..., description="Who sent the message")
    content: str = Field(..., description="Message text")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the message was added to history"
    )


class StudentContext(BaseModel):
    """
    Student details embedded in assistant prompts.

    Set once per session before any assistant call. Only the name, grade
    and school reach the prompt.
    """

    student_id: str
    full_name: str
    grade: str | None = None
    school: str | None = None


class ChatTurn(BaseModel):
    """A persisted exchange from the ai_chat_history table."""

    id: str | None = None
    user_id: str
    message: str
    response: str
    interaction_type: InteractionType = InteractionType.GENERAL
    created_at: datetime | None = None
    student: dict[str, Any] | None = None


# =============================================================================
# Request/Response Models
# =============================================================================

class ChatRequest(BaseModel):
    """Request body for a free-text assistant message."""

    message: str = Field(..., description="What the student typed")
    persist: bool = Field(default=True, description="Record the exchange in chat history")


class ChatResponse(BaseModel):
    """The assistant's reply (a real answer or a fallback)."""

    response: str
    history: list[ChatMessage] = Field(default_factory=list)


class AssistantQuizRequest(BaseModel):
    subject: str
    difficulty: str = "medium"


class AssistantMealPlanRequest(BaseModel):
    budget: float = Field(..., gt=0)
    duration: int = Field(default=7, gt=0)


class AssistantHealthRequest(BaseModel):
    symptoms: str
