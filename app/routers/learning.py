# =============================================================================
# app/routers/learning.py - Tutoring Endpoints
# =============================================================================
# Quizzes are generated on demand and not stored; only the submitted result
# is, and it updates the student's progress for that subject and topic.
# =============================================================================

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from app.dependencies import LearningServiceDep
from core.models.learning import (
    LearningProgress,
    LessonRequest,
    QuestionRequest,
    Quiz,
    QuizHistoryEntry,
    QuizRequest,
    QuizResult,
    Subject,
)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class TextResponse(BaseModel):
    """Free-text assistant output."""
    content: str


# =============================================================================
# Quizzes
# =============================================================================

@router.post("/quizzes", response_model=Quiz)
async def generate_quiz(request: QuizRequest, learning: LearningServiceDep):
    """
    Generate a five-question quiz.

    Raises:
        502: If the assistant's quiz can't be parsed
    """
    return learning.generate_quiz(request.subject, request.topic, request.difficulty)


@router.post("/quizzes/results", response_model=LearningProgress, status_code=status.HTTP_201_CREATED)
async def submit_quiz_result(result: QuizResult, learning: LearningServiceDep):
    """Store a finished quiz and return the updated topic progress."""
    return learning.save_quiz_result(result)


@router.get("/quizzes/history", response_model=list[QuizHistoryEntry])
async def quiz_history(
    learning: LearningServiceDep,
    limit: int = Query(default=10, ge=1, le=100),
):
    return learning.get_quiz_history(limit=limit)


@router.get("/subjects", response_model=list[Subject])
async def list_subjects(learning: LearningServiceDep):
    """Subjects the student has progress in, with the share of mastered topics."""
    return learning.get_student_subjects()


# =============================================================================
# Lessons and Questions
# =============================================================================

@router.post("/lessons", response_model=TextResponse)
async def deliver_lesson(request: LessonRequest, learning: LearningServiceDep):
    return TextResponse(content=learning.deliver_lesson(request.subject, request.topic, request.difficulty))


@router.post("/questions", response_model=TextResponse)
async def answer_question(request: QuestionRequest, learning: LearningServiceDep):
    return TextResponse(content=learning.answer_question(request.subject, request.question))
