# =============================================================================
# core/models/learning.py - Quiz and Learning Progress Schemas
# =============================================================================
# Quizzes are generated on demand and never stored. Quiz results are stored
# in quiz_sessions and fold into the per-topic LearningProgress aggregate.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Score (0-100) at or above which a quiz counts as passed
PASSING_SCORE = 70


class Difficulty(str, Enum):
    """Quiz and lesson difficulty."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizQuestion(BaseModel):
    """A multiple choice question."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    question: str
    options: list[str] = Field(default_factory=list)
    correct_answer: int = Field(..., alias="correctAnswer", description="Index into options")
    explanation: str = ""


class Quiz(BaseModel):
    """A generated quiz."""

    id: str
    subject: str
    topic: str
    difficulty: Difficulty = Difficulty.MEDIUM
    questions: list[QuizQuestion] = Field(default_factory=list)
    total_questions: int = 0


class QuizRequest(BaseModel):
    """Request body for generating a quiz."""

    subject: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    difficulty: Difficulty = Difficulty.MEDIUM


class QuizResult(BaseModel):
    """A completed quiz, as submitted by the student."""

    quiz_id: str
    subject: str
    topic: str
    difficulty: Difficulty = Difficulty.MEDIUM
    total_questions: int = Field(..., gt=0)
    correct_answers: int = Field(..., ge=0)
    time_taken_seconds: int = Field(default=0, ge=0)

    @property
    def score(self) -> float:
        return self.correct_answers / self.total_questions * 100


class QuizHistoryEntry(BaseModel):
    """A row from quiz_sessions, summarised for display."""

    id: str | None = None
    subject: str
    topic: str
    score: float
    completed_at: datetime | None = None
    status: str = Field(..., description="passed or failed")


class LearningProgress(BaseModel):
    """Per (student, subject, topic) mastery aggregate."""

    subject: str
    topic: str
    proficiency_level: float = Field(default=0, ge=0, le=100)
    completed_lessons: int = 0
    total_quizzes: int = 0
    average_score: float = 0
    last_activity: datetime | None = None


class Subject(BaseModel):
    """A subject the student has progress in."""

    id: str
    name: str
    progress: int = Field(..., ge=0, le=100, description="Share of topics at proficiency >= 70")
    icon: str


class LessonRequest(BaseModel):
    subject: str
    topic: str
    difficulty: Difficulty = Difficulty.MEDIUM


class QuestionRequest(BaseModel):
    subject: str
    question: str = Field(..., min_length=1)
