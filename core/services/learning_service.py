# =============================================================================
# core/services/learning_service.py - Quizzes and Learning Progress
# =============================================================================
# Quizzes are generated from structured assistant replies and are NOT
# stored. Completed quizzes are stored in quiz_sessions and folded into the
# per-topic progress row in student_learning_progress:
#
#   existing row:  average' = (average * n + score) / (n + 1)
#                  n'       = n + 1
#                  prof'    = min(100, prof + (5 if score >= 70 else 2))
#   new row:       prof = 30 if score >= 70 else 15, n = 1, average = score
# =============================================================================

import logging
from uuid import UUID

from agents.assistant import AssistantClient
from agents.prompts.service_prompts import (
    build_lesson_prompt,
    build_question_prompt,
    build_quiz_json_prompt,
)
from agents.structured_output import parse_json_reply, validate_items
from core.models.learning import (
    PASSING_SCORE,
    Difficulty,
    LearningProgress,
    Quiz,
    QuizHistoryEntry,
    QuizQuestion,
    QuizResult,
    Subject,
)
from core.services.student_scope import StudentScopedService
from lib.supabase_client import SupabaseClient
from lib.utils import generate_local_id, utc_now

logger = logging.getLogger(__name__)

PROGRESS_TABLE = "student_learning_progress"

MAX_PROFICIENCY = 100
PASS_INCREMENT = 5
FAIL_INCREMENT = 2
INITIAL_PASS_PROFICIENCY = 30
INITIAL_FAIL_PROFICIENCY = 15

SUBJECT_ICONS = {
    "Mathematics": "📐",
    "Science": "🔬",
    "History": "📚",
    "English": "📝",
    "Geography": "🌍",
    "Physics": "⚛️",
    "Chemistry": "🧪",
    "Biology": "🧬",
}
DEFAULT_SUBJECT_ICON = "📖"


def next_progress(
    existing: dict | None,
    score: float,
) -> dict:
    """
    Apply one quiz score to a progress row.

    Args:
        existing: Current row (proficiency_level, total_quizzes,
            average_quiz_score), or None for a first quiz
        score: Quiz score, 0-100

    Returns:
        The new values for those three columns
    """
    passed = score >= PASSING_SCORE

    if existing is None:
        return {
            "proficiency_level": INITIAL_PASS_PROFICIENCY if passed else INITIAL_FAIL_PROFICIENCY,
            "total_quizzes": 1,
            "average_quiz_score": score,
        }

    total = existing.get("total_quizzes") or 0
    average = existing.get("average_quiz_score") or 0
    proficiency = existing.get("proficiency_level") or 0

    return {
        "proficiency_level": min(
            MAX_PROFICIENCY,
            proficiency + (PASS_INCREMENT if passed else FAIL_INCREMENT),
        ),
        "total_quizzes": total + 1,
        "average_quiz_score": (average * total + score) / (total + 1),
    }


class LearningService(StudentScopedService):
    """
    Tutoring features for one student.

    Example:
        service = LearningService(db, assistant, student_id=user.id)
        quiz = service.generate_quiz("Mathematics", "Fractions")
        service.update_learning_progress("Mathematics", "Fractions", 80)
    """

    def __init__(
        self,
        db: SupabaseClient,
        assistant: AssistantClient,
        student_id: str | UUID | None = None,
    ):
        super().__init__(db, assistant, student_id=student_id)

    # -------------------------------------------------------------------------
    # Quizzes
    # -------------------------------------------------------------------------

    def generate_quiz(
        self,
        subject: str,
        topic: str,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
    ) -> Quiz:
        """
        Generate a five-question multiple choice quiz.

        Raises:
            InvalidFormatError: If the reply has no usable JSON quiz
        """
        level = Difficulty(difficulty)
        reply = self.assistant.send_message(build_quiz_json_prompt(subject, topic, level.value))

        data = parse_json_reply(reply, "quiz")
        questions = validate_items(data.get("questions"), QuizQuestion, "quiz", lambda i: f"q_{i}")

        quiz = Quiz(
            id=generate_local_id("quiz"),
            subject=subject,
            topic=topic,
            difficulty=level,
            questions=questions,
            total_questions=len(questions),
        )
        logger.info(f"Generated quiz {quiz.id}: {subject}/{topic} with {quiz.total_questions} questions")
        return quiz

    def save_quiz_result(self, result: QuizResult) -> LearningProgress:
        """
        Store a completed quiz and fold its score into learning progress.

        Returns:
            The updated progress for the quiz's subject and topic
        """
        student_id = self.student_id
        score = result.score

        self.db.insert("quiz_sessions", {
            "student_id": student_id,
            "subject": result.subject,
            "topic": result.topic,
            "difficulty": Difficulty(result.difficulty).value,
            "total_questions": result.total_questions,
            "correct_answers": result.correct_answers,
            "score": score,
            "time_taken_minutes": round(result.time_taken_seconds / 60),
            "completed_at": utc_now().isoformat(),
        })

        return self.update_learning_progress(result.subject, result.topic, score)

    def get_quiz_history(self, limit: int = 10) -> list[QuizHistoryEntry]:
        """Most recent quizzes first, marked passed/failed at 70."""
        response = (
            self.db.table("quiz_sessions")
            .select("*")
            .eq("student_id", self.student_id)
            .order("completed_at", desc=True)
            .limit(limit)
            .execute()
        )

        return [
            QuizHistoryEntry(
                id=row.get("id"),
                subject=row.get("subject", ""),
                topic=row.get("topic", ""),
                score=row.get("score") or 0,
                completed_at=row.get("completed_at"),
                status="passed" if (row.get("score") or 0) >= PASSING_SCORE else "failed",
            )
            for row in response.data or []
        ]

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def update_learning_progress(
        self,
        subject: str,
        topic: str,
        score: float,
    ) -> LearningProgress:
        """
        Fold one quiz score into the (student, subject, topic) progress row.

        Raises:
            StudentIdNotSetError: If no student is bound
        """
        student_id = self.student_id
        filters = {"student_id": student_id, "subject": subject, "topic": topic}

        existing = self.db.fetch_one(PROGRESS_TABLE, filters)
        values = {**next_progress(existing, score), "last_activity": utc_now().isoformat()}

        if existing:
            self.db.update_where(PROGRESS_TABLE, values, filters)
            completed_lessons = existing.get("completed_lessons") or 0
        else:
            self.db.insert(PROGRESS_TABLE, {**filters, **values, "completed_lessons": 0})
            completed_lessons = 0

        logger.info(
            f"Learning progress for {student_id} {subject}/{topic}: "
            f"proficiency={values['proficiency_level']}, quizzes={values['total_quizzes']}"
        )

        return LearningProgress(
            subject=subject,
            topic=topic,
            proficiency_level=values["proficiency_level"],
            completed_lessons=completed_lessons,
            total_quizzes=values["total_quizzes"],
            average_score=values["average_quiz_score"],
            last_activity=values["last_activity"],
        )

    def get_student_subjects(self) -> list[Subject]:
        """
        Subjects the student has progress in.

        A subject's progress is the share of its topics at proficiency >= 70.
        """
        response = (
            self.db.table(PROGRESS_TABLE)
            .select("subject, proficiency_level, completed_lessons")
            .eq("student_id", self.student_id)
            .execute()
        )

        totals: dict[str, list[int]] = {}
        for row in response.data or []:
            counts = totals.setdefault(row["subject"], [0, 0])
            counts[0] += 1
            if (row.get("proficiency_level") or 0) >= PASSING_SCORE:
                counts[1] += 1

        return [
            Subject(
                id="_".join(name.lower().split()),
                name=name,
                progress=round(completed / total * 100) if total else 0,
                icon=SUBJECT_ICONS.get(name, DEFAULT_SUBJECT_ICON),
            )
            for name, (total, completed) in totals.items()
        ]

    # -------------------------------------------------------------------------
    # Tutoring
    # -------------------------------------------------------------------------

    def deliver_lesson(
        self,
        subject: str,
        topic: str,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
    ) -> str:
        return self.assistant.send_message(
            build_lesson_prompt(subject, topic, Difficulty(difficulty).value)
        )

    def answer_question(self, subject: str, question: str) -> str:
        return self.assistant.send_message(build_question_prompt(subject, question))
