# =============================================================================
# tests/test_learning_service.py - Quiz and Learning Progress Tests
# =============================================================================

import json

import pytest

from app.exceptions import InvalidFormatError, StudentIdNotSetError
from core.models.learning import Difficulty, QuizResult
from core.services.learning_service import (
    DEFAULT_SUBJECT_ICON,
    PROGRESS_TABLE,
    LearningService,
    next_progress,
)
from tests.fakes import STUDENT_ID, make_assistant


def quiz_reply(count: int = 5) -> str:
    questions = [
        {
            "question": f"What is {n} + {n}?",
            "options": [str(n), str(2 * n), str(3 * n), str(4 * n)],
            "correctAnswer": 1,
            "explanation": f"{n} + {n} = {2 * n}",
        }
        for n in range(1, count + 1)
    ]
    return f"Here's your quiz!\n{json.dumps({'questions': questions})}"


def learning_service(db, *replies, student_id=STUDENT_ID):
    return LearningService(db, make_assistant(*replies), student_id=student_id)


def result(correct: int, total: int = 5, subject="Mathematics", topic="Fractions") -> QuizResult:
    return QuizResult(
        quiz_id="quiz_1",
        subject=subject,
        topic=topic,
        total_questions=total,
        correct_answers=correct,
        time_taken_seconds=150,
    )


class TestNextProgress:
    """Tests for folding a score into a progress row."""

    def test_first_quiz_passed(self):
        assert next_progress(None, 80) == {
            "proficiency_level": 30,
            "total_quizzes": 1,
            "average_quiz_score": 80,
        }

    def test_first_quiz_failed(self):
        assert next_progress(None, 40)["proficiency_level"] == 15

    def test_running_average(self):
        existing = {"proficiency_level": 50, "total_quizzes": 4, "average_quiz_score": 80}

        progress = next_progress(existing, 100)

        assert progress["average_quiz_score"] == pytest.approx(84)
        assert progress["total_quizzes"] == 5
        assert progress["proficiency_level"] == 55

    def test_failed_quiz_still_adds_a_little(self):
        existing = {"proficiency_level": 50, "total_quizzes": 1, "average_quiz_score": 60}
        assert next_progress(existing, 50)["proficiency_level"] == 52

    def test_proficiency_is_capped(self):
        existing = {"proficiency_level": 98, "total_quizzes": 10, "average_quiz_score": 90}
        assert next_progress(existing, 90)["proficiency_level"] == 100

    def test_pass_mark_is_inclusive(self):
        assert next_progress(None, 70)["proficiency_level"] == 30


class TestGenerateQuiz:
    """Tests for structured quiz generation."""

    def test_questions_get_positional_ids(self, db):
        quiz = learning_service(db, quiz_reply()).generate_quiz("Mathematics", "Addition", "easy")

        assert [q.id for q in quiz.questions] == ["q_0", "q_1", "q_2", "q_3", "q_4"]
        assert quiz.total_questions == 5
        assert quiz.difficulty == Difficulty.EASY
        assert quiz.id.startswith("quiz_")

    def test_quiz_is_not_stored(self, db, fake_db):
        learning_service(db, quiz_reply()).generate_quiz("Mathematics", "Addition")
        assert fake_db.tables == {}

    def test_prose_reply_is_invalid_format(self, db):
        with pytest.raises(InvalidFormatError) as exc_info:
            learning_service(db, "Let's talk about addition instead.").generate_quiz("Mathematics", "Addition")
        assert exc_info.value.message == "Invalid quiz format received"

    def test_questions_must_be_a_list(self, db):
        with pytest.raises(InvalidFormatError):
            learning_service(db, '{"questions": "none"}').generate_quiz("Mathematics", "Addition")

    def test_unknown_difficulty(self, db):
        with pytest.raises(ValueError):
            learning_service(db, quiz_reply()).generate_quiz("Mathematics", "Addition", "impossible")


class TestSaveQuizResult:
    """Tests for storing completed quizzes."""

    def test_stores_session(self, db, fake_db):
        learning_service(db).save_quiz_result(result(correct=4))

        session = fake_db.rows("quiz_sessions")[0]
        assert session["student_id"] == STUDENT_ID
        assert session["score"] == pytest.approx(80)
        assert session["correct_answers"] == 4
        assert session["time_taken_minutes"] == 2
        assert session["difficulty"] == "medium"

    def test_first_result_creates_progress(self, db, fake_db):
        progress = learning_service(db).save_quiz_result(result(correct=4))

        assert progress.proficiency_level == 30
        assert progress.total_quizzes == 1
        row = fake_db.rows(PROGRESS_TABLE)[0]
        assert row["completed_lessons"] == 0
        assert (row["subject"], row["topic"]) == ("Mathematics", "Fractions")

    def test_later_results_update_progress(self, db, fake_db):
        service = learning_service(db)
        service.save_quiz_result(result(correct=4))
        progress = service.save_quiz_result(result(correct=5))

        assert progress.total_quizzes == 2
        assert progress.average_score == pytest.approx(90)
        assert progress.proficiency_level == 35
        assert len(fake_db.rows(PROGRESS_TABLE)) == 1

    def test_topics_are_tracked_separately(self, db, fake_db):
        service = learning_service(db)
        service.save_quiz_result(result(correct=4, topic="Fractions"))
        service.save_quiz_result(result(correct=1, topic="Decimals"))

        assert len(fake_db.rows(PROGRESS_TABLE)) == 2

    def test_requires_student(self, db):
        with pytest.raises(StudentIdNotSetError):
            learning_service(db, student_id=None).save_quiz_result(result(correct=4))


class TestQuizHistory:
    """Tests for the recent quiz list."""

    def test_marks_passed_and_failed(self, db, fake_db):
        fake_db.seed(
            "quiz_sessions",
            {"student_id": STUDENT_ID, "subject": "Science", "topic": "Cells", "score": 60,
             "completed_at": "2025-02-01T10:00:00+00:00"},
            {"student_id": STUDENT_ID, "subject": "Science", "topic": "Atoms", "score": 70,
             "completed_at": "2025-02-02T10:00:00+00:00"},
            {"student_id": "someone-else", "subject": "Art", "topic": "Colour", "score": 100,
             "completed_at": "2025-02-03T10:00:00+00:00"},
        )

        history = learning_service(db).get_quiz_history()

        assert [(h.topic, h.status) for h in history] == [("Atoms", "passed"), ("Cells", "failed")]

    def test_limit(self, db, fake_db):
        for day in range(1, 6):
            fake_db.seed("quiz_sessions", {
                "student_id": STUDENT_ID, "subject": "Science", "topic": f"T{day}", "score": 50,
                "completed_at": f"2025-02-0{day}T10:00:00+00:00",
            })

        assert len(learning_service(db).get_quiz_history(limit=3)) == 3


class TestStudentSubjects:
    """Tests for per-subject progress."""

    def test_progress_is_share_of_mastered_topics(self, db, fake_db):
        fake_db.seed(
            PROGRESS_TABLE,
            {"student_id": STUDENT_ID, "subject": "Biology", "topic": "Cells", "proficiency_level": 75},
            {"student_id": STUDENT_ID, "subject": "Biology", "topic": "DNA", "proficiency_level": 40},
            {"student_id": STUDENT_ID, "subject": "Music", "topic": "Scales", "proficiency_level": 90},
        )

        subjects = {s.name: s for s in learning_service(db).get_student_subjects()}

        assert subjects["Biology"].progress == 50
        assert subjects["Biology"].icon == "🧬"
        assert subjects["Music"].progress == 100
        assert subjects["Music"].icon == DEFAULT_SUBJECT_ICON

    def test_subject_ids_are_slugs(self, db, fake_db):
        fake_db.seed(PROGRESS_TABLE, {
            "student_id": STUDENT_ID, "subject": "Computer Science", "topic": "Loops", "proficiency_level": 10,
        })
        assert learning_service(db).get_student_subjects()[0].id == "computer_science"

    def test_no_progress(self, db):
        assert learning_service(db).get_student_subjects() == []


class TestTutoring:
    """Tests for free-text lessons and answers."""

    def test_lesson_returns_reply(self, db):
        service = learning_service(db, "Photosynthesis turns light into sugar.")
        assert service.deliver_lesson("Biology", "Photosynthesis") == "Photosynthesis turns light into sugar."

    def test_question_falls_back_when_unavailable(self, db):
        reply = learning_service(db, RuntimeError("down")).answer_question("Mathematics", "What is pi?")
        assert "teacher" in reply
