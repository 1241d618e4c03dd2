# =============================================================================
# agents/prompts/assistant_system.py - Student Assistant Context Prompt
# =============================================================================
# Every message to the assistant is wrapped in the same context prompt:
#
#   1. Role description (education, health, meal planning)
#   2. STUDENT CONTEXT block (only when a student context is set)
#   3. IMPORTANT GUIDELINES (fixed safety rules)
#   4. USER MESSAGE, verbatim
#
# Also holds the three specialised templates the assistant exposes directly
# (quiz, meal plan, health advice). They are sent through the same wrapper.
#
# Usage:
#   prompt = build_context_prompt("help with fractions", student_context)
# =============================================================================

from __future__ import annotations

from core.models.chat import StudentContext

NOT_SPECIFIED = "Not specified"

# =============================================================================
# Context Prompt Sections
# =============================================================================

ROLE_SECTION = """You are an AI assistant for a student meal donation platform. You help students with:

1. EDUCATION: Teaching subjects, answering questions, generating quizzes and exams
2. HEALTH: Providing health advice, diagnosis suggestions, monitoring health
3. MEAL PLANNING: Creating budget-friendly meal plans based on student budgets

"""

STUDENT_CONTEXT_TEMPLATE = """STUDENT CONTEXT:
- Name: {full_name}
- Grade: {grade}
- School: {school}

"""

GUIDELINES_SECTION = """IMPORTANT GUIDELINES:
- Be encouraging and supportive
- For health issues: Always recommend seeing a doctor for serious concerns
- For education: Adapt to student's grade level
- For meal planning: Focus on nutritious, affordable options
- Keep responses clear and age-appropriate
- If asked about sensitive topics, direct to appropriate professionals

"""

USER_MESSAGE_TEMPLATE = """USER MESSAGE: {message}

Please provide a helpful, accurate response:"""


def build_context_prompt(
    user_message: str,
    student_context: StudentContext | None = None,
) -> str:
    """
    Build the full prompt sent to the model for one user message.

    Args:
        user_message: The student's message, embedded verbatim
        student_context: Optional student details; missing grade/school
            render as "Not specified"

    Returns:
        Prompt text
    """
    prompt = ROLE_SECTION

    if student_context is not None:
        prompt += STUDENT_CONTEXT_TEMPLATE.format(
            full_name=student_context.full_name,
            grade=student_context.grade or NOT_SPECIFIED,
            school=student_context.school or NOT_SPECIFIED,
        )

    prompt += GUIDELINES_SECTION
    prompt += USER_MESSAGE_TEMPLATE.format(message=user_message)
    return prompt


# =============================================================================
# Specialised Assistant Templates
# =============================================================================

QUIZ_TEMPLATE = """Generate a {difficulty} level quiz for {subject} suitable for a {grade} student.

Include:
- 5 multiple choice questions
- 3 short answer questions
- Answer key at the end

Format the quiz professionally and make it educational."""

MEAL_PLAN_TEMPLATE = """Create a {duration}-day meal plan for a student with a budget of ${budget}.

Consider:
- Nutritious and balanced meals
- Cost-effective ingredients
- Easy to prepare
- Cultural variety if possible
- Total cost breakdown

Make it practical and healthy."""

HEALTH_ADVICE_TEMPLATE = """A student is experiencing: {symptoms}

Provide general health advice, but IMPORTANT:
- This is NOT medical diagnosis
- Recommend seeing a healthcare professional
- Suggest general wellness tips
- Ask about severity and duration
- Be supportive but cautious

Keep response helpful but not diagnostic."""


def build_quiz_prompt(subject: str, difficulty: str, grade: str | None) -> str:
    return QUIZ_TEMPLATE.format(
        difficulty=difficulty,
        subject=subject,
        grade=grade or "high school",
    )


def build_meal_plan_prompt(budget: float, duration: int) -> str:
    return MEAL_PLAN_TEMPLATE.format(duration=duration, budget=format_money(budget))


def build_health_advice_prompt(symptoms: str) -> str:
    return HEALTH_ADVICE_TEMPLATE.format(symptoms=symptoms)


def format_money(amount: float) -> str:
    """12.0 -> '12', 12.5 -> '12.5'."""
    return f"{amount:g}"
