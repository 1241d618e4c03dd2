# =============================================================================
# agents/prompts/service_prompts.py - Domain Service Prompt Templates
# =============================================================================
# Prompts used by the meal, learning and health services. Two kinds:
#
# - JSON prompts (meal plan, quiz) document the exact shape the service
#   parses; the reply is run through agents.structured_output.
# - Free-text prompts (tips, lessons, assessments) are parsed line by line
#   or keyword-searched by the calling service.
# =============================================================================

from __future__ import annotations

from agents.prompts.assistant_system import format_money

# =============================================================================
# Meal Service
# =============================================================================

MEAL_PLAN_JSON_TEMPLATE = """Create a {duration}-day meal plan for a student with a ${budget} weekly budget.

Requirements:
- Total cost should not exceed ${budget}
- Include breakfast, lunch, dinner, and 1-2 snacks per day
- Focus on nutritious, balanced meals
- Use affordable ingredients
- Consider food variety and cultural preferences
- Include simple recipes with basic instructions
- Provide nutritional information (calories, protein, carbs, fat)

Preferences: {preferences}

Format your response as JSON:
{{
  "meals": [
    {{
      "day": 1,
      "type": "breakfast",
      "name": "Oatmeal with Fruit",
      "ingredients": ["oats", "banana", "milk"],
      "cost": 2.50,
      "calories": 350,
      "protein": 12,
      "carbs": 60,
      "fat": 8,
      "instructions": "Cook oats with milk, add sliced banana"
    }}
  ],
  "nutritionalSummary": {{
    "totalCalories": 2100,
    "totalProtein": 85,
    "totalCarbs": 280,
    "totalFat": 65,
    "averageCostPerDay": 15.50,
    "budgetUtilization": 85
  }}
}}"""

QUICK_MEALS_TEMPLATE = """Suggest 3 {meal_type} options for a student with a ${budget} daily budget.

For each meal include:
- Name
- Key ingredients
- Estimated cost
- Basic nutritional info
- Simple preparation instructions

Focus on healthy, affordable options."""

NUTRITION_TIPS_PROMPT = """Provide 5 practical nutritional tips for students on a budget.

Focus on:
- Maximizing nutrition from affordable foods
- Balanced meal planning
- Healthy eating habits
- Portion control
- Making the most of limited resources

Make them actionable and realistic."""

GROCERY_LIST_TEMPLATE = """Organize these ingredients into grocery categories:

Ingredients: {ingredients}

Categories should include:
- Produce (fruits and vegetables)
- Dairy
- Proteins (meat, fish, eggs, beans)
- Grains (rice, bread, pasta)
- Pantry staples (oil, spices, canned goods)
- Other

Format as a shopping list with categories."""


def build_meal_plan_json_prompt(budget: float, duration: int, preferences: str = "") -> str:
    return MEAL_PLAN_JSON_TEMPLATE.format(
        duration=duration,
        budget=format_money(budget),
        preferences=preferences or "No specific preferences",
    )


def build_quick_meals_prompt(budget: float, meal_type: str) -> str:
    return QUICK_MEALS_TEMPLATE.format(meal_type=meal_type, budget=format_money(budget))


def build_grocery_list_prompt(ingredients: list[str]) -> str:
    return GROCERY_LIST_TEMPLATE.format(ingredients=", ".join(ingredients))


# =============================================================================
# Learning Service
# =============================================================================

QUIZ_JSON_TEMPLATE = """Generate a {difficulty} level quiz for {subject} on the topic "{topic}".

Requirements:
- Create exactly 5 multiple choice questions
- Each question should have 4 options (A, B, C, D)
- Provide the correct answer index (0-3)
- Include a brief explanation for each correct answer
- Make questions appropriate for high school level
- Ensure questions test understanding, not just memorization

Format your response as JSON:
{{
  "questions": [
    {{
      "question": "Question text here?",
      "options": ["A) Option 1", "B) Option 2", "C) Option 3", "D) Option 4"],
      "correctAnswer": 0,
      "explanation": "Explanation of why this is correct"
    }}
  ]
}}"""

LESSON_TEMPLATE = """You are an expert teacher delivering a lesson on {subject} - {topic}.

Please provide:
1. A clear learning objective
2. Key concepts explained simply
3. 2-3 examples with step-by-step solutions
4. Practice questions for the student
5. Summary of main takeaways

Make this engaging and appropriate for {difficulty} level understanding.
Keep the lesson comprehensive but not overwhelming."""

QUESTION_TEMPLATE = """You are a knowledgeable tutor specializing in {subject}.

A student asks: "{question}"

Please provide:
1. A clear, step-by-step answer
2. Additional context or related concepts
3. If applicable, suggest similar problems to practice
4. Encourage the student to think about the solution

Keep your response helpful, encouraging, and educational."""


def build_quiz_json_prompt(subject: str, topic: str, difficulty: str) -> str:
    return QUIZ_JSON_TEMPLATE.format(difficulty=difficulty, subject=subject, topic=topic)


def build_lesson_prompt(subject: str, topic: str, difficulty: str) -> str:
    return LESSON_TEMPLATE.format(subject=subject, topic=topic, difficulty=difficulty)


def build_question_prompt(subject: str, question: str) -> str:
    return QUESTION_TEMPLATE.format(subject=subject, question=question)


# =============================================================================
# Health Service
# =============================================================================

SYMPTOMS_TEMPLATE = """You are a health assessment AI. A student reports the following symptoms:

Symptoms: {symptoms}
Duration: {duration} days
Additional Notes: {notes}

Please provide:
1. Severity assessment (mild/moderate/severe/emergency)
2. General health suggestions (NOT medical diagnosis)
3. Clear recommendation to see a healthcare professional

IMPORTANT: Emphasize that this is NOT medical advice and they should consult a doctor.
Be supportive but cautious in your recommendations."""

EMERGENCY_TEMPLATE = """EMERGENCY ASSESSMENT: Student reports: "{symptoms}"

Determine if this requires immediate medical attention.

Respond with:
1. Is this an emergency? (yes/no)
2. Urgency level (immediate/urgent/routine)
3. Recommended action

Be conservative - when in doubt, recommend seeking medical help."""

HEALTH_TIPS_TEMPLATE = """Provide 5 practical health tips{category} for students.

Focus on:
- Mental health and stress management
- Physical wellness
- Nutrition
- Sleep hygiene
- Study-life balance

Make them actionable and realistic for student life."""

WELLNESS_TEMPLATE = """Wellness Check-in Analysis:

Student reports:
- Mood: {mood}
- Energy level: {energy}
- Sleep quality: {sleep}
- Stress level: {stress}

Provide:
1. Brief assessment of their current wellness state
2. 2-3 specific, actionable suggestions
3. Encouragement and positive reinforcement
4. Reminder to seek professional help if needed

Keep response supportive and practical."""


def build_symptoms_prompt(symptoms: str, duration: int, notes: str = "") -> str:
    return SYMPTOMS_TEMPLATE.format(symptoms=symptoms, duration=duration, notes=notes)


def build_emergency_prompt(symptoms: str) -> str:
    return EMERGENCY_TEMPLATE.format(symptoms=symptoms)


def build_health_tips_prompt(category: str | None = None) -> str:
    return HEALTH_TIPS_TEMPLATE.format(category=f" for {category}" if category else "")


def build_wellness_prompt(mood: str, energy: str, sleep: str, stress: str) -> str:
    return WELLNESS_TEMPLATE.format(mood=mood, energy=energy, sleep=sleep, stress=stress)
