# =============================================================================
# agents/assistant.py - Student Assistant Client
# =============================================================================
# This module wraps the generative-text backend for the whole platform.
# Domain services never talk to OpenAI directly; they go through an
# AssistantClient instance they were constructed with.
#
# send_message() flow:
#   1. Record the user message in history
#   2. Wrap it in the context prompt (role, student context, guidelines)
#   3. Call the model with a hard timeout (the HTTP request is aborted)
#   4. Reject empty or blocklisted replies
#   5. On ANY failure, log and answer with a keyword-picked fallback
#   6. Record the reply (real or fallback) in history
#
# send_message() never raises. Callers that need structured data must
# validate the reply themselves (see agents/structured_output.py).
#
# Usage:
#   from agents.assistant import AssistantClient
#   assistant = AssistantClient()
#   assistant.set_student_context(StudentContext(student_id="...", full_name="Ada"))
#   reply = assistant.send_message("Can you explain photosynthesis?")
# =============================================================================

from __future__ import annotations

import logging

from openai import OpenAI

from app.config import settings
from agents.guardrails import get_fallback_response, validate_response
from agents.prompts.assistant_system import (
    build_context_prompt,
    build_health_advice_prompt,
    build_meal_plan_prompt,
    build_quiz_prompt,
)
from core.models.chat import ChatMessage, MessageRole, StudentContext

# Set up logging for this module
logger = logging.getLogger(__name__)


class AssistantClient:
    """
    Context-aware assistant with timeout and fallback policy.

    One instance per student session: it holds that session's chat history
    and student context. History is not synchronised; concurrent calls on
    the same instance may interleave their entries.

    Example:
        assistant = AssistantClient()
        reply = assistant.send_message("I have a headache")
        history = assistant.get_chat_history()  # [user, assistant]

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature
        timeout: Seconds before the upstream request is aborted
    """

    def __init__(
        self,
        client: OpenAI | None = None,
        model: str | None = None,
        timeout: float | None = None,
        temperature: float | None = None,
    ):
        """
        Initialize the assistant.

        Args:
            client: OpenAI client (default: one built from settings, created
                on first use)
            model: OpenAI model ID (default: settings.OPENAI_MODEL)
            timeout: Request timeout in seconds (default: settings.ASSISTANT_TIMEOUT_SECONDS)
            temperature: Generation temperature (default: settings.ASSISTANT_TEMPERATURE)
        """
        self._client = client
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else settings.ASSISTANT_TIMEOUT_SECONDS
        self.temperature = temperature if temperature is not None else settings.ASSISTANT_TEMPERATURE

        self._history: list[ChatMessage] = []
        self._student_context: StudentContext | None = None

        logger.debug(f"AssistantClient initialized with model={self.model}, timeout={self.timeout}s")

    @property
    def client(self) -> OpenAI:
        """OpenAI client, created lazily with retries disabled."""
        if self._client is None:
            self._client = OpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    # -------------------------------------------------------------------------
    # Context and History
    # -------------------------------------------------------------------------

    def set_student_context(self, context: StudentContext | None) -> None:
        """Replace the active student context; only affects later prompts."""
        self._student_context = context

    @property
    def student_context(self) -> StudentContext | None:
        return self._student_context

    def get_chat_history(self) -> list[ChatMessage]:
        """Copy of the conversation so far, oldest first."""
        return [message.model_copy() for message in self._history]

    def clear_history(self) -> None:
        self._history = []

    def _append(self, role: MessageRole, content: str) -> None:
        self._history.append(ChatMessage(role=role, content=content))

    # -------------------------------------------------------------------------
    # Backend Call
    # -------------------------------------------------------------------------

    def generate_content(self, prompt: str) -> str:
        """
        Send one prompt to the model and return the raw reply text.

        Raises whatever the OpenAI client raises (timeouts included).
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            timeout=self.timeout,
        )
        return response.choices[0].message.content or ""

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    def send_message(self, message: str) -> str:
        """
        Ask the assistant something. Never raises.

        Args:
            message: The student's message

        Returns:
            The model's reply, or a fallback string when the model can't
            answer safely
        """
        if not message or not message.strip():
            logger.warning("Empty message sent to assistant; using fallback")
            return get_fallback_response(message)

        self._append(MessageRole.USER, message)

        try:
            prompt = build_context_prompt(message, self._student_context)
            text = validate_response(self.generate_content(prompt))
        except Exception as e:
            logger.error(f"Error communicating with assistant backend: {e}")
            text = get_fallback_response(message)

        self._append(MessageRole.ASSISTANT, text)
        return text

    # -------------------------------------------------------------------------
    # Specialised Requests
    # -------------------------------------------------------------------------

    def generate_quiz(self, subject: str, difficulty: str = "medium") -> str:
        grade = self._student_context.grade if self._student_context else None
        return self.send_message(build_quiz_prompt(subject, difficulty, grade))

    def create_meal_plan(self, budget: float, duration: int = 7) -> str:
        return self.send_message(build_meal_plan_prompt(budget, duration))

    def provide_health_advice(self, symptoms: str) -> str:
        return self.send_message(build_health_advice_prompt(symptoms))
