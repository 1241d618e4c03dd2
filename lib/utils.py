# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application: id normalisation, locally
# generated ids for AI-built aggregates, payment references and timestamps.
# =============================================================================

import random
import string
import time
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

_BASE36 = string.digits + string.ascii_lowercase


# =============================================================================
# ID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Args:
        value: UUID as string or UUID object

    Returns:
        String representation of the UUID
    """
    return str(value) if isinstance(value, UUID) else value


def random_suffix(length: int = 9) -> str:
    """Random lowercase base36 string."""
    return "".join(random.choices(_BASE36, k=length))


def generate_local_id(prefix: str) -> str:
    """
    Build a locally unique id: ``<prefix>_<epoch-ms>_<9 base36 chars>``.

    Used for aggregates the assistant generates (meal plans, quizzes) before
    they reach the database.

    Example:
        generate_local_id("quiz")  # "quiz_1718000000000_k3j9x0abq"
    """
    return f"{prefix}_{int(time.time() * 1000)}_{random_suffix()}"


def generate_payment_reference() -> str:
    """Payment reference handed to the gateway, e.g. ``PAY_1718000000000_x1y2z3w4v``."""
    return generate_local_id("PAY")


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a Supabase timestamp (ISO string, possibly ending in 'Z').

    Returns None for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
