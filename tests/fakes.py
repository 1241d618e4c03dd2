# =============================================================================
# tests/fakes.py - Test Doubles
# =============================================================================
# - FakeDatabase: in-memory stand-in for the supabase query builder
# - make_assistant(): AssistantClient over a mocked OpenAI client
# - FakePaymentGateway: records checkouts, verifies what tests mark paid
# =============================================================================

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

from agents.assistant import AssistantClient
from lib.payments import CheckoutSession, PaymentVerification

STUDENT_ID = "11111111-1111-1111-1111-111111111111"
DONOR_ID = "22222222-2222-2222-2222-222222222222"
ADMIN_ID = "33333333-3333-3333-3333-333333333333"


# =============================================================================
# In-Memory Supabase
# =============================================================================

@dataclass
class FakeResponse:
    data: list[dict[str, Any]]
    count: int | None = None


class FakeQuery:
    """
    Mimics the subset of the postgrest query builder the services use.

    Filters are applied in Python against the rows of one FakeDatabase table.
    """

    def __init__(self, db: "FakeDatabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.columns = "*"
        self.count_mode = None
        self.payload: Any = None
        self.filters: list = []
        self.order_by: list[tuple[str, bool]] = []
        self.row_limit: int | None = None

    # Operations

    def select(self, columns: str = "*", count: str | None = None):
        self.operation = "select"
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, values):
        self.operation = "insert"
        self.payload = values
        return self

    def update(self, values):
        self.operation = "update"
        self.payload = values
        return self

    def upsert(self, values, on_conflict: str = "id"):
        self.operation = "upsert"
        self.payload = values
        self.on_conflict = on_conflict
        return self

    # Filters

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def is_(self, column, value):
        if value == "null":
            self.filters.append(lambda row: row.get(column) is None)
        else:
            self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        allowed = set(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def gt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) > value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def order(self, column, desc: bool = False):
        self.order_by.append((column, desc))
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    # Execution

    def _matches(self, row) -> bool:
        return all(check(row) for check in self.filters)

    def _project(self, row) -> dict:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in self.columns.split(",")]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def execute(self) -> FakeResponse:
        self.db.check_failure(self.table, self.operation)
        rows = self.db.tables.setdefault(self.table, [])

        if self.operation in ("insert", "upsert"):
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.db.add_row(self.table, item) for item in items]
            return FakeResponse(data=[copy.deepcopy(row) for row in created])

        if self.operation == "update":
            self.db.before_update(self.table, self.payload)
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(data=updated)

        matched = [row for row in rows if self._matches(row)]
        for column, desc in reversed(self.order_by):
            matched.sort(key=lambda row: (row.get(column) is None, row.get(column) or ""), reverse=desc)
        total = len(matched)
        if self.row_limit is not None:
            matched = matched[: self.row_limit]

        return FakeResponse(
            data=[self._project(row) for row in matched],
            count=total if self.count_mode == "exact" else None,
        )


class FakeDatabase:
    """
    Tables are plain lists of dicts. Inserted rows get an id and created_at
    unless the caller supplied them.

    Example:
        fake = FakeDatabase()
        fake.seed("profiles", {"id": "u1", "role": "donor", "balance": 20})
        db = SupabaseClient(fake)
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.update_hooks: dict[str, list] = {}
        self._clock = 0
        # Rows are stamped from an hour ago onwards so time-window queries see them
        self._epoch = (datetime.now(timezone.utc) - timedelta(hours=1)).replace(microsecond=0)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add_row(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        row = copy.deepcopy(values)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._next_timestamp())
        self.tables.setdefault(table, []).append(row)
        return row

    def seed(self, table: str, *rows: dict[str, Any]) -> list[dict[str, Any]]:
        return [self.add_row(table, row) for row in rows]

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])

    def get(self, table: str, row_id: str) -> dict[str, Any] | None:
        return next((row for row in self.rows(table) if row.get("id") == row_id), None)

    def fail(self, table: str, operation: str, error: Exception | None = None) -> None:
        """Make every `operation` on `table` raise."""
        self.failures[(table, operation)] = error or RuntimeError(f"{operation} on {table} failed")

    def check_failure(self, table: str, operation: str) -> None:
        error = self.failures.get((table, operation))
        if error is not None:
            raise error

    def on_update(self, table: str, hook) -> None:
        """Run `hook(fake)` right before the next update on `table` applies."""
        self.update_hooks.setdefault(table, []).append(hook)

    def before_update(self, table: str, values: dict) -> None:
        hooks = self.update_hooks.get(table) or []
        if hooks:
            hooks.pop(0)(self)

    def _next_timestamp(self) -> str:
        # Strictly increasing so "newest first" ordering is deterministic
        self._clock += 1
        return (self._epoch + timedelta(seconds=self._clock)).isoformat()


# =============================================================================
# Assistant
# =============================================================================

def make_openai_client(*replies: str) -> MagicMock:
    """
    Mocked OpenAI client returning `replies` in order.

    An Exception instance in `replies` is raised instead of returned.
    """
    client = MagicMock()

    def completion(reply):
        if isinstance(reply, Exception):
            return reply
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = reply
        return response

    client.chat.completions.create.side_effect = [completion(reply) for reply in replies]
    return client


def sent_prompts(client: MagicMock) -> list[str]:
    """Prompts the assistant sent, in order."""
    return [
        call.kwargs["messages"][0]["content"]
        for call in client.chat.completions.create.call_args_list
    ]


def make_assistant(*replies: str) -> AssistantClient:
    return AssistantClient(client=make_openai_client(*replies), model="test-model", timeout=5)


# =============================================================================
# Payments
# =============================================================================

@dataclass
class FakePaymentGateway:
    """Records checkouts; verification results are set per reference."""

    verified: dict[str, PaymentVerification] = field(default_factory=dict)
    initialized: list[dict[str, Any]] = field(default_factory=list)
    initialize_error: Exception | None = None

    def initialize_payment(self, email, amount_minor_units, reference, callback_url, metadata=None):
        if self.initialize_error is not None:
            raise self.initialize_error
        self.initialized.append({
            "email": email,
            "amount_minor_units": amount_minor_units,
            "reference": reference,
            "metadata": metadata or {},
        })
        return CheckoutSession(
            reference=reference,
            authorization_url=f"https://checkout.test/{reference}",
            access_code="access-code",
        )

    def verify_payment(self, reference):
        return self.verified.get(
            reference,
            PaymentVerification(reference=reference, successful=False, status="abandoned"),
        )

    def mark_paid(self, reference: str, amount_minor_units: int) -> None:
        self.verified[reference] = PaymentVerification(
            reference=reference,
            successful=True,
            amount_minor_units=amount_minor_units,
            status="success",
        )
