# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
#
# The raw supabase `Client` is created once (it's a connection handle) and
# wrapped in a SupabaseClient instance that services receive through their
# constructors. The wrapper adds the handful of query shapes every service
# needs:
# - fetch a single row by id or by filters
# - batch-fetch rows by an id set (client-side joins)
# - attach fetched rows back onto a primary result set
# - conditional (compare-and-set) updates
#
# No server-side joins are assumed: related rows are resolved by collecting
# unique foreign ids, fetching them in one `in` query, and mapping them back.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   db = SupabaseClient.default()
#   request = db.fetch_by_id("meal_requests", request_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Iterable

from supabase import Client, create_client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error creating or configuring a Supabase client.

    Query errors are not wrapped: they propagate to the caller unchanged.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Thin wrapper around a supabase `Client`.

    Example:
        db = SupabaseClient.default()

        # Primary query, then a batched lookup for the related rows
        requests = db.table("meal_requests").select("*").execute().data
        students = db.find_by_ids("profiles", {r["student_id"] for r in requests})
        requests = SupabaseClient.attach_related(requests, students, "student_id", "student")
    """

    _instance: Client | None = None

    def __init__(self, client: Client):
        self.client = client

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the shared service-role Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Authorization is enforced by the API layer before any query runs.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def default(cls) -> "SupabaseClient":
        """Wrapper around the shared service-role client."""
        return cls(cls.get_client())

    @classmethod
    def create_auth_client(cls) -> Client:
        """
        Create a fresh anon-key client for Supabase Auth calls.

        Auth calls keep session state on the client, so each caller gets
        its own instance instead of sharing the service-role client.
        """
        try:
            return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase auth client: {e}",
                code="AUTH_CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
            )

    # -------------------------------------------------------------------------
    # Query Helpers
    # -------------------------------------------------------------------------

    def table(self, name: str):
        """Start a query builder on a table."""
        return self.client.table(name)

    def fetch_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch the first row matching all equality filters.

        Returns:
            Row dict, or None if nothing matches
        """
        query = self.client.table(table).select(columns)
        for column, value in filters.items():
            query = query.eq(column, value)

        response = query.limit(1).execute()
        rows = response.data or []
        return rows[0] if rows else None

    def fetch_by_id(
        self,
        table: str,
        row_id: str,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Fetch a row by its primary key, or None."""
        return self.fetch_one(table, {"id": str(row_id)}, columns=columns)

    def find_by_ids(
        self,
        table: str,
        ids: Iterable[str | None],
        columns: str = "*",
    ) -> dict[str, dict[str, Any]]:
        """
        Batch-fetch rows by id.

        Duplicates and None values are dropped before querying; an empty id
        set returns {} without touching the database.

        Returns:
            Mapping of id -> row
        """
        unique_ids = sorted({str(i) for i in ids if i})
        if not unique_ids:
            return {}

        response = (
            self.client.table(table)
            .select(columns)
            .in_("id", unique_ids)
            .execute()
        )

        rows = response.data or []
        logger.debug(f"Fetched {len(rows)}/{len(unique_ids)} rows from {table} by id")
        return {str(row["id"]): row for row in rows}

    @staticmethod
    def attach_related(
        rows: list[dict[str, Any]],
        related_by_id: dict[str, dict[str, Any]],
        foreign_key: str,
        field: str,
    ) -> list[dict[str, Any]]:
        """
        Return copies of `rows` with `field` set to the row referenced by
        `foreign_key` (None when the referenced row wasn't found).
        """
        joined = []
        for row in rows:
            key = row.get(foreign_key)
            joined.append({**row, field: related_by_id.get(str(key)) if key else None})
        return joined

    def update_where(
        self,
        table: str,
        values: dict[str, Any],
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Update rows matching all equality filters and return the updated rows.

        Including the expected current value of a column in `filters` makes
        this a compare-and-set: an empty result means the row changed (or
        doesn't exist). A None filter value matches NULL.
        """
        query = self.client.table(table).update(values)
        for column, value in filters.items():
            query = query.is_(column, "null") if value is None else query.eq(column, value)

        response = query.execute()
        return response.data or []

    def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        """
        Insert one row and return it.

        Raises:
            RuntimeError: If the insert returned no data
        """
        response = self.client.table(table).insert(values).execute()
        if not response.data:
            raise RuntimeError(f"Insert into {table} returned no data")
        return response.data[0]
