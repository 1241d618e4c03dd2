# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase wrapper (single-row fetches, batched
#   find_by_ids lookups for client-side joins, compare-and-set updates)
# - payments.py: Payment gateway client (initialize / verify)
# - utils.py: Shared utilities (local ids, payment references, timestamps)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import generate_local_id, generate_payment_reference, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "generate_local_id",
    "generate_payment_reference",
    "normalize_uuid",
]
