# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Upstream assistant failures never reach this module: the assistant client
# degrades to a canned fallback reply instead of raising.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class SmartHubException(Exception):
    """
    Base exception for the SmartHub API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "SMARTHUB_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions
# =============================================================================

class StudentIdNotSetError(SmartHubException):
    """Raised when a student-scoped operation runs before set_student_id()."""

    def __init__(self):
        super().__init__(
            message="Student ID not set",
            code="STUDENT_ID_NOT_SET",
            status_code=400,
            suggestion="Bind the service to a student with set_student_id() first",
        )


class InvalidMealTypeError(SmartHubException):
    """Raised when a meal type is not one of the four allowed values."""

    def __init__(self, meal_type: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid mealType: {meal_type}. Allowed values are {', '.join(allowed)}",
            code="INVALID_MEAL_TYPE",
            status_code=400,
            suggestion=f"Use one of: {', '.join(allowed)}",
            details={"meal_type": meal_type, "allowed": allowed},
        )


class InvalidAmountError(SmartHubException):
    """Raised when a currency amount is zero or negative."""

    def __init__(self, amount: float, field: str = "amount"):
        super().__init__(
            message=f"Invalid {field}: {amount}. It must be greater than zero",
            code="INVALID_AMOUNT",
            status_code=400,
            details={field: amount},
        )


class InvalidFormatError(SmartHubException):
    """
    Raised when the assistant's structured output cannot be used.

    Covers a missing JSON object, malformed JSON, and JSON that doesn't fit
    the expected shape. Never retried automatically.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_FORMAT",
            status_code=502,
            suggestion="Please try again",
            details=details,
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class NotAuthenticatedError(SmartHubException):
    """Raised when an operation needs an authenticated user and none is present."""

    def __init__(self, message: str = "User must be authenticated"):
        super().__init__(
            message=message,
            code="NOT_AUTHENTICATED",
            status_code=401,
            suggestion="Sign in and retry with a valid access token",
        )


class PermissionDeniedError(SmartHubException):
    """Raised when the actor's role may not perform an operation."""

    def __init__(self, action: str, required_roles: list[str], actual_role: str | None):
        super().__init__(
            message=f"Role '{actual_role}' may not {action}",
            code="PERMISSION_DENIED",
            status_code=403,
            suggestion=f"This action requires one of: {', '.join(required_roles)}",
            details={"required_roles": required_roles, "role": actual_role},
        )


class AuthError(SmartHubException):
    """Raised when the auth provider rejects a sign-up or sign-in."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="AUTH_ERROR",
            status_code=400,
        )


# =============================================================================
# Not Found Exceptions
# =============================================================================

class ProfileNotFoundError(SmartHubException):
    """Raised when a profile row doesn't exist."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"Profile not found: {user_id}",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Profiles are created when the user signs up; check the user ID",
            details={"user_id": user_id},
        )


class MealRequestNotFoundError(SmartHubException):
    """Raised when a meal request ID doesn't exist."""

    def __init__(self, request_id: str):
        super().__init__(
            message=f"Meal request not found: {request_id}",
            code="MEAL_REQUEST_NOT_FOUND",
            status_code=404,
            details={"meal_request_id": request_id},
        )


class DonationNotFoundError(SmartHubException):
    """Raised when no donation matches a payment reference."""

    def __init__(self, reference: str):
        super().__init__(
            message=f"No donation found for payment reference: {reference}",
            code="DONATION_NOT_FOUND",
            status_code=404,
            suggestion="Only references issued by this service can be confirmed",
            details={"reference": reference},
        )


# =============================================================================
# Funding Exceptions
# =============================================================================

class InvalidTransitionError(SmartHubException):
    """Raised when a status change isn't allowed from the current status."""

    def __init__(self, entity: str, entity_id: str, current: str, target: str):
        super().__init__(
            message=f"Cannot move {entity} {entity_id} from '{current}' to '{target}'",
            code="INVALID_TRANSITION",
            status_code=409,
            details={"id": entity_id, "from": current, "to": target},
        )


class ConcurrentModificationError(SmartHubException):
    """Raised when a conditional update matched no rows because the row changed."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            message=f"{entity} {entity_id} was modified by someone else",
            code="CONCURRENT_MODIFICATION",
            status_code=409,
            suggestion="Reload and try again",
            details={"id": entity_id},
        )


class PaymentVerificationError(SmartHubException):
    """Raised when the payment gateway doesn't confirm a transaction."""

    def __init__(self, reference: str, reason: str):
        super().__init__(
            message=f"Payment {reference} could not be verified: {reason}",
            code="PAYMENT_NOT_VERIFIED",
            status_code=402,
            suggestion="Contact support if you were charged",
            details={"reference": reference},
        )


class PaymentGatewayError(SmartHubException):
    """Raised when the payment gateway can't be reached or rejects a call."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="PAYMENT_GATEWAY_ERROR",
            status_code=502,
            suggestion="Try again later",
        )


class RefundRequiredError(SmartHubException):
    """
    Raised when a verified payment arrives for a meal request that is no
    longer approved (usually because another donor funded it first). The
    donation is marked failed and the donor must be refunded.
    """

    def __init__(self, donation_id: str, meal_request_id: str, request_status: str):
        super().__init__(
            message=(
                f"Meal request {meal_request_id} is '{request_status}'; "
                f"payment for donation {donation_id} was not applied"
            ),
            code="REFUND_REQUIRED",
            status_code=409,
            suggestion="The payment will be refunded",
            details={
                "donation_id": donation_id,
                "meal_request_id": meal_request_id,
                "status": request_status,
            },
        )


class FundingInconsistencyError(SmartHubException):
    """
    Raised when a donation was completed but its meal request could not be
    marked funded. The donation stays completed; nothing is rolled back.
    """

    def __init__(self, donation_id: str, meal_request_id: str, error: str):
        super().__init__(
            message=(
                f"Donation {donation_id} completed but meal request "
                f"{meal_request_id} was not marked funded: {error}"
            ),
            code="FUNDING_INCONSISTENT",
            status_code=500,
            suggestion="An administrator must mark the meal request funded manually",
            details={"donation_id": donation_id, "meal_request_id": meal_request_id},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def smarthub_exception_handler(
    request: Request,
    exc: SmartHubException
) -> JSONResponse:
    """
    Convert SmartHubException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
