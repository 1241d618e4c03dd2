# =============================================================================
# core/services/funding_service.py - Meal Request Funding State Machine
# =============================================================================
# Meal request lifecycle:
#
#   pending --approve--> approved --payment confirmed--> funded --> completed
#      \
#       --reject--> rejected
#
# rejected and completed are terminal; nothing skips a state. funded ->
# completed happens outside this service.
#
# Every status write is conditional on the status that was read
# (.eq("status", <current>)), so two admins or two payment callbacks racing
# on the same row can't both win. The loser gets ConcurrentModificationError.
#
# Funding is still two writes (donation, then meal request). A payment for
# a request that is no longer approved never completes its donation: it is
# marked failed and RefundRequiredError is raised. If the meal request write
# fails after the donation completed, FundingInconsistencyError is raised
# for manual repair; nothing is compensated.
# =============================================================================

import logging

from app.config import settings
from app.exceptions import (
    AuthError,
    ConcurrentModificationError,
    DonationNotFoundError,
    FundingInconsistencyError,
    InvalidAmountError,
    InvalidTransitionError,
    MealRequestNotFoundError,
    NotAuthenticatedError,
    PaymentGatewayError,
    PaymentVerificationError,
    PermissionDeniedError,
    ProfileNotFoundError,
    RefundRequiredError,
)
from core.models.funding import AdminStats, Donation, DonationCheckout, DonationStatus
from core.models.meal import MealRequest, MealRequestStatus
from core.models.profile import Profile, UserRole
from core.services.notification_service import NotificationService
from lib.payments import PaymentGateway, to_minor_units
from lib.supabase_client import SupabaseClient
from lib.utils import generate_payment_reference, utc_now

logger = logging.getLogger(__name__)

# Allowed meal request transitions: current status -> reachable statuses
MEAL_REQUEST_TRANSITIONS: dict[MealRequestStatus, frozenset[MealRequestStatus]] = {
    MealRequestStatus.PENDING: frozenset({MealRequestStatus.APPROVED, MealRequestStatus.REJECTED}),
    MealRequestStatus.APPROVED: frozenset({MealRequestStatus.FUNDED}),
    MealRequestStatus.FUNDED: frozenset({MealRequestStatus.COMPLETED}),
    MealRequestStatus.REJECTED: frozenset(),
    MealRequestStatus.COMPLETED: frozenset(),
}

PAYMENT_TYPE_DONATION = "meal_donation"
PAYMENT_TYPE_TOP_UP = "add_funds"
TOP_UP_MESSAGE = "Balance top-up"


def can_transition(current: MealRequestStatus, target: MealRequestStatus) -> bool:
    return target in MEAL_REQUEST_TRANSITIONS.get(current, frozenset())


def require_role(actor: Profile | None, roles: list[UserRole], action: str) -> Profile:
    """
    Check the actor holds one of `roles`.

    Raises:
        NotAuthenticatedError: If there is no actor
        PermissionDeniedError: If the actor's role isn't allowed
    """
    if actor is None:
        raise NotAuthenticatedError()

    if actor.role not in roles:
        raise PermissionDeniedError(
            action=action,
            required_roles=[role.value for role in roles],
            actual_role=actor.role.value if actor.role else None,
        )

    return actor


class FundingService:
    """
    Approval, donation and donor-balance operations.

    Example:
        funding = FundingService(db, payments=PaymentGateway())
        funding.approve(request_id, admin_profile)
        checkout = funding.initiate_donation(request_id, donor_profile)
        # ... donor pays, gateway redirects back with the reference ...
        funded = funding.confirm_payment(checkout.reference)
    """

    def __init__(
        self,
        db: SupabaseClient,
        payments: PaymentGateway | None = None,
        notifications: NotificationService | None = None,
    ):
        self.db = db
        self.payments = payments or PaymentGateway()
        self.notifications = notifications or NotificationService(db)

    # -------------------------------------------------------------------------
    # Meal Request Reads
    # -------------------------------------------------------------------------

    def get_meal_request(self, request_id: str) -> MealRequest:
        """
        Raises:
            MealRequestNotFoundError: If the request doesn't exist
        """
        row = self.db.fetch_by_id("meal_requests", request_id)
        if not row:
            raise MealRequestNotFoundError(str(request_id))
        return MealRequest.model_validate(row)

    def list_meal_requests(
        self,
        status: MealRequestStatus | None = None,
        student_id: str | None = None,
    ) -> list[MealRequest]:
        """Newest first, each joined with its student profile."""
        query = self.db.table("meal_requests").select("*")
        if status is not None:
            query = query.eq("status", MealRequestStatus(status).value)
        if student_id:
            query = query.eq("student_id", str(student_id))

        rows = query.order("created_at", desc=True).execute().data or []

        students = self.db.find_by_ids("profiles", (row.get("student_id") for row in rows))
        rows = SupabaseClient.attach_related(rows, students, "student_id", "student")

        return [MealRequest.model_validate(row) for row in rows]

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _transition(
        self,
        request: MealRequest,
        target: MealRequestStatus,
        extra: dict | None = None,
    ) -> MealRequest:
        """
        Move a request to `target` if its stored status is still the one read.

        Raises:
            InvalidTransitionError: If `target` isn't reachable from the current status
            ConcurrentModificationError: If the row changed since it was read
        """
        if not can_transition(request.status, target):
            raise InvalidTransitionError(
                "meal request", request.id, request.status.value, target.value
            )

        rows = self.db.update_where(
            "meal_requests",
            {"status": target.value, **(extra or {})},
            {"id": request.id, "status": request.status.value},
        )

        if not rows:
            logger.warning(
                f"Meal request {request.id} changed before {request.status.value} -> {target.value}"
            )
            raise ConcurrentModificationError("Meal request", request.id)

        logger.info(f"Meal request {request.id}: {request.status.value} -> {target.value}")
        return MealRequest.model_validate(rows[0])

    def approve(self, request_id: str, admin: Profile | None) -> MealRequest:
        """pending -> approved, recording who approved it and when."""
        require_role(admin, [UserRole.ADMIN], "approve meal requests")
        request = self.get_meal_request(request_id)

        approved = self._transition(request, MealRequestStatus.APPROVED, {
            "approved_by": admin.id,
            "approved_at": utc_now().isoformat(),
        })

        self._notify_decision(approved, "approved")
        return approved

    def reject(self, request_id: str, admin: Profile | None) -> MealRequest:
        """pending -> rejected. Only the status changes."""
        require_role(admin, [UserRole.ADMIN], "reject meal requests")
        request = self.get_meal_request(request_id)

        rejected = self._transition(request, MealRequestStatus.REJECTED)

        self._notify_decision(rejected, "rejected")
        return rejected

    def _notify_decision(self, request: MealRequest, verb: str) -> None:
        self.notifications.notify(
            user_id=request.student_id,
            title=f"Request {verb}",
            message=f'Your meal request "{request.title}" has been {verb} by admin.',
            type="request_update",
        )

    # -------------------------------------------------------------------------
    # Donations
    # -------------------------------------------------------------------------

    def initiate_donation(
        self,
        meal_request_id: str,
        donor: Profile | None,
        message: str | None = None,
    ) -> DonationCheckout:
        """
        Open a checkout for the full amount of an approved meal request.

        A pending donation is stored first, so the payment callback can be
        matched against it.

        Raises:
            InvalidTransitionError: If the request isn't approved
            PaymentGatewayError: If the checkout can't be opened (the
                donation is marked failed)
        """
        require_role(donor, [UserRole.DONOR], "fund meal requests")
        if not donor.email:
            raise AuthError("Donor profile has no email address for the payment receipt")

        request = self.get_meal_request(meal_request_id)
        if request.status != MealRequestStatus.APPROVED:
            raise InvalidTransitionError(
                "meal request", request.id, request.status.value, MealRequestStatus.FUNDED.value
            )

        donation = self._create_pending_donation(donor, request.amount, request.id, message)

        return self._open_checkout(donor, donation, {
            "donation_id": donation.id,
            "meal_request_id": request.id,
            "donor_id": donor.id,
            "student_id": request.student_id,
            "payment_type": PAYMENT_TYPE_DONATION,
        })

    def confirm_payment(self, reference: str) -> MealRequest:
        """
        Handle the gateway callback for a meal donation.

        Steps:
        1. Match the reference to a pending donation
        2. Verify with the gateway (status and amount)
        3. Check the meal request is still approved
        4. donation pending -> completed
        5. meal request approved -> funded

        Raises:
            DonationNotFoundError: Unknown reference (or a top-up reference)
            InvalidTransitionError: Donation isn't pending
            PaymentVerificationError: Gateway didn't confirm the full amount
            RefundRequiredError: The request was funded (or closed) by
                someone else; the donation is marked failed
            FundingInconsistencyError: Step 5 failed after step 4 succeeded
        """
        donation = self._get_pending_donation(reference)
        if not donation.meal_request_id:
            raise DonationNotFoundError(reference)

        self._verify_with_gateway(donation)

        request = self.get_meal_request(donation.meal_request_id)
        if request.status != MealRequestStatus.APPROVED:
            logger.warning(
                f"Payment {reference} arrived for meal request {request.id} "
                f"in status {request.status.value}; refund required"
            )
            self._mark_donation_failed(donation)
            raise RefundRequiredError(donation.id, request.id, request.status.value)

        self._complete_donation(donation)

        try:
            funded = self._transition(request, MealRequestStatus.FUNDED, {
                "funded_by": donation.donor_id,
                "funded_at": utc_now().isoformat(),
            })
        except Exception as e:
            logger.error(
                f"Donation {donation.id} completed but meal request "
                f"{donation.meal_request_id} was not funded: {e}"
            )
            raise FundingInconsistencyError(donation.id, donation.meal_request_id, str(e)) from e

        self.notifications.notify(
            user_id=funded.student_id,
            title="Request funded",
            message=f'Your meal request "{funded.title}" has been funded by a donor.',
            type="request_update",
        )
        return funded

    def list_donations(
        self,
        donor_id: str | None = None,
        meal_request_id: str | None = None,
    ) -> list[Donation]:
        """
        Newest first, joined with donor, meal request and the request's student.

        Related rows are fetched in one batched lookup per table.
        """
        query = self.db.table("donations").select("*")
        if donor_id:
            query = query.eq("donor_id", str(donor_id))
        if meal_request_id:
            query = query.eq("meal_request_id", str(meal_request_id))

        rows = query.order("created_at", desc=True).execute().data or []

        requests = self.db.find_by_ids("meal_requests", (row.get("meal_request_id") for row in rows))
        profile_ids = [row.get("donor_id") for row in rows]
        profile_ids += [request.get("student_id") for request in requests.values()]
        profiles = self.db.find_by_ids("profiles", profile_ids)

        requests = {
            request_id: {**request, "student": profiles.get(str(request.get("student_id")))}
            for request_id, request in requests.items()
        }
        rows = SupabaseClient.attach_related(rows, profiles, "donor_id", "donor")
        rows = SupabaseClient.attach_related(rows, requests, "meal_request_id", "meal_request")

        return [Donation.model_validate(row) for row in rows]

    # -------------------------------------------------------------------------
    # Donor Balance
    # -------------------------------------------------------------------------

    def get_donor_balance(self, donor_id: str) -> float:
        """
        Raises:
            ProfileNotFoundError: If the donor has no profile
        """
        row = self._fetch_balance_row(donor_id)
        return float(row.get("balance") or 0)

    def add_funds_to_donor_balance(self, donor_id: str, amount: float) -> float:
        """
        Add `amount` to a donor's balance and return the new balance.

        The write only lands if the balance is still the value that was read;
        on a lost race the read-add-write is retried up to
        BALANCE_UPDATE_MAX_RETRIES times.

        Raises:
            InvalidAmountError: amount <= 0
            ProfileNotFoundError: If the donor has no profile
            ConcurrentModificationError: If every attempt lost a race
        """
        if amount is None or amount <= 0:
            raise InvalidAmountError(amount)

        attempts = settings.BALANCE_UPDATE_MAX_RETRIES
        for attempt in range(1, attempts + 1):
            row = self._fetch_balance_row(donor_id)
            stored = row.get("balance")
            new_balance = float(stored or 0) + amount

            updated = self.db.update_where(
                "profiles",
                {"balance": new_balance, "updated_at": utc_now().isoformat()},
                {"id": str(donor_id), "balance": stored},
            )
            if updated:
                logger.info(f"Donor {donor_id} balance: {stored} + {amount} = {new_balance}")
                return new_balance

            logger.warning(f"Balance for donor {donor_id} changed during top-up (attempt {attempt}/{attempts})")

        raise ConcurrentModificationError("Donor balance", str(donor_id))

    def initiate_top_up(self, donor: Profile | None, amount: float) -> DonationCheckout:
        """Open a checkout that adds funds to the donor's balance when paid."""
        require_role(donor, [UserRole.DONOR], "add funds")
        if amount is None or amount <= 0:
            raise InvalidAmountError(amount)
        if not donor.email:
            raise AuthError("Donor profile has no email address for the payment receipt")

        donation = self._create_pending_donation(donor, amount, None, TOP_UP_MESSAGE)

        return self._open_checkout(donor, donation, {
            "donation_id": donation.id,
            "donor_id": donor.id,
            "payment_type": PAYMENT_TYPE_TOP_UP,
        })

    def confirm_top_up(self, reference: str) -> float:
        """
        Handle the gateway callback for a balance top-up.

        Returns:
            The donor's new balance
        """
        donation = self._get_pending_donation(reference)
        if donation.meal_request_id:
            raise DonationNotFoundError(reference)

        self._verify_with_gateway(donation)
        self._complete_donation(donation)
        return self.add_funds_to_donor_balance(donation.donor_id, donation.amount)

    def get_donation_by_reference(self, reference: str) -> Donation:
        """
        Raises:
            DonationNotFoundError: If no donation carries this reference
        """
        row = self.db.fetch_one("donations", {"payment_reference": reference})
        if not row:
            raise DonationNotFoundError(reference)
        return Donation.model_validate(row)

    def is_top_up(self, reference: str) -> bool:
        """True if the reference belongs to a balance top-up."""
        return self.get_donation_by_reference(reference).meal_request_id is None

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    def get_admin_stats(self, admin: Profile | None) -> AdminStats:
        require_role(admin, [UserRole.ADMIN], "view platform statistics")

        total_users = self._count("profiles")
        total_requests = self._count("meal_requests")
        pending_requests = self._count("meal_requests", status=MealRequestStatus.PENDING.value)

        completed = (
            self.db.table("donations")
            .select("amount")
            .eq("status", DonationStatus.COMPLETED.value)
            .execute()
        ).data or []

        return AdminStats(
            total_users=total_users,
            total_requests=total_requests,
            total_donations=len(completed),
            pending_requests=pending_requests,
            total_donated=sum(float(row.get("amount") or 0) for row in completed),
        )

    def _count(self, table: str, **filters) -> int:
        query = self.db.table(table).select("id", count="exact")
        for column, value in filters.items():
            query = query.eq(column, value)
        response = query.execute()
        return response.count if response.count is not None else len(response.data or [])

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _fetch_balance_row(self, donor_id: str) -> dict:
        row = self.db.fetch_by_id("profiles", donor_id, columns="id, balance")
        if not row:
            raise ProfileNotFoundError(str(donor_id))
        return row

    def _create_pending_donation(
        self,
        donor: Profile,
        amount: float,
        meal_request_id: str | None,
        message: str | None,
    ) -> Donation:
        row = self.db.insert("donations", {
            "donor_id": donor.id,
            "meal_request_id": meal_request_id,
            "amount": amount,
            "status": DonationStatus.PENDING.value,
            "payment_reference": generate_payment_reference(),
            "message": message,
        })
        donation = Donation.model_validate(row)
        logger.info(f"Created pending donation {donation.id} ({donation.payment_reference}) for {amount}")
        return donation

    def _open_checkout(self, donor: Profile, donation: Donation, metadata: dict) -> DonationCheckout:
        try:
            checkout = self.payments.initialize_payment(
                email=donor.email,
                amount_minor_units=to_minor_units(donation.amount),
                reference=donation.payment_reference,
                callback_url=settings.PAYMENT_CALLBACK_URL,
                metadata=metadata,
            )
        except PaymentGatewayError:
            self._mark_donation_failed(donation)
            raise

        return DonationCheckout(
            donation=donation,
            reference=checkout.reference,
            authorization_url=checkout.authorization_url,
            access_code=checkout.access_code,
        )

    def _get_pending_donation(self, reference: str) -> Donation:
        donation = self.get_donation_by_reference(reference)
        if donation.status != DonationStatus.PENDING:
            raise InvalidTransitionError(
                "donation", donation.id, donation.status.value, DonationStatus.COMPLETED.value
            )
        return donation

    def _verify_with_gateway(self, donation: Donation) -> None:
        """
        Raises:
            PaymentVerificationError: Not successful or amount mismatch
                (the donation is marked failed first)
        """
        verification = self.payments.verify_payment(donation.payment_reference)

        if not verification.successful:
            reason = f"gateway reported '{verification.status}'"
        elif verification.amount_minor_units != to_minor_units(donation.amount):
            reason = (
                f"paid {verification.amount_minor_units} but expected "
                f"{to_minor_units(donation.amount)} minor units"
            )
        else:
            return

        logger.warning(f"Payment {donation.payment_reference} failed verification: {reason}")
        self._mark_donation_failed(donation)
        raise PaymentVerificationError(donation.payment_reference, reason)

    def _complete_donation(self, donation: Donation) -> None:
        rows = self.db.update_where(
            "donations",
            {"status": DonationStatus.COMPLETED.value},
            {"id": donation.id, "status": DonationStatus.PENDING.value},
        )
        if not rows:
            raise ConcurrentModificationError("Donation", donation.id)
        logger.info(f"Donation {donation.id} completed")

    def _mark_donation_failed(self, donation: Donation) -> None:
        self.db.update_where(
            "donations",
            {"status": DonationStatus.FAILED.value},
            {"id": donation.id, "status": DonationStatus.PENDING.value},
        )
