# =============================================================================
# tests/test_funding_service.py - Meal Request Lifecycle and Donor Balance Tests
# =============================================================================

import pytest

from app.exceptions import (
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
    RefundRequiredError,
)
from core.models.funding import DonationStatus
from core.models.meal import MealRequestStatus
from core.models.profile import Profile
from core.services.funding_service import (
    MEAL_REQUEST_TRANSITIONS,
    PAYMENT_TYPE_DONATION,
    PAYMENT_TYPE_TOP_UP,
    FundingService,
    can_transition,
)
from tests.fakes import DONOR_ID, STUDENT_ID


@pytest.fixture
def funding(db, payments):
    return FundingService(db, payments=payments)


def seed_request(fake_db, status="pending", amount=12.5, **extra):
    return fake_db.seed("meal_requests", {
        "student_id": STUDENT_ID,
        "title": "Lunch Request",
        "description": "Lunch for Monday",
        "amount": amount,
        "meal_type": "Lunch",
        "status": status,
        **extra,
    })[0]


class TestTransitionTable:
    """Tests for the allowed status moves."""

    def test_pending_moves(self):
        assert can_transition(MealRequestStatus.PENDING, MealRequestStatus.APPROVED)
        assert can_transition(MealRequestStatus.PENDING, MealRequestStatus.REJECTED)
        assert not can_transition(MealRequestStatus.PENDING, MealRequestStatus.FUNDED)

    def test_rejected_is_terminal(self):
        assert MEAL_REQUEST_TRANSITIONS[MealRequestStatus.REJECTED] == frozenset()
        for target in MealRequestStatus:
            assert not can_transition(MealRequestStatus.REJECTED, target)

    def test_approved_only_to_funded(self):
        assert MEAL_REQUEST_TRANSITIONS[MealRequestStatus.APPROVED] == frozenset({MealRequestStatus.FUNDED})


class TestApproveAndReject:
    """Tests for admin decisions."""

    def test_approve_records_who_and_when(self, funding, fake_db, student_profile, admin_profile):
        row = seed_request(fake_db)

        approved = funding.approve(row["id"], admin_profile)

        assert approved.status == MealRequestStatus.APPROVED
        assert approved.approved_by == admin_profile.id
        assert approved.approved_at is not None
        assert fake_db.get("meal_requests", row["id"])["status"] == "approved"

    def test_approve_notifies_student(self, funding, fake_db, student_profile, admin_profile):
        row = seed_request(fake_db)
        funding.approve(row["id"], admin_profile)

        notification = fake_db.rows("notifications")[0]
        assert notification["user_id"] == STUDENT_ID
        assert notification["title"] == "Request approved"
        assert notification["message"] == 'Your meal request "Lunch Request" has been approved by admin.'
        assert notification["type"] == "request_update"

    def test_reject_only_changes_status(self, funding, fake_db, admin_profile):
        row = seed_request(fake_db)

        rejected = funding.reject(row["id"], admin_profile)

        assert rejected.status == MealRequestStatus.REJECTED
        assert rejected.approved_by is None
        assert rejected.approved_at is None
        assert fake_db.rows("notifications")[0]["title"] == "Request rejected"

    @pytest.mark.parametrize("decide", ["approve", "reject"])
    def test_nothing_reachable_from_rejected(self, funding, fake_db, admin_profile, decide):
        row = seed_request(fake_db, status="rejected")

        with pytest.raises(InvalidTransitionError):
            getattr(funding, decide)(row["id"], admin_profile)

        assert fake_db.get("meal_requests", row["id"])["status"] == "rejected"

    def test_cannot_approve_twice(self, funding, fake_db, admin_profile):
        row = seed_request(fake_db)
        funding.approve(row["id"], admin_profile)

        with pytest.raises(InvalidTransitionError) as exc_info:
            funding.approve(row["id"], admin_profile)
        assert exc_info.value.status_code == 409

    def test_concurrent_change_is_detected(self, funding, fake_db, admin_profile):
        row = seed_request(fake_db)
        # Another admin rejects between our read and our write
        fake_db.on_update("meal_requests", lambda fake: fake.get("meal_requests", row["id"]).update(status="rejected"))

        with pytest.raises(ConcurrentModificationError):
            funding.approve(row["id"], admin_profile)

        assert fake_db.get("meal_requests", row["id"])["status"] == "rejected"

    def test_requires_admin(self, funding, fake_db, donor_profile):
        row = seed_request(fake_db)
        with pytest.raises(PermissionDeniedError):
            funding.approve(row["id"], donor_profile)
        assert fake_db.get("meal_requests", row["id"])["status"] == "pending"

    def test_requires_actor(self, funding, fake_db):
        row = seed_request(fake_db)
        with pytest.raises(NotAuthenticatedError):
            funding.reject(row["id"], None)

    def test_unknown_request(self, funding, admin_profile):
        with pytest.raises(MealRequestNotFoundError):
            funding.approve("missing", admin_profile)

    def test_notification_failure_does_not_block_approval(self, funding, fake_db, admin_profile):
        row = seed_request(fake_db)
        fake_db.fail("notifications", "insert")

        approved = funding.approve(row["id"], admin_profile)

        assert approved.status == MealRequestStatus.APPROVED


class TestListMealRequests:
    """Tests for listing with the student join."""

    def test_joins_student_profile(self, funding, fake_db, student_profile):
        seed_request(fake_db)
        requests = funding.list_meal_requests()
        assert requests[0].student["full_name"] == "Ada Obi"

    def test_filters_by_status(self, funding, fake_db, student_profile):
        seed_request(fake_db, status="pending")
        approved = seed_request(fake_db, status="approved")

        requests = funding.list_meal_requests(status=MealRequestStatus.APPROVED)

        assert [r.id for r in requests] == [approved["id"]]

    def test_newest_first(self, funding, fake_db):
        first = seed_request(fake_db)
        second = seed_request(fake_db)
        assert [r.id for r in funding.list_meal_requests()] == [second["id"], first["id"]]


class TestDonations:
    """Tests for funding an approved request through the gateway."""

    def test_initiate_creates_pending_donation_for_request_amount(
        self, funding, fake_db, payments, donor_profile
    ):
        row = seed_request(fake_db, status="approved", amount=12.5)

        checkout = funding.initiate_donation(row["id"], donor_profile, "Enjoy!")

        assert checkout.donation.status == DonationStatus.PENDING
        assert checkout.donation.amount == 12.5
        assert checkout.donation.meal_request_id == row["id"]
        assert checkout.authorization_url == f"https://checkout.test/{checkout.reference}"

        sent = payments.initialized[0]
        assert sent["amount_minor_units"] == 1250
        assert sent["email"] == "donor@example.com"
        assert sent["metadata"]["payment_type"] == PAYMENT_TYPE_DONATION
        assert sent["metadata"]["meal_request_id"] == row["id"]

    def test_only_approved_requests_can_be_funded(self, funding, fake_db, donor_profile):
        row = seed_request(fake_db, status="pending")

        with pytest.raises(InvalidTransitionError):
            funding.initiate_donation(row["id"], donor_profile)

        assert fake_db.rows("donations") == []

    def test_only_donors_can_fund(self, funding, fake_db, student_profile):
        row = seed_request(fake_db, status="approved")
        with pytest.raises(PermissionDeniedError):
            funding.initiate_donation(row["id"], student_profile)

    def test_gateway_failure_marks_donation_failed(self, funding, fake_db, payments, donor_profile):
        row = seed_request(fake_db, status="approved")
        payments.initialize_error = PaymentGatewayError("gateway down")

        with pytest.raises(PaymentGatewayError):
            funding.initiate_donation(row["id"], donor_profile)

        assert fake_db.rows("donations")[0]["status"] == "failed"

    def test_confirmed_payment_funds_request(self, funding, fake_db, payments, student_profile, donor_profile):
        row = seed_request(fake_db, status="approved", amount=12.5)
        checkout = funding.initiate_donation(row["id"], donor_profile)
        payments.mark_paid(checkout.reference, 1250)

        funded = funding.confirm_payment(checkout.reference)

        assert funded.status == MealRequestStatus.FUNDED
        assert funded.funded_by == DONOR_ID
        assert funded.funded_at is not None
        assert fake_db.get("donations", checkout.donation.id)["status"] == "completed"
        assert fake_db.rows("notifications")[-1]["title"] == "Request funded"

    def test_unverified_payment_fails_donation(self, funding, fake_db, payments, donor_profile):
        row = seed_request(fake_db, status="approved")
        checkout = funding.initiate_donation(row["id"], donor_profile)

        with pytest.raises(PaymentVerificationError):
            funding.confirm_payment(checkout.reference)

        assert fake_db.get("donations", checkout.donation.id)["status"] == "failed"
        assert fake_db.get("meal_requests", row["id"])["status"] == "approved"

    def test_amount_mismatch_fails_donation(self, funding, fake_db, payments, donor_profile):
        row = seed_request(fake_db, status="approved", amount=12.5)
        checkout = funding.initiate_donation(row["id"], donor_profile)
        payments.mark_paid(checkout.reference, 100)

        with pytest.raises(PaymentVerificationError):
            funding.confirm_payment(checkout.reference)

        assert fake_db.get("meal_requests", row["id"])["status"] == "approved"

    def test_payment_cannot_be_confirmed_twice(self, funding, fake_db, payments, donor_profile):
        row = seed_request(fake_db, status="approved", amount=12.5)
        checkout = funding.initiate_donation(row["id"], donor_profile)
        payments.mark_paid(checkout.reference, 1250)
        funding.confirm_payment(checkout.reference)

        with pytest.raises(InvalidTransitionError):
            funding.confirm_payment(checkout.reference)

    def test_unknown_reference(self, funding):
        with pytest.raises(DonationNotFoundError):
            funding.confirm_payment("PAY_unknown")

    def test_request_update_failure_is_reported(self, funding, fake_db, payments, donor_profile):
        row = seed_request(fake_db, status="approved", amount=12.5)
        checkout = funding.initiate_donation(row["id"], donor_profile)
        payments.mark_paid(checkout.reference, 1250)
        fake_db.fail("meal_requests", "update")

        with pytest.raises(FundingInconsistencyError) as exc_info:
            funding.confirm_payment(checkout.reference)

        # The donation stays completed; nothing is rolled back
        assert fake_db.get("donations", checkout.donation.id)["status"] == "completed"
        assert exc_info.value.details["meal_request_id"] == row["id"]

    def test_second_payment_for_funded_request_needs_refund(
        self, funding, fake_db, payments, student_profile, donor_profile
    ):
        other_donor = Profile.model_validate(fake_db.seed("profiles", {
            "id": "44444444-4444-4444-4444-444444444444",
            "email": "second@example.com",
            "full_name": "Second Donor",
            "role": "donor",
            "balance": 0,
        })[0])
        row = seed_request(fake_db, status="approved", amount=12.5)
        first = funding.initiate_donation(row["id"], donor_profile)
        second = funding.initiate_donation(row["id"], other_donor)
        payments.mark_paid(first.reference, 1250)
        payments.mark_paid(second.reference, 1250)
        funding.confirm_payment(first.reference)

        with pytest.raises(RefundRequiredError) as exc_info:
            funding.confirm_payment(second.reference)

        assert exc_info.value.details["status"] == "funded"
        assert fake_db.get("donations", first.donation.id)["status"] == "completed"
        assert fake_db.get("donations", second.donation.id)["status"] == "failed"
        assert fake_db.get("meal_requests", row["id"])["funded_by"] == DONOR_ID

    def test_list_donations_joins_donor_request_and_student(
        self, funding, fake_db, payments, student_profile, donor_profile
    ):
        row = seed_request(fake_db, status="approved")
        funding.initiate_donation(row["id"], donor_profile)

        donation = funding.list_donations(donor_id=DONOR_ID)[0]

        assert donation.donor["full_name"] == "Dee Donor"
        assert donation.meal_request["id"] == row["id"]
        assert donation.meal_request["student"]["full_name"] == "Ada Obi"


class TestDonorBalance:
    """Tests for prepaid donor balances."""

    def test_add_funds(self, funding, donor_profile):
        assert funding.add_funds_to_donor_balance(DONOR_ID, 30) == 50
        assert funding.get_donor_balance(DONOR_ID) == 50

    def test_retries_after_lost_race(self, funding, fake_db, donor_profile):
        # Another writer tops up to 25 between our read and our write
        fake_db.on_update("profiles", lambda fake: fake.get("profiles", DONOR_ID).update(balance=25))

        assert funding.add_funds_to_donor_balance(DONOR_ID, 30) == 55

    def test_gives_up_after_max_retries(self, funding, fake_db, donor_profile):
        for bump in (21, 22, 23):
            fake_db.on_update("profiles", lambda fake, bump=bump: fake.get("profiles", DONOR_ID).update(balance=bump))

        with pytest.raises(ConcurrentModificationError):
            funding.add_funds_to_donor_balance(DONOR_ID, 30)

        assert fake_db.get("profiles", DONOR_ID)["balance"] == 23

    @pytest.mark.parametrize("amount", [0, -10])
    def test_rejects_non_positive_amount(self, funding, donor_profile, amount):
        with pytest.raises(InvalidAmountError):
            funding.add_funds_to_donor_balance(DONOR_ID, amount)

    def test_top_up_flow(self, funding, fake_db, payments, donor_profile):
        checkout = funding.initiate_top_up(donor_profile, 30)

        assert checkout.donation.meal_request_id is None
        assert payments.initialized[0]["metadata"]["payment_type"] == PAYMENT_TYPE_TOP_UP
        assert funding.is_top_up(checkout.reference)

        payments.mark_paid(checkout.reference, 3000)
        assert funding.confirm_top_up(checkout.reference) == 50
        assert fake_db.get("donations", checkout.donation.id)["status"] == "completed"

    def test_top_up_reference_is_not_a_meal_donation(self, funding, payments, donor_profile):
        checkout = funding.initiate_top_up(donor_profile, 30)
        payments.mark_paid(checkout.reference, 3000)

        with pytest.raises(DonationNotFoundError):
            funding.confirm_payment(checkout.reference)


class TestAdminStats:
    """Tests for the admin dashboard totals."""

    def test_counts(self, funding, fake_db, student_profile, donor_profile, admin_profile):
        seed_request(fake_db, status="pending")
        seed_request(fake_db, status="approved")
        fake_db.seed(
            "donations",
            {"donor_id": DONOR_ID, "amount": 10, "status": "completed", "payment_reference": "PAY_1"},
            {"donor_id": DONOR_ID, "amount": 5, "status": "failed", "payment_reference": "PAY_2"},
        )

        stats = funding.get_admin_stats(admin_profile)

        assert stats.total_users == 3
        assert stats.total_requests == 2
        assert stats.pending_requests == 1
        assert stats.total_donations == 1
        assert stats.total_donated == 10

    def test_requires_admin(self, funding, donor_profile):
        with pytest.raises(PermissionDeniedError):
            funding.get_admin_stats(donor_profile)
