"""
Tests for deposit/withdrawal requests and their approval.
"""

from decimal import Decimal

import pytest

from cvm_capital.models import EntryKind, ParticipantKind, RequestKind, RequestStatus
from cvm_capital.services import approvals, balance
from cvm_capital.services.errors import NotFoundError, ValidationError


async def _submit(db, owner, kind=RequestKind.DEPOSIT, amount="100"):
    return await approvals.submit_request(
        db,
        owner_kind=owner.kind,
        owner_id=owner.id,
        kind=kind,
        amount=Decimal(amount),
    )


class TestSubmitRequest:
    async def test_creates_pending_request(self, db_session, factory):
        investor = await factory.investor()
        request = await _submit(db_session, investor, amount="250.005")

        assert request.status == RequestStatus.PENDING
        assert request.amount == Decimal("250.01")

    async def test_one_pending_request_per_kind(self, db_session, factory):
        investor = await factory.investor(deposit="500")
        await _submit(db_session, investor, RequestKind.DEPOSIT)

        with pytest.raises(ValidationError, match="pending deposit"):
            await _submit(db_session, investor, RequestKind.DEPOSIT)

        withdrawal = await _submit(db_session, investor, RequestKind.WITHDRAWAL, "100")
        assert withdrawal.kind == RequestKind.WITHDRAWAL

    async def test_withdrawal_cannot_exceed_balance(self, db_session, factory):
        investor = await factory.investor(deposit="100")

        with pytest.raises(ValidationError, match="exceeds"):
            await _submit(db_session, investor, RequestKind.WITHDRAWAL, "100.01")

    async def test_amount_must_be_positive(self, db_session, factory):
        investor = await factory.investor()

        with pytest.raises(ValidationError):
            await _submit(db_session, investor, amount="0")

    async def test_inactive_partner_cannot_submit(self, db_session, factory):
        partner = await factory.partner(active=False)

        with pytest.raises(ValidationError):
            await _submit(db_session, partner)

    async def test_unknown_participant(self, db_session):
        with pytest.raises(NotFoundError):
            await approvals.submit_request(
                db_session, ParticipantKind.INVESTOR, 999, RequestKind.DEPOSIT, Decimal("10")
            )


class TestApproveRequest:
    async def test_approval_writes_one_entry(self, db_session, factory):
        admin = await factory.admin()
        investor = await factory.investor()
        request = await _submit(db_session, investor, amount="400")

        approved, entry, draft = await approvals.approve_request(
            db_session, request.id, user_id=admin.id
        )

        assert approved.status == RequestStatus.APPROVED
        assert approved.decided_by_user_id == admin.id
        assert entry.kind == EntryKind.DEPOSIT
        assert entry.amount == Decimal("400.00")
        assert entry.request_id == request.id
        assert draft.owner_id == investor.id
        assert await balance.compute_balance(
            db_session, investor.id, ParticipantKind.INVESTOR
        ) == Decimal("400.00")

    async def test_withdrawal_approval_reduces_balance(self, db_session, factory):
        partner = await factory.partner(deposit="300")
        request = await _submit(db_session, partner, RequestKind.WITHDRAWAL, "120")

        _, entry, _ = await approvals.approve_request(db_session, request.id)

        assert entry.kind == EntryKind.WITHDRAWAL
        assert await balance.compute_balance(
            db_session, partner.id, ParticipantKind.PARTNER
        ) == Decimal("180.00")

    async def test_withdrawal_rechecked_at_approval(self, db_session, factory):
        investor = await factory.investor(deposit="100")
        request = await _submit(db_session, investor, RequestKind.WITHDRAWAL, "80")
        await factory.entry(investor, EntryKind.WITHDRAWAL, "50")

        with pytest.raises(ValidationError, match="exceeds"):
            await approvals.approve_request(db_session, request.id)

    async def test_cannot_decide_twice(self, db_session, factory):
        investor = await factory.investor()
        request = await _submit(db_session, investor)
        await approvals.approve_request(db_session, request.id)

        with pytest.raises(ValidationError, match="already approved"):
            await approvals.approve_request(db_session, request.id)
        with pytest.raises(ValidationError):
            await approvals.reject_request(db_session, request.id, "Too late")

    async def test_unknown_request(self, db_session):
        with pytest.raises(NotFoundError):
            await approvals.approve_request(db_session, 404)


class TestRejectRequest:
    async def test_rejection_writes_no_entry(self, db_session, factory):
        investor = await factory.investor()
        request = await _submit(db_session, investor)

        rejected, draft = await approvals.reject_request(db_session, request.id, " Missing receipt ")

        assert rejected.status == RequestStatus.REJECTED
        assert rejected.rejection_reason == "Missing receipt"
        assert "Missing receipt" in draft.message
        assert await balance.compute_balance(
            db_session, investor.id, ParticipantKind.INVESTOR
        ) == Decimal("0")

    async def test_reason_is_required(self, db_session, factory):
        investor = await factory.investor()
        request = await _submit(db_session, investor)

        with pytest.raises(ValidationError):
            await approvals.reject_request(db_session, request.id, "   ")

    async def test_new_request_allowed_after_decision(self, db_session, factory):
        investor = await factory.investor()
        request = await _submit(db_session, investor)
        await approvals.reject_request(db_session, request.id, "Wrong amount")

        again = await _submit(db_session, investor, amount="150")
        assert again.status == RequestStatus.PENDING


class TestCancelRequest:
    async def test_owner_can_cancel_pending(self, db_session, factory):
        investor = await factory.investor()
        request = await _submit(db_session, investor)

        await approvals.cancel_request(db_session, investor.kind, investor.id, request.id)

        assert await approvals.list_requests(db_session, owner_id=investor.id) == []

    async def test_cannot_cancel_someone_elses(self, db_session, factory):
        owner = await factory.investor()
        other = await factory.investor()
        request = await _submit(db_session, owner)

        with pytest.raises(NotFoundError):
            await approvals.cancel_request(db_session, other.kind, other.id, request.id)

    async def test_cannot_cancel_decided(self, db_session, factory):
        investor = await factory.investor()
        request = await _submit(db_session, investor)
        await approvals.approve_request(db_session, request.id)

        with pytest.raises(ValidationError):
            await approvals.cancel_request(db_session, investor.kind, investor.id, request.id)
