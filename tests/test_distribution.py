"""
Tests for the profit distribution engine.

Covers:
- Pure allocation arithmetic (proportional and exclusive pools)
- Preview against the ledger, warnings and validation
- Commit: entries, period audit fields, notifications
- Double processing, concurrent claim and rollback on write failure
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from cvm_capital.models import (
    AccountingPeriod,
    EntryKind,
    LedgerEntry,
    Notification,
    ParticipantKind,
)
from cvm_capital.services import distribution, ledger, periods
from cvm_capital.services.distribution import Candidate, compute_allocations
from cvm_capital.services.errors import (
    AlreadyProcessedError,
    InvalidSplitError,
    NoCapitalWarning,
    PartialWriteError,
    UnallocatedPoolWarning,
    ValidationError,
)
from cvm_capital.services.profit_config import ProfitSplit
from cvm_capital.utils.money import to_money


def _investor(owner_id: int, balance: str) -> Candidate:
    return Candidate(ParticipantKind.INVESTOR, owner_id, f"Investor {owner_id}", Decimal(balance), False)


def _partner(owner_id: int, balance: str = "0") -> Candidate:
    return Candidate(ParticipantKind.PARTNER, owner_id, f"Partner {owner_id}", Decimal(balance), True)


def _split(proportional: str, exclusive: str) -> ProfitSplit:
    return ProfitSplit(Decimal(proportional), Decimal(exclusive))


async def _profit_entry_count(db) -> int:
    return await db.scalar(
        select(func.count()).select_from(LedgerEntry).where(LedgerEntry.kind == EntryKind.PROFIT)
    )


async def _is_processed(db, period_id: int) -> bool:
    return await db.scalar(
        select(AccountingPeriod.processed).where(AccountingPeriod.id == period_id)
    )


# ── Pure arithmetic ───────────────────────────────────────


class TestComputeAllocations:
    def test_proportional_fairness(self):
        totals, allocations, warnings = compute_allocations(
            [_investor(1, "100"), _investor(2, "300")],
            Decimal("10"),
            _split("100", "0"),
        )
        assert totals["total_capital"] == Decimal("400")
        assert totals["proportional_pool"] == Decimal("40.00")
        assert [a.proportional_amount for a in allocations] == [Decimal("10.00"), Decimal("30.00")]
        assert [a.capital_share for a in allocations] == [Decimal("0.250000"), Decimal("0.750000")]
        assert warnings == []

    def test_exclusive_even_split(self):
        totals, allocations, _ = compute_allocations(
            [_investor(1, "300"), _partner(1), _partner(2), _partner(3)],
            Decimal("10"),
            _split("0", "100"),
        )
        assert totals["exclusive_pool"] == Decimal("30.00")
        partner_amounts = [a.exclusive_amount for a in allocations if a.owner_kind == ParticipantKind.PARTNER]
        assert partner_amounts == [Decimal("10.00")] * 3

    def test_pools_add_up_to_gross_profit(self):
        totals, allocations, _ = compute_allocations(
            [_investor(1, "333.33"), _investor(2, "666.67"), _partner(1, "100"), _partner(2)],
            Decimal("7.5"),
            _split("70", "30"),
        )
        assert totals["proportional_pool"] + totals["exclusive_pool"] == totals["gross_profit"]
        assert sum(a.total for a in allocations) == totals["gross_profit"]

    def test_zero_capital_warns_instead_of_dividing(self):
        totals, allocations, warnings = compute_allocations(
            [_investor(1, "0"), _partner(1, "0")],
            Decimal("10"),
            _split("70", "30"),
        )
        assert totals["gross_profit"] == Decimal("0.00")
        assert all(a.total == 0 for a in allocations)
        assert any(isinstance(w, NoCapitalWarning) for w in warnings)

    def test_non_positive_balances_get_no_proportional_share(self):
        _, allocations, _ = compute_allocations(
            [_investor(1, "1000"), _investor(2, "-50")],
            Decimal("10"),
            _split("100", "0"),
        )
        assert allocations[1].proportional_amount == Decimal("0")
        assert allocations[1].capital_share == Decimal("0")

    def test_exclusive_pool_without_partners(self):
        _, allocations, warnings = compute_allocations(
            [_investor(1, "1000")],
            Decimal("10"),
            _split("70", "30"),
        )
        assert allocations[0].total == Decimal("70.00")
        assert any(isinstance(w, UnallocatedPoolWarning) for w in warnings)


class TestValidateProfitPercentage:
    @pytest.mark.parametrize("value", ["0", "-1", "100.01"])
    def test_out_of_range(self, value):
        with pytest.raises(ValidationError):
            distribution.validate_profit_percentage(Decimal(value))

    def test_upper_bound_inclusive(self):
        assert distribution.validate_profit_percentage(Decimal("100")) == Decimal("100")

    def test_more_than_four_decimal_places_rejected(self):
        with pytest.raises(ValidationError):
            distribution.validate_profit_percentage(Decimal("10.123449"))

    @pytest.mark.parametrize("value", ["10.1234", "10.50000"])
    def test_four_decimal_places_accepted(self, value):
        assert distribution.validate_profit_percentage(Decimal(value)) == Decimal(value)


# ── Preview ───────────────────────────────────────────────


class TestPreview:
    async def test_zero_capital_preview(self, db_session, factory):
        await factory.config("70", "30")
        investor = await factory.investor()
        await factory.partner()
        period = await factory.period()

        preview = await distribution.preview_distribution(db_session, period.id, Decimal("10"))

        assert preview.total_capital == Decimal("0")
        assert preview.allocation_for(ParticipantKind.INVESTOR, investor.id).proportional_amount == 0
        assert any(isinstance(w, NoCapitalWarning) for w in preview.warnings)

    async def test_inactive_partner_is_excluded(self, db_session, factory):
        await factory.config("0", "100")
        await factory.investor(deposit="300")
        active = [await factory.partner() for _ in range(3)]
        inactive = await factory.partner(deposit="1000", active=False)
        period = await factory.period()

        preview = await distribution.preview_distribution(db_session, period.id, Decimal("10"))

        assert preview.total_capital == Decimal("300.00")
        assert preview.active_partner_count == 3
        for partner in active:
            assert preview.allocation_for(ParticipantKind.PARTNER, partner.id).exclusive_amount == Decimal("10.00")
        assert preview.allocation_for(ParticipantKind.PARTNER, inactive.id) is None

    async def test_preview_writes_nothing(self, db_session, factory):
        await factory.config()
        await factory.investor(deposit="1000")
        period = await factory.period()

        await distribution.preview_distribution(db_session, period.id, Decimal("10"))

        assert await _profit_entry_count(db_session) == 0
        assert period.processed is False

    async def test_requires_a_configuration_or_override(self, db_session, factory):
        await factory.investor(deposit="1000")
        period = await factory.period()

        with pytest.raises(ValidationError):
            await distribution.preview_distribution(db_session, period.id, Decimal("10"))

        preview = await distribution.preview_distribution(
            db_session, period.id, Decimal("10"), split_override=_split("100", "0")
        )
        assert preview.configuration_id is None
        assert preview.gross_profit == Decimal("100.00")

    async def test_invalid_override(self, db_session, factory):
        await factory.config()
        period = await factory.period()

        with pytest.raises(InvalidSplitError):
            await distribution.preview_distribution(
                db_session, period.id, Decimal("10"), split_override=_split("60", "39")
            )

    async def test_processed_period_cannot_be_previewed(self, db_session, factory):
        await factory.config()
        period = await factory.period()
        period.processed = True
        await db_session.flush()

        with pytest.raises(AlreadyProcessedError):
            await distribution.preview_distribution(db_session, period.id, Decimal("10"))


# ── Commit ────────────────────────────────────────────────


class TestCommit:
    async def test_end_to_end_march(self, db_session, factory):
        config = await factory.config("70", "30")
        x = await factory.investor(deposit="1000")
        y = await factory.partner()
        march = await factory.period(month=3, label="March")
        admin = await factory.admin()
        await db_session.commit()

        result = await distribution.commit_distribution(
            db_session, march.id, Decimal("10"), user_id=admin.id
        )

        preview = result.preview
        assert preview.total_capital == Decimal("1000.00")
        assert preview.gross_profit == Decimal("100.00")
        assert preview.exclusive_pool == Decimal("30.00")
        assert preview.proportional_pool == Decimal("70.00")
        assert result.entries_written == 2

        x_entries = await ledger.list_entries(db_session, x.id, ParticipantKind.INVESTOR, kind=EntryKind.PROFIT)
        y_entries = await ledger.list_entries(db_session, y.id, ParticipantKind.PARTNER, kind=EntryKind.PROFIT)
        assert [e.amount for e in x_entries] == [Decimal("70.00")]
        assert [e.amount for e in y_entries] == [Decimal("30.00")]
        assert x_entries[0].period_id == march.id
        assert "March" in x_entries[0].description

        stored = await periods.get_period(db_session, march.id)
        assert stored.processed is True
        assert stored.gross_profit_amount == Decimal("100.00")
        assert stored.total_capital == Decimal("1000.00")
        assert stored.profit_percentage == Decimal("10")
        assert stored.processed_by_user_id == admin.id
        assert stored.profit_configuration_id == config.id

    async def test_participants_are_notified(self, db_session, factory):
        await factory.config("70", "30")
        x = await factory.investor(deposit="1000")
        await factory.partner()
        period = await factory.period()
        await db_session.commit()

        result = await distribution.commit_distribution(db_session, period.id, Decimal("10"))

        assert result.notifications_sent == 2
        notes = (
            await db_session.execute(
                select(Notification).where(
                    Notification.owner_kind == ParticipantKind.INVESTOR,
                    Notification.owner_id == x.id,
                )
            )
        ).scalars().all()
        assert len(notes) == 1
        assert "70.00" in notes[0].message

    async def test_second_commit_is_rejected(self, db_session, factory):
        await factory.config("100", "0")
        await factory.investor(deposit="1000")
        period = await factory.period()
        await db_session.commit()

        await distribution.commit_distribution(db_session, period.id, Decimal("10"))
        entries_before = await _profit_entry_count(db_session)

        with pytest.raises(AlreadyProcessedError):
            await distribution.commit_distribution(db_session, period.id, Decimal("20"))

        assert await _profit_entry_count(db_session) == entries_before
        stored = await periods.get_period(db_session, period.id)
        assert stored.gross_profit_amount == Decimal("100.00")

    async def test_claim_lost_to_a_concurrent_commit(self, db_session, factory):
        await factory.config("100", "0")
        await factory.investor(deposit="1000")
        period = await factory.period()
        await db_session.commit()
        period_id = period.id

        # Another session processes the period; our loaded copy is now stale
        await db_session.execute(
            update(AccountingPeriod)
            .where(AccountingPeriod.id == period_id)
            .values(processed=True)
            .execution_options(synchronize_session=False)
        )
        await db_session.commit()
        assert period.processed is False

        with pytest.raises(AlreadyProcessedError):
            await distribution.commit_distribution(db_session, period_id, Decimal("10"))

        assert await _profit_entry_count(db_session) == 0
        assert await _is_processed(db_session, period_id) is True

    async def test_write_failure_rolls_everything_back(self, db_session, factory, monkeypatch):
        await factory.config("70", "30")
        await factory.investor(deposit="1000")
        await factory.partner(deposit="500")
        period = await factory.period()
        await db_session.commit()
        period_id = period.id

        real_append = ledger.append_entry
        calls = []

        async def flaky_append(db, **kwargs):
            calls.append(kwargs)
            if len(calls) == 2:
                raise SQLAlchemyError("connection lost")
            return await real_append(db, **kwargs)

        monkeypatch.setattr(ledger, "append_entry", flaky_append)

        with pytest.raises(PartialWriteError):
            await distribution.commit_distribution(db_session, period_id, Decimal("10"))

        assert len(calls) == 2
        assert await _profit_entry_count(db_session) == 0
        assert await _is_processed(db_session, period_id) is False

    async def test_refuses_unallocated_exclusive_pool(self, db_session, factory):
        await factory.config("70", "30")
        await factory.investor(deposit="1000")
        await factory.partner(deposit="100", active=False)
        period = await factory.period()
        await db_session.commit()
        period_id = period.id

        preview = await distribution.preview_distribution(db_session, period_id, Decimal("10"))
        assert any(isinstance(w, UnallocatedPoolWarning) for w in preview.warnings)

        with pytest.raises(ValidationError):
            await distribution.commit_distribution(db_session, period_id, Decimal("10"))

        assert await _profit_entry_count(db_session) == 0
        assert await _is_processed(db_session, period_id) is False

    async def test_stored_percentage_reproduces_gross_profit(self, db_session, factory):
        await factory.config("100", "0")
        await factory.investor(deposit="1000000")
        period = await factory.period()
        await db_session.commit()
        period_id = period.id

        with pytest.raises(ValidationError):
            await distribution.commit_distribution(db_session, period_id, Decimal("10.123449"))
        assert await _is_processed(db_session, period_id) is False

        await distribution.commit_distribution(db_session, period_id, Decimal("10.1234"))

        stored = await periods.get_period(db_session, period_id)
        assert stored.gross_profit_amount == Decimal("101234.00")
        assert stored.gross_profit_amount == to_money(
            stored.total_capital * stored.profit_percentage / 100
        )

    async def test_override_with_too_many_decimals_is_rejected(self, db_session, factory):
        await factory.investor(deposit="1000")
        period = await factory.period()

        with pytest.raises(InvalidSplitError):
            await distribution.preview_distribution(
                db_session, period.id, Decimal("10"), split_override=_split("66.66665", "33.33335")
            )

    async def test_split_override_is_recorded(self, db_session, factory):
        await factory.config("70", "30")
        await factory.investor(deposit="1000")
        period = await factory.period()
        await db_session.commit()

        result = await distribution.commit_distribution(
            db_session, period.id, Decimal("10"), split_override=_split("100", "0")
        )

        assert result.preview.allocated_total == Decimal("100.00")
        stored = await periods.get_period(db_session, period.id)
        assert stored.proportional_percentage == Decimal("100")
        assert stored.profit_configuration_id is None


class TestDeleteProcessedPeriod:
    async def test_cascade_removes_exactly_the_periods_entries(self, db_session, factory):
        await factory.config("70", "30")
        x = await factory.investor(deposit="1000")
        await factory.partner()
        march = await factory.period(sequence_number=1, month=3)
        await db_session.commit()
        await distribution.commit_distribution(db_session, march.id, Decimal("10"))

        april = await factory.period(sequence_number=2, month=4)
        await db_session.commit()
        await distribution.commit_distribution(db_session, april.id, Decimal("5"))
        await factory.entry(x, EntryKind.WITHDRAWAL, "10")
        await db_session.commit()

        assert await _profit_entry_count(db_session) == 4

        removed = await periods.delete_period(db_session, march.id)

        assert removed == 2
        assert await _profit_entry_count(db_session) == 2
        remaining = (await db_session.execute(select(LedgerEntry))).scalars().all()
        assert {e.period_id for e in remaining if e.kind == EntryKind.PROFIT} == {april.id}
        assert sum(1 for e in remaining if e.kind != EntryKind.PROFIT) == 2
