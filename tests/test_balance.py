"""
Tests for the balance calculator.

Covers:
- Pure folding of entries, in any order
- Balances read from the ledger
- Total invested capital with inactive partners and clamping
"""

import itertools
from decimal import Decimal
from types import SimpleNamespace

from cvm_capital.models import EntryKind, ParticipantKind
from cvm_capital.services import balance
from cvm_capital.services.balance import CapitalSummary, fold_balance, fold_breakdown


def _entry(kind: EntryKind, amount: str):
    return SimpleNamespace(kind=kind, amount=Decimal(amount))


ENTRIES = [
    _entry(EntryKind.DEPOSIT, "1000"),
    _entry(EntryKind.WITHDRAWAL, "250.50"),
    _entry(EntryKind.PROFIT, "75.25"),
    _entry(EntryKind.DEPOSIT, "10"),
]


# ── Pure fold ─────────────────────────────────────────────


class TestFoldBalance:
    def test_empty_ledger_is_zero(self):
        assert fold_balance([]) == Decimal("0")

    def test_signed_sum(self):
        assert fold_balance(ENTRIES) == Decimal("834.75")

    def test_order_does_not_matter(self):
        results = {fold_balance(order) for order in itertools.permutations(ENTRIES)}
        assert results == {Decimal("834.75")}

    def test_breakdown_by_kind(self):
        breakdown = fold_breakdown(ENTRIES)
        assert breakdown.deposits == Decimal("1010")
        assert breakdown.withdrawals == Decimal("250.50")
        assert breakdown.profit == Decimal("75.25")
        assert breakdown.balance == Decimal("834.75")

    def test_negative_balance_does_not_raise(self):
        entries = [_entry(EntryKind.DEPOSIT, "10"), _entry(EntryKind.WITHDRAWAL, "25")]
        assert fold_balance(entries) == Decimal("-15")


class TestCapitalSummary:
    def test_total_is_clamped_at_zero(self):
        summary = CapitalSummary(raw_total=Decimal("-40"))
        assert summary.total == Decimal("0")
        assert summary.raw_total == Decimal("-40")

    def test_positive_total_unchanged(self):
        assert CapitalSummary(raw_total=Decimal("12.50")).total == Decimal("12.50")


# ── Ledger-backed balances ────────────────────────────────


class TestComputeBalance:
    async def test_owner_without_entries(self, db_session, factory):
        investor = await factory.investor()
        result = await balance.compute_balance(db_session, investor.id, ParticipantKind.INVESTOR)
        assert result == Decimal("0")

    async def test_deposits_withdrawals_and_profit(self, db_session, factory):
        investor = await factory.investor(deposit="1000")
        await factory.entry(investor, EntryKind.WITHDRAWAL, "200")
        await factory.entry(investor, EntryKind.PROFIT, "50")

        result = await balance.compute_balance(db_session, investor.id, ParticipantKind.INVESTOR)
        assert result == Decimal("850.00")

    async def test_owner_kind_is_part_of_the_key(self, db_session, factory):
        investor = await factory.investor(deposit="500")
        partner = await factory.partner()

        result = await balance.compute_balance(db_session, investor.id, ParticipantKind.PARTNER)
        assert result == Decimal("0")

    async def test_compute_balances_for_all_owners(self, db_session, factory):
        investor = await factory.investor(deposit="100")
        partner = await factory.partner(deposit="40")
        await factory.entry(partner, EntryKind.WITHDRAWAL, "15")

        balances = await balance.compute_balances(db_session)
        assert balances[(ParticipantKind.INVESTOR, investor.id)] == Decimal("100.00")
        assert balances[(ParticipantKind.PARTNER, partner.id)] == Decimal("25.00")


class TestTotalInvestedCapital:
    async def test_sums_investors_and_active_partners(self, db_session, factory):
        await factory.investor(deposit="1000")
        await factory.partner(deposit="500")
        await factory.partner(deposit="300", active=False)

        summary = await balance.compute_total_invested_capital(db_session)
        assert summary.total == Decimal("1500.00")

        everyone = await balance.compute_total_invested_capital(
            db_session, include_inactive_partners=True
        )
        assert everyone.total == Decimal("1800.00")

    async def test_negative_aggregate_is_reported_as_zero(self, db_session, factory):
        investor = await factory.investor(deposit="10")
        await factory.entry(investor, EntryKind.WITHDRAWAL, "30")

        summary = await balance.compute_total_invested_capital(db_session)
        assert summary.raw_total == Decimal("-20.00")
        assert summary.total == Decimal("0")
