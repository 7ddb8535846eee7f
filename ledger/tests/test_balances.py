"""
Unit Tests for the Balance Engine

Tests cover:
1. Equal shares and the payer funding their own share
2. Netting of opposite debts, including refunds
3. Idempotence and one-direction-per-pair after netting
4. Display rounding at the presentation edge only
"""

import pytest
from decimal import Decimal
from itertools import permutations

from ledger.balances import (
    accumulate_debts,
    compute_balances,
    net_debts,
    shares_for,
)
from ledger.models import ExpenseRecord, LedgerSnapshot


PEOPLE = ("Alice", "Bob", "Carol")


def expense(id, payer, amount, split_with, description="Expense"):
    return ExpenseRecord(
        id=id, payer=payer, amount=Decimal(str(amount)),
        description=description, split_with=tuple(split_with),
    )


def ledger(*expenses, participants=PEOPLE):
    return LedgerSnapshot(participants=participants, expenses=expenses)


class TestShares:
    """Tests for equal split shares."""

    def test_shares_sum_to_amount(self):
        """Shares add back up to the amount within rounding tolerance."""
        for amount in ("90", "100", "-20", "0.01", "1234.57"):
            e = expense(1, "Alice", amount, PEOPLE)
            total = sum(shares_for(e).values())
            assert abs(total - Decimal(amount)) < Decimal("1e-20")

    def test_single_member_gets_full_amount(self):
        """A split of one carries the whole amount."""
        e = expense(1, "Alice", 42, ["Bob"])

        assert shares_for(e) == {"Bob": Decimal("42")}


class TestScenarios:
    """End-to-end balance scenarios."""

    def test_three_way_split(self):
        """Alice pays 90 for three: Bob and Carol each owe Alice 30.00."""
        matrix = compute_balances(ledger(expense(1, "Alice", 90, PEOPLE)))

        assert [(d.debtor, d.creditor, d.display_amount) for d in matrix.rounded()] == [
            ("Bob", "Alice", Decimal("30.00")),
            ("Carol", "Alice", Decimal("30.00")),
        ]

    def test_opposite_debts_are_netted(self):
        """Alice pays 60 and Bob pays 40, both split in two: Bob owes Alice 10.00."""
        matrix = compute_balances(ledger(
            expense(1, "Alice", 60, ["Alice", "Bob"]),
            expense(2, "Bob", 40, ["Alice", "Bob"]),
        ))

        assert matrix.owed("Bob", "Alice") == Decimal("10")
        assert matrix.owed("Alice", "Bob") == Decimal("0")
        assert len(matrix.debts) == 1

    def test_negative_amount_reverses_direction(self):
        """A refund of 20 paid by Alice, split in two: Alice owes Bob 10.00."""
        matrix = compute_balances(ledger(expense(1, "Alice", -20, ["Alice", "Bob"])))

        assert [(d.debtor, d.creditor, d.display_amount) for d in matrix.rounded()] == [
            ("Alice", "Bob", Decimal("10.00")),
        ]

    def test_payer_outside_split(self):
        """A payer not in the split is owed the whole amount."""
        matrix = compute_balances(ledger(expense(1, "Carol", 30, ["Alice", "Bob"])))

        assert matrix.owed("Alice", "Carol") == Decimal("15")
        assert matrix.owed("Bob", "Carol") == Decimal("15")

    def test_equal_opposite_debts_settle(self):
        """Exactly offsetting expenses leave nothing owed."""
        matrix = compute_balances(ledger(
            expense(1, "Alice", 50, ["Alice", "Bob"]),
            expense(2, "Bob", 50, ["Alice", "Bob"]),
        ))

        assert matrix.debts == ()
        assert matrix.is_settled

    def test_empty_ledger_is_settled(self):
        assert compute_balances(ledger()).is_settled
        assert compute_balances(ledger(participants=())).debts == ()


class TestNetting:
    """Tests for the netting step."""

    def build(self):
        return accumulate_debts(ledger(
            expense(1, "Alice", 100, PEOPLE),
            expense(2, "Bob", 45, PEOPLE),
            expense(3, "Carol", -30, ["Alice", "Carol"]),
            expense(4, "Bob", 17.5, ["Alice"]),
        ))

    def test_raw_debts_can_point_both_ways(self):
        """Before netting a pair may owe each other."""
        raw = self.build()

        assert raw[("Bob", "Alice")] > 0
        assert raw[("Alice", "Bob")] > 0

    def test_at_most_one_direction_after_netting(self):
        """No pair owes in both directions once netted."""
        netted = net_debts(self.build())

        for a, b in permutations(PEOPLE, 2):
            assert not (netted[(a, b)] > 0 and netted[(b, a)] > 0)

    def test_netting_is_idempotent(self):
        """Netting an already netted matrix changes nothing."""
        once = net_debts(self.build())

        assert net_debts(once) == once

    def test_netting_preserves_net_position(self):
        """Netting keeps each pair's difference."""
        raw = self.build()
        netted = net_debts(raw)

        for a, b in permutations(PEOPLE, 2):
            assert netted[(a, b)] - netted[(b, a)] == raw[(a, b)] - raw[(b, a)]


class TestPrecision:
    """Tests for decimal precision and display rounding."""

    def test_no_drift_over_many_thirds(self):
        """Repeated non-terminating shares do not drift visibly."""
        expenses = [expense(i, "Alice", 10, PEOPLE) for i in range(1, 301)]

        matrix = compute_balances(ledger(*expenses))

        assert matrix.owed("Bob", "Alice").quantize(Decimal("0.01")) == Decimal("1000.00")

    def test_stored_amounts_not_rounded(self):
        """Full precision is kept; only the display helpers round."""
        matrix = compute_balances(ledger(expense(1, "Alice", 10, PEOPLE)))

        exact = matrix.owed("Bob", "Alice")
        assert exact != Decimal("3.33")
        assert matrix.rounded()[0].amount == Decimal("3.33")

    def test_sub_cent_debts_hidden_from_display(self):
        """Debts that round to zero are not shown and count as settled."""
        matrix = compute_balances(ledger(expense(1, "Alice", "0.004", ["Alice", "Bob"])))

        assert matrix.owed("Bob", "Alice") == Decimal("0.002")
        assert matrix.rounded() == []
        assert matrix.is_settled


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
