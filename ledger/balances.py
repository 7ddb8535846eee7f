"""
Balance engine.

Turns a ledger snapshot into pairwise debts. Everything here is a pure
function of its input; callers recompute whenever they need fresh balances.

Shares are computed with Decimal at 28 significant digits and are never
rounded here. Rounding to cents belongs to the presentation edge
(see ``BalanceMatrix.rounded``).
"""

from decimal import Context, Decimal

from .models import BalanceMatrix, Debt, ExpenseRecord, LedgerSnapshot


ZERO = Decimal("0")
_CONTEXT = Context(prec=28)

Pair = tuple[str, str]


def shares_for(expense: ExpenseRecord) -> dict[str, Decimal]:
    """Equal share of ``expense.amount`` for every split member."""
    share = _CONTEXT.divide(expense.amount, Decimal(len(expense.split_with)))
    return {name: share for name in expense.split_with}


def empty_debts(participants: tuple[str, ...]) -> dict[Pair, Decimal]:
    return {
        (a, b): ZERO
        for a in participants
        for b in participants
        if a != b
    }


def accumulate_debts(snapshot: LedgerSnapshot) -> dict[Pair, Decimal]:
    """
    Gross directed debts, keyed ``(debtor, creditor)``, before netting.

    Each split member other than the payer owes the payer their share. A
    negative share (refund) is owed the other way round, so a pair can end
    up with debts in both directions.
    """
    debts = empty_debts(snapshot.participants)
    for expense in snapshot.expenses:
        payer = expense.payer
        for member, share in shares_for(expense).items():
            if member == payer:
                continue
            if share >= 0:
                debts[(member, payer)] = _CONTEXT.add(debts[(member, payer)], share)
            else:
                debts[(payer, member)] = _CONTEXT.subtract(debts[(payer, member)], share)
    return debts


def net_debts(debts: dict[Pair, Decimal]) -> dict[Pair, Decimal]:
    """Collapse opposite debts between each pair into one direction."""
    netted = dict(debts)
    for a, b in debts:
        forward = netted[(a, b)]
        backward = netted.get((b, a), ZERO)
        if forward > 0 and backward > 0:
            if forward > backward:
                netted[(a, b)] = _CONTEXT.subtract(forward, backward)
                netted[(b, a)] = ZERO
            else:
                netted[(b, a)] = _CONTEXT.subtract(backward, forward)
                netted[(a, b)] = ZERO
    return netted


def to_matrix(debts: dict[Pair, Decimal]) -> BalanceMatrix:
    return BalanceMatrix(debts=tuple(
        Debt(debtor=debtor, creditor=creditor, amount=amount)
        for (debtor, creditor), amount in debts.items()
        if amount > 0
    ))


def compute_balances(snapshot: LedgerSnapshot) -> BalanceMatrix:
    return to_matrix(net_debts(accumulate_debts(snapshot)))
