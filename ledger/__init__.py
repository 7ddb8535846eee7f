"""
Shared Expense Ledger

This package provides:
- Participants and immutable expense records with all-or-nothing validation
- Cascading removal of a participant's expenses
- Pairwise balances derived from expenses, netted to one direction per pair
- A JSON document codec for saving and loading the ledger
"""

from .models import (
    ExpenseRecord,
    LedgerSnapshot,
    Debt,
    BalanceMatrix,
)
from .exceptions import (
    LedgerServiceError,
    ValidationError,
    DuplicateParticipantError,
    NotFoundError,
    MalformedDocumentError,
)
from .balances import compute_balances
from .service import LedgerService

__all__ = [
    "ExpenseRecord",
    "LedgerSnapshot",
    "Debt",
    "BalanceMatrix",
    "LedgerServiceError",
    "ValidationError",
    "DuplicateParticipantError",
    "NotFoundError",
    "MalformedDocumentError",
    "compute_balances",
    "LedgerService",
]
