from pathlib import Path
from typing import Any, Iterable, Optional, Union

from . import codec
from .balances import compute_balances
from .config import get_settings
from .exceptions import (
    DuplicateParticipantError,
    MalformedDocumentError,
    NotFoundError,
    ValidationError,
)
from .log import get_logger
from .models import (
    BalanceMatrix,
    ExpenseRecord,
    LedgerSnapshot,
    ParticipantRemoval,
    ExpenseRemoval,
)
from .validation import clean_name, validate_expense


logger = get_logger(__name__)


class InMemoryStorage:
    def __init__(self):
        self.participants: list[str] = []
        self.expenses: dict[int, ExpenseRecord] = {}
        self.next_id: int = 1

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot) -> "InMemoryStorage":
        storage = cls()
        storage.participants = list(snapshot.participants)
        storage.expenses = {e.id: e for e in snapshot.expenses}
        storage.next_id = max(max(storage.expenses, default=0) + 1, 1)
        return storage

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            participants=tuple(self.participants),
            expenses=tuple(self.expenses.values()),
        )


class LedgerService:
    """
    Single-editor ledger of participants and shared expenses.

    Every mutator either applies completely or raises before touching state.
    Balances are not stored; ``balances()`` derives them from the current
    snapshot each time it is called.
    """

    def __init__(self, storage: Optional[InMemoryStorage] = None):
        self.storage = storage or InMemoryStorage()

    # Participants

    def add_participant(self, name: Any) -> str:
        cleaned = clean_name(name)
        if not cleaned:
            raise DuplicateParticipantError(cleaned, "Participant name cannot be empty")
        if cleaned in self.storage.participants:
            raise DuplicateParticipantError(cleaned)

        self.storage.participants.append(cleaned)
        logger.info("participant_added", name=cleaned)
        return cleaned

    def remove_participant(self, name: Any) -> ParticipantRemoval:
        cleaned = clean_name(name)
        if cleaned not in self.storage.participants:
            logger.info("participant_remove_skipped", name=cleaned, reason="not_found")
            return ParticipantRemoval(name=cleaned, removed=False)

        dropped = [e for e in self.storage.expenses.values() if e.involves(cleaned)]
        self.storage.participants.remove(cleaned)
        for expense in dropped:
            del self.storage.expenses[expense.id]

        logger.info(
            "participant_removed",
            name=cleaned,
            cascaded_expenses=[e.id for e in dropped],
        )
        return ParticipantRemoval(name=cleaned, removed=True, removed_expenses=dropped)

    # Expenses

    def add_expense(
        self,
        payer: Any,
        amount: Any,
        description: Any,
        split_with: Optional[Iterable[str]],
    ) -> ExpenseRecord:
        errors, cleaned = validate_expense(
            self.storage.participants, payer, amount, description, split_with
        )
        if errors:
            logger.warning("expense_rejected", errors=errors)
            raise ValidationError(errors)

        expense = ExpenseRecord(id=self.storage.next_id, **cleaned)
        self.storage.next_id += 1
        self.storage.expenses[expense.id] = expense

        logger.info(
            "expense_added",
            expense_id=expense.id,
            payer=expense.payer,
            amount=str(expense.amount),
            split_with=list(expense.split_with),
        )
        return expense

    def remove_expense(self, expense_id: int) -> ExpenseRemoval:
        expense = self.storage.expenses.pop(expense_id, None)
        if expense is None:
            logger.info("expense_remove_skipped", expense_id=expense_id, reason="not_found")
            return ExpenseRemoval(id=expense_id, removed=False)

        logger.info("expense_removed", expense_id=expense_id)
        return ExpenseRemoval(id=expense_id, removed=True, expense=expense)

    # Queries

    def participants(self) -> tuple[str, ...]:
        return tuple(self.storage.participants)

    def expenses(self) -> tuple[ExpenseRecord, ...]:
        return tuple(self.storage.expenses.values())

    def get_expense(self, expense_id: int) -> ExpenseRecord:
        expense = self.storage.expenses.get(expense_id)
        if expense is None:
            raise NotFoundError(f"Expense {expense_id} not found")
        return expense

    def snapshot(self) -> LedgerSnapshot:
        return self.storage.snapshot()

    def balances(self) -> BalanceMatrix:
        return compute_balances(self.storage.snapshot())

    # Persistence

    def save(self) -> dict:
        return codec.serialize(self.storage.snapshot())

    def load(self, document: Union[dict, str, bytes]) -> LedgerSnapshot:
        try:
            snapshot = codec.deserialize(document)
        except MalformedDocumentError as e:
            logger.warning("ledger_load_rejected", problems=e.problems)
            raise
        self._replace(snapshot)
        return snapshot

    def save_to_file(self, path: Union[str, Path, None] = None) -> Path:
        target = codec.write_file(self.storage.snapshot(), path or get_settings().data_file)
        logger.info(
            "ledger_saved",
            path=str(target),
            participants=len(self.storage.participants),
            expenses=len(self.storage.expenses),
        )
        return target

    def load_from_file(self, path: Union[str, Path, None] = None) -> LedgerSnapshot:
        source = path or get_settings().data_file
        try:
            snapshot = codec.read_file(source)
        except MalformedDocumentError as e:
            logger.warning("ledger_load_rejected", path=str(source), problems=e.problems)
            raise
        self._replace(snapshot)
        return snapshot

    def _replace(self, snapshot: LedgerSnapshot) -> None:
        self.storage = InMemoryStorage.from_snapshot(snapshot)
        logger.info(
            "ledger_loaded",
            participants=len(snapshot.participants),
            expenses=len(snapshot.expenses),
        )
