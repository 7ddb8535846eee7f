from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, StrictFloat, StrictInt, StrictStr


DISPLAY_QUANTUM = Decimal("0.01")


def to_display(amount: Decimal) -> Decimal:
    """Round an amount to currency precision. Only used at the presentation edge."""
    return amount.quantize(DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)


class ExpenseRecord(BaseModel):
    id: int
    payer: str = Field(..., alias="paidBy")
    amount: Decimal
    description: str
    split_with: tuple[str, ...] = Field(..., alias="splitWith")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def involves(self, name: str) -> bool:
        return self.payer == name or name in self.split_with


class LedgerSnapshot(BaseModel):
    participants: tuple[str, ...] = ()
    expenses: tuple[ExpenseRecord, ...] = ()

    model_config = ConfigDict(frozen=True)


class Debt(BaseModel):
    debtor: str
    creditor: str
    amount: Decimal

    model_config = ConfigDict(frozen=True)

    @property
    def display_amount(self) -> Decimal:
        return to_display(self.amount)


class BalanceMatrix(BaseModel):
    """Positive pairwise debts derived from a ledger, at full precision."""

    debts: tuple[Debt, ...] = ()

    model_config = ConfigDict(frozen=True)

    def owed(self, debtor: str, creditor: str) -> Decimal:
        for debt in self.debts:
            if debt.debtor == debtor and debt.creditor == creditor:
                return debt.amount
        return Decimal("0")

    def rounded(self) -> list[Debt]:
        """Debts rounded for display. Entries that round to zero are dropped."""
        out = []
        for debt in self.debts:
            shown = debt.display_amount
            if shown > 0:
                out.append(Debt(debtor=debt.debtor, creditor=debt.creditor, amount=shown))
        return out

    @property
    def is_settled(self) -> bool:
        return not self.rounded()


# Document shapes. Field types are strict so that a document built by hand
# with the wrong types is rejected rather than coerced.

class ExpenseDocument(BaseModel):
    id: StrictInt
    paid_by: StrictStr = Field(..., alias="paidBy")
    amount: Union[StrictInt, StrictFloat]
    description: StrictStr
    split_with: list[StrictStr] = Field(..., alias="splitWith")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LedgerDocument(BaseModel):
    users: list[StrictStr]
    expenses: list[ExpenseDocument]

    model_config = ConfigDict(extra="ignore")


# API request / response shapes

class AddParticipantRequest(BaseModel):
    name: str = Field(..., description="Participant name, trimmed before use")

    model_config = ConfigDict(json_schema_extra={"example": {"name": "Alice"}})


class AddExpenseRequest(BaseModel):
    # Loosely typed so that every field problem is reported by the ledger
    # service in one response rather than by request parsing.
    paid_by: Any = Field(default=None, alias="paidBy")
    amount: Any = None
    description: Any = None
    split_with: Any = Field(default=None, alias="splitWith")

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {
            "paidBy": "Alice",
            "amount": 90.00,
            "description": "Dinner",
            "splitWith": ["Alice", "Bob", "Carol"]
        }
    })


class ParticipantRemoval(BaseModel):
    name: str
    removed: bool
    removed_expenses: list[ExpenseRecord] = Field(default_factory=list)


class ExpenseRemoval(BaseModel):
    id: int
    removed: bool
    expense: Optional[ExpenseRecord] = None


class BalancesResponse(BaseModel):
    debts: list[Debt]
    settled: bool


class LoadResponse(BaseModel):
    participants: int
    expenses: int
    message: str
