"""
Field validation shared by the ledger service and the document codec.

Every check runs and every failure is collected, so a caller gets the full
list of problems for an expense in one pass.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional


PAYER_MISSING = "Please select who paid"
AMOUNT_MISSING = "Please enter an amount"
AMOUNT_INVALID = "Please enter a valid number"
DESCRIPTION_MISSING = "Please enter a description"
SPLIT_MISSING = "Please select at least one person to split with"

# Amounts must survive a trip through a JSON number (an IEEE double).
MAX_SIGNIFICANT_DIGITS = 15
MAX_EXPONENT = 12


def clean_name(name: Any) -> str:
    return name.strip() if isinstance(name, str) else ""


def parse_amount(value: Any) -> Decimal:
    """
    Convert user or document input into a finite Decimal.

    Floats go through ``repr`` so 12.34 stays 12.34 instead of its binary
    expansion. Amounts with more than MAX_SIGNIFICANT_DIGITS digits, or a
    magnitude outside 1e-MAX_EXPONENT..1e+MAX_EXPONENT, are refused.
    Raises ValueError with a display message on failure.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(AMOUNT_MISSING)
    if isinstance(value, bool):
        raise ValueError(AMOUNT_INVALID)
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(AMOUNT_INVALID)
    else:
        raise ValueError(AMOUNT_INVALID)
    if not amount.is_finite():
        raise ValueError(AMOUNT_INVALID)
    if amount and (
        _significant_digits(amount) > MAX_SIGNIFICANT_DIGITS
        or abs(amount.adjusted()) > MAX_EXPONENT
    ):
        raise ValueError(AMOUNT_INVALID)
    return amount


def _significant_digits(amount: Decimal) -> int:
    digits = amount.as_tuple().digits
    while len(digits) > 1 and digits[-1] == 0:
        digits = digits[:-1]
    return len(digits)


def _unique(names: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return tuple(seen)


def validate_expense(
    participants: Iterable[str],
    payer: Any,
    amount: Any,
    description: Any,
    split_with: Any,
) -> tuple[dict[str, str], Optional[dict]]:
    """
    Check the four expense fields against the current participants.

    Returns ``(errors, cleaned)``. ``cleaned`` is None whenever ``errors``
    is non-empty. Error keys use the document field names.
    """
    members = set(participants)
    errors: dict[str, str] = {}

    payer_name = clean_name(payer)
    if not payer_name:
        errors["paidBy"] = PAYER_MISSING
    elif payer_name not in members:
        errors["paidBy"] = f"{payer_name} is not a participant"

    parsed_amount = None
    try:
        parsed_amount = parse_amount(amount)
    except ValueError as e:
        errors["amount"] = str(e)

    text = description.strip() if isinstance(description, str) else ""
    if not text:
        errors["description"] = DESCRIPTION_MISSING

    split: tuple[str, ...] = ()
    if split_with is None or isinstance(split_with, (str, bytes)):
        errors["splitWith"] = SPLIT_MISSING
    else:
        try:
            split = _unique(clean_name(n) for n in split_with)
        except TypeError:
            split = ()
        if not split:
            errors["splitWith"] = SPLIT_MISSING
        else:
            unknown = [n for n in split if n not in members]
            if unknown:
                shown = ", ".join(n or "<blank>" for n in unknown)
                errors["splitWith"] = f"Not participants: {shown}"

    if errors:
        return errors, None
    return errors, {
        "payer": payer_name,
        "amount": parsed_amount,
        "description": text,
        "split_with": split,
    }
