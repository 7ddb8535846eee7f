"""
Persistence codec.

Converts ledger snapshots to and from the portable JSON document used for
export and import:

    {
      "users": ["Alice", "Bob"],
      "expenses": [
        {"id": 1, "paidBy": "Alice", "amount": 60, "description": "Dinner",
         "splitWith": ["Alice", "Bob"]}
      ]
    }

Balances are never written; they are derived from the expenses on demand.
Decoding is all-or-nothing: a document either yields a complete, valid
snapshot or raises MalformedDocumentError listing every problem found.
"""

import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError as PydanticValidationError

from .exceptions import MalformedDocumentError
from .models import ExpenseRecord, LedgerDocument, LedgerSnapshot
from .validation import clean_name, validate_expense


Document = dict[str, Any]


def _to_number(amount: Decimal) -> Union[int, float]:
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def serialize(snapshot: LedgerSnapshot) -> Document:
    return {
        "users": list(snapshot.participants),
        "expenses": [
            {
                "id": e.id,
                "paidBy": e.payer,
                "amount": _to_number(e.amount),
                "description": e.description,
                "splitWith": list(e.split_with),
            }
            for e in snapshot.expenses
        ],
    }


def dumps(snapshot: LedgerSnapshot) -> str:
    return json.dumps(serialize(snapshot), indent=2, ensure_ascii=False)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "document"
    return f"{location}: {error['msg']}"


def _parse(document: Union[Document, str, bytes]) -> LedgerDocument:
    if isinstance(document, (str, bytes, bytearray)):
        try:
            document = json.loads(document)
        except ValueError as e:
            raise MalformedDocumentError([f"document is not valid JSON: {e}"])
    if not isinstance(document, dict):
        raise MalformedDocumentError(["document must be a JSON object"])
    try:
        return LedgerDocument.model_validate(document)
    except PydanticValidationError as e:
        raise MalformedDocumentError([_describe(err) for err in e.errors()])


def deserialize(document: Union[Document, str, bytes]) -> LedgerSnapshot:
    parsed = _parse(document)
    problems: list[str] = []

    participants: list[str] = []
    for index, raw in enumerate(parsed.users):
        name = clean_name(raw)
        if not name:
            problems.append(f"users.{index}: participant name is empty")
        elif name in participants:
            problems.append(f"users.{index}: duplicate participant {name!r}")
        else:
            participants.append(name)

    expenses: list[ExpenseRecord] = []
    seen_ids: set[int] = set()
    for index, doc in enumerate(parsed.expenses):
        if doc.id in seen_ids:
            problems.append(f"expenses.{index}.id: duplicate expense id {doc.id}")
        seen_ids.add(doc.id)

        errors, cleaned = validate_expense(
            participants, doc.paid_by, doc.amount, doc.description, doc.split_with
        )
        for field, message in errors.items():
            problems.append(f"expenses.{index}.{field}: {message}")
        if cleaned is not None:
            expenses.append(ExpenseRecord(id=doc.id, **cleaned))

    if problems:
        raise MalformedDocumentError(problems)
    return LedgerSnapshot(participants=tuple(participants), expenses=tuple(expenses))


def read_file(path: Union[str, Path]) -> LedgerSnapshot:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise MalformedDocumentError([f"cannot read {path}: {e.strerror or e}"])
    return deserialize(data)


def write_file(snapshot: LedgerSnapshot, path: Union[str, Path]) -> Path:
    """Write the whole document at once; readers never see a partial file."""
    target = Path(path)
    text = dumps(snapshot) + "\n"
    tmp = target.with_name(target.name + ".tmp")
    try:
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, target)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    return target
