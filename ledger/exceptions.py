"""Domain exceptions for the expense ledger."""

from typing import Optional


class LedgerServiceError(Exception):
    pass


class ValidationError(LedgerServiceError):
    """One or more expense fields are invalid.

    ``errors`` maps the document field name (``paidBy``, ``amount``,
    ``description``, ``splitWith``) to a message the caller can show.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class DuplicateParticipantError(LedgerServiceError):
    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"Participant {name!r} already exists")


class NotFoundError(LedgerServiceError):
    pass


class MalformedDocumentError(LedgerServiceError):
    """A ledger document was rejected on load. Carries every problem found."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Malformed ledger document: " + "; ".join(self.problems))
