from typing import Any

from fastapi import Body, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .exceptions import (
    DuplicateParticipantError, MalformedDocumentError, NotFoundError, ValidationError,
)
from .log import configure_logging
from .models import (
    AddExpenseRequest, AddParticipantRequest, BalancesResponse, ExpenseRecord,
    ExpenseRemoval, LoadResponse, ParticipantRemoval,
)
from .service import LedgerService

settings = get_settings()
configure_logging(settings.log_level, settings.log_json)

app = FastAPI(
    title=settings.api_title,
    description="Shared expense ledger: participants, expenses and who owes whom",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ledger_service = LedgerService()


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "expense-ledger"}


@app.get("/participants", response_model=list[str], tags=["Participants"])
def list_participants() -> list[str]:
    return list(ledger_service.participants())


@app.post("/participants", status_code=status.HTTP_201_CREATED, tags=["Participants"])
def add_participant(request: AddParticipantRequest):
    try:
        name = ledger_service.add_participant(request.name)
    except DuplicateParticipantError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return {"name": name, "participants": list(ledger_service.participants())}


@app.delete("/participants/{name}", response_model=ParticipantRemoval, tags=["Participants"])
def remove_participant(name: str) -> ParticipantRemoval:
    return ledger_service.remove_participant(name)


@app.get("/expenses", response_model=list[ExpenseRecord], tags=["Expenses"])
def list_expenses() -> list[ExpenseRecord]:
    return list(ledger_service.expenses())


@app.post("/expenses", response_model=ExpenseRecord, status_code=status.HTTP_201_CREATED, tags=["Expenses"])
def add_expense(request: AddExpenseRequest) -> ExpenseRecord:
    try:
        return ledger_service.add_expense(
            request.paid_by, request.amount, request.description, request.split_with
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"errors": e.errors},
        )


@app.get("/expenses/{expense_id}", response_model=ExpenseRecord, tags=["Expenses"])
def get_expense(expense_id: int) -> ExpenseRecord:
    try:
        return ledger_service.get_expense(expense_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Expense {expense_id} not found")


@app.delete("/expenses/{expense_id}", response_model=ExpenseRemoval, tags=["Expenses"])
def remove_expense(expense_id: int) -> ExpenseRemoval:
    return ledger_service.remove_expense(expense_id)


@app.get("/balances", response_model=BalancesResponse, tags=["Balances"])
def get_balances() -> BalancesResponse:
    matrix = ledger_service.balances()
    return BalancesResponse(debts=matrix.rounded(), settled=matrix.is_settled)


@app.get("/ledger", tags=["Ledger"])
def save_ledger() -> dict:
    return ledger_service.save()


@app.put("/ledger", response_model=LoadResponse, tags=["Ledger"])
def load_ledger(document: Any = Body(...)) -> LoadResponse:
    try:
        snapshot = ledger_service.load(document)
    except MalformedDocumentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"problems": e.problems},
        )
    return LoadResponse(
        participants=len(snapshot.participants),
        expenses=len(snapshot.expenses),
        message="Ledger loaded successfully",
    )
