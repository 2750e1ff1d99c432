"""
Recurring transaction API endpoints
"""
import datetime as dt
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field, field_validator

from pocketpilot.api.deps import get_current_owner, get_database
from pocketpilot.api.schemas import RecurringResponse
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import FREQUENCIES
from pocketpilot.domain.recurring import RecurringTransactionService


router = APIRouter(prefix="/api/recurring-transactions", tags=["recurring-transactions"])


class CreateRecurringRequest(BaseModel):
    account_id: int
    description: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0)
    transaction_type: str = "expense"
    frequency: str
    next_occurrence_date: dt.date
    category_id: Optional[int] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("transaction_type")
    @classmethod
    def validate_transaction_type(cls, v: str) -> str:
        if v not in ("expense", "income"):
            raise ValueError("transaction_type must be expense or income")
        return v

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v: str) -> str:
        if v not in FREQUENCIES:
            raise ValueError(f"frequency must be one of: {', '.join(FREQUENCIES)}")
        return v


@router.get("", response_model=list[RecurringResponse])
def list_recurring(
    active_only: bool = False,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Templates with the number of days until each is next due"""
    items = RecurringTransactionService(db).list_recurring(user_id, active_only=active_only)
    return [RecurringResponse.from_entity(template, days) for template, days in items]


@router.post("", response_model=RecurringResponse, status_code=201)
def create_recurring(
    req: CreateRecurringRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Create a recurring template"""
    service = RecurringTransactionService(db)
    recurring_id = service.create_recurring(
        user_id,
        account_id=req.account_id,
        description=req.description,
        amount=req.amount,
        kind=req.transaction_type,
        frequency=req.frequency,
        next_occurrence_date=req.next_occurrence_date,
        category_id=req.category_id,
        notes=req.notes,
    )
    return RecurringResponse.from_entity(service.get_recurring(user_id, recurring_id))


@router.post("/generate")
def generate_due(user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """Create the transactions of every due template"""
    result = RecurringTransactionService(db).generate_due(user_id)
    body = {
        "created": len(result.created),
        "transactions": [
            {
                "id": t.id,
                "recurring_id": t.recurring_id,
                "description": t.description,
                "amount": float(t.amount),
                "date": t.date,
                "next_occurrence": t.next_occurrence,
            }
            for t in result.created
        ],
        "message": result.message,
    }
    if result.errors:
        body["errors"] = [vars(e) for e in result.errors]
    return jsonable_encoder(body)
