"""
Budget API endpoints
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from pocketpilot.api.deps import get_current_owner, get_database
from pocketpilot.api.schemas import BudgetResponse
from pocketpilot.database.base import Database
from pocketpilot.domain.budgets import DEFAULT_ALERT_THRESHOLD, BudgetService


router = APIRouter(prefix="/api/budgets", tags=["budgets"])


class CreateBudgetRequest(BaseModel):
    category_id: int
    amount: Decimal = Field(gt=0)
    rollover: bool = False
    alert_threshold: int = Field(default=DEFAULT_ALERT_THRESHOLD, ge=0, le=100)
    notes: Optional[str] = Field(default=None, max_length=500)


@router.get("", response_model=list[BudgetResponse])
def list_budgets(user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """Budgets with this month's spending, rollover and status"""
    return [BudgetResponse.from_details(d) for d in BudgetService(db).list_budgets(user_id)]


@router.post("", response_model=BudgetResponse, status_code=201)
def create_budget(
    req: CreateBudgetRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Create a monthly budget for an expense category"""
    service = BudgetService(db)
    budget_id = service.create_budget(
        user_id,
        category_id=req.category_id,
        amount=req.amount,
        rollover=req.rollover,
        alert_threshold=req.alert_threshold,
        notes=req.notes,
    )
    details = next(d for d in service.list_budgets(user_id) if d.budget.id == budget_id)
    return BudgetResponse.from_details(details)
