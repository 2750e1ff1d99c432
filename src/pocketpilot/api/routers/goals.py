"""
Savings goal API endpoints
"""
import datetime as dt
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field, field_validator

from pocketpilot.api.deps import get_current_owner, get_database
from pocketpilot.api.schemas import ContributionResponse, GoalResponse
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import GOAL_CATEGORIES
from pocketpilot.domain.goals import GoalService


router = APIRouter(prefix="/api/goals", tags=["goals"])


# === Request models ===

class CreateGoalRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    target_amount: Decimal = Field(gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    target_date: Optional[dt.date] = None
    category: Optional[str] = None
    default_milestones: bool = False

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in GOAL_CATEGORIES:
            raise ValueError(f"category must be one of: {', '.join(GOAL_CATEGORIES)}")
        return v


class CreateContributionRequest(BaseModel):
    goal_id: int
    amount: Decimal = Field(gt=0)
    date: Optional[dt.date] = None
    note: Optional[str] = Field(default=None, max_length=500)


class ContributionCreatedResponse(BaseModel):
    contribution: ContributionResponse
    goal: GoalResponse


# === Endpoints ===
# Fixed paths are declared before /{goal_id}

@router.get("/share/{token}")
def get_shared_goal(token: str, db: Database = Depends(get_database)):
    """Public, read-only view of a shared goal"""
    return GoalService(db).get_shared_goal(token)


@router.post("/contributions", response_model=ContributionCreatedResponse, status_code=201)
def add_contribution(
    req: CreateContributionRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Record a contribution and update the goal's progress"""
    service = GoalService(db)
    contribution_id = service.add_contribution(
        user_id, req.goal_id, amount=req.amount, contribution_date=req.date, note=req.note
    )
    contribution = next(c for c in service.list_contributions(user_id, req.goal_id) if c.id == contribution_id)
    return ContributionCreatedResponse(
        contribution=ContributionResponse.from_entity(contribution),
        goal=GoalResponse.from_details(service.get_goal_details(user_id, req.goal_id)),
    )


@router.delete("/contributions/{contribution_id}", status_code=204)
def delete_contribution(
    contribution_id: int,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Remove a contribution and take its amount off the goal"""
    GoalService(db).delete_contribution(user_id, contribution_id)
    return Response(status_code=204)


@router.get("", response_model=list[GoalResponse])
def list_goals(user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """List goals with derived progress"""
    return [GoalResponse.from_details(d) for d in GoalService(db).list_goals(user_id)]


@router.post("", response_model=GoalResponse, status_code=201)
def create_goal(
    req: CreateGoalRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Create a goal"""
    service = GoalService(db)
    goal_id = service.create_goal(
        user_id,
        name=req.name,
        target_amount=req.target_amount,
        current_amount=req.current_amount,
        target_date=req.target_date,
        category=req.category,
        default_milestones=req.default_milestones,
    )
    return GoalResponse.from_details(service.get_goal_details(user_id, goal_id))


@router.get("/{goal_id}", response_model=GoalResponse)
def get_goal(goal_id: int, user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """Get one goal with its milestones"""
    return GoalResponse.from_details(GoalService(db).get_goal_details(user_id, goal_id))


@router.delete("/{goal_id}", status_code=204)
def delete_goal(goal_id: int, user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """Delete a goal"""
    GoalService(db).delete_goal(user_id, goal_id)
    return Response(status_code=204)
