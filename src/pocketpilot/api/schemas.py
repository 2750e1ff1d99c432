"""
Response models shared by the API routers

Amounts leave the API as JSON numbers.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from pocketpilot.domain.entities import (
    BudgetDetails,
    CategorizationRule,
    GoalContribution,
    GoalDetails,
    RecurringTransaction,
    Transaction,
    TransactionTemplate,
)


class TransactionResponse(BaseModel):
    id: int
    account_id: int
    date: date
    amount: float
    description: Optional[str]
    category_id: Optional[int]
    notes: Optional[str]
    is_transfer: bool
    is_split_parent: bool
    split_group_id: Optional[str]
    split_parent_id: Optional[int]

    @classmethod
    def from_entity(cls, t: Transaction) -> "TransactionResponse":
        return cls(
            id=t.id,
            account_id=t.account_id,
            date=t.date,
            amount=t.amount,
            description=t.description,
            category_id=t.category_id,
            notes=t.notes,
            is_transfer=t.is_transfer,
            is_split_parent=t.is_split_parent,
            split_group_id=t.split_group_id,
            split_parent_id=t.split_parent_id,
        )


class MilestoneResponse(BaseModel):
    id: int
    name: str
    target_percentage: int
    target_amount: float
    current_progress: float
    is_reached: bool
    celebration_shown: bool


class GoalResponse(BaseModel):
    id: int
    name: str
    target_amount: float
    current_amount: float
    target_date: Optional[date]
    category: Optional[str]
    is_completed: bool
    completed_at: Optional[date]
    is_shared: bool
    share_token: Optional[str]
    created_at: datetime
    percentage: float
    remaining: float
    monthly_required: Optional[float]
    is_overdue: bool
    milestones: list[MilestoneResponse]

    @classmethod
    def from_details(cls, details: GoalDetails) -> "GoalResponse":
        goal = details.goal
        return cls(
            id=goal.id,
            name=goal.name,
            target_amount=goal.target_amount,
            current_amount=goal.current_amount,
            target_date=goal.target_date,
            category=goal.category,
            is_completed=goal.is_completed,
            completed_at=goal.completed_at,
            is_shared=goal.is_shared,
            share_token=goal.share_token,
            created_at=goal.created_at,
            percentage=details.percentage,
            remaining=details.remaining,
            monthly_required=details.monthly_required,
            is_overdue=details.is_overdue,
            milestones=[
                MilestoneResponse(
                    id=m.milestone.id,
                    name=m.milestone.name,
                    target_percentage=m.milestone.target_percentage,
                    target_amount=m.target_amount,
                    current_progress=m.current_progress,
                    is_reached=m.is_reached,
                    celebration_shown=m.milestone.celebration_shown,
                )
                for m in details.milestones
            ],
        )


class ContributionResponse(BaseModel):
    id: int
    goal_id: int
    amount: float
    date: date
    note: Optional[str]

    @classmethod
    def from_entity(cls, c: GoalContribution) -> "ContributionResponse":
        return cls(id=c.id, goal_id=c.goal_id, amount=c.amount, date=c.date, note=c.note)


class BudgetResponse(BaseModel):
    id: int
    category_id: int
    category_name: str
    amount: float
    rollover: bool
    alert_threshold: int
    notes: Optional[str]
    spent: float
    remaining: float
    percentage: float
    effective_budget: float
    rollover_amount: Optional[float]
    status: str

    @classmethod
    def from_details(cls, details: BudgetDetails) -> "BudgetResponse":
        budget = details.budget
        return cls(
            id=budget.id,
            category_id=budget.category_id,
            category_name=details.category_name,
            amount=budget.amount,
            rollover=budget.rollover,
            alert_threshold=budget.alert_threshold,
            notes=budget.notes,
            spent=details.spent,
            remaining=details.remaining,
            percentage=details.percentage,
            effective_budget=details.effective_budget,
            rollover_amount=details.rollover_amount,
            status=details.status,
        )


class RuleResponse(BaseModel):
    id: int
    name: str
    rule_order: int
    rule_type: str
    pattern: str
    case_sensitive: bool
    target_category_id: int
    is_active: bool

    @classmethod
    def from_entity(cls, r: CategorizationRule) -> "RuleResponse":
        return cls(
            id=r.id,
            name=r.name,
            rule_order=r.rule_order,
            rule_type=r.rule_type,
            pattern=r.pattern,
            case_sensitive=r.case_sensitive,
            target_category_id=r.target_category_id,
            is_active=r.is_active,
        )


class RecurringResponse(BaseModel):
    id: int
    account_id: int
    category_id: Optional[int]
    description: str
    amount: float
    frequency: str
    next_occurrence_date: date
    last_created_date: Optional[date]
    is_active: bool
    notes: Optional[str]
    days_until: Optional[int] = None

    @classmethod
    def from_entity(cls, r: RecurringTransaction, days_until: Optional[int] = None) -> "RecurringResponse":
        return cls(
            id=r.id,
            account_id=r.account_id,
            category_id=r.category_id,
            description=r.description,
            amount=r.amount,
            frequency=r.frequency,
            next_occurrence_date=r.next_occurrence_date,
            last_created_date=r.last_created_date,
            is_active=r.is_active,
            notes=r.notes,
            days_until=days_until,
        )


class TemplateResponse(BaseModel):
    id: int
    name: str
    account_id: int
    category_id: Optional[int]
    amount: float
    transaction_type: str
    description: Optional[str]
    is_favorite: bool
    usage_count: int
    last_used_at: Optional[datetime]
    tag_ids: list[int]

    @classmethod
    def from_entity(cls, t: TransactionTemplate) -> "TemplateResponse":
        return cls(
            id=t.id,
            name=t.name,
            account_id=t.account_id,
            category_id=t.category_id,
            amount=t.amount,
            transaction_type=t.kind,
            description=t.description,
            is_favorite=t.is_favorite,
            usage_count=t.usage_count,
            last_used_at=t.last_used_at,
            tag_ids=list(t.tag_ids),
        )
