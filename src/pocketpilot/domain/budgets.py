"""Monthly budgets: spending status, rollover and management."""

from typing import Any, Optional
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from pocketpilot.database.base import Database
from pocketpilot.domain.entities import Budget, BudgetDetails
from pocketpilot.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    budget_not_found,
    category_not_found,
)
from pocketpilot.utils.amounts import round_cents
from pocketpilot.utils.dates import month_bounds, previous_month_bounds, utc_today

DEFAULT_ALERT_THRESHOLD = 90
ZERO = Decimal("0")


def get_budget_status(percentage: float, alert_threshold: int = DEFAULT_ALERT_THRESHOLD) -> str:
    """Classify spending as ``over``, ``warning`` or ``safe``."""
    if percentage >= 100:
        return "over"
    if percentage >= alert_threshold:
        return "warning"
    return "safe"


def calculate_rollover(amount: Decimal, previous_spent: Decimal) -> Decimal:
    """Unspent amount carried over from the previous period, never negative."""
    return max(amount - previous_spent, ZERO)


def calculate_budget_details(
    budget: Budget,
    spent: Decimal,
    rollover_amount: Optional[Decimal] = None,
    category_name: str = "",
) -> BudgetDetails:
    """Derive remaining amount, percentage used and status.

    The effective budget includes ``rollover_amount`` only when the budget
    has rollover enabled and the amount is positive. The percentage is
    rounded to one decimal and is 0 when the effective budget is not positive.
    """
    effective = budget.amount
    if budget.rollover and rollover_amount is not None and rollover_amount > 0:
        effective = budget.amount + rollover_amount

    if effective > 0:
        percentage = float((spent / effective * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    else:
        percentage = 0.0

    return BudgetDetails(
        budget=budget,
        category_name=category_name,
        spent=spent,
        remaining=effective - spent,
        percentage=percentage,
        effective_budget=effective,
        rollover_amount=rollover_amount if budget.rollover else None,
        status=get_budget_status(percentage, budget.alert_threshold),
    )


class BudgetService:
    """Service for managing budgets."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    @staticmethod
    def _validate(amount: Optional[Decimal], alert_threshold: Optional[int], notes: Optional[str]) -> None:
        if amount is not None and amount <= 0:
            raise ValidationError("Budget amount must be positive")
        if alert_threshold is not None and not 0 <= alert_threshold <= 100:
            raise ValidationError("Alert threshold must be between 0 and 100")
        if notes is not None and len(notes) > 500:
            raise ValidationError("Notes must be at most 500 characters")

    def create_budget(
        self,
        user_id: str,
        category_id: int,
        amount: Decimal,
        rollover: bool = False,
        alert_threshold: int = DEFAULT_ALERT_THRESHOLD,
        notes: Optional[str] = None,
    ) -> int:
        """Create a monthly budget for an expense category.

        Raises:
            ValidationError: If the amount/threshold is invalid or the category
                is not an expense category
            NotFoundError: If the category is not owned by the caller
            ConflictError: If the category already has a budget
        """
        self._validate(amount, alert_threshold, notes)
        category = self.db.get_category(user_id, category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        if category.category_type != "expense":
            raise ValidationError("Budgets can only be created for expense categories")
        if self.db.get_budget_by_category(user_id, category_id) is not None:
            raise ConflictError(f"A budget already exists for category '{category.name}'")

        return self.db.create_budget(
            user_id,
            category_id=category_id,
            amount=round_cents(amount),
            rollover=rollover,
            alert_threshold=alert_threshold,
            notes=notes,
        )

    def update_budget(
        self,
        user_id: str,
        budget_id: int,
        amount: Optional[Decimal] = None,
        rollover: Optional[bool] = None,
        alert_threshold: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> None:
        if self.db.get_budget(user_id, budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        self._validate(amount, alert_threshold, notes)
        fields: dict[str, Any] = {}
        if amount is not None:
            fields["amount"] = round_cents(amount)
        if rollover is not None:
            fields["rollover"] = rollover
        if alert_threshold is not None:
            fields["alert_threshold"] = alert_threshold
        if notes is not None:
            fields["notes"] = notes
        if fields:
            self.db.update_budget(user_id, budget_id, **fields)

    def delete_budget(self, user_id: str, budget_id: int) -> None:
        if self.db.get_budget(user_id, budget_id) is None:
            raise NotFoundError(budget_not_found(budget_id))
        self.db.delete_budget(user_id, budget_id)

    def list_budgets(self, user_id: str, month: Optional[date] = None) -> list[BudgetDetails]:
        """List budgets with spending for the month containing ``month``.

        Spending is the total of expense transactions in the budget's
        category. Budgets with rollover enabled carry forward whatever was
        left unspent in the previous month.
        """
        month = month or utc_today()
        start, end = month_bounds(month)
        spending = self.db.get_spending_by_category(user_id, start, end)

        budgets = self.db.list_budgets(user_id)
        previous_spending: dict[int, Decimal] = {}
        if any(b.rollover for b in budgets):
            prev_start, prev_end = previous_month_bounds(month)
            previous_spending = self.db.get_spending_by_category(user_id, prev_start, prev_end)

        details = []
        for budget in budgets:
            category = self.db.get_category(user_id, budget.category_id)
            rollover_amount = None
            if budget.rollover:
                rollover_amount = calculate_rollover(
                    budget.amount, previous_spending.get(budget.category_id, ZERO)
                )
            details.append(
                calculate_budget_details(
                    budget,
                    spending.get(budget.category_id, ZERO),
                    rollover_amount,
                    category.name if category is not None else "Unknown",
                )
            )
        return details
