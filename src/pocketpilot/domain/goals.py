"""Savings goals: progress calculation, contributions, milestones and sharing."""

import logging
import secrets
from typing import Any, Iterable, Optional
from datetime import date
from decimal import Decimal

from pocketpilot.database.base import Database
from pocketpilot.domain.entities import (
    GOAL_CATEGORIES,
    Goal,
    GoalContribution,
    GoalDetails,
    GoalMilestone,
    MilestoneProgress,
)
from pocketpilot.domain.errors import NotFoundError, ValidationError, goal_not_found
from pocketpilot.utils.amounts import round_cents
from pocketpilot.utils.dates import months_between, utc_today

logger = logging.getLogger(__name__)

DEFAULT_MILESTONES = (25, 50, 75)
ZERO = Decimal("0")


def _percent(part: Decimal, whole: Decimal) -> float:
    if whole <= 0:
        return 100.0
    return min(float(part / whole * 100), 100.0)


def milestone_progress(milestone: GoalMilestone, goal: Goal) -> MilestoneProgress:
    """Derive a milestone's amount and whether the goal has reached it."""
    target_amount = Decimal(milestone.target_percentage) / 100 * goal.target_amount
    return MilestoneProgress(
        milestone=milestone,
        target_amount=target_amount,
        current_progress=_percent(goal.current_amount, target_amount),
        is_reached=goal.current_amount >= target_amount,
    )


def calculate_goal_details(
    goal: Goal, today: Optional[date] = None, milestones: Iterable[GoalMilestone] = ()
) -> GoalDetails:
    """Compute percentage, remaining, monthly requirement and overdue flag.

    ``monthly_required`` is only computed for open goals with a target date
    that has not passed, using whole calendar months between today and the
    target date. A target date later this month (or today) leaves zero
    months, so nothing is required monthly and the goal is not overdue.
    """
    today = today or utc_today()
    remaining = max(goal.target_amount - goal.current_amount, ZERO)
    monthly_required = None
    is_overdue = False

    if goal.target_date is not None and not goal.is_completed:
        if goal.target_date < today:
            is_overdue = True
        else:
            months = months_between(today, goal.target_date)
            if months > 0 and remaining > 0:
                monthly_required = remaining / months

    return GoalDetails(
        goal=goal,
        percentage=_percent(goal.current_amount, goal.target_amount),
        remaining=remaining,
        monthly_required=monthly_required,
        is_overdue=is_overdue,
        milestones=[milestone_progress(m, goal) for m in milestones],
    )


def goal_completion_state(
    current_amount: Decimal,
    target_amount: Decimal,
    was_completed: bool,
    completed_at: Optional[date],
    today: date,
) -> tuple[bool, Optional[date]]:
    """Return ``(is_completed, completed_at)`` after the current amount changes.

    The completion date is stamped on the transition to completed, kept
    while the goal stays completed, and cleared once it drops below target.
    """
    is_completed = current_amount >= target_amount
    if not is_completed:
        return False, None
    if not was_completed or completed_at is None:
        return True, today
    return True, completed_at


def public_goal_view(details: GoalDetails) -> dict[str, Any]:
    """Read-only projection of a shared goal, without owner or record IDs."""
    goal = details.goal
    return {
        "name": goal.name,
        "target_amount": goal.target_amount,
        "current_amount": goal.current_amount,
        "target_date": goal.target_date,
        "category": goal.category,
        "percentage": details.percentage,
        "remaining": details.remaining,
        "is_completed": goal.is_completed,
        "milestones": [
            {
                "name": m.milestone.name,
                "target_percentage": m.milestone.target_percentage,
                "is_reached": m.is_reached,
            }
            for m in details.milestones
        ],
    }


class GoalService:
    """Service for managing savings goals."""

    def __init__(self, db: Database):
        """Initialize goal service.

        Args:
            db: Database instance
        """
        self.db = db

    def require_goal(self, user_id: str, goal_id: int) -> Goal:
        goal = self.db.get_goal(user_id, goal_id)
        if goal is None:
            raise NotFoundError(goal_not_found(goal_id))
        return goal

    @staticmethod
    def _validate_fields(
        name: Optional[str] = None,
        target_amount: Optional[Decimal] = None,
        current_amount: Optional[Decimal] = None,
        category: Optional[str] = None,
    ) -> None:
        if name is not None and (not name.strip() or len(name) > 100):
            raise ValidationError("Goal name must be between 1 and 100 characters")
        if target_amount is not None and target_amount <= 0:
            raise ValidationError("Target amount must be positive")
        if current_amount is not None and current_amount < 0:
            raise ValidationError("Current amount cannot be negative")
        if category is not None and category not in GOAL_CATEGORIES:
            raise ValidationError(
                f"Invalid goal category '{category}'. Must be one of: {', '.join(GOAL_CATEGORIES)}"
            )

    def create_goal(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal,
        current_amount: Decimal = ZERO,
        target_date: Optional[date] = None,
        category: Optional[str] = None,
        default_milestones: bool = False,
        today: Optional[date] = None,
    ) -> int:
        """Create a goal.

        A goal created with ``current_amount`` already at or above its target
        starts out completed.

        Args:
            user_id: Owner ID
            name: Goal name (1-100 characters)
            target_amount: Amount to save, positive
            current_amount: Amount already saved
            target_date: Optional deadline
            category: Optional goal category
            default_milestones: Also create the 25/50/75% milestones
            today: Reference date for the completion stamp

        Returns:
            Goal ID

        Raises:
            ValidationError: If any field is invalid
        """
        self._validate_fields(name, target_amount, current_amount, category)
        target_amount = round_cents(target_amount)
        current_amount = round_cents(current_amount)
        is_completed, completed_at = goal_completion_state(
            current_amount, target_amount, False, None, today or utc_today()
        )

        goal_id = self.db.create_goal(
            user_id,
            name=name.strip(),
            target_amount=target_amount,
            current_amount=current_amount,
            target_date=target_date,
            category=category,
            is_completed=is_completed,
            completed_at=completed_at,
        )
        if default_milestones:
            self.add_default_milestones(user_id, goal_id)
        return goal_id

    def get_goal_details(self, user_id: str, goal_id: int, today: Optional[date] = None) -> GoalDetails:
        """Get a goal with its derived progress and milestones."""
        goal = self.require_goal(user_id, goal_id)
        return calculate_goal_details(goal, today, self.db.list_milestones(user_id, goal_id))

    def list_goals(self, user_id: str, today: Optional[date] = None) -> list[GoalDetails]:
        """List goals with derived progress, newest first."""
        return [
            calculate_goal_details(goal, today, self.db.list_milestones(user_id, goal.id))
            for goal in self.db.list_goals(user_id)
        ]

    def update_goal(
        self,
        user_id: str,
        goal_id: int,
        name: Optional[str] = None,
        target_amount: Optional[Decimal] = None,
        target_date: Optional[date] = None,
        clear_target_date: bool = False,
        category: Optional[str] = None,
        today: Optional[date] = None,
    ) -> None:
        """Update goal settings.

        Changing the target re-evaluates completion against the current amount.
        The current amount itself only changes through contributions.
        """
        goal = self.require_goal(user_id, goal_id)
        self._validate_fields(name, target_amount, None, category)
        if target_date is not None and clear_target_date:
            raise ValidationError("Cannot set both target_date and clear_target_date")

        fields: dict[str, Any] = {}
        if name is not None:
            fields["name"] = name.strip()
        if category is not None:
            fields["category"] = category
        if target_date is not None:
            fields["target_date"] = target_date
        elif clear_target_date:
            fields["target_date"] = None
        if target_amount is not None:
            target_amount = round_cents(target_amount)
            fields["target_amount"] = target_amount
            fields["is_completed"], fields["completed_at"] = goal_completion_state(
                goal.current_amount, target_amount, goal.is_completed, goal.completed_at, today or utc_today()
            )

        if fields:
            self.db.update_goal(user_id, goal_id, **fields)

    def delete_goal(self, user_id: str, goal_id: int) -> None:
        self.require_goal(user_id, goal_id)
        self.db.delete_goal(user_id, goal_id)

    # Contributions
    def add_contribution(
        self,
        user_id: str,
        goal_id: int,
        amount: Decimal,
        contribution_date: Optional[date] = None,
        note: Optional[str] = None,
        today: Optional[date] = None,
    ) -> int:
        """Record a contribution and raise the goal's current amount by it.

        Raises:
            ValidationError: If amount is not positive or the note is too long
            NotFoundError: If the goal is not owned by the caller
        """
        amount = round_cents(amount)
        if amount <= 0:
            raise ValidationError("Contribution amount must be positive")
        if note is not None and len(note) > 500:
            raise ValidationError("Note must be at most 500 characters")

        today = today or utc_today()
        goal = self.require_goal(user_id, goal_id)
        new_amount = goal.current_amount + amount
        is_completed, completed_at = goal_completion_state(
            new_amount, goal.target_amount, goal.is_completed, goal.completed_at, today
        )
        contribution_id = self.db.add_goal_contribution(
            user_id,
            goal_id,
            amount=amount,
            contribution_date=contribution_date or today,
            note=note,
            current_amount=new_amount,
            is_completed=is_completed,
            completed_at=completed_at,
        )
        if is_completed and not goal.is_completed:
            logger.info("Goal %s reached its target", goal_id)
        return contribution_id

    def delete_contribution(self, user_id: str, contribution_id: int, today: Optional[date] = None) -> None:
        """Remove a contribution, lowering the goal's amount (never below zero)."""
        contribution = self.db.get_goal_contribution(user_id, contribution_id)
        if contribution is None:
            raise NotFoundError(f"Contribution {contribution_id} not found")
        goal = self.require_goal(user_id, contribution.goal_id)

        new_amount = max(goal.current_amount - contribution.amount, ZERO)
        is_completed, completed_at = goal_completion_state(
            new_amount, goal.target_amount, goal.is_completed, goal.completed_at, today or utc_today()
        )
        self.db.delete_goal_contribution(
            user_id,
            contribution_id,
            current_amount=new_amount,
            is_completed=is_completed,
            completed_at=completed_at,
        )

    def list_contributions(self, user_id: str, goal_id: Optional[int] = None) -> list[GoalContribution]:
        if goal_id is not None:
            self.require_goal(user_id, goal_id)
        return self.db.list_goal_contributions(user_id, goal_id)

    # Milestones
    def add_milestone(self, user_id: str, goal_id: int, name: str, target_percentage: int) -> int:
        """Add a named checkpoint at 1-100% of the goal's target."""
        self.require_goal(user_id, goal_id)
        if not name or not name.strip():
            raise ValidationError("Milestone name is required")
        if not 1 <= target_percentage <= 100:
            raise ValidationError("Milestone percentage must be between 1 and 100")
        return self.db.create_milestone(user_id, goal_id, name=name.strip(), target_percentage=target_percentage)

    def add_default_milestones(self, user_id: str, goal_id: int) -> list[int]:
        """Create the 25/50/75% milestones that the goal does not have yet."""
        existing = {m.target_percentage for m in self.db.list_milestones(user_id, goal_id)}
        return [
            self.add_milestone(user_id, goal_id, f"{pct}% saved", pct)
            for pct in DEFAULT_MILESTONES
            if pct not in existing
        ]

    def list_milestones(self, user_id: str, goal_id: int) -> list[MilestoneProgress]:
        goal = self.require_goal(user_id, goal_id)
        return [milestone_progress(m, goal) for m in self.db.list_milestones(user_id, goal_id)]

    def mark_milestone_celebrated(self, user_id: str, milestone_id: int) -> None:
        self.db.update_milestone(user_id, milestone_id, celebration_shown=True)

    def delete_milestone(self, user_id: str, milestone_id: int) -> None:
        self.db.delete_milestone(user_id, milestone_id)

    # Sharing
    def set_sharing(self, user_id: str, goal_id: int, enabled: bool) -> Optional[str]:
        """Enable or disable the public share link of a goal.

        Returns:
            The share token while sharing is enabled, else None
        """
        goal = self.require_goal(user_id, goal_id)
        if not enabled:
            self.db.update_goal(user_id, goal_id, is_shared=False, share_token=None)
            return None
        token = goal.share_token or secrets.token_urlsafe(16)
        self.db.update_goal(user_id, goal_id, is_shared=True, share_token=token)
        return token

    def get_shared_goal(self, share_token: str, today: Optional[date] = None) -> dict[str, Any]:
        """Public view of a shared goal.

        Raises:
            NotFoundError: If the token is unknown or sharing was disabled
        """
        goal = self.db.get_shared_goal(share_token)
        if goal is None:
            raise NotFoundError("Shared goal not found")
        milestones = self.db.list_milestones(goal.user_id, goal.id)
        return public_goal_view(calculate_goal_details(goal, today, milestones))
