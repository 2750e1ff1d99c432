"""Domain model entities for pocketpilot.

These are pure data classes representing business concepts, independent of
database schema. Derived values (balances, budget spending, goal progress) are
never stored on the persisted entities; they live on the ``*Details`` classes
built by the calculators at read time.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

ACCOUNT_TYPES = ("Checking", "Savings", "Credit", "Cash", "Investment", "Other")
CATEGORY_TYPES = ("expense", "income", "transfer")
RULE_TYPES = ("contains", "starts_with", "ends_with", "exact", "regex")
FREQUENCIES = ("weekly", "biweekly", "monthly", "yearly")
LINK_TYPES = ("refund", "related", "partial_refund", "chargeback")
GOAL_CATEGORIES = (
    "emergency",
    "vacation",
    "education",
    "retirement",
    "home",
    "vehicle",
    "wedding",
    "debt_payoff",
    "investment",
    "other",
)
BUDGET_STATUSES = ("safe", "warning", "over")


@dataclass(frozen=True)
class Account:
    """Financial account domain entity."""

    id: int
    user_id: str
    name: str
    account_type: str
    created_at: datetime


@dataclass(frozen=True)
class AccountBalance:
    """Account together with its derived balance."""

    account: Account
    balance: Decimal


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    user_id: str
    name: str
    category_type: str
    created_at: datetime
    is_tax_related: bool = False
    tax_tag: Optional[str] = None
    is_archived: bool = False


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    Amounts are signed: negative for expenses, positive for income.
    """

    id: int
    user_id: str
    account_id: int
    date: date
    amount: Decimal
    description: Optional[str]
    category_id: Optional[int]
    notes: Optional[str]
    created_at: datetime
    is_transfer: bool = False
    linked_transaction_id: Optional[int] = None
    is_split_parent: bool = False
    split_group_id: Optional[str] = None
    split_parent_id: Optional[int] = None
    recurring_transaction_id: Optional[int] = None


@dataclass(frozen=True)
class CategorizationRule:
    """Categorization rule domain entity."""

    id: int
    user_id: str
    name: str
    rule_order: int
    rule_type: str
    pattern: str
    case_sensitive: bool
    target_category_id: int
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class RuleMatch:
    """A transaction matched by a categorization rule."""

    transaction_id: int
    description: str
    rule_name: str
    category_name: str


@dataclass(frozen=True)
class ApplyRulesResult:
    """Outcome of applying categorization rules."""

    total_checked: int
    total_matched: int
    matches: list[RuleMatch]
    applied: bool
    message: str
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Budget:
    """Monthly budget for a single expense category."""

    id: int
    user_id: str
    category_id: int
    amount: Decimal
    rollover: bool
    alert_threshold: int
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class BudgetDetails:
    """Budget with values derived from the period's transactions."""

    budget: Budget
    category_name: str
    spent: Decimal
    remaining: Decimal
    percentage: float
    effective_budget: Decimal
    rollover_amount: Optional[Decimal]
    status: str


@dataclass(frozen=True)
class Goal:
    """Savings goal domain entity."""

    id: int
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    target_date: Optional[date]
    is_completed: bool
    completed_at: Optional[date]
    created_at: datetime
    category: Optional[str] = None
    is_shared: bool = False
    share_token: Optional[str] = None


@dataclass(frozen=True)
class GoalMilestone:
    """Named checkpoint at a percentage of a goal's target."""

    id: int
    user_id: str
    goal_id: int
    name: str
    target_percentage: int
    celebration_shown: bool
    created_at: datetime


@dataclass(frozen=True)
class MilestoneProgress:
    """Milestone with its derived amount and reached flag."""

    milestone: GoalMilestone
    target_amount: Decimal
    current_progress: float
    is_reached: bool


@dataclass(frozen=True)
class GoalDetails:
    """Goal with derived progress values."""

    goal: Goal
    percentage: float
    remaining: Decimal
    monthly_required: Optional[Decimal]
    is_overdue: bool
    milestones: list[MilestoneProgress] = field(default_factory=list)


@dataclass(frozen=True)
class GoalContribution:
    """Amount added toward a goal."""

    id: int
    user_id: str
    goal_id: int
    amount: Decimal
    date: date
    note: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class RecurringTransaction:
    """Template that generates a transaction on a schedule."""

    id: int
    user_id: str
    account_id: int
    category_id: Optional[int]
    description: str
    amount: Decimal
    frequency: str
    next_occurrence_date: date
    last_created_date: Optional[date]
    is_active: bool
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class TransactionTemplate:
    """Saved transaction that can be applied on any date.

    ``amount`` is positive; ``kind`` (expense or income) gives the sign of
    the transactions it creates.
    """

    id: int
    user_id: str
    name: str
    account_id: int
    category_id: Optional[int]
    amount: Decimal
    kind: str
    description: Optional[str]
    is_favorite: bool
    usage_count: int
    last_used_at: Optional[datetime]
    created_at: datetime
    tag_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class GeneratedTransaction:
    """Transaction created from a recurring template."""

    id: int
    recurring_id: int
    description: str
    amount: Decimal
    date: date
    next_occurrence: date


@dataclass(frozen=True)
class GenerationError:
    """Failure to process a single recurring template."""

    recurring_id: int
    description: str
    error: str


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a recurring-transaction generation run."""

    created: list[GeneratedTransaction]
    errors: list[GenerationError]
    advanced: int = 0

    @property
    def message(self) -> str:
        return f"Created {len(self.created)} transaction(s)"


@dataclass(frozen=True)
class SplitValidation:
    """Result of reconciling split amounts against a parent."""

    valid: bool
    message: Optional[str] = None


@dataclass(frozen=True)
class SplitItem:
    """Requested portion of a split transaction (positive magnitude)."""

    amount: Decimal
    category_id: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class SplitDetails:
    """A split parent with its children."""

    parent: Transaction
    split_group_id: str
    children: list[Transaction]


@dataclass(frozen=True)
class TransactionLink:
    """Relationship between two transactions (refund, chargeback, ...)."""

    id: int
    user_id: str
    source_transaction_id: int
    target_transaction_id: int
    link_type: str
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Tag:
    """Label attachable to many transactions."""

    id: int
    user_id: str
    name: str
    color: str
    created_at: datetime


@dataclass(frozen=True)
class CSVFormat:
    """CSV format domain entity."""

    id: int
    user_id: str
    name: str
    account_id: int
    created_at: datetime
    is_debit_credit_format: bool = False
    date_format: Optional[str] = None


@dataclass(frozen=True)
class CSVColumnMapping:
    """CSV column mapping domain entity."""

    id: int
    format_id: int
    csv_column_name: str
    db_field_name: str
    is_required: bool
