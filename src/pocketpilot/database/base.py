"""Abstract database interface.

Every operation takes the owner's ``user_id`` and only ever sees that
owner's rows. Lookups return ``None`` for rows that are missing or owned by
someone else; mutations raise ``NotFoundError`` in the same situation.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly so the database layer never pulls in services
from pocketpilot.domain.entities import (
    Account,
    Budget,
    CategorizationRule,
    Category,
    CSVColumnMapping,
    CSVFormat,
    Goal,
    GoalContribution,
    GoalMilestone,
    RecurringTransaction,
    Tag,
    Transaction,
    TransactionLink,
    TransactionTemplate,
)


class Database(ABC):
    """Abstract database interface for pocketpilot."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, user_id: str, name: str, account_type: str) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, user_id: str, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, user_id: str, name: str) -> Optional[Account]:
        """Get account by exact name."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: str) -> list[Account]:
        """List accounts ordered by name."""
        pass

    @abstractmethod
    def update_account(
        self, user_id: str, account_id: int, name: Optional[str] = None, account_type: Optional[str] = None
    ) -> None:
        """Update account name and/or type."""
        pass

    @abstractmethod
    def delete_account(self, user_id: str, account_id: int) -> None:
        """Delete an account together with its transactions."""
        pass

    @abstractmethod
    def get_account_balances(self, user_id: str) -> dict[int, Decimal]:
        """Sum transaction amounts per account, ignoring split parents."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        user_id: str,
        name: str,
        category_type: str,
        is_tax_related: bool = False,
        tax_tag: Optional[str] = None,
    ) -> int:
        """Create a new category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, user_id: str, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(
        self, user_id: str, name: str, include_archived: bool = False
    ) -> Optional[Category]:
        """Get category by name, ignoring case."""
        pass

    @abstractmethod
    def list_categories(
        self, user_id: str, include_archived: bool = False, category_type: Optional[str] = None
    ) -> list[Category]:
        """List categories ordered by name."""
        pass

    @abstractmethod
    def update_category(self, user_id: str, category_id: int, **fields: Any) -> None:
        """Update category fields (name, category_type, is_tax_related, tax_tag, is_archived)."""
        pass

    @abstractmethod
    def delete_category(self, user_id: str, category_id: int) -> None:
        """Delete a category."""
        pass

    @abstractmethod
    def get_category_usage_count(self, user_id: str, category_id: int) -> int:
        """Count transactions, budgets, rules and templates referencing a category."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
        is_transfer: bool = False,
        recurring_transaction_id: Optional[int] = None,
    ) -> int:
        """Create a new transaction. Returns transaction ID.

        Raises ConflictError if a transaction already exists for the same
        recurring template and date.
        """
        pass

    @abstractmethod
    def get_transaction(self, user_id: str, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        uncategorized_only: bool = False,
        with_description: bool = False,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions, newest first."""
        pass

    @abstractmethod
    def update_transaction(self, user_id: str, transaction_id: int, **fields: Any) -> None:
        """Update transaction fields."""
        pass

    @abstractmethod
    def delete_transaction(self, user_id: str, transaction_id: int) -> None:
        """Delete a transaction, its split children and its links."""
        pass

    @abstractmethod
    def bulk_update_category(
        self, user_id: str, transaction_ids: list[int], category_id: Optional[int]
    ) -> int:
        """Set the category of the owner's listed transactions in one commit. Returns rows changed."""
        pass

    @abstractmethod
    def bulk_delete_transactions(self, user_id: str, transaction_ids: list[int]) -> list[int]:
        """Delete the owner's listed transactions and their transfer legs. Returns deleted IDs."""
        pass

    @abstractmethod
    def transaction_exists(
        self, user_id: str, account_id: int, date: date, amount: Decimal, description: Optional[str]
    ) -> bool:
        """Check for a transaction with the same date, amount and description (ignoring case)."""
        pass

    @abstractmethod
    def find_recurring_occurrence(
        self, user_id: str, recurring_id: int, occurrence_date: date
    ) -> Optional[Transaction]:
        """Get the transaction generated by a template for a date, if any."""
        pass

    @abstractmethod
    def create_transfer(
        self,
        user_id: str,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        date: date,
        description: str,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> tuple[int, int]:
        """Create a linked withdrawal/deposit pair atomically. Returns both IDs."""
        pass

    @abstractmethod
    def create_split(
        self, user_id: str, parent_id: int, split_group_id: str, children: list[dict[str, Any]]
    ) -> list[int]:
        """Flag a parent as split and insert its children in one transaction."""
        pass

    @abstractmethod
    def list_split_children(self, user_id: str, split_group_id: str) -> list[Transaction]:
        """List the children of a split group."""
        pass

    @abstractmethod
    def remove_split(self, user_id: str, parent_id: int) -> None:
        """Delete a split group's children and clear the parent's split flags."""
        pass

    @abstractmethod
    def get_spending_by_category(
        self, user_id: str, start_date: date, end_date: date
    ) -> dict[int, Decimal]:
        """Total expenses per category in a date range, as positive magnitudes."""
        pass

    # Categorization rule operations
    @abstractmethod
    def create_rule(
        self,
        user_id: str,
        name: str,
        rule_type: str,
        pattern: str,
        target_category_id: int,
        case_sensitive: bool = False,
        is_active: bool = True,
    ) -> int:
        """Append a rule after the owner's last rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, user_id: str, rule_id: int) -> Optional[CategorizationRule]:
        """Get rule by ID."""
        pass

    @abstractmethod
    def list_rules(self, user_id: str, active_only: bool = False) -> list[CategorizationRule]:
        """List rules in evaluation order."""
        pass

    @abstractmethod
    def update_rule(self, user_id: str, rule_id: int, **fields: Any) -> None:
        """Update rule fields other than its order."""
        pass

    @abstractmethod
    def delete_rule(self, user_id: str, rule_id: int) -> None:
        """Delete a rule and renumber the remaining rules 0..N-1."""
        pass

    @abstractmethod
    def set_rule_order(self, user_id: str, rule_ids: list[int]) -> None:
        """Assign rule_order 0..N-1 following ``rule_ids`` in one transaction."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self,
        user_id: str,
        category_id: int,
        amount: Decimal,
        rollover: bool = False,
        alert_threshold: int = 90,
        notes: Optional[str] = None,
    ) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, user_id: str, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def get_budget_by_category(self, user_id: str, category_id: int) -> Optional[Budget]:
        """Get the budget for a category."""
        pass

    @abstractmethod
    def list_budgets(self, user_id: str) -> list[Budget]:
        """List budgets."""
        pass

    @abstractmethod
    def update_budget(self, user_id: str, budget_id: int, **fields: Any) -> None:
        """Update budget fields."""
        pass

    @abstractmethod
    def delete_budget(self, user_id: str, budget_id: int) -> None:
        """Delete a budget."""
        pass

    # Goal operations
    @abstractmethod
    def create_goal(
        self,
        user_id: str,
        name: str,
        target_amount: Decimal,
        current_amount: Decimal = Decimal("0"),
        target_date: Optional[date] = None,
        category: Optional[str] = None,
        is_completed: bool = False,
        completed_at: Optional[date] = None,
    ) -> int:
        """Create a goal. Returns goal ID."""
        pass

    @abstractmethod
    def get_goal(self, user_id: str, goal_id: int) -> Optional[Goal]:
        """Get goal by ID."""
        pass

    @abstractmethod
    def get_shared_goal(self, share_token: str) -> Optional[Goal]:
        """Get a goal by share token, only while sharing is enabled."""
        pass

    @abstractmethod
    def list_goals(self, user_id: str) -> list[Goal]:
        """List goals, newest first."""
        pass

    @abstractmethod
    def update_goal(self, user_id: str, goal_id: int, **fields: Any) -> None:
        """Update goal fields."""
        pass

    @abstractmethod
    def delete_goal(self, user_id: str, goal_id: int) -> None:
        """Delete a goal with its contributions and milestones."""
        pass

    @abstractmethod
    def add_goal_contribution(
        self,
        user_id: str,
        goal_id: int,
        amount: Decimal,
        contribution_date: date,
        note: Optional[str],
        current_amount: Decimal,
        is_completed: bool,
        completed_at: Optional[date],
    ) -> int:
        """Insert a contribution and store the goal's new progress atomically."""
        pass

    @abstractmethod
    def delete_goal_contribution(
        self,
        user_id: str,
        contribution_id: int,
        current_amount: Decimal,
        is_completed: bool,
        completed_at: Optional[date],
    ) -> None:
        """Remove a contribution and store the goal's new progress atomically."""
        pass

    @abstractmethod
    def get_goal_contribution(self, user_id: str, contribution_id: int) -> Optional[GoalContribution]:
        """Get contribution by ID."""
        pass

    @abstractmethod
    def list_goal_contributions(self, user_id: str, goal_id: Optional[int] = None) -> list[GoalContribution]:
        """List contributions, newest first."""
        pass

    @abstractmethod
    def create_milestone(self, user_id: str, goal_id: int, name: str, target_percentage: int) -> int:
        """Create a milestone. Returns milestone ID."""
        pass

    @abstractmethod
    def list_milestones(self, user_id: str, goal_id: int) -> list[GoalMilestone]:
        """List a goal's milestones by target percentage."""
        pass

    @abstractmethod
    def update_milestone(self, user_id: str, milestone_id: int, **fields: Any) -> None:
        """Update milestone fields."""
        pass

    @abstractmethod
    def delete_milestone(self, user_id: str, milestone_id: int) -> None:
        """Delete a milestone."""
        pass

    # Recurring transaction operations
    @abstractmethod
    def create_recurring(
        self,
        user_id: str,
        account_id: int,
        description: str,
        amount: Decimal,
        frequency: str,
        next_occurrence_date: date,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create a recurring template. Returns template ID."""
        pass

    @abstractmethod
    def get_recurring(self, user_id: str, recurring_id: int) -> Optional[RecurringTransaction]:
        """Get recurring template by ID."""
        pass

    @abstractmethod
    def list_recurring(self, user_id: str, active_only: bool = False) -> list[RecurringTransaction]:
        """List templates by next occurrence."""
        pass

    @abstractmethod
    def list_due_recurring(self, user_id: str, today: date) -> list[RecurringTransaction]:
        """List active templates whose next occurrence is on or before ``today``."""
        pass

    @abstractmethod
    def update_recurring(self, user_id: str, recurring_id: int, **fields: Any) -> None:
        """Update template fields."""
        pass

    @abstractmethod
    def delete_recurring(self, user_id: str, recurring_id: int) -> None:
        """Delete a template, keeping the transactions it generated."""
        pass

    # Transaction template operations
    @abstractmethod
    def create_template(
        self,
        user_id: str,
        name: str,
        account_id: int,
        amount: Decimal,
        kind: str,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        is_favorite: bool = False,
    ) -> int:
        """Create a transaction template. Returns template ID."""
        pass

    @abstractmethod
    def get_template(self, user_id: str, template_id: int) -> Optional[TransactionTemplate]:
        pass

    @abstractmethod
    def get_template_by_name(self, user_id: str, name: str) -> Optional[TransactionTemplate]:
        """Get template by name, ignoring case."""
        pass

    @abstractmethod
    def list_templates(self, user_id: str) -> list[TransactionTemplate]:
        """List templates, favorites first, then most used."""
        pass

    @abstractmethod
    def update_template(self, user_id: str, template_id: int, **fields: Any) -> None:
        pass

    @abstractmethod
    def set_template_tags(self, user_id: str, template_id: int, tag_ids: list[int]) -> None:
        """Replace the tags of a template."""
        pass

    @abstractmethod
    def delete_template(self, user_id: str, template_id: int) -> None:
        pass

    @abstractmethod
    def apply_template(
        self,
        user_id: str,
        template_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str],
        used_at: datetime,
    ) -> int:
        """Create a transaction from a template, copy its tags and count the use.

        Returns the new transaction ID.
        """
        pass

    # Transaction link operations
    @abstractmethod
    def create_link(
        self,
        user_id: str,
        source_transaction_id: int,
        target_transaction_id: int,
        link_type: str,
        notes: Optional[str] = None,
    ) -> int:
        """Create a link. Raises ConflictError on duplicates."""
        pass

    @abstractmethod
    def get_link(self, user_id: str, link_id: int) -> Optional[TransactionLink]:
        """Get link by ID."""
        pass

    @abstractmethod
    def list_links(self, user_id: str, transaction_id: Optional[int] = None) -> list[TransactionLink]:
        """List links, optionally those touching one transaction."""
        pass

    @abstractmethod
    def link_exists(
        self, user_id: str, source_transaction_id: int, target_transaction_id: int, link_type: str
    ) -> bool:
        """Check whether an identical link exists."""
        pass

    @abstractmethod
    def update_link(self, user_id: str, link_id: int, **fields: Any) -> None:
        """Update link type or notes."""
        pass

    @abstractmethod
    def delete_link(self, user_id: str, link_id: int) -> None:
        """Delete a link."""
        pass

    # Tag operations
    @abstractmethod
    def create_tag(self, user_id: str, name: str, color: str) -> int:
        """Create a tag. Returns tag ID."""
        pass

    @abstractmethod
    def get_tag(self, user_id: str, tag_id: int) -> Optional[Tag]:
        """Get tag by ID."""
        pass

    @abstractmethod
    def get_tag_by_name(self, user_id: str, name: str) -> Optional[Tag]:
        """Get tag by name, ignoring case."""
        pass

    @abstractmethod
    def list_tags(self, user_id: str) -> list[Tag]:
        """List tags ordered by name."""
        pass

    @abstractmethod
    def get_tag_usage_counts(self, user_id: str) -> dict[int, int]:
        """Number of tagged transactions per tag ID."""
        pass

    @abstractmethod
    def update_tag(self, user_id: str, tag_id: int, **fields: Any) -> None:
        """Update tag name or color."""
        pass

    @abstractmethod
    def delete_tag(self, user_id: str, tag_id: int) -> None:
        """Delete a tag and detach it from transactions."""
        pass

    @abstractmethod
    def add_tag_to_transaction(self, user_id: str, transaction_id: int, tag_id: int) -> bool:
        """Attach a tag. Returns False if it was already attached."""
        pass

    @abstractmethod
    def remove_tag_from_transaction(self, user_id: str, transaction_id: int, tag_id: int) -> None:
        """Detach a tag from a transaction."""
        pass

    @abstractmethod
    def list_transaction_tags(self, user_id: str, transaction_id: int) -> list[Tag]:
        """List tags attached to a transaction."""
        pass

    # CSV Format operations
    @abstractmethod
    def create_csv_format(
        self,
        user_id: str,
        name: str,
        account_id: int,
        is_debit_credit_format: bool = False,
        date_format: Optional[str] = None,
    ) -> int:
        """Create a new CSV format. Returns format ID."""
        pass

    @abstractmethod
    def get_csv_format(self, user_id: str, format_id: int) -> Optional[CSVFormat]:
        """Get CSV format by ID."""
        pass

    @abstractmethod
    def get_csv_format_by_name(self, user_id: str, name: str) -> Optional[CSVFormat]:
        """Get CSV format by name."""
        pass

    @abstractmethod
    def list_csv_formats(self, user_id: str, account_id: Optional[int] = None) -> list[CSVFormat]:
        """List CSV formats, optionally filtered by account."""
        pass

    @abstractmethod
    def delete_csv_format(self, user_id: str, format_id: int) -> None:
        """Delete a CSV format and its mappings."""
        pass

    # CSV Column Mapping operations
    @abstractmethod
    def add_column_mapping(
        self, format_id: int, csv_column_name: str, db_field_name: str, is_required: bool = False
    ) -> int:
        """Add a column mapping to a CSV format. Returns mapping ID."""
        pass

    @abstractmethod
    def get_column_mappings(self, format_id: int) -> list[CSVColumnMapping]:
        """Get all column mappings for a format."""
        pass
