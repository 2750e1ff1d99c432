"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic so the domain entities stay
independent of the storage schema.
"""

from decimal import Decimal

from pocketpilot.domain import entities as domain
from pocketpilot.database import models as orm


def _money(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal("0")


def account_to_domain(orm_account: orm.Account) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: orm.Category) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        category_type=orm_category.category_type,
        created_at=orm_category.created_at,
        is_tax_related=orm_category.is_tax_related,
        tax_tag=orm_category.tax_tag,
        is_archived=orm_category.is_archived,
    )


def transaction_to_domain(orm_transaction: orm.Transaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=_money(orm_transaction.amount),
        description=orm_transaction.description,
        category_id=orm_transaction.category_id,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
        is_transfer=orm_transaction.is_transfer,
        linked_transaction_id=orm_transaction.linked_transaction_id,
        is_split_parent=orm_transaction.is_split_parent,
        split_group_id=orm_transaction.split_group_id,
        split_parent_id=orm_transaction.split_parent_id,
        recurring_transaction_id=orm_transaction.recurring_transaction_id,
    )


def rule_to_domain(orm_rule: orm.CategorizationRule) -> domain.CategorizationRule:
    return domain.CategorizationRule(
        id=orm_rule.id,
        user_id=orm_rule.user_id,
        name=orm_rule.name,
        rule_order=orm_rule.rule_order,
        rule_type=orm_rule.rule_type,
        pattern=orm_rule.pattern,
        case_sensitive=orm_rule.case_sensitive,
        target_category_id=orm_rule.target_category_id,
        is_active=orm_rule.is_active,
        created_at=orm_rule.created_at,
    )


def budget_to_domain(orm_budget: orm.Budget) -> domain.Budget:
    return domain.Budget(
        id=orm_budget.id,
        user_id=orm_budget.user_id,
        category_id=orm_budget.category_id,
        amount=_money(orm_budget.amount),
        rollover=orm_budget.rollover,
        alert_threshold=orm_budget.alert_threshold,
        notes=orm_budget.notes,
        created_at=orm_budget.created_at,
    )


def goal_to_domain(orm_goal: orm.Goal) -> domain.Goal:
    return domain.Goal(
        id=orm_goal.id,
        user_id=orm_goal.user_id,
        name=orm_goal.name,
        target_amount=_money(orm_goal.target_amount),
        current_amount=_money(orm_goal.current_amount),
        target_date=orm_goal.target_date,
        is_completed=orm_goal.is_completed,
        completed_at=orm_goal.completed_at,
        created_at=orm_goal.created_at,
        category=orm_goal.category,
        is_shared=orm_goal.is_shared,
        share_token=orm_goal.share_token,
    )


def contribution_to_domain(orm_contribution: orm.GoalContribution) -> domain.GoalContribution:
    return domain.GoalContribution(
        id=orm_contribution.id,
        user_id=orm_contribution.user_id,
        goal_id=orm_contribution.goal_id,
        amount=_money(orm_contribution.amount),
        date=orm_contribution.date,
        note=orm_contribution.note,
        created_at=orm_contribution.created_at,
    )


def milestone_to_domain(orm_milestone: orm.GoalMilestone) -> domain.GoalMilestone:
    return domain.GoalMilestone(
        id=orm_milestone.id,
        user_id=orm_milestone.user_id,
        goal_id=orm_milestone.goal_id,
        name=orm_milestone.name,
        target_percentage=orm_milestone.target_percentage,
        celebration_shown=orm_milestone.celebration_shown,
        created_at=orm_milestone.created_at,
    )


def recurring_to_domain(orm_recurring: orm.RecurringTransaction) -> domain.RecurringTransaction:
    return domain.RecurringTransaction(
        id=orm_recurring.id,
        user_id=orm_recurring.user_id,
        account_id=orm_recurring.account_id,
        category_id=orm_recurring.category_id,
        description=orm_recurring.description,
        amount=_money(orm_recurring.amount),
        frequency=orm_recurring.frequency,
        next_occurrence_date=orm_recurring.next_occurrence_date,
        last_created_date=orm_recurring.last_created_date,
        is_active=orm_recurring.is_active,
        notes=orm_recurring.notes,
        created_at=orm_recurring.created_at,
    )


def template_to_domain(orm_template: orm.TransactionTemplate) -> domain.TransactionTemplate:
    return domain.TransactionTemplate(
        id=orm_template.id,
        user_id=orm_template.user_id,
        name=orm_template.name,
        account_id=orm_template.account_id,
        category_id=orm_template.category_id,
        amount=_money(orm_template.amount),
        kind=orm_template.kind,
        description=orm_template.description,
        is_favorite=orm_template.is_favorite,
        usage_count=orm_template.usage_count,
        last_used_at=orm_template.last_used_at,
        created_at=orm_template.created_at,
        tag_ids=tuple(sorted(link.tag_id for link in orm_template.tag_links)),
    )


def link_to_domain(orm_link: orm.TransactionLink) -> domain.TransactionLink:
    return domain.TransactionLink(
        id=orm_link.id,
        user_id=orm_link.user_id,
        source_transaction_id=orm_link.source_transaction_id,
        target_transaction_id=orm_link.target_transaction_id,
        link_type=orm_link.link_type,
        notes=orm_link.notes,
        created_at=orm_link.created_at,
    )


def tag_to_domain(orm_tag: orm.Tag) -> domain.Tag:
    return domain.Tag(
        id=orm_tag.id,
        user_id=orm_tag.user_id,
        name=orm_tag.name,
        color=orm_tag.color,
        created_at=orm_tag.created_at,
    )


def csv_format_to_domain(orm_format: orm.CSVFormat) -> domain.CSVFormat:
    """Convert SQLAlchemy CSVFormat model to domain CSVFormat entity."""
    return domain.CSVFormat(
        id=orm_format.id,
        user_id=orm_format.user_id,
        name=orm_format.name,
        account_id=orm_format.account_id,
        created_at=orm_format.created_at,
        is_debit_credit_format=orm_format.is_debit_credit_format,
        date_format=orm_format.date_format,
    )


def csv_column_mapping_to_domain(orm_mapping: orm.CSVColumnMapping) -> domain.CSVColumnMapping:
    """Convert SQLAlchemy CSVColumnMapping model to domain CSVColumnMapping entity."""
    return domain.CSVColumnMapping(
        id=orm_mapping.id,
        format_id=orm_mapping.format_id,
        csv_column_name=orm_mapping.csv_column_name,
        db_field_name=orm_mapping.db_field_name,
        is_required=orm_mapping.is_required,
    )
