"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested entity does not exist or is not owned by the caller."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class UnauthorizedError(DomainError):
    """No authenticated owner is available for the request."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def rule_not_found(rule_id: int) -> str:
    return f"Categorization rule {rule_id} not found"


def budget_not_found(budget_id: int) -> str:
    return f"Budget {budget_id} not found"


def goal_not_found(goal_id: int) -> str:
    return f"Goal {goal_id} not found"


def recurring_not_found(recurring_id: int) -> str:
    return f"Recurring transaction {recurring_id} not found"


def category_delete_blocked(category_id: int, usage_count: int) -> str:
    """Return message when a category is still referenced."""
    return (
        f"Cannot delete category {category_id}: it is used by {usage_count} "
        f"record{'s' if usage_count != 1 else ''}. Archive it instead."
    )


def template_not_found(template_id: int) -> str:
    return f"Transaction template {template_id} not found"
