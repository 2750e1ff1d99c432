"""Category domain service."""

from typing import Optional
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import CATEGORY_TYPES, Category
from pocketpilot.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    category_delete_blocked,
    category_not_found,
)

# Default category set, seeded on request
DEFAULT_CATEGORIES = [
    ("Salary", "income"),
    ("Investment Income", "income"),
    ("Other Income", "income"),
    ("Groceries", "expense"),
    ("Restaurants", "expense"),
    ("Transportation", "expense"),
    ("Housing", "expense"),
    ("Utilities", "expense"),
    ("Shopping", "expense"),
    ("Entertainment", "expense"),
    ("Health & Fitness", "expense"),
    ("Travel", "expense"),
    ("Other", "expense"),
    ("Transfer", "transfer"),
]


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        user_id: str,
        name: str,
        category_type: str = "expense",
        is_tax_related: bool = False,
        tax_tag: Optional[str] = None,
    ) -> int:
        """Create a category.

        Args:
            user_id: Owner ID
            name: Category name, unique among the owner's active categories
            category_type: expense, income or transfer
            is_tax_related: Whether the category matters for tax reporting
            tax_tag: Optional tax label

        Returns:
            Category ID

        Raises:
            ValidationError: If name is empty or type is unknown
            ConflictError: If an active category with the same name exists
        """
        name = (name or "").strip()
        if not name or len(name) > 100:
            raise ValidationError("Category name must be between 1 and 100 characters")
        if category_type not in CATEGORY_TYPES:
            raise ValidationError(
                f"Invalid category type '{category_type}'. Must be one of: {', '.join(CATEGORY_TYPES)}"
            )
        if self.db.get_category_by_name(user_id, name) is not None:
            raise ConflictError(f"Category '{name}' already exists")

        return self.db.create_category(
            user_id,
            name=name,
            category_type=category_type,
            is_tax_related=is_tax_related,
            tax_tag=tax_tag,
        )

    def get_category(self, user_id: str, category_id: int) -> Optional[Category]:
        return self.db.get_category(user_id, category_id)

    def require_category(self, user_id: str, category_id: int) -> Category:
        """Get an owned category or raise NotFoundError."""
        category = self.db.get_category(user_id, category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def get_category_by_name(self, user_id: str, name: str) -> Optional[Category]:
        """Find an active category by name, ignoring case."""
        return self.db.get_category_by_name(user_id, name)

    def list_categories(
        self, user_id: str, include_archived: bool = False, category_type: Optional[str] = None
    ) -> list[Category]:
        return self.db.list_categories(
            user_id, include_archived=include_archived, category_type=category_type
        )

    def update_category(self, user_id: str, category_id: int, **fields) -> None:
        """Update name, type or tax fields of a category.

        Raises:
            NotFoundError: If category not found
            ValidationError: If a new type is unknown
            ConflictError: If the new name is already used
        """
        category = self.require_category(user_id, category_id)
        if "category_type" in fields and fields["category_type"] not in CATEGORY_TYPES:
            raise ValidationError(f"Invalid category type '{fields['category_type']}'")
        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationError("Category name is required")
            existing = self.db.get_category_by_name(user_id, fields["name"])
            if existing is not None and existing.id != category.id:
                raise ConflictError(f"Category '{fields['name']}' already exists")
        self.db.update_category(user_id, category_id, **fields)

    def archive_category(self, user_id: str, category_id: int, archived: bool = True) -> None:
        """Hide (or restore) a category without touching historical transactions."""
        self.require_category(user_id, category_id)
        self.db.update_category(user_id, category_id, is_archived=archived)

    def delete_category(self, user_id: str, category_id: int) -> None:
        """Delete an unused category.

        Raises:
            NotFoundError: If category not found
            DependencyError: If transactions, budgets, rules, recurring
                or transaction templates still reference it
        """
        self.require_category(user_id, category_id)
        usage = self.db.get_category_usage_count(user_id, category_id)
        if usage > 0:
            raise DependencyError(category_delete_blocked(category_id, usage))
        self.db.delete_category(user_id, category_id)

    def seed_defaults(self, user_id: str) -> list[int]:
        """Create the default categories the owner does not have yet.

        Returns:
            IDs of the created categories
        """
        created = []
        for name, category_type in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(user_id, name, include_archived=True) is None:
                created.append(self.db.create_category(user_id, name=name, category_type=category_type))
        return created
