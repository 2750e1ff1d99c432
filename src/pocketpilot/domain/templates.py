"""Transaction templates: saved transactions applied on demand."""

import logging
from typing import Any, Optional
from datetime import date, datetime, UTC
from decimal import Decimal

from pocketpilot.database.base import Database
from pocketpilot.domain.entities import TransactionTemplate
from pocketpilot.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    template_not_found,
)
from pocketpilot.utils.amounts import round_cents, to_signed_amount
from pocketpilot.utils.dates import utc_today

logger = logging.getLogger(__name__)

TEMPLATE_KINDS = ("expense", "income")


class TransactionTemplateService:
    """Service for transaction templates."""

    def __init__(self, db: Database):
        """Initialize transaction template service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, user_id: str, template_id: int) -> TransactionTemplate:
        template = self.db.get_template(user_id, template_id)
        if template is None:
            raise NotFoundError(template_not_found(template_id))
        return template

    def _check_references(
        self, user_id: str, account_id: Optional[int], category_id: Optional[int], tag_ids: Optional[list[int]]
    ) -> None:
        if account_id is not None and self.db.get_account(user_id, account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if category_id is not None and self.db.get_category(user_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        for tag_id in tag_ids or []:
            if self.db.get_tag(user_id, tag_id) is None:
                raise NotFoundError(f"Tag {tag_id} not found")

    @staticmethod
    def _check_fields(
        name: Optional[str], amount: Optional[Decimal], kind: Optional[str], description: Optional[str]
    ) -> None:
        if name is not None and not 1 <= len(name.strip()) <= 100:
            raise ValidationError("Template name must be between 1 and 100 characters")
        if amount is not None and Decimal(amount) <= 0:
            raise ValidationError("Amount must be greater than 0")
        if kind is not None and kind not in TEMPLATE_KINDS:
            raise ValidationError(f"Invalid type '{kind}'. Must be expense or income")
        if description is not None and len(description) > 255:
            raise ValidationError("Description is too long")

    def _check_name_free(self, user_id: str, name: str, template_id: Optional[int] = None) -> None:
        existing = self.db.get_template_by_name(user_id, name)
        if existing is not None and existing.id != template_id:
            raise ConflictError("A template with this name already exists")

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
        tag_ids: Optional[list[int]] = None,
    ) -> int:
        """Create a template.

        Args:
            user_id: Owner ID
            name: Template name, unique per owner ignoring case
            account_id: Account the transactions go to
            amount: Positive magnitude
            kind: ``expense`` or ``income``
            category_id: Optional category
            description: Optional description (max 255 characters)
            is_favorite: Listed before other templates
            tag_ids: Tags copied onto each created transaction

        Returns:
            Template ID

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If the account, category or a tag is not owned
            ConflictError: If the name is taken
        """
        self._check_fields(name, amount, kind, description)
        self._check_references(user_id, account_id, category_id, tag_ids)
        name = name.strip()
        self._check_name_free(user_id, name)

        template_id = self.db.create_template(
            user_id,
            name=name,
            account_id=account_id,
            amount=round_cents(amount),
            kind=kind,
            category_id=category_id,
            description=description,
            is_favorite=is_favorite,
        )
        if tag_ids:
            self.db.set_template_tags(user_id, template_id, tag_ids)
        return template_id

    def get_template(self, user_id: str, template_id: int) -> Optional[TransactionTemplate]:
        return self.db.get_template(user_id, template_id)

    def require_template(self, user_id: str, template_id: int) -> TransactionTemplate:
        return self._require(user_id, template_id)

    def list_templates(self, user_id: str) -> list[TransactionTemplate]:
        """List templates, favorites first, then by how often they were used."""
        return self.db.list_templates(user_id)

    def update_template(
        self, user_id: str, template_id: int, tag_ids: Optional[list[int]] = None, **fields: Any
    ) -> None:
        """Update template fields. ``tag_ids``, when given, replaces the tags."""
        self._require(user_id, template_id)
        self._check_fields(fields.get("name"), fields.get("amount"), fields.get("kind"), fields.get("description"))
        self._check_references(user_id, fields.get("account_id"), fields.get("category_id"), tag_ids)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            self._check_name_free(user_id, fields["name"], template_id)
        if "amount" in fields:
            fields["amount"] = round_cents(fields["amount"])

        if fields:
            self.db.update_template(user_id, template_id, **fields)
        if tag_ids is not None:
            self.db.set_template_tags(user_id, template_id, tag_ids)

    def delete_template(self, user_id: str, template_id: int) -> None:
        self._require(user_id, template_id)
        self.db.delete_template(user_id, template_id)

    def apply_template(
        self,
        user_id: str,
        template_id: int,
        on: date,
        amount_override: Optional[Decimal] = None,
        description_override: Optional[str] = None,
        today: Optional[date] = None,
    ) -> int:
        """Create a transaction from a template.

        The transaction takes the template's account, category and tags. The
        amount is signed by the template's type. Applying counts as a use of
        the template.

        Args:
            user_id: Owner ID
            template_id: Template to apply
            on: Transaction date, not in the future
            amount_override: Positive amount replacing the template's
            description_override: Description replacing the template's
            today: Reference date (defaults to UTC today)

        Returns:
            The new transaction ID

        Raises:
            NotFoundError: If the template is missing
            ValidationError: If the date is in the future or the amount is not positive
        """
        template = self._require(user_id, template_id)
        if on > (today or utc_today()):
            raise ValidationError("Future dates are not allowed")
        if amount_override is not None and Decimal(amount_override) <= 0:
            raise ValidationError("Amount must be greater than 0")
        if description_override is not None and len(description_override) > 255:
            raise ValidationError("Description is too long")

        amount = amount_override if amount_override is not None else template.amount
        description = description_override if description_override is not None else template.description
        transaction_id = self.db.apply_template(
            user_id,
            template_id,
            date=on,
            amount=round_cents(to_signed_amount(amount, template.kind)),
            description=description,
            used_at=datetime.now(UTC),
        )
        logger.info("Applied template %s as transaction %s", template_id, transaction_id)
        return transaction_id
