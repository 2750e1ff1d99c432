"""Recurring transaction templates and their generator."""

import logging
from typing import Any, Optional
from datetime import date
from decimal import Decimal

from pocketpilot.database.base import Database
from pocketpilot.domain.entities import (
    FREQUENCIES,
    GeneratedTransaction,
    GenerationError,
    GenerationResult,
    RecurringTransaction,
)
from pocketpilot.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    recurring_not_found,
)
from pocketpilot.domain.recurrence import days_until, next_occurrence
from pocketpilot.utils.amounts import round_cents, to_signed_amount
from pocketpilot.utils.dates import utc_today

logger = logging.getLogger(__name__)


class RecurringTransactionService:
    """Service for recurring transaction templates."""

    def __init__(self, db: Database):
        """Initialize recurring transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, user_id: str, recurring_id: int) -> RecurringTransaction:
        recurring = self.db.get_recurring(user_id, recurring_id)
        if recurring is None:
            raise NotFoundError(recurring_not_found(recurring_id))
        return recurring

    def _check_references(self, user_id: str, account_id: Optional[int], category_id: Optional[int]) -> None:
        if account_id is not None and self.db.get_account(user_id, account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if category_id is not None and self.db.get_category(user_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    @staticmethod
    def _check_fields(description: Optional[str], frequency: Optional[str], notes: Optional[str]) -> None:
        if description is not None and not 1 <= len(description.strip()) <= 255:
            raise ValidationError("Description must be between 1 and 255 characters")
        if frequency is not None and frequency not in FREQUENCIES:
            raise ValidationError(
                f"Invalid frequency '{frequency}'. Must be one of: {', '.join(FREQUENCIES)}"
            )
        if notes is not None and len(notes) > 500:
            raise ValidationError("Notes must be at most 500 characters")

    def create_recurring(
        self,
        user_id: str,
        account_id: int,
        description: str,
        amount: Decimal,
        kind: str,
        frequency: str,
        next_occurrence_date: date,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a recurring template.

        Args:
            user_id: Owner ID
            account_id: Account the generated transactions go to
            description: Description copied onto generated transactions
            amount: Positive magnitude
            kind: ``expense`` or ``income``, sets the sign
            frequency: weekly, biweekly, monthly or yearly
            next_occurrence_date: First date to generate
            category_id: Optional category
            notes: Optional notes (max 500 characters)

        Returns:
            Template ID

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If the account or category is not owned
        """
        self._check_fields(description, frequency, notes)
        if Decimal(amount) <= 0:
            raise ValidationError("Amount must be positive")
        self._check_references(user_id, account_id, category_id)

        return self.db.create_recurring(
            user_id,
            account_id=account_id,
            description=description.strip(),
            amount=round_cents(to_signed_amount(amount, kind)),
            frequency=frequency,
            next_occurrence_date=next_occurrence_date,
            category_id=category_id,
            notes=notes,
        )

    def get_recurring(self, user_id: str, recurring_id: int) -> Optional[RecurringTransaction]:
        return self.db.get_recurring(user_id, recurring_id)

    def list_recurring(
        self, user_id: str, active_only: bool = False, today: Optional[date] = None
    ) -> list[tuple[RecurringTransaction, int]]:
        """List templates with the number of days until each is next due."""
        return [
            (template, days_until(template.next_occurrence_date, today))
            for template in self.db.list_recurring(user_id, active_only=active_only)
        ]

    def update_recurring(self, user_id: str, recurring_id: int, **fields: Any) -> None:
        """Update template fields; ``kind`` re-signs the (new or existing) amount."""
        template = self._require(user_id, recurring_id)
        self._check_fields(fields.get("description"), fields.get("frequency"), fields.get("notes"))
        self._check_references(user_id, fields.get("account_id"), fields.get("category_id"))

        kind = fields.pop("kind", None)
        if "amount" in fields or kind is not None:
            amount = Decimal(fields.get("amount", abs(template.amount)))
            if amount <= 0:
                raise ValidationError("Amount must be positive")
            if kind is None:
                kind = "expense" if template.amount < 0 else "income"
            fields["amount"] = round_cents(to_signed_amount(amount, kind))
        self.db.update_recurring(user_id, recurring_id, **fields)

    def set_active(self, user_id: str, recurring_id: int, active: bool) -> None:
        """Pause or resume a template."""
        self._require(user_id, recurring_id)
        self.db.update_recurring(user_id, recurring_id, is_active=active)

    def delete_recurring(self, user_id: str, recurring_id: int) -> None:
        """Delete a template. Transactions it generated are kept."""
        self._require(user_id, recurring_id)
        self.db.delete_recurring(user_id, recurring_id)

    def generate_due(self, user_id: str, today: Optional[date] = None) -> GenerationResult:
        """Create transactions for every active template that is due.

        Each due template generates at most one occurrence per call: the one
        on its ``next_occurrence_date``. If that occurrence already exists
        (an earlier or concurrent run created it), the template is only
        advanced. Failures are collected per template and do not stop the run.
        A stored transaction is reported as created even if advancing its
        template then fails.

        Args:
            user_id: Owner ID
            today: Reference date (defaults to UTC today)

        Returns:
            GenerationResult listing created transactions and per-template errors
        """
        today = today or utc_today()
        created: list[GeneratedTransaction] = []
        errors: list[GenerationError] = []
        advanced = 0

        for template in self.db.list_due_recurring(user_id, today):
            occurrence = template.next_occurrence_date
            try:
                following = next_occurrence(occurrence, template.frequency)
                transaction_id = self._create_occurrence(user_id, template, occurrence)
            except Exception as e:
                logger.exception("Failed to generate recurring transaction %s", template.id)
                errors.append(
                    GenerationError(
                        recurring_id=template.id,
                        description=template.description,
                        error=str(e) if isinstance(e, ValueError) else "Failed to generate transaction",
                    )
                )
                continue

            if transaction_id is not None:
                created.append(
                    GeneratedTransaction(
                        id=transaction_id,
                        recurring_id=template.id,
                        description=template.description,
                        amount=template.amount,
                        date=occurrence,
                        next_occurrence=following,
                    )
                )

            try:
                self.db.update_recurring(
                    user_id,
                    template.id,
                    next_occurrence_date=following,
                    last_created_date=occurrence,
                )
                advanced += 1
            except Exception as e:
                logger.exception("Failed to advance recurring transaction %s", template.id)
                errors.append(
                    GenerationError(
                        recurring_id=template.id,
                        description=template.description,
                        error=str(e) if isinstance(e, ValueError) else "Failed to update next occurrence date",
                    )
                )

        logger.info("Generated %d recurring transaction(s) for %s", len(created), user_id)
        return GenerationResult(created=created, errors=errors, advanced=advanced)

    def _create_occurrence(
        self, user_id: str, template: RecurringTransaction, occurrence: date
    ) -> Optional[int]:
        """Store the transaction for ``occurrence``, or None if it already exists."""
        if self.db.find_recurring_occurrence(user_id, template.id, occurrence) is not None:
            return None
        try:
            return self.db.create_transaction(
                user_id,
                account_id=template.account_id,
                date=occurrence,
                amount=template.amount,
                description=template.description,
                category_id=template.category_id,
                is_transfer=False,
                recurring_transaction_id=template.id,
            )
        except ConflictError:
            logger.info("Occurrence %s of template %s was generated concurrently", occurrence, template.id)
            return None
