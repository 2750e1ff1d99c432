"""Split transactions: amount reconciliation and the split operation."""

import logging
import uuid
from typing import Iterable
from decimal import Decimal

from pocketpilot.database.base import Database
from pocketpilot.domain.entities import SplitDetails, SplitItem, SplitValidation
from pocketpilot.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    transaction_not_found,
)
from pocketpilot.utils.amounts import format_currency, round_cents

logger = logging.getLogger(__name__)

TOLERANCE = Decimal("0.01")
MIN_SPLITS = 2
MAX_SPLITS = 10


def _total(splits: Iterable[SplitItem]) -> Decimal:
    return sum((Decimal(s.amount) for s in splits), Decimal("0"))


def validate_split_amounts(parent_amount: Decimal, splits: Iterable[SplitItem]) -> SplitValidation:
    """Check that split magnitudes add up to the parent's absolute amount.

    Differences up to one cent are accepted.
    """
    total = _total(splits)
    expected = abs(Decimal(parent_amount))
    difference = total - expected

    if abs(difference) <= TOLERANCE:
        return SplitValidation(valid=True)
    if difference < 0:
        return SplitValidation(
            valid=False,
            message=(
                f"Split amounts total {format_currency(total)}, but the transaction is "
                f"{format_currency(expected)}. Missing {format_currency(-difference)}."
            ),
        )
    return SplitValidation(
        valid=False,
        message=(
            f"Split amounts total {format_currency(total)}, which exceeds the transaction "
            f"amount of {format_currency(expected)} by {format_currency(difference)}."
        ),
    )


def calculate_remaining_amount(parent_amount: Decimal, splits: Iterable[SplitItem]) -> Decimal:
    """Amount still to allocate (negative when over-allocated)."""
    return abs(Decimal(parent_amount)) - _total(splits)


class SplitService:
    """Service for splitting transactions across categories."""

    def __init__(self, db: Database):
        """Initialize split service.

        Args:
            db: Database instance
        """
        self.db = db

    def split_transaction(self, user_id: str, transaction_id: int, splits: list[SplitItem]) -> SplitDetails:
        """Split a transaction into category-tagged children.

        Children inherit the parent's account and date, take the parent's
        sign and default to its description. The parent is flagged as a split
        parent; if the children cannot be stored, the flag is rolled back.

        Args:
            user_id: Owner ID
            transaction_id: Transaction to split
            splits: 2-10 positive portions

        Returns:
            The split parent with its new children

        Raises:
            ValidationError: If the split list or amounts are invalid, or the
                transaction cannot be split
            NotFoundError: If the transaction or a category is not owned
        """
        if not MIN_SPLITS <= len(splits) <= MAX_SPLITS:
            raise ValidationError(f"A split needs between {MIN_SPLITS} and {MAX_SPLITS} parts")
        for item in splits:
            if Decimal(item.amount) <= 0:
                raise ValidationError("Split amounts must be positive")

        parent = self.db.get_transaction(user_id, transaction_id)
        if parent is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if parent.is_split_parent:
            raise ValidationError("Transaction is already split")
        if parent.split_parent_id is not None:
            raise ValidationError("Cannot split a transaction that is part of another split")
        if parent.is_transfer:
            raise ValidationError("Transfers cannot be split")

        for item in splits:
            if item.category_id is not None and self.db.get_category(user_id, item.category_id) is None:
                raise NotFoundError(category_not_found(item.category_id))

        validation = validate_split_amounts(parent.amount, splits)
        if not validation.valid:
            raise ValidationError(validation.message)

        sign = -1 if parent.amount < 0 else 1
        children = [
            {
                "amount": sign * round_cents(item.amount),
                "category_id": item.category_id,
                "description": item.description or parent.description,
            }
            for item in splits
        ]
        split_group_id = str(uuid.uuid4())
        try:
            self.db.create_split(user_id, parent.id, split_group_id, children)
        except Exception:
            logger.exception("Failed to create split children for transaction %s", transaction_id)
            raise
        return self.get_split_details(user_id, transaction_id)

    def get_split_details(self, user_id: str, transaction_id: int) -> SplitDetails:
        """Return the split group seen from its parent or from any child.

        Raises:
            NotFoundError: If the transaction is missing or not part of a split
        """
        transaction = self.db.get_transaction(user_id, transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        parent = transaction
        if transaction.split_parent_id is not None:
            parent = self.db.get_transaction(user_id, transaction.split_parent_id)
        if parent is None or not parent.is_split_parent or parent.split_group_id is None:
            raise NotFoundError(f"Transaction {transaction_id} is not split")

        return SplitDetails(
            parent=parent,
            split_group_id=parent.split_group_id,
            children=self.db.list_split_children(user_id, parent.split_group_id),
        )

    def unsplit_transaction(self, user_id: str, transaction_id: int) -> None:
        """Remove a split, deleting its children and restoring the parent."""
        details = self.get_split_details(user_id, transaction_id)
        self.db.remove_split(user_id, details.parent.id)
