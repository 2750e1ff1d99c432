"""Transaction domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal

from pocketpilot.database.base import Database
from pocketpilot.domain.entities import Transaction
from pocketpilot.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
)
from pocketpilot.utils.amounts import round_cents

logger = logging.getLogger(__name__)

MAX_BULK_TRANSACTIONS = 100


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_account(self, user_id: str, account_id: int) -> None:
        if self.db.get_account(user_id, account_id) is None:
            raise NotFoundError(account_not_found(account_id))

    def _check_category(self, user_id: str, category_id: Optional[int]) -> None:
        if category_id is not None and self.db.get_category(user_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a new transaction.

        Args:
            user_id: Owner ID
            account_id: Account ID
            date: Transaction date
            amount: Signed amount (negative for expenses)
            description: Optional description
            category_id: Optional category ID
            notes: Optional notes

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If account or category doesn't belong to the owner
            ValidationError: If amount is zero
        """
        self._check_account(user_id, account_id)
        self._check_category(user_id, category_id)
        amount = round_cents(amount)
        if amount == 0:
            raise ValidationError("Amount must not be zero")

        return self.db.create_transaction(
            user_id,
            account_id=account_id,
            date=date,
            amount=amount,
            description=description,
            category_id=category_id,
            notes=notes,
        )

    def get_transaction(self, user_id: str, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID, or None if missing."""
        return self.db.get_transaction(user_id, transaction_id)

    def require_transaction(self, user_id: str, transaction_id: int) -> Transaction:
        transaction = self.db.get_transaction(user_id, transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def update_category(self, user_id: str, transaction_id: int, category_id: Optional[int]) -> None:
        """Assign (or clear, with None) a transaction's category."""
        self.require_transaction(user_id, transaction_id)
        self._check_category(user_id, category_id)
        self.db.update_transaction(user_id, transaction_id, category_id=category_id)

    def update_transaction(
        self,
        user_id: str,
        transaction_id: int,
        account_id: Optional[int] = None,
        date: Optional[date] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        clear_category: bool = False,
        notes: Optional[str] = None,
    ) -> None:
        """Update transaction fields. Only the given fields change.

        Raises:
            NotFoundError: If the transaction, account or category is missing
            ValidationError: If both category_id and clear_category are set,
                or the amount is zero
        """
        self.require_transaction(user_id, transaction_id)
        fields = {}

        if account_id is not None:
            self._check_account(user_id, account_id)
            fields["account_id"] = account_id
        if category_id is not None and clear_category:
            raise ValidationError("Cannot set both category_id and clear_category")
        if category_id is not None:
            self._check_category(user_id, category_id)
            fields["category_id"] = category_id
        elif clear_category:
            fields["category_id"] = None
        if date is not None:
            fields["date"] = date
        if amount is not None:
            amount = round_cents(amount)
            if amount == 0:
                raise ValidationError("Amount must not be zero")
            fields["amount"] = amount
        if description is not None:
            fields["description"] = description
        if notes is not None:
            fields["notes"] = notes

        if fields:
            self.db.update_transaction(user_id, transaction_id, **fields)

    def delete_transaction(self, user_id: str, transaction_id: int) -> None:
        """Delete a transaction (with any split children and links)."""
        self.require_transaction(user_id, transaction_id)
        self.db.delete_transaction(user_id, transaction_id)

    def _check_bulk_ids(self, user_id: str, transaction_ids: list[int]) -> list[int]:
        if not transaction_ids:
            raise ValidationError("At least one transaction is required")
        if len(transaction_ids) > MAX_BULK_TRANSACTIONS:
            raise ValidationError(f"Maximum {MAX_BULK_TRANSACTIONS} transactions can be changed at once")
        ids = list(dict.fromkeys(transaction_ids))
        missing = [i for i in ids if self.db.get_transaction(user_id, i) is None]
        if missing:
            raise NotFoundError(f"Transactions not found: {', '.join(map(str, missing))}")
        return ids

    def bulk_update_category(
        self, user_id: str, transaction_ids: list[int], category_id: Optional[int]
    ) -> int:
        """Assign (or clear, with None) the category of several transactions.

        Nothing changes unless every transaction and the category belong to
        the owner.

        Returns:
            Number of transactions updated

        Raises:
            ValidationError: If the list is empty or longer than MAX_BULK_TRANSACTIONS
            NotFoundError: If a transaction or the category is missing
        """
        ids = self._check_bulk_ids(user_id, transaction_ids)
        self._check_category(user_id, category_id)
        updated = self.db.bulk_update_category(user_id, ids, category_id)
        logger.info("Set category %s on %d transaction(s)", category_id, updated)
        return updated

    def bulk_delete(self, user_id: str, transaction_ids: list[int]) -> list[int]:
        """Delete several transactions at once.

        The other leg of a transfer is deleted with it, and split parents take
        their children along.

        Returns:
            IDs of the deleted transactions, including transfer legs

        Raises:
            ValidationError: If the list is empty or longer than MAX_BULK_TRANSACTIONS
            NotFoundError: If a transaction is missing
        """
        ids = self._check_bulk_ids(user_id, transaction_ids)
        deleted = self.db.bulk_delete_transactions(user_id, ids)
        logger.info("Deleted %d transaction(s)", len(deleted))
        return deleted

    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        uncategorized_only: bool = False,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions, newest first, with optional filters."""
        return self.db.list_transactions(
            user_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
            uncategorized_only=uncategorized_only,
            limit=limit,
        )

    def create_transfer(
        self,
        user_id: str,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        date: date,
        description: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> tuple[int, int]:
        """Move money between two accounts.

        Creates a withdrawal on the source account and a deposit on the
        destination, both flagged as transfers and linked to each other. The
        owner's transfer-type category is used when one exists.

        Returns:
            (withdrawal ID, deposit ID)

        Raises:
            ValidationError: If the accounts are the same or amount is not positive
            NotFoundError: If either account is missing
        """
        if from_account_id == to_account_id:
            raise ValidationError("Cannot transfer to the same account")
        amount = round_cents(amount)
        if amount <= 0:
            raise ValidationError("Transfer amount must be positive")

        source = self.db.get_account(user_id, from_account_id)
        if source is None:
            raise NotFoundError(account_not_found(from_account_id))
        destination = self.db.get_account(user_id, to_account_id)
        if destination is None:
            raise NotFoundError(account_not_found(to_account_id))

        transfer_categories = self.db.list_categories(user_id, category_type="transfer")
        category_id = transfer_categories[0].id if transfer_categories else None

        ids = self.db.create_transfer(
            user_id,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            date=date,
            description=description or f"Transfer: {source.name} → {destination.name}",
            category_id=category_id,
            notes=notes,
        )
        logger.info("Transfer of %s from account %s to %s", amount, from_account_id, to_account_id)
        return ids
