"""Account domain service."""

from typing import Optional
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import ACCOUNT_TYPES, Account, AccountBalance
from pocketpilot.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    @staticmethod
    def _validate(name: str, account_type: str) -> None:
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        if account_type not in ACCOUNT_TYPES:
            raise ValidationError(
                f"Invalid account type '{account_type}'. Must be one of: {', '.join(ACCOUNT_TYPES)}"
            )

    def create_account(self, user_id: str, name: str, account_type: str = "Checking") -> int:
        """Create a new account.

        Args:
            user_id: Owner ID
            name: Account name, unique per owner
            account_type: One of ACCOUNT_TYPES

        Returns:
            Account ID

        Raises:
            ValidationError: If name is empty or type is unknown
            ConflictError: If account name already exists
        """
        name = name.strip() if name else name
        self._validate(name, account_type)
        if self.db.get_account_by_name(user_id, name) is not None:
            raise ConflictError(f"Account with name '{name}' already exists")
        return self.db.create_account(user_id, name=name, account_type=account_type)

    def get_account(self, user_id: str, account_id: int) -> Optional[Account]:
        """Get account by ID, or None if missing."""
        return self.db.get_account(user_id, account_id)

    def require_account(self, user_id: str, account_id: int) -> Account:
        """Get an owned account or raise NotFoundError."""
        account = self.db.get_account(user_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, user_id: str) -> list[Account]:
        return self.db.list_accounts(user_id)

    def list_with_balances(self, user_id: str) -> list[AccountBalance]:
        """List accounts with balances derived from their transactions."""
        balances = self.db.get_account_balances(user_id)
        return [
            AccountBalance(account=account, balance=balances.get(account.id, 0))
            for account in self.db.list_accounts(user_id)
        ]

    def update_account(
        self,
        user_id: str,
        account_id: int,
        name: Optional[str] = None,
        account_type: Optional[str] = None,
    ) -> None:
        """Rename an account and/or change its type.

        Raises:
            NotFoundError: If account not found
            ConflictError: If the new name is taken by another account
            ValidationError: If the new values are invalid
        """
        account = self.require_account(user_id, account_id)
        new_name = name.strip() if name is not None else account.name
        new_type = account_type if account_type is not None else account.account_type
        self._validate(new_name, new_type)

        existing = self.db.get_account_by_name(user_id, new_name)
        if existing is not None and existing.id != account_id:
            raise ConflictError(f"Account with name '{new_name}' already exists")

        self.db.update_account(user_id, account_id, name=new_name, account_type=new_type)

    def delete_account(self, user_id: str, account_id: int) -> None:
        """Delete an account and every transaction recorded against it.

        Raises:
            NotFoundError: If account not found
        """
        self.require_account(user_id, account_id)
        self.db.delete_account(user_id, account_id)
