"""Transaction link domain service."""

from typing import Optional
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import LINK_TYPES, TransactionLink
from pocketpilot.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    transaction_not_found,
)


class TransactionLinkService:
    """Service for linking related transactions (refunds, chargebacks, ...)."""

    def __init__(self, db: Database):
        """Initialize transaction link service.

        Args:
            db: Database instance
        """
        self.db = db

    @staticmethod
    def _validate(link_type: Optional[str], notes: Optional[str]) -> None:
        if link_type is not None and link_type not in LINK_TYPES:
            raise ValidationError(
                f"Invalid link type '{link_type}'. Must be one of: {', '.join(LINK_TYPES)}"
            )
        if notes is not None and len(notes) > 500:
            raise ValidationError("Notes must be at most 500 characters")

    def create_link(
        self,
        user_id: str,
        source_transaction_id: int,
        target_transaction_id: int,
        link_type: str,
        notes: Optional[str] = None,
    ) -> int:
        """Link two of the owner's transactions.

        Raises:
            ValidationError: If both IDs are the same or the type is unknown
            NotFoundError: If either transaction is not owned
            ConflictError: If the same link already exists
        """
        if source_transaction_id == target_transaction_id:
            raise ValidationError("Cannot link a transaction to itself")
        self._validate(link_type, notes)
        for transaction_id in (source_transaction_id, target_transaction_id):
            if self.db.get_transaction(user_id, transaction_id) is None:
                raise NotFoundError(transaction_not_found(transaction_id))
        if self.db.link_exists(user_id, source_transaction_id, target_transaction_id, link_type):
            raise ConflictError("This link already exists")

        return self.db.create_link(
            user_id,
            source_transaction_id=source_transaction_id,
            target_transaction_id=target_transaction_id,
            link_type=link_type,
            notes=notes,
        )

    def list_links(self, user_id: str, transaction_id: Optional[int] = None) -> list[TransactionLink]:
        """List links, optionally only those involving ``transaction_id``."""
        return self.db.list_links(user_id, transaction_id=transaction_id)

    def update_link(
        self, user_id: str, link_id: int, link_type: Optional[str] = None, notes: Optional[str] = None
    ) -> None:
        if self.db.get_link(user_id, link_id) is None:
            raise NotFoundError(f"Link {link_id} not found")
        self._validate(link_type, notes)
        fields = {k: v for k, v in {"link_type": link_type, "notes": notes}.items() if v is not None}
        if fields:
            self.db.update_link(user_id, link_id, **fields)

    def delete_link(self, user_id: str, link_id: int) -> None:
        if self.db.get_link(user_id, link_id) is None:
            raise NotFoundError(f"Link {link_id} not found")
        self.db.delete_link(user_id, link_id)
