"""Tag domain service."""

import re
from typing import Optional
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import Tag
from pocketpilot.domain.errors import ConflictError, NotFoundError, ValidationError

DEFAULT_TAG_COLOR = "#6b7280"
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class TagService:
    """Service for tags and their assignment to transactions."""

    def __init__(self, db: Database):
        """Initialize tag service.

        Args:
            db: Database instance
        """
        self.db = db

    @staticmethod
    def _check(name: Optional[str], color: Optional[str]) -> None:
        if name is not None and not 1 <= len(name.strip()) <= 30:
            raise ValidationError("Tag name must be between 1 and 30 characters")
        if color is not None and not _COLOR_RE.match(color):
            raise ValidationError(f"Invalid color '{color}', expected #rrggbb")

    def _require(self, user_id: str, tag_id: int) -> Tag:
        tag = self.db.get_tag(user_id, tag_id)
        if tag is None:
            raise NotFoundError(f"Tag {tag_id} not found")
        return tag

    def create_tag(self, user_id: str, name: str, color: str = DEFAULT_TAG_COLOR) -> int:
        """Create a tag.

        Raises:
            ValidationError: If the name or color is invalid
            ConflictError: If the owner already has a tag with that name
        """
        self._check(name, color)
        name = name.strip()
        if self.db.get_tag_by_name(user_id, name) is not None:
            raise ConflictError(f"Tag '{name}' already exists")
        return self.db.create_tag(user_id, name=name, color=color)

    def list_tags(self, user_id: str) -> list[tuple[Tag, int]]:
        """List tags with the number of transactions carrying each."""
        counts = self.db.get_tag_usage_counts(user_id)
        return [(tag, counts.get(tag.id, 0)) for tag in self.db.list_tags(user_id)]

    def update_tag(
        self, user_id: str, tag_id: int, name: Optional[str] = None, color: Optional[str] = None
    ) -> None:
        self._require(user_id, tag_id)
        self._check(name, color)
        fields = {}
        if name is not None:
            name = name.strip()
            existing = self.db.get_tag_by_name(user_id, name)
            if existing is not None and existing.id != tag_id:
                raise ConflictError(f"Tag '{name}' already exists")
            fields["name"] = name
        if color is not None:
            fields["color"] = color
        if fields:
            self.db.update_tag(user_id, tag_id, **fields)

    def delete_tag(self, user_id: str, tag_id: int) -> None:
        self._require(user_id, tag_id)
        self.db.delete_tag(user_id, tag_id)

    def tag_transactions(self, user_id: str, tag_id: int, transaction_ids: list[int]) -> int:
        """Attach a tag to several transactions.

        Returns:
            Number of transactions that newly received the tag
        """
        self._require(user_id, tag_id)
        added = 0
        for transaction_id in transaction_ids:
            if self.db.get_transaction(user_id, transaction_id) is None:
                raise NotFoundError(f"Transaction {transaction_id} not found")
            if self.db.add_tag_to_transaction(user_id, transaction_id, tag_id):
                added += 1
        return added

    def untag_transaction(self, user_id: str, tag_id: int, transaction_id: int) -> None:
        self._require(user_id, tag_id)
        self.db.remove_tag_from_transaction(user_id, transaction_id, tag_id)

    def tags_for_transaction(self, user_id: str, transaction_id: int) -> list[Tag]:
        return self.db.list_transaction_tags(user_id, transaction_id)
