"""Categorization rules: ordered matching and bulk application."""

import logging
from typing import Any, Optional

from pocketpilot.database.base import Database
from pocketpilot.domain.entities import ApplyRulesResult, CategorizationRule, RuleMatch
from pocketpilot.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    rule_not_found,
)
from pocketpilot.domain.rules import test_rule, validate_rule_pattern

logger = logging.getLogger(__name__)


def find_matching_rule(
    description: str, rules: list[CategorizationRule]
) -> Optional[CategorizationRule]:
    """Return the first rule, in the given order, matching ``description``."""
    for rule in rules:
        if test_rule(description, rule.rule_type, rule.pattern, rule.case_sensitive):
            return rule
    return None


class CategorizationRuleService:
    """Service for managing and applying categorization rules."""

    def __init__(self, db: Database):
        """Initialize categorization rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_name(self, name: str) -> str:
        name = (name or "").strip()
        if not name or len(name) > 100:
            raise ValidationError("Rule name must be between 1 and 100 characters")
        return name

    def _check_category(self, user_id: str, category_id: int) -> None:
        if self.db.get_category(user_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def create_rule(
        self,
        user_id: str,
        name: str,
        rule_type: str,
        pattern: str,
        target_category_id: int,
        case_sensitive: bool = False,
        is_active: bool = True,
    ) -> int:
        """Create a rule evaluated after all existing rules.

        Raises:
            ValidationError: If name, type or pattern is invalid
            NotFoundError: If the target category is not owned by the caller
        """
        name = self._check_name(name)
        validate_rule_pattern(rule_type, pattern)
        self._check_category(user_id, target_category_id)
        return self.db.create_rule(
            user_id,
            name=name,
            rule_type=rule_type,
            pattern=pattern,
            target_category_id=target_category_id,
            case_sensitive=case_sensitive,
            is_active=is_active,
        )

    def get_rule(self, user_id: str, rule_id: int) -> Optional[CategorizationRule]:
        return self.db.get_rule(user_id, rule_id)

    def list_rules(self, user_id: str, active_only: bool = False) -> list[CategorizationRule]:
        """List rules in evaluation order."""
        return self.db.list_rules(user_id, active_only=active_only)

    def update_rule(self, user_id: str, rule_id: int, **fields: Any) -> None:
        """Update rule fields (name, rule_type, pattern, case_sensitive,
        target_category_id, is_active). Order changes go through reorder_rules.
        """
        rule = self.db.get_rule(user_id, rule_id)
        if rule is None:
            raise NotFoundError(rule_not_found(rule_id))
        if "name" in fields:
            fields["name"] = self._check_name(fields["name"])
        if "rule_type" in fields or "pattern" in fields:
            validate_rule_pattern(fields.get("rule_type", rule.rule_type), fields.get("pattern", rule.pattern))
        if "target_category_id" in fields:
            self._check_category(user_id, fields["target_category_id"])
        self.db.update_rule(user_id, rule_id, **fields)

    def delete_rule(self, user_id: str, rule_id: int) -> None:
        """Delete a rule; the remaining rules are renumbered 0..N-1."""
        if self.db.get_rule(user_id, rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))
        self.db.delete_rule(user_id, rule_id)

    def reorder_rules(self, user_id: str, rule_ids: list[int]) -> None:
        """Set the evaluation order to ``rule_ids`` (first ID gets order 0).

        Raises:
            ValidationError: If the list is empty or repeats an ID
            NotFoundError: If any ID is not one of the caller's rules
        """
        if not rule_ids:
            raise ValidationError("rule_ids must not be empty")
        if len(set(rule_ids)) != len(rule_ids):
            raise ValidationError("rule_ids must not contain duplicates")

        owned = {rule.id for rule in self.db.list_rules(user_id)}
        invalid = [rule_id for rule_id in rule_ids if rule_id not in owned]
        if invalid:
            raise NotFoundError(f"Rules not found: {', '.join(str(i) for i in invalid)}")

        self.db.set_rule_order(user_id, rule_ids)

    def match_description(self, user_id: str, description: str) -> Optional[CategorizationRule]:
        """Return the active rule that would categorize ``description``."""
        return find_matching_rule(description, self.db.list_rules(user_id, active_only=True))

    def apply_rules(
        self, user_id: str, uncategorized_only: bool = True, dry_run: bool = False
    ) -> ApplyRulesResult:
        """Apply active rules to the owner's transactions.

        Each transaction with a description is checked against the rules in
        ascending ``rule_order``; the first match wins. In dry-run mode
        matches are only reported. A failed update is logged and reported in
        ``errors`` without stopping the run.

        Args:
            user_id: Owner ID
            uncategorized_only: Only consider transactions without a category
            dry_run: Report matches without assigning categories

        Returns:
            ApplyRulesResult with counts, matches and a summary message
        """
        rules = self.db.list_rules(user_id, active_only=True)
        if not rules:
            return ApplyRulesResult(
                total_checked=0, total_matched=0, matches=[], applied=False, message="No active rules found"
            )

        transactions = self.db.list_transactions(
            user_id, uncategorized_only=uncategorized_only, with_description=True
        )
        if not transactions:
            return ApplyRulesResult(
                total_checked=0,
                total_matched=0,
                matches=[],
                applied=False,
                message="No transactions to process",
            )

        category_names = {
            c.id: c.name for c in self.db.list_categories(user_id, include_archived=True)
        }
        matches: list[RuleMatch] = []
        errors: list[str] = []
        updated = 0

        for transaction in transactions:
            rule = find_matching_rule(transaction.description, rules)
            if rule is None:
                continue
            matches.append(
                RuleMatch(
                    transaction_id=transaction.id,
                    description=transaction.description,
                    rule_name=rule.name,
                    category_name=category_names.get(rule.target_category_id, "Unknown"),
                )
            )
            if dry_run:
                continue
            try:
                self.db.update_transaction(user_id, transaction.id, category_id=rule.target_category_id)
                updated += 1
            except Exception:
                logger.exception("Failed to categorize transaction %s", transaction.id)
                errors.append(f"Transaction {transaction.id}: failed to update category")

        if dry_run:
            message = f"Found {len(matches)} matches out of {len(transactions)} transactions (dry run)"
        else:
            message = f"Applied categories to {updated} transaction(s)"

        return ApplyRulesResult(
            total_checked=len(transactions),
            total_matched=len(matches),
            matches=matches,
            applied=not dry_run,
            message=message,
            errors=errors,
        )
