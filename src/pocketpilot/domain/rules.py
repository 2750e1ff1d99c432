"""Description matching for categorization rules."""

import re

from pocketpilot.domain.entities import RULE_TYPES
from pocketpilot.domain.errors import ValidationError


def test_rule(description: str, rule_type: str, pattern: str, case_sensitive: bool = False) -> bool:
    """Return True when ``description`` matches a rule.

    String rule types compare lowercased text unless ``case_sensitive`` is
    set. ``regex`` searches the original description, ignoring case unless
    ``case_sensitive``; an invalid pattern never matches. Unknown rule types
    never match.
    """
    if rule_type == "regex":
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            return re.search(pattern, description, flags) is not None
        except re.error:
            return False

    text = description if case_sensitive else description.lower()
    needle = pattern if case_sensitive else pattern.lower()

    if rule_type == "contains":
        return needle in text
    if rule_type == "starts_with":
        return text.startswith(needle)
    if rule_type == "ends_with":
        return text.endswith(needle)
    if rule_type == "exact":
        return text == needle
    return False


def validate_rule_pattern(rule_type: str, pattern: str) -> None:
    """Check a rule definition before it is stored.

    Raises:
        ValidationError: If the type is unknown, the pattern is empty or too
            long, or a regex pattern does not compile
    """
    if rule_type not in RULE_TYPES:
        raise ValidationError(
            f"Invalid rule type '{rule_type}'. Must be one of: {', '.join(RULE_TYPES)}"
        )
    if not pattern or len(pattern) > 255:
        raise ValidationError("Pattern must be between 1 and 255 characters")
    if rule_type == "regex":
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValidationError(f"Invalid regular expression '{pattern}': {e}")
