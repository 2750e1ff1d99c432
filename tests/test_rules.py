"""Tests for the rule matcher."""

import pytest

from pocketpilot.domain.errors import ValidationError
from pocketpilot.domain.rules import test_rule as match_rule, validate_rule_pattern


def test_contains_ignores_case():
    assert match_rule("UBER EATS 123", "contains", "uber", False) is True


def test_case_sensitive_exact_mismatch():
    assert match_rule("Uber", "exact", "uber", True) is False


@pytest.mark.parametrize(
    "description,rule_type,pattern,expected",
    [
        ("Netflix.com subscription", "starts_with", "NETFLIX", True),
        ("Netflix.com subscription", "starts_with", "subscription", False),
        ("Payment - HYDRO ONE", "ends_with", "hydro one", True),
        ("Payment - HYDRO ONE", "ends_with", "payment", False),
        ("Tim Hortons", "exact", "tim hortons", True),
        ("Tim Hortons #42", "exact", "tim hortons", False),
        ("PAYROLL 2024-01", "regex", r"^payroll \d{4}", True),
        ("Weekly PAYROLL", "regex", r"^payroll", False),
    ],
)
def test_rule_types(description, rule_type, pattern, expected):
    assert match_rule(description, rule_type, pattern) is expected


def test_regex_case_sensitive():
    assert match_rule("Amazon Prime", "regex", "amazon", case_sensitive=True) is False
    assert match_rule("Amazon Prime", "regex", "Amazon", case_sensitive=True) is True


def test_invalid_regex_never_matches():
    assert match_rule("anything", "regex", "([unclosed", False) is False


def test_unknown_rule_type_never_matches():
    assert match_rule("anything", "fuzzy", "any", False) is False


def test_validate_rule_pattern():
    validate_rule_pattern("contains", "coffee")
    with pytest.raises(ValidationError):
        validate_rule_pattern("fuzzy", "coffee")
    with pytest.raises(ValidationError):
        validate_rule_pattern("contains", "")
    with pytest.raises(ValidationError):
        validate_rule_pattern("contains", "x" * 256)
    with pytest.raises(ValidationError):
        validate_rule_pattern("regex", "([unclosed")
