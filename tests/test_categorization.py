"""Tests for categorization rules and their application."""

from datetime import date

import pytest

from conftest import OTHER_USER, USER
from pocketpilot.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def rules(rule_service, sample_categories):
    """Two overlapping rules: coffee shops before a generic restaurant rule."""
    coffee = rule_service.create_rule(USER, "Coffee", "contains", "starbucks", sample_categories["Restaurants"])
    generic = rule_service.create_rule(USER, "Food", "contains", "bucks", sample_categories["Shopping"])
    return coffee, generic


class TestRuleManagement:
    def test_rules_appended_in_order(self, rule_service, rules):
        assert [(r.id, r.rule_order) for r in rule_service.list_rules(USER)] == [
            (rules[0], 0),
            (rules[1], 1),
        ]

    def test_invalid_rule(self, rule_service, sample_categories):
        with pytest.raises(ValidationError):
            rule_service.create_rule(USER, "Bad", "regex", "(", sample_categories["Shopping"])
        with pytest.raises(ValidationError):
            rule_service.create_rule(USER, "", "contains", "x", sample_categories["Shopping"])

    def test_target_category_must_be_owned(self, rule_service, category_service):
        category_service.seed_defaults(OTHER_USER)
        foreign = category_service.list_categories(OTHER_USER)[0].id
        with pytest.raises(NotFoundError):
            rule_service.create_rule(USER, "Foreign", "contains", "x", foreign)

    def test_reorder(self, rule_service, rules, sample_categories):
        third = rule_service.create_rule(USER, "Gas", "starts_with", "shell", sample_categories["Transportation"])

        rule_service.reorder_rules(USER, [third, rules[0], rules[1]])

        ordered = rule_service.list_rules(USER)
        assert [r.id for r in ordered] == [third, rules[0], rules[1]]
        assert [r.rule_order for r in ordered] == [0, 1, 2]

    def test_reorder_partial_list_appends_rest(self, rule_service, rules, sample_categories):
        third = rule_service.create_rule(USER, "Gas", "starts_with", "shell", sample_categories["Transportation"])

        rule_service.reorder_rules(USER, [third])

        assert [r.id for r in rule_service.list_rules(USER)] == [third, rules[0], rules[1]]

    def test_reorder_rejects_bad_input(self, rule_service, rules):
        with pytest.raises(ValidationError):
            rule_service.reorder_rules(USER, [])
        with pytest.raises(ValidationError):
            rule_service.reorder_rules(USER, [rules[0], rules[0]])
        with pytest.raises(NotFoundError):
            rule_service.reorder_rules(USER, [rules[0], 9999])
        with pytest.raises(NotFoundError):
            rule_service.reorder_rules(OTHER_USER, [rules[0]])

    def test_delete_compacts_order(self, rule_service, rules, sample_categories):
        third = rule_service.create_rule(USER, "Gas", "starts_with", "shell", sample_categories["Transportation"])

        rule_service.delete_rule(USER, rules[0])

        assert [(r.id, r.rule_order) for r in rule_service.list_rules(USER)] == [
            (rules[1], 0),
            (third, 1),
        ]

    def test_match_description_first_rule_wins(self, rule_service, rules):
        assert rule_service.match_description(USER, "STARBUCKS #123").id == rules[0]
        assert rule_service.match_description(USER, "Bigbucks Diner").id == rules[1]
        assert rule_service.match_description(USER, "Hydro") is None

    def test_inactive_rules_ignored(self, rule_service, rules):
        rule_service.update_rule(USER, rules[0], is_active=False)
        assert rule_service.match_description(USER, "STARBUCKS #123").id == rules[1]


class TestApplyRules:
    def test_no_active_rules(self, rule_service):
        result = rule_service.apply_rules(USER)
        assert result.message == "No active rules found"
        assert result.total_checked == 0

    def test_no_transactions(self, rule_service, rules):
        result = rule_service.apply_rules(USER)
        assert result.message == "No transactions to process"

    def test_dry_run_changes_nothing(self, rule_service, rules, make_transaction, transaction_service):
        txn_id = make_transaction(-5, "Starbucks Coffee")
        make_transaction(-40, "Hydro One")

        result = rule_service.apply_rules(USER, dry_run=True)

        assert result.applied is False
        assert result.total_checked == 2
        assert result.total_matched == 1
        assert result.matches[0].transaction_id == txn_id
        assert result.matches[0].rule_name == "Coffee"
        assert result.matches[0].category_name == "Restaurants"
        assert result.message == "Found 1 matches out of 2 transactions (dry run)"
        assert transaction_service.require_transaction(USER, txn_id).category_id is None

    def test_apply_assigns_categories(
        self, rule_service, rules, make_transaction, transaction_service, sample_categories
    ):
        coffee_id = make_transaction(-5, "Starbucks Coffee")
        other_id = make_transaction(-12, "bigbucks burgers", date(2024, 3, 11))
        make_transaction(-40, "Hydro One")

        result = rule_service.apply_rules(USER)

        assert result.applied is True
        assert result.message == "Applied categories to 2 transaction(s)"
        assert transaction_service.require_transaction(USER, coffee_id).category_id == sample_categories["Restaurants"]
        assert transaction_service.require_transaction(USER, other_id).category_id == sample_categories["Shopping"]

    def test_uncategorized_only(self, rule_service, rules, make_transaction, sample_categories):
        make_transaction(-5, "Starbucks", category_id=sample_categories["Groceries"])

        assert rule_service.apply_rules(USER).message == "No transactions to process"

        result = rule_service.apply_rules(USER, uncategorized_only=False, dry_run=True)
        assert result.total_matched == 1

    def test_failed_update_does_not_stop_run(
        self, rule_service, rules, make_transaction, transaction_service, sample_categories, temp_db, monkeypatch
    ):
        failing_id = make_transaction(-5, "Starbucks Coffee")
        other_id = make_transaction(-12, "bigbucks burgers", date(2024, 3, 11))
        update_transaction = temp_db.update_transaction

        def update_unless_failing(user_id, transaction_id, **fields):
            if transaction_id == failing_id:
                raise RuntimeError("database is locked")
            return update_transaction(user_id, transaction_id, **fields)

        monkeypatch.setattr(temp_db, "update_transaction", update_unless_failing)

        result = rule_service.apply_rules(USER)

        assert result.total_matched == 2
        assert result.errors == [f"Transaction {failing_id}: failed to update category"]
        assert result.message == "Applied categories to 1 transaction(s)"
        assert transaction_service.require_transaction(USER, failing_id).category_id is None
        assert transaction_service.require_transaction(USER, other_id).category_id == sample_categories["Shopping"]
