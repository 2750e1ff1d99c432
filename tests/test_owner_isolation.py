"""Records of one owner are invisible to every other owner."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import OTHER_USER, USER
from pocketpilot.domain.csv_export import ExportService
from pocketpilot.domain.entities import SplitItem
from pocketpilot.domain.errors import NotFoundError


@pytest.fixture
def alice_data(sample_account, sample_categories, make_transaction, budget_service, rule_service):
    txn_id = make_transaction(-60, "Hardware store", date(2024, 3, 1), sample_categories["Shopping"])
    budget_id = budget_service.create_budget(USER, sample_categories["Shopping"], Decimal("200"))
    rule_id = rule_service.create_rule(USER, "Hardware", "contains", "hardware", sample_categories["Shopping"])
    return {"transaction": txn_id, "budget": budget_id, "rule": rule_id}


def test_lists_are_empty_for_other_owner(
    alice_data, account_service, category_service, transaction_service, budget_service, rule_service
):
    assert account_service.list_accounts(OTHER_USER) == []
    assert category_service.list_categories(OTHER_USER) == []
    assert transaction_service.list_transactions(OTHER_USER) == []
    assert budget_service.list_budgets(OTHER_USER) == []
    assert rule_service.list_rules(OTHER_USER) == []


def test_direct_access_is_not_found(
    alice_data, sample_account, transaction_service, account_service, budget_service, rule_service, split_service
):
    assert transaction_service.get_transaction(OTHER_USER, alice_data["transaction"]) is None
    assert account_service.get_account(OTHER_USER, sample_account.id) is None

    with pytest.raises(NotFoundError):
        transaction_service.delete_transaction(OTHER_USER, alice_data["transaction"])
    with pytest.raises(NotFoundError):
        budget_service.delete_budget(OTHER_USER, alice_data["budget"])
    with pytest.raises(NotFoundError):
        rule_service.delete_rule(OTHER_USER, alice_data["rule"])
    with pytest.raises(NotFoundError):
        split_service.split_transaction(
            OTHER_USER,
            alice_data["transaction"],
            [SplitItem(Decimal("30")), SplitItem(Decimal("30"))],
        )

    assert transaction_service.get_transaction(USER, alice_data["transaction"]) is not None


def test_cannot_write_into_foreign_account(alice_data, sample_account, transaction_service):
    with pytest.raises(NotFoundError):
        transaction_service.create_transaction(OTHER_USER, sample_account.id, date(2024, 3, 2), Decimal("-1"))


def test_apply_rules_only_touches_own_transactions(alice_data, rule_service, account_service, temp_db):
    account_id = account_service.create_account(OTHER_USER, "Bob's account")
    temp_db.create_transaction(
        OTHER_USER, account_id=account_id, date=date(2024, 3, 3), amount=Decimal("-5"), description="hardware bits"
    )

    assert rule_service.apply_rules(OTHER_USER).message == "No active rules found"
    result = rule_service.apply_rules(USER, uncategorized_only=False, dry_run=True)
    assert [m.transaction_id for m in result.matches] == [alice_data["transaction"]]


def test_export_only_own_transactions(alice_data, temp_db):
    with pytest.raises(NotFoundError):
        ExportService(temp_db).export_transactions(OTHER_USER)
