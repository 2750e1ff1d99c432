"""Tests for split validation and the split service."""

from decimal import Decimal

import pytest

from conftest import USER
from pocketpilot.domain.entities import SplitItem
from pocketpilot.domain.errors import NotFoundError, ValidationError
from pocketpilot.domain.splits import calculate_remaining_amount, validate_split_amounts


def items(*amounts):
    return [SplitItem(amount=Decimal(a)) for a in amounts]


class TestValidateSplitAmounts:
    def test_exact_total(self):
        assert validate_split_amounts(Decimal("-100"), items("60", "40")).valid

    def test_within_one_cent(self):
        assert validate_split_amounts(Decimal("100"), items("33.33", "33.33", "33.33")).valid

    def test_missing_amount(self):
        result = validate_split_amounts(Decimal("-100"), items("60", "30"))
        assert not result.valid
        assert result.message == (
            "Split amounts total $90.00, but the transaction is $100.00. Missing $10.00."
        )

    def test_excess_amount(self):
        result = validate_split_amounts(Decimal("-100"), items("60", "50"))
        assert not result.valid
        assert result.message == (
            "Split amounts total $110.00, which exceeds the transaction amount of $100.00 by $10.00."
        )


def test_calculate_remaining_amount():
    assert calculate_remaining_amount(Decimal("-100"), items("25", "25")) == Decimal("50")
    assert calculate_remaining_amount(Decimal("100"), items("80", "30")) == Decimal("-10")


class TestSplitService:
    def test_split_expense(self, split_service, make_transaction, sample_categories):
        parent_id = make_transaction(-100, "Costco")

        details = split_service.split_transaction(
            USER,
            parent_id,
            [
                SplitItem(Decimal("70"), sample_categories["Groceries"]),
                SplitItem(Decimal("30"), sample_categories["Shopping"], "Batteries"),
            ],
        )

        assert details.parent.id == parent_id
        assert details.parent.is_split_parent is True
        assert len(details.children) == 2
        amounts = sorted(c.amount for c in details.children)
        assert amounts == [Decimal("-70.00"), Decimal("-30.00")]
        descriptions = {c.description for c in details.children}
        assert descriptions == {"Costco", "Batteries"}
        for child in details.children:
            assert child.split_parent_id == parent_id
            assert child.split_group_id == details.split_group_id

    def test_split_income_keeps_sign(self, split_service, make_transaction):
        parent_id = make_transaction(200, "Paycheque")
        details = split_service.split_transaction(USER, parent_id, items("150", "50"))
        assert all(c.amount > 0 for c in details.children)

    def test_details_from_child(self, split_service, make_transaction):
        parent_id = make_transaction(-50)
        details = split_service.split_transaction(USER, parent_id, items("25", "25"))
        from_child = split_service.get_split_details(USER, details.children[0].id)
        assert from_child.parent.id == parent_id

    def test_amounts_must_reconcile(self, split_service, make_transaction):
        parent_id = make_transaction(-100)
        with pytest.raises(ValidationError, match="Missing \\$10.00"):
            split_service.split_transaction(USER, parent_id, items("60", "30"))

    @pytest.mark.parametrize("amounts", [("100",), tuple(["10"] * 11), ("120", "-20")])
    def test_invalid_split_lists(self, split_service, make_transaction, amounts):
        parent_id = make_transaction(-100)
        with pytest.raises(ValidationError):
            split_service.split_transaction(USER, parent_id, items(*amounts))

    def test_cannot_split_twice(self, split_service, make_transaction):
        parent_id = make_transaction(-100)
        details = split_service.split_transaction(USER, parent_id, items("50", "50"))
        with pytest.raises(ValidationError):
            split_service.split_transaction(USER, parent_id, items("50", "50"))
        with pytest.raises(ValidationError):
            split_service.split_transaction(USER, details.children[0].id, items("25", "25"))

    def test_unsplit(self, split_service, make_transaction, transaction_service):
        parent_id = make_transaction(-100)
        details = split_service.split_transaction(USER, parent_id, items("50", "50"))

        split_service.unsplit_transaction(USER, parent_id)

        parent = transaction_service.require_transaction(USER, parent_id)
        assert parent.is_split_parent is False
        assert parent.split_group_id is None
        for child in details.children:
            assert transaction_service.get_transaction(USER, child.id) is None

    def test_not_split(self, split_service, make_transaction):
        parent_id = make_transaction(-100)
        with pytest.raises(NotFoundError):
            split_service.get_split_details(USER, parent_id)

    def test_split_parent_excluded_from_balance(
        self, split_service, make_transaction, account_service, sample_account
    ):
        parent_id = make_transaction(-100)
        split_service.split_transaction(USER, parent_id, items("60", "40"))

        (entry,) = account_service.list_with_balances(USER)
        assert entry.balance == Decimal("-100.00")


class TestSplitFailure:
    def test_failed_children_leave_parent_unflagged(
        self, split_service, make_transaction, transaction_service, temp_db, monkeypatch
    ):
        parent_id = make_transaction(-100, "Costco")

        def fail(rows):
            raise RuntimeError("disk full")

        monkeypatch.setattr(temp_db._get_session(), "add_all", fail)

        with pytest.raises(RuntimeError):
            split_service.split_transaction(USER, parent_id, items("60", "40"))

        parent = transaction_service.require_transaction(USER, parent_id)
        assert parent.is_split_parent is False
        assert parent.split_group_id is None
        assert [t.id for t in temp_db.list_transactions(USER)] == [parent_id]
        with pytest.raises(NotFoundError):
            split_service.get_split_details(USER, parent_id)
