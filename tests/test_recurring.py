"""Tests for recurring transaction templates and generation."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import OTHER_USER, USER
from pocketpilot.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def rent(recurring_service, sample_account, sample_categories):
    return recurring_service.create_recurring(
        USER,
        account_id=sample_account.id,
        description="Rent",
        amount=Decimal("1500"),
        kind="expense",
        frequency="monthly",
        next_occurrence_date=date(2024, 1, 31),
        category_id=sample_categories["Housing"],
    )


def generated(temp_db, template_id):
    return [t for t in temp_db.list_transactions(USER) if t.recurring_transaction_id == template_id]


class TestTemplates:
    def test_create_signs_amount(self, recurring_service, rent, sample_account):
        template = recurring_service.get_recurring(USER, rent)
        assert template.amount == Decimal("-1500.00")
        assert template.is_active is True

        income_id = recurring_service.create_recurring(
            USER, sample_account.id, "Salary", Decimal("3000"), "income", "biweekly", date(2024, 1, 5)
        )
        assert recurring_service.get_recurring(USER, income_id).amount == Decimal("3000.00")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"description": ""},
            {"amount": Decimal("0")},
            {"frequency": "daily"},
            {"notes": "x" * 501},
        ],
    )
    def test_validation(self, recurring_service, sample_account, overrides):
        kwargs = dict(
            account_id=sample_account.id,
            description="Gym",
            amount=Decimal("50"),
            kind="expense",
            frequency="monthly",
            next_occurrence_date=date(2024, 1, 1),
        )
        kwargs.update(overrides)
        with pytest.raises(ValidationError):
            recurring_service.create_recurring(USER, **kwargs)

    def test_unknown_account(self, recurring_service):
        with pytest.raises(NotFoundError):
            recurring_service.create_recurring(
                USER, 9999, "Gym", Decimal("50"), "expense", "monthly", date(2024, 1, 1)
            )

    def test_list_with_days_until(self, recurring_service, rent):
        ((template, days),) = recurring_service.list_recurring(USER, today=date(2024, 1, 21))
        assert template.id == rent
        assert days == 10

    def test_pause_and_resume(self, recurring_service, rent):
        recurring_service.set_active(USER, rent, False)
        assert recurring_service.list_recurring(USER, active_only=True) == []
        recurring_service.set_active(USER, rent, True)
        assert len(recurring_service.list_recurring(USER, active_only=True)) == 1

    def test_update_kind_resigns_amount(self, recurring_service, rent):
        recurring_service.update_recurring(USER, rent, kind="income")
        assert recurring_service.get_recurring(USER, rent).amount == Decimal("1500.00")


class TestGenerateDue:
    def test_generates_due_template(self, recurring_service, rent, temp_db):
        result = recurring_service.generate_due(USER, today=date(2024, 2, 1))

        assert result.message == "Created 1 transaction(s)"
        (created,) = result.created
        assert created.recurring_id == rent
        assert created.date == date(2024, 1, 31)
        assert created.amount == Decimal("-1500.00")
        assert created.next_occurrence == date(2024, 2, 29)

        template = recurring_service.get_recurring(USER, rent)
        assert template.next_occurrence_date == date(2024, 2, 29)
        assert template.last_created_date == date(2024, 1, 31)

        (txn,) = generated(temp_db, rent)
        assert txn.description == "Rent"
        assert txn.is_transfer is False

    def test_not_yet_due(self, recurring_service, rent, temp_db):
        result = recurring_service.generate_due(USER, today=date(2024, 1, 30))
        assert result.created == []
        assert result.advanced == 0
        assert generated(temp_db, rent) == []

    def test_one_occurrence_per_call(self, recurring_service, rent, temp_db):
        recurring_service.generate_due(USER, today=date(2024, 4, 15))
        assert len(generated(temp_db, rent)) == 1
        recurring_service.generate_due(USER, today=date(2024, 4, 15))
        assert len(generated(temp_db, rent)) == 2

    def test_existing_occurrence_only_advances(self, recurring_service, rent, temp_db):
        first = recurring_service.generate_due(USER, today=date(2024, 2, 1))
        temp_db.update_recurring(USER, rent, next_occurrence_date=date(2024, 1, 31))

        second = recurring_service.generate_due(USER, today=date(2024, 2, 1))

        assert len(first.created) == 1
        assert second.created == []
        assert first.advanced + second.advanced == 2
        assert len(generated(temp_db, rent)) == 1
        assert recurring_service.get_recurring(USER, rent).next_occurrence_date == date(2024, 2, 29)

    def test_paused_templates_skipped(self, recurring_service, rent):
        recurring_service.set_active(USER, rent, False)
        assert recurring_service.generate_due(USER, today=date(2024, 3, 1)).created == []

    def test_owner_scoped(self, recurring_service, rent):
        assert recurring_service.generate_due(OTHER_USER, today=date(2024, 3, 1)).created == []
        with pytest.raises(NotFoundError):
            recurring_service.set_active(OTHER_USER, rent, False)

    def test_delete_keeps_generated_transactions(self, recurring_service, rent, temp_db):
        recurring_service.generate_due(USER, today=date(2024, 2, 1))
        recurring_service.delete_recurring(USER, rent)

        assert recurring_service.get_recurring(USER, rent) is None
        assert len(temp_db.list_transactions(USER)) == 1


class TestGenerateDueFailures:
    """Failures while generating are reported per template."""

    def test_stored_transaction_reported_when_advance_fails(self, recurring_service, rent, temp_db, monkeypatch):
        def fail(*args, **kwargs):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(temp_db, "update_recurring", fail)

        result = recurring_service.generate_due(USER, today=date(2024, 2, 1))

        (created,) = result.created
        assert created.recurring_id == rent
        assert created.date == date(2024, 1, 31)
        assert result.advanced == 0
        (error,) = result.errors
        assert error.recurring_id == rent
        assert error.error == "Failed to update next occurrence date"
        assert [t.id for t in generated(temp_db, rent)] == [created.id]

    def test_concurrently_generated_occurrence_only_advances(
        self, recurring_service, rent, temp_db, sample_account, monkeypatch
    ):
        temp_db.create_transaction(
            USER,
            account_id=sample_account.id,
            date=date(2024, 1, 31),
            amount=Decimal("-1500"),
            description="Rent",
            recurring_transaction_id=rent,
        )
        # The other run's insert is not visible to the duplicate check
        monkeypatch.setattr(temp_db, "find_recurring_occurrence", lambda *args: None)

        result = recurring_service.generate_due(USER, today=date(2024, 2, 1))

        assert result.created == []
        assert result.errors == []
        assert result.advanced == 1
        assert len(generated(temp_db, rent)) == 1
        assert recurring_service.get_recurring(USER, rent).next_occurrence_date == date(2024, 2, 29)

    def test_failing_template_does_not_stop_others(
        self, recurring_service, rent, temp_db, sample_account, monkeypatch
    ):
        gym = recurring_service.create_recurring(
            USER, sample_account.id, "Gym", Decimal("45"), "expense", "monthly", date(2024, 1, 15)
        )
        create_transaction = temp_db.create_transaction

        def create_unless_rent(user_id, **kwargs):
            if kwargs.get("recurring_transaction_id") == rent:
                raise RuntimeError("disk full")
            return create_transaction(user_id, **kwargs)

        monkeypatch.setattr(temp_db, "create_transaction", create_unless_rent)

        result = recurring_service.generate_due(USER, today=date(2024, 2, 1))

        assert [c.recurring_id for c in result.created] == [gym]
        (error,) = result.errors
        assert error.recurring_id == rent
        assert error.description == "Rent"
        assert error.error == "Failed to generate transaction"
        assert recurring_service.get_recurring(USER, rent).next_occurrence_date == date(2024, 1, 31)
        assert recurring_service.get_recurring(USER, gym).next_occurrence_date == date(2024, 2, 15)
