"""Shared pytest fixtures for pocketpilot tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from pocketpilot.database.factories import create_sqlite_database
from pocketpilot.domain.account import AccountService
from pocketpilot.domain.budgets import BudgetService
from pocketpilot.domain.categorization import CategorizationRuleService
from pocketpilot.domain.category import CategoryService
from pocketpilot.domain.csv_format import CSVFormatService
from pocketpilot.domain.goals import GoalService
from pocketpilot.domain.recurring import RecurringTransactionService
from pocketpilot.domain.splits import SplitService
from pocketpilot.domain.transaction import TransactionService

USER = "alice"
OTHER_USER = "bob"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    return BudgetService(temp_db)


@pytest.fixture
def goal_service(temp_db):
    return GoalService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    return CategorizationRuleService(temp_db)


@pytest.fixture
def recurring_service(temp_db):
    return RecurringTransactionService(temp_db)


@pytest.fixture
def split_service(temp_db):
    return SplitService(temp_db)


@pytest.fixture
def csv_format_service(temp_db):
    return CSVFormatService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    account_id = account_service.create_account(USER, name="Chequing", account_type="Checking")
    return account_service.get_account(USER, account_id)


@pytest.fixture
def sample_categories(category_service):
    """Seed the default categories and return their IDs by name."""
    category_service.seed_defaults(USER)
    return {c.name: c.id for c in category_service.list_categories(USER)}


@pytest.fixture
def make_transaction(transaction_service, sample_account):
    """Factory creating transactions in the sample account."""

    def _make(amount, description="Purchase", txn_date=date(2024, 3, 10), category_id=None):
        return transaction_service.create_transaction(
            USER,
            account_id=sample_account.id,
            date=txn_date,
            amount=Decimal(str(amount)),
            description=description,
            category_id=category_id,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def run_cli(cli_runner, temp_db):
    """Invoke the CLI against the temporary database as USER."""
    from pocketpilot.cli.main import cli

    def _run(*args, input=None):
        return cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "--user", USER, *args], input=input
        )

    return _run


@pytest.fixture
def api_app(temp_db):
    """API app bound to the temporary database, signed in as USER."""
    from pocketpilot.api.app import create_app
    from pocketpilot.api.deps import get_current_owner, get_database

    app = create_app(secret_key="test-secret")
    app.dependency_overrides[get_database] = lambda: temp_db
    app.dependency_overrides[get_current_owner] = lambda: USER
    return app


@pytest.fixture
def api_client(api_app):
    from fastapi.testclient import TestClient

    return TestClient(api_app)
