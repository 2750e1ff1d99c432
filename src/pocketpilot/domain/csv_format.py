"""CSV format domain service."""

from typing import Optional
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import CSVColumnMapping, CSVFormat
from pocketpilot.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
)
from pocketpilot.utils.dates import DATE_FORMATS

# Transaction fields a CSV column can be mapped onto
MAPPABLE_FIELDS = {"date", "amount", "description", "category", "debit", "credit", "notes"}


class CSVFormatService:
    """Service for managing CSV formats."""

    def __init__(self, db: Database):
        """Initialize CSV format service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_format(
        self,
        user_id: str,
        name: str,
        account_id: int,
        is_debit_credit_format: bool = False,
        date_format: Optional[str] = None,
    ) -> int:
        """Create a new CSV format.

        Args:
            user_id: Owner ID
            name: Format name
            account_id: Account imported rows are recorded against
            is_debit_credit_format: Amounts come from separate debit and
                credit columns instead of one signed amount column
            date_format: One of DATE_FORMATS, or None to auto-detect

        Returns:
            Format ID

        Raises:
            NotFoundError: If the account doesn't exist
            ConflictError: If the format name is taken
            ValidationError: If the date format is unknown
        """
        if self.db.get_account(user_id, account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if date_format is not None and date_format not in DATE_FORMATS:
            raise ValidationError(
                f"Invalid date format '{date_format}'. Must be one of: {', '.join(DATE_FORMATS)}"
            )
        if self.db.get_csv_format_by_name(user_id, name) is not None:
            raise ConflictError(f"CSV format with name '{name}' already exists")

        return self.db.create_csv_format(
            user_id,
            name=name,
            account_id=account_id,
            is_debit_credit_format=is_debit_credit_format,
            date_format=date_format,
        )

    def get_format(self, user_id: str, format_id: int) -> Optional[CSVFormat]:
        return self.db.get_csv_format(user_id, format_id)

    def get_format_by_name(self, user_id: str, name: str) -> Optional[CSVFormat]:
        return self.db.get_csv_format_by_name(user_id, name)

    def list_formats(self, user_id: str, account_id: Optional[int] = None) -> list[CSVFormat]:
        return self.db.list_csv_formats(user_id, account_id=account_id)

    def add_mapping(
        self,
        user_id: str,
        format_id: int,
        csv_column_name: str,
        db_field_name: str,
        is_required: bool = False,
    ) -> int:
        """Map a CSV column onto a transaction field.

        Raises:
            NotFoundError: If the format doesn't exist
            ValidationError: If the field name is not mappable
        """
        if self.db.get_csv_format(user_id, format_id) is None:
            raise NotFoundError(f"CSV format {format_id} not found")
        if db_field_name not in MAPPABLE_FIELDS:
            raise ValidationError(
                f"Invalid db_field_name '{db_field_name}'. "
                f"Must be one of: {', '.join(sorted(MAPPABLE_FIELDS))}"
            )
        return self.db.add_column_mapping(
            format_id=format_id,
            csv_column_name=csv_column_name,
            db_field_name=db_field_name,
            is_required=is_required,
        )

    def get_mappings(self, format_id: int) -> list[CSVColumnMapping]:
        return self.db.get_column_mappings(format_id)

    def validate_format(self, fmt: CSVFormat) -> tuple[bool, list[str]]:
        """Check that a format maps every field an import needs.

        Returns:
            Tuple of (is_valid, sorted list of missing fields)
        """
        mapped = {m.db_field_name for m in self.get_mappings(fmt.id)}
        required = {"date", "debit", "credit"} if fmt.is_debit_credit_format else {"date", "amount"}
        missing = sorted(required - mapped)
        return (not missing, missing)

    def delete_format(self, user_id: str, format_id: int) -> None:
        if self.db.get_csv_format(user_id, format_id) is None:
            raise NotFoundError(f"CSV format {format_id} not found")
        self.db.delete_csv_format(user_id, format_id)
