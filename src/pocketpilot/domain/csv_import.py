"""CSV import domain service."""

import csv
import logging
from typing import Any, Optional
from datetime import date
from decimal import Decimal
from pathlib import Path

from pocketpilot.database.base import Database
from pocketpilot.domain.csv_format import CSVFormatService
from pocketpilot.domain.errors import NotFoundError, ValidationError
from pocketpilot.utils.amounts import parse_amount, round_cents
from pocketpilot.utils.dates import parse_date_with_format

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 10


def _duplicate_key(txn_date: date, amount: Decimal, description: Optional[str]) -> tuple:
    return (txn_date, round_cents(amount), (description or "").strip().lower())


class CSVImportService:
    """Service for importing CSV files."""

    def __init__(self, db: Database):
        """Initialize CSV import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.format_service = CSVFormatService(db)

    def _parse_amount(self, values: dict[str, Optional[str]], debit_credit: bool) -> Optional[Decimal]:
        """Return the signed amount of a row, or None for an empty debit/credit row."""
        if not debit_credit:
            return parse_amount(values.get("amount") or "")

        debit = parse_amount(values["debit"]) if values.get("debit") else Decimal("0")
        credit = parse_amount(values["credit"]) if values.get("credit") else Decimal("0")
        if debit > 0:
            return -debit
        if credit > 0:
            return credit
        if debit == 0 and credit == 0:
            return None
        raise ValueError("Debit and credit columns hold negative values")

    def import_csv(
        self, user_id: str, csv_file_path: str, format_name: str, preview: bool = False
    ) -> dict[str, Any]:
        """Import transactions from a CSV file.

        Rows already present in the account (same date, amount and
        description ignoring case) are counted as duplicates and not
        imported again. Category names are matched against the owner's active
        categories, ignoring case; unknown names leave the row uncategorized.
        Rows with an unreadable date or a missing/zero amount are reported as
        errors. In debit/credit formats, rows with both columns empty are
        ignored.

        Args:
            user_id: Owner ID
            csv_file_path: Path to CSV file
            format_name: Name of CSV format to use
            preview: Parse and classify rows without storing anything

        Returns:
            Dict with import statistics:
            - imported: number of transactions imported
            - skipped: number of parsed rows not imported
            - valid: number of parsed rows that are not duplicates
            - duplicates: number of rows matching existing transactions
            - errors: list of error messages
            - transactions: first parsed rows (preview only)

        Raises:
            NotFoundError: If the format doesn't exist
            ValidationError: If the format is incomplete or the file lacks columns
            FileNotFoundError: If CSV file doesn't exist
        """
        fmt = self.format_service.get_format_by_name(user_id, format_name)
        if fmt is None:
            raise NotFoundError(f"CSV format '{format_name}' not found")

        is_valid, missing = self.format_service.validate_format(fmt)
        if not is_valid:
            raise ValidationError(
                f"CSV format '{format_name}' is missing required mappings: {', '.join(missing)}"
            )
        column_map = {m.csv_column_name: m.db_field_name for m in self.format_service.get_mappings(fmt.id)}

        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        existing = {
            _duplicate_key(t.date, t.amount, t.description)
            for t in self.db.list_transactions(user_id, account_id=fmt.account_id)
        }
        categories = {c.name.lower(): c.id for c in self.db.list_categories(user_id)}

        parsed: list[dict[str, Any]] = []
        errors: list[str] = []

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","
            reader = csv.DictReader(f, delimiter=delimiter)

            if reader.fieldnames is None:
                raise ValidationError("CSV file has no columns")
            required_columns = {
                col for col, field in column_map.items() if field in {"date", "amount", "debit", "credit"}
            }
            missing_columns = required_columns - set(reader.fieldnames)
            if missing_columns:
                raise ValidationError(
                    f"CSV file missing required columns: {', '.join(sorted(missing_columns))}"
                )

            for row_num, row in enumerate(reader, start=2):  # header is row 1
                values = {
                    field: (row.get(col) or "").strip() or None for col, field in column_map.items()
                }
                try:
                    txn_date = parse_date_with_format(values.get("date") or "", fmt.date_format)
                except ValueError:
                    errors.append(f"Row {row_num}: Invalid date: \"{values.get('date') or ''}\"")
                    continue

                try:
                    amount = self._parse_amount(values, fmt.is_debit_credit_format)
                except ValueError:
                    errors.append(f"Row {row_num}: Invalid amount in row {row_num}")
                    continue
                if amount is None:
                    continue
                if amount == 0:
                    errors.append(f"Row {row_num}: Invalid amount in row {row_num}")
                    continue

                amount = round_cents(amount)
                description = values.get("description")
                key = _duplicate_key(txn_date, amount, description)
                category_name = values.get("category")
                parsed.append(
                    {
                        "row_number": row_num,
                        "date": txn_date,
                        "amount": amount,
                        "description": description,
                        "category_name": category_name,
                        "category_id": categories.get(category_name.lower()) if category_name else None,
                        "notes": values.get("notes"),
                        "is_duplicate": key in existing,
                    }
                )
                existing.add(key)

        duplicates = sum(1 for row in parsed if row["is_duplicate"])
        if preview:
            return {
                "preview": True,
                "imported": 0,
                "skipped": len(parsed),
                "valid": len(parsed) - duplicates,
                "duplicates": duplicates,
                "errors": errors,
                "transactions": parsed[:PREVIEW_ROWS],
            }

        imported = 0
        for row in parsed:
            if row["is_duplicate"]:
                continue
            try:
                self.db.create_transaction(
                    user_id,
                    account_id=fmt.account_id,
                    date=row["date"],
                    amount=row["amount"],
                    description=row["description"],
                    category_id=row["category_id"],
                    notes=row["notes"],
                )
                imported += 1
            except Exception:
                logger.exception("Failed to import row %s of %s", row["row_number"], csv_file_path)
                errors.append(f"Row {row['row_number']}: failed to save transaction")

        logger.info("Imported %d transaction(s) from %s", imported, csv_file_path)
        return {
            "preview": False,
            "imported": imported,
            "skipped": len(parsed) - imported,
            "valid": len(parsed) - duplicates,
            "duplicates": duplicates,
            "errors": errors,
            "transactions": [],
        }
