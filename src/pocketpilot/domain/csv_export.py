"""Transaction export to CSV and JSON."""

import csv
import io
import json
from datetime import date, datetime, timezone
from typing import Optional

from pocketpilot.database.base import Database
from pocketpilot.domain.errors import NotFoundError, ValidationError
from pocketpilot.utils.amounts import transaction_type
from pocketpilot.utils.dates import utc_today

EXPORT_COLUMNS = ["Date", "Description", "Amount", "Type", "Category", "Account", "Is Transfer"]
EXPORT_CURRENCY = "CAD"

CONTENT_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
}


class ExportService:
    """Service for exporting transactions."""

    def __init__(self, db: Database):
        """Initialize export service.

        Args:
            db: Database instance
        """
        self.db = db

    def _rows(self, user_id: str, start_date: Optional[date], end_date: Optional[date]) -> list[dict]:
        transactions = self.db.list_transactions(user_id, start_date=start_date, end_date=end_date)
        if not transactions:
            raise NotFoundError("No transactions to export")

        accounts = {a.id: a.name for a in self.db.list_accounts(user_id)}
        categories = {c.id: c.name for c in self.db.list_categories(user_id, include_archived=True)}
        return [
            {
                "date": t.date.isoformat(),
                "description": t.description or "",
                "amount": f"{abs(t.amount):.2f}",
                "type": transaction_type(t.amount),
                "category": categories.get(t.category_id, "Uncategorized")
                if t.category_id is not None
                else "Uncategorized",
                "account": accounts.get(t.account_id, "Unknown"),
                "is_transfer": t.is_transfer,
            }
            for t in transactions
        ]

    def export_transactions(
        self,
        user_id: str,
        fmt: str = "csv",
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> tuple[str, str, str]:
        """Export the owner's transactions, newest first.

        Args:
            user_id: Owner ID
            fmt: "csv" or "json"
            start_date: Optional inclusive lower date bound
            end_date: Optional inclusive upper date bound
            today: Date used in the file name (defaults to UTC today)

        Returns:
            Tuple of (filename, content type, body)

        Raises:
            ValidationError: If the format is unknown
            NotFoundError: If there is nothing to export
        """
        if fmt not in CONTENT_TYPES:
            raise ValidationError(f"Invalid export format '{fmt}'. Must be csv or json")

        rows = self._rows(user_id, start_date, end_date)
        filename = f"pocket-pilot-transactions-{(today or utc_today()).isoformat()}.{fmt}"

        if fmt == "json":
            payload = {
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "currency": EXPORT_CURRENCY,
                "total_transactions": len(rows),
                "transactions": [
                    {**row, "amount": float(row["amount"])} for row in rows
                ],
            }
            return filename, CONTENT_TYPES[fmt], json.dumps(payload, indent=2)

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_COLUMNS)
        for row in rows:
            writer.writerow(
                [
                    row["date"],
                    row["description"],
                    row["amount"],
                    row["type"],
                    row["category"],
                    row["account"],
                    "Yes" if row["is_transfer"] else "No",
                ]
            )
        return filename, CONTENT_TYPES[fmt], buffer.getvalue()
