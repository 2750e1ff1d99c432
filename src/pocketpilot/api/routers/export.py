"""
Transaction export endpoint
"""
import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from pocketpilot.api.deps import get_current_owner, get_database
from pocketpilot.database.base import Database
from pocketpilot.domain.csv_export import ExportService


router = APIRouter(prefix="/api/export", tags=["export"])


@router.get("")
def export_transactions(
    fmt: str = Query("csv", alias="format", pattern="^(csv|json)$"),
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Download transactions as a CSV or JSON attachment"""
    filename, content_type, body = ExportService(db).export_transactions(
        user_id, fmt=fmt, start_date=start_date, end_date=end_date
    )
    return Response(
        content=body,
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
