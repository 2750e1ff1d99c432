"""
Transaction API endpoints: splits and bulk changes
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from pocketpilot.api.deps import get_current_owner, get_database
from pocketpilot.api.schemas import TransactionResponse
from pocketpilot.database.base import Database
from pocketpilot.domain.entities import SplitDetails, SplitItem
from pocketpilot.domain.splits import MAX_SPLITS, MIN_SPLITS, SplitService
from pocketpilot.domain.transaction import TransactionService


router = APIRouter(prefix="/api/transactions", tags=["transactions"])


class SplitPart(BaseModel):
    amount: Decimal = Field(gt=0)
    category_id: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=255)


class SplitRequest(BaseModel):
    splits: list[SplitPart] = Field(min_length=MIN_SPLITS, max_length=MAX_SPLITS)


class SplitResponse(BaseModel):
    parent: TransactionResponse
    split_group_id: str
    children: list[TransactionResponse]


def _split_response(details: SplitDetails) -> SplitResponse:
    return SplitResponse(
        parent=TransactionResponse.from_entity(details.parent),
        split_group_id=details.split_group_id,
        children=[TransactionResponse.from_entity(c) for c in details.children],
    )


@router.post("/{transaction_id}/split", response_model=SplitResponse, status_code=201)
def split_transaction(
    transaction_id: int,
    req: SplitRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Split a transaction across categories"""
    splits = [
        SplitItem(amount=part.amount, category_id=part.category_id, description=part.description)
        for part in req.splits
    ]
    return _split_response(SplitService(db).split_transaction(user_id, transaction_id, splits))


@router.get("/{transaction_id}/split", response_model=SplitResponse)
def get_split(
    transaction_id: int,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """The split group of a parent or of any of its parts"""
    return _split_response(SplitService(db).get_split_details(user_id, transaction_id))


class BulkTransactionRequest(BaseModel):
    transaction_ids: list[int]


class BulkUpdateCategoryRequest(BulkTransactionRequest):
    category_id: Optional[int] = None


class BulkResponse(BaseModel):
    affected_count: int
    message: str


@router.post("/bulk/update-category", response_model=BulkResponse)
def bulk_update_category(
    req: BulkUpdateCategoryRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Assign one category (or none) to several transactions"""
    count = TransactionService(db).bulk_update_category(user_id, req.transaction_ids, req.category_id)
    return BulkResponse(affected_count=count, message=f"Successfully updated {count} transaction(s)")


@router.post("/bulk/delete", response_model=BulkResponse)
def bulk_delete(
    req: BulkTransactionRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Delete several transactions, including the other leg of transfers"""
    count = len(TransactionService(db).bulk_delete(user_id, req.transaction_ids))
    return BulkResponse(affected_count=count, message=f"Successfully deleted {count} transaction(s)")
