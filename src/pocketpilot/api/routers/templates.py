"""
Transaction template API endpoints
"""
import datetime as dt
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from pocketpilot.api.deps import get_current_owner, get_database
from pocketpilot.api.schemas import TemplateResponse, TransactionResponse
from pocketpilot.database.base import Database
from pocketpilot.domain.templates import TransactionTemplateService


router = APIRouter(prefix="/api/transaction-templates", tags=["transaction-templates"])

TEMPLATE_TYPE_PATTERN = "^(expense|income)$"


class CreateTemplateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    account_id: int
    amount: Decimal = Field(gt=0)
    transaction_type: str = Field(default="expense", pattern=TEMPLATE_TYPE_PATTERN)
    category_id: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=255)
    is_favorite: bool = False
    tag_ids: list[int] = []


class UpdateTemplateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    account_id: Optional[int] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    transaction_type: Optional[str] = Field(default=None, pattern=TEMPLATE_TYPE_PATTERN)
    category_id: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=255)
    is_favorite: Optional[bool] = None
    tag_ids: Optional[list[int]] = None


class ApplyTemplateRequest(BaseModel):
    date: dt.date
    amount: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, max_length=255)


@router.get("", response_model=list[TemplateResponse])
def list_templates(user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """Favorites first, then the most used"""
    return [TemplateResponse.from_entity(t) for t in TransactionTemplateService(db).list_templates(user_id)]


@router.post("", response_model=TemplateResponse, status_code=201)
def create_template(
    req: CreateTemplateRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Create a template"""
    service = TransactionTemplateService(db)
    template_id = service.create_template(
        user_id,
        name=req.name,
        account_id=req.account_id,
        amount=req.amount,
        kind=req.transaction_type,
        category_id=req.category_id,
        description=req.description,
        is_favorite=req.is_favorite,
        tag_ids=req.tag_ids,
    )
    return TemplateResponse.from_entity(service.require_template(user_id, template_id))


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(template_id: int, user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    return TemplateResponse.from_entity(TransactionTemplateService(db).require_template(user_id, template_id))


@router.put("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: int,
    req: UpdateTemplateRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Update the fields present in the body; ``tag_ids`` replaces the tags"""
    fields = req.model_dump(exclude_unset=True)
    tag_ids = fields.pop("tag_ids", None)
    if "transaction_type" in fields:
        fields["kind"] = fields.pop("transaction_type")
    # Only category and description can be cleared with null
    fields = {
        k: v for k, v in fields.items() if v is not None or k in ("category_id", "description")
    }

    service = TransactionTemplateService(db)
    service.update_template(user_id, template_id, tag_ids=tag_ids, **fields)
    return TemplateResponse.from_entity(service.require_template(user_id, template_id))


@router.delete("/{template_id}", status_code=204)
def delete_template(template_id: int, user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """Delete a template; transactions created from it are kept"""
    TransactionTemplateService(db).delete_template(user_id, template_id)
    return Response(status_code=204)


@router.post("/{template_id}/apply", response_model=TransactionResponse, status_code=201)
def apply_template(
    template_id: int,
    req: ApplyTemplateRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Create a transaction from a template"""
    transaction_id = TransactionTemplateService(db).apply_template(
        user_id,
        template_id,
        on=req.date,
        amount_override=req.amount,
        description_override=req.description,
    )
    return TransactionResponse.from_entity(db.get_transaction(user_id, transaction_id))
