"""
Categorization rule API endpoints
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from pocketpilot.api.deps import get_current_owner, get_database
from pocketpilot.api.schemas import RuleResponse
from pocketpilot.database.base import Database
from pocketpilot.domain.categorization import CategorizationRuleService
from pocketpilot.domain.entities import RULE_TYPES


router = APIRouter(prefix="/api/categorization-rules", tags=["categorization-rules"])


# === Request/Response models ===

class CreateRuleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    rule_type: str
    pattern: str = Field(min_length=1, max_length=255)
    target_category_id: int
    case_sensitive: bool = False
    is_active: bool = True

    @field_validator("rule_type")
    @classmethod
    def validate_rule_type(cls, v: str) -> str:
        if v not in RULE_TYPES:
            raise ValueError(f"rule_type must be one of: {', '.join(RULE_TYPES)}")
        return v


class ReorderRulesRequest(BaseModel):
    rule_ids: list[int] = Field(min_length=1)


class ApplyRulesRequest(BaseModel):
    uncategorized_only: bool = True
    dry_run: bool = False


class RuleMatchResponse(BaseModel):
    transaction_id: int
    description: str
    rule_name: str
    category_name: str


class ApplyRulesResponse(BaseModel):
    total_checked: int
    total_matched: int
    matches: list[RuleMatchResponse]
    applied: bool
    errors: list[str]
    message: str


# === Endpoints ===

@router.get("", response_model=list[RuleResponse])
def list_rules(user_id: str = Depends(get_current_owner), db: Database = Depends(get_database)):
    """Rules in evaluation order"""
    return [RuleResponse.from_entity(r) for r in CategorizationRuleService(db).list_rules(user_id)]


@router.post("", response_model=RuleResponse, status_code=201)
def create_rule(
    req: CreateRuleRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Create a rule, evaluated after the existing ones"""
    service = CategorizationRuleService(db)
    rule_id = service.create_rule(
        user_id,
        name=req.name,
        rule_type=req.rule_type,
        pattern=req.pattern,
        target_category_id=req.target_category_id,
        case_sensitive=req.case_sensitive,
        is_active=req.is_active,
    )
    return RuleResponse.from_entity(service.get_rule(user_id, rule_id))


@router.post("/reorder", response_model=list[RuleResponse])
def reorder_rules(
    req: ReorderRulesRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Set the evaluation order; the first ID gets order 0"""
    service = CategorizationRuleService(db)
    service.reorder_rules(user_id, req.rule_ids)
    return [RuleResponse.from_entity(r) for r in service.list_rules(user_id)]


@router.post("/apply", response_model=ApplyRulesResponse)
def apply_rules(
    req: ApplyRulesRequest,
    user_id: str = Depends(get_current_owner),
    db: Database = Depends(get_database),
):
    """Run the active rules over the owner's transactions"""
    result = CategorizationRuleService(db).apply_rules(
        user_id, uncategorized_only=req.uncategorized_only, dry_run=req.dry_run
    )
    return ApplyRulesResponse(
        total_checked=result.total_checked,
        total_matched=result.total_matched,
        matches=[RuleMatchResponse(**vars(m)) for m in result.matches],
        applied=result.applied,
        errors=result.errors,
        message=result.message,
    )
