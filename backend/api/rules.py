"""
Kanuni Rules API
================
Read-only access to the PPDA rule registry.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from core import PPDA_SECTIONS, get_rule
from schemas import ErrorResponse, RuleListResponse, RuleSchema

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/rules", tags=["Rules"])


@router.get(
    "",
    response_model=RuleListResponse,
    summary="List rules",
    description="List every PPDA provision in evaluation order."
)
async def list_rules() -> RuleListResponse:
    """List all rules in the registry."""
    return RuleListResponse(
        regulation="Public Procurement and Asset Disposal Act, 2015",
        rule_count=len(PPDA_SECTIONS),
        rules=[RuleSchema(**rule.to_dict()) for rule in PPDA_SECTIONS]
    )


@router.get(
    "/{rule_id}",
    response_model=RuleSchema,
    responses={
        404: {"model": ErrorResponse, "description": "Rule not found"}
    },
    summary="Get rule",
    description="Fetch a single PPDA provision, e.g. 'Section 66'."
)
async def get_rule_detail(rule_id: str) -> RuleSchema:
    """Fetch a single rule."""
    rule = get_rule(rule_id)

    if rule is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "RuleNotFound",
                "message": f"Rule '{rule_id}' not found."
            }
        )

    return RuleSchema(**rule.to_dict())
