"""
Kanuni Analyze API
==================
Runs the analysis pipeline over text supplied by the extraction layer.
"""

import logging
import time
from typing import Any

from fastapi import APIRouter

from core import Finding, FindingSource, Severity, analyze_document
from schemas import AnalyzeRequest, ModelFindingSchema, RiskAssessmentSchema

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analyze", tags=["Analyze"])


def convert_model_finding(schema: ModelFindingSchema) -> Finding:
    """Convert an API model finding to the internal Finding."""
    return Finding(
        severity=Severity(schema.severity.value),
        text=schema.text,
        label=schema.label,
        confidence=schema.confidence,
        source=FindingSource.MODEL_BASED,
        section=schema.section,
        recommendation=schema.recommendation
    )


@router.post(
    "",
    response_model=RiskAssessmentSchema,
    response_model_by_alias=True,
    summary="Analyze document text",
    description="Evaluate extracted text against the PPDA rules and forensic analyzers."
)
async def analyze(request: AnalyzeRequest) -> dict[str, Any]:
    """
    Analyze a document.

    Returns the findings, the composite risk score and tier, the top
    concern, suggestions and critical alerts.
    """
    started = time.perf_counter()

    assessment = analyze_document(
        request.text,
        mode=request.mode.value,
        model_findings=[convert_model_finding(f) for f in request.model_findings],
        model_confidence=request.model_confidence
    )

    logger.info(
        f"[{request.mode.value}] Analyzed {len(request.text)} characters in "
        f"{time.perf_counter() - started:.3f}s: score {assessment.risk_score}"
    )
    return assessment.to_dict()
