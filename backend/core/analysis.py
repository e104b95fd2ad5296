"""
Kanuni Analysis Pipeline
========================
Text + mode in, RiskAssessment out.

Pipeline steps:
1. Rule-based PPDA checks
2. Statistical / forensic analyzers
3. Optional model-contributed findings
4. Merge, score and tier
"""

import logging
from collections.abc import Iterable
from typing import Any

from core.compliance import ComplianceChecker
from core.config import AnalysisMode, Settings, get_settings
from core.findings import Finding, FindingSource
from core.risk_engine import RiskAssessment, RiskEngine

logger = logging.getLogger(__name__)


def analyze_document(
    text: str | None,
    mode: AnalysisMode | str = AnalysisMode.PROCUREMENT,
    model_findings: Iterable[Finding] | None = None,
    model_confidence: float | None = None,
    settings: Settings | None = None
) -> RiskAssessment:
    """
    Run the full analysis for one document.

    Model findings are an optional enrichment: they are appended after
    the rule-based and statistical findings and must already be marked
    ``model-based``.
    """
    settings = settings or get_settings()
    mode = AnalysisMode(mode)

    findings = ComplianceChecker(settings).check(text, mode)

    extra = list(model_findings or [])
    for f in extra:
        if f.source != FindingSource.MODEL_BASED:
            raise ValueError(f"Model findings must have source 'model-based', got '{f.source.value}'")
    if model_confidence is not None and not 0.0 <= model_confidence <= 1.0:
        raise ValueError(f"Model confidence must be within [0, 1], got {model_confidence}")

    engine = RiskEngine(settings)
    merged = engine.merge_findings(findings, extra)
    return engine.assess(merged, mode=mode.value, model_confidence=model_confidence)


def build_opinion_context(assessment: RiskAssessment) -> dict[str, Any]:
    """Payload handed to the optional narrative generator."""
    return {
        "findings": [f.to_dict() for f in assessment.findings],
        "riskScore": assessment.risk_score,
        "mode": assessment.mode
    }
