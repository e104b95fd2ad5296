"""
Kanuni Risk Engine Module
=========================
Aggregates rule-based, statistical and model-based findings into a
deterministic, explainable risk assessment.

Scoring Methodology:
1. Merge findings in discovery order, dropping exact duplicates
2. Sum a fixed weight per finding severity
3. Clamp the sum to 0-100
4. Bucket the score into a risk tier
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from core.config import NO_CONCERNS_SENTINEL, Settings, get_settings
from core.findings import Finding, Severity

logger = logging.getLogger(__name__)


class RiskLevel(str, Enum):
    """Risk tiers."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class RiskAssessment:
    """Complete risk assessment for one document."""
    findings: tuple[Finding, ...]
    risk_score: int
    risk_level: RiskLevel
    top_concern: str
    suggestions: tuple[str, ...]
    alerts: tuple[str, ...]
    mode: str | None = None
    model_confidence: float | None = None
    scoring_breakdown: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "findings": [f.to_dict() for f in self.findings],
            "riskScore": self.risk_score,
            "riskLevel": self.risk_level.value,
            "topConcern": self.top_concern,
            "suggestions": list(self.suggestions),
            "alerts": list(self.alerts),
            "mode": self.mode,
            "modelConfidence": (
                round(self.model_confidence, 2) if self.model_confidence is not None else None
            ),
            "scoringBreakdown": self.scoring_breakdown
        }


class RiskEngine:
    """
    Severity-weighted risk scoring.

    The weight table and tier thresholds come from Settings. Scores are
    strictly additive, so adding a finding never lowers the score.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.severity_weights = {
            Severity(name): weight
            for name, weight in self.settings.severity_weights.items()
        }

    def merge_findings(self, *groups: Iterable[Finding]) -> list[Finding]:
        """Concatenate finding groups in order, drop duplicates, apply the cap."""
        merged = []
        seen = set()
        for group in groups:
            for finding in group:
                if finding.dedup_key in seen:
                    continue
                seen.add(finding.dedup_key)
                merged.append(finding)
        return merged[:self.settings.max_findings]

    def score(self, findings: Iterable[Finding]) -> tuple[int, RiskLevel]:
        """Clamped weighted score and its tier."""
        raw = sum(self.severity_weights[f.severity] for f in findings)
        risk_score = min(100, max(0, raw))
        return risk_score, self._score_to_level(risk_score)

    def _score_to_level(self, score: int) -> RiskLevel:
        """Convert numeric score to risk level."""
        if score >= self.settings.critical_threshold:
            return RiskLevel.CRITICAL
        elif score >= self.settings.high_threshold:
            return RiskLevel.HIGH
        elif score >= self.settings.medium_threshold:
            return RiskLevel.MEDIUM
        else:
            return RiskLevel.LOW

    def _top_concern(self, findings: list[Finding]) -> str:
        """First critical finding, else the first finding, else the sentinel."""
        for f in findings:
            if f.severity == Severity.CRITICAL:
                return f.text
        if findings:
            return findings[0].text
        return NO_CONCERNS_SENTINEL

    def assess(
        self,
        findings: Iterable[Finding],
        mode: str | None = None,
        model_confidence: float | None = None
    ) -> RiskAssessment:
        """
        Build the risk assessment for an already merged findings list.

        Args:
            findings: Findings in discovery order
            mode: Analysis mode, carried through for the caller
            model_confidence: Display-only confidence from the model collaborator

        Returns:
            RiskAssessment with score, tier and derived summaries
        """
        findings = list(findings)
        risk_score, risk_level = self.score(findings)

        counts = {s.value: 0 for s in Severity}
        for f in findings:
            counts[f.severity.value] += 1
        breakdown = {
            "severity_counts": counts,
            "weights": {s.value: w for s, w in self.severity_weights.items()},
            "raw_score": sum(self.severity_weights[f.severity] for f in findings),
            "formula": "score = min(100, sum(weight[severity] for each finding))"
        }

        logger.info(
            f"Risk assessment: score {risk_score} ({risk_level.value}) "
            f"from {len(findings)} findings"
        )

        return RiskAssessment(
            findings=tuple(findings),
            risk_score=risk_score,
            risk_level=risk_level,
            top_concern=self._top_concern(findings),
            suggestions=tuple(
                f.recommendation for f in findings
            )[:self.settings.max_suggestions],
            alerts=tuple(f.text for f in findings if f.severity == Severity.CRITICAL),
            mode=mode,
            model_confidence=model_confidence,
            scoring_breakdown=breakdown
        )
