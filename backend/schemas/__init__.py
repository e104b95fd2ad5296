"""
Kanuni API Schemas
==================
Pydantic models for API request/response validation.
All API contracts are defined here for type safety and documentation.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# === Enums ===

class AnalysisModeEnum(str, Enum):
    """Analysis mode requested by the caller."""
    PROCUREMENT = "procurement"
    CONTRACT = "contract"
    FRAUD = "fraud"
    AUDIT = "audit"


class SeverityEnum(str, Enum):
    """Finding severity."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevelEnum(str, Enum):
    """Risk tiers."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class FindingSourceEnum(str, Enum):
    """Finding provenance."""
    RULE_BASED = "rule-based"
    STATISTICAL = "statistical"
    MODEL_BASED = "model-based"


# === Finding Schemas ===

class FindingSchema(BaseModel):
    """A single detected issue."""
    severity: SeverityEnum
    text: str = Field(..., min_length=1)
    label: str
    confidence: float = Field(..., ge=0, le=1)
    source: FindingSourceEnum
    section: str | None = None
    recommendation: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "severity": "critical",
                "text": "Evidence of corrupt, collusive, or fraudulent practices",
                "label": "CORRUPT, COERCIVE, OBSTRUCTIVE, COLLUSIVE OR FRAUDULENT PRACTICE",
                "confidence": 0.95,
                "source": "rule-based",
                "section": "Section 66",
                "recommendation": "Report to relevant authorities immediately."
            }
        }
    )


class ModelFindingSchema(BaseModel):
    """A finding contributed by the model collaborator."""
    severity: SeverityEnum
    text: str = Field(..., min_length=1)
    label: str = Field(default="MODEL INSIGHT")
    confidence: float = Field(..., ge=0, le=1)
    section: str | None = None
    recommendation: str = Field(default="Review the flagged passage manually")


# === Analysis Request/Response ===

class AnalyzeRequest(BaseModel):
    """Request to analyze already-extracted document text."""
    text: str = Field(..., description="Plain text extracted from the document")
    mode: AnalysisModeEnum = Field(default=AnalysisModeEnum.PROCUREMENT)
    model_findings: list[ModelFindingSchema] = Field(
        default_factory=list,
        description="Optional findings from the classification model"
    )
    model_confidence: float | None = Field(
        default=None, ge=0, le=1,
        description="Optional model confidence, displayed alongside the rule score"
    )


class ScoringBreakdownSchema(BaseModel):
    """Breakdown of how the risk score was calculated."""
    severity_counts: dict[str, int]
    weights: dict[str, int]
    raw_score: int
    formula: str


class RiskAssessmentSchema(BaseModel):
    """Complete risk assessment."""
    findings: list[FindingSchema]
    risk_score: int = Field(..., ge=0, le=100, alias="riskScore")
    risk_level: RiskLevelEnum = Field(..., alias="riskLevel")
    top_concern: str = Field(..., alias="topConcern")
    suggestions: list[str]
    alerts: list[str]
    mode: AnalysisModeEnum | None = None
    model_confidence: float | None = Field(default=None, alias="modelConfidence")
    scoring_breakdown: ScoringBreakdownSchema | None = Field(default=None, alias="scoringBreakdown")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "findings": [],
                "riskScore": 45,
                "riskLevel": "High",
                "topConcern": "Evidence of corrupt, collusive, or fraudulent practices",
                "suggestions": ["Report to relevant authorities immediately."],
                "alerts": ["Evidence of corrupt, collusive, or fraudulent practices"],
                "mode": "procurement",
                "modelConfidence": None,
                "scoringBreakdown": {
                    "severity_counts": {"critical": 1, "high": 1, "medium": 0, "low": 0},
                    "weights": {"critical": 30, "high": 15, "medium": 7, "low": 3},
                    "raw_score": 45,
                    "formula": "score = min(100, sum(weight[severity] for each finding))"
                }
            }
        }
    )


# === Rule Schemas ===

class RuleSchema(BaseModel):
    """A PPDA provision in the rule registry."""
    id: str
    title: str
    keywords: list[str]
    severity: SeverityEnum
    violation: str
    recommendation: str


class RuleListResponse(BaseModel):
    """The complete rule registry in evaluation order."""
    regulation: str
    rule_count: int
    rules: list[RuleSchema]


# === Error Schemas ===

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(None, description="Additional error details")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "RuleNotFound",
                "message": "Rule 'Section 999' not found.",
                "details": None
            }
        }
    )


# === Health Check ===

class HealthCheckResponse(BaseModel):
    """API health check response."""
    status: str = Field(..., description="API status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Current server timestamp")
    services: dict[str, str] = Field(..., description="Status of dependent services")
