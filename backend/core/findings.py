"""
Kanuni Findings Module
======================
The Finding record shared by the rule evaluator, the statistical
analyzers and the optional model collaborator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Finding severity, ordered from most to least severe."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FindingSource(str, Enum):
    """Provenance of a finding."""
    RULE_BASED = "rule-based"
    STATISTICAL = "statistical"
    MODEL_BASED = "model-based"


@dataclass(frozen=True)
class Finding:
    """A single detected compliance or risk issue."""
    severity: Severity
    text: str
    label: str
    confidence: float
    source: FindingSource
    recommendation: str
    section: str | None = None

    def __post_init__(self):
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity(self.severity))
        if not isinstance(self.source, FindingSource):
            object.__setattr__(self, "source", FindingSource(self.source))
        if not self.text or not self.text.strip():
            raise ValueError("Finding text must not be empty")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Finding confidence must be within [0, 1], got {self.confidence}")

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.label, self.text)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "severity": self.severity.value,
            "text": self.text,
            "label": self.label,
            "confidence": round(self.confidence, 2),
            "source": self.source.value,
            "recommendation": self.recommendation
        }
        if self.section is not None:
            data["section"] = self.section
        return data
