"""
Tests for the Finding record and settings validation.
"""
import dataclasses

import pytest

from core.config import AnalysisMode, Settings
from core.findings import Finding, FindingSource, Severity


class TestFinding:
    """Tests for Finding construction."""

    def test_string_enums_are_coerced(self):
        finding = Finding(
            severity="high",
            text="Tender security exceeds 2% of tender value",
            label="TENDER SECURITY",
            confidence=0.95,
            source="rule-based",
            recommendation="Reduce tender security"
        )

        assert finding.severity is Severity.HIGH
        assert finding.source is FindingSource.RULE_BASED

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_text_rejected(self, text):
        with pytest.raises(ValueError):
            Finding(Severity.LOW, text, "X", 0.5, FindingSource.STATISTICAL, "Review")

    @pytest.mark.parametrize("confidence", [-0.1, 1.1])
    def test_confidence_range(self, confidence):
        with pytest.raises(ValueError):
            Finding(Severity.LOW, "issue", "X", confidence, FindingSource.STATISTICAL, "Review")

    def test_frozen(self):
        finding = Finding(Severity.LOW, "issue", "X", 0.5, FindingSource.STATISTICAL, "Review")

        with pytest.raises(dataclasses.FrozenInstanceError):
            finding.text = "changed"

    def test_to_dict(self):
        finding = Finding(
            Severity.CRITICAL, "issue", "X", 0.956, FindingSource.RULE_BASED, "Review",
            section="Section 66"
        )

        assert finding.to_dict() == {
            "severity": "critical",
            "text": "issue",
            "label": "X",
            "confidence": 0.96,
            "source": "rule-based",
            "recommendation": "Review",
            "section": "Section 66",
        }


class TestSettings:
    """Tests for settings validation."""

    def test_defaults(self):
        settings = Settings()

        assert settings.min_document_length == 200
        assert settings.max_analysis_length == 50_000
        assert settings.severity_weights == {"critical": 30, "high": 15, "medium": 7, "low": 3}

    @pytest.mark.parametrize("overrides", [
        {"medium_threshold": 50},
        {"high_threshold": 80},
        {"medium_threshold": 0},
        {"critical_threshold": 45},
    ])
    def test_tiers_must_increase(self, overrides):
        with pytest.raises(ValueError):
            Settings(**overrides)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("Z_SCORE_THRESHOLD", "3.5")

        assert Settings().z_score_threshold == 3.5

    def test_modes(self):
        assert [m.value for m in AnalysisMode] == ["procurement", "contract", "fraud", "audit"]
