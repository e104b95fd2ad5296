"""
Kanuni Configuration Module
===========================
Centralized configuration management using Pydantic Settings.
Every analysis threshold is a typed, environment-overridable setting so
different sensitivities can be tested without touching the engine.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisMode(str, Enum):
    """Analysis modes accepted from the extraction layer."""
    PROCUREMENT = "procurement"
    CONTRACT = "contract"
    FRAUD = "fraud"
    AUDIT = "audit"


# === Guardrails ===
MIN_DOCUMENT_LENGTH = 200
MAX_ANALYSIS_LENGTH = 50_000
MAX_RULE_VIOLATIONS = 5
MAX_FINDINGS = 10
MAX_FINDINGS_PER_ANALYZER = 2
MAX_SUGGESTIONS = 5

# === Statistical thresholds ===
Z_SCORE_THRESHOLD = 2.8
ROUND_AMOUNT_UNIT = 1000
ROUND_AMOUNT_RATIO_THRESHOLD = 0.25
MIN_PRICED_AMOUNTS = 4
VENDOR_CONCENTRATION_THRESHOLD = 0.4
CONTRACT_SLICING_MIN_MENTIONS = 5
CONTRACT_SLICING_RATIO = 0.6
MIN_TENDER_DAYS = 7
DOMESTIC_TENDER_DAYS = 14
INTERNATIONAL_TENDER_DAYS = 30

# === Scoring ===
SEVERITY_WEIGHTS = {
    "critical": 30,
    "high": 15,
    "medium": 7,
    "low": 3,
}

# Lower bound (inclusive) of each tier, highest first
RISK_TIER_THRESHOLDS = {
    "Critical": 70,
    "High": 45,
    "Medium": 20,
}

NO_CONCERNS_SENTINEL = "No material concerns identified"

# Modes that run the statistical analyzers even on text without
# procurement vocabulary
UNGATED_MODES = frozenset({AnalysisMode.FRAUD, AnalysisMode.AUDIT})


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses Pydantic v2 settings management for type safety and validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    # === Guardrails ===
    min_document_length: int = Field(
        default=MIN_DOCUMENT_LENGTH, ge=0,
        description="Documents shorter than this produce no findings"
    )
    max_analysis_length: int = Field(
        default=MAX_ANALYSIS_LENGTH, ge=1,
        description="Text is truncated to this prefix before evaluation"
    )
    max_rule_violations: int = Field(
        default=MAX_RULE_VIOLATIONS, ge=1,
        description="Rule evaluation stops after this many violations"
    )
    max_findings: int = Field(default=MAX_FINDINGS, ge=1, description="Overall findings cap")
    max_findings_per_analyzer: int = Field(
        default=MAX_FINDINGS_PER_ANALYZER, ge=1,
        description="Findings kept from each statistical analyzer"
    )
    max_suggestions: int = Field(default=MAX_SUGGESTIONS, ge=0, description="Suggestions cap")

    # === Statistical Analysis ===
    z_score_threshold: float = Field(
        default=Z_SCORE_THRESHOLD, ge=0,
        description="Absolute z-score above which an amount is an outlier"
    )
    round_amount_unit: int = Field(
        default=ROUND_AMOUNT_UNIT, ge=1,
        description="Amounts divisible by this unit count as round"
    )
    round_amount_ratio_threshold: float = Field(
        default=ROUND_AMOUNT_RATIO_THRESHOLD, ge=0, le=1,
        description="Round-amount ratio above which pricing is suspicious"
    )
    min_priced_amounts: int = Field(
        default=MIN_PRICED_AMOUNTS, ge=1,
        description="Minimum amounts in a document before pricing findings are raised"
    )
    vendor_concentration_threshold: float = Field(
        default=VENDOR_CONCENTRATION_THRESHOLD, ge=0, le=1,
        description="Top-vendor share above which concentration is flagged"
    )
    contract_slicing_min_mentions: int = Field(
        default=CONTRACT_SLICING_MIN_MENTIONS, ge=0,
        description="Vendor mentions that must be exceeded for a slicing alert"
    )
    contract_slicing_ratio: float = Field(
        default=CONTRACT_SLICING_RATIO, ge=0, le=1,
        description="Top-vendor share that must be exceeded for a slicing alert"
    )
    min_tender_days: int = Field(
        default=MIN_TENDER_DAYS, ge=1,
        description="Tender periods shorter than this are flagged"
    )
    domestic_tender_days: int = Field(default=DOMESTIC_TENDER_DAYS, ge=1)
    international_tender_days: int = Field(default=INTERNATIONAL_TENDER_DAYS, ge=1)

    # === Scoring ===
    critical_weight: int = Field(default=SEVERITY_WEIGHTS["critical"], ge=0)
    high_weight: int = Field(default=SEVERITY_WEIGHTS["high"], ge=0)
    medium_weight: int = Field(default=SEVERITY_WEIGHTS["medium"], ge=0)
    low_weight: int = Field(default=SEVERITY_WEIGHTS["low"], ge=0)
    critical_threshold: int = Field(default=RISK_TIER_THRESHOLDS["Critical"], ge=0, le=100)
    high_threshold: int = Field(default=RISK_TIER_THRESHOLDS["High"], ge=0, le=100)
    medium_threshold: int = Field(default=RISK_TIER_THRESHOLDS["Medium"], ge=0, le=100)

    # === Server Configuration ===
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")

    # === Logging ===
    log_level: str = Field(default="INFO", description="Logging level")

    @model_validator(mode="after")
    def check_tier_order(self) -> "Settings":
        """Tier thresholds must be strictly increasing from Medium to Critical."""
        if not (0 < self.medium_threshold < self.high_threshold < self.critical_threshold):
            raise ValueError(
                "Risk tier thresholds must satisfy "
                "0 < medium_threshold < high_threshold < critical_threshold"
            )
        return self

    @property
    def severity_weights(self) -> dict[str, int]:
        """Severity value to score weight."""
        return {
            "critical": self.critical_weight,
            "high": self.high_weight,
            "medium": self.medium_weight,
            "low": self.low_weight,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    settings = Settings()
    return settings
