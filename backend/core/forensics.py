"""
Kanuni Forensics Module
=======================
Deterministic statistical and forensic analyzers over document text.

Analyzers:
- Z-score outlier detection over monetary amounts
- Round-amount ratio (Benford-style pricing anomaly)
- Vendor concentration and contract slicing
- Single-source procurement phrases
- High-risk keyword scanning
- Tender timeline plausibility

Every analyzer is a pure function returning a result payload; the
``*_findings`` helpers turn payloads into statistical Findings.
"""

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from core.config import (
    CONTRACT_SLICING_MIN_MENTIONS,
    CONTRACT_SLICING_RATIO,
    DOMESTIC_TENDER_DAYS,
    INTERNATIONAL_TENDER_DAYS,
    MIN_PRICED_AMOUNTS,
    MIN_TENDER_DAYS,
    ROUND_AMOUNT_RATIO_THRESHOLD,
    ROUND_AMOUNT_UNIT,
    VENDOR_CONCENTRATION_THRESHOLD,
    Z_SCORE_THRESHOLD,
)
from core.entities import find_amounts, find_vendor_mentions
from core.findings import Finding, FindingSource, Severity

logger = logging.getLogger(__name__)


CONTEXT_WINDOW = 50
MAX_FLAGGED_EXAMPLES = 5
TOP_VENDORS = 5

# Vocabulary that, shortly before a keyword in the same sentence, marks the
# mention as a definition or policy statement rather than evidence
DEFINITIONAL_CUE_PATTERN = re.compile(
    r"\b(?:prohibit(?:s|ed|ion)?|forbid(?:s|den)?|shall\s+not|must\s+not|will\s+not|"
    r"not\s+engage|definitions?|defined\s+as|policy\s+on|zero\s+tolerance)\b",
    re.IGNORECASE
)
# "<keyword> [word] is defined as / means / shall mean ..."
DEFINED_TERM_PATTERN = re.compile(
    r"\w{0,30}\s{0,3}(?:[A-Za-z-]{1,30}\s{1,3})?"
    r"(?:(?:is|are)\s+defined\s+as|means|shall\s+mean|refers\s+to)\b",
    re.IGNORECASE
)
# A transaction verb in the sentence makes the mention an allegation
ACTION_VERB_PATTERN = re.compile(
    r"\b(?:paid|pays|received|receives|offered|offers|demanded|demands|accepted|"
    r"solicited|gave|took|transferred|pocketed)\b",
    re.IGNORECASE
)
EVIDENCE_PATTERN = re.compile(
    r"found\s+guilty|investigat(?:ed|ion)|convict(?:ed|ion)|irregularit(?:y|ies)|"
    r"overpriced|evidence\s+of|allegation|whistle-?blow|audit\s+query",
    re.IGNORECASE
)
DEFINITION_LOOKBACK = 50
SENTENCE_WINDOW = 80
SENTENCE_BREAK = re.compile(r"[.;\n]")

RED_FLAG_TERMS = (
    "bribe",
    "kickback",
    "facilitation payment",
    "bearer cash",
    "under the table",
    "off the books",
    "consulting fee",
    "commission",
    "gift",
    "expedite",
)
CRITICAL_RED_FLAG_TERMS = frozenset({"bribe", "kickback", "bearer cash"})

SINGLE_SOURCE_PATTERNS = (
    re.compile(r"single\s+source", re.IGNORECASE),
    re.compile(r"sole\s+supplier", re.IGNORECASE),
    re.compile(r"exclusive\s+supplier", re.IGNORECASE),
    re.compile(r"only\s+vendor", re.IGNORECASE),
)

DAYS_PATTERN = re.compile(r"(?<!\d)(\d{1,6})\s{0,3}days?\b", re.IGNORECASE)
TENDER_VOCABULARY = re.compile(r"tender|bid|submission", re.IGNORECASE)


# === Definitional clause guard ===

def is_definitional_mention(text: str, start: int, end: int) -> bool:
    """
    Whether the match at ``start:end`` sits in a definition or policy statement.

    Only the sentence containing the match is considered. The mention is
    definitional when a cue such as "prohibits" or "shall not" appears
    shortly before it, or when it is the term being defined ("corrupt
    practice is defined as"). A transaction verb anywhere in the sentence
    ("paid", "received") overrides both.
    """
    before = SENTENCE_BREAK.split(text[max(0, start - SENTENCE_WINDOW):start])[-1]
    after = SENTENCE_BREAK.split(text[end:end + SENTENCE_WINDOW])[0]
    if ACTION_VERB_PATTERN.search(before + text[start:end] + after):
        return False
    if DEFINITIONAL_CUE_PATTERN.search(before[-DEFINITION_LOOKBACK:]):
        return True
    return DEFINED_TERM_PATTERN.match(after) is not None


def has_evidentiary_language(text: str) -> bool:
    return EVIDENCE_PATTERN.search(text) is not None


def flagged_outside_definitions(text: str, pattern: re.Pattern) -> bool:
    """
    Whether red-flag vocabulary indicates an actual concern.

    A mention outside any definitional clause is a concern on its own.
    When every mention is definitional ("this policy prohibits bribery"),
    the vocabulary only counts if evidentiary language is also present.
    """
    matches = list(pattern.finditer(text))
    if not matches:
        return False
    if any(not is_definitional_mention(text, m.start(), m.end()) for m in matches):
        return True
    return has_evidentiary_language(text)


# === Z-score outlier detection ===

@dataclass(frozen=True)
class ZScoreResult:
    """Z-score of a single value."""
    value: float
    z_score: float
    is_outlier: bool

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "zScore": self.z_score, "isOutlier": self.is_outlier}


def calculate_z_scores(
    values: list[float],
    threshold: float = Z_SCORE_THRESHOLD
) -> list[ZScoreResult]:
    """
    Population z-scores with outlier flags.

    A value is an outlier when ``|z| > threshold``. With population
    statistics no z-score can exceed ``sqrt(n - 1)``, so for samples of
    three or more values a threshold above that bound is clamped to it;
    this lets a lone deviating amount in a short document still be
    flagged. Zero variance never flags anything.
    """
    if len(values) < 2:
        return [ZScoreResult(value=v, z_score=0.0, is_outlier=False) for v in values]

    arr = np.asarray(values, dtype=float)
    mean = float(arr.mean())
    std_dev = float(arr.std())
    max_attainable = math.sqrt(len(values) - 1)
    clamp = len(values) >= 3 and threshold >= max_attainable

    results = []
    for v in values:
        z = 0.0 if std_dev == 0 else (v - mean) / std_dev
        if std_dev == 0:
            is_outlier = False
        elif clamp:
            is_outlier = abs(z) >= max_attainable - 1e-9
        else:
            is_outlier = abs(z) > threshold
        results.append(ZScoreResult(value=v, z_score=round(z, 2), is_outlier=is_outlier))
    return results


# === Round-amount analysis ===

@dataclass(frozen=True)
class RoundAmountAnalysis:
    """Round-number pricing analysis of one document."""
    total_amounts: int
    round_amounts: int
    suspicious_ratio: float
    is_suspicious: bool
    flagged_amounts: list[float] = field(default_factory=list)
    outliers: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalAmounts": self.total_amounts,
            "roundAmounts": self.round_amounts,
            "suspiciousRatio": round(self.suspicious_ratio, 4),
            "isSuspicious": self.is_suspicious,
            "flaggedAmounts": self.flagged_amounts,
            "outliers": self.outliers
        }


def analyze_round_amounts(
    text: str,
    ratio_threshold: float = ROUND_AMOUNT_RATIO_THRESHOLD,
    z_threshold: float = Z_SCORE_THRESHOLD,
    unit: int = ROUND_AMOUNT_UNIT
) -> RoundAmountAnalysis:
    """Share of suspiciously round amounts, combined with outlier detection."""
    amounts = find_amounts(text)
    round_amounts = [a for a in amounts if a >= unit and a % unit == 0]
    ratio = len(round_amounts) / len(amounts) if amounts else 0.0
    outliers = [r.value for r in calculate_z_scores(amounts, z_threshold) if r.is_outlier]

    return RoundAmountAnalysis(
        total_amounts=len(amounts),
        round_amounts=len(round_amounts),
        suspicious_ratio=ratio,
        is_suspicious=ratio > ratio_threshold or len(outliers) > 0,
        flagged_amounts=round_amounts[:MAX_FLAGGED_EXAMPLES],
        outliers=outliers
    )


def _format_amounts(amounts: list[float]) -> str:
    return ", ".join(f"{a:,.0f}" if a == int(a) else f"{a:,.2f}" for a in amounts)


def pricing_findings(
    analysis: RoundAmountAnalysis,
    ratio_threshold: float = ROUND_AMOUNT_RATIO_THRESHOLD,
    min_amounts: int = MIN_PRICED_AMOUNTS
) -> list[Finding]:
    """Findings for round-number pricing and price outliers."""
    if analysis.total_amounts < min_amounts:
        return []

    findings = []
    if analysis.suspicious_ratio > ratio_threshold:
        findings.append(Finding(
            severity=Severity.HIGH,
            text=(
                f"{analysis.suspicious_ratio:.0%} of quoted amounts are round thousands "
                f"(e.g. {_format_amounts(analysis.flagged_amounts)}), which may indicate "
                "price manipulation"
            ),
            label="PRICING ANOMALY",
            confidence=0.85,
            source=FindingSource.STATISTICAL,
            section="Section 54",
            recommendation="Review pricing structure for market competitiveness and authenticity"
        ))
    if analysis.outliers:
        findings.append(Finding(
            severity=Severity.MEDIUM,
            text=(
                f"Price outliers detected: {len(analysis.outliers)} amount(s) significantly "
                f"deviate from average ({_format_amounts(analysis.outliers)})"
            ),
            label="PRICE VARIANCE",
            confidence=0.78,
            source=FindingSource.STATISTICAL,
            section="Section 54",
            recommendation="Investigate price outliers for potential inflation or errors"
        ))
    return findings


# === Vendor concentration ===

@dataclass(frozen=True)
class VendorConcentration:
    """Vendor mention concentration of one document."""
    total_mentions: int
    top_vendors: list[tuple[str, int]]
    concentration_ratio: float
    concentration_risk: bool
    alerts: list[str] = field(default_factory=list)

    @property
    def contract_slicing(self) -> bool:
        return len(self.alerts) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalMentions": self.total_mentions,
            "topVendors": [{"name": n, "count": c} for n, c in self.top_vendors],
            "concentrationRatio": round(self.concentration_ratio, 4),
            "concentrationRisk": self.concentration_risk,
            "alerts": self.alerts
        }


def analyze_vendor_concentration(
    text: str,
    concentration_threshold: float = VENDOR_CONCENTRATION_THRESHOLD,
    slicing_min_mentions: int = CONTRACT_SLICING_MIN_MENTIONS,
    slicing_ratio: float = CONTRACT_SLICING_RATIO
) -> VendorConcentration:
    """
    Share of vendor mentions held by the most-mentioned vendor.

    Ties between equally mentioned vendors resolve to the one mentioned
    first.
    """
    mentions = find_vendor_mentions(text)
    # Counter preserves first-insertion order and most_common is stable
    top_vendors = Counter(mentions).most_common(TOP_VENDORS)
    total = len(mentions)
    ratio = top_vendors[0][1] / total if total else 0.0

    alerts = []
    if total > slicing_min_mentions and ratio > slicing_ratio:
        top_name, top_count = top_vendors[0]
        alerts.append(
            f"Possible contract slicing: {top_name} accounts for {top_count} of "
            f"{total} vendor mentions ({ratio:.0%})"
        )

    return VendorConcentration(
        total_mentions=total,
        top_vendors=top_vendors,
        concentration_ratio=ratio,
        concentration_risk=ratio > concentration_threshold,
        alerts=alerts
    )


def vendor_findings(analysis: VendorConcentration) -> list[Finding]:
    """Concentration and contract-slicing findings, kept separate."""
    findings = []
    if analysis.concentration_risk:
        top_name, top_count = analysis.top_vendors[0]
        findings.append(Finding(
            severity=Severity.HIGH,
            text=(
                f"Vendor concentration: {top_name} accounts for "
                f"{analysis.concentration_ratio:.0%} of {analysis.total_mentions} vendor mentions"
            ),
            label="VENDOR CONCENTRATION",
            confidence=0.82,
            source=FindingSource.STATISTICAL,
            section="Section 91",
            recommendation="Broaden the supplier base through open competitive tendering"
        ))
    for alert in analysis.alerts:
        findings.append(Finding(
            severity=Severity.CRITICAL,
            text=alert,
            label="CONTRACT SLICING",
            confidence=0.75,
            source=FindingSource.STATISTICAL,
            section="Section 54",
            recommendation=(
                "Consolidate related procurements from the same vendor and apply the "
                "procurement method required for the combined value"
            )
        ))
    return findings


def detect_single_sourcing(text: str) -> list[Finding]:
    """Single-source procurement phrases, reported once."""
    for pattern in SINGLE_SOURCE_PATTERNS:
        if pattern.search(text):
            return [Finding(
                severity=Severity.HIGH,
                text="Single source procurement detected without competitive bidding",
                label="VENDOR CONCENTRATION",
                confidence=0.90,
                source=FindingSource.STATISTICAL,
                section="Section 91",
                recommendation="Justify single source procurement or conduct open competitive bidding"
            )]
    return []


# === High-risk keyword scanning ===

@dataclass(frozen=True)
class RedFlagHit:
    """First occurrence of a red-flag term."""
    term: str
    severity: Severity
    context: str

    def to_dict(self) -> dict[str, Any]:
        return {"term": self.term, "severity": self.severity.value, "context": self.context}


def scan_red_flag_terms(text: str, terms: tuple[str, ...] = RED_FLAG_TERMS) -> list[RedFlagHit]:
    """
    Case-insensitive substring scan for red-flag terms.

    Each term is reported once, with a context window around its first
    occurrence. Terms that only appear inside definitional clauses are
    skipped unless the document also carries evidentiary language.
    """
    hits = []
    evidence = has_evidentiary_language(text)
    for term in terms:
        pattern = re.compile(re.escape(term), re.IGNORECASE)
        matches = list(pattern.finditer(text))
        if not matches:
            continue
        if not evidence and all(is_definitional_mention(text, m.start(), m.end()) for m in matches):
            logger.debug(f"Red-flag term '{term}' only appears in definitional clauses")
            continue
        first = matches[0]
        context = text[max(0, first.start() - CONTEXT_WINDOW):first.end() + CONTEXT_WINDOW]
        hits.append(RedFlagHit(
            term=term,
            severity=Severity.CRITICAL if term in CRITICAL_RED_FLAG_TERMS else Severity.HIGH,
            context=" ".join(context.split())
        ))
    return hits


def red_flag_findings(hits: list[RedFlagHit]) -> list[Finding]:
    return [
        Finding(
            severity=hit.severity,
            text=f'High-risk term "{hit.term}" found: "...{hit.context}..."',
            label="RED FLAG TERM",
            confidence=0.80,
            source=FindingSource.STATISTICAL,
            section="Section 66",
            recommendation=f'Review the passage mentioning "{hit.term}" and document its justification'
        )
        for hit in hits
    ]


# === Timeline analysis ===

def analyze_timelines(
    text: str,
    min_days: int = MIN_TENDER_DAYS,
    domestic_days: int = DOMESTIC_TENDER_DAYS,
    international_days: int = INTERNATIONAL_TENDER_DAYS
) -> list[Finding]:
    """Flag tender periods shorter than ``min_days``."""
    findings = []
    for match in DAYS_PATTERN.finditer(text):
        days = int(match.group(1))
        if days >= min_days:
            continue
        window = text[max(0, match.start() - CONTEXT_WINDOW):match.start() + CONTEXT_WINDOW]
        if TENDER_VOCABULARY.search(window):
            findings.append(Finding(
                severity=Severity.MEDIUM,
                text=f"Tender period of {days} days may be insufficient for competitive bidding",
                label="TIMELINE CONCERN",
                confidence=0.75,
                source=FindingSource.STATISTICAL,
                section="Section 97",
                recommendation=(
                    f"Ensure adequate time for tender preparation (minimum {domestic_days} days "
                    f"for domestic, {international_days} days for international)"
                )
            ))
    return findings
