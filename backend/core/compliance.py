"""
Kanuni Compliance Module
========================
Evaluates the PPDA rule registry and the forensic analyzers against
document text.

Guardrails:
- Documents shorter than the minimum length produce no findings
- Text is truncated to a fixed prefix before evaluation
- Rule evaluation stops after the maximum number of violations
- Statistical analyzers only run on procurement-related text, except in
  fraud and audit modes
"""

import logging
import re

from core.config import UNGATED_MODES, AnalysisMode, Settings, get_settings
from core.findings import Finding, FindingSource
from core.forensics import (
    analyze_round_amounts,
    analyze_timelines,
    analyze_vendor_concentration,
    detect_single_sourcing,
    pricing_findings,
    red_flag_findings,
    scan_red_flag_terms,
    vendor_findings,
)
from core.regulations import PPDA_SECTIONS, RuleDefinition

logger = logging.getLogger(__name__)


PROCUREMENT_VOCABULARY = re.compile(r"procurement|tender|bid|contract", re.IGNORECASE)
RULE_CONFIDENCE = 0.95


class ComplianceChecker:
    """
    Runs rule-based and statistical checks over one document.

    Rules are evaluated sequentially in registry order so that the
    violation cap always keeps the same findings for the same text.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rules: tuple[RuleDefinition, ...] = PPDA_SECTIONS
    ):
        self.settings = settings or get_settings()
        self.rules = rules

    def prepare_text(self, text: str | None) -> str | None:
        """Truncated analysis text, or None when the document is too short."""
        if not text or len(text) < self.settings.min_document_length:
            logger.debug(
                f"Document below minimum length ({len(text or '')} < "
                f"{self.settings.min_document_length}), skipping checks"
            )
            return None
        return text[:self.settings.max_analysis_length]

    def evaluate_rules(self, text: str) -> list[Finding]:
        """Findings for every failing rule, up to the violation cap."""
        findings = []
        for rule in self.rules:
            if len(findings) >= self.settings.max_rule_violations:
                logger.debug(f"Violation cap reached before {rule.id}")
                break
            if rule.check(text):
                continue
            findings.append(Finding(
                severity=rule.severity,
                text=rule.violation,
                label=rule.title.upper(),
                confidence=RULE_CONFIDENCE,
                source=FindingSource.RULE_BASED,
                section=rule.id,
                recommendation=rule.recommendation
            ))
        return findings

    def run_forensic_analyzers(self, text: str, mode: AnalysisMode) -> list[Finding]:
        """Statistical findings, at most a fixed number per analyzer."""
        if mode not in UNGATED_MODES and not PROCUREMENT_VOCABULARY.search(text):
            logger.debug("Text is not procurement-related, skipping statistical analyzers")
            return []

        s = self.settings
        round_amounts = analyze_round_amounts(
            text,
            ratio_threshold=s.round_amount_ratio_threshold,
            z_threshold=s.z_score_threshold,
            unit=s.round_amount_unit
        )
        concentration = analyze_vendor_concentration(
            text,
            concentration_threshold=s.vendor_concentration_threshold,
            slicing_min_mentions=s.contract_slicing_min_mentions,
            slicing_ratio=s.contract_slicing_ratio
        )
        groups = [
            pricing_findings(
                round_amounts,
                ratio_threshold=s.round_amount_ratio_threshold,
                min_amounts=s.min_priced_amounts
            ),
            vendor_findings(concentration),
            detect_single_sourcing(text),
            red_flag_findings(scan_red_flag_terms(text)),
            analyze_timelines(
                text,
                min_days=s.min_tender_days,
                domestic_days=s.domestic_tender_days,
                international_days=s.international_tender_days
            ),
        ]

        findings = []
        for group in groups:
            findings.extend(group[:s.max_findings_per_analyzer])
        return findings

    def check(self, text: str | None, mode: AnalysisMode | str = AnalysisMode.PROCUREMENT) -> list[Finding]:
        """
        Check a document for PPDA compliance.

        Args:
            text: Plain text extracted from the document
            mode: Analysis mode

        Returns:
            Rule-based findings followed by statistical findings
        """
        mode = AnalysisMode(mode)
        limited = self.prepare_text(text)
        if limited is None:
            return []

        rule_findings = self.evaluate_rules(limited)
        statistical = self.run_forensic_analyzers(limited, mode)
        logger.info(
            f"[{mode.value}] {len(rule_findings)} rule violations, "
            f"{len(statistical)} statistical findings"
        )
        return (rule_findings + statistical)[:self.settings.max_findings]


def check_compliance(
    text: str | None,
    mode: AnalysisMode | str = AnalysisMode.PROCUREMENT,
    settings: Settings | None = None
) -> list[Finding]:
    """Module-level shortcut for ``ComplianceChecker(settings).check``."""
    return ComplianceChecker(settings).check(text, mode)
