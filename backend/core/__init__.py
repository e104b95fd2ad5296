"""
Kanuni Core Module
==================
Core business logic for procurement document risk analysis.

Modules:
- entities: Amount, date, invoice, e-mail and vendor extraction
- forensics: Statistical and forensic analyzers
- regulations: PPDA rule registry
- compliance: Rule evaluation and analyzer orchestration
- risk_engine: Risk scoring and tiering
- analysis: End-to-end analysis pipeline
- config: Application configuration
"""

from core.analysis import analyze_document, build_opinion_context
from core.compliance import ComplianceChecker, check_compliance
from core.config import AnalysisMode, Settings, get_settings
from core.entities import DocumentEntities, extract_entities
from core.findings import Finding, FindingSource, Severity
from core.forensics import (
    RoundAmountAnalysis,
    VendorConcentration,
    ZScoreResult,
    analyze_round_amounts,
    analyze_timelines,
    analyze_vendor_concentration,
    calculate_z_scores,
    scan_red_flag_terms,
)
from core.regulations import PPDA_SECTIONS, RuleDefinition, get_rule
from core.risk_engine import RiskAssessment, RiskEngine, RiskLevel

__all__ = [
    # Pipeline
    "analyze_document",
    "build_opinion_context",
    # Compliance
    "ComplianceChecker",
    "check_compliance",
    # Findings
    "Finding",
    "FindingSource",
    "Severity",
    # Entities
    "DocumentEntities",
    "extract_entities",
    # Forensics
    "ZScoreResult",
    "RoundAmountAnalysis",
    "VendorConcentration",
    "calculate_z_scores",
    "analyze_round_amounts",
    "analyze_vendor_concentration",
    "scan_red_flag_terms",
    "analyze_timelines",
    # Regulations
    "RuleDefinition",
    "PPDA_SECTIONS",
    "get_rule",
    # Risk Engine
    "RiskEngine",
    "RiskAssessment",
    "RiskLevel",
    # Config
    "AnalysisMode",
    "Settings",
    "get_settings",
]
