"""
Kanuni Regulations Module
=========================
Rule registry for the Public Procurement and Asset Disposal Act No. 33
of 2015 (Kenya).

Each provision is a RuleDefinition whose ``check`` returns True when the
document satisfies the requirement and False when a finding should be
raised. The registry is an immutable tuple evaluated in declaration
order.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from core.findings import Severity
from core.forensics import flagged_outside_definitions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleDefinition:
    """A single regulatory provision and its compliance heuristic."""
    id: str
    title: str
    keywords: tuple[str, ...]
    severity: Severity
    violation: str
    recommendation: str
    check: Callable[[str], bool]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "keywords": list(self.keywords),
            "severity": self.severity.value,
            "violation": self.violation,
            "recommendation": self.recommendation
        }


def _has(pattern: str, text: str) -> bool:
    return re.search(pattern, text, re.IGNORECASE) is not None


# === Section checks ===

def _check_planning(text: str) -> bool:
    return _has(r"procurement\s+plan", text) and _has(r"budget", text)


SPLITTING_PATTERN = re.compile(
    r"\bsplit(?:ting)?\b|divid(?:e|ing)\s+(?:the\s+)?(?:contract|procurement)",
    re.IGNORECASE
)


def _check_no_splitting(text: str) -> bool:
    return not flagged_outside_definitions(text, SPLITTING_PATTERN)


def _check_officer_disclosure(text: str) -> bool:
    # A state or public officer may only be involved with a disclosure
    return not _has(r"(?:state|public)\s+officer", text) or _has(r"disclos(?:e|ure)", text)


TENDER_SECURITY_PERCENT = re.compile(
    r"(?:tender\s+security|bid\s+bond)[^%]{0,100}?(\d{1,3}(?:\.\d{1,2})?)\s{0,2}%",
    re.IGNORECASE
)
MAX_TENDER_SECURITY_PERCENT = 2.0


def _check_tender_security(text: str) -> bool:
    # Only percentages quoted near "tender security" are considered
    match = TENDER_SECURITY_PERCENT.search(text)
    if match is None:
        return True
    return float(match.group(1)) <= MAX_TENDER_SECURITY_PERCENT


CORRUPT_PRACTICE_PATTERN = re.compile(
    r"corrupt|brib|kickback|collusi|collude|fraud|coerci",
    re.IGNORECASE
)


def _check_corrupt_practices(text: str) -> bool:
    return not flagged_outside_definitions(text, CORRUPT_PRACTICE_PATTERN)


def _check_tender_opening(text: str) -> bool:
    if not _has(r"tender\s+opening|opening\s+(?:of\s+)?(?:tender|bid)", text):
        return True
    return _has(r"immediate(?:ly)?|forthwith", text) or _has(r"public|attend(?:ance)?", text)


def _check_evaluation_criteria(text: str) -> bool:
    if not _has(r"evaluat(?:ion|e)", text):
        return True
    return _has(r"criteria|criterion", text)


def _check_award_basis(text: str) -> bool:
    if not _has(r"\baward|successful", text):
        return True
    return _has(
        r"lowest\s+(?:evaluated\s+)?price|highest\s+(?:technical\s+)?score|lowest\s+total\s+cost",
        text
    )


def _check_procurement_method(text: str) -> bool:
    if not _has(r"restricted\s+tender|direct\s+procurement", text):
        return True
    return _has(r"justif(?:y|ied|ication)|reason|emergency|urgent", text)


BID_RIGGING_PATTERN = re.compile(
    r"bid\s+rig|cartel|price\s+fix|market\s+shar(?:e|ing)|anti-competitive",
    re.IGNORECASE
)


def _check_bid_rigging(text: str) -> bool:
    return not flagged_outside_definitions(text, BID_RIGGING_PATTERN)


def _check_written_contract(text: str) -> bool:
    if not _has(r"contract", text):
        return True
    return _has(r"written|sign(?:ed)?|document", text)


PERFORMANCE_SECURITY_TERMS = re.compile(r"performance\s+(?:security|bond)", re.IGNORECASE)
PERFORMANCE_SECURITY_AMOUNT = re.compile(
    r"performance\s+(?:security|bond)[^.]{0,100}?(?:\d\s{0,2}%|percent|KES|Ksh|USD|\$|\d{1,3},\d{3})",
    re.IGNORECASE
)


def _check_performance_security(text: str) -> bool:
    # A performance security that is mentioned must state its amount
    if PERFORMANCE_SECURITY_TERMS.search(text) is None:
        return True
    return PERFORMANCE_SECURITY_AMOUNT.search(text) is not None


def _check_preferences(text: str) -> bool:
    if not _has(r"preference|reserv(?:e|ation)", text):
        return True
    return _has(r"women|youth|disabilit", text) or _has(r"30\s*%|thirty\s+percent", text)


# === Registry ===

PPDA_SECTIONS: tuple[RuleDefinition, ...] = (
    # PART VI - GENERAL PROCUREMENT PRINCIPLES
    RuleDefinition(
        id="Section 53",
        title="Procurement and Asset Disposal Planning",
        keywords=("procurement plan", "annual plan", "budget", "planning"),
        severity=Severity.HIGH,
        violation="Procurement planning documentation missing or incomplete",
        recommendation=(
            "Ensure annual procurement plan is prepared and approved before "
            "commencement of financial year as per Section 53(2)"
        ),
        check=_check_planning
    ),
    RuleDefinition(
        id="Section 54",
        title="Procurement Pricing and Requirement Not to Split Contracts",
        keywords=("split", "contract splitting", "market price", "inflated"),
        severity=Severity.HIGH,
        violation="Evidence of contract splitting to avoid procurement procedures",
        recommendation=(
            "Consolidate related procurements to comply with Section 54(1) "
            "prohibition on contract splitting"
        ),
        check=_check_no_splitting
    ),
    RuleDefinition(
        id="Section 59",
        title="Limitation on Contracts with State and Public Officers",
        keywords=("state officer", "public officer", "conflict", "interest", "disclosure"),
        severity=Severity.CRITICAL,
        violation="Potential conflict of interest - state/public officer involvement without disclosure",
        recommendation=(
            "Ensure compliance with Section 59: No contracts with state officers "
            "unless disclosed and approved"
        ),
        check=_check_officer_disclosure
    ),
    RuleDefinition(
        id="Section 61",
        title="Tender Security",
        keywords=("tender security", "bid bond", "guarantee", "2%", "two percent"),
        severity=Severity.HIGH,
        violation="Tender security exceeds 2% of tender value",
        recommendation="Reduce tender security to maximum 2% as per Section 61(2)(c)",
        check=_check_tender_security
    ),
    RuleDefinition(
        id="Section 66",
        title="Corrupt, Coercive, Obstructive, Collusive or Fraudulent Practice",
        keywords=("corrupt", "bribe", "kickback", "collusion", "fraud", "coercion"),
        severity=Severity.CRITICAL,
        violation="Evidence of corrupt, collusive, or fraudulent practices",
        recommendation=(
            "Report to relevant authorities immediately. Section 66 prohibits all "
            "corrupt practices"
        ),
        check=_check_corrupt_practices
    ),
    # PART IX - METHODS OF PROCUREMENT
    RuleDefinition(
        id="Section 78",
        title="Opening of Tenders",
        keywords=("tender opening", "opening committee", "immediately", "deadline", "public"),
        severity=Severity.HIGH,
        violation="Tender opening procedures do not comply with transparency requirements",
        recommendation=(
            "Ensure tenders are opened immediately after deadline with public "
            "attendance allowed (Section 78)"
        ),
        check=_check_tender_opening
    ),
    RuleDefinition(
        id="Section 80",
        title="Evaluation of Tenders",
        keywords=("evaluation", "criteria", "objective", "quantifiable", "price", "quality"),
        severity=Severity.HIGH,
        violation="Evaluation criteria not clearly defined or disclosed",
        recommendation="Define objective and quantifiable evaluation criteria as per Section 80(3)",
        check=_check_evaluation_criteria
    ),
    RuleDefinition(
        id="Section 86",
        title="Successful Tender",
        keywords=("lowest price", "highest score", "total cost", "award"),
        severity=Severity.HIGH,
        violation="Award criteria does not comply with Section 86 requirements",
        recommendation=(
            "Award must be based on: lowest evaluated price, highest score, or "
            "lowest total cost of ownership"
        ),
        check=_check_award_basis
    ),
    RuleDefinition(
        id="Section 91",
        title="Choice of Procurement Procedure",
        keywords=("open tender", "competitive", "restricted", "direct procurement"),
        severity=Severity.HIGH,
        violation="Alternative procurement method used without proper justification",
        recommendation=(
            "Open tendering is preferred. Justify use of alternative methods as per Section 91"
        ),
        check=_check_procurement_method
    ),
    RuleDefinition(
        id="Section 93",
        title="Bid Rigging and Anti-Competitive Practices",
        keywords=("bid rigging", "cartel", "price fixing", "market sharing", "anti-competitive"),
        severity=Severity.CRITICAL,
        violation="Evidence of bid rigging or anti-competitive practices",
        recommendation=(
            "Section 93 prohibits bid rigging. Report to Competition Authority of Kenya immediately"
        ),
        check=_check_bid_rigging
    ),
    # PART X - CONTRACT MANAGEMENT
    RuleDefinition(
        id="Section 135",
        title="Creation of Procurement Contracts",
        keywords=("written contract", "signed", "contract document"),
        severity=Severity.HIGH,
        violation="Contract not properly documented in writing",
        recommendation="All procurement contracts must be in writing and signed (Section 135)",
        check=_check_written_contract
    ),
    RuleDefinition(
        id="Section 142",
        title="Performance Security",
        keywords=("performance security", "performance bond", "guarantee"),
        severity=Severity.MEDIUM,
        violation="Performance security requirements not clearly specified",
        recommendation="Specify performance security requirements as per Section 142",
        check=_check_performance_security
    ),
    # PART XII - PREFERENCES AND RESERVATIONS
    RuleDefinition(
        id="Section 155",
        title="Preferences and Reservations",
        keywords=("preference", "reservation", "women", "youth", "disability", "30%", "thirty percent"),
        severity=Severity.MEDIUM,
        violation="Preference and reservation schemes not properly implemented",
        recommendation=(
            "Reserve minimum 30% for women, youth, and persons with disabilities (Section 155)"
        ),
        check=_check_preferences
    ),
)


def get_rule(rule_id: str) -> RuleDefinition | None:
    """Look up a rule by its section identifier, e.g. ``"Section 66"``."""
    normalized = " ".join(rule_id.split()).lower()
    for rule in PPDA_SECTIONS:
        if rule.id.lower() == normalized:
            return rule
    return None
