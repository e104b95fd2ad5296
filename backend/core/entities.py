"""
Kanuni Entity Extractor Module
==============================
Pulls monetary amounts, dates, invoice numbers, e-mail addresses and
vendor mentions out of raw document text.

All patterns use bounded repetition so that adversarial input cannot
trigger catastrophic backtracking.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


CURRENCY_TOKEN = r"(?:KES|Ksh|USD|\$|€|£)"

# Either comma-grouped digits or a plain digit run of at most 15 digits, with
# an optional two-digit fraction. Longer digit runs and other fractions
# ("1234.567") are rejected, not truncated.
AMOUNT_PATTERN = re.compile(
    rf"(?:{CURRENCY_TOKEN}\s?)?(?<![\d.,])(\d{{1,3}}(?:,\d{{3}})+|\d{{1,15}})(\.\d{{2}})?(?!\d)(?![.,]\d)"
)
DATE_PATTERN = re.compile(r"(?<!\d)\d{1,2}[/-]\d{1,2}[/-](?:\d{4}|\d{2})(?!\d)")
INVOICE_PATTERN = re.compile(r"INV-?\d{3,20}", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"[\w.-]{1,64}@[\w.-]{1,255}\.\w{1,24}")

VENDOR_KEYWORD = r"(?i:vendor|supplier|contractor)"
COMPANY_SUFFIX = r"(?:Ltd|Limited|Inc|LLC|PLC|Corp|Co)"

# Keyword is case-insensitive; the name must be capitalized. A name stops
# at a company suffix and never runs into the next vendor keyword.
VENDOR_PATTERN = re.compile(
    rf"\b{VENDOR_KEYWORD}[:\s]{{1,5}}"
    rf"((?!{VENDOR_KEYWORD}\b)[A-Z][A-Za-z0-9&'-]{{0,40}}"
    rf"(?:[ \t](?!{VENDOR_KEYWORD}\b)(?!{COMPANY_SUFFIX}\b)[A-Z][A-Za-z0-9&'-]{{0,40}}){{0,3}}"
    rf"(?:[ \t]{COMPANY_SUFFIX}\b\.?)?)"
)


def _unique(items: list[str]) -> list[str]:
    """De-duplicate preserving first-appearance order."""
    return list(dict.fromkeys(items))


def _parse_amount(digits: str, fraction: str | None) -> float:
    return float(digits.replace(",", "") + (fraction or ""))


def find_amounts(text: str) -> list[float]:
    """Every monetary amount in the text, in order, with repetitions."""
    if not text:
        return []
    return [
        _parse_amount(m.group(1), m.group(2))
        for m in AMOUNT_PATTERN.finditer(text)
    ]


def find_vendor_mentions(text: str) -> list[str]:
    """Every vendor/supplier/contractor name mention, with repetitions."""
    if not text:
        return []
    return [m.group(1).rstrip(".").strip() for m in VENDOR_PATTERN.finditer(text)]


@dataclass(frozen=True)
class DocumentEntities:
    """Artifacts extracted from one document's text."""
    amounts: list[str] = field(default_factory=list)
    dates: list[str] = field(default_factory=list)
    invoice_numbers: list[str] = field(default_factory=list)
    emails: list[str] = field(default_factory=list)
    vendor_mentions: dict[str, int] = field(default_factory=dict)

    @property
    def has_invoice_numbers(self) -> bool:
        return len(self.invoice_numbers) > 0

    @property
    def has_dates(self) -> bool:
        return len(self.dates) > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "amounts": self.amounts,
            "dates": self.dates,
            "invoice_numbers": self.invoice_numbers,
            "emails": self.emails,
            "vendor_mentions": self.vendor_mentions,
            "has_invoice_numbers": self.has_invoice_numbers,
            "has_dates": self.has_dates
        }


def extract_entities(text: str | None) -> DocumentEntities:
    """
    Extract key entities from document text.

    Never raises: empty or missing text yields empty collections.
    Every collection is de-duplicated by exact, case-sensitive match
    and keeps first-appearance order.
    """
    if not text:
        return DocumentEntities()

    amounts = [m.group(0).strip() for m in AMOUNT_PATTERN.finditer(text)]
    vendors = Counter(find_vendor_mentions(text))

    entities = DocumentEntities(
        amounts=_unique(amounts),
        dates=_unique(DATE_PATTERN.findall(text)),
        invoice_numbers=_unique(INVOICE_PATTERN.findall(text)),
        emails=_unique(EMAIL_PATTERN.findall(text)),
        vendor_mentions=dict(vendors)
    )
    logger.debug(
        f"Extracted {len(entities.amounts)} amounts, {len(entities.dates)} dates, "
        f"{len(entities.invoice_numbers)} invoice numbers, {len(entities.emails)} emails"
    )
    return entities
