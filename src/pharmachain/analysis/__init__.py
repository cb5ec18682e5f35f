"""
Heuristic analysis of batch identifiers.

Lexical checks only; no registry or ledger access.
"""

from pharmachain.analysis.patterns import (
    MANUFACTURER_FAMILIES,
    SUSPICIOUS_PATTERNS,
    ManufacturerFamily,
    analyze,
    is_suspicious,
    match_manufacturer,
)

__all__ = [
    "MANUFACTURER_FAMILIES",
    "SUSPICIOUS_PATTERNS",
    "ManufacturerFamily",
    "analyze",
    "is_suspicious",
    "match_manufacturer",
]
