"""
Batch identifier pattern analysis.

Scores an identifier against known manufacturer NDC labeler prefixes and
known counterfeit markers. Pure and deterministic: no I/O, no state.

Scoring:
    start                          0.5
    manufacturer family match     +0.3   (first family wins)
    suspicious pattern match      -0.4   (first pattern wins)
    length within [8, 15]         +0.1
    letters and digits present    +0.1
    NDC hyphen structure          +0.2
    result clamped to [0, 1]
"""

import re
from dataclasses import dataclass

from pharmachain.models import AnalyzerResult

BASE_CONFIDENCE = 0.5
MANUFACTURER_BONUS = 0.3
SUSPICIOUS_PENALTY = 0.4
LENGTH_BONUS = 0.1
COMPOSITION_BONUS = 0.1
STRUCTURE_BONUS = 0.2

MIN_LENGTH = 8
MAX_LENGTH = 15

UNKNOWN_MANUFACTURER = "Unknown"


@dataclass(frozen=True)
class ManufacturerFamily:
    """Labeler codes registered to one manufacturer."""
    name: str
    pattern: re.Pattern


def _family(name: str, labelers: tuple[str, ...]) -> ManufacturerFamily:
    codes = "|".join(labelers)
    return ManufacturerFamily(name, re.compile(rf"^({codes})-\d{{3}}-\d{{2}}$"))


# Evaluated in order; first match wins
MANUFACTURER_FAMILIES: tuple[ManufacturerFamily, ...] = (
    _family("Pfizer", ("68180", "00069", "00071", "00525")),
    _family("Johnson", ("50458", "12830", "57894")),
    _family("Merck", ("00006", "00056", "54569")),
    _family("Novartis", ("00078", "00083", "00363")),
    _family("Roche", ("50242", "00004", "76439")),
)

# Evaluated in order; first match wins
SUSPICIOUS_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"^FAKE", re.IGNORECASE),
    re.compile(r"^TEST", re.IGNORECASE),
    re.compile(r"^DEMO", re.IGNORECASE),
    re.compile(r"^COUNTERFEIT", re.IGNORECASE),
    re.compile(r"^[0-9]{20,}$"),  # implausibly long digit run
    re.compile(r"^[A-Z]{10,}$"),  # letters only
    re.compile(r"\s"),
)

NDC_STRUCTURE = re.compile(r"^\d{4,5}-\d{3,4}-\d{1,2}$")

_HAS_LETTER = re.compile(r"[A-Za-z]")
_HAS_DIGIT = re.compile(r"[0-9]")


def match_manufacturer(identifier: str) -> str | None:
    """Return the canonical manufacturer name for the first matching family."""
    for family in MANUFACTURER_FAMILIES:
        if family.pattern.search(identifier):
            return family.name
    return None


def is_suspicious(identifier: str) -> bool:
    """True if any known counterfeit marker appears in the identifier."""
    return any(p.search(identifier) for p in SUSPICIOUS_PATTERNS)


def analyze(identifier: str) -> AnalyzerResult:
    """
    Score a batch identifier by its lexical shape.

    Args:
        identifier: Raw batch or product code

    Returns:
        AnalyzerResult with clamped confidence and ordered reasonings
    """
    confidence = BASE_CONFIDENCE
    manufacturer = UNKNOWN_MANUFACTURER
    reasonings: list[str] = []

    matched = match_manufacturer(identifier)
    if matched:
        confidence += MANUFACTURER_BONUS
        manufacturer = matched
        reasonings.append(f"Matches {matched} NDC pattern")

    if is_suspicious(identifier):
        confidence -= SUSPICIOUS_PENALTY
        reasonings.append("Contains suspicious pattern")

    if MIN_LENGTH <= len(identifier) <= MAX_LENGTH:
        confidence += LENGTH_BONUS
        reasonings.append("Appropriate batch ID length")
    else:
        reasonings.append("Unusual batch ID length")

    if _HAS_LETTER.search(identifier) and _HAS_DIGIT.search(identifier):
        confidence += COMPOSITION_BONUS
        reasonings.append("Good character composition")

    if NDC_STRUCTURE.search(identifier):
        confidence += STRUCTURE_BONUS
        reasonings.append("Follows NDC hyphen structure")

    confidence = max(0.0, min(1.0, confidence))

    return AnalyzerResult(
        confidence=confidence,
        manufacturer=manufacturer,
        reasonings=tuple(reasonings),
    )
