"""
Evidence aggregation and verdict policy.

Scoring formula:
    eff(p)  = p.confidence if p.valid else 0
    overall = 0.5 * eff(registry) + 0.3 * eff(ledger) + 0.2 * analyzer.confidence

Verdict tiers (lower bound inclusive):
    overall >= 0.8  → SAFE
    overall >= 0.6  → CAUTION
    otherwise       → UNSAFE
"""

from dataclasses import dataclass

from pharmachain.models import AnalyzerResult, ProviderResult, Verdict


@dataclass(frozen=True)
class SourceWeights:
    """Fixed contribution of each evidence source. Sums to 1."""
    registry: float = 0.5
    ledger: float = 0.3
    analyzer: float = 0.2


WEIGHTS = SourceWeights()

SAFE_THRESHOLD = 0.8
CAUTION_THRESHOLD = 0.6


def aggregate(
    registry: ProviderResult,
    ledger: ProviderResult,
    analyzer: AnalyzerResult,
) -> float:
    """
    Combine provider and analyzer outputs into one confidence value.

    An invalid provider result contributes nothing, however confident the
    negative determination was.

    Returns:
        Weighted score in [0, 1]
    """
    return (
        WEIGHTS.registry * registry.effective_score
        + WEIGHTS.ledger * ledger.effective_score
        + WEIGHTS.analyzer * analyzer.confidence
    )


def aggregate_with_breakdown(
    registry: ProviderResult,
    ledger: ProviderResult,
    analyzer: AnalyzerResult,
) -> dict:
    """
    Aggregate and return the scoring components for explainability.

    Returns:
        Dict with per-source effective score, weight, contribution, and total
    """
    parts = {
        "registry": (registry.effective_score, WEIGHTS.registry),
        "ledger": (ledger.effective_score, WEIGHTS.ledger),
        "analyzer": (analyzer.confidence, WEIGHTS.analyzer),
    }
    components = {
        name: {"score": score, "weight": weight, "contribution": score * weight}
        for name, (score, weight) in parts.items()
    }
    overall = aggregate(registry, ledger, analyzer)
    return {
        "components": components,
        "overall_score": overall,
        "verdict": classify(overall).value,
    }


def classify(score: float) -> Verdict:
    """Map an aggregate score to its safety tier."""
    if score >= SAFE_THRESHOLD:
        return Verdict.SAFE
    if score >= CAUTION_THRESHOLD:
        return Verdict.CAUTION
    return Verdict.UNSAFE
