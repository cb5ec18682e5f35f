"""
pharmachain: Pharmaceutical batch authenticity verification

Fuses three independent signals about a batch identifier into one trust score:

    Registry lookup (openFDA NDC) + Ledger attestation + Pattern analysis
        → weighted score → SAFE / CAUTION / UNSAFE

Core constraints:
- Every provider fails open toward a lower-confidence local fallback
- A report is always produced, even with every external service unreachable
- No proof construction or inspection (ledger proofs are carried opaquely)
"""

__version__ = "0.1.0"
