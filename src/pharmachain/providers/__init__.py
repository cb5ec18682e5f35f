"""Evidence providers - registry lookup and ledger attestation."""

from pharmachain.providers.base import EvidenceProvider
from pharmachain.providers.ledger import LedgerClient, LedgerProvider
from pharmachain.providers.registry import RegistryProvider, extract_ndc

__all__ = [
    "EvidenceProvider",
    "LedgerClient",
    "LedgerProvider",
    "RegistryProvider",
    "extract_ndc",
]
