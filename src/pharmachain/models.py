"""
Result records exchanged between providers, scoring, and callers.

Provider and analyzer outputs are plain frozen dataclasses built fresh on every
call. Batch registration input is a pydantic model since it arrives as
untrusted JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pharmachain.errors import MalformedInput

REGISTRY = "registry"
LEDGER = "ledger"


class ResultSource(str, Enum):
    """Which path of a provider produced a result."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


class Verdict(str, Enum):
    """Tiered safety outcome, lowest to highest."""

    UNSAFE = "UNSAFE"
    CAUTION = "CAUTION"
    SAFE = "SAFE"

    @property
    def rank(self) -> int:
        return _VERDICT_RANK[self]

    @property
    def advice(self) -> str:
        """Consumer guidance for this tier."""
        return _VERDICT_ADVICE[self]


_VERDICT_RANK = {Verdict.UNSAFE: 0, Verdict.CAUTION: 1, Verdict.SAFE: 2}

_VERDICT_ADVICE = {
    Verdict.SAFE: "This medication appears to be authentic and safe",
    Verdict.CAUTION: "Verify with pharmacist before use",
    Verdict.UNSAFE: "Do not use this medication. It may be counterfeit or contaminated; contact your pharmacist",
}


@dataclass(frozen=True)
class ProviderResult:
    """Validity signal from one evidence provider."""

    valid: bool
    confidence: float
    source: ResultSource = ResultSource.PRIMARY
    reason: str | None = None
    manufacturer: str | None = None
    drug_name: str | None = None
    ndc_code: str | None = None
    on_chain: bool | None = None
    proof: Any = None  # opaque ledger artifact, never interpreted

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")

    @property
    def effective_score(self) -> float:
        """Positive evidence contributed to the aggregate (0 when invalid)."""
        return self.confidence if self.valid else 0.0

    def to_dict(self) -> dict:
        data = {
            "valid": self.valid,
            "confidence": self.confidence,
            "source": self.source.value,
            "reason": self.reason,
            "manufacturer": self.manufacturer,
            "drug_name": self.drug_name,
            "ndc_code": self.ndc_code,
            "on_chain": self.on_chain,
        }
        if self.proof is not None:
            data["proof"] = self.proof
        return data


@dataclass(frozen=True)
class AnalyzerResult:
    """Output of the lexical pattern analyzer."""

    confidence: float
    manufacturer: str = "Unknown"
    reasonings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")

    @property
    def score(self) -> int:
        """Confidence as a 0-100 integer."""
        return round(self.confidence * 100)

    def to_dict(self) -> dict:
        return {
            "confidence": self.confidence,
            "manufacturer": self.manufacturer,
            "reasonings": list(self.reasonings),
            "score": self.score,
        }


@dataclass(frozen=True)
class AggregateReport:
    """Everything known about one identifier after a verify() call."""

    identifier: str
    provider_results: Mapping[str, ProviderResult]
    analyzer_result: AnalyzerResult
    overall_score: float
    verdict: Verdict

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "provider_results", MappingProxyType(dict(self.provider_results))
        )

    @property
    def registry(self) -> ProviderResult:
        return self.provider_results[REGISTRY]

    @property
    def ledger(self) -> ProviderResult:
        return self.provider_results[LEDGER]

    @property
    def percent(self) -> int:
        return round(self.overall_score * 100)

    @property
    def safe(self) -> bool:
        return self.verdict is Verdict.SAFE

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "provider_results": {
                name: result.to_dict() for name, result in self.provider_results.items()
            },
            "analyzer_result": self.analyzer_result.to_dict(),
            "overall_score": self.overall_score,
            "verdict": self.verdict.value,
        }


@dataclass
class EngineState:
    """
    Initialization state owned by one engine instance.

    UNINITIALIZED until initialize() runs; READY afterwards, with
    ledger_connected telling full mode from degraded (fallback-only) mode.
    """

    ready: bool = False
    ledger_connected: bool = False

    @property
    def phase(self) -> str:
        return "READY" if self.ready else "UNINITIALIZED"

    @property
    def degraded(self) -> bool:
        return self.ready and not self.ledger_connected


@dataclass(frozen=True)
class LedgerAttestation:
    """Answer of the ledger's verify_drug_authenticity call."""

    authenticated: bool
    proof: Any = None


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a batch registration attempt."""

    success: bool
    batch_id: str | None = None
    transaction_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "batch_id": self.batch_id,
            "transaction_id": self.transaction_id,
            "error": self.error,
        }


def _epoch_millis(value: date) -> int:
    moment = datetime.combine(value, time.min, tzinfo=UTC)
    return int(moment.timestamp() * 1000)


class BatchInfo(BaseModel):
    """Manufacturer-supplied batch metadata for ledger registration."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    batch_id: str = Field(..., min_length=1, alias="batchId")
    drug_name: str = Field(..., min_length=1, alias="drugName")
    manufacturer: str = Field(..., min_length=1)
    ndc_code: str = Field(..., min_length=1, alias="ndcCode")
    manufacturing_date: date = Field(..., alias="manufacturingDate")
    expiry_date: date = Field(..., alias="expiryDate")
    quality_score: int = Field(default=100, ge=0, le=100, alias="qualityScore")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> BatchInfo:
        """
        Validate a raw payload.

        Raises:
            MalformedInput: if required fields are missing or ill-typed
        """
        if isinstance(payload, BatchInfo):
            return payload
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            fields = ", ".join(
                ".".join(str(p) for p in err["loc"]) or "payload" for err in exc.errors()
            )
            raise MalformedInput(f"invalid batch payload: {fields}") from exc

    def witness(self) -> dict[str, Any]:
        """Build the ledger witness; dates become epoch milliseconds (UTC)."""
        return {
            "batchId": self.batch_id,
            "manufacturer": self.manufacturer,
            "drugCode": self.ndc_code,
            "manufacturingDate": _epoch_millis(self.manufacturing_date),
            "expiryDate": _epoch_millis(self.expiry_date),
            "qualityScore": self.quality_score,
        }
