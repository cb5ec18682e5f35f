"""
Ledger access and the ledger authenticity provider.

LedgerClient speaks JSON-RPC 2.0 to a ledger node hosting the batch
verification contract. Proof artifacts returned by the contract are carried
through untouched.

LedgerProvider only attempts the ledger when its engine is READY with a
connected ledger; otherwise, or on any ledger failure, it checks a static
set of registered batch markers.
"""

import itertools
import time
from typing import Any

import httpx

from pharmachain.config import settings
from pharmachain.errors import TransportError
from pharmachain.log import get_logger
from pharmachain.models import LEDGER, EngineState, LedgerAttestation, ProviderResult, ResultSource
from pharmachain.providers.base import EvidenceProvider

logger = get_logger(__name__)

AUTHENTIC_CONFIDENCE = 0.95
NOT_AUTHENTIC_CONFIDENCE = 0.1
FALLBACK_MATCH_CONFIDENCE = 0.6
FALLBACK_MISS_CONFIDENCE = 0.2

# Batch markers known to be registered on the ledger
REGISTERED_BATCHES: tuple[str, ...] = (
    "PFIZER_2025",
    "JOHNSON_2025",
    "MERCK_2025",
    "68180-518",
)


class LedgerClient:
    """JSON-RPC client for the batch verification contract."""

    def __init__(
        self,
        rpc_url: str | None = None,
        contract_address: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.rpc_url = rpc_url or settings.ledger_rpc_url
        self.contract_address = contract_address or settings.contract_address
        self.timeout = timeout if timeout is not None else settings.ledger_timeout
        self._client = client
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: dict[str, Any]) -> Any:
        """
        Invoke a contract method.

        Raises:
            TransportError: on network failure, HTTP error, or RPC error member
        """
        if not self.contract_address:
            raise TransportError("no contract address configured")

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": {"contract": self.contract_address, **params},
        }
        try:
            if self._client is not None:
                response = await self._client.post(self.rpc_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(f"ledger {method} failed: {e}") from e

        if not isinstance(data, dict):
            raise TransportError(f"ledger {method}: malformed response")
        if data.get("error"):
            raise TransportError(f"ledger {method} RPC error: {data['error']}")
        if "result" not in data:
            raise TransportError(f"ledger {method}: missing result")
        return data["result"]

    async def connect(self) -> None:
        """Probe the contract; raises TransportError if it cannot be reached."""
        await self._call("contract_status", {})

    async def verify_authenticity(self, identifier: str) -> LedgerAttestation:
        """Ask the contract whether a batch is registered as authentic."""
        witness = {"batchId": identifier, "timestamp": int(time.time() * 1000)}
        result = await self._call("verify_drug_authenticity", {"witness": witness})
        if not isinstance(result, dict) or not isinstance(result.get("authenticated"), bool):
            raise TransportError("ledger verify_drug_authenticity: malformed result")
        return LedgerAttestation(authenticated=result["authenticated"], proof=result.get("proof"))

    async def register_batch(self, witness: dict[str, Any]) -> str:
        """Submit a batch witness; returns the transaction id."""
        result = await self._call("register_drug_batch", {"witness": witness})
        tx_id = result.get("transactionId") if isinstance(result, dict) else None
        if not isinstance(tx_id, str) or not tx_id:
            raise TransportError("ledger register_drug_batch: missing transactionId")
        return tx_id


class LedgerProvider(EvidenceProvider):
    """Check batch authenticity on the ledger."""

    name = LEDGER

    def __init__(
        self,
        client: LedgerClient | None,
        state: EngineState,
        timeout: float | None = None,
    ):
        super().__init__(timeout=timeout if timeout is not None else settings.ledger_timeout)
        self.client = client
        self.state = state

    def available(self) -> bool:
        return self.client is not None and self.state.ready and self.state.ledger_connected

    async def _fetch_primary(self, identifier: str) -> ProviderResult:
        attestation = await self.client.verify_authenticity(identifier)
        logger.debug("ledger: %r authenticated=%s", identifier, attestation.authenticated)
        return ProviderResult(
            valid=attestation.authenticated,
            confidence=AUTHENTIC_CONFIDENCE if attestation.authenticated else NOT_AUTHENTIC_CONFIDENCE,
            reason=None if attestation.authenticated else "not authenticated on ledger",
            on_chain=True,
            proof=attestation.proof,
        )

    def fallback(self, identifier: str) -> ProviderResult:
        registered = any(batch in identifier for batch in REGISTERED_BATCHES)
        return ProviderResult(
            valid=registered,
            confidence=FALLBACK_MATCH_CONFIDENCE if registered else FALLBACK_MISS_CONFIDENCE,
            source=ResultSource.FALLBACK,
            reason=None if registered else "not in registered batch set",
            on_chain=False,
        )
