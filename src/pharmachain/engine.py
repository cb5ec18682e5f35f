"""
Verification orchestrator.

Sequences the evidence sources for one identifier and assembles the report:

    registry.fetch ─┐
    ledger.fetch   ─┼─→ aggregate → classify → AggregateReport
    analyze        ─┘

Usage:
    from pharmachain.engine import VerificationEngine
    engine = VerificationEngine()
    await engine.initialize()          # never raises; may enter degraded mode
    report = await engine.verify("68180-518-01")
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from pharmachain.analysis import analyze
from pharmachain.config import Settings, settings
from pharmachain.errors import MalformedInput, NotInitialized, TransportError
from pharmachain.log import get_logger
from pharmachain.models import (
    LEDGER,
    REGISTRY,
    AggregateReport,
    BatchInfo,
    EngineState,
    ProviderResult,
    RegistrationResult,
)
from pharmachain.providers import LedgerClient, LedgerProvider, RegistryProvider
from pharmachain.scoring import aggregate, classify

logger = get_logger(__name__)


class VerificationEngine:
    """Fuse registry, ledger, and pattern evidence into a safety verdict."""

    def __init__(
        self,
        config: Settings | None = None,
        registry: RegistryProvider | None = None,
        ledger_client: LedgerClient | None = None,
    ):
        self.config = config or settings
        self.state = EngineState()
        self.registry = registry or RegistryProvider(
            url=self.config.registry_url,
            timeout=self.config.registry_timeout,
        )
        if ledger_client is None and self.config.ledger_configured:
            ledger_client = LedgerClient(
                rpc_url=self.config.ledger_rpc_url,
                contract_address=self.config.contract_address,
                timeout=self.config.ledger_timeout,
            )
        self.ledger_client = ledger_client
        self.ledger = LedgerProvider(ledger_client, self.state, timeout=self.config.ledger_timeout)

    async def initialize(self) -> bool:
        """
        Move to READY, connecting to the ledger if one is configured.

        A missing contract address or failed connection leaves the engine
        READY in degraded mode, where ledger checks use the fallback set.

        Returns:
            True if the ledger is connected
        """
        if self.state.ready:
            return self.state.ledger_connected

        connected = False
        if self.ledger_client is None:
            logger.warning("No contract address configured - running in offline mode")
        else:
            try:
                await asyncio.wait_for(self.ledger_client.connect(), timeout=self.config.ledger_timeout)
                connected = True
            except (TransportError, asyncio.TimeoutError) as e:
                logger.warning("Ledger connection failed, continuing with fallback verification: %s", e)

        self.state.ledger_connected = connected
        self.state.ready = True
        if connected:
            logger.info("Ledger connected (contract %s)", self.ledger_client.contract_address)
        return connected

    async def verify(self, identifier: str) -> AggregateReport:
        """
        Verify one batch identifier.

        Never raises for provider failures; with every source down the
        result is an UNSAFE report built from fallback data.
        """
        registry_result, ledger_result = await asyncio.gather(
            self.registry.fetch(identifier),
            self.ledger.fetch(identifier),
        )
        analyzer_result = analyze(identifier)

        overall = aggregate(registry_result, ledger_result, analyzer_result)
        verdict = classify(overall)
        logger.info("%s: score=%.3f verdict=%s", identifier, overall, verdict.value)

        return AggregateReport(
            identifier=identifier,
            provider_results={REGISTRY: registry_result, LEDGER: ledger_result},
            analyzer_result=analyzer_result,
            overall_score=overall,
            verdict=verdict,
        )

    async def verify_many(
        self,
        identifiers: Iterable[str],
        delay: float | None = None,
    ) -> list[AggregateReport]:
        """
        Verify identifiers one after another, pausing between calls.

        Args:
            identifiers: Batch identifiers in the order to verify
            delay: Seconds between calls (default config.batch_delay)

        Returns:
            Reports in input order
        """
        pause = self.config.batch_delay if delay is None else delay
        reports = []
        for i, identifier in enumerate(identifiers):
            if i and pause > 0:
                await asyncio.sleep(pause)
            reports.append(await self.verify(identifier))
        return reports

    async def check_registry(self, identifier: str) -> ProviderResult:
        """Run only the registry lookup for an identifier."""
        return await self.registry.fetch(identifier)

    async def register_batch(self, batch_info: BatchInfo | Mapping[str, Any]) -> RegistrationResult:
        """
        Register a manufactured batch on the ledger.

        Raises:
            NotInitialized: if initialize() has not run or the ledger is not connected

        Returns:
            RegistrationResult with the transaction id, or success=False and
            an error for invalid payloads and ledger failures
        """
        if not self.state.ready:
            raise NotInitialized("Engine not initialized. Call initialize() first.")
        if not self.state.ledger_connected:
            raise NotInitialized("Ledger not connected; batch registration unavailable in offline mode.")

        try:
            info = BatchInfo.from_payload(batch_info)
        except MalformedInput as e:
            raw_id = None
            if isinstance(batch_info, Mapping):
                raw_id = batch_info.get("batchId") or batch_info.get("batch_id")
            return RegistrationResult(success=False, batch_id=raw_id, error=str(e))

        # Dates are submitted as given; ordering is not enforced
        if info.expiry_date <= info.manufacturing_date:
            logger.warning(
                "Batch %s expires (%s) on or before manufacture (%s)",
                info.batch_id, info.expiry_date, info.manufacturing_date,
            )

        try:
            tx_id = await asyncio.wait_for(
                self.ledger_client.register_batch(info.witness()),
                timeout=self.config.ledger_timeout,
            )
        except (TransportError, asyncio.TimeoutError) as e:
            logger.error("Batch registration failed for %s: %s", info.batch_id, e)
            return RegistrationResult(
                success=False,
                batch_id=info.batch_id,
                error=str(e) or "ledger timeout",
            )

        logger.info("Batch %s registered (tx %s)", info.batch_id, tx_id)
        return RegistrationResult(success=True, batch_id=info.batch_id, transaction_id=tx_id)
