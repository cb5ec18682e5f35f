"""
Base class for evidence providers.

A provider answers one question about an identifier ("is this batch known to
my source?") through a primary path backed by an external service, and a
local fallback path used whenever the primary path is unavailable.
fetch() never raises: every primary-path failure, timeout included, ends in
the fallback result.
"""

import asyncio
from abc import ABC, abstractmethod

from pharmachain.log import get_logger
from pharmachain.models import ProviderResult

logger = get_logger(__name__)


class EvidenceProvider(ABC):
    """Base class for registry and ledger providers."""

    name: str

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def available(self) -> bool:
        """Whether the primary path may be attempted at all."""
        return True

    async def fetch(self, identifier: str) -> ProviderResult:
        """
        Produce a validity signal for an identifier.

        Args:
            identifier: Raw batch or product code

        Returns:
            ProviderResult from the primary path, or from fallback() when the
            primary path is unavailable, fails, times out, or has no answer
        """
        if not self.available():
            logger.debug("%s: primary path unavailable, using fallback", self.name)
            return self.fallback(identifier)

        try:
            result = await asyncio.wait_for(self._fetch_primary(identifier), timeout=self.timeout)
        except Exception as e:
            logger.warning(
                "%s lookup failed for %r, using fallback: %s",
                self.name,
                identifier,
                str(e) or type(e).__name__,
            )
            return self.fallback(identifier)

        if result is None:
            logger.info("%s: no records for %r, using fallback", self.name, identifier)
            return self.fallback(identifier)
        return result

    @abstractmethod
    async def _fetch_primary(self, identifier: str) -> ProviderResult | None:
        """
        Query the external source.

        Returns:
            ProviderResult for a definitive answer, None when the source had
            nothing to say. Any exception is treated as a transport failure.
        """
        pass

    @abstractmethod
    def fallback(self, identifier: str) -> ProviderResult:
        """Answer from local static data with reduced confidence."""
        pass
