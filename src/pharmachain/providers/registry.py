"""
Registry provider backed by the openFDA NDC directory.

Looks up the NDC embedded in a batch identifier:
- 404 from openFDA is a definitive "not found" (low confidence, invalid)
- A matching record is strong evidence of a registered product
- Anything else (transport error, bad JSON, empty results) falls back to a
  small table of known NDC product codes
"""

import re
from dataclasses import dataclass

import httpx

from pharmachain.config import settings
from pharmachain.errors import TransportError
from pharmachain.models import REGISTRY, ProviderResult, ResultSource
from pharmachain.providers.base import EvidenceProvider

FOUND_CONFIDENCE = 0.9
NOT_FOUND_CONFIDENCE = 0.1
FALLBACK_MATCH_CONFIDENCE = 0.7
FALLBACK_MISS_CONFIDENCE = 0.3

NDC_IN_BATCH = re.compile(r"(\d{4,5}-\d{3,4}-\d{1,2})")
NDC_PREFIX_LENGTH = 11


@dataclass(frozen=True)
class KnownProduct:
    """Locally known NDC product code."""
    code: str
    drug_name: str
    manufacturer: str


KNOWN_PRODUCTS: tuple[KnownProduct, ...] = (
    KnownProduct("68180-518", "Pfizer Aspirin", "Pfizer Inc"),
    KnownProduct("00069-001", "Pfizer Viagra", "Pfizer Inc"),
    KnownProduct("50458-220", "Johnson Baby Powder", "Johnson & Johnson"),
    KnownProduct("00006-007", "Merck Vaccine", "Merck & Co"),
)


def extract_ndc(identifier: str) -> str:
    """
    Pull the NDC out of a batch identifier.

    First hyphenated digit-group match wins; otherwise the first 11
    characters are used as-is.
    """
    match = NDC_IN_BATCH.search(identifier)
    return match.group(1) if match else identifier[:NDC_PREFIX_LENGTH]


class RegistryProvider(EvidenceProvider):
    """Validate identifiers against the openFDA NDC directory."""

    name = REGISTRY

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(timeout=timeout if timeout is not None else settings.registry_timeout)
        self.url = url or settings.registry_url
        self._client = client

    async def _fetch_primary(self, identifier: str) -> ProviderResult | None:
        ndc_code = extract_ndc(identifier)
        params = {"search": f'package_ndc:"{ndc_code}"', "limit": 1}

        if self._client is not None:
            response = await self._get(self._client, params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await self._get(client, params)

        if response.status_code == 404:
            return ProviderResult(
                valid=False,
                confidence=NOT_FOUND_CONFIDENCE,
                reason="not found in registry",
                ndc_code=ndc_code,
            )
        if response.is_error:
            raise TransportError(f"registry returned HTTP {response.status_code}")

        records = response.json().get("results") or []
        if not records:
            return None

        record = records[0]
        return ProviderResult(
            valid=True,
            confidence=FOUND_CONFIDENCE,
            drug_name=record.get("brand_name") or record.get("generic_name"),
            manufacturer=record.get("labeler_name"),
            ndc_code=ndc_code,
        )

    async def _get(self, client: httpx.AsyncClient, params: dict) -> httpx.Response:
        try:
            return await client.get(self.url, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"registry unreachable: {e}") from e

    def fallback(self, identifier: str) -> ProviderResult:
        ndc_code = extract_ndc(identifier)
        for product in KNOWN_PRODUCTS:
            if product.code in identifier:
                return ProviderResult(
                    valid=True,
                    confidence=FALLBACK_MATCH_CONFIDENCE,
                    source=ResultSource.FALLBACK,
                    drug_name=product.drug_name,
                    manufacturer=product.manufacturer,
                    ndc_code=ndc_code,
                )
        return ProviderResult(
            valid=False,
            confidence=FALLBACK_MISS_CONFIDENCE,
            source=ResultSource.FALLBACK,
            reason="not in known NDC table",
            ndc_code=ndc_code,
        )
