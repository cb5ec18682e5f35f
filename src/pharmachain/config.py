"""
Configuration management for pharmachain.

Uses pydantic-settings for environment variable loading and validation.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PHARMACHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Public drug registry (openFDA NDC directory)
    registry_url: str = Field(
        default="https://api.fda.gov/drug/ndc.json",
        description="openFDA NDC search endpoint",
    )
    registry_timeout: float = Field(default=10.0, description="Registry request timeout (seconds)")

    # Ledger node
    ledger_rpc_url: str = Field(
        default="http://127.0.0.1:9944",
        description="JSON-RPC endpoint of the ledger node",
    )
    contract_address: str | None = Field(
        default=None,
        description="Deployed verification contract (unset = offline mode)",
    )
    ledger_timeout: float = Field(default=10.0, description="Ledger request timeout (seconds)")

    # Batch flows
    batch_delay: float = Field(
        default=1.0,
        description="Pause between sequential verifications (seconds)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def ledger_configured(self) -> bool:
        """True when a contract address is available for ledger calls."""
        return bool(self.contract_address and self.contract_address.strip())


# Global settings instance
settings = Settings()
