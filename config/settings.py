"""Pydantic settings for the Euler Earn allocator."""

import json
from functools import lru_cache
from typing import Annotated, Dict, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from web3 import Web3

from earn_allocator.core.constants import DEFAULT_RPC_RATE_LIMIT


def _checksum(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return Web3.to_checksum_address(value)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # RPC
    rpc_url: Optional[str] = Field(default=None, description="JSON-RPC endpoint for the chain")
    rpc_rate_limit: int = Field(default=DEFAULT_RPC_RATE_LIMIT, ge=1, le=1000, description="Max RPC calls per second")
    chain_id: int = Field(default=1, description="Chain id the earn vault lives on")

    # Vaults
    earn_vault_address: Optional[str] = Field(default=None, description="Euler Earn vault address")
    idle_vault_address: Optional[str] = Field(default=None, description="Idle vault holding unallocated liquidity")
    no_idle_vault: bool = Field(default=False, description="Ignore the idle vault entirely")

    # Optimization
    optimization_mode: str = Field(default="equalization", description="equalization or drain")
    allocation_diff_tolerance: float = Field(
        default=0.0, ge=0.0, le=100.0, description="Min per-vault move, percent of allocatable capital"
    )
    apy_spread_tolerance: float = Field(
        default=0.0, ge=0.0, description="Min spread compression, in APY percentage points"
    )
    cash_percentage: int = Field(default=0, ge=0, le=10**18, description="Share kept in cash, WAD scaled")

    # Drain mode
    drain_source_vault: Optional[str] = Field(default=None, description="Vault drained in drain mode")
    drain_target_vault: Optional[str] = Field(default=None, description="Vault receiving drained capital")
    drain_threshold: int = Field(default=0, ge=0, description="Source allocation at or below which drain stops")

    # Operator soft caps per vault, in asset units
    soft_caps: Annotated[Dict[str, int], NoDecode] = Field(default_factory=dict, description="Soft cap per target vault")

    # Notifications
    notification_webhook_url: Optional[str] = Field(default=None, description="Slack-compatible webhook URL")

    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator(
        "earn_vault_address",
        "idle_vault_address",
        "drain_source_vault",
        "drain_target_vault",
        mode="before",
    )
    @classmethod
    def parse_address(cls, v):
        """Normalize addresses to their checksum form."""
        return _checksum(v)

    @field_validator("optimization_mode", mode="before")
    @classmethod
    def parse_optimization_mode(cls, v):
        """Accept the mode case-insensitively."""
        if isinstance(v, str):
            v = v.strip().lower()
        if v not in ("equalization", "drain"):
            raise ValueError(f"Unknown optimization mode: {v}")
        return v

    @field_validator("soft_caps", mode="before")
    @classmethod
    def parse_soft_caps(cls, v):
        """Parse soft caps from JSON or comma-separated address:amount pairs."""
        if isinstance(v, str):
            if not v.strip():
                return {}
            if v.strip().startswith("{"):
                v = json.loads(v)
            else:
                pairs = {}
                for item in v.split(","):
                    if not item.strip():
                        continue
                    address, _, amount = item.partition(":")
                    pairs[address.strip()] = int(amount.strip())
                v = pairs
        return {Web3.to_checksum_address(address): int(amount) for address, amount in (v or {}).items()}

    @model_validator(mode="after")
    def check_drain_config(self) -> "Settings":
        """Drain mode needs both vaults."""
        if self.optimization_mode == "drain":
            if not self.drain_source_vault or not self.drain_target_vault:
                raise ValueError("Drain mode requires DRAIN_SOURCE_VAULT and DRAIN_TARGET_VAULT")
        return self

    @property
    def effective_idle_vault(self) -> Optional[str]:
        """Idle vault address unless disabled with NO_IDLE_VAULT."""
        if self.no_idle_vault:
            return None
        return self.idle_vault_address


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
