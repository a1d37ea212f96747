"""Vault data models for Euler Earn and its strategies."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .irm import IrmConfig, NoIrm


class Protocol(Enum):
    """Lending protocols a strategy can belong to."""
    EULER = "euler"


@dataclass(frozen=True)
class RewardCampaign:
    """Incentive campaign paying extra yield to a strategy's suppliers."""
    campaign_id: str
    reward_token: str
    apy: float  # Percent


@dataclass(frozen=True)
class StrategyDetails:
    """On-chain snapshot of one underlying lending vault."""

    vault: str
    symbol: str
    protocol: Protocol = Protocol.EULER

    # Raw state, asset units
    cash: int = 0
    total_borrows: int = 0
    total_shares: int = 0
    interest_fee: int = 0  # Basis points
    supply_cap: int = 0  # Decoded amount
    asset_decimals: int = 18
    irm_config: IrmConfig = field(default_factory=NoIrm)
    max_withdraw: Optional[int] = None

    # Derived yields, percent
    borrow_apy: float = 0.0
    supply_apy: float = 0.0
    reward_apy: float = 0.0
    reward_campaigns: List[RewardCampaign] = field(default_factory=list)

    @property
    def total_supplied(self) -> int:
        """Cash plus outstanding borrows."""
        return self.cash + self.total_borrows


@dataclass
class Strategy:
    """A lending vault enabled in the earn vault."""
    details: StrategyDetails
    cap: int  # Allocator-imposed cap, independent of the supply cap
    allocation: int  # Currently allocated assets
    protocol: Protocol = Protocol.EULER

    @property
    def address(self) -> str:
        return self.details.vault


@dataclass
class EulerEarn:
    """Snapshot of an Euler Earn vault and its strategies."""
    strategies: Dict[str, Strategy]
    asset_decimals: int
    initial_allocation_queue: List[str] = field(default_factory=list)
    idle_vault_address: Optional[str] = None

    @property
    def total_allocated(self) -> int:
        """Sum of current allocations, idle vault included."""
        return sum(strategy.allocation for strategy in self.strategies.values())

    def ordered_addresses(self) -> List[str]:
        """Strategy addresses in queue order, then any not in the queue."""
        ordered = [address for address in self.initial_allocation_queue if address in self.strategies]
        ordered.extend(address for address in self.strategies if address not in ordered)
        return ordered
