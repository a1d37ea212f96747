"""Allocation and returns value objects."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict

from .vault import EulerEarn


class OptimizationMode(Enum):
    """How the candidate allocation is produced."""
    EQUALIZATION = "equalization"  # Search for yield-equalizing allocation
    DRAIN = "drain"                # One-way move from source to target


@dataclass
class AllocationEntry:
    """Planned change for one vault. Invariant: diff == new_amount - old_amount."""
    old_amount: int
    new_amount: int
    diff: int = 0

    def copy(self) -> "AllocationEntry":
        return replace(self)

    def move(self, amount: int) -> None:
        """Add (or, if negative, remove) assets from this entry."""
        self.new_amount += amount
        self.diff += amount


Allocation = Dict[str, AllocationEntry]


def clone_allocation(allocation: Allocation) -> Allocation:
    """Fresh allocation mapping with copied entries."""
    return {address: entry.copy() for address, entry in allocation.items()}


def allocation_from_vault(vault: EulerEarn) -> Allocation:
    """Allocation describing the vault's current state with no changes."""
    return {
        address: AllocationEntry(
            old_amount=vault.strategies[address].allocation,
            new_amount=vault.strategies[address].allocation,
        )
        for address in vault.ordered_addresses()
    }


@dataclass
class ReturnDetail:
    """Expected yield of one vault under an allocation. APYs in percent."""
    interest_apy: float
    rewards_apy: float
    utilization: float

    @property
    def total_apy(self) -> float:
        return self.interest_apy + self.rewards_apy


ReturnsDetails = Dict[str, ReturnDetail]


@dataclass(frozen=True)
class AllocationSpread:
    """Yield spread across allocated strategies before and after a move."""
    current: float
    final: float

    @property
    def improvement(self) -> float:
        return self.current - self.final


@dataclass(frozen=True)
class DrainConfig:
    """Operator request to move capital from one vault to another."""
    source_vault: str
    target_vault: str
    threshold: int


@dataclass
class DrainResult:
    """Outcome of a drain computation."""
    allocation: Allocation
    total_returns: float
    details: ReturnsDetails
    transferred: int
