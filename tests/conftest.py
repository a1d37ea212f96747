"""Pytest configuration and fixtures."""

from dataclasses import replace
from typing import Dict, Optional

import pytest

from earn_allocator.core.models import (
    AdaptiveIrm,
    Allocation,
    AllocationEntry,
    EulerEarn,
    KinkIrm,
    NoIrm,
    Strategy,
    StrategyDetails,
)

SOURCE_VAULT = "0x0000000000000000000000000000000000000001"
TARGET_VAULT = "0x0000000000000000000000000000000000000002"
IDLE_VAULT = "0x0000000000000000000000000000000000000003"


class TestFixtures:
    """Builders shared across test modules."""

    @staticmethod
    def details(vault: str, **overrides) -> StrategyDetails:
        """Strategy details with zero rates and a 10k supply cap."""
        base = StrategyDetails(
            vault=vault,
            symbol=f"e{vault[-2:]}",
            cash=0,
            total_borrows=0,
            total_shares=0,
            interest_fee=0,
            supply_cap=10_000,
            asset_decimals=6,
            irm_config=KinkIrm(base_rate=0, kink=0, slope1=0, slope2=0),
        )
        return replace(base, **overrides)

    @staticmethod
    def vault(
        strategies: Dict[str, Strategy],
        idle_vault_address: Optional[str] = None,
        asset_decimals: int = 6,
    ) -> EulerEarn:
        return EulerEarn(
            strategies=strategies,
            asset_decimals=asset_decimals,
            initial_allocation_queue=list(strategies),
            idle_vault_address=idle_vault_address,
        )

    @staticmethod
    def drain_vault(
        source_allocation: int,
        target_allocation: int,
        source_cash: int,
        target_cash: int,
        supply_cap: int = 20_000,
        cap: int = 10_000,
    ) -> EulerEarn:
        """Two-strategy vault used by the drain scenarios."""
        return TestFixtures.vault({
            SOURCE_VAULT: Strategy(
                details=TestFixtures.details(SOURCE_VAULT, cash=source_cash, supply_cap=supply_cap),
                cap=cap,
                allocation=source_allocation,
            ),
            TARGET_VAULT: Strategy(
                details=TestFixtures.details(TARGET_VAULT, cash=target_cash, supply_cap=supply_cap),
                cap=cap,
                allocation=target_allocation,
            ),
        })

    @staticmethod
    def allocation(amounts: Dict[str, int]) -> Allocation:
        """Allocation with no planned changes."""
        return {
            address: AllocationEntry(old_amount=amount, new_amount=amount, diff=0)
            for address, amount in amounts.items()
        }


@pytest.fixture
def fixtures():
    """Access to the shared builders."""
    return TestFixtures


@pytest.fixture
def kink_irm() -> KinkIrm:
    """Kinked model parameters of a live EVK USDC vault."""
    return KinkIrm(
        base_rate=3020253667084197485,
        kink=3951369912,
        slope1=863158601,
        slope2=45210010787,
    )


@pytest.fixture
def adaptive_irm() -> AdaptiveIrm:
    """Adaptive curve model at its initial rate."""
    return AdaptiveIrm(
        rate_at_target=634195839,
        target_utilization=900000000000000000,
        initial_rate_at_target=634195839,
        min_rate_at_target=31709791,
        max_rate_at_target=63419583967,
        curve_steepness=4000000000000000000,
        adjustment_speed=1585489599188,
    )


@pytest.fixture
def no_irm() -> NoIrm:
    return NoIrm()
