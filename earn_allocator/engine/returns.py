"""Scoring of allocations: expected per-vault and blended returns."""

import logging
from typing import Dict, List, Tuple

import numpy as np

from earn_allocator.core.models import (
    Allocation,
    EulerEarn,
    ReturnDetail,
    ReturnsDetails,
    StrategyDetails,
)
from earn_allocator.protocols.euler import (
    compute_interest_rate,
    resolve_euler_borrow_apy,
    resolve_euler_supply_apy,
)

logger = logging.getLogger(__name__)


def compute_strategy_returns(details: StrategyDetails, diff: int) -> ReturnDetail:
    """
    Expected yield of a strategy after depositing (or withdrawing) diff.

    The deposit changes the vault's cash, which moves utilization and
    therefore the IRM rate. Reward APY is diluted (or concentrated) in
    proportion to the change in total supplied assets.
    """
    cash = max(details.cash + diff, 0)
    supplied = cash + details.total_borrows
    utilization = details.total_borrows / supplied if supplied else 0.0

    rate = compute_interest_rate(details.irm_config, cash, details.total_borrows)
    borrow_apy = resolve_euler_borrow_apy(rate)
    interest_apy = resolve_euler_supply_apy(
        asset_decimals=details.asset_decimals,
        borrow_apy=borrow_apy,
        cash=cash,
        interest_fee=details.interest_fee,
        total_borrows=details.total_borrows,
    )

    if details.reward_apy and supplied:
        rewards_apy = details.reward_apy * details.total_supplied / supplied
    else:
        rewards_apy = 0.0

    return ReturnDetail(
        interest_apy=interest_apy,
        rewards_apy=rewards_apy,
        utilization=utilization,
    )


def compute_greedy_returns(vault: EulerEarn, allocation: Allocation) -> Tuple[float, ReturnsDetails]:
    """
    Score an allocation.

    Args:
        vault: Earn vault snapshot
        allocation: Planned allocation; every key must be a vault strategy

    Returns:
        (total_returns, details) where total_returns is the APY in percent
        weighted by each vault's new amount
    """
    details: ReturnsDetails = {}
    amounts: List[int] = []
    apys: List[float] = []

    for address, entry in allocation.items():
        strategy = vault.strategies[address]
        detail = compute_strategy_returns(strategy.details, entry.diff)
        details[address] = detail
        amounts.append(entry.new_amount)
        apys.append(detail.total_apy)
        logger.debug(
            f"{strategy.details.symbol}: amount={entry.new_amount} "
            f"apy={detail.total_apy:.4f}% util={detail.utilization:.4f}"
        )

    total_amount = sum(amounts)
    if total_amount == 0:
        return 0.0, details

    weights = np.array([amount / total_amount for amount in amounts], dtype=float)
    total_returns = float(np.dot(weights, np.array(apys, dtype=float)))
    return total_returns, details


def compute_spread(vault: EulerEarn, allocation: Allocation, details: ReturnsDetails) -> float:
    """
    Yield spread (max - min APY) across strategies holding capital.

    The idle vault is excluded; it never yields and would pin the minimum.
    """
    apys: Dict[str, float] = {
        address: details[address].total_apy
        for address, entry in allocation.items()
        if entry.new_amount > 0 and address != vault.idle_vault_address and address in details
    }
    if not apys:
        return 0.0
    return float(np.ptp(np.array(list(apys.values()), dtype=float)))
