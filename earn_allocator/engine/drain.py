"""Drain mode: one-way, capacity-constrained transfer between two vaults."""

import logging
from typing import Callable, Mapping, Optional, Tuple

from earn_allocator.core.constants import (
    DRAIN_TRANSFER_DENOMINATOR,
    DRAIN_TRANSFER_NUMERATOR,
    MAX_UINT256,
)
from earn_allocator.core.errors import InvalidDrainConfig
from earn_allocator.core.models import (
    Allocation,
    DrainConfig,
    DrainResult,
    EulerEarn,
    ReturnsDetails,
    clone_allocation,
)
from .returns import compute_greedy_returns

logger = logging.getLogger(__name__)

ReturnsFn = Callable[[EulerEarn, Allocation], Tuple[float, ReturnsDetails]]


def _positive(value: int) -> int:
    return value if value > 0 else 0


def _find_soft_cap(soft_caps: Optional[Mapping[str, int]], vault_address: str) -> Optional[int]:
    if not soft_caps:
        return None
    for address, cap in soft_caps.items():
        if address.lower() == vault_address.lower():
            return cap
    return None


def _resolve_key(mapping: Mapping[str, object], address: str) -> Optional[str]:
    """Key of `mapping` equal to `address` ignoring checksum case."""
    if address in mapping:
        return address
    for key in mapping:
        if key.lower() == address.lower():
            return key
    return None


def _validate(vault: EulerEarn, allocation: Allocation, config: DrainConfig) -> Tuple[str, str, str, str]:
    """Resolve source and target to the keys used by the vault and the allocation."""
    if config.source_vault.lower() == config.target_vault.lower():
        raise InvalidDrainConfig("Drain mode requires distinct source and target vaults")
    source_vault = _resolve_key(vault.strategies, config.source_vault)
    if source_vault is None:
        raise InvalidDrainConfig(f"Drain mode source vault {config.source_vault} is not part of this Euler Earn vault")
    target_vault = _resolve_key(vault.strategies, config.target_vault)
    if target_vault is None:
        raise InvalidDrainConfig(f"Drain mode target vault {config.target_vault} is not part of this Euler Earn vault")
    source_entry = _resolve_key(allocation, config.source_vault)
    target_entry = _resolve_key(allocation, config.target_vault)
    if source_entry is None or target_entry is None:
        raise InvalidDrainConfig("Drain mode requires both source and target allocation entries")
    return source_vault, target_vault, source_entry, target_entry


def _untouched(vault: EulerEarn, allocation: Allocation, returns_fn: ReturnsFn) -> DrainResult:
    unchanged = clone_allocation(allocation)
    total_returns, details = returns_fn(vault, clone_allocation(allocation))
    return DrainResult(
        allocation=unchanged,
        total_returns=total_returns,
        details=details,
        transferred=0,
    )


def compute_drain_allocation(
    vault: EulerEarn,
    initial_allocation: Allocation,
    config: DrainConfig,
    soft_caps: Optional[Mapping[str, int]] = None,
    returns_fn: ReturnsFn = compute_greedy_returns,
) -> DrainResult:
    """
    Move as much of the source vault's allocation to the target as capacity allows.

    The transfer is bounded by:
    - withdrawable: source liquidity (cash plus planned diff), its planned
      amount and, when known, its maxWithdraw
    - dest_supply_cap: room under the target's protocol supply cap
    - dest_strategy_cap: room under the earn vault's cap for the target
    - dest_soft_cap: room under the operator soft cap, if configured

    1% of the cap is held back against rounding between planning and
    execution, unless that would round a nonzero cap down to nothing.

    Args:
        vault: Earn vault snapshot
        initial_allocation: Allocation to start from; never mutated
        config: Source, target and threshold
        soft_caps: Operator soft caps keyed by vault address
        returns_fn: Scorer for the resulting allocation

    Returns:
        DrainResult with the new allocation, its returns and the amount moved

    Raises:
        InvalidDrainConfig: If source == target or either is unknown.
            Addresses are matched ignoring checksum case.
    """
    source_vault, target_vault, source_entry, target_entry = _validate(vault, initial_allocation, config)

    if initial_allocation[source_entry].new_amount <= config.threshold:
        logger.info(
            f"Drain source {config.source_vault} at or below threshold {config.threshold}, nothing to move"
        )
        return _untouched(vault, initial_allocation, returns_fn)

    allocation = clone_allocation(initial_allocation)
    source = allocation[source_entry]
    target = allocation[target_entry]
    source_details = vault.strategies[source_vault].details
    target_strategy = vault.strategies[target_vault]
    target_details = target_strategy.details

    withdrawable = _positive(min(source_details.cash + source.diff, source.new_amount))
    if source_details.max_withdraw is not None:
        withdrawable = min(withdrawable, _positive(source_details.max_withdraw + source.diff))

    dest_supply_cap = _positive(
        target_details.supply_cap - target_details.total_borrows - target_details.cash - target.diff
    )
    dest_strategy_cap = _positive(target_strategy.cap - target.new_amount)

    soft_cap = _find_soft_cap(soft_caps, target_vault)
    dest_soft_cap = MAX_UINT256 if soft_cap is None else _positive(soft_cap - target.new_amount)

    transfer_cap = min(withdrawable, dest_supply_cap, dest_strategy_cap, dest_soft_cap)
    reduced = transfer_cap * DRAIN_TRANSFER_NUMERATOR // DRAIN_TRANSFER_DENOMINATOR
    transfer_amount = reduced if reduced > 0 else transfer_cap

    logger.debug(
        f"Drain ceilings: withdrawable={withdrawable} supply_cap={dest_supply_cap} "
        f"strategy_cap={dest_strategy_cap} soft_cap={dest_soft_cap} -> {transfer_amount}"
    )

    if transfer_amount == 0:
        logger.info(f"Drain target {config.target_vault} has no capacity, nothing to move")
        return _untouched(vault, initial_allocation, returns_fn)

    source.move(-transfer_amount)
    target.move(transfer_amount)

    total_returns, details = returns_fn(vault, allocation)
    return DrainResult(
        allocation=allocation,
        total_returns=total_returns,
        details=details,
        transferred=transfer_amount,
    )
