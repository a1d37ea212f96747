"""Execution collaborators that submit (or simulate) a rebalance."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from earn_allocator.core.models import Allocation, EulerEarn

logger = logging.getLogger(__name__)


def plan_moves(vault: EulerEarn, allocation: Allocation) -> List[Tuple[str, int]]:
    """
    Ordered (vault, diff) moves for an allocation.

    Withdrawals come first so deposits are funded; vaults without a change
    are left out.
    """
    moves = [(address, entry.diff) for address, entry in allocation.items() if entry.diff != 0]
    withdrawals = [move for move in moves if move[1] < 0]
    deposits = [move for move in moves if move[1] > 0]
    return withdrawals + deposits


class RebalanceExecutor(ABC):
    """Submits an approved allocation."""

    @abstractmethod
    async def execute_rebalance(
        self,
        vault: EulerEarn,
        allocation: Allocation,
        transferred: Optional[int] = None,
    ) -> Optional[str]:
        """Execute the allocation and return the transaction hash, if any."""
        ...


class DryRunExecutor(RebalanceExecutor):
    """Logs the planned moves instead of sending a transaction."""

    async def execute_rebalance(
        self,
        vault: EulerEarn,
        allocation: Allocation,
        transferred: Optional[int] = None,
    ) -> Optional[str]:
        moves = plan_moves(vault, allocation)
        logger.info(f"Dry run: {len(moves)} vault moves planned")
        for address, diff in moves:
            symbol = vault.strategies[address].details.symbol if address in vault.strategies else address
            action = "withdraw" if diff < 0 else "deposit"
            logger.info(f"Dry run: {action} {abs(diff)} {symbol} ({address})")
        if transferred is not None:
            logger.info(f"Dry run: drain transfer of {transferred}")
        return None
