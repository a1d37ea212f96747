"""Allocation orchestrator: computes, gates and finalizes a rebalance run."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from config.settings import Settings
from earn_allocator.core.constants import WAD
from earn_allocator.core.errors import ConfigurationError
from earn_allocator.core.models import (
    Allocation,
    AllocationSpread,
    DrainConfig,
    EulerEarn,
    OptimizationMode,
    ReturnsDetails,
    allocation_from_vault,
)
from earn_allocator.data import EulerEarnReader
from earn_allocator.services import Notifier, RebalanceExecutor, RunNotification
from .drain import compute_drain_allocation
from .returns import compute_greedy_returns, compute_spread

logger = logging.getLogger(__name__)

# (vault, allocatable_amount, cash_amount, current_allocation) -> candidate allocation
AllocationSearch = Callable[[EulerEarn, int, int, Allocation], Allocation]

DRAIN_NOOP_MESSAGE = "drain mode: nothing to transfer; skipping rebalance and notifications"


@dataclass(frozen=True)
class AllocatorConfig:
    """Immutable run configuration."""
    chain_id: int
    optimization_mode: OptimizationMode = OptimizationMode.EQUALIZATION
    allocation_diff_tolerance: float = 0.0  # Percent of allocatable capital
    apy_spread_tolerance: float = 0.0  # APY percentage points
    cash_percentage: int = 0  # WAD scaled
    drain_source_vault: Optional[str] = None
    drain_target_vault: Optional[str] = None
    drain_threshold: int = 0
    soft_caps: Optional[Dict[str, int]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AllocatorConfig":
        return cls(
            chain_id=settings.chain_id,
            optimization_mode=OptimizationMode(settings.optimization_mode),
            allocation_diff_tolerance=settings.allocation_diff_tolerance,
            apy_spread_tolerance=settings.apy_spread_tolerance,
            cash_percentage=settings.cash_percentage,
            drain_source_vault=settings.drain_source_vault,
            drain_target_vault=settings.drain_target_vault,
            drain_threshold=settings.drain_threshold,
            soft_caps=dict(settings.soft_caps),
        )

    @property
    def drain_config(self) -> DrainConfig:
        if not self.drain_source_vault or not self.drain_target_vault:
            raise ConfigurationError("Drain mode requires a source and a target vault")
        return DrainConfig(
            source_vault=self.drain_source_vault,
            target_vault=self.drain_target_vault,
            threshold=self.drain_threshold,
        )


class RunOutcome(Enum):
    """How a run ended. Failures raise instead."""
    EXECUTED = "executed"
    NOOP = "noop"          # Nothing to move
    REJECTED = "rejected"  # Candidate did not clear a tolerance


@dataclass
class RunContext:
    """State of the vault at the start of a run."""
    vault: EulerEarn
    current_allocation: Allocation
    current_returns: float
    current_returns_details: ReturnsDetails
    allocatable_amount: int
    cash_amount: int
    requires_spread_check: bool
    current_spread: Optional[float]
    mode: OptimizationMode


@dataclass
class AllocationRunResult:
    """Candidate produced by the selected mode."""
    final_allocation: Allocation
    final_returns: float
    final_returns_details: ReturnsDetails
    transferred: Optional[int] = None


@dataclass
class RunReport:
    """What a run decided and did."""
    outcome: RunOutcome
    mode: OptimizationMode
    vault: EulerEarn
    allocation: Allocation
    current_returns: float
    final_returns: float
    final_returns_details: ReturnsDetails
    transferred: Optional[int] = None
    tx_hash: Optional[str] = None
    reason: str = ""


class Allocator:
    """
    Drives one allocation run.

    Modes:
    - EQUALIZATION: an injected search proposes an allocation, accepted only
      if it moves enough capital and compresses the yield spread enough
    - DRAIN: capital flows from a source vault to a target vault within
      capacity limits
    """

    def __init__(
        self,
        config: AllocatorConfig,
        reader: EulerEarnReader,
        executor: RebalanceExecutor,
        notifier: Notifier,
        search: Optional[AllocationSearch] = None,
    ):
        self.config = config
        self.reader = reader
        self.executor = executor
        self.notifier = notifier
        self.search = search

    async def run(self) -> RunReport:
        """Read the vault, compute a candidate, gate it and finalize."""
        vault = await self.reader.fetch_earn_vault()
        context = self.build_context(vault)
        logger.info(
            f"Starting {context.mode.value} run: {len(vault.strategies)} strategies, "
            f"allocatable={context.allocatable_amount}, returns={context.current_returns:.4f}%"
        )

        result = self.compute_result(context)

        if context.mode is OptimizationMode.EQUALIZATION:
            if not self.has_material_change(result.final_allocation, context.allocatable_amount):
                logger.info("equalization mode: allocation change within tolerance; skipping rebalance")
                return self._report(context, result, RunOutcome.REJECTED, "allocation diff within tolerance")

            final_spread = compute_spread(vault, result.final_allocation, result.final_returns_details)
            spread = AllocationSpread(current=context.current_spread or 0.0, final=final_spread)
            if context.requires_spread_check and not self.verify_allocation(
                vault,
                context.current_allocation,
                result.final_allocation,
                context.current_returns,
                context.current_returns_details,
                result.final_returns,
                result.final_returns_details,
                spread,
            ):
                logger.info(
                    f"equalization mode: spread {spread.current:.4f} -> {spread.final:.4f} "
                    f"does not clear tolerance {self.config.apy_spread_tolerance}; skipping rebalance"
                )
                return self._report(context, result, RunOutcome.REJECTED, "spread improvement within tolerance")

        return await self.finalize_allocation_run(context, result)

    def build_context(self, vault: EulerEarn) -> RunContext:
        """Score the vault as it stands."""
        current_allocation = allocation_from_vault(vault)
        current_returns, current_details = compute_greedy_returns(vault, current_allocation)
        allocatable_amount = sum(entry.old_amount for entry in current_allocation.values())
        mode = self.config.optimization_mode
        return RunContext(
            vault=vault,
            current_allocation=current_allocation,
            current_returns=current_returns,
            current_returns_details=current_details,
            allocatable_amount=allocatable_amount,
            cash_amount=allocatable_amount * self.config.cash_percentage // WAD,
            requires_spread_check=mode is OptimizationMode.EQUALIZATION,
            current_spread=compute_spread(vault, current_allocation, current_details),
            mode=mode,
        )

    def compute_result(self, context: RunContext) -> AllocationRunResult:
        """Produce the candidate allocation for the configured mode."""
        if context.mode is OptimizationMode.DRAIN:
            drain = compute_drain_allocation(
                context.vault,
                context.current_allocation,
                self.config.drain_config,
                soft_caps=self.config.soft_caps,
            )
            return AllocationRunResult(
                final_allocation=drain.allocation,
                final_returns=drain.total_returns,
                final_returns_details=drain.details,
                transferred=drain.transferred,
            )

        if self.search is None:
            raise ConfigurationError("Equalization mode requires an allocation search")
        final_allocation = self.search(
            context.vault,
            context.allocatable_amount,
            context.cash_amount,
            context.current_allocation,
        )
        final_returns, final_details = compute_greedy_returns(context.vault, final_allocation)
        return AllocationRunResult(
            final_allocation=final_allocation,
            final_returns=final_returns,
            final_returns_details=final_details,
        )

    def has_material_change(self, allocation: Allocation, allocatable_amount: int) -> bool:
        """True if any vault moves by more than the diff tolerance."""
        threshold = allocatable_amount * self.config.allocation_diff_tolerance / 100
        return any(abs(entry.diff) > threshold for entry in allocation.values())

    def verify_allocation(
        self,
        vault: EulerEarn,
        current_allocation: Allocation,
        final_allocation: Allocation,
        current_returns: float,
        current_returns_details: ReturnsDetails,
        final_returns: float,
        final_returns_details: ReturnsDetails,
        spread: AllocationSpread,
    ) -> bool:
        """
        Decide whether the candidate compresses the yield spread enough.

        Only the verdict is returned; nothing is executed here. A zero
        tolerance accepts any strictly positive improvement.
        """
        return spread.improvement > self.config.apy_spread_tolerance

    async def finalize_allocation_run(self, context: RunContext, result: AllocationRunResult) -> RunReport:
        """Execute and notify, unless a drain run has nothing to move."""
        if context.mode is OptimizationMode.DRAIN and not result.transferred:
            logger.info(DRAIN_NOOP_MESSAGE)
            return self._report(context, result, RunOutcome.NOOP, "nothing to transfer")

        tx_hash = await self.executor.execute_rebalance(
            context.vault,
            result.final_allocation,
            result.transferred if context.mode is OptimizationMode.DRAIN else None,
        )
        report = self._report(context, result, RunOutcome.EXECUTED, tx_hash=tx_hash)
        await self.notifier.notify_run(
            RunNotification(
                chain_id=self.config.chain_id,
                mode=context.mode,
                vault=context.vault,
                allocation=result.final_allocation,
                current_returns=context.current_returns,
                final_returns=result.final_returns,
                final_details=result.final_returns_details,
                transferred=report.transferred,
                tx_hash=tx_hash,
            )
        )
        logger.info(f"{context.mode.value} run executed: returns {context.current_returns:.4f}% -> {result.final_returns:.4f}%")
        return report

    def _report(
        self,
        context: RunContext,
        result: AllocationRunResult,
        outcome: RunOutcome,
        reason: str = "",
        tx_hash: Optional[str] = None,
    ) -> RunReport:
        return RunReport(
            outcome=outcome,
            mode=context.mode,
            vault=context.vault,
            allocation=result.final_allocation,
            current_returns=context.current_returns,
            final_returns=result.final_returns,
            final_returns_details=result.final_returns_details,
            transferred=result.transferred if context.mode is OptimizationMode.DRAIN else None,
            tx_hash=tx_hash,
            reason=reason,
        )
