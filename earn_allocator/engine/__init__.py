"""Allocation engine: scoring, drain transfers and run orchestration."""

from .returns import compute_greedy_returns, compute_spread, compute_strategy_returns
from .drain import compute_drain_allocation
from .allocator import (
    AllocationRunResult,
    AllocationSearch,
    Allocator,
    AllocatorConfig,
    RunContext,
    RunOutcome,
    RunReport,
)

__all__ = [
    "compute_greedy_returns",
    "compute_spread",
    "compute_strategy_returns",
    "compute_drain_allocation",
    "AllocationRunResult",
    "AllocationSearch",
    "Allocator",
    "AllocatorConfig",
    "RunContext",
    "RunOutcome",
    "RunReport",
]
