"""Core data models for the Euler Earn allocator."""

from .irm import AdaptiveIrm, IrmConfig, IrmType, KinkIrm, NoIrm, irm_config_from_dict
from .vault import EulerEarn, Protocol, RewardCampaign, Strategy, StrategyDetails
from .allocation import (
    Allocation,
    AllocationEntry,
    AllocationSpread,
    DrainConfig,
    DrainResult,
    OptimizationMode,
    ReturnDetail,
    ReturnsDetails,
    allocation_from_vault,
    clone_allocation,
)

__all__ = [
    "AdaptiveIrm",
    "IrmConfig",
    "IrmType",
    "KinkIrm",
    "NoIrm",
    "irm_config_from_dict",
    "EulerEarn",
    "Protocol",
    "RewardCampaign",
    "Strategy",
    "StrategyDetails",
    "Allocation",
    "AllocationEntry",
    "AllocationSpread",
    "DrainConfig",
    "DrainResult",
    "OptimizationMode",
    "ReturnDetail",
    "ReturnsDetails",
    "allocation_from_vault",
    "clone_allocation",
]
