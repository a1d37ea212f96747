"""Core module - models, constants and errors."""

from .models import (
    AdaptiveIrm,
    Allocation,
    AllocationEntry,
    AllocationSpread,
    DrainConfig,
    DrainResult,
    EulerEarn,
    IrmConfig,
    IrmType,
    KinkIrm,
    NoIrm,
    OptimizationMode,
    Protocol,
    ReturnDetail,
    ReturnsDetails,
    RewardCampaign,
    Strategy,
    StrategyDetails,
)
from .constants import MAX_UINT256, RAY, SECONDS_PER_YEAR, WAD
from .errors import (
    AllocatorError,
    ConfigurationError,
    InvalidDrainConfig,
    UnsupportedChainError,
    UnsupportedModel,
)

__all__ = [
    "AdaptiveIrm",
    "Allocation",
    "AllocationEntry",
    "AllocationSpread",
    "DrainConfig",
    "DrainResult",
    "EulerEarn",
    "IrmConfig",
    "IrmType",
    "KinkIrm",
    "NoIrm",
    "OptimizationMode",
    "Protocol",
    "ReturnDetail",
    "ReturnsDetails",
    "RewardCampaign",
    "Strategy",
    "StrategyDetails",
    "MAX_UINT256",
    "RAY",
    "SECONDS_PER_YEAR",
    "WAD",
    "AllocatorError",
    "ConfigurationError",
    "InvalidDrainConfig",
    "UnsupportedChainError",
    "UnsupportedModel",
]
