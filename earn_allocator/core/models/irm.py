"""Interest rate model configurations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Union

from ..errors import UnsupportedModel


class IrmType(Enum):
    """Interest rate model variants."""
    NO_IRM = "noIrm"
    IRM = "irm"                  # Two-slope kinked model
    ADAPTIVE_IRM = "adaptiveIrm"  # Target-seeking adaptive curve


@dataclass(frozen=True)
class NoIrm:
    """Vault without an interest rate model (e.g. the idle vault)."""
    type: ClassVar[IrmType] = IrmType.NO_IRM


@dataclass(frozen=True)
class KinkIrm:
    """
    Linear kinked model.

    Slopes are per utilization unit on the 2**32 - 1 scale, so
    `slope * utilization` is already a RAY-scaled per-second rate.
    """
    base_rate: int
    kink: int
    slope1: int
    slope2: int

    type: ClassVar[IrmType] = IrmType.IRM


@dataclass(frozen=True)
class AdaptiveIrm:
    """Adaptive curve model. All values are WAD scaled, rates per second."""
    rate_at_target: int
    target_utilization: int
    initial_rate_at_target: int
    min_rate_at_target: int
    max_rate_at_target: int
    curve_steepness: int
    adjustment_speed: int

    type: ClassVar[IrmType] = IrmType.ADAPTIVE_IRM


IrmConfig = Union[NoIrm, KinkIrm, AdaptiveIrm]


def irm_config_from_dict(data: Dict[str, Any]) -> IrmConfig:
    """
    Build an IRM config from a tagged payload.

    Args:
        data: Dict with a "type" tag and the model's integer parameters,
            keyed by either snake_case or camelCase names

    Returns:
        The matching IrmConfig variant

    Raises:
        UnsupportedModel: If the tag is not a known variant
    """
    tag = data.get("type")
    try:
        irm_type = IrmType(tag)
    except ValueError:
        raise UnsupportedModel(f"Unsupported interest rate model: {tag}") from None

    def value(snake: str, camel: str) -> int:
        return int(data[snake] if snake in data else data[camel])

    if irm_type is IrmType.NO_IRM:
        return NoIrm()
    if irm_type is IrmType.IRM:
        return KinkIrm(
            base_rate=value("base_rate", "baseRate"),
            kink=value("kink", "kink"),
            slope1=value("slope1", "slope1"),
            slope2=value("slope2", "slope2"),
        )
    if irm_type is IrmType.ADAPTIVE_IRM:
        return AdaptiveIrm(
            rate_at_target=value("rate_at_target", "rateAtTarget"),
            target_utilization=value("target_utilization", "targetUtilization"),
            initial_rate_at_target=value("initial_rate_at_target", "initialRateAtTarget"),
            min_rate_at_target=value("min_rate_at_target", "minRateAtTarget"),
            max_rate_at_target=value("max_rate_at_target", "maxRateAtTarget"),
            curve_steepness=value("curve_steepness", "curveSteepness"),
            adjustment_speed=value("adjustment_speed", "adjustmentSpeed"),
        )
    raise UnsupportedModel(f"Unsupported interest rate model: {tag}")
