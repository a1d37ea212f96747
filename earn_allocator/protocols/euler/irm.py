"""Interest rate model evaluation for Euler Vault Kit vaults.

All math is integer and mirrors the on-chain contracts, so results match the
values the vaults would report for the same state.
"""

from earn_allocator.core.constants import (
    LN_2_INT,
    LN_WEI_INT,
    MAX_ALLOWED_INTEREST_RATE,
    UTILIZATION_SCALE,
    WAD,
    WEXP_UPPER_BOUND,
    WEXP_UPPER_VALUE,
)
from earn_allocator.core.errors import UnsupportedModel
from earn_allocator.core.models import AdaptiveIrm, IrmConfig, KinkIrm, NoIrm

# Adaptive curve rates are WAD per second, EVK expects RAY per second
WAD_TO_RAY = 10**9


def _div_to_zero(x: int, y: int) -> int:
    """Signed integer division truncating toward zero, like Solidity."""
    quotient = abs(x) // abs(y)
    return quotient if (x >= 0) == (y > 0) else -quotient


def _w_mul_to_zero(x: int, y: int) -> int:
    return _div_to_zero(x * y, WAD)


def _w_div_to_zero(x: int, y: int) -> int:
    return _div_to_zero(x * WAD, y)


def w_exp(x: int) -> int:
    """
    Approximate e^x for a WAD-scaled x.

    Range-reduces x = q * ln(2) + r, approximates e^r with a second order
    Taylor polynomial and shifts by q. Saturates outside the usable range.
    """
    if x < LN_WEI_INT:
        return 0
    if x >= WEXP_UPPER_BOUND:
        return WEXP_UPPER_VALUE

    rounding_adjustment = -(LN_2_INT // 2) if x < 0 else LN_2_INT // 2
    q = _div_to_zero(x + rounding_adjustment, LN_2_INT)
    r = x - q * LN_2_INT
    exp_r = WAD + r + _div_to_zero(_div_to_zero(r * r, WAD), 2)

    if q >= 0:
        return exp_r << q
    return exp_r >> -q


def compute_euler_interest_rate(cash: int, total_borrows: int, irm_config: KinkIrm) -> int:
    """
    Per-second borrow rate (RAY) of a linear kinked model.

    Utilization is measured on the 2**32 - 1 scale. Below or at the kink
    only slope1 applies; above it slope2 applies to the excess.
    """
    total_assets = cash + total_borrows
    utilization = 0 if total_assets == 0 else total_borrows * UTILIZATION_SCALE // total_assets

    rate = irm_config.base_rate
    if utilization <= irm_config.kink:
        rate += utilization * irm_config.slope1
    else:
        rate += irm_config.kink * irm_config.slope1
        rate += irm_config.slope2 * (utilization - irm_config.kink)
    return rate


def _new_rate_at_target(start_rate_at_target: int, linear_adaptation: int, irm_config: AdaptiveIrm) -> int:
    rate = _w_mul_to_zero(start_rate_at_target, w_exp(linear_adaptation))
    return max(irm_config.min_rate_at_target, min(irm_config.max_rate_at_target, rate))


def _curve(rate_at_target: int, err: int, curve_steepness: int) -> int:
    # Non-negative: 1 - 1/C >= 0 and C - 1 >= 0
    if err < 0:
        coeff = WAD - _w_div_to_zero(WAD, curve_steepness)
    else:
        coeff = curve_steepness - WAD
    return _w_mul_to_zero(_w_mul_to_zero(coeff, err) + WAD, rate_at_target)


def compute_euler_adaptive_interest_rate(
    cash: int,
    total_borrows: int,
    irm_config: AdaptiveIrm,
    elapsed: int = 0,
) -> int:
    """
    Per-second borrow rate (RAY) of the adaptive curve model.

    The rate at target is taken from the config as read from chain. With
    elapsed == 0 it is used as is; a positive elapsed (seconds since the
    vault's last update) adapts it toward equilibrium first, averaging the
    start, mid and end points of the adaptation.

    Args:
        cash: Idle liquidity of the vault
        total_borrows: Outstanding borrows
        irm_config: Adaptive model parameters
        elapsed: Seconds of adaptation to apply

    Returns:
        Borrow rate per second, RAY scaled
    """
    total_assets = cash + total_borrows
    utilization = 0 if total_assets == 0 else total_borrows * WAD // total_assets

    target = irm_config.target_utilization
    err_norm_factor = WAD - target if utilization > target else target
    err = _w_div_to_zero(utilization - target, err_norm_factor)

    start_rate_at_target = irm_config.rate_at_target
    if start_rate_at_target == 0:
        # Never updated on chain yet
        avg_rate_at_target = irm_config.initial_rate_at_target
    else:
        speed = _w_mul_to_zero(irm_config.adjustment_speed, err)
        linear_adaptation = speed * elapsed
        if linear_adaptation == 0:
            avg_rate_at_target = start_rate_at_target
        else:
            end_rate_at_target = _new_rate_at_target(start_rate_at_target, linear_adaptation, irm_config)
            mid_rate_at_target = _new_rate_at_target(
                start_rate_at_target, _div_to_zero(linear_adaptation, 2), irm_config
            )
            avg_rate_at_target = (start_rate_at_target + end_rate_at_target + 2 * mid_rate_at_target) // 4

    return _curve(avg_rate_at_target, err, irm_config.curve_steepness) * WAD_TO_RAY


def compute_interest_rate(irm_config: IrmConfig, cash: int, total_borrows: int) -> int:
    """
    Dispatch to the evaluator of the configured model.

    The result is capped at MAX_ALLOWED_INTEREST_RATE, as the vault itself
    caps whatever its IRM returns.
    """
    if isinstance(irm_config, NoIrm):
        return 0
    if isinstance(irm_config, KinkIrm):
        return min(compute_euler_interest_rate(cash, total_borrows, irm_config), MAX_ALLOWED_INTEREST_RATE)
    if isinstance(irm_config, AdaptiveIrm):
        return min(
            compute_euler_adaptive_interest_rate(cash, total_borrows, irm_config), MAX_ALLOWED_INTEREST_RATE
        )
    raise UnsupportedModel(f"Unsupported interest rate model: {irm_config!r}")
