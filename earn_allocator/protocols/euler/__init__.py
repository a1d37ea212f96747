"""Euler Vault Kit specific implementations.

IRM evaluation: earn_allocator.protocols.euler.irm
Unit conversions: earn_allocator.protocols.euler.units
ABIs: earn_allocator.protocols.euler.abi
"""

from .irm import (
    compute_euler_adaptive_interest_rate,
    compute_euler_interest_rate,
    compute_interest_rate,
    w_exp,
)
from .units import (
    convert_euler_shares_to_assets,
    get_euler_balance_of,
    resolve_euler_borrow_apy,
    resolve_euler_supply_apy,
    resolve_euler_supply_cap,
)

__all__ = [
    "compute_euler_adaptive_interest_rate",
    "compute_euler_interest_rate",
    "compute_interest_rate",
    "w_exp",
    "convert_euler_shares_to_assets",
    "get_euler_balance_of",
    "resolve_euler_borrow_apy",
    "resolve_euler_supply_apy",
    "resolve_euler_supply_cap",
]
