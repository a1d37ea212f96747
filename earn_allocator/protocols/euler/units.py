"""Unit conversions for Euler Vault Kit values."""

import math

from web3 import AsyncWeb3

from earn_allocator.core.constants import CONFIG_SCALE, MAX_UINT256, RAY, SECONDS_PER_YEAR
from .abi import EVK_ABI


def resolve_euler_supply_cap(raw_cap: int) -> int:
    """
    Decode an EVK AmountCap.

    The low 6 bits are a decimal exponent and the remaining bits a mantissa
    scaled by 100. Zero means no cap.
    """
    if raw_cap == 0:
        return MAX_UINT256
    exponent = raw_cap & 63
    mantissa = raw_cap >> 6
    return 10**exponent * mantissa // 100


def resolve_euler_borrow_apy(rate_per_second: int) -> float:
    """
    Convert a RAY per-second borrow rate to a continuously compounded APY.

    Returns:
        APY in percent (e.g. 7.49 for 7.49%), or inf when the rate is
        beyond float range
    """
    if rate_per_second == 0:
        return 0.0
    try:
        return math.expm1(rate_per_second / RAY * SECONDS_PER_YEAR) * 100
    except OverflowError:
        return math.inf


def resolve_euler_supply_apy(
    *,
    asset_decimals: int,
    borrow_apy: float,
    cash: int,
    interest_fee: int,
    total_borrows: int,
) -> float:
    """
    Supply APY earned by lenders.

    supply_apy = borrow_apy * utilization * (1 - fee)

    Args:
        asset_decimals: Decimals of the vault asset
        borrow_apy: Borrow APY in percent
        cash: Idle liquidity, asset units
        interest_fee: Protocol fee in basis points
        total_borrows: Outstanding borrows, asset units

    Returns:
        Supply APY in percent
    """
    unit = 10**asset_decimals
    borrows = total_borrows / unit
    supplied = (cash + total_borrows) / unit
    if supplied == 0:
        return 0.0
    utilization = borrows / supplied
    if utilization == 0:
        return 0.0
    return borrow_apy * utilization * (1 - interest_fee / CONFIG_SCALE)


async def convert_euler_shares_to_assets(vault_address: str, shares: int, web3: AsyncWeb3) -> int:
    """Convert vault shares to assets with the vault's own previewRedeem."""
    contract = web3.eth.contract(address=vault_address, abi=EVK_ABI)
    return await contract.functions.previewRedeem(shares).call()


async def get_euler_balance_of(address: str, vault_address: str, web3: AsyncWeb3) -> int:
    """
    Asset balance of an account in an EVK vault.

    Reads the share balance and converts it with previewRedeem.
    """
    contract = web3.eth.contract(address=vault_address, abi=EVK_ABI)
    shares = await contract.functions.balanceOf(address).call()
    return await convert_euler_shares_to_assets(vault_address, shares, web3)
