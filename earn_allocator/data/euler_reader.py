"""On-chain reader building Euler Earn snapshots."""

import logging
from typing import Any, Dict, Optional

from aiolimiter import AsyncLimiter
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from config.settings import Settings, get_settings
from earn_allocator.core.constants import DEFAULT_RPC_RATE_WINDOW, ZERO_ADDRESS
from earn_allocator.core.errors import ConfigurationError, UnsupportedModel
from earn_allocator.core.models import (
    AdaptiveIrm,
    EulerEarn,
    IrmConfig,
    KinkIrm,
    NoIrm,
    Strategy,
    StrategyDetails,
)
from earn_allocator.protocols.euler import (
    compute_interest_rate,
    convert_euler_shares_to_assets,
    resolve_euler_borrow_apy,
    resolve_euler_supply_apy,
    resolve_euler_supply_cap,
)
from earn_allocator.protocols.euler.abi import (
    ERC20_ABI,
    EULER_EARN_ABI,
    EVK_ABI,
    IRM_ADAPTIVE_CURVE_ABI,
    IRM_LINEAR_KINK_ABI,
)

logger = logging.getLogger(__name__)

# Reverts and empty returns mean the contract lacks the requested getter
_MISSING_GETTER_ERRORS = (ContractLogicError, BadFunctionCallOutput)


class EulerEarnReader:
    """Reads an Euler Earn vault and its strategies through JSON-RPC."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        web3: Optional[AsyncWeb3] = None,
    ):
        self.settings = settings or get_settings()
        self._web3 = web3
        self._rate_limiter = AsyncLimiter(self.settings.rpc_rate_limit, DEFAULT_RPC_RATE_WINDOW)

    def _get_web3(self) -> AsyncWeb3:
        """Get or create Web3 instance."""
        if self._web3 is None:
            if not self.settings.rpc_url:
                raise ConfigurationError("RPC URL not configured. Set RPC_URL in .env")
            self._web3 = AsyncWeb3(AsyncHTTPProvider(self.settings.rpc_url))
        return self._web3

    @property
    def earn_vault_address(self) -> str:
        if not self.settings.earn_vault_address:
            raise ConfigurationError("Earn vault not configured. Set EARN_VAULT_ADDRESS in .env")
        return self.settings.earn_vault_address

    async def _call(self, function: Any) -> Any:
        """Run a contract call under the rate limiter."""
        async with self._rate_limiter:
            return await function.call()

    def _contract(self, address: str, abi: list):
        return self._get_web3().eth.contract(address=address, abi=abi)

    async def fetch_earn_vault(self) -> EulerEarn:
        """
        Snapshot the earn vault: every strategy in the withdraw queue with
        its cap, current allocation and on-chain details.
        """
        earn = self._contract(self.earn_vault_address, EULER_EARN_ABI)
        asset = await self._call(earn.functions.asset())
        asset_decimals = await self._call(self._contract(asset, ERC20_ABI).functions.decimals())

        queue_length = await self._call(earn.functions.withdrawQueueLength())
        queue = []
        for index in range(queue_length):
            queue.append(await self._call(earn.functions.withdrawQueue(index)))

        idle_vault = self.settings.effective_idle_vault
        if self.settings.no_idle_vault and not self.settings.idle_vault_address:
            logger.warning("NO_IDLE_VAULT is set but IDLE_VAULT_ADDRESS is not configured; no vault is excluded")
        strategies: Dict[str, Strategy] = {}
        for address in queue:
            if self.settings.no_idle_vault and address == self.settings.idle_vault_address:
                logger.debug(f"Skipping idle vault {address}")
                continue
            _, cap, enabled, _ = await self._call(earn.functions.config(address))
            if not enabled:
                logger.debug(f"Skipping disabled strategy {address}")
                continue
            allocation = await self.fetch_balance_of(self.earn_vault_address, address)
            details = await self.fetch_strategy_details(address)
            strategies[address] = Strategy(details=details, cap=cap, allocation=allocation)
            logger.info(f"Loaded strategy {details.symbol} ({address}): allocation={allocation} cap={cap}")

        return EulerEarn(
            strategies=strategies,
            asset_decimals=asset_decimals,
            initial_allocation_queue=[address for address in queue if address in strategies],
            idle_vault_address=idle_vault if idle_vault in strategies else None,
        )

    async def fetch_balance_of(self, holder: str, vault_address: str) -> int:
        """Assets held by holder in an EVK vault (balanceOf, then previewRedeem)."""
        vault = self._contract(vault_address, EVK_ABI)
        shares = await self._call(vault.functions.balanceOf(holder))
        async with self._rate_limiter:
            return await convert_euler_shares_to_assets(vault_address, shares, self._get_web3())

    async def fetch_strategy_details(self, vault_address: str) -> StrategyDetails:
        """
        Read raw vault state and derive its current borrow/supply APY.

        Reward APY and reward campaigns are not available on chain; they are
        left at 0 and empty. Callers with an incentives source fill them in
        with dataclasses.replace before scoring.
        """
        vault = self._contract(vault_address, EVK_ABI)

        cash = await self._call(vault.functions.cash())
        total_borrows = await self._call(vault.functions.totalBorrows())
        total_shares = await self._call(vault.functions.totalSupply())
        interest_fee = await self._call(vault.functions.interestFee())
        supply_cap_raw, _ = await self._call(vault.functions.caps())
        symbol = await self._call(vault.functions.symbol())
        asset = await self._call(vault.functions.asset())
        asset_decimals = await self._call(self._contract(asset, ERC20_ABI).functions.decimals())
        max_withdraw = await self._call(vault.functions.maxWithdraw(self.earn_vault_address))
        irm_address = await self._call(vault.functions.interestRateModel())

        irm_config = await self.fetch_irm_config(irm_address, vault_address)
        borrow_apy = resolve_euler_borrow_apy(compute_interest_rate(irm_config, cash, total_borrows))
        supply_apy = resolve_euler_supply_apy(
            asset_decimals=asset_decimals,
            borrow_apy=borrow_apy,
            cash=cash,
            interest_fee=interest_fee,
            total_borrows=total_borrows,
        )

        return StrategyDetails(
            vault=vault_address,
            symbol=symbol,
            cash=cash,
            total_borrows=total_borrows,
            total_shares=total_shares,
            interest_fee=interest_fee,
            supply_cap=resolve_euler_supply_cap(supply_cap_raw),
            asset_decimals=asset_decimals,
            irm_config=irm_config,
            max_withdraw=max_withdraw,
            borrow_apy=borrow_apy,
            supply_apy=supply_apy,
        )

    async def fetch_irm_config(self, irm_address: str, vault_address: str) -> IrmConfig:
        """
        Identify and read a vault's interest rate model.

        Raises:
            UnsupportedModel: If the contract is neither a kinked nor an
                adaptive curve model
        """
        if int(irm_address, 16) == int(ZERO_ADDRESS, 16):
            return NoIrm()

        kink = self._contract(irm_address, IRM_LINEAR_KINK_ABI)
        try:
            return KinkIrm(
                kink=await self._call(kink.functions.kink()),
                base_rate=await self._call(kink.functions.baseRate()),
                slope1=await self._call(kink.functions.slope1()),
                slope2=await self._call(kink.functions.slope2()),
            )
        except _MISSING_GETTER_ERRORS:
            logger.debug(f"IRM {irm_address} is not a kinked model")

        adaptive = self._contract(irm_address, IRM_ADAPTIVE_CURVE_ABI)
        try:
            target_utilization = await self._call(adaptive.functions.TARGET_UTILIZATION())
        except _MISSING_GETTER_ERRORS:
            raise UnsupportedModel(f"Unsupported interest rate model at {irm_address}") from None

        rate_at_target, _ = await self._call(adaptive.functions.irState(vault_address))
        return AdaptiveIrm(
            rate_at_target=rate_at_target,
            target_utilization=target_utilization,
            initial_rate_at_target=await self._call(adaptive.functions.INITIAL_RATE_AT_TARGET()),
            min_rate_at_target=await self._call(adaptive.functions.MIN_RATE_AT_TARGET()),
            max_rate_at_target=await self._call(adaptive.functions.MAX_RATE_AT_TARGET()),
            curve_steepness=await self._call(adaptive.functions.CURVE_STEEPNESS()),
            adjustment_speed=await self._call(adaptive.functions.ADJUSTMENT_SPEED()),
        )

    async def close(self):
        """Close the reader."""
        self._web3 = None
