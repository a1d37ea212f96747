"""Notification collaborators for executed runs."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import aiohttp

from earn_allocator.core.chains import get_chain_name, get_explorer_tx_url
from earn_allocator.core.errors import UnsupportedChainError
from earn_allocator.core.models import Allocation, EulerEarn, OptimizationMode, ReturnsDetails

logger = logging.getLogger(__name__)


@dataclass
class RunNotification:
    """Everything a notifier needs to describe an executed run."""
    chain_id: int
    mode: OptimizationMode
    vault: EulerEarn
    allocation: Allocation
    current_returns: float
    final_returns: float
    final_details: ReturnsDetails
    transferred: Optional[int] = None
    tx_hash: Optional[str] = None


def _format_amount(amount: int, decimals: int) -> str:
    return f"{amount / 10**decimals:,.2f}"


def format_run_message(notification: RunNotification) -> str:
    """Render the human readable run summary."""
    try:
        network = get_chain_name(notification.chain_id)
    except UnsupportedChainError:
        network = f"chain {notification.chain_id}"

    decimals = notification.vault.asset_decimals
    lines: List[str] = [
        f"Euler Earn rebalance ({notification.mode.value}) on {network}",
        f"Returns: {notification.current_returns:.4f}% -> {notification.final_returns:.4f}%",
    ]

    for address, entry in notification.allocation.items():
        if entry.diff == 0:
            continue
        strategy = notification.vault.strategies.get(address)
        symbol = strategy.details.symbol if strategy else address
        detail = notification.final_details.get(address)
        apy = f" @ {detail.total_apy:.2f}%" if detail else ""
        sign = "+" if entry.diff > 0 else "-"
        lines.append(
            f"  {symbol}: {_format_amount(entry.old_amount, decimals)} -> "
            f"{_format_amount(entry.new_amount, decimals)} ({sign}{_format_amount(abs(entry.diff), decimals)}){apy}"
        )

    if notification.transferred is not None:
        lines.append(f"Transferred: {_format_amount(notification.transferred, decimals)}")

    if notification.tx_hash:
        try:
            lines.append(get_explorer_tx_url(notification.chain_id, notification.tx_hash))
        except UnsupportedChainError:
            lines.append(f"Tx: {notification.tx_hash}")

    return "\n".join(lines)


class Notifier(ABC):
    """Reports executed runs."""

    @abstractmethod
    async def notify_run(self, notification: RunNotification) -> None:
        ...

    async def close(self) -> None:
        """Release any open connections."""
        return None


class LogNotifier(Notifier):
    """Writes the run summary to the log."""

    async def notify_run(self, notification: RunNotification) -> None:
        logger.info(format_run_message(notification))


class WebhookNotifier(Notifier):
    """Posts the run summary to a Slack-compatible webhook."""

    def __init__(self, webhook_url: str, timeout_seconds: int = 10):
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            )
        return self._session

    async def notify_run(self, notification: RunNotification) -> None:
        session = await self._get_session()
        payload = {"text": format_run_message(notification)}
        async with session.post(self.webhook_url, json=payload) as response:
            response.raise_for_status()
        logger.info("Run notification delivered")

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()
