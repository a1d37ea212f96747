"""Unit tests for execution and notification collaborators."""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock

from earn_allocator.core.models import AllocationEntry, OptimizationMode, ReturnDetail, Strategy
from earn_allocator.services import (
    DryRunExecutor,
    LogNotifier,
    RunNotification,
    WebhookNotifier,
    format_run_message,
    plan_moves,
)

VAULT_A = "0x0000000000000000000000000000000000000001"
VAULT_B = "0x0000000000000000000000000000000000000002"
VAULT_C = "0x0000000000000000000000000000000000000003"
TX_HASH = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


@pytest.fixture
def vault(fixtures):
    return fixtures.vault({
        VAULT_A: Strategy(details=fixtures.details(VAULT_A, symbol="eUSDC-1"), cap=10**12, allocation=5_000_000),
        VAULT_B: Strategy(details=fixtures.details(VAULT_B, symbol="eUSDC-2"), cap=10**12, allocation=0),
        VAULT_C: Strategy(details=fixtures.details(VAULT_C, symbol="eUSDC-3"), cap=10**12, allocation=1_000_000),
    })


@pytest.fixture
def allocation():
    return {
        VAULT_A: AllocationEntry(old_amount=5_000_000, new_amount=50_000, diff=-4_950_000),
        VAULT_B: AllocationEntry(old_amount=0, new_amount=4_950_000, diff=4_950_000),
        VAULT_C: AllocationEntry(old_amount=1_000_000, new_amount=1_000_000, diff=0),
    }


@pytest.fixture
def notification(vault, allocation):
    return RunNotification(
        chain_id=1,
        mode=OptimizationMode.DRAIN,
        vault=vault,
        allocation=allocation,
        current_returns=3.5,
        final_returns=4.25,
        final_details={VAULT_B: ReturnDetail(interest_apy=4.0, rewards_apy=0.5, utilization=0.7)},
        transferred=4_950_000,
        tx_hash=TX_HASH,
    )


class TestPlanMoves:

    def test_withdrawals_first_and_unchanged_skipped(self, vault):
        allocation = {
            VAULT_B: AllocationEntry(old_amount=0, new_amount=10, diff=10),
            VAULT_C: AllocationEntry(old_amount=5, new_amount=5, diff=0),
            VAULT_A: AllocationEntry(old_amount=10, new_amount=0, diff=-10),
        }

        assert plan_moves(vault, allocation) == [(VAULT_A, -10), (VAULT_B, 10)]


class TestDryRunExecutor:

    @pytest.mark.asyncio
    async def test_logs_moves_and_returns_no_hash(self, vault, allocation, caplog):
        executor = DryRunExecutor()

        with caplog.at_level(logging.INFO, logger="earn_allocator.services.executor"):
            tx_hash = await executor.execute_rebalance(vault, allocation, 4_950_000)

        assert tx_hash is None
        assert "Dry run: 2 vault moves planned" in caplog.text
        assert "withdraw 4950000 eUSDC-1" in caplog.text
        assert "drain transfer of 4950000" in caplog.text


class TestFormatRunMessage:

    def test_message(self, notification):
        message = format_run_message(notification)
        lines = message.splitlines()

        assert lines[0] == "Euler Earn rebalance (drain) on mainnet"
        assert lines[1] == "Returns: 3.5000% -> 4.2500%"
        assert "eUSDC-1: 5.00 -> 0.05 (-4.95)" in message
        assert "eUSDC-2: 0.00 -> 4.95 (+4.95) @ 4.50%" in message
        assert "eUSDC-3" not in message
        assert "Transferred: 4.95" in message
        assert lines[-1] == f"https://etherscan.io/tx/{TX_HASH}"

    def test_unknown_chain_falls_back(self, notification):
        notification.chain_id = 999

        message = format_run_message(notification)

        assert message.startswith("Euler Earn rebalance (drain) on chain 999")
        assert f"Tx: {TX_HASH}" in message

    def test_no_transfer_line_for_equalization(self, notification):
        notification.mode = OptimizationMode.EQUALIZATION
        notification.transferred = None
        notification.tx_hash = None

        message = format_run_message(notification)

        assert "Transferred" not in message
        assert "etherscan" not in message


class TestNotifiers:

    @pytest.mark.asyncio
    async def test_log_notifier(self, notification, caplog):
        with caplog.at_level(logging.INFO, logger="earn_allocator.services.notifier"):
            await LogNotifier().notify_run(notification)

        assert "Euler Earn rebalance (drain) on mainnet" in caplog.text

    @pytest.mark.asyncio
    async def test_webhook_posts_message(self, notification):
        response = MagicMock()
        response.raise_for_status = MagicMock()
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        session = MagicMock()
        session.post = MagicMock(return_value=context)
        session.closed = False
        session.close = AsyncMock()

        notifier = WebhookNotifier("https://hooks.example.com/T000")
        notifier._session = session

        await notifier.notify_run(notification)

        url = session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert url == "https://hooks.example.com/T000"
        assert payload["text"] == format_run_message(notification)
        response.raise_for_status.assert_called_once()

        await notifier.close()
        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_webhook_error_propagates(self, notification):
        response = MagicMock()
        response.raise_for_status = MagicMock(side_effect=RuntimeError("500"))
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        session = MagicMock()
        session.post = MagicMock(return_value=context)
        session.closed = False

        notifier = WebhookNotifier("https://hooks.example.com/T000")
        notifier._session = session

        with pytest.raises(RuntimeError):
            await notifier.notify_run(notification)

    @pytest.mark.asyncio
    async def test_close_without_session(self):
        await WebhookNotifier("https://hooks.example.com/T000").close()
