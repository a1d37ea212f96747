"""Unit tests for allocation scoring."""

import pytest

from earn_allocator.core.models import AllocationEntry, ReturnDetail, Strategy
from earn_allocator.engine import compute_greedy_returns, compute_spread, compute_strategy_returns
from earn_allocator.protocols.euler import resolve_euler_borrow_apy

VAULT_A = "0x0000000000000000000000000000000000000001"
VAULT_B = "0x0000000000000000000000000000000000000002"
IDLE = "0x0000000000000000000000000000000000000003"


class TestStrategyReturns:
    """Tests for single-strategy yield after a move."""

    def test_rewards_undiluted_without_move(self, fixtures):
        details = fixtures.details(VAULT_A, cash=100, reward_apy=10.0)

        result = compute_strategy_returns(details, 0)

        assert result.rewards_apy == pytest.approx(10.0)
        assert result.interest_apy == 0
        assert result.utilization == 0

    def test_deposit_dilutes_rewards(self, fixtures):
        details = fixtures.details(VAULT_A, cash=100, reward_apy=10.0)

        result = compute_strategy_returns(details, 100)

        assert result.rewards_apy == pytest.approx(5.0)

    def test_withdrawal_concentrates_rewards(self, fixtures):
        details = fixtures.details(VAULT_A, cash=100, total_borrows=100, reward_apy=10.0)

        result = compute_strategy_returns(details, -100)

        assert result.rewards_apy == pytest.approx(20.0)
        assert result.utilization == 1.0

    def test_cash_floored_at_zero(self, fixtures):
        details = fixtures.details(VAULT_A, cash=100, reward_apy=10.0)

        result = compute_strategy_returns(details, -500)

        assert result == ReturnDetail(interest_apy=0.0, rewards_apy=0.0, utilization=0.0)

    def test_interest_follows_irm(self, fixtures, kink_irm):
        details = fixtures.details(VAULT_A, cash=100 * 10**6, total_borrows=100 * 10**6, irm_config=kink_irm)

        result = compute_strategy_returns(details, 0)

        assert result.utilization == pytest.approx(0.5)
        assert result.interest_apy > resolve_euler_borrow_apy(kink_irm.base_rate) * 0.5

    def test_fee_reduces_interest(self, fixtures, kink_irm):
        no_fee = fixtures.details(VAULT_A, cash=10**8, total_borrows=10**8, irm_config=kink_irm)
        with_fee = fixtures.details(
            VAULT_A, cash=10**8, total_borrows=10**8, irm_config=kink_irm, interest_fee=1000
        )

        assert compute_strategy_returns(with_fee, 0).interest_apy == pytest.approx(
            compute_strategy_returns(no_fee, 0).interest_apy * 0.9
        )


class TestGreedyReturns:
    """Tests for blended returns."""

    @pytest.fixture
    def vault(self, fixtures):
        return fixtures.vault({
            VAULT_A: Strategy(details=fixtures.details(VAULT_A, cash=100, reward_apy=10.0), cap=1_000, allocation=100),
            VAULT_B: Strategy(details=fixtures.details(VAULT_B, cash=100), cap=1_000, allocation=100),
            IDLE: Strategy(details=fixtures.details(IDLE), cap=1_000, allocation=0),
        }, idle_vault_address=IDLE)

    def test_weighted_by_new_amount(self, vault, fixtures):
        allocation = fixtures.allocation({VAULT_A: 100, VAULT_B: 100})

        total, details = compute_greedy_returns(vault, allocation)

        assert total == pytest.approx(5.0)
        assert set(details) == {VAULT_A, VAULT_B}
        assert details[VAULT_A].total_apy == pytest.approx(10.0)

    def test_zero_total_is_zero(self, vault, fixtures):
        allocation = fixtures.allocation({VAULT_A: 0, VAULT_B: 0})

        total, details = compute_greedy_returns(vault, allocation)

        assert total == 0.0
        assert len(details) == 2

    def test_deterministic(self, vault, fixtures):
        allocation = fixtures.allocation({VAULT_A: 100, VAULT_B: 100})

        assert compute_greedy_returns(vault, allocation) == compute_greedy_returns(vault, allocation)

    def test_scores_planned_moves(self, vault):
        allocation = {
            VAULT_A: AllocationEntry(old_amount=100, new_amount=200, diff=100),
            VAULT_B: AllocationEntry(old_amount=100, new_amount=0, diff=-100),
        }

        total, details = compute_greedy_returns(vault, allocation)

        # A's rewards are diluted to 5% and it holds everything
        assert details[VAULT_A].rewards_apy == pytest.approx(5.0)
        assert total == pytest.approx(5.0)


class TestSpread:
    """Tests for yield spread across allocated strategies."""

    @pytest.fixture
    def vault(self, fixtures):
        return fixtures.vault({
            VAULT_A: Strategy(details=fixtures.details(VAULT_A), cap=1_000, allocation=100),
            VAULT_B: Strategy(details=fixtures.details(VAULT_B), cap=1_000, allocation=100),
            IDLE: Strategy(details=fixtures.details(IDLE), cap=1_000, allocation=100),
        }, idle_vault_address=IDLE)

    @pytest.fixture
    def details(self):
        return {
            VAULT_A: ReturnDetail(interest_apy=8.0, rewards_apy=4.0, utilization=0.8),
            VAULT_B: ReturnDetail(interest_apy=2.0, rewards_apy=0.0, utilization=0.2),
            IDLE: ReturnDetail(interest_apy=0.0, rewards_apy=0.0, utilization=0.0),
        }

    def test_max_minus_min(self, vault, details, fixtures):
        allocation = fixtures.allocation({VAULT_A: 100, VAULT_B: 100, IDLE: 100})

        assert compute_spread(vault, allocation, details) == pytest.approx(10.0)

    def test_ignores_empty_strategies(self, vault, details, fixtures):
        allocation = fixtures.allocation({VAULT_A: 100, VAULT_B: 0, IDLE: 100})

        assert compute_spread(vault, allocation, details) == 0.0

    def test_idle_vault_excluded(self, vault, details, fixtures):
        allocation = fixtures.allocation({VAULT_B: 100, IDLE: 100})

        assert compute_spread(vault, allocation, details) == 0.0
