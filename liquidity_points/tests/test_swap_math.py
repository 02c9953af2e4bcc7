"""
Swap Math 테스트

compute_swap_step의 V4 부호 규약 (음수 = exact input)과 경계 조건.
"""

import pytest

from ..constants import MAX_SWAP_FEE, Q96
from ..math.liquidity_math import get_amount0_delta, get_amount1_delta
from ..math.sqrt_price_math import get_next_sqrt_price_from_input, get_next_sqrt_price_from_output
from ..math.swap_math import compute_swap_step, get_sqrt_price_target
from ..math.tick_math import get_sqrt_ratio_at_tick


PRICE = Q96
TARGET_UP = get_sqrt_ratio_at_tick(100)
TARGET_DOWN = get_sqrt_ratio_at_tick(-100)
LIQUIDITY = 2 * 10**18


class TestGetSqrtPriceTarget:
    """다음 틱 가격과 가격 한도 중 가까운 쪽"""

    def test_zero_for_one_takes_max(self):
        assert get_sqrt_price_target(True, 100, 200) == 200
        assert get_sqrt_price_target(True, 300, 200) == 300

    def test_one_for_zero_takes_min(self):
        assert get_sqrt_price_target(False, 100, 200) == 100
        assert get_sqrt_price_target(False, 300, 200) == 200


class TestExactInput:
    """amount_remaining < 0"""

    def test_capped_at_target(self):
        """입력이 충분하면 목표 가격에서 멈춤"""
        step = compute_swap_step(PRICE, TARGET_UP, LIQUIDITY, -10**18, 3000)
        assert step.sqrt_price_next_x96 == TARGET_UP
        assert step.amount_in == get_amount1_delta(PRICE, TARGET_UP, LIQUIDITY, True)
        assert step.amount_out == get_amount0_delta(PRICE, TARGET_UP, LIQUIDITY, False)
        assert step.amount_in + step.fee_amount <= 10**18

    def test_fully_spent(self):
        """입력이 부족하면 전부 사용 (입력 + 수수료 = 지정량)"""
        step = compute_swap_step(PRICE, TARGET_DOWN, LIQUIDITY, -10**15, 3000)
        assert step.amount_in + step.fee_amount == 10**15
        assert TARGET_DOWN < step.sqrt_price_next_x96 < PRICE
        assert step.sqrt_price_next_x96 == get_next_sqrt_price_from_input(
            PRICE, LIQUIDITY, step.amount_in, True
        )

    def test_fee_on_capped_step(self):
        """목표 도달 시 수수료 = ceil(in * fee / (1e6 - fee))"""
        step = compute_swap_step(PRICE, TARGET_UP, LIQUIDITY, -10**18, 3000)
        expected = -(-step.amount_in * 3000 // (MAX_SWAP_FEE - 3000))
        assert step.fee_amount == expected

    def test_full_fee_consumes_everything(self):
        """수수료 100%면 입력 전부가 수수료"""
        step = compute_swap_step(PRICE, TARGET_UP, LIQUIDITY, -1000, MAX_SWAP_FEE)
        assert step.amount_in == 0
        assert step.amount_out == 0
        assert step.fee_amount == 1000
        assert step.sqrt_price_next_x96 == PRICE

    def test_zero_liquidity_jumps_to_target(self):
        step = compute_swap_step(PRICE, TARGET_UP, 0, -1000, 3000)
        assert step.sqrt_price_next_x96 == TARGET_UP
        assert step.amount_in == step.amount_out == step.fee_amount == 0


class TestExactOutput:
    """amount_remaining > 0"""

    def test_capped_at_target(self):
        step = compute_swap_step(PRICE, TARGET_DOWN, LIQUIDITY, 10**18, 500)
        assert step.sqrt_price_next_x96 == TARGET_DOWN
        assert step.amount_out == get_amount1_delta(TARGET_DOWN, PRICE, LIQUIDITY, False)
        assert step.amount_out < 10**18

    def test_partial_output(self):
        step = compute_swap_step(PRICE, TARGET_DOWN, LIQUIDITY, 10**14, 500)
        assert step.amount_out == 10**14
        assert step.sqrt_price_next_x96 == get_next_sqrt_price_from_output(
            PRICE, LIQUIDITY, 10**14, True
        )
        assert step.amount_in == get_amount0_delta(step.sqrt_price_next_x96, PRICE, LIQUIDITY, True)
        assert step.fee_amount > 0

    def test_direction_from_prices(self):
        """목표가 현재보다 높으면 one-for-zero: token0 출력"""
        step = compute_swap_step(PRICE, TARGET_UP, LIQUIDITY, 10**14, 0)
        assert step.amount_out == 10**14
        assert step.sqrt_price_next_x96 > PRICE
        assert step.fee_amount == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
