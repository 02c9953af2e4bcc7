"""
Swap Math - 스왑 한 단계 계산

V4 부호 규약: amount_remaining < 0 이면 exact input, > 0 이면 exact output.
수수료는 pips(1/1,000,000) 단위이며 입력 토큰에서 차감됩니다.

References:
- Uniswap V4 Core: src/libraries/SwapMath.sol
"""

from typing import NamedTuple

from ..constants import MAX_SWAP_FEE
from .full_math import mul_div, mul_div_rounding_up
from .liquidity_math import get_amount0_delta, get_amount1_delta
from .sqrt_price_math import get_next_sqrt_price_from_input, get_next_sqrt_price_from_output


class SwapStep(NamedTuple):
    """스왑 단계 결과"""
    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int


def get_sqrt_price_target(zero_for_one: bool, sqrt_price_next_x96: int, sqrt_price_limit_x96: int) -> int:
    """이번 단계의 목표 가격: 다음 틱 가격과 가격 한도 중 먼저 도달하는 쪽"""
    if zero_for_one:
        return max(sqrt_price_next_x96, sqrt_price_limit_x96)
    return min(sqrt_price_next_x96, sqrt_price_limit_x96)


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int
) -> SwapStep:
    """현재 가격에서 목표 가격까지, 또는 남은 수량이 소진될 때까지 한 단계 스왑

    Args:
        sqrt_price_current_x96: 현재 sqrtPriceX96
        sqrt_price_target_x96: 목표 sqrtPriceX96 (넘어가지 않음)
        liquidity: 현재 활성 유동성
        amount_remaining: 남은 지정 수량 (음수 = exact input)
        fee_pips: 스왑 수수료 (pips)

    Returns:
        SwapStep(다음 가격, 입력량, 출력량, 수수료)
    """
    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining < 0

    if exact_in:
        amount_remaining_less_fee = mul_div(-amount_remaining, MAX_SWAP_FEE - fee_pips, MAX_SWAP_FEE)
        if zero_for_one:
            amount_in = get_amount0_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True)
        else:
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True)

        if amount_remaining_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
            if fee_pips == MAX_SWAP_FEE:
                fee_amount = amount_in
            else:
                fee_amount = mul_div_rounding_up(amount_in, fee_pips, MAX_SWAP_FEE - fee_pips)
        else:
            # 목표 가격에 도달하지 못함: 남은 입력을 모두 사용하고 나머지는 수수료
            amount_in = amount_remaining_less_fee
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
            fee_amount = -amount_remaining - amount_in

        if zero_for_one:
            amount_out = get_amount1_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False)
        else:
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False)
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False)
        else:
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False)

        if amount_remaining >= amount_out:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            amount_out = amount_remaining
            sqrt_price_next_x96 = get_next_sqrt_price_from_output(
                sqrt_price_current_x96, liquidity, amount_out, zero_for_one
            )

        if zero_for_one:
            amount_in = get_amount0_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True)
        else:
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True)
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, MAX_SWAP_FEE - fee_pips)

    return SwapStep(sqrt_price_next_x96, amount_in, amount_out, fee_amount)
