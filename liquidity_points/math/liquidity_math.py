"""
Liquidity Math - 유동성 계산

집중화된 유동성(Concentrated Liquidity)에서 유동성 델타에 대응하는 토큰 수량과
유동성 델타 적용.

References:
- Uniswap V4 Core: src/libraries/SqrtPriceMath.sol (getAmount0Delta, getAmount1Delta)
- Uniswap V4 Core: src/libraries/LiquidityMath.sol

핵심 공식:
    Δx = L * (1/√P_a - 1/√P_b)
    Δy = L * (√P_b - √P_a)
"""

from ..constants import Q96, UINT128_MAX
from .full_math import mul_div, mul_div_rounding_up, div_rounding_up


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """두 가격 사이 유동성 L에 해당하는 token0 양

    공식: Δx = L * (√P_b - √P_a) / (√P_a * √P_b)

    Args:
        sqrt_ratio_a_x96: 한쪽 sqrtPriceX96
        sqrt_ratio_b_x96: 다른 쪽 sqrtPriceX96
        liquidity: 유동성 (부호 없음)
        round_up: True면 올림, False면 내림

    Returns:
        amount0 (token0 수량, 최소 단위)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_a_x96 <= 0:
        raise ValueError("sqrt price must be positive")

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """두 가격 사이 유동성 L에 해당하는 token1 양

    공식: Δy = L * (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amount0_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """부호 있는 유동성 델타에 대한 token0 델타

    유동성 추가(양수)는 풀에 지불할 금액이므로 음수로 올림,
    제거(음수)는 받을 금액이므로 양수로 내림.
    """
    if liquidity < 0:
        return get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
    return -get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True)


def get_amount1_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """부호 있는 유동성 델타에 대한 token1 델타"""
    if liquidity < 0:
        return get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
    return -get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True)


def add_delta(x: int, y: int) -> int:
    """uint128 유동성에 int128 델타 적용 (LiquidityMath.addDelta)

    Raises:
        OverflowError: 결과가 uint128 범위를 벗어난 경우
    """
    z = x + y
    if z < 0 or z > UINT128_MAX:
        raise OverflowError(f"add_delta: {x} + {y} out of uint128 range")
    return z
