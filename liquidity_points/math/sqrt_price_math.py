"""
Sqrt Price Math - sqrtPriceX96 관련 계산

V4의 가격은 sqrtPriceX96 형식으로 저장됩니다.
sqrtPriceX96 = sqrt(price) * 2^96

스왑 단계의 다음 가격 계산은 Solidity의 uint256/uint160 오버플로우 분기까지
그대로 재현합니다. 시뮬레이션과 실제 스왑이 같은 분기를 타야 하기 때문입니다.

References:
- Uniswap V4 Core: src/libraries/SqrtPriceMath.sol
"""

from ..constants import Q96, UINT256_MAX
from .full_math import mul_div, mul_div_rounding_up, div_rounding_up

UINT160_MAX: int = 2 ** 160 - 1


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    decimal0: int = 18,
    decimal1: int = 18
) -> float:
    """sqrtPriceX96을 human-readable 가격으로 변환

    가격 = (sqrtPriceX96 / 2^96)^2 / 10^(decimal1 - decimal0)
    """
    sqrt_price = sqrt_price_x96 / Q96
    return sqrt_price ** 2 / (10 ** (decimal1 - decimal0))


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount0 변화에 따른 다음 sqrtPriceX96 계산 (올림)

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 유동성
        amount: amount0 변화량
        add: True면 풀에 추가, False면 풀에서 제거

    Returns:
        새로운 sqrtPriceX96

    Raises:
        OverflowError: 제거량이 가격 범위를 넘는 경우 (PriceOverflow)
    """
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << 96
    product = amount * sqrt_price_x96

    if add:
        # product, denominator가 uint256에 들어가면 정밀한 공식 사용
        if product <= UINT256_MAX:
            denominator = numerator1 + product
            if denominator <= UINT256_MAX:
                return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
        return div_rounding_up(numerator1, (numerator1 // sqrt_price_x96) + amount)

    if product > UINT256_MAX or numerator1 <= product:
        raise OverflowError("PriceOverflow")
    denominator = numerator1 - product
    result = mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
    if result > UINT160_MAX:
        raise OverflowError("SafeCastOverflow")
    return result


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount1 변화에 따른 다음 sqrtPriceX96 계산 (내림)"""
    if add:
        quotient = mul_div(amount, Q96, liquidity)
        result = sqrt_price_x96 + quotient
        if result > UINT160_MAX:
            raise OverflowError("SafeCastOverflow")
        return result

    quotient = mul_div_rounding_up(amount, Q96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise OverflowError("NotEnoughLiquidity")
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool
) -> int:
    """입력량만큼 스왑한 뒤의 sqrtPriceX96

    zero_for_one이면 token0 입력(가격 하락), 아니면 token1 입력(가격 상승).
    """
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ValueError("sqrt price and liquidity must be positive")

    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, True)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool
) -> int:
    """출력량만큼 스왑한 뒤의 sqrtPriceX96"""
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ValueError("sqrt price and liquidity must be positive")

    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_out, False)
    return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, False)
