"""
Full Math - 256비트 안전 곱셈/나눗셈과 비트 연산

Solidity의 uint256 연산 의미를 Python 정수로 재현합니다.
Python 정수는 오버플로우가 없으므로 결과 폭을 직접 검사하고,
상대 누적기는 고정 폭 모듈러 연산(랩어라운드)으로 다룹니다.

References:
- Uniswap V4 Core: src/libraries/FullMath.sol, UnsafeMath.sol, BitMath.sol
- Uniswap V4 Core: src/types/BalanceDelta.sol
"""

from typing import Tuple

from ..constants import UINT256_MAX, INT128_MIN, INT128_MAX


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a × b ÷ denominator), 중간 곱은 512비트까지 허용

    Args:
        a: 피승수
        b: 승수
        denominator: 제수

    Returns:
        내림 결과

    Raises:
        ZeroDivisionError: denominator가 0인 경우
        OverflowError: 결과가 uint256을 넘는 경우
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div: denominator is zero")
    result = (a * b) // denominator
    if result > UINT256_MAX:
        raise OverflowError("mul_div: result exceeds uint256")
    return result


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a × b ÷ denominator)"""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        if result >= UINT256_MAX:
            raise OverflowError("mul_div_rounding_up: result exceeds uint256")
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """numerator / denominator 올림 (UnsafeMath.divRoundingUp)"""
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result


def wrapping_add(a: int, b: int, bits: int = 256) -> int:
    """고정 폭 모듈러 덧셈"""
    return (a + b) & ((1 << bits) - 1)


def wrapping_sub(a: int, b: int, bits: int = 256) -> int:
    """고정 폭 모듈러 뺄셈

    상대 누적기는 차이만 의미가 있으므로 음수 결과를 2^bits로 감습니다.
    """
    return (a - b) & ((1 << bits) - 1)


def most_significant_bit(x: int) -> int:
    """최상위 비트 위치 (BitMath.mostSignificantBit)"""
    if x <= 0:
        raise ValueError("most_significant_bit: x must be positive")
    return x.bit_length() - 1


def least_significant_bit(x: int) -> int:
    """최하위 비트 위치 (BitMath.leastSignificantBit)"""
    if x <= 0:
        raise ValueError("least_significant_bit: x must be positive")
    return (x & -x).bit_length() - 1


def to_int128(value: int) -> int:
    """int128 범위 검사 캐스트 (SafeCast.toInt128)"""
    if value < INT128_MIN or value > INT128_MAX:
        raise OverflowError(f"to_int128: {value} out of range")
    return value


def pack_balance_delta(amount0: int, amount1: int) -> int:
    """(amount0, amount1)을 int256 BalanceDelta로 패킹

    상위 128비트에 amount0, 하위 128비트에 amount1.
    두 값 모두 int128 범위여야 합니다.
    """
    a0 = to_int128(amount0) & ((1 << 128) - 1)
    a1 = to_int128(amount1) & ((1 << 128) - 1)
    packed = (a0 << 128) | a1
    # uint256 비트 패턴 -> int256
    if packed >= 1 << 255:
        packed -= 1 << 256
    return packed


def unpack_balance_delta(delta: int) -> Tuple[int, int]:
    """int256 BalanceDelta를 (amount0, amount1)로 언패킹"""
    raw = delta & UINT256_MAX
    a0 = raw >> 128
    a1 = raw & ((1 << 128) - 1)
    if a0 >= 1 << 127:
        a0 -= 1 << 128
    if a1 >= 1 << 127:
        a1 -= 1 << 128
    return a0, a1
