"""
Tick Math - Tick ↔ sqrtPriceX96 변환

Uniswap V4의 틱 수학 함수들. 온체인 컨트랙트와 동일한 정밀도로 구현.
스왑 시뮬레이션이 실제 스왑과 바이트 단위로 일치해야 하므로
부동소수점은 사용하지 않습니다.

References:
- Uniswap V4 Core: src/libraries/TickMath.sol
- Uniswap V4 Core: src/libraries/Pool.sol (checkTicks)

핵심 공식:
    price = 1.0001^tick
    sqrtPriceX96 = sqrt(price) * 2^96
"""

from ..constants import (
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    UINT256_MAX,
)
from ..errors import InvalidInputError
from .full_math import most_significant_bit


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """틱에서 sqrtPriceX96 계산

    Solidity TickMath.getSqrtPriceAtTick()과 동일한 구현.
    온체인 수준의 정밀도를 위해 정수 연산만 사용.

    Args:
        tick: 틱 인덱스 (-887272 ~ 887272)

    Returns:
        sqrtPriceX96 (Q64.96 형식)

    Raises:
        ValueError: 틱이 유효 범위를 벗어난 경우
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"Tick out of range: {tick} (range: {MIN_TICK} ~ {MAX_TICK})")

    abs_tick = abs(tick)

    # 1/sqrt(1.0001)^(2^i) 를 Q128.128로 미리 계산한 매직 넘버
    ratio = 0x100000000000000000000000000000000 if abs_tick & 0x1 == 0 \
        else 0xfffcb933bd6fad37aa2d162d1a594001

    for bit, magic in _RATIO_MAGIC:
        if abs_tick & bit:
            ratio = (ratio * magic) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96, 올림
    return (ratio >> 32) + (1 if ratio % (1 << 32) != 0 else 0)


_RATIO_MAGIC = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """sqrtPriceX96에서 틱 계산

    Solidity TickMath.getTickAtSqrtPrice()와 동일한 구현.
    getSqrtRatioAtTick(tick) <= sqrtPriceX96 를 만족하는 가장 큰 틱을 반환.

    Args:
        sqrt_price_x96: sqrtPriceX96 (Q64.96 형식)

    Returns:
        틱 인덱스

    Raises:
        ValueError: sqrtPriceX96이 유효 범위를 벗어난 경우
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise ValueError(f"sqrtPriceX96 out of range: {sqrt_price_x96}")

    ratio = sqrt_price_x96 << 32
    msb = most_significant_bit(ratio)

    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    # 로그 소수부 14비트
    for i in range(14):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << (63 - i)
        r >>= f

    log_sqrt10001 = log_2 * 255738958999603826347141

    tick_low = (log_sqrt10001 - 3402992956809132418596140100660247210) >> 128
    tick_high = (log_sqrt10001 + 291339464771989622907027621153398088495) >> 128

    if tick_low == tick_high:
        return tick_low

    if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


def check_ticks(tick_lower: int, tick_upper: int) -> None:
    """포지션 범위 검증 (Pool.checkTicks)

    Raises:
        InvalidInputError: lower >= upper 이거나 범위를 벗어난 경우
    """
    if tick_lower >= tick_upper:
        raise InvalidInputError(f"tick_lower {tick_lower} must be below tick_upper {tick_upper}")
    if tick_lower < MIN_TICK:
        raise InvalidInputError(f"tick_lower {tick_lower} below MIN_TICK")
    if tick_upper > MAX_TICK:
        raise InvalidInputError(f"tick_upper {tick_upper} above MAX_TICK")


def check_tick_spacing(tick: int, tick_spacing: int) -> None:
    """틱이 틱 간격에 정렬되어 있는지 검증"""
    if tick % tick_spacing != 0:
        raise InvalidInputError(f"Tick {tick} not aligned to spacing {tick_spacing}")
