"""
PositionAccrual - 포지션 포인트 누적

범위 내 유동성당 누적 시간(inside)은 현재 틱 위치에 따라 세 구간으로 나뉩니다:
    tick < lower:          lower_outside - upper_outside
    tick >= upper:         upper_outside - lower_outside
    lower <= tick < upper: global - lower_outside - upper_outside

모든 뺄셈은 고정 폭 랩어라운드 연산입니다. 누적기는 상대값이므로 차이만 의미가 있습니다.

포인트(X32):
    points = L * (inside_now - inside_last) / 2^96
           = (L * Δ / 2^128) << 32

References:
- Uniswap V3 Core: UniswapV3Pool.sol (snapshotCumulativesInside)
"""

import logging

from ..constants import ACCUMULATOR_BITS, SECONDS_BITS, SECONDS_X32_DIVISOR
from ..math.full_math import mul_div, wrapping_sub
from .state import PoolAccounting, PositionInfo

logger = logging.getLogger(__name__)


def _inside(lower_outside: int, upper_outside: int, tick_lower: int, tick_upper: int,
            tick_current: int, current_value: int, bits: int) -> int:
    if tick_current < tick_lower:
        return wrapping_sub(lower_outside, upper_outside, bits)
    if tick_current >= tick_upper:
        return wrapping_sub(upper_outside, lower_outside, bits)
    return wrapping_sub(wrapping_sub(current_value, lower_outside, bits), upper_outside, bits)


def compute_seconds_per_liquidity_inside(
    pool: PoolAccounting,
    tick_lower: int,
    tick_upper: int,
    tick_current: int,
    global_now: int
) -> int:
    """범위 내 유동성당 누적 시간 (Q128)

    Args:
        pool: 풀 회계 레코드
        tick_lower: 하한 틱
        tick_upper: 상한 틱
        tick_current: 현재 틱
        global_now: now 시점으로 진행한 전역 누적기

    Returns:
        seconds_per_liquidity_inside_x128 (uint256 랩어라운드)
    """
    lower = pool.tick(tick_lower)
    upper = pool.tick(tick_upper)
    return _inside(
        lower.seconds_per_liquidity_outside_x128,
        upper.seconds_per_liquidity_outside_x128,
        tick_lower, tick_upper, tick_current, global_now, ACCUMULATOR_BITS,
    )


def compute_seconds_inside(
    pool: PoolAccounting,
    tick_lower: int,
    tick_upper: int,
    tick_current: int,
    now: int
) -> int:
    """범위 내 누적 시간 (초, uint48 랩어라운드)"""
    lower = pool.tick(tick_lower)
    upper = pool.tick(tick_upper)
    return _inside(
        lower.seconds_outside,
        upper.seconds_outside,
        tick_lower, tick_upper, tick_current, now, SECONDS_BITS,
    )


def compute_seconds_x32(user_liquidity: int, inside_updated: int, inside_last: int) -> int:
    """포인트 증가분 (X32 고정소수점)

    나눗셈은 내림이므로 Q128 / L 단계에서 생긴 절사가 그대로 남습니다.
    예: L = 1e18 단독, 100초 -> (100 << 32) - 1
    """
    delta = wrapping_sub(inside_updated, inside_last, ACCUMULATOR_BITS)
    return mul_div(user_liquidity, delta, SECONDS_X32_DIVISOR)


def update(
    pool: PoolAccounting,
    position_key: bytes,
    liquidity_before: int,
    seconds_per_liquidity_inside_x128: int
) -> PositionInfo:
    """포지션 포인트 누적 후 스냅샷 갱신

    liquidity_before는 이번 작업의 유동성 변경이 적용되기 전 값입니다.
    """
    position = pool.position(position_key)
    earned = compute_seconds_x32(
        liquidity_before,
        seconds_per_liquidity_inside_x128,
        position.seconds_per_liquidity_inside_last_x128,
    )
    position.relative_seconds_cumulative += earned
    position.seconds_per_liquidity_inside_last_x128 = seconds_per_liquidity_inside_x128
    if earned:
        logger.debug("Position %s earned %d points (X32)", position_key.hex()[:10], earned)
    return position
