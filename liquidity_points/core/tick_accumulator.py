"""
TickAccumulator - 틱 바깥쪽 누적기

값은 절대값이 아니라 상대값입니다. 최초 초기화 시점에 시드되고
가격이 틱을 통과할 때마다 "현재 전역값 - 이전값"으로 뒤집힙니다.
두 번 뒤집으면 원래 값으로 돌아옵니다.

References:
- Uniswap V3 Core: Tick.sol (update, cross)
"""

import logging

from ..constants import ACCUMULATOR_BITS, SECONDS_BITS
from ..math.full_math import wrapping_sub
from .state import PoolAccounting, TickInfo

logger = logging.getLogger(__name__)


def lazy_init(
    pool: PoolAccounting,
    tick: int,
    tick_current: int,
    global_snapshot: int,
    now: int
) -> TickInfo:
    """틱 최초 활성화 시 누적기 시드

    총 유동성이 0에서 늘어나는 틱에 대해서만 호출해야 합니다.
    현재 틱 이하의 틱은 가격이 이미 "바깥"에 있었던 것으로 간주하여
    (global_snapshot, now)로 시드하고, 현재 틱보다 위의 틱은 0으로 둡니다.
    """
    if tick <= tick_current:
        info = TickInfo(
            seconds_outside=now & ((1 << SECONDS_BITS) - 1),
            seconds_per_liquidity_outside_x128=global_snapshot,
        )
    else:
        info = TickInfo()
    pool.ticks[tick] = info
    logger.debug("Initialized tick %d (current %d)", tick, tick_current)
    return info


def cross(pool: PoolAccounting, tick: int, global_snapshot: int, now: int) -> TickInfo:
    """가격이 초기화된 틱을 통과할 때 바깥쪽 누적기 반전"""
    info = pool.tick(tick)
    info = TickInfo(
        seconds_outside=wrapping_sub(now, info.seconds_outside, SECONDS_BITS),
        seconds_per_liquidity_outside_x128=wrapping_sub(
            global_snapshot, info.seconds_per_liquidity_outside_x128, ACCUMULATOR_BITS
        ),
    )
    pool.ticks[tick] = info
    logger.debug("Crossed tick %d", tick)
    return info
