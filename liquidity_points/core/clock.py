"""
PoolClock - 풀 전역 유동성당 누적 시간

secondsPerLiquidityGlobal += (now - last) * Q128 / liquidity

유동성이 0이면 누적기는 그대로 두고 타임스탬프만 갱신합니다.
같은 시각에 여러 번 호출해도 변화가 없습니다.
"""

import logging

from ..constants import ACCUMULATOR_BITS, Q128
from ..math.full_math import wrapping_add
from .state import PoolAccounting

logger = logging.getLogger(__name__)


def _elapsed_per_liquidity(pool: PoolAccounting, liquidity: int, now: int) -> int:
    if liquidity <= 0 or now <= pool.last_update_timestamp:
        return 0
    return (now - pool.last_update_timestamp) * Q128 // liquidity


def seconds_per_liquidity_global_at(pool: PoolAccounting, liquidity: int, now: int) -> int:
    """저장 상태를 바꾸지 않고 now 시점까지 진행한 전역 누적기"""
    return wrapping_add(
        pool.seconds_per_liquidity_global_x128,
        _elapsed_per_liquidity(pool, liquidity, now),
        ACCUMULATOR_BITS,
    )


def update(pool: PoolAccounting, liquidity: int, now: int) -> int:
    """전역 누적기를 now 시점으로 진행

    Args:
        pool: 풀 회계 레코드
        liquidity: 현재 활성 유동성 (이전 갱신 이후 변하지 않은 값)
        now: 현재 시각 (초)

    Returns:
        갱신된 seconds_per_liquidity_global_x128
    """
    pool.seconds_per_liquidity_global_x128 = seconds_per_liquidity_global_at(pool, liquidity, now)
    if liquidity <= 0 and now > pool.last_update_timestamp:
        logger.debug("Zero liquidity for %ds, accumulator not advanced", now - pool.last_update_timestamp)
    pool.last_update_timestamp = now
    return pool.seconds_per_liquidity_global_x128
