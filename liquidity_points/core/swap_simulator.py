"""
SwapSimulator - 틱 통과 탐지용 스왑 재현

실제 스왑 엔진과 같은 순서로 가격을 움직이며, 초기화된 틱 경계에 정확히
도달할 때마다 on_cross(tick) 콜백을 호출합니다. 결과 BalanceDelta는
실제 스왑 결과와 비트 단위로 같아야 합니다 (다르면 치명적 오류).

References:
- Uniswap V4 Core: src/libraries/Pool.sol (swap)
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..constants import (
    MAX_SQRT_RATIO,
    MAX_SWAP_FEE,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    PIPS_DENOMINATOR,
)
from ..errors import InvalidSwapParamsError
from ..math.full_math import pack_balance_delta
from ..math.liquidity_math import add_delta
from ..math.swap_math import compute_swap_step, get_sqrt_price_target
from ..math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from .interfaces import PoolStateProvider, SwapParams

logger = logging.getLogger(__name__)

CrossCallback = Callable[[int], None]


@dataclass
class SwapSimulation:
    """시뮬레이션 결과

    amount0/amount1은 스왑 호출자 기준 부호입니다 (음수 = 풀에 지불).
    """
    amount0: int
    amount1: int
    sqrt_price_x96: int
    tick: int
    liquidity: int
    amount_to_protocol: int = 0
    crossed_ticks: List[int] = field(default_factory=list)

    @property
    def balance_delta(self) -> int:
        return pack_balance_delta(self.amount0, self.amount1)


def validate_swap_params(params: SwapParams, sqrt_price_x96: int, swap_fee: int) -> None:
    """가격 한도/수수료 검증 (Pool.swap 선행 조건)

    Raises:
        InvalidSwapParamsError: 가격 한도가 이미 지났거나 범위를 벗어난 경우,
            또는 수수료 100%에서 exact output을 요청한 경우
    """
    if swap_fee >= MAX_SWAP_FEE and params.amount_specified > 0:
        raise InvalidSwapParamsError("Exact output not allowed with a 100% swap fee")
    if params.amount_specified == 0:
        return
    limit = params.sqrt_price_limit_x96
    if params.zero_for_one:
        if limit >= sqrt_price_x96:
            raise InvalidSwapParamsError(f"Price limit {limit} already exceeded")
        if limit <= MIN_SQRT_RATIO:
            raise InvalidSwapParamsError(f"Price limit {limit} out of bounds")
    else:
        if limit <= sqrt_price_x96:
            raise InvalidSwapParamsError(f"Price limit {limit} already exceeded")
        if limit >= MAX_SQRT_RATIO:
            raise InvalidSwapParamsError(f"Price limit {limit} out of bounds")


def simulate(
    provider: PoolStateProvider,
    pool_id: bytes,
    params: SwapParams,
    tick_spacing: int,
    on_cross: Optional[CrossCallback] = None
) -> SwapSimulation:
    """스왑 재현

    Args:
        provider: 풀 상태 제공자 (스왑 직전 상태)
        pool_id: 풀 ID
        params: 스왑 파라미터 (amount_specified 음수 = exact input)
        tick_spacing: 풀 틱 간격
        on_cross: 초기화된 틱 통과 시 호출할 콜백

    Returns:
        SwapSimulation
    """
    sqrt_price_x96, tick = provider.get_current_tick_and_price(pool_id)
    liquidity = provider.get_current_liquidity(pool_id)
    swap_fee, protocol_fee = provider.get_swap_fees(pool_id)

    validate_swap_params(params, sqrt_price_x96, swap_fee)

    result = SwapSimulation(0, 0, sqrt_price_x96, tick, liquidity)
    if params.amount_specified == 0:
        return result

    zero_for_one = params.zero_for_one
    exact_input = params.amount_specified < 0
    limit = params.sqrt_price_limit_x96
    remaining = params.amount_specified
    calculated = 0

    while remaining != 0 and result.sqrt_price_x96 != limit:
        sqrt_price_start = result.sqrt_price_x96
        tick_next, initialized = provider.next_initialized_tick_within_one_word(
            pool_id, result.tick, tick_spacing, zero_for_one
        )
        tick_next = min(max(tick_next, MIN_TICK), MAX_TICK)
        sqrt_price_next = get_sqrt_ratio_at_tick(tick_next)

        step = compute_swap_step(
            result.sqrt_price_x96,
            get_sqrt_price_target(zero_for_one, sqrt_price_next, limit),
            result.liquidity,
            remaining,
            swap_fee,
        )
        result.sqrt_price_x96 = step.sqrt_price_next_x96

        if exact_input:
            remaining += step.amount_in + step.fee_amount
            calculated += step.amount_out
        else:
            remaining -= step.amount_out
            calculated -= step.amount_in + step.fee_amount

        if protocol_fee > 0:
            if swap_fee == protocol_fee:
                delta = step.fee_amount
            else:
                delta = (step.amount_in + step.fee_amount) * protocol_fee // PIPS_DENOMINATOR
            result.amount_to_protocol += delta

        if result.sqrt_price_x96 == sqrt_price_next:
            if initialized:
                if on_cross is not None:
                    on_cross(tick_next)
                result.crossed_ticks.append(tick_next)
                _, liquidity_net = provider.get_tick_liquidity(pool_id, tick_next)
                if zero_for_one:
                    liquidity_net = -liquidity_net
                result.liquidity = add_delta(result.liquidity, liquidity_net)
            result.tick = tick_next - 1 if zero_for_one else tick_next
        elif result.sqrt_price_x96 != sqrt_price_start:
            # 단계 중간에서 멈춤: 가격에서 틱을 다시 계산
            result.tick = get_tick_at_sqrt_ratio(result.sqrt_price_x96)

    if zero_for_one != exact_input:
        result.amount0 = calculated
        result.amount1 = params.amount_specified - remaining
    else:
        result.amount0 = params.amount_specified - remaining
        result.amount1 = calculated

    logger.debug(
        "Simulated swap: delta (%d, %d), %d ticks crossed",
        result.amount0, result.amount1, len(result.crossed_ticks),
    )
    return result
