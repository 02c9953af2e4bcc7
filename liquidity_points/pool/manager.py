"""
PoolManager - 메모리 기반 v4 스타일 풀

회계 코어가 읽는 가격/유동성 상태(PoolStateProvider)를 제공하고,
유동성 변경과 스왑 전후에 훅을 호출합니다. 스왑 엔진은 훅의 시뮬레이션과
독립적으로 계산하며, 두 결과는 after_swap에서 대조됩니다.

작업은 원자적입니다: 훅 오류를 포함해 어떤 예외든 풀 상태, 회계 상태,
토큰 잔액을 작업 시작 시점으로 되돌립니다.

References:
- Uniswap V4 Core: src/PoolManager.sol, src/libraries/Pool.sol
"""

import copy
import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from ..constants import (
    MAX_LP_FEE,
    MAX_PROTOCOL_FEE,
    MAX_TICK,
    MAX_TICK_SPACING,
    MIN_TICK,
    MIN_TICK_SPACING,
    PIPS_DENOMINATOR,
    UINT128_MAX,
    ZERO_ADDRESS,
)
from ..core.hook import LiquidityPointsHook, SwapContext
from ..core.interfaces import ModifyLiquidityParams, PoolKey, SwapParams
from ..core.keys import Salt, normalize_address, position_key
from ..core.swap_simulator import validate_swap_params
from ..errors import (
    InvalidInputError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from ..math.full_math import pack_balance_delta
from ..math.liquidity_math import add_delta, get_amount0_delta_signed, get_amount1_delta_signed
from ..math.swap_math import compute_swap_step, get_sqrt_price_target
from ..math.tick_bitmap import TickBitmap
from ..math.tick_math import check_tick_spacing, check_ticks, get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from .custody import InMemoryCustody

logger = logging.getLogger(__name__)


@dataclass
class TickLiquidity:
    liquidity_gross: int = 0
    liquidity_net: int = 0


@dataclass
class PoolState:
    """풀 하나의 가격/유동성 상태"""
    key: PoolKey
    sqrt_price_x96: int
    tick: int
    liquidity: int = 0
    protocol_fee: int = 0
    ticks: Dict[int, TickLiquidity] = field(default_factory=dict)
    positions: Dict[bytes, int] = field(default_factory=dict)
    bitmap: TickBitmap = field(default_factory=TickBitmap)

    @property
    def lp_fee(self) -> int:
        return self.key.fee

    @property
    def swap_fee(self) -> int:
        """LP 수수료와 프로토콜 수수료를 합친 스왑 수수료 (ProtocolFeeLibrary.calculateSwapFee)"""
        if self.protocol_fee == 0:
            return self.lp_fee
        return self.protocol_fee + self.lp_fee - self.protocol_fee * self.lp_fee // PIPS_DENOMINATOR


class PoolManager:
    """메모리 기반 풀 매니저

    Args:
        custody: 원자적 롤백 대상 토큰 장부 (선택)
    """

    def __init__(self, custody: Optional[InMemoryCustody] = None):
        self.custody = custody
        self.pools: Dict[bytes, PoolState] = {}
        self.hooks: Dict[str, LiquidityPointsHook] = {}

    def register_hook(self, address: str, hook: LiquidityPointsHook) -> None:
        self.hooks[normalize_address(address)] = hook

    def _hook_for(self, key: PoolKey) -> Optional[LiquidityPointsHook]:
        return self.hooks.get(normalize_address(key.hooks))

    def _state(self, pool_id: bytes) -> PoolState:
        state = self.pools.get(pool_id)
        if state is None:
            raise PoolNotInitializedError(pool_id.hex())
        return state

    @contextmanager
    def _atomic(self, key: PoolKey) -> Iterator[PoolState]:
        pool_id = key.id
        state = self._state(pool_id)
        snapshot = copy.deepcopy(state)
        balances = dict(self.custody.balances) if self.custody is not None else None
        try:
            with ExitStack() as stack:
                hook = self._hook_for(key)
                if hook is not None:
                    stack.enter_context(hook.transaction(pool_id))
                yield state
        except BaseException:
            self.pools[pool_id] = snapshot
            if balances is not None:
                self.custody.balances = balances
            logger.debug("Rolled back pool %s", pool_id.hex())
            raise

    # ------------------------------------------------------------------
    # 풀 설정
    # ------------------------------------------------------------------

    def initialize(self, key: PoolKey, sqrt_price_x96: int) -> int:
        """풀 초기화

        Returns:
            초기 틱

        Raises:
            InvalidInputError: 잘못된 통화 순서, 틱 간격, 수수료, 가격
            PoolAlreadyInitializedError: 이미 초기화된 풀
        """
        if int(normalize_address(key.currency0), 16) >= int(normalize_address(key.currency1), 16):
            raise InvalidInputError("currency0 must sort before currency1")
        if not MIN_TICK_SPACING <= key.tick_spacing <= MAX_TICK_SPACING:
            raise InvalidInputError(f"Tick spacing out of range: {key.tick_spacing}")
        if not 0 <= key.fee <= MAX_LP_FEE:
            raise InvalidInputError(f"LP fee out of range: {key.fee}")

        pool_id = key.id
        if pool_id in self.pools:
            raise PoolAlreadyInitializedError(pool_id.hex())
        try:
            tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        self.pools[pool_id] = PoolState(key=key, sqrt_price_x96=sqrt_price_x96, tick=tick)
        logger.info("Initialized pool %s at tick %d", pool_id.hex()[:10], tick)
        return tick

    def set_protocol_fee(self, key: PoolKey, protocol_fee: int) -> None:
        if not 0 <= protocol_fee <= MAX_PROTOCOL_FEE:
            raise InvalidInputError(f"Protocol fee out of range: {protocol_fee}")
        self._state(key.id).protocol_fee = protocol_fee

    # ------------------------------------------------------------------
    # PoolStateProvider
    # ------------------------------------------------------------------

    def get_current_liquidity(self, pool_id: bytes) -> int:
        return self._state(pool_id).liquidity

    def get_current_tick_and_price(self, pool_id: bytes) -> Tuple[int, int]:
        state = self._state(pool_id)
        return state.sqrt_price_x96, state.tick

    def get_tick_liquidity(self, pool_id: bytes, tick: int) -> Tuple[int, int]:
        info = self._state(pool_id).ticks.get(tick)
        if info is None:
            return 0, 0
        return info.liquidity_gross, info.liquidity_net

    def get_position_liquidity(
        self,
        pool_id: bytes,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        salt: Salt = 0
    ) -> int:
        return self._state(pool_id).positions.get(position_key(owner, tick_lower, tick_upper, salt), 0)

    def next_initialized_tick_within_one_word(
        self,
        pool_id: bytes,
        tick: int,
        tick_spacing: int,
        lte: bool
    ) -> Tuple[int, bool]:
        return self._state(pool_id).bitmap.next_initialized_tick_within_one_word(tick, tick_spacing, lte)

    def get_swap_fees(self, pool_id: bytes) -> Tuple[int, int]:
        state = self._state(pool_id)
        return state.swap_fee, state.protocol_fee

    # ------------------------------------------------------------------
    # 유동성
    # ------------------------------------------------------------------

    def modify_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        hook_data: bytes = b""
    ) -> Tuple[int, int]:
        """포지션 유동성 변경 (liquidity_delta = 0 은 터치)

        Returns:
            (amount0, amount1) 호출자 기준 델타 (음수 = 풀에 지불)
        """
        check_ticks(params.tick_lower, params.tick_upper)
        check_tick_spacing(params.tick_lower, key.tick_spacing)
        check_tick_spacing(params.tick_upper, key.tick_spacing)
        if abs(params.liquidity_delta) > UINT128_MAX >> 1:
            raise InvalidInputError(f"Liquidity delta out of int128 range: {params.liquidity_delta}")

        with self._atomic(key) as state:
            hook = self._hook_for(key)
            if hook is not None:
                if params.liquidity_delta > 0:
                    hook.before_add_liquidity(sender, key, params, hook_data)
                else:
                    hook.before_remove_liquidity(sender, key, params, hook_data)
            return self._apply_liquidity(state, sender, params)

    def _apply_liquidity(
        self,
        state: PoolState,
        owner: str,
        params: ModifyLiquidityParams
    ) -> Tuple[int, int]:
        delta = params.liquidity_delta
        lower, upper = params.tick_lower, params.tick_upper

        pkey = position_key(owner, lower, upper, params.salt)
        current = state.positions.get(pkey, 0)
        if current + delta < 0:
            raise InvalidInputError(f"Cannot remove {-delta} liquidity from position holding {current}")
        if delta == 0:
            if current == 0:
                raise InvalidInputError("Cannot touch an empty position")
            return 0, 0
        state.positions[pkey] = current + delta

        for tick, upper_side in ((lower, False), (upper, True)):
            info = state.ticks.setdefault(tick, TickLiquidity())
            gross_before = info.liquidity_gross
            info.liquidity_gross = add_delta(gross_before, delta)
            info.liquidity_net += -delta if upper_side else delta
            if (gross_before == 0) != (info.liquidity_gross == 0):
                state.bitmap.flip_tick(tick, state.key.tick_spacing)
            if info.liquidity_gross == 0:
                del state.ticks[tick]

        sqrt_lower = get_sqrt_ratio_at_tick(lower)
        sqrt_upper = get_sqrt_ratio_at_tick(upper)
        amount0 = amount1 = 0
        if state.tick < lower:
            amount0 = get_amount0_delta_signed(sqrt_lower, sqrt_upper, delta)
        elif state.tick < upper:
            amount0 = get_amount0_delta_signed(state.sqrt_price_x96, sqrt_upper, delta)
            amount1 = get_amount1_delta_signed(sqrt_lower, state.sqrt_price_x96, delta)
            state.liquidity = add_delta(state.liquidity, delta)
        else:
            amount1 = get_amount1_delta_signed(sqrt_lower, sqrt_upper, delta)

        logger.debug("Modified liquidity [%d, %d] by %d", lower, upper, delta)
        return amount0, amount1

    # ------------------------------------------------------------------
    # 스왑
    # ------------------------------------------------------------------

    def swap(self, sender: str, key: PoolKey, params: SwapParams) -> Tuple[int, int]:
        """스왑 실행

        Returns:
            (amount0, amount1) 호출자 기준 델타 (음수 = 풀에 지불)

        Raises:
            InvalidSwapParamsError: 가격 한도/수수료 조건 위반
            SwapMismatchError: 훅 시뮬레이션과 결과가 다른 경우
        """
        with self._atomic(key) as state:
            hook = self._hook_for(key)
            context = SwapContext(key.id)
            if hook is not None:
                hook.before_swap(sender, key, params, context)
            amount0, amount1 = self._swap(state, params)
            if hook is not None:
                hook.after_swap(sender, key, params, pack_balance_delta(amount0, amount1), context)
            return amount0, amount1

    def _swap(self, state: PoolState, params: SwapParams) -> Tuple[int, int]:
        swap_fee = state.swap_fee
        validate_swap_params(params, state.sqrt_price_x96, swap_fee)
        if params.amount_specified == 0:
            return 0, 0

        zero_for_one = params.zero_for_one
        exact_input = params.amount_specified < 0
        remaining = params.amount_specified
        calculated = 0
        protocol_fees = 0

        while remaining != 0 and state.sqrt_price_x96 != params.sqrt_price_limit_x96:
            price_start = state.sqrt_price_x96
            tick_next, initialized = state.bitmap.next_initialized_tick_within_one_word(
                state.tick, state.key.tick_spacing, zero_for_one
            )
            if tick_next <= MIN_TICK:
                tick_next = MIN_TICK
            if tick_next >= MAX_TICK:
                tick_next = MAX_TICK
            price_next = get_sqrt_ratio_at_tick(tick_next)

            price, amount_in, amount_out, fee_amount = compute_swap_step(
                state.sqrt_price_x96,
                get_sqrt_price_target(zero_for_one, price_next, params.sqrt_price_limit_x96),
                state.liquidity,
                remaining,
                swap_fee,
            )
            state.sqrt_price_x96 = price

            if exact_input:
                remaining += amount_in + fee_amount
                calculated += amount_out
            else:
                remaining -= amount_out
                calculated -= amount_in + fee_amount

            if state.protocol_fee > 0:
                if swap_fee == state.protocol_fee:
                    protocol_fees += fee_amount
                else:
                    protocol_fees += (amount_in + fee_amount) * state.protocol_fee // PIPS_DENOMINATOR

            if price == price_next:
                if initialized:
                    net = state.ticks[tick_next].liquidity_net
                    state.liquidity = add_delta(state.liquidity, -net if zero_for_one else net)
                state.tick = tick_next - 1 if zero_for_one else tick_next
            elif price != price_start:
                state.tick = get_tick_at_sqrt_ratio(price)

        if zero_for_one != exact_input:
            amounts = calculated, params.amount_specified - remaining
        else:
            amounts = params.amount_specified - remaining, calculated

        logger.debug(
            "Swapped on pool %s: delta %s, tick %d, protocol fees %d",
            state.key.id.hex()[:10], amounts, state.tick, protocol_fees,
        )
        return amounts


def make_pool_key(
    currency0: str,
    currency1: str,
    fee: int,
    tick_spacing: int,
    hooks: str = ZERO_ADDRESS
) -> PoolKey:
    """통화를 정렬하여 PoolKey 생성"""
    a, b = normalize_address(currency0), normalize_address(currency1)
    if int(a, 16) > int(b, 16):
        a, b = b, a
    return PoolKey(a, b, fee, tick_spacing, normalize_address(hooks))
