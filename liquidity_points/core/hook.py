"""
LiquidityPointsHook - 회계 엔진 오케스트레이션

풀 매니저가 호출하는 훅 진입점과 읽기 전용 조회를 제공합니다.

데이터 흐름:
    유동성 변경: PoolClock.update -> TickAccumulator.lazy_init
                 -> PositionAccrual.update -> (선택) StreamLedger.withdraw
    스왑:        PoolClock.update -> SwapSimulator(cross 콜백) -> SwapContext
                 -> after_swap에서 실제 결과와 대조

모든 상태 변경 진입점은 AccountingStore.transaction 안에서 실행됩니다.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ..errors import InvariantViolation, SwapMismatchError
from ..math.tick_math import check_ticks
from . import clock as pool_clock
from . import position_accrual, stream_ledger, tick_accumulator
from .interfaces import (
    ModifyLiquidityParams,
    PoolKey,
    PoolStateProvider,
    SwapParams,
    TokenCustody,
    decode_claim,
    system_clock,
)
from .keys import Salt, normalize_address, position_key, stream_key
from .state import AccountingStore, PoolAccounting, PositionInfo, StreamInfo
from .swap_simulator import SwapSimulation, simulate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionRewards:
    """포지션 조회 결과

    - points: 누적 포인트 (X32)
    - unclaimed: (token, rate) 스트림의 미인출 금액
    """
    points: int
    unclaimed: int


class SwapContext:
    """스왑 하나의 시뮬레이션 결과 전달 슬롯 (한 번 쓰고 한 번 읽음)"""

    def __init__(self, pool_id: bytes):
        self.pool_id = pool_id
        self._result: Optional[SwapSimulation] = None
        self._written = False

    def stash(self, result: SwapSimulation) -> None:
        if self._written:
            raise InvariantViolation(9002, "Swap context already written")
        self._result = result
        self._written = True

    def take(self) -> Optional[SwapSimulation]:
        result, self._result = self._result, None
        return result


class LiquidityPointsHook:
    """유동성 포인트 / 보상 스트림 훅

    Args:
        provider: 풀 상태 제공자 (읽기 전용)
        custody: 스트림 자금 보관소
        store: 풀별 회계 저장소
        clock: 현재 시각(초)을 반환하는 callable
    """

    def __init__(
        self,
        provider: PoolStateProvider,
        custody: TokenCustody,
        store: Optional[AccountingStore] = None,
        clock: Callable[[], int] = system_clock,
    ):
        self.provider = provider
        self.custody = custody
        self.store = store if store is not None else AccountingStore()
        self.clock = clock

    @contextmanager
    def transaction(self, pool_id: bytes) -> Iterator[PoolAccounting]:
        """호출자가 더 큰 원자적 작업으로 묶을 때 사용"""
        with self.store.transaction(pool_id) as pool:
            yield pool

    # ------------------------------------------------------------------
    # 유동성 터치 포인트
    # ------------------------------------------------------------------

    def before_add_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        hook_data: bytes = b""
    ) -> None:
        self._touch(sender, key, params, hook_data)

    def before_remove_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        hook_data: bytes = b""
    ) -> None:
        self._touch(sender, key, params, hook_data)

    def _refresh(
        self,
        pool: PoolAccounting,
        pool_id: bytes,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        salt: Salt,
        liquidity_delta: int,
        now: int
    ) -> PositionInfo:
        liquidity = self.provider.get_current_liquidity(pool_id)
        global_now = pool_clock.update(pool, liquidity, now)
        _, tick = self.provider.get_current_tick_and_price(pool_id)

        if liquidity_delta > 0:
            for boundary in (tick_lower, tick_upper):
                gross, _ = self.provider.get_tick_liquidity(pool_id, boundary)
                if gross == 0:
                    tick_accumulator.lazy_init(pool, boundary, tick, global_now, now)

        inside = position_accrual.compute_seconds_per_liquidity_inside(
            pool, tick_lower, tick_upper, tick, global_now
        )
        liquidity_before = self.provider.get_position_liquidity(
            pool_id, owner, tick_lower, tick_upper, salt
        )
        return position_accrual.update(
            pool, position_key(owner, tick_lower, tick_upper, salt), liquidity_before, inside
        )

    def _touch(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        hook_data: bytes
    ) -> int:
        claim = decode_claim(hook_data)
        pool_id = key.id
        with self.store.transaction(pool_id) as pool:
            now = self.clock()
            position = self._refresh(
                pool, pool_id, sender, params.tick_lower, params.tick_upper,
                params.salt, params.liquidity_delta, now,
            )
            if claim is None:
                return 0

            _, tick = self.provider.get_current_tick_and_price(pool_id)
            seconds_inside = position_accrual.compute_seconds_inside(
                pool, params.tick_lower, params.tick_upper, tick, now
            )
            amount = stream_ledger.withdraw(
                pool, position, params.tick_lower, params.tick_upper,
                claim.token, claim.rate, seconds_inside, now,
            )
            if amount:
                self.custody.transfer_out(claim.token, claim.beneficiary, amount)
            return amount

    # ------------------------------------------------------------------
    # 스왑 터치 포인트
    # ------------------------------------------------------------------

    def before_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        context: SwapContext
    ) -> SwapSimulation:
        pool_id = key.id
        with self.store.transaction(pool_id) as pool:
            now = self.clock()
            liquidity = self.provider.get_current_liquidity(pool_id)
            global_now = pool_clock.update(pool, liquidity, now)

            def on_cross(tick: int) -> None:
                tick_accumulator.cross(pool, tick, global_now, now)

            result = simulate(self.provider, pool_id, params, key.tick_spacing, on_cross)
            context.stash(result)
            return result

    def after_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        delta: int,
        context: SwapContext
    ) -> None:
        """시뮬레이션 결과와 실제 BalanceDelta 대조

        Raises:
            SwapMismatchError: 결과가 다르거나 시뮬레이션 결과가 없는 경우 (치명적)
        """
        result = context.take()
        if result is None or context.pool_id != key.id:
            logger.error("No simulated swap for pool %s", key.id.hex())
            raise SwapMismatchError(0, delta)
        if result.balance_delta != delta:
            logger.error(
                "Swap mismatch on pool %s: simulated %#x, actual %#x",
                key.id.hex(), result.balance_delta, delta,
            )
            raise SwapMismatchError(result.balance_delta, delta)

    # ------------------------------------------------------------------
    # 스트림
    # ------------------------------------------------------------------

    def create_stream(
        self,
        sender: str,
        key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        token: str,
        rate: int,
        duration: int
    ) -> StreamInfo:
        """스트림 생성/연장 후 rate * duration을 보관소로 예치"""
        check_ticks(tick_lower, tick_upper)
        pool_id = key.id
        # 미초기화 풀이면 여기서 실패
        self.provider.get_current_tick_and_price(pool_id)
        with self.store.transaction(pool_id) as pool:
            stream, amount = stream_ledger.create(
                pool, sender, tick_lower, tick_upper, token, rate, duration, self.clock()
            )
            self.custody.transfer_in(stream.token, stream.creator, amount)
            return stream

    def terminate_stream(
        self,
        sender: str,
        key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        token: str,
        rate: int
    ) -> int:
        """활성 스트림 조기 종료, 남은 기간분을 생성자에게 환불"""
        with self.store.transaction(key.id) as pool:
            refund = stream_ledger.terminate(
                pool, sender, tick_lower, tick_upper, token, rate, self.clock()
            )
            if refund:
                self.custody.transfer_out(normalize_address(token), normalize_address(sender), refund)
            return refund

    def kill_stream(
        self,
        sender: str,
        key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        token: str,
        rate: int
    ) -> int:
        """스트림 삭제, 미인출 잔액 전부 환불"""
        with self.store.transaction(key.id) as pool:
            refund = stream_ledger.kill(
                pool, sender, tick_lower, tick_upper, token, rate, self.clock()
            )
            if refund:
                self.custody.transfer_out(normalize_address(token), normalize_address(sender), refund)
            return refund

    def get_stream(
        self,
        key: PoolKey,
        creator: str,
        tick_lower: int,
        tick_upper: int,
        token: str,
        rate: int
    ) -> Optional[StreamInfo]:
        pool_id = key.id
        if pool_id not in self.store:
            return None
        return self.store.get(pool_id).streams.get(
            stream_key(creator, tick_lower, tick_upper, token, rate)
        )

    # ------------------------------------------------------------------
    # 읽기 전용 조회
    # ------------------------------------------------------------------

    def get_seconds_per_liquidity_inside(self, key: PoolKey, tick_lower: int, tick_upper: int) -> int:
        """범위 내 유동성당 누적 시간 (Q128, 상태 변경 없음)"""
        check_ticks(tick_lower, tick_upper)
        pool_id = key.id
        with self.store.preview(pool_id) as pool:
            liquidity = self.provider.get_current_liquidity(pool_id)
            _, tick = self.provider.get_current_tick_and_price(pool_id)
            global_now = pool_clock.seconds_per_liquidity_global_at(pool, liquidity, self.clock())
            return position_accrual.compute_seconds_per_liquidity_inside(
                pool, tick_lower, tick_upper, tick, global_now
            )

    def get_seconds_inside(self, key: PoolKey, tick_lower: int, tick_upper: int) -> int:
        """범위 내 누적 시간 (초, 상태 변경 없음)"""
        check_ticks(tick_lower, tick_upper)
        pool_id = key.id
        with self.store.preview(pool_id) as pool:
            _, tick = self.provider.get_current_tick_and_price(pool_id)
            return position_accrual.compute_seconds_inside(
                pool, tick_lower, tick_upper, tick, self.clock()
            )

    def get_position_rewards(
        self,
        owner: str,
        key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        salt: Salt = 0,
        token: Optional[str] = None,
        rate: int = 0
    ) -> PositionRewards:
        """현재 시점까지 갱신한 포인트와 미인출 금액 (항상 롤백)

        token이 없으면 unclaimed는 0입니다.
        """
        check_ticks(tick_lower, tick_upper)
        pool_id = key.id
        with self.store.preview(pool_id) as pool:
            now = self.clock()
            position = self._refresh(pool, pool_id, owner, tick_lower, tick_upper, salt, 0, now)
            owed = 0
            if token is not None and rate > 0:
                _, tick = self.provider.get_current_tick_and_price(pool_id)
                seconds_inside = position_accrual.compute_seconds_inside(
                    pool, tick_lower, tick_upper, tick, now
                )
                owed = stream_ledger.unclaimed(
                    pool, position, tick_lower, tick_upper, token, rate, seconds_inside, now
                )
            return PositionRewards(points=position.relative_seconds_cumulative, unclaimed=owed)
