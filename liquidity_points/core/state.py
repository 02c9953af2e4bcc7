"""
회계 상태 타입

풀 하나의 회계 레코드(PoolAccounting)가 틱/포지션/스트림 상태를 모두 소유합니다.
AccountingStore는 풀 ID -> 레코드의 명시적 저장소이며 모든 연산에 참조로 전달됩니다.

- TickInfo: 틱 바깥쪽 누적기 (상대값, 최초 초기화 시점 기준)
- PositionInfo: 포지션 포인트 누적 (X32 고정소수점)
- StreamInfo: 선형 보상 스트림
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TickInfo:
    """Tick-Indexed State

    - seconds_outside: 가격이 틱 반대편에 있던 누적 시간 (uint48 랩어라운드)
    - seconds_per_liquidity_outside_x128: 반대편 유동성당 누적 시간 (Q128, uint256 랩어라운드)
    """
    seconds_outside: int = 0
    seconds_per_liquidity_outside_x128: int = 0


@dataclass
class PositionInfo:
    """Position-Indexed State

    - relative_seconds_cumulative: 누적 포인트 (X32, 단조 증가)
    - seconds_per_liquidity_inside_last_x128: 마지막 갱신 시점의 범위 내 누적기 스냅샷
    - claimed: (token, rate) -> 지금까지 인출한 누적 권리액
    """
    relative_seconds_cumulative: int = 0
    seconds_per_liquidity_inside_last_x128: int = 0
    claimed: Dict[Tuple[str, int], int] = field(default_factory=dict)


@dataclass
class StreamInfo:
    """선형 보상 스트림

    상태: 없음 -> 활성(expiry > now) -> 만료(expiry <= now) -> 재활성 | 종료

    - start, expiry: 현재 지급 구간
    - past_windows: 재활성 전에 끝난 구간들 (start, expiry)
    - withdrawn_total: 모든 구간에 걸쳐 포지션에 지급한 총액
    """
    creator: str
    tick_lower: int
    tick_upper: int
    token: str
    rate: int
    start: int
    expiry: int
    withdrawn_total: int = 0
    past_windows: List[Tuple[int, int]] = field(default_factory=list)

    def is_active(self, now: int) -> bool:
        return self.expiry > now

    def streamed_seconds(self, now: int) -> int:
        """now까지 모든 구간에서 흘러간 시간"""
        current = max(min(now, self.expiry) - self.start, 0)
        return sum(end - begin for begin, end in self.past_windows) + current

    @property
    def funded_total(self) -> int:
        funded_seconds = sum(end - begin for begin, end in self.past_windows)
        return (funded_seconds + self.expiry - self.start) * self.rate

    def rearm(self, now: int, duration: int) -> None:
        """만료된 스트림에 새 구간 시작 (지난 구간은 보존)"""
        if self.expiry > self.start:
            self.past_windows.append((self.start, self.expiry))
        self.start = now
        self.expiry = now + duration


@dataclass
class PoolAccounting:
    """풀 회계 레코드"""
    last_update_timestamp: int = 0
    seconds_per_liquidity_global_x128: int = 0
    ticks: Dict[int, TickInfo] = field(default_factory=dict)
    positions: Dict[bytes, PositionInfo] = field(default_factory=dict)
    streams: Dict[bytes, StreamInfo] = field(default_factory=dict)

    def tick(self, tick: int) -> TickInfo:
        """틱 조회 (미초기화 틱은 0으로 읽힘, 저장하지 않음)"""
        return self.ticks.get(tick) or TickInfo()

    def position(self, key: bytes) -> PositionInfo:
        """포지션 조회 또는 지연 생성"""
        info = self.positions.get(key)
        if info is None:
            info = self.positions[key] = PositionInfo()
        return info


class AccountingStore:
    """풀 ID -> PoolAccounting 저장소

    transaction()은 연산 단위 원자성을 제공합니다: 예외가 나면 레코드를
    연산 시작 시점 상태로 되돌립니다. preview()는 항상 되돌립니다.
    """

    def __init__(self):
        self._pools: Dict[bytes, PoolAccounting] = {}

    def __contains__(self, pool_id: bytes) -> bool:
        return pool_id in self._pools

    def get(self, pool_id: bytes) -> PoolAccounting:
        pool = self._pools.get(pool_id)
        if pool is None:
            pool = self._pools[pool_id] = PoolAccounting()
        return pool

    @contextmanager
    def transaction(self, pool_id: bytes) -> Iterator[PoolAccounting]:
        pool = self.get(pool_id)
        snapshot = copy.deepcopy(pool)
        try:
            yield pool
        except BaseException:
            self._pools[pool_id] = snapshot
            logger.debug("Rolled back accounting for pool %s", pool_id.hex())
            raise

    @contextmanager
    def preview(self, pool_id: bytes) -> Iterator[PoolAccounting]:
        pool = self.get(pool_id)
        snapshot = copy.deepcopy(pool)
        try:
            yield pool
        finally:
            self._pools[pool_id] = snapshot
