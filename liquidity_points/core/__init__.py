"""
Liquidity points accounting core

- keys: 틱/포지션/스트림/풀 키
- state: 회계 상태와 저장소
- clock, tick_accumulator, position_accrual: 시간 가중 누적
- stream_ledger: 보상 스트림
- swap_simulator: 틱 통과 탐지
- hook: 진입점
"""

from .hook import LiquidityPointsHook, PositionRewards, SwapContext
from .interfaces import (
    ClaimPayload,
    ManualClock,
    ModifyLiquidityParams,
    PoolKey,
    PoolStateProvider,
    SwapParams,
    TokenCustody,
)
from .keys import pool_id, position_key, stream_key
from .state import AccountingStore, PoolAccounting, PositionInfo, StreamInfo, TickInfo
from .swap_simulator import SwapSimulation
