"""
Liquidity Points

틱 기반 AMM 풀에서 가격이 범위 안에 머문 시간을 유동성 가중으로 추적하여
LP별 유동성 포인트를 부여하고, 외부에서 예치한 선형 보상 스트림을
포인트 비율대로 분배하는 라이브러리.
"""

__version__ = "0.1.0"
__author__ = "Zekiya"

from .constants import Q96, Q128
from .errors import LiquidityPointsError
from .core import (
    AccountingStore,
    ClaimPayload,
    LiquidityPointsHook,
    ManualClock,
    ModifyLiquidityParams,
    PoolKey,
    PositionRewards,
    SwapParams,
)
from .pool import InMemoryCustody, PoolManager, make_pool_key
