"""
Math layer for Liquidity Points

온체인 수준 정밀도의 수학 함수들:
- full_math: 256비트 mul_div, 랩어라운드 연산, 비트 연산, BalanceDelta 패킹
- tick_math: Tick ↔ sqrtPriceX96 변환
- sqrt_price_math: 다음 가격 계산
- liquidity_math: 유동성 델타 -> 토큰 수량
- swap_math: 스왑 한 단계 계산
- tick_bitmap: 초기화 틱 비트맵
"""

from .full_math import (
    mul_div,
    mul_div_rounding_up,
    div_rounding_up,
    wrapping_add,
    wrapping_sub,
    pack_balance_delta,
    unpack_balance_delta,
)
from .tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    check_ticks,
)
from .sqrt_price_math import sqrt_price_x96_to_price
from .liquidity_math import (
    get_amount0_delta,
    get_amount1_delta,
    add_delta,
)
from .swap_math import compute_swap_step, get_sqrt_price_target
from .tick_bitmap import TickBitmap
