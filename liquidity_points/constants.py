"""
Liquidity Points 상수 정의

온체인 수준 정밀도를 위한 상수들:
- Q96/Q128: 고정소수점 인코딩 스케일
- MIN_TICK/MAX_TICK, MIN_SQRT_RATIO/MAX_SQRT_RATIO: 틱/가격 범위
- UINT*/INT128: 누적기와 잔액 델타의 정수 폭
- MAX_SWAP_FEE: 수수료 단위 (pips, 1/1,000,000)
"""

# Fixed-point 인코딩 상수
Q96: int = 2 ** 96
Q128: int = 2 ** 128

# 포인트 X32 스케일: Q128 누적기 / 2^96 = 초 << 32
SECONDS_X32_DIVISOR: int = 2 ** 96

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# TickMath 가격 범위
MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

# 틱 간격 범위 (v4 TickSpacing 제약)
MIN_TICK_SPACING: int = 1
MAX_TICK_SPACING: int = 32767

# 수수료 (pips)
MAX_SWAP_FEE: int = 1_000_000
PIPS_DENOMINATOR: int = 1_000_000
MAX_LP_FEE: int = 1_000_000
MAX_PROTOCOL_FEE: int = 1000

# 정수 폭
SECONDS_BITS: int = 48
ACCUMULATOR_BITS: int = 256

UINT128_MAX: int = 2 ** 128 - 1
UINT256_MAX: int = 2 ** 256 - 1
INT128_MIN: int = -(2 ** 127)
INT128_MAX: int = 2 ** 127 - 1

ZERO_ADDRESS: str = "0x" + "00" * 20
