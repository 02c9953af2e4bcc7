"""
외부 협력자 인터페이스와 파라미터 타입

회계 코어는 가격/유동성 상태를 읽기만 합니다 (PoolStateProvider).
토큰 보관/전송은 TokenCustody에 위임합니다.
"""

import time
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError

from ..errors import InvalidInputError, MalformedClaimError
from .keys import Salt, normalize_address, pool_id


@dataclass(frozen=True)
class PoolKey:
    """풀 식별자 (v4 PoolKey)"""
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str

    @property
    def id(self) -> bytes:
        return pool_id(self.currency0, self.currency1, self.fee, self.tick_spacing, self.hooks)


@dataclass(frozen=True)
class ModifyLiquidityParams:
    """유동성 변경 파라미터 (liquidity_delta 음수 = 제거, 0 = 터치)"""
    tick_lower: int
    tick_upper: int
    liquidity_delta: int
    salt: Salt = 0


@dataclass(frozen=True)
class SwapParams:
    """스왑 파라미터

    amount_specified 음수 = exact input, 양수 = exact output.
    """
    zero_for_one: bool
    amount_specified: int
    sqrt_price_limit_x96: int


@dataclass(frozen=True)
class ClaimPayload:
    """유동성 터치 시 함께 전달되는 보상 청구 요청"""
    token: str
    rate: int
    beneficiary: str

    def encode(self) -> bytes:
        return encode(
            ["address", "uint256", "address"],
            [normalize_address(self.token), self.rate, normalize_address(self.beneficiary)],
        )

    @classmethod
    def decode(cls, data: bytes) -> "ClaimPayload":
        """hook_data를 ClaimPayload로 디코딩

        Raises:
            MalformedClaimError: ABI 형식이 아니거나 rate가 0인 경우
        """
        if len(data) != 96:
            raise MalformedClaimError(f"expected 96 bytes, got {len(data)}")
        try:
            token, rate, beneficiary = decode(["address", "uint256", "address"], data)
        except DecodingError as exc:
            raise MalformedClaimError(str(exc)) from exc
        if rate == 0:
            raise MalformedClaimError("rate is zero")
        return cls(token=normalize_address(token), rate=rate, beneficiary=normalize_address(beneficiary))


def decode_claim(hook_data: Optional[bytes]) -> Optional[ClaimPayload]:
    """빈 hook_data는 청구 없음"""
    if not hook_data:
        return None
    return ClaimPayload.decode(hook_data)


class PoolStateProvider(Protocol):
    """풀 가격/유동성 상태 제공자 (읽기 전용)"""

    def get_current_liquidity(self, pool_id: bytes) -> int: ...

    def get_current_tick_and_price(self, pool_id: bytes) -> Tuple[int, int]:
        """(sqrt_price_x96, tick)"""
        ...

    def get_tick_liquidity(self, pool_id: bytes, tick: int) -> Tuple[int, int]:
        """(liquidity_gross, liquidity_net)"""
        ...

    def get_position_liquidity(
        self, pool_id: bytes, owner: str, tick_lower: int, tick_upper: int, salt: Salt
    ) -> int: ...

    def next_initialized_tick_within_one_word(
        self, pool_id: bytes, tick: int, tick_spacing: int, lte: bool
    ) -> Tuple[int, bool]: ...

    def get_swap_fees(self, pool_id: bytes) -> Tuple[int, int]:
        """(swap_fee_pips, protocol_fee_pips)"""
        ...


class TokenCustody(Protocol):
    """토큰 보관소"""

    def transfer_in(self, token: str, sender: str, amount: int) -> None: ...

    def transfer_out(self, token: str, recipient: str, amount: int) -> None: ...


class ManualClock:
    """수동으로 진행하는 시계 (테스트, 샌드박스용)"""

    def __init__(self, start: int = 0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise InvalidInputError("Clock cannot move backwards")
        self.now += seconds
        return self.now


def system_clock() -> int:
    return int(time.time())
