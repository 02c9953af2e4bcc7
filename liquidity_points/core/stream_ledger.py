"""
StreamLedger - 선형 보상 스트림

스트림은 (생성자, 범위, 토큰, rate)로 식별되며 rate * 경과 시간만큼의 토큰을
범위 내 포지션들에게 포인트 비율대로 분배합니다.

    share = points * streamed_seconds * rate / (total_seconds_inside << 32)

streamed_seconds는 지난 구간과 현재 구간(min(now, expiry) - start)의 합입니다.

상태 전이:
    없음 -> 활성 (create)
    활성 -> 활성 (create: expiry 연장, start 유지)
    만료 -> 활성 (create: 새 구간 시작, 지난 구간과 withdrawn_total 유지)
    활성 -> 만료 (terminate: expiry = now, 미사용분 환불)
    활성/만료 -> 없음 (kill: 미인출분 환불 후 삭제)
"""

import logging
from typing import List, Tuple

from ..constants import UINT128_MAX
from ..errors import (
    InvalidInputError,
    StreamAmountOverflowError,
    StreamNotActiveError,
    StreamNotFoundError,
    UnauthorizedError,
)
from ..math.full_math import mul_div
from .keys import normalize_address, stream_key
from .state import PoolAccounting, PositionInfo, StreamInfo

logger = logging.getLogger(__name__)


def create(
    pool: PoolAccounting,
    creator: str,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int,
    duration: int,
    now: int
) -> Tuple[StreamInfo, int]:
    """스트림 생성 또는 연장

    Args:
        pool: 풀 회계 레코드
        creator: 생성자 주소
        tick_lower: 하한 틱
        tick_upper: 상한 틱
        token: 보상 토큰 주소
        rate: 초당 지급량
        duration: 추가할 기간 (초)
        now: 현재 시각

    Returns:
        (스트림, 예치해야 할 토큰 수량 rate * duration)

    Raises:
        InvalidInputError: rate가 0이거나 duration이 양수가 아닌 경우
        StreamAmountOverflowError: rate * duration이 uint128을 넘는 경우
    """
    if rate <= 0:
        raise InvalidInputError("Stream rate must be positive")
    if duration <= 0:
        raise InvalidInputError("Stream duration must be positive")
    amount = rate * duration
    if amount > UINT128_MAX:
        raise StreamAmountOverflowError(rate, duration)

    creator = normalize_address(creator)
    token = normalize_address(token)
    key = stream_key(creator, tick_lower, tick_upper, token, rate)
    stream = pool.streams.get(key)

    if stream is None:
        stream = StreamInfo(
            creator=creator,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            token=token,
            rate=rate,
            start=now,
            expiry=now + duration,
        )
        pool.streams[key] = stream
        logger.info("Stream %s started: rate %d until %d", key.hex()[:10], rate, stream.expiry)
    elif not stream.is_active(now):
        stream.rearm(now, duration)
        logger.info("Stream %s re-armed: window %d..%d", key.hex()[:10], stream.start, stream.expiry)
    else:
        stream.expiry += duration
        logger.info("Stream %s extended until %d", key.hex()[:10], stream.expiry)

    return stream, amount


def calculate(
    position: PositionInfo,
    stream: StreamInfo,
    total_seconds_inside: int,
    now: int
) -> int:
    """포지션의 스트림 누적 권리액 (모든 구간 합산)"""
    if total_seconds_inside == 0:
        return 0
    elapsed = stream.streamed_seconds(now)
    if elapsed <= 0:
        return 0
    return mul_div(
        position.relative_seconds_cumulative,
        elapsed * stream.rate,
        total_seconds_inside << 32,
    )


def streams_for(
    pool: PoolAccounting,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int
) -> List[StreamInfo]:
    """범위/토큰/rate가 일치하는 모든 생성자의 스트림"""
    token = normalize_address(token)
    return [
        s for s in pool.streams.values()
        if s.tick_lower == tick_lower and s.tick_upper == tick_upper
        and s.token == token and s.rate == rate
    ]


def entitlement(
    pool: PoolAccounting,
    position: PositionInfo,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int,
    total_seconds_inside: int,
    now: int
) -> int:
    return sum(
        calculate(position, s, total_seconds_inside, now)
        for s in streams_for(pool, tick_lower, tick_upper, token, rate)
    )


def unclaimed(
    pool: PoolAccounting,
    position: PositionInfo,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int,
    total_seconds_inside: int,
    now: int
) -> int:
    """아직 인출하지 않은 금액 (상태 변경 없음)"""
    owed = entitlement(pool, position, tick_lower, tick_upper, token, rate, total_seconds_inside, now)
    return max(owed - position.claimed.get((normalize_address(token), rate), 0), 0)


def withdraw(
    pool: PoolAccounting,
    position: PositionInfo,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int,
    total_seconds_inside: int,
    now: int
) -> int:
    """누적 권리액 - 기청구액 인출

    claimed는 (token, rate) 단위로 기록되므로 같은 범위/토큰/rate의
    모든 생성자 스트림을 합산합니다. 인출액은 각 스트림의 권리액 비율로
    withdrawn_total에 배분하고, 나머지는 가장 큰 스트림에 더합니다.

    Returns:
        인출액 (추가 누적이 없으면 0)
    """
    token = normalize_address(token)
    streams = streams_for(pool, tick_lower, tick_upper, token, rate)
    shares = [calculate(position, s, total_seconds_inside, now) for s in streams]
    owed = sum(shares)

    claim_key = (token, rate)
    already = position.claimed.get(claim_key, 0)
    amount = max(owed - already, 0)
    position.claimed[claim_key] = max(already, owed)

    if amount == 0:
        return 0

    allotted = 0
    largest = 0
    for i, (stream, share) in enumerate(zip(streams, shares)):
        part = amount * share // owed
        stream.withdrawn_total += part
        allotted += part
        if share > shares[largest]:
            largest = i
    streams[largest].withdrawn_total += amount - allotted

    logger.info("Withdrew %d of %s (rate %d) from range [%d, %d]",
                amount, token, rate, tick_lower, tick_upper)
    return amount


def _lookup(
    pool: PoolAccounting,
    caller: str,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int
) -> Tuple[bytes, StreamInfo]:
    caller = normalize_address(caller)
    key = stream_key(caller, tick_lower, tick_upper, token, rate)
    stream = pool.streams.get(key)
    if stream is None:
        # 다른 생성자의 스트림만 있으면 권한 오류
        if streams_for(pool, tick_lower, tick_upper, token, rate):
            raise UnauthorizedError(caller)
        raise StreamNotFoundError(key.hex())
    if stream.creator != caller:
        raise UnauthorizedError(caller)
    return key, stream


def terminate(
    pool: PoolAccounting,
    caller: str,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int,
    now: int
) -> int:
    """활성 스트림 조기 종료

    expiry를 now로 당기고 남은 기간분 rate * (expiry - now)를 환불합니다.
    항목은 유지되어 지난 구간은 계속 청구할 수 있습니다.

    Raises:
        UnauthorizedError: 생성자가 아닌 경우
        StreamNotFoundError: 스트림이 없는 경우
        StreamNotActiveError: 이미 만료된 경우
    """
    key, stream = _lookup(pool, caller, tick_lower, tick_upper, token, rate)
    if not stream.is_active(now):
        raise StreamNotActiveError(key.hex())
    refund = stream.rate * (stream.expiry - now)
    stream.expiry = now
    logger.info("Stream %s terminated, refund %d", key.hex()[:10], refund)
    return refund


def kill(
    pool: PoolAccounting,
    caller: str,
    tick_lower: int,
    tick_upper: int,
    token: str,
    rate: int,
    now: int
) -> int:
    """스트림 삭제, 모든 구간의 미인출 잔액 환불 (만료 후에도 가능)"""
    key, stream = _lookup(pool, caller, tick_lower, tick_upper, token, rate)
    unspent = max(stream.funded_total - stream.withdrawn_total, 0)
    del pool.streams[key]
    logger.info("Stream %s killed at %d, refund %d", key.hex()[:10], now, unspent)
    return unspent
