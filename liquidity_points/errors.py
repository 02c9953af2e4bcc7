"""
오류 정의

모든 실패는 작업 경계에서 전부 또는 전무(all-or-nothing)로 처리됩니다.
산술 경계 조건(유동성 0, 범위 내 시간 0)은 예외가 아니라 0 결과로 처리합니다.

오류 코드 범위:
  1xxx: 잘못된 입력
  2xxx: 권한
  3xxx: 스트림 상태
  4xxx: 풀/잔액 상태
  9xxx: 불변식 위반 (치명적)
"""


class LiquidityPointsError(Exception):
    """기본 오류"""

    def __init__(self, code: int, message: str, http_status: int = 400) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: 잘못된 입력 ---

class InvalidInputError(LiquidityPointsError):
    def __init__(self, message: str) -> None:
        super().__init__(1001, message, 422)


class MalformedClaimError(LiquidityPointsError):
    def __init__(self, message: str) -> None:
        super().__init__(1002, f"Malformed claim payload: {message}", 422)


class StreamAmountOverflowError(LiquidityPointsError):
    def __init__(self, rate: int, duration: int) -> None:
        super().__init__(
            1003,
            f"Streamed amount overflows uint128: rate {rate} * duration {duration}",
            422,
        )


class InvalidSwapParamsError(LiquidityPointsError):
    def __init__(self, message: str) -> None:
        super().__init__(1004, message, 422)


# --- 2xxx: 권한 ---

class UnauthorizedError(LiquidityPointsError):
    def __init__(self, caller: str) -> None:
        super().__init__(2001, f"Caller {caller} is not the stream creator", 403)


# --- 3xxx: 스트림 상태 ---

class StreamNotFoundError(LiquidityPointsError):
    def __init__(self, stream_key: str) -> None:
        super().__init__(3001, f"Stream not found: {stream_key}", 404)


class StreamNotActiveError(LiquidityPointsError):
    def __init__(self, stream_key: str) -> None:
        super().__init__(3002, f"Stream already expired: {stream_key}", 409)


# --- 4xxx: 풀/잔액 상태 ---

class PoolNotInitializedError(LiquidityPointsError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(4001, f"Pool not initialized: {pool_id}", 404)


class PoolAlreadyInitializedError(LiquidityPointsError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(4002, f"Pool already initialized: {pool_id}", 409)


class InsufficientBalanceError(LiquidityPointsError):
    def __init__(self, token: str, account: str, required: int, available: int) -> None:
        super().__init__(
            4003,
            f"Insufficient {token} balance for {account}: required {required}, available {available}",
            422,
        )


# --- 9xxx: 불변식 위반 ---

class InvariantViolation(LiquidityPointsError):
    """회계 상태를 더 이상 신뢰할 수 없는 치명적 오류"""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 500)


class SwapMismatchError(InvariantViolation):
    def __init__(self, simulated: int, actual: int) -> None:
        self.simulated = simulated
        self.actual = actual
        super().__init__(
            9001,
            f"Simulated swap delta {simulated:#x} does not match actual delta {actual:#x}",
        )
