"""
Key Codec - 결정적 복합 키 해싱

- 틱: 틱 인덱스 그대로 사용
- 포지션: keccak256(abi.encodePacked(owner, tickLower, tickUpper, salt))
- 스트림: keccak256(abi.encode(creator, tickLower, tickUpper, token, rate))
- 풀: keccak256(abi.encode(PoolKey))

References:
- Uniswap V4 Core: src/libraries/Position.sol (calculatePositionKey)
- Uniswap V4 Core: src/types/PoolId.sol
"""

from typing import Union

from eth_abi import encode
from eth_abi.packed import encode_packed
from eth_utils import is_address, keccak, to_checksum_address

from ..errors import InvalidInputError

Salt = Union[int, bytes]


def normalize_address(address: str) -> str:
    """EIP-55 체크섬 주소로 정규화

    Raises:
        InvalidInputError: 주소 형식이 아닌 경우
    """
    if not isinstance(address, str) or not is_address(address):
        raise InvalidInputError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def normalize_salt(salt: Salt) -> bytes:
    """salt를 bytes32로 정규화"""
    if isinstance(salt, int):
        if salt < 0 or salt >= 2 ** 256:
            raise InvalidInputError(f"Salt out of bytes32 range: {salt}")
        return salt.to_bytes(32, "big")
    if isinstance(salt, (bytes, bytearray)) and len(salt) == 32:
        return bytes(salt)
    raise InvalidInputError(f"Salt must be an int or 32 bytes: {salt!r}")


def tick_key(tick: int) -> int:
    return tick


def position_key(owner: str, tick_lower: int, tick_upper: int, salt: Salt = 0) -> bytes:
    """포지션 키 (v4 Position.calculatePositionKey와 동일)"""
    return keccak(encode_packed(
        ["address", "int24", "int24", "bytes32"],
        [normalize_address(owner), tick_lower, tick_upper, normalize_salt(salt)],
    ))


def stream_key(creator: str, tick_lower: int, tick_upper: int, token: str, rate: int) -> bytes:
    """스트림 키: 생성자별로 분리됨"""
    return keccak(encode(
        ["address", "int24", "int24", "address", "uint256"],
        [normalize_address(creator), tick_lower, tick_upper, normalize_address(token), rate],
    ))


def pool_id(currency0: str, currency1: str, fee: int, tick_spacing: int, hooks: str) -> bytes:
    """풀 ID (v4 PoolKey.toId와 동일)"""
    return keccak(encode(
        ["address", "address", "uint24", "int24", "address"],
        [normalize_address(currency0), normalize_address(currency1), fee, tick_spacing, normalize_address(hooks)],
    ))
