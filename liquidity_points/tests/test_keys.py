"""
Key Codec 테스트

키 파생은 결정적이어야 하고, 입력 하나만 달라도 다른 키가 나와야 합니다.
"""

import pytest
from eth_abi import decode
from eth_utils import keccak

from ..core.interfaces import ClaimPayload, PoolKey, decode_claim
from ..core.keys import normalize_address, normalize_salt, pool_id, position_key, stream_key, tick_key
from ..errors import InvalidInputError, MalformedClaimError

OWNER = "0x" + "11" * 20
TOKEN = "0x" + "22" * 20
OTHER = "0x" + "33" * 20


class TestAddresses:
    def test_checksum(self):
        lower = "0x" + "ab" * 20
        assert normalize_address(lower) == normalize_address(lower.upper().replace("0X", "0x"))
        assert normalize_address(lower) != lower

    def test_invalid(self):
        with pytest.raises(InvalidInputError):
            normalize_address("0x1234")
        with pytest.raises(InvalidInputError):
            normalize_address(1234)


class TestSalt:
    def test_int_and_bytes_equivalent(self):
        assert normalize_salt(5) == (5).to_bytes(32, "big")
        assert normalize_salt(b"\x00" * 31 + b"\x05") == normalize_salt(5)

    def test_invalid(self):
        with pytest.raises(InvalidInputError):
            normalize_salt(-1)
        with pytest.raises(InvalidInputError):
            normalize_salt(b"short")


class TestPositionKey:
    """keccak256(abi.encodePacked(owner, tickLower, tickUpper, salt))"""

    def test_packed_layout(self):
        """20 + 3 + 3 + 32 바이트, int24는 2의 보수"""
        packed = bytes.fromhex("11" * 20) + (-1200 & 0xFFFFFF).to_bytes(3, "big") \
            + (1200).to_bytes(3, "big") + (7).to_bytes(32, "big")
        assert position_key(OWNER, -1200, 1200, 7) == keccak(packed)

    def test_distinct(self):
        base = position_key(OWNER, -1200, 1200, 0)
        assert base == position_key(OWNER.upper().replace("0X", "0x"), -1200, 1200, 0)
        assert base != position_key(OTHER, -1200, 1200, 0)
        assert base != position_key(OWNER, -1200, 1260, 0)
        assert base != position_key(OWNER, -1200, 1200, 1)


class TestStreamKey:
    def test_distinct_per_field(self):
        base = stream_key(OWNER, -1200, 1200, TOKEN, 100)
        assert len(base) == 32
        assert base != stream_key(OTHER, -1200, 1200, TOKEN, 100)
        assert base != stream_key(OWNER, -1200, 1200, OTHER, 100)
        assert base != stream_key(OWNER, -1200, 1200, TOKEN, 101)
        assert base != stream_key(OWNER, -1260, 1200, TOKEN, 100)

    def test_tick_key_is_index(self):
        assert tick_key(-1200) == -1200


class TestPoolId:
    def test_matches_pool_key(self):
        key = PoolKey(TOKEN, OTHER, 3000, 60, OWNER)
        assert key.id == pool_id(TOKEN, OTHER, 3000, 60, OWNER)
        assert key.id != PoolKey(TOKEN, OTHER, 500, 60, OWNER).id


class TestClaimPayload:
    """hook_data = abi.encode(token, rate, beneficiary)"""

    def test_encode_decode(self):
        claim = ClaimPayload(normalize_address(TOKEN), 100, normalize_address(OWNER))
        data = claim.encode()
        assert len(data) == 96
        assert decode(["address", "uint256", "address"], data)[1] == 100
        assert ClaimPayload.decode(data) == claim

    def test_empty_means_no_claim(self):
        assert decode_claim(b"") is None
        assert decode_claim(None) is None

    def test_wrong_length(self):
        with pytest.raises(MalformedClaimError):
            decode_claim(b"\x01" * 95)

    def test_zero_rate(self):
        data = ClaimPayload(TOKEN, 0, OWNER).encode()
        with pytest.raises(MalformedClaimError):
            decode_claim(data)

    def test_dirty_address_padding(self):
        """주소 상위 12바이트가 0이 아니면 거부"""
        data = bytearray(ClaimPayload(TOKEN, 1, OWNER).encode())
        data[0] = 0xFF
        with pytest.raises(MalformedClaimError):
            decode_claim(bytes(data))
