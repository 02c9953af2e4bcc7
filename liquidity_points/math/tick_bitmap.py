"""
Tick Bitmap - 초기화된 틱의 압축 비트맵

틱 간격으로 압축한 틱 인덱스를 256비트 워드(word)에 1비트씩 저장합니다.
스왑 루프는 한 번에 한 워드 안에서만 다음 초기화 틱을 찾습니다.

References:
- Uniswap V4 Core: src/libraries/TickBitmap.sol
"""

from typing import Dict, Tuple

from ..errors import InvalidInputError
from .full_math import most_significant_bit, least_significant_bit


def compress(tick: int, tick_spacing: int) -> int:
    """틱을 틱 간격으로 압축 (음의 무한대 방향 내림)"""
    return tick // tick_spacing


def position(compressed: int) -> Tuple[int, int]:
    """압축 틱의 (word 위치, bit 위치)"""
    return compressed >> 8, compressed & 0xFF


class TickBitmap:
    """int16 word 위치 -> uint256 비트맵"""

    def __init__(self, words: Dict[int, int] = None):
        self.words: Dict[int, int] = dict(words or {})

    def flip_tick(self, tick: int, tick_spacing: int) -> None:
        """틱의 초기화 상태를 뒤집음

        Raises:
            InvalidInputError: 틱이 간격에 정렬되지 않은 경우
        """
        if tick % tick_spacing != 0:
            raise InvalidInputError(f"Tick {tick} not aligned to spacing {tick_spacing}")
        word_pos, bit_pos = position(tick // tick_spacing)
        word = self.words.get(word_pos, 0) ^ (1 << bit_pos)
        if word:
            self.words[word_pos] = word
        else:
            self.words.pop(word_pos, None)

    def is_initialized(self, tick: int, tick_spacing: int) -> bool:
        if tick % tick_spacing != 0:
            return False
        word_pos, bit_pos = position(tick // tick_spacing)
        return bool(self.words.get(word_pos, 0) & (1 << bit_pos))

    def next_initialized_tick_within_one_word(
        self,
        tick: int,
        tick_spacing: int,
        lte: bool
    ) -> Tuple[int, bool]:
        """같은 워드 안에서 다음 초기화 틱 탐색

        Args:
            tick: 시작 틱
            tick_spacing: 틱 간격
            lte: True면 왼쪽(tick 이하) 탐색, False면 오른쪽(tick 초과) 탐색

        Returns:
            (다음 틱, 초기화 여부). 워드 안에 없으면 워드 경계 틱과 False.
        """
        compressed = compress(tick, tick_spacing)

        if lte:
            word_pos, bit_pos = position(compressed)
            # bit_pos 포함 오른쪽 모든 비트
            mask = (1 << bit_pos) - 1 + (1 << bit_pos)
            masked = self.words.get(word_pos, 0) & mask
            if masked:
                return (compressed - (bit_pos - most_significant_bit(masked))) * tick_spacing, True
            return (compressed - bit_pos) * tick_spacing, False

        word_pos, bit_pos = position(compressed + 1)
        # bit_pos 포함 왼쪽 모든 비트
        mask = ~((1 << bit_pos) - 1)
        masked = self.words.get(word_pos, 0) & mask
        if masked:
            return (compressed + 1 + (least_significant_bit(masked) - bit_pos)) * tick_spacing, True
        return (compressed + 1 + (255 - bit_pos)) * tick_spacing, False
