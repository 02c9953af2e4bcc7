"""
Tick Bitmap 테스트
"""

import pytest

from ..errors import InvalidInputError
from ..math.tick_bitmap import TickBitmap, compress, position


def _bitmap(*ticks, spacing=1):
    bitmap = TickBitmap()
    for tick in ticks:
        bitmap.flip_tick(tick, spacing)
    return bitmap


class TestCompress:
    """음의 무한대 방향 내림"""

    def test_compress(self):
        assert compress(120, 60) == 2
        assert compress(-1, 60) == -1
        assert compress(-60, 60) == -1
        assert compress(-61, 60) == -2

    def test_position(self):
        assert position(0) == (0, 0)
        assert position(255) == (0, 255)
        assert position(256) == (1, 0)
        assert position(-1) == (-1, 255)


class TestFlipTick:
    """flip_tick / is_initialized"""

    def test_flip_twice(self):
        bitmap = _bitmap(-230)
        assert bitmap.is_initialized(-230, 1)
        assert not bitmap.is_initialized(-229, 1)
        bitmap.flip_tick(-230, 1)
        assert not bitmap.is_initialized(-230, 1)
        assert bitmap.words == {}

    def test_misaligned(self):
        with pytest.raises(InvalidInputError):
            TickBitmap().flip_tick(30, 60)


class TestNextInitializedTickWithinOneWord:
    """v4 TickBitmap 테스트 시나리오 (초기화 틱: -200, -55, -4, 70, 78, 84, 139, 240, 535)"""

    @pytest.fixture
    def bitmap(self):
        return _bitmap(-200, -55, -4, 70, 78, 84, 139, 240, 535)

    def test_right_finds_next(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(78, 1, False) == (84, True)
        assert bitmap.next_initialized_tick_within_one_word(-55, 1, False) == (-4, True)
        assert bitmap.next_initialized_tick_within_one_word(77, 1, False) == (78, True)
        assert bitmap.next_initialized_tick_within_one_word(-56, 1, False) == (-55, True)

    def test_right_word_boundary(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(255, 1, False) == (511, False)
        assert bitmap.next_initialized_tick_within_one_word(-257, 1, False) == (-200, True)
        assert bitmap.next_initialized_tick_within_one_word(328, 1, False) == (511, False)

    def test_left_includes_current(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(78, 1, True) == (78, True)
        assert bitmap.next_initialized_tick_within_one_word(79, 1, True) == (78, True)

    def test_left_word_boundary(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(258, 1, True) == (256, False)
        assert bitmap.next_initialized_tick_within_one_word(256, 1, True) == (256, False)
        assert bitmap.next_initialized_tick_within_one_word(-257, 1, True) == (-512, False)

    def test_left_negative(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(-55, 1, True) == (-55, True)
        assert bitmap.next_initialized_tick_within_one_word(-56, 1, True) == (-200, True)

    def test_spacing(self):
        bitmap = _bitmap(-1200, 1200, spacing=60)
        # -1200은 다른 워드: 현재 워드 경계에서 멈춤
        assert bitmap.next_initialized_tick_within_one_word(0, 60, True) == (0, False)
        assert bitmap.next_initialized_tick_within_one_word(-1, 60, True) == (-1200, True)
        assert bitmap.next_initialized_tick_within_one_word(0, 60, False) == (1200, True)
        assert bitmap.next_initialized_tick_within_one_word(1200, 60, False) == (60 * 255, False)
