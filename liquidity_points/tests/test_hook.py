"""
LiquidityPointsHook 시나리오 테스트

풀 매니저를 통해 유동성 변경/스트림/조회를 끝까지 실행합니다.
T0 = 1000, 현재 틱 0.
"""

import pytest

from ..constants import Q128
from ..core.interfaces import ClaimPayload
from ..core.keys import position_key
from ..errors import (
    InsufficientBalanceError,
    InvalidInputError,
    MalformedClaimError,
    PoolNotInitializedError,
    StreamNotActiveError,
    UnauthorizedError,
)
from ..pool.manager import make_pool_key
from .conftest import ALICE, BOB, CAROL, HOOK, REWARD, T0, TOKEN0, TOKEN1

E18 = 10**18


class TestSecondsInside:
    """범위 내 시간의 가법성"""

    @pytest.fixture
    def ranges(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.add(BOB, 1200, 3000, E18)
        env.add(CAROL, -3000, -1500, E18)
        env.clock.advance(100)
        return env

    def test_parent_ranges(self, ranges):
        assert ranges.hook.get_seconds_inside(ranges.key, -1200, 1200) == 100
        assert ranges.hook.get_seconds_inside(ranges.key, -1500, 3000) == 100
        assert ranges.hook.get_seconds_inside(ranges.key, -3000, 3000) == 100

    def test_sub_ranges_sum_to_parent(self, ranges):
        subs = [(-3000, -1500), (-1500, -1200), (-1200, 1200), (1200, 3000)]
        total = sum(ranges.hook.get_seconds_inside(ranges.key, lo, hi) for lo, hi in subs)
        assert total == ranges.hook.get_seconds_inside(ranges.key, -3000, 3000) == 100

    def test_outside_range_stays_zero(self, ranges):
        assert ranges.hook.get_seconds_per_liquidity_inside(ranges.key, 1200, 3000) == 0
        ranges.clock.advance(50)
        assert ranges.hook.get_seconds_per_liquidity_inside(ranges.key, 1200, 3000) == 0
        assert ranges.hook.get_seconds_inside(ranges.key, 1200, 3000) == 0

    def test_queries_idempotent_and_read_only(self, ranges):
        first = ranges.hook.get_seconds_per_liquidity_inside(ranges.key, -1200, 1200)
        second = ranges.hook.get_seconds_per_liquidity_inside(ranges.key, -1200, 1200)
        assert first == second > 0
        # 저장된 전역 누적기는 조회로 바뀌지 않음
        assert ranges.pool.last_update_timestamp == T0
        assert ranges.pool.seconds_per_liquidity_global_x128 == 0

    def test_query_advances_in_memory(self, ranges):
        before = ranges.hook.get_seconds_per_liquidity_inside(ranges.key, -1200, 1200)
        ranges.clock.advance(100)
        after = ranges.hook.get_seconds_per_liquidity_inside(ranges.key, -1200, 1200)
        assert before == 100 * Q128 // E18
        assert after == 200 * Q128 // E18


class TestPoints:
    """유동성 포인트 누적"""

    def test_single_position(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.clock.advance(100)
        env.touch(ALICE, -1200, 1200)
        key = position_key(ALICE, -1200, 1200)
        assert env.pool.positions[key].relative_seconds_cumulative == (100 << 32) - 1

    def test_split_by_liquidity(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.add(BOB, -1200, 1200, 3 * E18)
        env.clock.advance(100)
        env.touch(ALICE, -1200, 1200)
        env.touch(BOB, -1200, 1200)
        positions = env.pool.positions
        assert positions[position_key(ALICE, -1200, 1200)].relative_seconds_cumulative == (25 << 32) - 1
        assert positions[position_key(BOB, -1200, 1200)].relative_seconds_cumulative == (75 << 32) - 1

    def test_remove_accrues_liquidity_before(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.clock.advance(100)
        env.remove(ALICE, -1200, 1200, E18)
        assert env.pool.positions[position_key(ALICE, -1200, 1200)].relative_seconds_cumulative == (100 << 32) - 1
        assert env.manager.get_current_liquidity(env.key.id) == 0

    def test_no_accrual_while_pool_empty(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.remove(ALICE, -1200, 1200, E18)
        env.clock.advance(100)
        assert env.hook.get_seconds_per_liquidity_inside(env.key, -1200, 1200) == 0

    def test_salts_are_separate_positions(self, env):
        env.add(ALICE, -1200, 1200, E18, salt=1)
        env.add(ALICE, -1200, 1200, E18, salt=2)
        env.clock.advance(100)
        rewards = env.hook.get_position_rewards(ALICE, env.key, -1200, 1200, salt=1)
        assert rewards.points == (50 << 32) - 1

    def test_rewards_query_rolls_back(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.clock.advance(100)
        rewards = env.hook.get_position_rewards(ALICE, env.key, -1200, 1200)
        assert rewards.points == (100 << 32) - 1
        assert rewards.unclaimed == 0
        assert env.pool.positions[position_key(ALICE, -1200, 1200)].relative_seconds_cumulative == 0
        assert env.pool.last_update_timestamp == T0

    def test_touch_empty_position_rejected(self, env):
        with pytest.raises(InvalidInputError):
            env.touch(ALICE, -1200, 1200)
        assert env.pool.positions == {}

    def test_misaligned_ticks_rejected(self, env):
        with pytest.raises(InvalidInputError):
            env.add(ALICE, -1210, 1200, E18)


@pytest.fixture
def funded(env):
    """ALICE(1e18), BOB(3e18) 포지션과 CAROL의 스트림 (rate 10, 1000초)"""
    env.add(ALICE, -1200, 1200, E18)
    env.add(BOB, -1200, 1200, 3 * E18)
    env.custody.mint(REWARD, CAROL, 10_000)
    env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 1000)
    return env


class TestStreams:
    """보상 스트림 분배"""

    def test_funding_moves_to_custody(self, funded):
        assert funded.custody.balance_of(REWARD, CAROL) == 0
        assert funded.custody.balance_of(REWARD, HOOK) == 10_000
        stream = funded.hook.get_stream(funded.key, CAROL, -1200, 1200, REWARD, 10)
        assert (stream.start, stream.expiry) == (T0, T0 + 1000)

    def test_linear_distribution(self, funded):
        funded.clock.advance(100)
        # 25:75 분배, 포인트 절사로 1씩 적음
        assert funded.claim(ALICE, -1200, 1200, REWARD, 10) == 249
        assert funded.claim(BOB, -1200, 1200, REWARD, 10) == 749
        funded.clock.advance(100)
        assert funded.claim(ALICE, -1200, 1200, REWARD, 10) == 250

    def test_withdraw_idempotent(self, funded):
        funded.clock.advance(100)
        assert funded.claim(ALICE, -1200, 1200, REWARD, 10) == 249
        assert funded.claim(ALICE, -1200, 1200, REWARD, 10) == 0

    def test_unclaimed_query(self, funded):
        funded.clock.advance(100)
        rewards = funded.hook.get_position_rewards(BOB, funded.key, -1200, 1200, token=REWARD, rate=10)
        assert rewards.points == (75 << 32) - 1
        assert rewards.unclaimed == 749
        assert funded.claim(BOB, -1200, 1200, REWARD, 10) == 749
        rewards = funded.hook.get_position_rewards(BOB, funded.key, -1200, 1200, token=REWARD, rate=10)
        assert rewards.unclaimed == 0

    def test_claim_to_beneficiary(self, funded):
        funded.clock.advance(100)
        assert funded.claim(ALICE, -1200, 1200, REWARD, 10, beneficiary=CAROL) == 249
        assert funded.custody.balance_of(REWARD, ALICE) == 0

    def test_claim_on_remove(self, funded):
        funded.clock.advance(100)
        payload = ClaimPayload(REWARD, 10, ALICE).encode()
        funded.remove(ALICE, -1200, 1200, E18, hook_data=payload)
        assert funded.custody.balance_of(REWARD, ALICE) == 249

    def test_malformed_claim_aborts(self, funded):
        funded.clock.advance(100)
        with pytest.raises(MalformedClaimError):
            funded.touch(ALICE, -1200, 1200, hook_data=b"\x00" * 10)
        assert funded.pool.last_update_timestamp == T0
        assert funded.pool.positions[position_key(ALICE, -1200, 1200)].relative_seconds_cumulative == 0

    def test_extend_active(self, funded):
        funded.clock.advance(500)
        funded.custody.mint(REWARD, CAROL, 1000)
        stream = funded.hook.create_stream(CAROL, funded.key, -1200, 1200, REWARD, 10, 100)
        assert (stream.start, stream.expiry) == (T0, T0 + 1100)
        assert funded.custody.balance_of(REWARD, HOOK) == 11_000

    def test_rearm_keeps_claimed_window(self, env):
        """만료 후 재시작해도 지난 구간의 청구액이 새 구간에서 차감되지 않음"""
        env.add(ALICE, -1200, 1200, E18)
        env.custody.mint(REWARD, CAROL, 2000)
        env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 100)
        env.clock.advance(100)
        assert env.claim(ALICE, -1200, 1200, REWARD, 10) == 999

        env.clock.advance(100)
        stream = env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 100)
        assert stream.past_windows == [(T0, T0 + 100)]
        assert (stream.start, stream.expiry) == (T0 + 200, T0 + 300)

        env.clock.advance(100)
        # 두 구간 합계 2000 중 포인트 절사로 1999, 이미 받은 999 제외
        assert env.claim(ALICE, -1200, 1200, REWARD, 10) == 1000
        assert env.hook.kill_stream(CAROL, env.key, -1200, 1200, REWARD, 10) == 1
        assert env.custody.balance_of(REWARD, HOOK) == 0

    def test_rearm_keeps_unclaimed_window(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.custody.mint(REWARD, CAROL, 2000)
        env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 100)
        env.clock.advance(200)
        env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 100)
        env.clock.advance(100)

        assert env.claim(ALICE, -1200, 1200, REWARD, 10) == 1999
        assert env.hook.kill_stream(CAROL, env.key, -1200, 1200, REWARD, 10) == 1
        assert env.custody.balance_of(REWARD, CAROL) == 1
        assert env.custody.balance_of(REWARD, HOOK) == 0

    def test_kill_after_rearm_refunds_both_windows(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.custody.mint(REWARD, CAROL, 2000)
        env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 100)
        env.clock.advance(200)
        env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 100)

        # 아무도 청구하지 않았으므로 두 구간 예치금 전부 환불
        assert env.hook.kill_stream(CAROL, env.key, -1200, 1200, REWARD, 10) == 2000
        assert env.custody.balance_of(REWARD, CAROL) == 2000
        assert env.custody.balance_of(REWARD, HOOK) == 0

    def test_create_without_funds_rolls_back(self, env):
        with pytest.raises(InsufficientBalanceError):
            env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 1000)
        assert env.hook.get_stream(env.key, CAROL, -1200, 1200, REWARD, 10) is None

    def test_create_on_unknown_pool(self, env):
        key = make_pool_key(TOKEN0, TOKEN1, 500, 10, HOOK)
        with pytest.raises(PoolNotInitializedError):
            env.hook.create_stream(CAROL, key, -1200, 1200, REWARD, 10, 1000)

    def test_create_rejects_bad_range(self, env):
        with pytest.raises(InvalidInputError):
            env.hook.create_stream(CAROL, env.key, 1200, -1200, REWARD, 10, 1000)


class TestTermination:
    """종료 / 삭제와 환불"""

    def test_terminate_refunds_remaining(self, env):
        env.add(ALICE, -1200, 1200, E18)
        env.custody.mint(REWARD, CAROL, 10_000)
        env.hook.create_stream(CAROL, env.key, -1200, 1200, REWARD, 10, 1000)
        env.clock.advance(100)

        assert env.hook.terminate_stream(CAROL, env.key, -1200, 1200, REWARD, 10) == 9000
        assert env.custody.balance_of(REWARD, CAROL) == 9000

        # 종료 전 구간만 청구 가능
        assert env.claim(ALICE, -1200, 1200, REWARD, 10) == 999
        env.clock.advance(500)
        assert env.claim(ALICE, -1200, 1200, REWARD, 10) == 0

        # 남은 1은 kill로 회수
        assert env.hook.kill_stream(CAROL, env.key, -1200, 1200, REWARD, 10) == 1
        assert env.custody.balance_of(REWARD, HOOK) == 0
        assert env.hook.get_stream(env.key, CAROL, -1200, 1200, REWARD, 10) is None

    def test_terminate_requires_creator(self, funded):
        with pytest.raises(UnauthorizedError):
            funded.hook.terminate_stream(ALICE, funded.key, -1200, 1200, REWARD, 10)
        with pytest.raises(UnauthorizedError):
            funded.hook.kill_stream(ALICE, funded.key, -1200, 1200, REWARD, 10)

    def test_terminate_after_expiry(self, funded):
        funded.clock.advance(1000)
        with pytest.raises(StreamNotActiveError):
            funded.hook.terminate_stream(CAROL, funded.key, -1200, 1200, REWARD, 10)

    def test_kill_refunds_unclaimed(self, funded):
        funded.clock.advance(2000)
        assert funded.claim(ALICE, -1200, 1200, REWARD, 10) == 2499
        assert funded.hook.kill_stream(CAROL, funded.key, -1200, 1200, REWARD, 10) == 10_000 - 2499
        assert funded.custody.balance_of(REWARD, HOOK) == 0
