"""
랜덤 스왑 시뮬레이션 테스트

결과값 자체가 아니라 시뮬레이션 전반에 걸쳐 유지되어야 하는 성질을 확인합니다.
"""

import copy

import pytest

from ..simulation import run_simulation
from .conftest import ALICE, BOB, CAROL, HOOK, REWARD, TOKEN0, TOKEN1

BASE_CONFIG = {
    "start_time": 1000,
    "pool": {"currency0": TOKEN0, "currency1": TOKEN1, "hooks": HOOK, "fee": 3000, "tick_spacing": 60},
    "positions": [
        {"name": "narrow", "owner": ALICE, "tick_lower": -600, "tick_upper": 600, "liquidity": 10**18},
        {"name": "wide", "owner": BOB, "tick_lower": -3000, "tick_upper": 3000, "liquidity": 3 * 10**18},
    ],
    "streams": [
        {"creator": CAROL, "token": REWARD, "tick_lower": -3000, "tick_upper": 3000, "rate": 100, "duration": 3600},
    ],
    "swaps": {"seed": 1, "steps": 30, "mean_interval": 60, "amount_mean": 2e16, "amount_std": 1e16},
}


@pytest.fixture
def result():
    return run_simulation(copy.deepcopy(BASE_CONFIG))


class TestSimulation:
    """시뮬레이션 불변 성질"""

    def test_timeline_shape(self, result):
        assert len(result.timeline) == 30
        assert list(result.timeline.columns[:4]) == ["step", "timestamp", "tick", "liquidity"]
        assert result.timeline["timestamp"].is_monotonic_increasing

    def test_points_never_decrease(self, result):
        for name in ("narrow", "wide"):
            assert result.timeline[name].is_monotonic_increasing

    def test_wide_position_never_idle(self, result):
        # 가격이 [-3000, 3000]을 벗어나지 않으면 넓은 범위는 항상 범위 내
        if result.timeline["tick"].abs().max() < 3000:
            wide = result.summary.set_index("name").loc["wide"]
            assert wide["seconds_inside"] == result.timeline["timestamp"].iloc[-1] - 1000

    def test_claims_bounded_by_funding(self, result):
        assert result.summary["claimed"].sum() <= result.streams["funded"].sum()
        assert result.streams["withdrawn"].sum() == result.summary["claimed"].sum()

    def test_points_share(self, result):
        assert result.summary["points_share"].sum() == pytest.approx(1.0)

    def test_deterministic_seed(self, result):
        again = run_simulation(copy.deepcopy(BASE_CONFIG))
        assert again.timeline.equals(result.timeline)
