"""
랜덤 스왑 시뮬레이션

설정(dict)으로 풀/포지션/스트림을 구성한 뒤 무작위 스왑과 시간 경과를 반복하고,
포지션별 포인트와 최종 청구액을 DataFrame으로 반환합니다.

설정 예시는 config/simulation.yaml 참고.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd
import yaml

from .constants import MAX_TICK, MIN_TICK
from .core.hook import LiquidityPointsHook
from .core.interfaces import ClaimPayload, ManualClock, ModifyLiquidityParams, PoolKey, SwapParams
from .math.tick_math import get_sqrt_ratio_at_tick
from .pool.custody import InMemoryCustody
from .pool.manager import PoolManager, make_pool_key

logger = logging.getLogger(__name__)

TRADER = "0x000000000000000000000000000000000000dEaD"


@dataclass
class SimulationResult:
    timeline: pd.DataFrame
    summary: pd.DataFrame
    streams: pd.DataFrame


def load_config(path: str) -> Dict[str, Any]:
    with open(path, 'r') as f:
        return yaml.safe_load(f)


def _build(config: Dict[str, Any]) -> Tuple[ManualClock, InMemoryCustody, PoolManager, LiquidityPointsHook, PoolKey]:
    pool_cfg = config["pool"]
    clock = ManualClock(int(config.get("start_time", 0)))
    custody = InMemoryCustody(pool_cfg["hooks"])
    manager = PoolManager(custody)
    hook = LiquidityPointsHook(manager, custody, clock=clock)
    manager.register_hook(pool_cfg["hooks"], hook)

    key = make_pool_key(
        pool_cfg["currency0"],
        pool_cfg["currency1"],
        int(pool_cfg.get("fee", 3000)),
        int(pool_cfg.get("tick_spacing", 60)),
        pool_cfg["hooks"],
    )
    manager.initialize(key, get_sqrt_ratio_at_tick(int(pool_cfg.get("initial_tick", 0))))
    if pool_cfg.get("protocol_fee"):
        manager.set_protocol_fee(key, int(pool_cfg["protocol_fee"]))
    return clock, custody, manager, hook, key


def run_simulation(config: Dict[str, Any]) -> SimulationResult:
    """시뮬레이션 실행

    Args:
        config: pool / positions / streams / swaps 섹션을 가진 설정

    Returns:
        SimulationResult (스텝별 타임라인, 포지션 요약, 스트림 요약)
    """
    clock, custody, manager, hook, key = _build(config)
    positions: List[Dict[str, Any]] = config.get("positions", [])
    streams: List[Dict[str, Any]] = config.get("streams", [])
    swap_cfg = config.get("swaps", {})

    for p in positions:
        manager.modify_liquidity(
            p["owner"], key,
            ModifyLiquidityParams(int(p["tick_lower"]), int(p["tick_upper"]), int(p["liquidity"]), int(p.get("salt", 0))),
        )

    for s in streams:
        amount = int(s["rate"]) * int(s["duration"])
        custody.mint(s["token"], s["creator"], amount)
        hook.create_stream(
            s["creator"], key, int(s["tick_lower"]), int(s["tick_upper"]),
            s["token"], int(s["rate"]), int(s["duration"]),
        )

    rng = np.random.default_rng(swap_cfg.get("seed", 42))
    steps = int(swap_cfg.get("steps", 100))
    mean_interval = float(swap_cfg.get("mean_interval", 60))
    amount_mean = float(swap_cfg.get("amount_mean", 1e16))
    amount_std = float(swap_cfg.get("amount_std", 5e15))
    max_tick_move = int(swap_cfg.get("max_tick_move", 600))

    rows = []
    for step in range(steps):
        clock.advance(int(rng.exponential(mean_interval)) + 1)

        amount = int(abs(rng.normal(amount_mean, amount_std)))
        zero_for_one = bool(rng.random() < 0.5)
        _, tick = manager.get_current_tick_and_price(key.id)
        if zero_for_one:
            limit_tick = max(tick - max_tick_move, MIN_TICK + 1)
        else:
            limit_tick = min(tick + max_tick_move, MAX_TICK - 1)

        if amount > 0 and limit_tick != tick:
            manager.swap(TRADER, key, SwapParams(zero_for_one, -amount, get_sqrt_ratio_at_tick(limit_tick)))

        _, tick = manager.get_current_tick_and_price(key.id)
        row = {
            "step": step,
            "timestamp": clock(),
            "tick": tick,
            "liquidity": manager.get_current_liquidity(key.id),
        }
        for p in positions:
            rewards = hook.get_position_rewards(
                p["owner"], key, int(p["tick_lower"]), int(p["tick_upper"]), int(p.get("salt", 0))
            )
            row[p["name"]] = rewards.points / 2**32
        rows.append(row)

    timeline = pd.DataFrame(rows)

    # 최종 청구: 각 포지션이 자신의 범위와 일치하는 모든 (token, rate) 스트림을 인출
    summary_rows = []
    total_points = 0.0
    for p in positions:
        lower, upper, salt = int(p["tick_lower"]), int(p["tick_upper"]), int(p.get("salt", 0))
        rewards = hook.get_position_rewards(p["owner"], key, lower, upper, salt)
        claimed = 0
        for s in streams:
            if (int(s["tick_lower"]), int(s["tick_upper"])) != (lower, upper):
                continue
            before = custody.balance_of(s["token"], p["owner"])
            payload = ClaimPayload(s["token"], int(s["rate"]), p["owner"]).encode()
            manager.modify_liquidity(p["owner"], key, ModifyLiquidityParams(lower, upper, 0, salt), payload)
            claimed += custody.balance_of(s["token"], p["owner"]) - before
        points = rewards.points / 2**32
        total_points += points
        summary_rows.append({
            "name": p["name"],
            "tick_lower": lower,
            "tick_upper": upper,
            "liquidity": int(p["liquidity"]),
            "seconds_inside": hook.get_seconds_inside(key, lower, upper),
            "points": points,
            "claimed": claimed,
        })

    summary = pd.DataFrame(summary_rows)
    if not summary.empty:
        summary["points_share"] = summary["points"] / total_points if total_points else 0.0

    stream_rows = []
    for s in streams:
        info = hook.get_stream(key, s["creator"], int(s["tick_lower"]), int(s["tick_upper"]), s["token"], int(s["rate"]))
        stream_rows.append({
            "creator": s["creator"],
            "tick_lower": int(s["tick_lower"]),
            "tick_upper": int(s["tick_upper"]),
            "rate": int(s["rate"]),
            "funded": info.funded_total,
            "withdrawn": info.withdrawn_total,
            "expiry": info.expiry,
        })

    logger.info("Simulated %d swaps over %d seconds", steps, clock() - int(config.get("start_time", 0)))
    return SimulationResult(timeline=timeline, summary=summary, streams=pd.DataFrame(stream_rows))
