#!/usr/bin/env python3
"""
Simulate Points - 무작위 스왑으로 유동성 포인트/스트림 분배 시뮬레이션

Usage:
    python simulate_points.py --config config/simulation.yaml

    # 스텝 수 / 시드 덮어쓰기, 타임라인 CSV 저장
    python simulate_points.py --config config/simulation.yaml --steps 1000 --seed 7 --output timeline.csv
"""

import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import pandas as pd

from liquidity_points.errors import LiquidityPointsError
from liquidity_points.simulation import load_config, run_simulation


def print_results(result, config_path: str):
    """결과 출력"""
    print("\n" + "=" * 80)
    print(f"📊 Liquidity Points Simulation: {config_path}")
    print("=" * 80)

    timeline = result.timeline
    if not timeline.empty:
        print(f"\n⏱️  {len(timeline)} steps, {timeline['timestamp'].iloc[-1] - timeline['timestamp'].iloc[0]}s elapsed")
        print(f"📈 tick range: {timeline['tick'].min()} ~ {timeline['tick'].max()} (final {timeline['tick'].iloc[-1]})")

    with pd.option_context("display.float_format", "{:,.2f}".format, "display.width", 120):
        print("\n💧 Positions")
        print(result.summary.to_string(index=False))
        print("\n🎁 Streams")
        print(result.streams.to_string(index=False))

    if not result.streams.empty:
        funded = result.streams["funded"].sum()
        withdrawn = result.streams["withdrawn"].sum()
        print(f"\n✅ withdrawn {withdrawn:,} / funded {funded:,}")


def main():
    parser = argparse.ArgumentParser(
        description="무작위 스왑으로 유동성 포인트와 보상 스트림 분배 시뮬레이션",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=str, default="config/simulation.yaml", help="YAML 설정 파일")
    parser.add_argument("--steps", type=int, help="스왑 횟수 (설정 덮어쓰기)")
    parser.add_argument("--seed", type=int, help="난수 시드 (설정 덮어쓰기)")
    parser.add_argument("--output", type=str, help="타임라인 CSV 저장 경로")
    parser.add_argument("--verbose", action="store_true", help="디버그 로그")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if not os.path.exists(args.config):
        print(f"❌ 설정 파일 없음: {args.config}")
        return

    config = load_config(args.config)
    swaps = config.setdefault("swaps", {})
    if args.steps is not None:
        swaps["steps"] = args.steps
    if args.seed is not None:
        swaps["seed"] = args.seed

    try:
        result = run_simulation(config)
    except LiquidityPointsError as e:
        print(f"❌ 시뮬레이션 실패 [{e.code}]: {e.message}")
        sys.exit(1)

    print_results(result, args.config)

    if args.output:
        result.timeline.to_csv(args.output, index=False)
        print(f"\n💾 타임라인 저장: {args.output}")


if __name__ == "__main__":
    main()
