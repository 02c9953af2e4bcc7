"""
Points Query Endpoints

Read-only views of time-in-range accumulators. Nothing here changes state.
"""
from fastapi import APIRouter, Depends, Query

from app.api.schemas import (
    PositionRewardsResponse,
    SecondsInsideResponse,
    SecondsPerLiquidityInsideResponse,
)
from app.core.sandbox import Sandbox, get_sandbox

router = APIRouter()


@router.get("/points/seconds-inside", response_model=SecondsInsideResponse)
async def seconds_inside(
    tick_lower: int = Query(...),
    tick_upper: int = Query(...),
    sandbox: Sandbox = Depends(get_sandbox)
):
    value = sandbox.hook.get_seconds_inside(sandbox.key, tick_lower, tick_upper)
    return SecondsInsideResponse(tick_lower=tick_lower, tick_upper=tick_upper, seconds_inside=value)


@router.get("/points/seconds-per-liquidity-inside", response_model=SecondsPerLiquidityInsideResponse)
async def seconds_per_liquidity_inside(
    tick_lower: int = Query(...),
    tick_upper: int = Query(...),
    sandbox: Sandbox = Depends(get_sandbox)
):
    value = sandbox.hook.get_seconds_per_liquidity_inside(sandbox.key, tick_lower, tick_upper)
    return SecondsPerLiquidityInsideResponse(
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        seconds_per_liquidity_inside_x128=value
    )


@router.get("/points/position", response_model=PositionRewardsResponse)
async def position_rewards(
    owner: str = Query(..., description="Position owner address"),
    tick_lower: int = Query(...),
    tick_upper: int = Query(...),
    salt: int = Query(0, ge=0),
    token: str = Query(None, description="Reward token to price unclaimed rewards in"),
    rate: int = Query(0, ge=0),
    sandbox: Sandbox = Depends(get_sandbox)
):
    """
    Points accrued up to now and rewards withdrawable for (token, rate)

    The position is brought up to date in a preview, so repeated calls
    return the same values until the clock or the pool moves.
    """
    rewards = sandbox.hook.get_position_rewards(
        owner, sandbox.key, tick_lower, tick_upper, salt=salt, token=token, rate=rate
    )
    return PositionRewardsResponse(
        owner=owner,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        salt=salt,
        points_x32=rewards.points,
        points_seconds=rewards.points / 2**32,
        unclaimed=rewards.unclaimed
    )
