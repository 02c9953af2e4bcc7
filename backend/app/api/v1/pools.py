"""
Pool Endpoints

Drives the sandbox pool: liquidity changes, swaps, token minting and
the manual clock. Every call runs the liquidity points hook.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from liquidity_points.core import ClaimPayload

from app.api.schemas import (
    AdvanceTimeRequest,
    AdvanceTimeResponse,
    BalanceResponse,
    MintRequest,
    ModifyLiquidityRequest,
    ModifyLiquidityResponse,
    PoolStateResponse,
    ResetPoolRequest,
    SwapRequest,
    SwapResponse,
)
from app.config import settings
from app.core.sandbox import Sandbox, get_sandbox, reset_sandbox

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/pool", response_model=PoolStateResponse)
async def get_pool(sandbox: Sandbox = Depends(get_sandbox)):
    """Current price, tick, liquidity and fees of the sandbox pool"""
    return PoolStateResponse(**sandbox.state())


@router.post("/pool/reset", response_model=PoolStateResponse)
async def reset_pool(request: ResetPoolRequest):
    """
    Initialize a fresh sandbox pool

    Discards every position, stream and balance of the previous pool.
    """
    sandbox = reset_sandbox(**request.model_dump())
    logger.info("Sandbox reset: %s", request.model_dump(exclude_none=True))
    return PoolStateResponse(**sandbox.state())


@router.post("/pool/time/advance", response_model=AdvanceTimeResponse)
async def advance_time(request: AdvanceTimeRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """Move the sandbox clock forward"""
    if request.seconds > settings.MAX_ADVANCE_SECONDS:
        raise HTTPException(
            status_code=422,
            detail=f"Cannot advance more than {settings.MAX_ADVANCE_SECONDS} seconds at once"
        )
    return AdvanceTimeResponse(timestamp=sandbox.advance(request.seconds))


@router.post("/pool/liquidity", response_model=ModifyLiquidityResponse)
async def modify_liquidity(request: ModifyLiquidityRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """
    Add, remove or touch a position

    With a claim attached, streamed rewards for (token, rate) are paid to
    the beneficiary in the same call.
    """
    claim = None
    before = 0
    if request.claim is not None:
        beneficiary = request.claim.beneficiary or request.owner
        claim = ClaimPayload(request.claim.token, request.claim.rate, beneficiary)
        before = sandbox.custody.balance_of(claim.token, claim.beneficiary)

    amount0, amount1 = sandbox.modify_liquidity(
        request.owner,
        request.tick_lower,
        request.tick_upper,
        request.liquidity_delta,
        request.salt,
        claim,
    )

    claimed = 0
    if claim is not None:
        claimed = sandbox.custody.balance_of(claim.token, claim.beneficiary) - before
    logger.info(
        "modify_liquidity owner=%s [%d, %d] delta=%d claimed=%d",
        request.owner, request.tick_lower, request.tick_upper, request.liquidity_delta, claimed
    )
    return ModifyLiquidityResponse(amount0=amount0, amount1=amount1, claimed=claimed)


@router.post("/pool/swap", response_model=SwapResponse)
async def swap(request: SwapRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """Swap against the sandbox pool"""
    amount0, amount1 = sandbox.swap(
        request.sender,
        request.zero_for_one,
        request.amount_specified,
        request.sqrt_price_limit_x96,
        request.limit_tick,
    )
    state = sandbox.state()
    return SwapResponse(
        amount0=amount0,
        amount1=amount1,
        tick=state["tick"],
        sqrt_price_x96=state["sqrt_price_x96"],
        liquidity=state["liquidity"]
    )


@router.post("/tokens/mint", response_model=BalanceResponse)
async def mint(request: MintRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """Credit sandbox tokens to an account"""
    sandbox.custody.mint(request.token, request.account, request.amount)
    return BalanceResponse(
        token=request.token,
        account=request.account,
        balance=sandbox.custody.balance_of(request.token, request.account)
    )


@router.get("/tokens/{token}/balances/{account}", response_model=BalanceResponse)
async def balance_of(token: str, account: str, sandbox: Sandbox = Depends(get_sandbox)):
    return BalanceResponse(
        token=token,
        account=account,
        balance=sandbox.custody.balance_of(token, account)
    )
