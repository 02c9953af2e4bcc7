"""
Reward Stream Endpoints

Create, extend, terminate and kill linear reward streams on a tick range.
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from liquidity_points.core import StreamInfo

from app.api.schemas import (
    CreateStreamRequest,
    RefundResponse,
    StreamKeyRequest,
    StreamResponse,
)
from app.core.sandbox import Sandbox, get_sandbox

router = APIRouter()


def _to_response(stream: StreamInfo, now: int) -> StreamResponse:
    return StreamResponse(
        creator=stream.creator,
        tick_lower=stream.tick_lower,
        tick_upper=stream.tick_upper,
        token=stream.token,
        rate=stream.rate,
        start=stream.start,
        expiry=stream.expiry,
        funded_total=stream.funded_total,
        withdrawn_total=stream.withdrawn_total,
        active=stream.is_active(now)
    )


@router.post("/streams", response_model=StreamResponse)
async def create_stream(request: CreateStreamRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """
    Create or extend a stream

    rate * duration tokens move from the creator into hook custody.
    An active stream keeps its start and has its expiry pushed out.
    """
    stream = sandbox.hook.create_stream(
        request.creator,
        sandbox.key,
        request.tick_lower,
        request.tick_upper,
        request.token,
        request.rate,
        request.duration
    )
    return _to_response(stream, sandbox.clock())


@router.get("/streams", response_model=StreamResponse)
async def get_stream(
    creator: str = Query(..., description="Stream creator address"),
    tick_lower: int = Query(...),
    tick_upper: int = Query(...),
    token: str = Query(..., description="Reward token address"),
    rate: int = Query(..., gt=0),
    sandbox: Sandbox = Depends(get_sandbox)
):
    stream = sandbox.hook.get_stream(sandbox.key, creator, tick_lower, tick_upper, token, rate)
    if stream is None:
        raise HTTPException(status_code=404, detail="Stream not found")
    return _to_response(stream, sandbox.clock())


@router.post("/streams/terminate", response_model=RefundResponse)
async def terminate_stream(request: StreamKeyRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """Stop an active stream now and refund the unstreamed remainder"""
    refund = sandbox.hook.terminate_stream(
        request.creator, sandbox.key, request.tick_lower, request.tick_upper, request.token, request.rate
    )
    return RefundResponse(refund=refund)


@router.post("/streams/kill", response_model=RefundResponse)
async def kill_stream(request: StreamKeyRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """Delete a stream and refund everything not yet withdrawn"""
    refund = sandbox.hook.kill_stream(
        request.creator, sandbox.key, request.tick_lower, request.tick_upper, request.token, request.rate
    )
    return RefundResponse(refund=refund)
