"""
API Request/Response Schemas using Pydantic

Defines data models for the liquidity points sandbox endpoints.
Token amounts and fixed-point values are plain integers; they can exceed
2**53, so JavaScript clients should parse them as big integers.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class HealthCheckResponse(BaseModel):
    """Response payload for GET /api/v1/health endpoint"""
    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    pool_id: Optional[str] = Field(None, description="Sandbox pool id")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "timestamp": "2024-01-15T10:30:00Z",
                "pool_id": "0x5f2c..."
            }
        }


# ----------------------------------------------------------------------
# Pool
# ----------------------------------------------------------------------

class PoolStateResponse(BaseModel):
    """Current sandbox pool state"""
    pool_id: str = Field(..., description="keccak256 pool id")
    currency0: str = Field(..., description="Lower sorted currency")
    currency1: str = Field(..., description="Higher sorted currency")
    hooks: str = Field(..., description="Hook address")
    tick_spacing: int = Field(..., description="Tick spacing")
    lp_fee: int = Field(..., description="LP fee in pips")
    protocol_fee: int = Field(..., description="Protocol fee in pips")
    swap_fee: int = Field(..., description="Effective swap fee in pips")
    sqrt_price_x96: int = Field(..., description="Current sqrt price (Q64.96)")
    price: float = Field(..., description="token1 per token0, raw units")
    tick: int = Field(..., description="Current tick")
    liquidity: int = Field(..., description="Active liquidity")
    timestamp: int = Field(..., description="Sandbox clock (unix seconds)")


class AdvanceTimeRequest(BaseModel):
    """Request payload for POST /api/v1/pool/time/advance"""
    seconds: int = Field(..., description="Seconds to move the sandbox clock forward", ge=0)

    class Config:
        json_schema_extra = {"example": {"seconds": 3600}}


class AdvanceTimeResponse(BaseModel):
    timestamp: int = Field(..., description="Sandbox clock after advancing")


class ClaimRequest(BaseModel):
    """Reward claim attached to a liquidity modification"""
    token: str = Field(..., description="Reward token address")
    rate: int = Field(..., description="Stream rate (tokens per second)", gt=0)
    beneficiary: Optional[str] = Field(None, description="Recipient, defaults to the position owner")


class ModifyLiquidityRequest(BaseModel):
    """Request payload for POST /api/v1/pool/liquidity"""
    owner: str = Field(..., description="Position owner address")
    tick_lower: int = Field(..., description="Lower tick of the range")
    tick_upper: int = Field(..., description="Upper tick of the range")
    liquidity_delta: int = Field(..., description="Positive adds, negative removes, zero touches")
    salt: int = Field(default=0, description="Position salt", ge=0)
    claim: Optional[ClaimRequest] = Field(None, description="Withdraw streamed rewards in the same call")

    class Config:
        json_schema_extra = {
            "example": {
                "owner": "0x000000000000000000000000000000000000A11C",
                "tick_lower": -1200,
                "tick_upper": 1200,
                "liquidity_delta": 1000000000000000000,
                "salt": 0,
                "claim": None
            }
        }


class ModifyLiquidityResponse(BaseModel):
    status: str = Field(default="success", description="Response status")
    amount0: int = Field(..., description="Caller-side token0 delta (negative = paid to the pool)")
    amount1: int = Field(..., description="Caller-side token1 delta (negative = paid to the pool)")
    claimed: int = Field(default=0, description="Reward tokens paid to the beneficiary")


class SwapRequest(BaseModel):
    """Request payload for POST /api/v1/pool/swap"""
    sender: str = Field(..., description="Swapper address")
    zero_for_one: bool = Field(..., description="Swap token0 for token1")
    amount_specified: int = Field(..., description="Negative for exact input, positive for exact output")
    sqrt_price_limit_x96: Optional[int] = Field(None, description="Price limit (Q64.96)")
    limit_tick: Optional[int] = Field(None, description="Price limit as a tick, used when sqrt_price_limit_x96 is absent")

    class Config:
        json_schema_extra = {
            "example": {
                "sender": "0x00000000000000000000000000000000000C0C0C",
                "zero_for_one": False,
                "amount_specified": -1000000000000000000,
                "limit_tick": 1800
            }
        }


class SwapResponse(BaseModel):
    status: str = Field(default="success", description="Response status")
    amount0: int = Field(..., description="Caller-side token0 delta (negative = paid to the pool)")
    amount1: int = Field(..., description="Caller-side token1 delta (negative = paid to the pool)")
    tick: int = Field(..., description="Tick after the swap")
    sqrt_price_x96: int = Field(..., description="Price after the swap")
    liquidity: int = Field(..., description="Active liquidity after the swap")


class MintRequest(BaseModel):
    """Request payload for POST /api/v1/tokens/mint"""
    token: str = Field(..., description="Token address")
    account: str = Field(..., description="Recipient address")
    amount: int = Field(..., description="Amount to mint", gt=0)


class BalanceResponse(BaseModel):
    token: str
    account: str
    balance: int


# ----------------------------------------------------------------------
# Streams
# ----------------------------------------------------------------------

class StreamKeyRequest(BaseModel):
    """Identifies a stream by creator, range, token and rate"""
    creator: str = Field(..., description="Stream creator address")
    tick_lower: int = Field(..., description="Lower tick of the rewarded range")
    tick_upper: int = Field(..., description="Upper tick of the rewarded range")
    token: str = Field(..., description="Reward token address")
    rate: int = Field(..., description="Tokens per second", gt=0)


class CreateStreamRequest(StreamKeyRequest):
    """Request payload for POST /api/v1/streams"""
    duration: int = Field(..., description="Seconds to fund", gt=0)

    class Config:
        json_schema_extra = {
            "example": {
                "creator": "0x00000000000000000000000000000000000C0C0C",
                "tick_lower": -1200,
                "tick_upper": 1200,
                "token": "0x3000000000000000000000000000000000000000",
                "rate": 10,
                "duration": 86400
            }
        }


class StreamResponse(BaseModel):
    creator: str
    tick_lower: int
    tick_upper: int
    token: str
    rate: int
    start: int = Field(..., description="Distribution start (unix seconds)")
    expiry: int = Field(..., description="Distribution end (unix seconds)")
    funded_total: int = Field(..., description="Amount deposited across every window")
    withdrawn_total: int = Field(..., description="Amount already paid out to positions")
    active: bool = Field(..., description="expiry is in the future")


class RefundResponse(BaseModel):
    status: str = Field(default="success", description="Response status")
    refund: int = Field(..., description="Amount returned to the creator")


# ----------------------------------------------------------------------
# Points
# ----------------------------------------------------------------------

class SecondsInsideResponse(BaseModel):
    tick_lower: int
    tick_upper: int
    seconds_inside: int = Field(..., description="Seconds the price spent inside the range")


class SecondsPerLiquidityInsideResponse(BaseModel):
    tick_lower: int
    tick_upper: int
    seconds_per_liquidity_inside_x128: int = Field(..., description="Seconds per unit liquidity inside (Q128)")


class PositionRewardsResponse(BaseModel):
    owner: str
    tick_lower: int
    tick_upper: int
    salt: int
    points_x32: int = Field(..., description="Liquidity-weighted seconds inside (X32 fixed point)")
    points_seconds: float = Field(..., description="points_x32 / 2**32")
    unclaimed: int = Field(..., description="Rewards withdrawable now for the requested token and rate")


class ResetPoolRequest(BaseModel):
    """Request payload for POST /api/v1/pool/reset; omitted fields fall back to settings"""
    initial_tick: Optional[int] = Field(None, description="Tick to initialize the price at")
    lp_fee: Optional[int] = Field(None, description="LP fee in pips", ge=0)
    tick_spacing: Optional[int] = Field(None, description="Tick spacing", gt=0)
    protocol_fee: Optional[int] = Field(None, description="Protocol fee in pips", ge=0, le=1000)
    start_time: Optional[int] = Field(None, description="Sandbox clock start (unix seconds)", gt=0)

    class Config:
        json_schema_extra = {
            "example": {
                "initial_tick": 0,
                "lp_fee": 500,
                "tick_spacing": 10
            }
        }
