"""
Sandbox Pool

Wires an in-memory pool manager, token custody, manual clock and the
liquidity points hook into a single pool the API operates on.
"""
import logging
import time
from typing import Optional

from liquidity_points.constants import MAX_TICK, MIN_TICK
from liquidity_points.core import (
    ClaimPayload,
    LiquidityPointsHook,
    ManualClock,
    ModifyLiquidityParams,
    PoolKey,
    SwapParams,
)
from liquidity_points.errors import InvalidInputError
from liquidity_points.math.sqrt_price_math import sqrt_price_x96_to_price
from liquidity_points.math.tick_math import get_sqrt_ratio_at_tick
from liquidity_points.pool import InMemoryCustody, PoolManager, make_pool_key

from app.config import settings

logger = logging.getLogger(__name__)


class Sandbox:
    """One initialized pool with the hook attached"""

    def __init__(
        self,
        token0: str,
        token1: str,
        hook_address: str,
        lp_fee: int,
        tick_spacing: int,
        initial_tick: int = 0,
        protocol_fee: int = 0,
        start_time: Optional[int] = None,
    ):
        self.clock = ManualClock(start_time if start_time else int(time.time()))
        self.custody = InMemoryCustody(hook_address)
        self.manager = PoolManager(self.custody)
        self.hook = LiquidityPointsHook(self.manager, self.custody, clock=self.clock)
        self.manager.register_hook(hook_address, self.hook)

        self.key: PoolKey = make_pool_key(token0, token1, lp_fee, tick_spacing, hook_address)
        try:
            sqrt_price_x96 = get_sqrt_ratio_at_tick(initial_tick)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        self.manager.initialize(self.key, sqrt_price_x96)
        if protocol_fee:
            self.manager.set_protocol_fee(self.key, protocol_fee)
        logger.info("Sandbox pool %s ready at tick %d", self.key.id.hex(), initial_tick)

    @property
    def pool_id(self) -> bytes:
        return self.key.id

    def state(self) -> dict:
        sqrt_price_x96, tick = self.manager.get_current_tick_and_price(self.pool_id)
        swap_fee, protocol_fee = self.manager.get_swap_fees(self.pool_id)
        return {
            "pool_id": "0x" + self.pool_id.hex(),
            "currency0": self.key.currency0,
            "currency1": self.key.currency1,
            "hooks": self.key.hooks,
            "tick_spacing": self.key.tick_spacing,
            "lp_fee": self.key.fee,
            "protocol_fee": protocol_fee,
            "swap_fee": swap_fee,
            "sqrt_price_x96": sqrt_price_x96,
            "price": sqrt_price_x96_to_price(sqrt_price_x96),
            "tick": tick,
            "liquidity": self.manager.get_current_liquidity(self.pool_id),
            "timestamp": self.clock(),
        }

    def advance(self, seconds: int) -> int:
        return self.clock.advance(seconds)

    def modify_liquidity(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
        salt: int = 0,
        claim: Optional[ClaimPayload] = None,
    ):
        hook_data = claim.encode() if claim is not None else b""
        params = ModifyLiquidityParams(tick_lower, tick_upper, liquidity_delta, salt)
        return self.manager.modify_liquidity(owner, self.key, params, hook_data)

    def swap(
        self,
        sender: str,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: Optional[int] = None,
        limit_tick: Optional[int] = None,
    ):
        if sqrt_price_limit_x96 is None:
            if limit_tick is None:
                limit_tick = MIN_TICK + 1 if zero_for_one else MAX_TICK - 1
            try:
                sqrt_price_limit_x96 = get_sqrt_ratio_at_tick(limit_tick)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
        params = SwapParams(zero_for_one, amount_specified, sqrt_price_limit_x96)
        return self.manager.swap(sender, self.key, params)


# Global sandbox instance (created lazily)
_sandbox: Optional[Sandbox] = None


def create_sandbox(**overrides) -> Sandbox:
    """Build a sandbox from settings; keyword overrides win over settings"""
    params = dict(
        token0=settings.SANDBOX_TOKEN0,
        token1=settings.SANDBOX_TOKEN1,
        hook_address=settings.SANDBOX_HOOK,
        lp_fee=settings.SANDBOX_LP_FEE,
        tick_spacing=settings.SANDBOX_TICK_SPACING,
        initial_tick=settings.SANDBOX_INITIAL_TICK,
        protocol_fee=settings.SANDBOX_PROTOCOL_FEE,
        start_time=settings.SANDBOX_START_TIME,
    )
    params.update({k: v for k, v in overrides.items() if v is not None})
    return Sandbox(**params)


def get_sandbox() -> Sandbox:
    global _sandbox
    if _sandbox is None:
        _sandbox = create_sandbox()
    return _sandbox


def reset_sandbox(**overrides) -> Sandbox:
    """Replace the sandbox with a freshly initialized pool

    The old sandbox is kept if the new pool fails to initialize.
    """
    global _sandbox
    _sandbox = create_sandbox(**overrides)
    return _sandbox
