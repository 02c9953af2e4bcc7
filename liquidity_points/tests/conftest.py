"""
공용 픽스처

T0 = 1000초에 틱 0 (가격 1), 틱 간격 60, 수수료 0.3% 풀을 초기화합니다.
"""

from dataclasses import dataclass

import pytest

from ..constants import Q96
from ..core.hook import LiquidityPointsHook
from ..core.interfaces import ClaimPayload, ManualClock, ModifyLiquidityParams, PoolKey
from ..pool.custody import InMemoryCustody
from ..pool.manager import PoolManager, make_pool_key

T0 = 1000
TOKEN0 = "0x1000000000000000000000000000000000000000"
TOKEN1 = "0x2000000000000000000000000000000000000000"
REWARD = "0x3000000000000000000000000000000000000000"
HOOK = "0x00000000000000000000000000000000000000AA"
ALICE = "0x000000000000000000000000000000000000A11C"
BOB = "0x0000000000000000000000000000000000000B0B"
CAROL = "0x00000000000000000000000000000000000C0C0C"


@dataclass
class Env:
    clock: ManualClock
    custody: InMemoryCustody
    manager: PoolManager
    hook: LiquidityPointsHook
    key: PoolKey

    @property
    def pool(self):
        return self.hook.store.get(self.key.id)

    def add(self, owner, lower, upper, liquidity, salt=0, hook_data=b""):
        return self.manager.modify_liquidity(
            owner, self.key, ModifyLiquidityParams(lower, upper, liquidity, salt), hook_data
        )

    def remove(self, owner, lower, upper, liquidity, salt=0, hook_data=b""):
        return self.add(owner, lower, upper, -liquidity, salt, hook_data)

    def touch(self, owner, lower, upper, salt=0, hook_data=b""):
        return self.add(owner, lower, upper, 0, salt, hook_data)

    def claim(self, owner, lower, upper, token, rate, beneficiary=None, salt=0):
        """터치 + 청구 후 수령액 반환"""
        beneficiary = beneficiary or owner
        before = self.custody.balance_of(token, beneficiary)
        self.touch(owner, lower, upper, salt, ClaimPayload(token, rate, beneficiary).encode())
        return self.custody.balance_of(token, beneficiary) - before


@pytest.fixture
def env():
    clock = ManualClock(T0)
    custody = InMemoryCustody(HOOK)
    manager = PoolManager(custody)
    hook = LiquidityPointsHook(manager, custody, clock=clock)
    manager.register_hook(HOOK, hook)
    key = make_pool_key(TOKEN0, TOKEN1, 3000, 60, HOOK)
    manager.initialize(key, Q96)
    return Env(clock, custody, manager, hook, key)
