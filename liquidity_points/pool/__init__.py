"""
Reference pool collaborators

- manager: 메모리 기반 풀 매니저 (PoolStateProvider)
- custody: 메모리 토큰 장부 (TokenCustody)
"""

from .custody import InMemoryCustody
from .manager import PoolManager, PoolState, make_pool_key
