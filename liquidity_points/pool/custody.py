"""
InMemoryCustody - 메모리 토큰 잔액 장부

(token, account) -> 잔액. holder 계정이 스트림 자금을 보관합니다.
"""

import logging
from typing import Dict, Tuple

from ..errors import InsufficientBalanceError, InvalidInputError
from ..core.keys import normalize_address

logger = logging.getLogger(__name__)


class InMemoryCustody:
    """TokenCustody 구현"""

    def __init__(self, holder: str):
        self.holder = normalize_address(holder)
        self.balances: Dict[Tuple[str, str], int] = {}

    def balance_of(self, token: str, account: str) -> int:
        return self.balances.get((normalize_address(token), normalize_address(account)), 0)

    def mint(self, token: str, account: str, amount: int) -> None:
        if amount < 0:
            raise InvalidInputError(f"Mint amount must be non-negative: {amount}")
        self._credit(normalize_address(token), normalize_address(account), amount)

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise InvalidInputError(f"Transfer amount must be non-negative: {amount}")
        token = normalize_address(token)
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        self._debit(token, sender, amount)
        self._credit(token, recipient, amount)
        logger.debug("Transferred %d %s from %s to %s", amount, token, sender, recipient)

    def transfer_in(self, token: str, sender: str, amount: int) -> None:
        self.transfer(token, sender, self.holder, amount)

    def transfer_out(self, token: str, recipient: str, amount: int) -> None:
        self.transfer(token, self.holder, recipient, amount)

    def _credit(self, token: str, account: str, amount: int) -> None:
        self.balances[(token, account)] = self.balances.get((token, account), 0) + amount

    def _debit(self, token: str, account: str, amount: int) -> None:
        available = self.balances.get((token, account), 0)
        if available < amount:
            raise InsufficientBalanceError(token, account, amount, available)
        self.balances[(token, account)] = available - amount
