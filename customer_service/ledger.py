"""Account ledger: movement validation, balance bookkeeping and per-type totals.

Everything here is pure. Persistence and atomicity live in ``store`` and
``service``; this module only decides what the next account state is.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import BalanceLimitError, InvalidMovementError

# largest magnitude with 18 digits, two of them fractional
MAX_BALANCE = Decimal("9999999999999999.99")


class AccountType(str, Enum):
    PRIVATE = "Private"


class MovementType(str, Enum):
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"


@dataclass(frozen=True)
class Movement:
    type: MovementType
    amount: Decimal
    # account balance right after this movement was applied
    balance: Decimal
    created_at: datetime


@dataclass
class Account:
    name: str
    type: AccountType = AccountType.PRIVATE
    balance: Decimal = Decimal("0")
    movements: List[Movement] = field(default_factory=list)
    # number of committed movements; the compare-and-swap token
    version: int = 0

    @property
    def is_balanced(self) -> bool:
        return self.balance == sum((m.amount for m in self.movements), Decimal("0"))


def validate_movement(type: MovementType, amount: Decimal) -> None:
    """Check that a movement type matches the sign of its amount.

    A deposit must carry a positive amount and a withdrawal a negative one.
    Zero is rejected for both.

    Raises:
        InvalidMovementError: the combination is not allowed
    """
    valid_deposit = type == MovementType.DEPOSIT and amount > 0
    valid_withdrawal = type == MovementType.WITHDRAWAL and amount < 0
    if not valid_deposit and not valid_withdrawal:
        raise InvalidMovementError()


def add_movement(
    account: Account,
    type: MovementType,
    amount: Decimal,
    now: Optional[datetime] = None,
) -> Tuple[Account, Movement]:
    """Apply a validated movement to an account.

    Returns the updated account and the committed movement. The input account
    is left untouched so a caller can re-read and reapply after losing a
    compare-and-swap. The returned account keeps the version it was read at.
    """
    new_balance = account.balance + amount
    if abs(new_balance) > MAX_BALANCE:
        raise BalanceLimitError()
    movement = Movement(
        type=type,
        amount=amount,
        balance=new_balance,
        created_at=now or datetime.now(timezone.utc),
    )
    updated = replace(account, balance=new_balance, movements=[*account.movements, movement])
    return updated, movement


def summarize(movements: Iterable[Movement]) -> List[Tuple[MovementType, Decimal]]:
    """Sum movement amounts per movement type.

    Types without movements are omitted. Entries come out in order of first
    appearance, though callers should not rely on it.
    """
    totals: Dict[MovementType, Decimal] = {}
    for movement in movements:
        totals[movement.type] = totals.get(movement.type, Decimal("0")) + movement.amount
    return list(totals.items())
