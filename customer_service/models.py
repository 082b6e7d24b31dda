from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel, Column, String, UniqueConstraint

from .ledger import Account


@dataclass
class Customer:
    id: str
    name: str
    email: str
    # bcrypt hash; never leaves the service
    password: str
    account: Account


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# money is stored as integer cents so every backend round-trips it exactly
def to_cents(value: Decimal) -> int:
    return int(value.scaleb(2))


def from_cents(cents: int) -> Decimal:
    return Decimal(cents).scaleb(-2)


class CustomerRecord(SQLModel, table=True):
    __tablename__ = "customers"

    id: str = Field(primary_key=True)
    name: str
    email: str = Field(sa_column=Column(String, unique=True, nullable=False))
    password: str
    account_name: str
    account_type: str
    balance_cents: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))
    version: int = 0
    created_at: datetime = Field(default_factory=utcnow, index=True)


class MovementRecord(SQLModel, table=True):
    __tablename__ = "movements"
    __table_args__ = (UniqueConstraint("customer_id", "position"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: str = Field(foreign_key="customers.id", index=True)
    position: int
    type: str
    amount_cents: int = Field(sa_column=Column(BigInteger, nullable=False))
    balance_cents: int = Field(sa_column=Column(BigInteger, nullable=False))
    created_at: datetime
