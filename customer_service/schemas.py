"""Request and response bodies.

Response models never declare a password field, so no serialization path can
leak the stored hash.
"""
import re
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator

from .ledger import AccountType, MovementType


def _money_to_json(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


Money = Annotated[Decimal, PlainSerializer(_money_to_json, when_used="json")]

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"[0-9]"), "a digit"),
    (re.compile(r"[^A-Za-z0-9]"), "a symbol"),
)


class AccountIn(BaseModel):
    name: str = Field(min_length=1)
    type: AccountType


class CustomerIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    account: AccountIn

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(value)]
        if missing:
            raise ValueError("password must contain " + ", ".join(missing))
        return value


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MovementIn(BaseModel):
    type: MovementType
    amount: Decimal = Field(max_digits=18, decimal_places=2)


class MovementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    type: MovementType
    amount: Money
    balance: Money
    created_at: datetime = Field(serialization_alias="createdAt")


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    type: AccountType
    balance: Money
    movements: List[MovementOut]


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    account: AccountOut


class ReportOut(BaseModel):
    type: MovementType
    total: Money
