"""Customer persistence.

``CustomerStore`` is the contract the services depend on. The only write to an
existing customer is ``compare_and_swap_account``, which must commit the new
balance and the appended movements together, and only if the account is still
at the version the caller read.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .errors import DuplicateEmailError, LedgerCorruptionError
from .ledger import Account, AccountType, Movement, MovementType
from .logging_config import get_logger
from .models import Customer, CustomerRecord, MovementRecord, from_cents, to_cents

logger = get_logger(__name__)


class CustomerStore(ABC):

    @abstractmethod
    def create(self, customer: Customer) -> Customer:
        """Persist a new customer; raises DuplicateEmailError if the email is taken."""

    @abstractmethod
    def find_by_id(self, customer_id: str) -> Optional[Customer]:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Customer]:
        ...

    @abstractmethod
    def find_all(self) -> List[Customer]:
        ...

    @abstractmethod
    def compare_and_swap_account(self, customer_id: str, expected_version: int, account: Account) -> bool:
        """Replace the stored account if it is still at ``expected_version``.

        ``account.movements`` must extend the stored sequence. Returns False
        on a version conflict and leaves the stored account untouched.
        """

    @abstractmethod
    def aggregate_by_type(self, customer_id: str) -> List[Tuple[MovementType, Decimal]]:
        ...


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back naive
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLCustomerStore(CustomerStore):
    """CustomerStore over any SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def create(self, customer: Customer) -> Customer:
        record = CustomerRecord(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            password=customer.password,
            account_name=customer.account.name,
            account_type=customer.account.type.value,
            balance_cents=0,
            version=0,
        )
        with Session(self.engine) as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise DuplicateEmailError()
            session.refresh(record)
            return self._load(session, record)

    def find_by_id(self, customer_id: str) -> Optional[Customer]:
        with Session(self.engine) as session:
            record = session.get(CustomerRecord, customer_id)
            if not record:
                return None
            return self._load(session, record)

    def find_by_email(self, email: str) -> Optional[Customer]:
        with Session(self.engine) as session:
            record = session.exec(select(CustomerRecord).where(CustomerRecord.email == email)).first()
            if not record:
                return None
            return self._load(session, record)

    def find_all(self) -> List[Customer]:
        with Session(self.engine) as session:
            records = session.exec(
                select(CustomerRecord).order_by(CustomerRecord.created_at, CustomerRecord.id)
            ).all()
            return [self._load(session, r) for r in records]

    def compare_and_swap_account(self, customer_id: str, expected_version: int, account: Account) -> bool:
        new_movements = account.movements[expected_version:]
        with Session(self.engine) as session:
            result = session.connection().execute(
                update(CustomerRecord)
                .where(CustomerRecord.id == customer_id, CustomerRecord.version == expected_version)
                .values(balance_cents=to_cents(account.balance), version=expected_version + len(new_movements))
            )
            if result.rowcount != 1:
                session.rollback()
                return False
            for offset, movement in enumerate(new_movements):
                session.add(MovementRecord(
                    customer_id=customer_id,
                    position=expected_version + offset,
                    type=movement.type.value,
                    amount_cents=to_cents(movement.amount),
                    balance_cents=to_cents(movement.balance),
                    created_at=movement.created_at,
                ))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
        return True

    def aggregate_by_type(self, customer_id: str) -> List[Tuple[MovementType, Decimal]]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(MovementRecord.type, func.sum(MovementRecord.amount_cents))
                .join(CustomerRecord, CustomerRecord.id == MovementRecord.customer_id)
                .where(MovementRecord.customer_id == customer_id, MovementRecord.position < CustomerRecord.version)
                .group_by(MovementRecord.type)
            ).all()
            return [(MovementType(type_), from_cents(total)) for type_, total in rows]

    def _load(self, session: Session, record: CustomerRecord) -> Customer:
        # movements past the version we read belong to a later commit
        rows = session.exec(
            select(MovementRecord)
            .where(MovementRecord.customer_id == record.id, MovementRecord.position < record.version)
            .order_by(MovementRecord.position)
        ).all()
        account = Account(
            name=record.account_name,
            type=AccountType(record.account_type),
            balance=from_cents(record.balance_cents),
            movements=[
                Movement(
                    type=MovementType(row.type),
                    amount=from_cents(row.amount_cents),
                    balance=from_cents(row.balance_cents),
                    created_at=_as_utc(row.created_at),
                )
                for row in rows
            ],
            version=record.version,
        )
        if not account.is_balanced:
            logger.error("Account of customer %s does not sum to its balance", record.id)
            raise LedgerCorruptionError()
        return Customer(
            id=record.id,
            name=record.name,
            email=record.email,
            password=record.password,
            account=account,
        )
