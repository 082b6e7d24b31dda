import uuid
from decimal import Decimal
from typing import List, Optional, Tuple

from .errors import AuthenticationError, CustomerNotFoundError, LedgerContentionError
from .ledger import Account, Movement, MovementType, add_movement, summarize, validate_movement
from .logging_config import get_logger
from .models import Customer
from .schemas import CustomerIn
from .security import CredentialService
from .store import CustomerStore

logger = get_logger(__name__)


class CustomerService:
    def __init__(self, store: CustomerStore, credentials: CredentialService, max_attempts: int = 5):
        self.store = store
        self.credentials = credentials
        self.max_attempts = max_attempts

    def create(self, body: CustomerIn) -> Customer:
        """Create a customer with an empty account.

        The password is hashed before it reaches the store. Any balance or
        movements the client sends are ignored.
        """
        customer = Customer(
            id=str(uuid.uuid4()),
            name=body.name,
            email=body.email,
            password=self.credentials.hash_password(body.password),
            account=Account(name=body.account.name, type=body.account.type),
        )
        created = self.store.create(customer)
        logger.info("Created customer %s", created.id)
        return created

    def find_customers(self) -> List[Customer]:
        return self.store.find_all()

    def find_by_id(self, customer_id: str) -> Customer:
        customer = self.store.find_by_id(customer_id)
        if not customer:
            raise CustomerNotFoundError()
        return customer

    def find_by_email(self, email: str) -> Optional[Customer]:
        return self.store.find_by_email(email)

    def add_movement(self, customer_id: str, type: MovementType, amount: Decimal) -> Movement:
        """Record a deposit or withdrawal and return the committed movement.

        The account is read, updated and written back with a compare-and-swap
        on its version. When another writer got there first the whole cycle is
        repeated on a fresh read, up to ``max_attempts`` times.

        Raises:
            InvalidMovementError: type and amount sign disagree
            CustomerNotFoundError: no such customer, nothing was written
            LedgerContentionError: every attempt lost the race
        """
        validate_movement(type, amount)
        for attempt in range(1, self.max_attempts + 1):
            customer = self.find_by_id(customer_id)
            account, movement = add_movement(customer.account, type, amount)
            if self.store.compare_and_swap_account(customer_id, customer.account.version, account):
                logger.info(
                    "Customer %s: %s %s, balance %s", customer_id, type.value, amount, movement.balance
                )
                return movement
            logger.warning(
                "Customer %s: account changed during update (attempt %d/%d)",
                customer_id, attempt, self.max_attempts,
            )
        raise LedgerContentionError()

    def find_movements(self, customer_id: str) -> List[Movement]:
        return self.find_by_id(customer_id).account.movements

    def reports(self, customer_id: str) -> List[Tuple[MovementType, Decimal]]:
        return summarize(self.find_by_id(customer_id).account.movements)


class AuthService:
    def __init__(self, customers: CustomerService, credentials: CredentialService, hide_unknown_email: bool = False):
        self.customers = customers
        self.credentials = credentials
        self.hide_unknown_email = hide_unknown_email

    def signup(self, body: CustomerIn) -> Customer:
        return self.customers.create(body)

    def login(self, email: str, password: str) -> str:
        customer = self.customers.find_by_email(email)
        if not customer:
            logger.warning("Login attempt for unknown email")
            if self.hide_unknown_email:
                raise AuthenticationError()
            raise CustomerNotFoundError("No user exists with the given email")
        if not self.credentials.verify_password(password, customer.password):
            logger.warning("Bad password for customer %s", customer.id)
            raise AuthenticationError()
        return self.credentials.create_token(customer.id, customer.name)
