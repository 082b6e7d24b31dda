"""Fault hierarchy for the customer service.

Each error carries the HTTP status it is translated to at the request boundary.
"""


class BankError(Exception):
    """Base exception for all customer service errors."""

    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)
        self.message = message


class InvalidInputError(BankError):
    """Raised when input is malformed or semantically inconsistent."""

    status_code = 400


class InvalidMovementError(InvalidInputError):
    """Raised when a movement type does not match the sign of its amount."""

    def __init__(self, message: str = "Invalid movement type and amount combination"):
        super().__init__(message)


class InvalidCustomerIdError(InvalidInputError):
    """Raised when a customer id is not in canonical form."""

    def __init__(self, message: str = "Invalid customer id"):
        super().__init__(message)


class CustomerNotFoundError(BankError):
    status_code = 404

    def __init__(self, message: str = "Customer not found"):
        super().__init__(message)


class AuthenticationError(BankError):
    """Raised for a missing or invalid token, or bad login credentials."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class DuplicateEmailError(BankError):
    status_code = 409

    def __init__(self, message: str = "User exists"):
        super().__init__(message)


class LedgerContentionError(BankError):
    """Raised when an account update keeps losing the compare-and-swap race."""

    status_code = 503

    def __init__(self, message: str = "Account is busy, try again"):
        super().__init__(message)


class BalanceLimitError(InvalidInputError):
    """Raised when a movement would push the balance past what can be stored."""

    def __init__(self, message: str = "Balance limit exceeded"):
        super().__init__(message)


class LedgerCorruptionError(BankError):
    """Raised when a stored account does not sum to its balance."""

    def __init__(self, message: str = "Account ledger is inconsistent"):
        super().__init__(message)
