"""Customer ledger service: customers, one embedded account, deposits and withdrawals."""

__version__ = "0.1.0"
