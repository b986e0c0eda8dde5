"""
Account Service

In-memory bookkeeping core for customer accounts: balances, an append-only
transaction history and money movement that never breaks balance or
currency invariants.
"""

__version__ = "1.0.0"
