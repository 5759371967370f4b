"""
Minimal Ledger

Accounts and the deposits, withdrawals and transfers recorded against them.
Balances use Decimal and every mutation of an account is serialized per
account id.
"""

__version__ = "1.0.0"
