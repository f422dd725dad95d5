"""
Bookkeeping enumerations.

Defines account natures, voucher types and statement balance sides.
"""

import enum


class LedgerNature(str, enum.Enum):
    """
    Accounting nature of a ledger.
    
    Asset and Expense ledgers grow with debits; Liability and Income
    ledgers grow with credits.
    """
    ASSET = "Asset"
    LIABILITY = "Liability"
    INCOME = "Income"
    EXPENSE = "Expense"

    @property
    def is_debit_nature(self) -> bool:
        return self in (LedgerNature.ASSET, LedgerNature.EXPENSE)


class VoucherType(str, enum.Enum):
    """Voucher (entry) type enumeration."""
    JOURNAL = "Journal"
    PAYMENT = "Payment"
    RECEIPT = "Receipt"
    CONTRA = "Contra"
    TRANSFER = "Transfer"


class BalanceSide(str, enum.Enum):
    """Side a running balance is shown on."""
    DR = "Dr"
    CR = "Cr"


class SyncTable(str, enum.Enum):
    """Tables a sync client may delete from."""
    LEDGERS = "ledgers"
    ENTRIES = "entries"
    ENTRY_LINES = "entry_lines"
