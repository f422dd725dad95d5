"""
Entry Pydantic schemas.

Defines request and response models for vouchers and their lines.
"""

import datetime as dt
from decimal import Decimal
from pydantic import Field
from typing import Optional, List
from ledback.app.models.enums import VoucherType
from ledback.app.schemas.ledger import CamelModel


class EntryLineCreate(CamelModel):
    """Schema for one debit/credit movement of a new entry."""
    debit_ledger_id: str = Field(..., min_length=1)
    credit_ledger_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    narration: Optional[str] = None


class EntryCreate(CamelModel):
    """Schema for creating an entry together with its lines."""
    entry_date: dt.date = Field(..., alias="date")
    voucher_type: VoucherType
    narration: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    lines: List[EntryLineCreate]


class EntryLineResponse(CamelModel):
    """Schema for entry line response."""
    id: str
    entry_id: str
    debit_ledger_id: str
    credit_ledger_id: str
    amount: Decimal
    narration: Optional[str]
    created_at: dt.datetime


class EntryResponse(CamelModel):
    """Schema for entry header response."""
    id: str
    entry_date: dt.date
    voucher_type: VoucherType
    narration: Optional[str]
    tags: List[str]
    created_at: dt.datetime
    updated_at: dt.datetime


class EntryWithLinesResponse(CamelModel):
    """Entry header plus its live lines."""
    entry: EntryResponse
    lines: List[EntryLineResponse]


class TransactionResponse(CamelModel):
    """Entry line flattened with its entry's date, type and narration."""
    id: str
    entry_id: str
    date: dt.date
    voucher_type: VoucherType
    debit_ledger_id: str
    credit_ledger_id: str
    amount: Decimal
    narration: Optional[str]
    created_at: dt.datetime
