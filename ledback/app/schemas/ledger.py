"""
Ledger Pydantic schemas.

Ledger and statement payloads use camelCase on the wire.
"""

import datetime as dt
from pydantic import BaseModel, Field, AliasChoices
from pydantic.alias_generators import to_camel
from typing import Optional
from ledback.app.models.enums import LedgerNature, VoucherType, BalanceSide


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase keys."""
    
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class LedgerCreate(CamelModel):
    """Schema for creating a new ledger."""
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    group_name: str = Field(..., min_length=1, max_length=100, description="Classification label")
    nature: LedgerNature
    is_party: bool = False
    is_group: bool = False
    category_ledger_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("categoryLedgerId", "parentLedgerId", "category_ledger_id"),
        description="Parent (category) ledger",
    )


class LedgerUpdate(CamelModel):
    """Schema for updating a ledger master. ``nature`` may only repeat the current value."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    group_name: Optional[str] = Field(None, min_length=1, max_length=100)
    nature: Optional[LedgerNature] = None
    is_party: Optional[bool] = None
    is_group: Optional[bool] = None
    category_ledger_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("categoryLedgerId", "parentLedgerId", "category_ledger_id"),
    )


class LedgerResponse(CamelModel):
    """Schema for ledger response."""
    id: str
    name: str
    group_name: str
    nature: LedgerNature
    is_party: bool
    is_group: bool
    category_ledger_id: Optional[str]
    user_email: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime


class StatementLineResponse(CamelModel):
    """One running-balance row of a ledger statement."""
    entry_id: str
    date: dt.date
    voucher_type: VoucherType
    narration: Optional[str]
    other_ledger_id: str
    other_ledger_name: str
    debit: str
    credit: str
    running_balance: str
    balance_side: BalanceSide
