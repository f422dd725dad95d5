"""
Sync Pydantic schemas.

Row payloads keep the snake_case column names the mobile client stores
locally; only the push envelope keys are camelCase.
"""

import datetime as dt
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional, List
from ledback.app.core.timeutils import as_utc
from ledback.app.models.enums import LedgerNature, VoucherType


class LedgerUpsert(BaseModel):
    """Client ledger row. ``user_email`` is accepted but always replaced by the pusher."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    group_name: Optional[str] = None
    nature: Optional[LedgerNature] = None
    is_party: Optional[bool] = None
    is_group: Optional[bool] = None
    category_ledger_id: Optional[str] = None
    user_email: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class EntryUpsert(BaseModel):
    """Client entry row."""
    id: str = Field(..., min_length=1)
    entry_date: dt.date
    voucher_type: VoucherType
    narration: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    user_email: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def tags_default_to_empty(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []


class EntryLineUpsert(BaseModel):
    """Client entry line row."""
    id: str = Field(..., min_length=1)
    entry_id: str = Field(..., min_length=1)
    debit_ledger_id: str = Field(..., min_length=1)
    credit_ledger_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    narration: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class SyncDelete(BaseModel):
    """Soft delete request for one row."""
    table: str = Field(..., min_length=1)
    id: str = Field(..., min_length=1)
    deleted_at: Optional[dt.datetime] = None


class SyncPushRequest(BaseModel):
    """One atomic push batch."""
    ledgers_upsert: List[LedgerUpsert] = Field(default_factory=list, alias="ledgersUpsert")
    entries_upsert: List[EntryUpsert] = Field(default_factory=list, alias="entriesUpsert")
    entry_lines_upsert: List[EntryLineUpsert] = Field(default_factory=list, alias="entryLinesUpsert")
    deletes: List[SyncDelete] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @field_validator("ledgers_upsert", "entries_upsert", "entry_lines_upsert", "deletes", mode="before")
    @classmethod
    def missing_section_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class SyncPushResponse(BaseModel):
    """Result of an applied push batch."""
    ok: bool
    server_time: dt.datetime = Field(..., serialization_alias="serverTime")


class SyncRecord(BaseModel):
    """Replicated row; timestamps always leave with a UTC offset."""

    @field_validator("created_at", "updated_at", "deleted_at", mode="after", check_fields=False)
    @classmethod
    def timestamps_in_utc(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return as_utc(value)


class LedgerRecord(SyncRecord):
    """Ledger row as replicated to clients."""
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
    deleted_at: Optional[dt.datetime]

    class Config:
        from_attributes = True


class EntryRecord(SyncRecord):
    """Entry row as replicated to clients."""
    id: str
    entry_date: dt.date
    voucher_type: VoucherType
    narration: Optional[str]
    user_email: Optional[str]
    tags: List[str]
    created_at: dt.datetime
    updated_at: dt.datetime
    deleted_at: Optional[dt.datetime]

    class Config:
        from_attributes = True


class EntryLineRecord(SyncRecord):
    """Entry line row as replicated to clients."""
    id: str
    entry_id: str
    debit_ledger_id: str
    credit_ledger_id: str
    amount: Decimal
    narration: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime
    deleted_at: Optional[dt.datetime]

    class Config:
        from_attributes = True


class Tombstone(SyncRecord):
    """Deletion marker for a row the client may still hold."""
    id: str
    deleted_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class DeletedRecords(BaseModel):
    ledgers: List[Tombstone] = Field(default_factory=list)
    entries: List[Tombstone] = Field(default_factory=list)
    entry_lines: List[Tombstone] = Field(default_factory=list)


class SyncPullResponse(BaseModel):
    """Delta since the client's watermark."""
    cursor: dt.datetime
    ledgers: List[LedgerRecord]
    entries: List[EntryRecord]
    entry_lines: List[EntryLineRecord]
    deleted: DeletedRecords
