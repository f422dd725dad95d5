"""
Entry store service.

Entries (vouchers) are created together with their lines and are only ever
visible to their owner. Functions flush but never commit.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledback.app.core.exceptions import PayloadValidationError, ResourceNotFoundError
from ledback.app.core.timeutils import utcnow, as_utc
from ledback.app.domain.ownership import OwnerId
from ledback.app.models.entry import Entry, EntryLine
from ledback.app.schemas.entry import EntryCreate
from ledback.app.services.audit import log_event, AuditAction
from ledback.app.services.ledger_service import load_postable_ledgers

logger = logging.getLogger("ledback.entries")


def check_line_sides(debit_ledger_id: str, credit_ledger_id: str, line_ref: Optional[str] = None) -> None:
    """A line must move money between two different ledgers."""
    if debit_ledger_id == credit_ledger_id:
        raise PayloadValidationError(
            "Debit and credit ledger must differ",
            details={"line": line_ref, "ledger_id": debit_ledger_id},
        )


async def list_entries(db: AsyncSession, owner: OwnerId) -> List[Entry]:
    """Owner's live entries, newest first."""
    result = await db.execute(
        select(Entry)
        .where(Entry.user_email == owner.value, Entry.deleted_at.is_(None))
        .order_by(Entry.entry_date.desc(), Entry.created_at.desc())
    )
    return list(result.scalars().all())


async def list_transactions(db: AsyncSession, owner: OwnerId) -> List[dict]:
    """Owner's live lines joined with their entry, oldest first."""
    result = await db.execute(
        select(EntryLine, Entry)
        .join(Entry, Entry.id == EntryLine.entry_id)
        .where(
            Entry.user_email == owner.value,
            Entry.deleted_at.is_(None),
            EntryLine.deleted_at.is_(None),
        )
        .order_by(Entry.entry_date.asc(), EntryLine.created_at.asc())
    )
    return [
        {
            "id": line.id,
            "entry_id": entry.id,
            "date": entry.entry_date,
            "voucher_type": entry.voucher_type,
            "debit_ledger_id": line.debit_ledger_id,
            "credit_ledger_id": line.credit_ledger_id,
            "amount": line.amount,
            "narration": line.narration if line.narration is not None else entry.narration,
            "created_at": line.created_at,
        }
        for line, entry in result.all()
    ]


async def create_entry(db: AsyncSession, owner: OwnerId, data: EntryCreate) -> Tuple[Entry, List[EntryLine]]:
    """
    Create an entry and all its lines in the caller's transaction.

    Validates:
    - At least one line
    - Each line posts between two different, postable, visible ledgers
    """
    if not data.lines:
        raise PayloadValidationError("At least one line is required")

    for index, line in enumerate(data.lines):
        check_line_sides(line.debit_ledger_id, line.credit_ledger_id, line_ref=str(index))

    ledger_ids = {l.debit_ledger_id for l in data.lines} | {l.credit_ledger_id for l in data.lines}
    await load_postable_ledgers(db, owner, ledger_ids)

    now = utcnow()
    entry = Entry(
        entry_date=data.entry_date,
        voucher_type=data.voucher_type,
        narration=data.narration,
        tags=list(data.tags),
        user_email=owner.value,
        created_at=now,
        updated_at=now,
    )
    db.add(entry)
    await db.flush()

    lines: List[EntryLine] = []
    for line_data in data.lines:
        stamp = utcnow()
        line = EntryLine(
            entry_id=entry.id,
            debit_ledger_id=line_data.debit_ledger_id,
            credit_ledger_id=line_data.credit_ledger_id,
            amount=line_data.amount,
            narration=line_data.narration,
            created_at=stamp,
            updated_at=stamp,
        )
        db.add(line)
        lines.append(line)
    await db.flush()

    await log_event(
        db,
        AuditAction.ENTRY_CREATED,
        actor_email=owner.value,
        entity="entries",
        entity_id=entry.id,
        metadata={"voucher_type": entry.voucher_type.value, "line_count": len(lines)},
    )
    logger.info("Entry created: %s with %d line(s) for %s", entry.id, len(lines), owner)
    return entry, lines


async def get_entry_with_lines(db: AsyncSession, owner: OwnerId, entry_id: str) -> Tuple[Entry, List[EntryLine]]:
    """Owner's live entry and its live lines, or ResourceNotFoundError."""
    result = await db.execute(
        select(Entry).where(
            Entry.id == entry_id,
            Entry.user_email == owner.value,
            Entry.deleted_at.is_(None),
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        raise ResourceNotFoundError("Entry", entry_id)

    lines_result = await db.execute(
        select(EntryLine)
        .where(EntryLine.entry_id == entry_id, EntryLine.deleted_at.is_(None))
        .order_by(EntryLine.created_at.asc())
    )
    return entry, list(lines_result.scalars().all())


async def soft_delete_entry(
    db: AsyncSession,
    owner: OwnerId,
    entry_id: str,
    deleted_at: Optional[datetime] = None,
) -> bool:
    """
    Mark the owner's entry and all of its lines deleted.

    Lines go first so the entry never sits live without lines. Returns
    ``False`` (and touches nothing) when the entry is not the owner's.
    """
    owned = await db.execute(
        select(Entry.id).where(Entry.id == entry_id, Entry.user_email == owner.value)
    )
    if owned.scalar_one_or_none() is None:
        return False

    deleted_at = as_utc(deleted_at) or utcnow()
    now = utcnow()

    await db.execute(
        update(EntryLine)
        .where(EntryLine.entry_id == entry_id, EntryLine.deleted_at.is_(None))
        .values(deleted_at=deleted_at, updated_at=now)
    )
    await db.execute(
        update(Entry)
        .where(Entry.id == entry_id, Entry.user_email == owner.value, Entry.deleted_at.is_(None))
        .values(deleted_at=deleted_at, updated_at=now)
    )
    return True


async def delete_entry(db: AsyncSession, owner: OwnerId, entry_id: str) -> None:
    """REST delete: soft delete a live entry or raise ResourceNotFoundError."""
    await get_entry_with_lines(db, owner, entry_id)
    await soft_delete_entry(db, owner, entry_id)
    await log_event(
        db,
        AuditAction.ENTRY_DELETED,
        actor_email=owner.value,
        entity="entries",
        entity_id=entry_id,
    )
    logger.info("Entry soft-deleted: %s for %s", entry_id, owner)
