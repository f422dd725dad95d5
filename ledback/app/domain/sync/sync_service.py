"""
Sync Service (Domain Logic).

Offline-first delta protocol for mobile clients:

- ``pull``: everything that changed after the client's watermark, plus
  tombstones for rows deleted after it.
- ``push``: one atomic batch of client upserts and soft deletes. Any error
  rolls back the whole batch.
"""

import datetime as dt
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledback.app.core.config import settings
from ledback.app.core.exceptions import (
    AuthorizationError,
    PayloadValidationError,
    ReferentialIntegrityError,
    UnsupportedOperationError,
)
from ledback.app.core.timeutils import as_utc, utcnow
from ledback.app.domain.ownership import OwnerId
from ledback.app.domain.sync.merge import MergeStrategy, get_merge_strategy
from ledback.app.models.entry import Entry, EntryLine
from ledback.app.models.enums import LedgerNature, SyncTable
from ledback.app.models.ledger import Ledger
from ledback.app.schemas.sync import (
    EntryLineUpsert,
    EntryUpsert,
    LedgerUpsert,
    SyncDelete,
    SyncPushRequest,
)
from ledback.app.services.audit import log_event, AuditAction
from ledback.app.services.entry_service import check_line_sides, soft_delete_entry
from ledback.app.services.ledger_service import (
    check_category,
    ensure_unique_name,
    load_postable_ledgers,
    visible_to,
)

logger = logging.getLogger("ledback.sync")

LEDGER_FIELDS = (
    "name", "group_name", "nature", "is_party", "is_group",
    "category_ledger_id", "user_email", "updated_at", "deleted_at",
)
ENTRY_FIELDS = (
    "entry_date", "voucher_type", "narration", "tags", "user_email",
    "updated_at", "deleted_at",
)
ENTRY_LINE_FIELDS = (
    "entry_id", "debit_ledger_id", "credit_ledger_id", "amount", "narration",
    "updated_at", "deleted_at",
)


def _snapshot(row: Any, fields) -> Dict[str, Any]:
    return {field: getattr(row, field) for field in fields}


def _apply(row: Any, resolved: Dict[str, Any]) -> None:
    for field, value in resolved.items():
        setattr(row, field, value)


def _keep(value: Any, existing: Any, field: str, default: Any) -> Any:
    if value is not None:
        return value
    return getattr(existing, field) if existing is not None else default


def _parents_first(items: List[LedgerUpsert]) -> List[LedgerUpsert]:
    """
    Order ledger upserts so a parent in the batch precedes its children.

    Rows caught in a cycle inside the batch keep their client order and are
    rejected later by the category check.
    """
    batch_ids = {item.id for item in items}
    placed = set()
    ordered: List[LedgerUpsert] = []
    pending = list(items)
    while pending:
        ready = [
            item for item in pending
            if item.category_ledger_id not in batch_ids
            or item.category_ledger_id in placed
            or item.category_ledger_id == item.id
        ]
        if not ready:
            ordered.extend(pending)
            break
        for item in ready:
            ordered.append(item)
            placed.add(item.id)
        pending = [item for item in pending if not any(item is done for done in ready)]
    return ordered


class SyncService:

    # ------------------------------------------------------------------ pull

    @staticmethod
    async def pull(db: AsyncSession, owner: OwnerId, since: dt.datetime) -> Dict[str, Any]:
        """
        Changes visible to ``owner`` after ``since``.

        The returned ``cursor`` is taken before the first query, so a write
        racing with the pull shows up again on the next pull rather than
        being skipped.
        """
        cursor = utcnow()
        since = as_utc(since)

        ledgers = await db.execute(
            select(Ledger)
            .where(visible_to(owner), Ledger.updated_at > since, Ledger.deleted_at.is_(None))
            .order_by(Ledger.updated_at.asc())
        )
        ledgers_deleted = await db.execute(
            select(Ledger.id, Ledger.deleted_at, Ledger.updated_at)
            .where(
                Ledger.user_email == owner.value,
                Ledger.deleted_at.is_not(None),
                Ledger.deleted_at > since,
            )
            .order_by(Ledger.deleted_at.asc())
        )

        entries = await db.execute(
            select(Entry)
            .where(Entry.user_email == owner.value, Entry.updated_at > since, Entry.deleted_at.is_(None))
            .order_by(Entry.updated_at.asc())
        )
        entries_deleted = await db.execute(
            select(Entry.id, Entry.deleted_at, Entry.updated_at)
            .where(
                Entry.user_email == owner.value,
                Entry.deleted_at.is_not(None),
                Entry.deleted_at > since,
            )
            .order_by(Entry.deleted_at.asc())
        )

        entry_lines = await db.execute(
            select(EntryLine)
            .join(Entry, Entry.id == EntryLine.entry_id)
            .where(
                Entry.user_email == owner.value,
                Entry.deleted_at.is_(None),
                EntryLine.updated_at > since,
                EntryLine.deleted_at.is_(None),
            )
            .order_by(EntryLine.updated_at.asc())
        )
        entry_lines_deleted = await db.execute(
            select(EntryLine.id, EntryLine.deleted_at, EntryLine.updated_at)
            .join(Entry, Entry.id == EntryLine.entry_id)
            .where(
                Entry.user_email == owner.value,
                EntryLine.deleted_at.is_not(None),
                EntryLine.deleted_at > since,
            )
            .order_by(EntryLine.deleted_at.asc())
        )

        delta = {
            "cursor": cursor,
            "ledgers": list(ledgers.scalars().all()),
            "entries": list(entries.scalars().all()),
            "entry_lines": list(entry_lines.scalars().all()),
            "deleted": {
                "ledgers": list(ledgers_deleted.all()),
                "entries": list(entries_deleted.all()),
                "entry_lines": list(entry_lines_deleted.all()),
            },
        }
        logger.debug(
            "Pull for %s since %s: %d ledgers, %d entries, %d lines",
            owner, since.isoformat(), len(delta["ledgers"]), len(delta["entries"]), len(delta["entry_lines"]),
        )
        return delta

    # ------------------------------------------------------------------ push

    @staticmethod
    async def push(
        db: AsyncSession,
        owner: OwnerId,
        batch: SyncPushRequest,
        merge: Optional[MergeStrategy] = None,
    ) -> Dict[str, Any]:
        """
        Apply a client batch atomically.

        Order: ledgers, entries, entry lines, deletes. Ownership of every
        upserted row is forced to ``owner``.

        Raises:
            PayloadValidationError, ReferentialIntegrityError,
            AuthorizationError, ConflictError, UnsupportedOperationError
        """
        merge = merge or get_merge_strategy(settings.sync_merge_strategy)

        try:
            for item in _parents_first(batch.ledgers_upsert):
                await SyncService._upsert_ledger(db, owner, item, merge)
                await db.flush()

            for item in batch.entries_upsert:
                await SyncService._upsert_entry(db, owner, item, merge)
                await db.flush()

            for item in batch.entry_lines_upsert:
                await SyncService._upsert_entry_line(db, owner, item, merge)
                await db.flush()

            for item in batch.deletes:
                await SyncService._apply_delete(db, owner, item)
                await db.flush()

            counts = {
                "ledgers": len(batch.ledgers_upsert),
                "entries": len(batch.entries_upsert),
                "entry_lines": len(batch.entry_lines_upsert),
                "deletes": len(batch.deletes),
            }
            await log_event(
                db,
                AuditAction.SYNC_PUSH_APPLIED,
                actor_email=owner.value,
                metadata=counts,
            )
            await db.commit()
        except Exception as exc:
            await db.rollback()
            logger.warning("Push from %s rolled back: %s: %s", owner, type(exc).__name__, exc)
            raise

        logger.info("Push from %s applied: %s", owner, counts)
        return {"ok": True, "server_time": utcnow()}

    @staticmethod
    async def _upsert_ledger(db: AsyncSession, owner: OwnerId, item: LedgerUpsert, merge: MergeStrategy) -> None:
        now = utcnow()
        existing = await db.get(Ledger, item.id)
        # omitted fields keep the stored value on update
        incoming = {
            "name": item.name.strip(),
            "group_name": _keep(item.group_name or None, existing, "group_name", "Assets"),
            "nature": _keep(item.nature, existing, "nature", LedgerNature.ASSET),
            "is_party": _keep(item.is_party, existing, "is_party", False),
            "is_group": _keep(item.is_group, existing, "is_group", False),
            "category_ledger_id": (
                item.category_ledger_id
                if "category_ledger_id" in item.model_fields_set or existing is None
                else existing.category_ledger_id
            ),
            # forged owners are ignored
            "user_email": owner.value,
            "updated_at": as_utc(item.updated_at) or now,
        }

        if existing is None:
            await check_category(db, owner, item.id, incoming["category_ledger_id"])
            await ensure_unique_name(db, owner, incoming["name"], incoming["category_ledger_id"], exclude_id=item.id)
            db.add(Ledger(id=item.id, created_at=as_utc(item.created_at) or now, deleted_at=None, **incoming))
            return

        if existing.user_email != owner.value:
            raise AuthorizationError(
                "Ledger belongs to another owner",
                details={"table": "ledgers", "id": item.id},
            )
        if incoming["nature"] != existing.nature:
            raise PayloadValidationError(
                "Ledger nature cannot be changed after creation",
                details={"table": "ledgers", "id": item.id, "nature": existing.nature.value},
            )

        before = _snapshot(existing, LEDGER_FIELDS)
        resolved = merge(before, incoming)
        revived = before["deleted_at"] is not None and resolved["deleted_at"] is None
        renamed = (
            resolved["name"].lower() != before["name"].lower()
            or resolved["category_ledger_id"] != before["category_ledger_id"]
        )
        if renamed:
            await check_category(db, owner, existing.id, resolved["category_ledger_id"])
        if revived or renamed:
            await ensure_unique_name(db, owner, resolved["name"], resolved["category_ledger_id"], exclude_id=existing.id)
        _apply(existing, resolved)

    @staticmethod
    async def _upsert_entry(db: AsyncSession, owner: OwnerId, item: EntryUpsert, merge: MergeStrategy) -> None:
        now = utcnow()
        incoming = {
            "entry_date": item.entry_date,
            "voucher_type": item.voucher_type,
            "narration": item.narration,
            "tags": list(item.tags),
            "user_email": owner.value,
            "updated_at": as_utc(item.updated_at) or now,
        }

        existing = await db.get(Entry, item.id)
        if existing is None:
            db.add(Entry(id=item.id, created_at=as_utc(item.created_at) or now, deleted_at=None, **incoming))
            return

        if existing.user_email != owner.value:
            raise AuthorizationError(
                "Entry belongs to another owner",
                details={"table": "entries", "id": item.id},
            )
        _apply(existing, merge(_snapshot(existing, ENTRY_FIELDS), incoming))

    @staticmethod
    async def _upsert_entry_line(db: AsyncSession, owner: OwnerId, item: EntryLineUpsert, merge: MergeStrategy) -> None:
        parent = await db.execute(
            select(Entry.id)
            .where(
                Entry.id == item.entry_id,
                Entry.user_email == owner.value,
                Entry.deleted_at.is_(None),
            )
            .with_for_update()
        )
        if parent.scalar_one_or_none() is None:
            raise ReferentialIntegrityError(
                f"EntryLine refers to missing/unauthorized entry_id: {item.entry_id}",
                details={"table": "entry_lines", "id": item.id, "entry_id": item.entry_id},
            )

        check_line_sides(item.debit_ledger_id, item.credit_ledger_id, line_ref=item.id)
        await load_postable_ledgers(db, owner, {item.debit_ledger_id, item.credit_ledger_id})

        now = utcnow()
        incoming = {
            "entry_id": item.entry_id,
            "debit_ledger_id": item.debit_ledger_id,
            "credit_ledger_id": item.credit_ledger_id,
            "amount": item.amount,
            "narration": item.narration,
            "updated_at": as_utc(item.updated_at) or now,
        }

        existing = await db.get(EntryLine, item.id)
        if existing is None:
            db.add(EntryLine(id=item.id, created_at=as_utc(item.created_at) or now, deleted_at=None, **incoming))
            return

        current_owner = await db.execute(select(Entry.user_email).where(Entry.id == existing.entry_id))
        if current_owner.scalar_one_or_none() != owner.value:
            raise AuthorizationError(
                "Entry line belongs to another owner",
                details={"table": "entry_lines", "id": item.id},
            )
        _apply(existing, merge(_snapshot(existing, ENTRY_LINE_FIELDS), incoming))

    @staticmethod
    async def _apply_delete(db: AsyncSession, owner: OwnerId, item: SyncDelete) -> None:
        try:
            table = SyncTable(item.table)
        except ValueError:
            raise UnsupportedOperationError(
                f"Unsupported delete table: {item.table}",
                details={"table": item.table, "id": item.id},
            ) from None

        deleted_at = as_utc(item.deleted_at) or utcnow()
        now = utcnow()

        if table is SyncTable.ENTRIES:
            await soft_delete_entry(db, owner, item.id, deleted_at)

        elif table is SyncTable.LEDGERS:
            # global ledgers never match the owner filter
            await db.execute(
                update(Ledger)
                .where(Ledger.id == item.id, Ledger.user_email == owner.value, Ledger.deleted_at.is_(None))
                .values(deleted_at=deleted_at, updated_at=now)
            )

        elif table is SyncTable.ENTRY_LINES:
            owned = await db.execute(
                select(EntryLine.id)
                .join(Entry, Entry.id == EntryLine.entry_id)
                .where(EntryLine.id == item.id, Entry.user_email == owner.value)
            )
            if owned.scalar_one_or_none() is None:
                raise AuthorizationError(
                    "Unauthorized entry_line delete",
                    details={"table": "entry_lines", "id": item.id},
                )
            await db.execute(
                update(EntryLine)
                .where(EntryLine.id == item.id, EntryLine.deleted_at.is_(None))
                .values(deleted_at=deleted_at, updated_at=now)
            )
