"""
Ledger store service.

Visibility, name-scope uniqueness, hierarchy checks and soft deletion of
ledgers. Functions flush but never commit; the caller owns the transaction.
"""

import logging
from typing import Iterable, List, Optional, Dict

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ledback.app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    LedgerInUseError,
    PayloadValidationError,
    ReferentialIntegrityError,
    ResourceNotFoundError,
)
from ledback.app.core.timeutils import utcnow
from ledback.app.domain.ownership import OwnerId
from ledback.app.models.entry import EntryLine
from ledback.app.models.enums import LedgerNature
from ledback.app.models.ledger import Ledger
from ledback.app.schemas.ledger import LedgerCreate, LedgerUpdate
from ledback.app.services.audit import log_event, AuditAction

logger = logging.getLogger("ledback.ledgers")


def visible_to(owner: OwnerId):
    """SQL clause: ledger is global or owned by ``owner``."""
    if owner.is_global:
        return Ledger.user_email.is_(None)
    return or_(Ledger.user_email.is_(None), Ledger.user_email == owner.value)


def _owned_by(owner: OwnerId):
    if owner.is_global:
        return Ledger.user_email.is_(None)
    return Ledger.user_email == owner.value


async def list_ledgers(db: AsyncSession, owner: OwnerId) -> List[Ledger]:
    """All live ledgers the owner can see, ordered by name."""
    result = await db.execute(
        select(Ledger)
        .where(visible_to(owner), Ledger.deleted_at.is_(None))
        .order_by(Ledger.name.asc())
    )
    return list(result.scalars().all())


async def get_visible_ledger(db: AsyncSession, owner: OwnerId, ledger_id: str) -> Optional[Ledger]:
    """Live ledger by id if the owner can see it, else ``None``."""
    result = await db.execute(
        select(Ledger).where(
            Ledger.id == ledger_id,
            visible_to(owner),
            Ledger.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def ensure_unique_name(
    db: AsyncSession,
    owner: OwnerId,
    name: str,
    parent_id: Optional[str],
    exclude_id: Optional[str] = None,
) -> None:
    """
    Reject a case-insensitive name clash within the same owner and parent.

    Raises:
        ConflictError: a live ledger already uses the name in that scope
    """
    query = select(Ledger.id).where(
        _owned_by(owner),
        func.lower(Ledger.name) == name.strip().lower(),
        Ledger.deleted_at.is_(None),
    )
    if parent_id is None:
        query = query.where(Ledger.category_ledger_id.is_(None))
    else:
        query = query.where(Ledger.category_ledger_id == parent_id)
    if exclude_id is not None:
        query = query.where(Ledger.id != exclude_id)

    clash = (await db.execute(query.limit(1))).scalar_one_or_none()
    if clash is not None:
        raise ConflictError(name, details={"name": name, "existing_id": clash, "parent_id": parent_id})


async def check_category(
    db: AsyncSession,
    owner: OwnerId,
    ledger_id: Optional[str],
    parent_id: Optional[str],
) -> None:
    """
    Validate a parent (category) link.

    The parent must be a live, visible ledger, must not be the ledger itself
    and must not have the ledger among its ancestors.
    """
    if parent_id is None:
        return
    if ledger_id is not None and parent_id == ledger_id:
        raise PayloadValidationError(
            "A ledger cannot be its own category",
            details={"id": ledger_id, "category_ledger_id": parent_id},
        )

    parent = await get_visible_ledger(db, owner, parent_id)
    if parent is None:
        raise PayloadValidationError(
            "Category ledger not found",
            details={"category_ledger_id": parent_id},
        )

    if ledger_id is None:
        return

    seen = set()
    current = parent
    while current is not None and current.category_ledger_id is not None:
        if current.category_ledger_id == ledger_id:
            raise PayloadValidationError(
                "Category link would create a cycle",
                details={"id": ledger_id, "category_ledger_id": parent_id},
            )
        if current.category_ledger_id in seen:
            break
        seen.add(current.category_ledger_id)
        current = await db.get(Ledger, current.category_ledger_id)


async def create_ledger(db: AsyncSession, owner: OwnerId, data: LedgerCreate) -> Ledger:
    """Create a ledger owned by ``owner`` (global when ``owner`` is GLOBAL)."""
    name = data.name.strip()
    await check_category(db, owner, None, data.category_ledger_id)
    await ensure_unique_name(db, owner, name, data.category_ledger_id)

    now = utcnow()
    ledger = Ledger(
        name=name,
        group_name=data.group_name,
        nature=data.nature,
        is_party=data.is_party,
        is_group=data.is_group,
        category_ledger_id=data.category_ledger_id,
        user_email=owner.value,
        created_at=now,
        updated_at=now,
    )
    db.add(ledger)
    await db.flush()

    await log_event(
        db,
        AuditAction.LEDGER_CREATED,
        actor_email=owner.value,
        entity="ledgers",
        entity_id=ledger.id,
        metadata={"name": ledger.name, "nature": ledger.nature.value},
    )
    logger.info("Ledger created: %s (%s) for %s", ledger.name, ledger.id, owner)
    return ledger


async def _get_owned_ledger(db: AsyncSession, owner: OwnerId, ledger_id: str) -> Ledger:
    ledger = await get_visible_ledger(db, owner, ledger_id)
    if ledger is None:
        raise ResourceNotFoundError("Ledger", ledger_id)
    if ledger.user_email != owner.value:
        raise AuthorizationError(
            "Shared ledgers cannot be modified",
            details={"id": ledger_id},
        )
    return ledger


async def update_ledger(db: AsyncSession, owner: OwnerId, ledger_id: str, data: LedgerUpdate) -> Ledger:
    """
    Update an owned ledger's master data.

    ``nature`` is immutable; sending a different value is rejected.
    """
    ledger = await _get_owned_ledger(db, owner, ledger_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("nature") is not None and LedgerNature(changes["nature"]) != ledger.nature:
        raise PayloadValidationError(
            "Ledger nature cannot be changed after creation",
            details={"id": ledger_id, "nature": ledger.nature.value},
        )
    changes.pop("nature", None)

    if "category_ledger_id" in changes:
        await check_category(db, owner, ledger.id, changes["category_ledger_id"])

    new_name = (changes.get("name") or ledger.name).strip()
    new_parent = changes.get("category_ledger_id", ledger.category_ledger_id)
    if new_name.lower() != ledger.name.lower() or new_parent != ledger.category_ledger_id:
        await ensure_unique_name(db, owner, new_name, new_parent, exclude_id=ledger.id)

    for field, value in changes.items():
        if value is None and field != "category_ledger_id":
            continue
        setattr(ledger, field, value.strip() if field == "name" else value)
    ledger.updated_at = utcnow()
    await db.flush()

    await log_event(
        db,
        AuditAction.LEDGER_UPDATED,
        actor_email=owner.value,
        entity="ledgers",
        entity_id=ledger.id,
        metadata={"updated_fields": sorted(changes.keys())},
    )
    return ledger


async def count_ledger_usage(db: AsyncSession, ledger_id: str) -> int:
    """Number of live entry lines posting to the ledger on either side."""
    result = await db.execute(
        select(func.count(EntryLine.id)).where(
            or_(EntryLine.debit_ledger_id == ledger_id, EntryLine.credit_ledger_id == ledger_id),
            EntryLine.deleted_at.is_(None),
        )
    )
    return result.scalar() or 0


async def delete_ledger(db: AsyncSession, owner: OwnerId, ledger_id: str) -> Ledger:
    """
    Soft delete an owned ledger that no live entry line references.

    Raises:
        LedgerInUseError: the ledger still has postings
    """
    ledger = await _get_owned_ledger(db, owner, ledger_id)

    used = await count_ledger_usage(db, ledger_id)
    if used > 0:
        raise LedgerInUseError(ledger_id, used)

    now = utcnow()
    ledger.deleted_at = now
    ledger.updated_at = now
    await db.flush()

    await log_event(
        db,
        AuditAction.LEDGER_DELETED,
        actor_email=owner.value,
        entity="ledgers",
        entity_id=ledger.id,
    )
    logger.info("Ledger soft-deleted: %s for %s", ledger_id, owner)
    return ledger


async def load_postable_ledgers(
    db: AsyncSession,
    owner: OwnerId,
    ledger_ids: Iterable[str],
) -> Dict[str, Ledger]:
    """
    Fetch the ledgers a set of lines posts to.

    Raises:
        ReferentialIntegrityError: an id is unknown, deleted or not visible
        PayloadValidationError: a ledger is a group (non-postable) header
    """
    wanted = set(ledger_ids)
    if not wanted:
        return {}

    result = await db.execute(
        select(Ledger).where(
            Ledger.id.in_(wanted),
            visible_to(owner),
            Ledger.deleted_at.is_(None),
        )
    )
    found = {ledger.id: ledger for ledger in result.scalars().all()}

    missing = sorted(wanted - found.keys())
    if missing:
        raise ReferentialIntegrityError(
            "Entry line refers to missing or unauthorized ledger",
            details={"ledger_ids": missing},
        )

    groups = sorted(lid for lid, ledger in found.items() if ledger.is_group)
    if groups:
        raise PayloadValidationError(
            "Group ledgers cannot be posted to",
            details={"ledger_ids": groups},
        )
    return found

