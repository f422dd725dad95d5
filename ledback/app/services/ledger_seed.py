"""
Default ledger seeding.

Creates the global default catalog. Safe to run on every startup: a seed is
skipped when a global ledger with the same name (case-insensitive) exists.
"""

import logging
from typing import Iterable, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ledback.app.core.timeutils import utcnow
from ledback.app.data.default_ledgers import DEFAULT_LEDGERS, LedgerSeed
from ledback.app.models.ledger import Ledger
from ledback.app.services.audit import log_event, AuditAction

logger = logging.getLogger("ledback.seed")


async def ensure_default_ledgers(db: AsyncSession, seeds: Iterable[LedgerSeed] = DEFAULT_LEDGERS) -> List[str]:
    """
    Insert missing global default ledgers and commit.
    
    Returns:
        Names of the ledgers created in this run
    """
    logger.info("Ensuring default ledgers exist...")
    
    result = await db.execute(
        select(func.lower(Ledger.name)).where(Ledger.user_email.is_(None))
    )
    existing = set(result.scalars().all())
    
    created: List[str] = []
    for seed in seeds:
        if seed.name.lower() in existing:
            continue
        
        now = utcnow()
        db.add(
            Ledger(
                name=seed.name,
                group_name=seed.group_name,
                nature=seed.nature,
                is_party=seed.is_party,
                user_email=None,
                created_at=now,
                updated_at=now,
            )
        )
        existing.add(seed.name.lower())
        created.append(seed.name)
        logger.debug("Seeded ledger: %s", seed.name)
    
    if created:
        await log_event(
            db,
            AuditAction.LEDGERS_SEEDED,
            metadata={"count": len(created)},
        )
    await db.commit()
    
    logger.info("Default ledgers check completed (%d created)", len(created))
    return created
