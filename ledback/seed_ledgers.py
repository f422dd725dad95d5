"""
Database seeding script for the default chart of accounts.

Creates the global default ledgers. Safe to re-run: existing names
(case-insensitive) are skipped.

Usage:
    python -m ledback.seed_ledgers
"""

import asyncio

from ledback.app.db.session import engine, Base, AsyncSessionLocal
from ledback.app.services.ledger_seed import ensure_default_ledgers
from ledback.app.core.observability import configure_logging

# Import models to ensure they are registered with Base
from ledback.app.models.ledger import Ledger
from ledback.app.models.entry import Entry, EntryLine
from ledback.app.models.audit_log import AuditLog


async def seed_ledgers():
    """Create tables if needed and insert any missing default ledger."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    async with AsyncSessionLocal() as db:
        created = await ensure_default_ledgers(db)
    
    if created:
        print(f"Created {len(created)} default ledger(s)")
    else:
        print("Default ledgers already present, nothing to do")
    
    await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed_ledgers())
