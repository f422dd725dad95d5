"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from ledback.app.api.v1.endpoints import ledgers, entries, sync

router = APIRouter()

# Chart of accounts + statements
router.include_router(ledgers.router)

# Vouchers
router.include_router(entries.router)
router.include_router(entries.transactions_router)

# Offline sync
router.include_router(sync.router)
