"""
Sync API Endpoints.

Pull/push delta protocol for offline-first clients.
"""

import datetime as dt
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ledback.app.db.session import get_db
from ledback.app.core.dependencies import get_current_owner
from ledback.app.core.timeutils import EPOCH
from ledback.app.domain.ownership import OwnerId
from ledback.app.domain.sync.sync_service import SyncService
from ledback.app.schemas.sync import SyncPullResponse, SyncPushRequest, SyncPushResponse

router = APIRouter(prefix="/sync", tags=["Sync"])


@router.get("/pull", response_model=SyncPullResponse)
async def pull_changes(
    since: Optional[dt.datetime] = Query(None, description="ISO-8601 watermark (defaults to epoch)"),
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    Everything changed after ``since``.
    
    Store the returned ``cursor`` and send it as ``since`` next time.
    """
    delta = await SyncService.pull(db, owner, since or EPOCH)
    return SyncPullResponse.model_validate(delta, from_attributes=True)


@router.post("/push", response_model=SyncPushResponse)
async def push_changes(
    batch: SyncPushRequest,
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    Apply a batch of client upserts and deletes atomically.
    
    Any failure rolls back the whole batch; retrying is safe.
    """
    result = await SyncService.push(db, owner, batch)
    return SyncPushResponse(**result)
