"""
Ledger API Endpoints.

Chart-of-accounts management and the ledger statement (running balance).
"""

import datetime as dt
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledback.app.db.session import get_db
from ledback.app.core.dependencies import get_current_owner, get_optional_owner
from ledback.app.core.exceptions import ResourceNotFoundError
from ledback.app.domain.ownership import OwnerId
from ledback.app.domain.statement.statement_service import StatementService
from ledback.app.schemas.ledger import LedgerCreate, LedgerUpdate, LedgerResponse, StatementLineResponse
from ledback.app.services import ledger_service

router = APIRouter(prefix="/ledgers", tags=["Ledgers"])


@router.get("", response_model=List[LedgerResponse])
async def list_ledgers(
    owner: OwnerId = Depends(get_optional_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    List ledgers visible to the caller (global + own), ordered by name.
    
    Without an identity header only global ledgers are returned.
    """
    ledgers = await ledger_service.list_ledgers(db, owner)
    return [LedgerResponse.model_validate(l) for l in ledgers]


@router.post("", response_model=LedgerResponse, status_code=status.HTTP_201_CREATED)
async def create_ledger(
    ledger_data: LedgerCreate,
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a private ledger for the caller.
    
    Validates:
    - Nature is one of Asset, Liability, Income, Expense
    - Category ledger exists and is not the ledger itself
    - Name is unique (case-insensitive) within owner + parent
    """
    ledger = await ledger_service.create_ledger(db, owner, ledger_data)
    await db.commit()
    await db.refresh(ledger)
    return LedgerResponse.model_validate(ledger)


@router.get("/{ledger_id}/statement", response_model=List[StatementLineResponse])
async def get_ledger_statement(
    ledger_id: str = Path(..., description="Ledger ID"),
    from_date: Optional[dt.date] = Query(None, alias="from", description="Inclusive start (YYYY-MM-DD)"),
    to_date: Optional[dt.date] = Query(None, alias="to", description="Inclusive end (YYYY-MM-DD)"),
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    Ledger statement with running balance.
    
    Unknown ledgers yield an empty list.
    """
    lines = await StatementService.compute_statement(db, owner, ledger_id, from_date, to_date)
    return [StatementLineResponse.model_validate(line) for line in lines]


@router.get("/{ledger_id}", response_model=LedgerResponse)
async def get_ledger(
    ledger_id: str = Path(..., description="Ledger ID"),
    owner: OwnerId = Depends(get_optional_owner),
    db: AsyncSession = Depends(get_db)
):
    """Get a single visible ledger (for the master edit screen)."""
    ledger = await ledger_service.get_visible_ledger(db, owner, ledger_id)
    if ledger is None:
        raise ResourceNotFoundError("Ledger", ledger_id)
    return LedgerResponse.model_validate(ledger)


@router.put("/{ledger_id}", response_model=LedgerResponse)
async def update_ledger(
    ledger_id: str = Path(..., description="Ledger ID"),
    ledger_data: LedgerUpdate = Body(...),
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    Update ledger master data (caller's own ledgers only).
    
    Nature is fixed at creation.
    """
    ledger = await ledger_service.update_ledger(db, owner, ledger_id, ledger_data)
    await db.commit()
    await db.refresh(ledger)
    return LedgerResponse.model_validate(ledger)


@router.delete("/{ledger_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ledger(
    ledger_id: str = Path(..., description="Ledger ID"),
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a ledger (soft delete, replicated as a tombstone).
    
    Refused while any live entry line posts to it.
    """
    await ledger_service.delete_ledger(db, owner, ledger_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
