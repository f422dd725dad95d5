"""
Entry API Endpoints.

Vouchers with their debit/credit lines, always scoped to the caller.
"""

from typing import List
from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledback.app.db.session import get_db
from ledback.app.core.dependencies import get_current_owner
from ledback.app.domain.ownership import OwnerId
from ledback.app.schemas.entry import (
    EntryCreate,
    EntryResponse,
    EntryLineResponse,
    EntryWithLinesResponse,
    TransactionResponse,
)
from ledback.app.services import entry_service

router = APIRouter(prefix="/entries", tags=["Entries"])
transactions_router = APIRouter(prefix="/transactions", tags=["Entries"])


def _with_lines(entry, lines) -> EntryWithLinesResponse:
    return EntryWithLinesResponse(
        entry=EntryResponse.model_validate(entry),
        lines=[EntryLineResponse.model_validate(line) for line in lines],
    )


@router.get("", response_model=List[EntryResponse])
async def list_entries(
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's entries, newest first."""
    entries = await entry_service.list_entries(db, owner)
    return [EntryResponse.model_validate(e) for e in entries]


@router.post("", response_model=EntryWithLinesResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_data: EntryCreate,
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """
    Create an entry with its lines in one transaction.
    
    Validates:
    - At least one line, every amount > 0
    - Debit and credit ledger differ, exist, are visible and postable
    """
    entry, lines = await entry_service.create_entry(db, owner, entry_data)
    await db.commit()
    return _with_lines(entry, lines)


@router.get("/transactions", response_model=List[TransactionResponse])
async def list_entry_transactions(
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """All of the caller's lines flattened with their entry data."""
    rows = await entry_service.list_transactions(db, owner)
    return [TransactionResponse.model_validate(row) for row in rows]


@router.get("/{entry_id}", response_model=EntryWithLinesResponse)
async def get_entry(
    entry_id: str = Path(..., description="Entry ID"),
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """Get one entry and its lines (caller's own only)."""
    entry, lines = await entry_service.get_entry_with_lines(db, owner, entry_id)
    return _with_lines(entry, lines)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str = Path(..., description="Entry ID"),
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """Soft delete an entry together with its lines."""
    await entry_service.delete_entry(db, owner, entry_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@transactions_router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    owner: OwnerId = Depends(get_current_owner),
    db: AsyncSession = Depends(get_db)
):
    """All of the caller's lines flattened with their entry data."""
    rows = await entry_service.list_transactions(db, owner)
    return [TransactionResponse.model_validate(row) for row in rows]
