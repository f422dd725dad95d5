"""
Statement Service (Domain Logic).

Loads the movements of one ledger and runs them through the running
balance fold. Read-only; no transaction handling needed.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, case, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ledback.app.domain.ownership import OwnerId
from ledback.app.domain.statement.running_balance import Movement, StatementLine, fold_statement
from ledback.app.models.entry import Entry, EntryLine
from ledback.app.models.ledger import Ledger
from ledback.app.services.ledger_service import get_visible_ledger

logger = logging.getLogger("ledback.statement")


class StatementService:

    @staticmethod
    async def load_movements(
        db: AsyncSession,
        owner: OwnerId,
        ledger_id: str,
        from_date: Optional[dt.date] = None,
        to_date: Optional[dt.date] = None,
    ) -> List[Movement]:
        """
        Fetch every live line touching the ledger, in replay order.

        Order: entry date, then entry creation, then line creation.
        """
        other = aliased(Ledger)
        is_debit_side = EntryLine.debit_ledger_id == ledger_id
        other_ledger_id = case(
            (is_debit_side, EntryLine.credit_ledger_id),
            else_=EntryLine.debit_ledger_id,
        )

        query = (
            select(
                EntryLine.entry_id,
                Entry.entry_date,
                Entry.voucher_type,
                EntryLine.narration.label("line_narration"),
                Entry.narration.label("entry_narration"),
                EntryLine.debit_ledger_id,
                EntryLine.amount,
                other_ledger_id.label("other_ledger_id"),
                other.name.label("other_ledger_name"),
            )
            .join(Entry, Entry.id == EntryLine.entry_id)
            .join(other, other.id == other_ledger_id)
            .where(
                or_(EntryLine.debit_ledger_id == ledger_id, EntryLine.credit_ledger_id == ledger_id),
                Entry.user_email == owner.value,
                Entry.deleted_at.is_(None),
                EntryLine.deleted_at.is_(None),
            )
        )
        if from_date is not None:
            query = query.where(Entry.entry_date >= from_date)
        if to_date is not None:
            query = query.where(Entry.entry_date <= to_date)
        query = query.order_by(
            Entry.entry_date.asc(),
            Entry.created_at.asc(),
            EntryLine.created_at.asc(),
        )

        result = await db.execute(query)
        movements = []
        for row in result.all():
            amount = Decimal(row.amount)
            on_debit = row.debit_ledger_id == ledger_id
            movements.append(
                Movement(
                    entry_id=row.entry_id,
                    date=row.entry_date,
                    voucher_type=row.voucher_type,
                    narration=row.line_narration if row.line_narration is not None else row.entry_narration,
                    other_ledger_id=row.other_ledger_id,
                    other_ledger_name=row.other_ledger_name,
                    debit=amount if on_debit else Decimal("0"),
                    credit=Decimal("0") if on_debit else amount,
                )
            )
        return movements

    @staticmethod
    async def compute_statement(
        db: AsyncSession,
        owner: OwnerId,
        ledger_id: str,
        from_date: Optional[dt.date] = None,
        to_date: Optional[dt.date] = None,
    ) -> List[StatementLine]:
        """
        Running-balance statement for one ledger.

        An unknown, deleted or invisible ledger yields an empty list rather
        than an error.
        """
        ledger = await get_visible_ledger(db, owner, ledger_id)
        if ledger is None:
            logger.debug("Statement requested for unknown ledger %s by %s", ledger_id, owner)
            return []

        movements = await StatementService.load_movements(db, owner, ledger_id, from_date, to_date)
        return fold_statement(ledger.nature, movements)
