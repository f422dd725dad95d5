"""
Running balance computation for ledger statements.

Pure functions only: feed an ordered list of movements, get back the same
rows annotated with the cumulative balance. No database access here.
"""

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from ledback.app.models.enums import BalanceSide, LedgerNature, VoucherType

ZERO = Decimal("0")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class Movement:
    """
    One entry line as seen from the statement ledger.

    Exactly one of ``debit`` / ``credit`` is non-zero because a line never
    debits and credits the same ledger.
    """
    entry_id: str
    date: dt.date
    voucher_type: VoucherType
    narration: Optional[str]
    other_ledger_id: str
    other_ledger_name: str
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class StatementLine:
    entry_id: str
    date: dt.date
    voucher_type: VoucherType
    narration: Optional[str]
    other_ledger_id: str
    other_ledger_name: str
    debit: str
    credit: str
    running_balance: str
    balance_side: BalanceSide


def format_amount(value: Decimal) -> str:
    """Two-decimal string, as numeric(18,2) columns render."""
    return str(Decimal(value).quantize(CENT))


def apply_movement(running: Decimal, movement: Movement, is_debit_nature: bool) -> Decimal:
    """Advance the signed running total by one movement."""
    if is_debit_nature:
        return running + movement.debit - movement.credit
    return running + movement.credit - movement.debit


def balance_side(running: Decimal, is_debit_nature: bool) -> BalanceSide:
    """
    Side label for a signed running total.

    Zero and positive totals sit on the nature's natural side (Dr for
    Asset/Expense, Cr for Liability/Income); negative totals flip.
    """
    natural = BalanceSide.DR if is_debit_nature else BalanceSide.CR
    flipped = BalanceSide.CR if is_debit_nature else BalanceSide.DR
    if running >= ZERO:
        return natural
    return flipped


def fold_statement(nature: LedgerNature, movements: Iterable[Movement]) -> List[StatementLine]:
    """
    Left fold over chronologically ordered movements.

    The fold state is the signed running total; each output row carries its
    absolute value and side label.
    """
    is_debit_nature = LedgerNature(nature).is_debit_nature
    running = ZERO
    lines: List[StatementLine] = []

    for movement in movements:
        running = apply_movement(running, movement, is_debit_nature)
        lines.append(
            StatementLine(
                entry_id=movement.entry_id,
                date=movement.date,
                voucher_type=movement.voucher_type,
                narration=movement.narration,
                other_ledger_id=movement.other_ledger_id,
                other_ledger_name=movement.other_ledger_name,
                debit=format_amount(movement.debit),
                credit=format_amount(movement.credit),
                running_balance=format_amount(abs(running)),
                balance_side=balance_side(running, is_debit_nature),
            )
        )

    return lines
