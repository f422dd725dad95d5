"""
Unit tests for the running balance fold.

Pure functions, no database.
"""

import datetime as dt
from decimal import Decimal

from ledback.app.domain.statement.running_balance import (
    Movement,
    apply_movement,
    balance_side,
    fold_statement,
    format_amount,
)
from ledback.app.models.enums import BalanceSide, LedgerNature, VoucherType


def movement(debit="0", credit="0", day=1, entry_id="e1"):
    return Movement(
        entry_id=entry_id,
        date=dt.date(2025, 1, day),
        voucher_type=VoucherType.JOURNAL,
        narration=None,
        other_ledger_id="other",
        other_ledger_name="Other",
        debit=Decimal(debit),
        credit=Decimal(credit),
    )


def test_asset_ledger_grows_with_debits():
    """Asset: debit adds, credit subtracts, balance stays Dr while positive."""
    lines = fold_statement(LedgerNature.ASSET, [movement(debit="100"), movement(credit="30", day=2)])
    
    assert [l.running_balance for l in lines] == ["100.00", "70.00"]
    assert [l.balance_side for l in lines] == [BalanceSide.DR, BalanceSide.DR]
    assert lines[0].debit == "100.00"
    assert lines[0].credit == "0.00"
    assert lines[1].credit == "30.00"


def test_asset_ledger_overdrawn_flips_to_credit():
    lines = fold_statement(LedgerNature.ASSET, [movement(credit="50")])
    
    assert lines[0].running_balance == "50.00"
    assert lines[0].balance_side == BalanceSide.CR


def test_liability_ledger_grows_with_credits():
    """Liability: credit adds; a larger debit flips the side to Dr."""
    lines = fold_statement(
        LedgerNature.LIABILITY,
        [movement(credit="200"), movement(debit="250", day=2)],
    )
    
    assert [l.running_balance for l in lines] == ["200.00", "50.00"]
    assert [l.balance_side for l in lines] == [BalanceSide.CR, BalanceSide.DR]


def test_expense_and_income_follow_their_natural_side():
    expense = fold_statement(LedgerNature.EXPENSE, [movement(debit="12.5")])
    income = fold_statement(LedgerNature.INCOME, [movement(credit="12.5")])
    
    assert (expense[0].running_balance, expense[0].balance_side) == ("12.50", BalanceSide.DR)
    assert (income[0].running_balance, income[0].balance_side) == ("12.50", BalanceSide.CR)


def test_zero_balance_shows_natural_side():
    """A balance that returns to zero is labelled with the nature's own side."""
    asset = fold_statement(LedgerNature.ASSET, [movement(debit="10"), movement(credit="10", day=2)])
    liability = fold_statement(LedgerNature.LIABILITY, [movement(credit="10"), movement(debit="10", day=2)])
    
    assert (asset[-1].running_balance, asset[-1].balance_side) == ("0.00", BalanceSide.DR)
    assert (liability[-1].running_balance, liability[-1].balance_side) == ("0.00", BalanceSide.CR)


def test_empty_movements_give_empty_statement():
    assert fold_statement(LedgerNature.ASSET, []) == []


def test_final_balance_equals_net_movement():
    """The last running balance is |sum(debits) - sum(credits)| for a debit-nature ledger."""
    moves = [
        movement(debit="10.10"),
        movement(credit="3.05", day=2),
        movement(debit="0.01", day=3),
        movement(credit="100", day=4),
        movement(debit="50.50", day=5),
    ]
    lines = fold_statement(LedgerNature.ASSET, moves)
    net = sum(m.debit - m.credit for m in moves)
    
    assert len(lines) == len(moves)
    assert lines[-1].running_balance == format_amount(abs(net))
    assert lines[-1].balance_side == (BalanceSide.DR if net >= 0 else BalanceSide.CR)


def test_decimal_arithmetic_has_no_float_drift():
    lines = fold_statement(LedgerNature.ASSET, [movement(debit="0.1"), movement(debit="0.2", day=2)])
    
    assert lines[-1].running_balance == "0.30"


def test_apply_movement_and_balance_side_helpers():
    running = apply_movement(Decimal("0"), movement(debit="5"), is_debit_nature=False)
    
    assert running == Decimal("-5")
    assert balance_side(running, is_debit_nature=False) == BalanceSide.DR
    assert format_amount(Decimal("7")) == "7.00"


def test_nature_accepts_plain_string():
    lines = fold_statement("Income", [movement(credit="1")])
    
    assert lines[0].balance_side == BalanceSide.CR


def test_same_amounts_mirror_between_asset_and_liability():
    asset = fold_statement(LedgerNature.ASSET, [movement(debit="100"), movement(debit="50", day=2)])
    liability = fold_statement(LedgerNature.LIABILITY, [movement(credit="100"), movement(credit="50", day=2)])
    
    assert [l.running_balance for l in asset] == ["100.00", "150.00"]
    assert [l.running_balance for l in liability] == ["100.00", "150.00"]
    assert {l.balance_side for l in asset} == {BalanceSide.DR}
    assert {l.balance_side for l in liability} == {BalanceSide.CR}
