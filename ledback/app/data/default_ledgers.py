"""
Default chart of accounts.

Seeded once as global ledgers (no owner) so every user starts with the
usual trading, P&L and balance sheet accounts.
"""

from typing import List, NamedTuple
from ledback.app.models.enums import LedgerNature


class LedgerSeed(NamedTuple):
    name: str
    group_name: str
    nature: LedgerNature
    is_party: bool = False


A, L, I, E = LedgerNature.ASSET, LedgerNature.LIABILITY, LedgerNature.INCOME, LedgerNature.EXPENSE

DEFAULT_LEDGERS: List[LedgerSeed] = [
    # P&L / Trading accounts
    LedgerSeed("Sales", "Sales", I),
    LedgerSeed("Sales Returns", "Sales", I),
    LedgerSeed("Purchases", "Purchases", E),
    LedgerSeed("Purchase Returns", "Purchases", E),
    LedgerSeed("Opening Stock", "Inventory", A),
    LedgerSeed("Closing Stock", "Inventory", A),
    LedgerSeed("Wages", "Direct Expense", E),
    LedgerSeed("Carriage Inward/Freight on Purchases", "Direct Expense", E),
    LedgerSeed("Fuel/Power", "Indirect Expense", E),
    LedgerSeed("Rent Paid", "Indirect Expense", E),
    LedgerSeed("Salaries", "Indirect Expense", E),
    LedgerSeed("Interest Paid", "Indirect Expense", E),
    LedgerSeed("Commission Paid", "Indirect Expense", E),
    LedgerSeed("Discount Allowed", "Indirect Expense", E),
    LedgerSeed("Bad Debts", "Indirect Expense", E),
    LedgerSeed("Depreciation", "Indirect Expense", E),
    LedgerSeed("Repairs", "Indirect Expense", E),
    LedgerSeed("Advertising", "Indirect Expense", E),
    LedgerSeed("Rent Received", "Indirect Income", I),
    LedgerSeed("Interest Received", "Indirect Income", I),
    LedgerSeed("Commission Received", "Indirect Income", I),
    LedgerSeed("Discount Received", "Indirect Income", I),
    LedgerSeed("Insurance", "Indirect Expense", E),
    LedgerSeed("Electricity", "Indirect Expense", E),
    LedgerSeed("Telephone/Internet", "Indirect Expense", E),
    LedgerSeed("Travel Expenses", "Indirect Expense", E),
    LedgerSeed("Office Expenses", "Indirect Expense", E),
    LedgerSeed("Printing & Stationery", "Indirect Expense", E),
    LedgerSeed("Legal Fees", "Indirect Expense", E),
    LedgerSeed("Audit Fees", "Indirect Expense", E),
    LedgerSeed("Loss/Gain on Sale of Asset", "Indirect Expense", E),
    LedgerSeed("Provision for Doubtful Debts", "Indirect Expense", E),
    LedgerSeed("Bank Charges", "Indirect Expense", E),

    # Assets
    LedgerSeed("Land", "Fixed Asset", A),
    LedgerSeed("Building", "Fixed Asset", A),
    LedgerSeed("Plant & Machinery", "Fixed Asset", A),
    LedgerSeed("Furniture", "Fixed Asset", A),
    LedgerSeed("Vehicles", "Fixed Asset", A),
    LedgerSeed("Cash in Hand", "Current Asset", A),
    LedgerSeed("Cash at Bank", "Current Asset", A),
    LedgerSeed("Debtors/Accounts Receivable", "Current Asset", A),
    LedgerSeed("Bills Receivable", "Current Asset", A),
    LedgerSeed("Prepaid Expenses", "Current Asset", A),
    LedgerSeed("Advance Payments", "Current Asset", A),
    LedgerSeed("Stock/Inventory", "Current Asset", A),
    LedgerSeed("Investments", "Investment", A),

    # Liabilities & Equity
    LedgerSeed("Capital", "Capital & Reserves", L),
    LedgerSeed("Bank Loan", "Loan", L),
    LedgerSeed("Creditors/Accounts Payable", "Current Liability", L),
    LedgerSeed("Bills Payable", "Current Liability", L),
    LedgerSeed("Outstanding Expenses", "Current Liability", L),
    LedgerSeed("Interest Due", "Current Liability", L),
    LedgerSeed("Drawings", "Capital & Reserves", L),
    LedgerSeed("Profit/Loss (from P&L)", "Capital & Reserves", L),
    LedgerSeed("Reserves", "Capital & Reserves", L),

    # Special internal
    LedgerSeed("Opening Balance Adjustment", "Capital & Reserves", L),
]
