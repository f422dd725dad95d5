"""
Integration tests for the ledger statement endpoint.
"""

import pytest

from ledback.app.models.enums import LedgerNature


@pytest.fixture
async def books(make_ledger):
    return {
        "cash": await make_ledger("Cash", owner=None),
        "sales": await make_ledger("Sales", nature=LedgerNature.INCOME, owner=None),
        "rent": await make_ledger("Rent", nature=LedgerNature.EXPENSE),
    }


async def post_entry(client, headers, date, debit, credit, amount, voucher_type="Journal", narration=None):
    response = await client.post(
        "/entries",
        json={
            "date": date,
            "voucherType": voucher_type,
            "narration": narration,
            "lines": [{"debitLedgerId": debit.id, "creditLedgerId": credit.id, "amount": amount}],
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["entry"]["id"]


@pytest.mark.asyncio
async def test_statement_running_balance(client, books, alice_headers):
    """Cash: +1000 then -300, ordered by entry date even when posted out of order."""
    rent_id = await post_entry(client, alice_headers, "2025-01-02", books["rent"], books["cash"], "300", "Payment", "January rent")
    sale_id = await post_entry(client, alice_headers, "2025-01-01", books["cash"], books["sales"], "1000", "Receipt")
    
    response = await client.get(f"/ledgers/{books['cash'].id}/statement", headers=alice_headers)
    assert response.status_code == 200
    rows = response.json()
    
    assert [r["entryId"] for r in rows] == [sale_id, rent_id]
    assert rows[0]["debit"] == "1000.00"
    assert rows[0]["credit"] == "0.00"
    assert rows[0]["otherLedgerName"] == "Sales"
    assert (rows[0]["runningBalance"], rows[0]["balanceSide"]) == ("1000.00", "Dr")
    
    assert rows[1]["credit"] == "300.00"
    assert rows[1]["otherLedgerId"] == books["rent"].id
    assert rows[1]["narration"] == "January rent"
    assert rows[1]["voucherType"] == "Payment"
    assert (rows[1]["runningBalance"], rows[1]["balanceSide"]) == ("700.00", "Dr")


@pytest.mark.asyncio
async def test_income_statement_sits_on_credit_side(client, books, alice_headers):
    await post_entry(client, alice_headers, "2025-01-01", books["cash"], books["sales"], "80.5")
    
    rows = (await client.get(f"/ledgers/{books['sales'].id}/statement", headers=alice_headers)).json()
    
    assert len(rows) == 1
    assert (rows[0]["credit"], rows[0]["runningBalance"], rows[0]["balanceSide"]) == ("80.50", "80.50", "Cr")


@pytest.mark.asyncio
async def test_statement_date_filter(client, books, alice_headers):
    for day in ("2025-01-01", "2025-01-15", "2025-02-01"):
        await post_entry(client, alice_headers, day, books["cash"], books["sales"], "10")
    
    response = await client.get(
        f"/ledgers/{books['cash'].id}/statement",
        params={"from": "2025-01-10", "to": "2025-01-31"},
        headers=alice_headers,
    )
    rows = response.json()
    
    assert [r["date"] for r in rows] == ["2025-01-15"]
    # The window starts from zero
    assert rows[0]["runningBalance"] == "10.00"


@pytest.mark.asyncio
async def test_statement_only_includes_callers_entries(client, books, alice_headers, bob_headers):
    await post_entry(client, alice_headers, "2025-01-01", books["cash"], books["sales"], "10")
    
    response = await client.get(f"/ledgers/{books['cash'].id}/statement", headers=bob_headers)
    
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_statement_skips_deleted_entries(client, books, alice_headers):
    kept = await post_entry(client, alice_headers, "2025-01-01", books["cash"], books["sales"], "10")
    dropped = await post_entry(client, alice_headers, "2025-01-02", books["cash"], books["sales"], "99")
    await client.delete(f"/entries/{dropped}", headers=alice_headers)
    
    rows = (await client.get(f"/ledgers/{books['cash'].id}/statement", headers=alice_headers)).json()
    
    assert [r["entryId"] for r in rows] == [kept]


@pytest.mark.asyncio
async def test_unknown_ledger_gives_empty_statement(client, alice_headers):
    response = await client.get("/ledgers/nope/statement", headers=alice_headers)
    
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_statement_rejects_bad_dates(client, books, alice_headers):
    response = await client.get(
        f"/ledgers/{books['cash'].id}/statement",
        params={"from": "01/02/2025"},
        headers=alice_headers,
    )
    
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_same_day_rows_follow_creation_order(client, alice_headers):
    """Same entry date: entry creation time decides, then line creation time."""
    batch = {
        "ledgersUpsert": [
            {"id": "cash", "name": "Cash", "nature": "Asset"},
            {"id": "sales", "name": "Sales", "nature": "Income"},
        ],
        "entriesUpsert": [
            {"id": "e2", "entry_date": "2025-03-10", "voucher_type": "Payment", "created_at": "2025-03-10T09:00:00Z"},
            {"id": "e1", "entry_date": "2025-03-10", "voucher_type": "Receipt", "created_at": "2025-03-10T08:00:00Z"},
        ],
        "entryLinesUpsert": [
            {"id": "l2", "entry_id": "e2", "debit_ledger_id": "sales", "credit_ledger_id": "cash",
             "amount": "30", "created_at": "2025-03-10T09:00:01Z"},
            {"id": "l1b", "entry_id": "e1", "debit_ledger_id": "sales", "credit_ledger_id": "cash",
             "amount": "150", "narration": "second", "created_at": "2025-03-10T08:00:02Z"},
            {"id": "l1a", "entry_id": "e1", "debit_ledger_id": "cash", "credit_ledger_id": "sales",
             "amount": "250", "narration": "first", "created_at": "2025-03-10T08:00:01Z"},
        ],
    }
    response = await client.post("/sync/push", json=batch, headers=alice_headers)
    assert response.status_code == 200
    
    rows = (await client.get("/ledgers/cash/statement", headers=alice_headers)).json()
    
    assert [(r["entryId"], r["narration"]) for r in rows] == [("e1", "first"), ("e1", "second"), ("e2", None)]
    assert [(r["runningBalance"], r["balanceSide"]) for r in rows] == [
        ("250.00", "Dr"),
        ("100.00", "Dr"),
        ("70.00", "Dr"),
    ]
