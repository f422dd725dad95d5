"""
Integration tests for sync pull (deltas, watermark, tombstones).
"""

from datetime import datetime

import pytest

from ledback.app.models.enums import LedgerNature

BOB = "bob@example.com"


def parse_ts(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def post_entry(client, headers, debit, credit, amount="10"):
    response = await client.post(
        "/entries",
        json={
            "date": "2025-04-01",
            "voucherType": "Journal",
            "lines": [{"debitLedgerId": debit.id, "creditLedgerId": credit.id, "amount": amount}],
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_initial_pull_returns_everything_visible(client, make_ledger, alice_headers):
    cash = await make_ledger("Cash", owner=None)
    own = await make_ledger("Wallet")
    await make_ledger("Bob Wallet", owner=BOB)
    created = await post_entry(client, alice_headers, own, cash)
    
    response = await client.get("/sync/pull", headers=alice_headers)
    assert response.status_code == 200
    data = response.json()
    
    assert {l["id"] for l in data["ledgers"]} == {cash.id, own.id}
    assert [e["id"] for e in data["entries"]] == [created["entry"]["id"]]
    assert [l["id"] for l in data["entry_lines"]] == [created["lines"][0]["id"]]
    assert data["deleted"] == {"ledgers": [], "entries": [], "entry_lines": []}
    assert parse_ts(data["cursor"]).tzinfo is not None


@pytest.mark.asyncio
async def test_pull_since_cursor_returns_only_new_changes(client, make_ledger, alice_headers):
    cash = await make_ledger("Cash")
    sales = await make_ledger("Sales", nature=LedgerNature.INCOME)
    
    first = (await client.get("/sync/pull", headers=alice_headers)).json()
    
    # TEST 1: Nothing changed
    response = await client.get("/sync/pull", params={"since": first["cursor"]}, headers=alice_headers)
    data = response.json()
    assert data["ledgers"] == [] and data["entries"] == [] and data["entry_lines"] == []
    
    assert parse_ts(data["cursor"]) >= parse_ts(first["cursor"])
    
    # TEST 2: New entry shows up after the cursor
    created = await post_entry(client, alice_headers, cash, sales)
    response = await client.get("/sync/pull", params={"since": first["cursor"]}, headers=alice_headers)
    data = response.json()
    assert data["ledgers"] == []
    assert [e["id"] for e in data["entries"]] == [created["entry"]["id"]]
    assert len(data["entry_lines"]) == 1


@pytest.mark.asyncio
async def test_pull_reports_tombstones(client, make_ledger, alice_headers):
    cash = await make_ledger("Cash")
    sales = await make_ledger("Sales", nature=LedgerNature.INCOME)
    spare = await make_ledger("Spare")
    created = await post_entry(client, alice_headers, cash, sales)
    entry_id = created["entry"]["id"]
    
    cursor = (await client.get("/sync/pull", headers=alice_headers)).json()["cursor"]
    
    await client.delete(f"/entries/{entry_id}", headers=alice_headers)
    await client.delete(f"/ledgers/{spare.id}", headers=alice_headers)
    
    data = (await client.get("/sync/pull", params={"since": cursor}, headers=alice_headers)).json()
    
    assert [t["id"] for t in data["deleted"]["entries"]] == [entry_id]
    assert [t["id"] for t in data["deleted"]["entry_lines"]] == [created["lines"][0]["id"]]
    assert [t["id"] for t in data["deleted"]["ledgers"]] == [spare.id]
    # Deleted rows never appear as live upserts
    assert data["entries"] == [] and data["entry_lines"] == []
    assert spare.id not in {l["id"] for l in data["ledgers"]}


@pytest.mark.asyncio
async def test_pull_is_scoped_to_owner(client, make_ledger, alice_headers, bob_headers):
    cash = await make_ledger("Cash", owner=None)
    sales = await make_ledger("Sales", nature=LedgerNature.INCOME, owner=None)
    await post_entry(client, alice_headers, cash, sales)
    
    data = (await client.get("/sync/pull", headers=bob_headers)).json()
    
    assert {l["id"] for l in data["ledgers"]} == {cash.id, sales.id}
    assert data["entries"] == []
    assert data["entry_lines"] == []


@pytest.mark.asyncio
async def test_pull_validation(client, alice_headers):
    # TEST 1: Identity is required
    assert (await client.get("/sync/pull")).status_code == 401
    
    # TEST 2: Unparseable watermark
    response = await client.get("/sync/pull", params={"since": "yesterday"}, headers=alice_headers)
    assert response.status_code == 422
    
    # TEST 3: Zulu timestamps are accepted
    response = await client.get("/sync/pull", params={"since": "2025-01-01T00:00:00.000Z"}, headers=alice_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_pulled_timestamps_carry_utc_offset(client, make_ledger, alice_headers):
    cash = await make_ledger("Cash")
    sales = await make_ledger("Sales", nature=LedgerNature.INCOME)
    spare = await make_ledger("Spare")
    await post_entry(client, alice_headers, cash, sales)
    await client.delete(f"/ledgers/{spare.id}", headers=alice_headers)
    
    data = (await client.get("/sync/pull", headers=alice_headers)).json()
    
    rows = data["ledgers"] + data["entries"] + data["entry_lines"]
    stamps = [row[field] for row in rows for field in ("created_at", "updated_at")]
    stamps += [t[field] for t in data["deleted"]["ledgers"] for field in ("deleted_at", "updated_at")]
    
    assert len(stamps) == 10
    assert all(parse_ts(value).utcoffset() is not None for value in stamps)
