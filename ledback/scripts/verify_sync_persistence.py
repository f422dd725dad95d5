"""
Restart smoke test for the sync protocol.

Starts the API under uvicorn against a throwaway SQLite file, pushes a small
batch, restarts the server and checks that pull and the ledger statement
still see the data.

Usage:
    python -m ledback.scripts.verify_sync_persistence
"""

import os
import signal
import subprocess
import sys
import tempfile
import time

import httpx

BASE_URL = "http://127.0.0.1:8000"
HEADERS = {"X-User-Email": "smoke@ledback.local"}

BATCH = {
    "ledgersUpsert": [
        {"id": "smoke-cash", "name": "Smoke Cash", "group_name": "Current Asset", "nature": "Asset"},
        {"id": "smoke-sales", "name": "Smoke Sales", "group_name": "Sales", "nature": "Income"},
    ],
    "entriesUpsert": [
        {"id": "smoke-entry", "entry_date": "2025-01-01", "voucher_type": "Receipt", "narration": "Smoke"},
    ],
    "entryLinesUpsert": [
        {
            "id": "smoke-line",
            "entry_id": "smoke-entry",
            "debit_ledger_id": "smoke-cash",
            "credit_ledger_id": "smoke-sales",
            "amount": "42.00",
        },
    ],
}


def start_server(env):
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "ledback.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def wait_for_server(retries=10, delay=1):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for _ in range(retries):
        try:
            if httpx.get(url).status_code == 200:
                print("Server is up")
                return True
        except httpx.TransportError:
            pass
        time.sleep(delay)
    print("Server failed to start")
    return False


def run_verification():
    db_file = os.path.join(tempfile.mkdtemp(prefix="ledback-smoke-"), "smoke.db")
    env = {
        **os.environ,
        "DATABASE_URL": f"sqlite+aiosqlite:///{db_file}",
        "SEED_DEFAULT_LEDGERS": "true",
    }

    print("\n--- [Step 1] Starting server and pushing a batch ---")
    proc = start_server(env)
    try:
        if not wait_for_server():
            out, err = proc.communicate(timeout=2)
            print("Server stderr:", err.decode())
            raise RuntimeError("Server start failed")

        resp = httpx.post(f"{BASE_URL}/sync/push", json=BATCH, headers=HEADERS)
        if resp.status_code != 200:
            raise RuntimeError(f"Push failed: {resp.status_code} {resp.text}")
        print("Push applied:", resp.json())
    finally:
        stop_server(proc)

    time.sleep(1)

    print("\n--- [Step 2] Restarting server and pulling ---")
    proc = start_server(env)
    try:
        if not wait_for_server():
            raise RuntimeError("Server restart failed")

        delta = httpx.get(f"{BASE_URL}/sync/pull", headers=HEADERS).json()
        line_ids = [line["id"] for line in delta["entry_lines"]]
        if line_ids != ["smoke-line"]:
            raise RuntimeError(f"Unexpected lines after restart: {line_ids}")
        print(f"Pull OK: {len(delta['ledgers'])} ledgers, {len(delta['entries'])} entries")

        statement = httpx.get(f"{BASE_URL}/ledgers/smoke-cash/statement", headers=HEADERS).json()
        closing = statement[-1]
        if (closing["runningBalance"], closing["balanceSide"]) != ("42.00", "Dr"):
            raise RuntimeError(f"Unexpected statement: {statement}")
        print("Statement OK:", closing["runningBalance"], closing["balanceSide"])

        # Replaying the same batch must be a no-op
        resp = httpx.post(f"{BASE_URL}/sync/push", json=BATCH, headers=HEADERS)
        if resp.status_code != 200:
            raise RuntimeError(f"Replay failed: {resp.status_code} {resp.text}")
        print("Replay OK")
    finally:
        stop_server(proc)


if __name__ == "__main__":
    run_verification()
