"""
Tests for application wiring: health, request tracing and identity parsing.
"""

import pytest

from ledback.app.domain.ownership import OwnerId


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    
    assert response.status_code == 200
    assert response.json()["ok"] is True


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "trace-123"})
    
    assert response.headers["X-Correlation-ID"] == "trace-123"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_blank_identity_header_is_rejected(client):
    response = await client.get("/entries", headers={"X-User-Email": "   "})
    
    assert response.status_code == 401
    assert response.json() == {
        "error_code": "ERR_AUTH_001",
        "message": "Missing X-User-Email header",
        "details": {},
    }


def test_owner_id_parse():
    assert OwnerId.parse(None) is OwnerId.GLOBAL
    assert OwnerId.parse("  ").is_global
    assert OwnerId.parse(" a@b.c ") == OwnerId("a@b.c")
    assert str(OwnerId.GLOBAL) == "<global>"
