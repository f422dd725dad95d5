"""
Audit logging service for tracking bookkeeping changes.

Rows are added to the caller's session and commit (or roll back) together
with the change they describe.
"""

from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from ledback.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    LEDGER_CREATED = "LEDGER_CREATED"
    LEDGER_UPDATED = "LEDGER_UPDATED"
    LEDGER_DELETED = "LEDGER_DELETED"
    LEDGERS_SEEDED = "LEDGERS_SEEDED"
    
    ENTRY_CREATED = "ENTRY_CREATED"
    ENTRY_DELETED = "ENTRY_DELETED"
    
    SYNC_PUSH_APPLIED = "SYNC_PUSH_APPLIED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_email: Optional[str] = None,
    entity: Optional[str] = None,
    entity_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Record an audit event in the current unit of work.
    
    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_email: Owner performing the action (None for system actions)
        entity: Table name of the affected row
        entity_id: ID of the affected row
        metadata: Additional context as JSON
        
    Returns:
        Pending AuditLog instance
    """
    audit_log = AuditLog(
        actor_email=actor_email,
        action=action,
        entity=entity,
        entity_id=entity_id,
        meta_data=metadata,
    )
    
    db.add(audit_log)
    return audit_log


async def get_audit_logs(
    db: AsyncSession,
    actor_email: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100,
) -> List[AuditLog]:
    """Newest-first audit rows, optionally filtered by actor and action."""
    query = select(AuditLog)
    if actor_email:
        query = query.where(AuditLog.actor_email == actor_email)
    if action:
        query = query.where(AuditLog.action == action)
    query = query.order_by(desc(AuditLog.timestamp), desc(AuditLog.id)).limit(limit)
    
    result = await db.execute(query)
    return list(result.scalars().all())
