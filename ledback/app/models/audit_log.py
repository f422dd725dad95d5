"""
Audit Log Database Model.

Tracks who changed which ledger, entry or sync batch.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from ledback.app.db.session import Base
from ledback.app.core.timeutils import utcnow


class AuditLog(Base):
    """
    Audit log model.
    
    Events logged:
    - LEDGER_CREATED / LEDGER_UPDATED / LEDGER_DELETED
    - ENTRY_CREATED / ENTRY_DELETED
    - SYNC_PUSH_APPLIED
    - LEDGERS_SEEDED
    """
    __tablename__ = "audit_logs"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Who performed the action (None for system actions)
    actor_email = Column(String(255), index=True, nullable=True)
    
    # What action was performed
    action = Column(String(100), nullable=False, index=True)
    
    # Which row it touched
    entity = Column(String(50), nullable=True)
    entity_id = Column(String(36), nullable=True, index=True)
    
    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)
    
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    
    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_email})>"
