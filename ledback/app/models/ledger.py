"""
Ledger (account) database model.

Chart-of-accounts rows. Global rows (``user_email IS NULL``) are shared by
every user; the rest are private to one owner.
"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey, Index, func
from ledback.app.db.session import Base
from ledback.app.models.enums import LedgerNature
from ledback.app.core.timeutils import utcnow


class Ledger(Base):
    """
    Ledger model.
    
    ``nature`` is fixed at creation and drives balance polarity.
    Deletion is soft: ``deleted_at`` hides the row from normal reads and is
    replicated to sync clients as a tombstone.
    """
    __tablename__ = "ledgers"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    group_name = Column(String(100), nullable=False, default="Assets")
    nature = Column(
        Enum(LedgerNature, name="ledger_nature", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    is_party = Column(Boolean, default=False, nullable=False)
    is_group = Column(Boolean, default=False, nullable=False)
    
    # Hierarchy - optional parent (category) ledger
    category_ledger_id = Column(String(36), ForeignKey("ledgers.id"), nullable=True, index=True)
    
    # Ownership (NULL = global)
    user_email = Column(String(255), nullable=True, index=True)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    
    __table_args__ = (
        Index("ix_ledgers_owner_lower_name", user_email, func.lower(name)),
    )
    
    def __repr__(self):
        return f"<Ledger(id={self.id}, name='{self.name}', nature='{self.nature.value}')>"
