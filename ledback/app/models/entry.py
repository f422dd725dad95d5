"""
Entry (voucher) and Entry Line database models.

An entry is a dated transaction header; each line moves ``amount`` from
``credit_ledger_id`` to ``debit_ledger_id``.
"""

import uuid
from sqlalchemy import Column, String, Text, Date, DateTime, Enum, Numeric, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ledback.app.db.session import Base
from ledback.app.models.enums import VoucherType
from ledback.app.core.timeutils import utcnow


class Entry(Base):
    """
    Entry model.
    
    Entries are always private to their owner (no global entries) and must
    own at least one line once created.
    """
    __tablename__ = "entries"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    entry_date = Column(Date, nullable=False, index=True)
    voucher_type = Column(
        Enum(VoucherType, name="voucher_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    narration = Column(Text, nullable=True)
    user_email = Column(String(255), nullable=False, index=True)
    tags = Column(JSON, nullable=False, default=list)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    
    lines = relationship("EntryLine", back_populates="entry", order_by="EntryLine.created_at")
    
    def __repr__(self):
        return f"<Entry(id={self.id}, date={self.entry_date}, type='{self.voucher_type.value}')>"


class EntryLine(Base):
    """Entry line (movement) model."""
    __tablename__ = "entry_lines"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    entry_id = Column(String(36), ForeignKey("entries.id"), nullable=False, index=True)
    debit_ledger_id = Column(String(36), ForeignKey("ledgers.id"), nullable=False, index=True)
    credit_ledger_id = Column(String(36), ForeignKey("ledgers.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 2), nullable=False)
    narration = Column(Text, nullable=True)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    
    entry = relationship("Entry", back_populates="lines")
    
    def __repr__(self):
        return f"<EntryLine(id={self.id}, entry={self.entry_id}, amount={self.amount})>"
