"""
Fraud-analysis cases. The analysis itself runs outside this service; a case
only records the uploaded file, its status and an opaque results payload.
"""
from enum import Enum

from sqlalchemy import Column, String, Text, JSON, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from fraudlr.db.base import Base, generate_id, utcnow


class CaseStatus(str, Enum):
    PENDING = "PENDING"  # Created on upload, waiting for the analysis process
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Case(Base):
    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, default=generate_id)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SQLEnum(CaseStatus, name="case_status"), nullable=False, default=CaseStatus.PENDING)
    file_url = Column(String, nullable=True)
    results = Column(JSON, nullable=True)  # Opaque payload written by the analysis process
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    account = relationship("Account", back_populates="cases")

    def __repr__(self):
        return f"<Case(id={self.id}, status={self.status}, account_id={self.account_id})>"
