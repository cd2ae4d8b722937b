from enum import Enum

from sqlalchemy import Column, String, Boolean, JSON, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from fraudlr.db.base import Base, generate_id, utcnow


class IntegrationType(str, Enum):
    API = "API"
    SQL = "SQL"


class Integration(Base):
    __tablename__ = "integrations"

    id = Column(String(36), primary_key=True, default=generate_id)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(SQLEnum(IntegrationType, name="integration_type"), nullable=False)
    config = Column(JSON, nullable=False, default=dict)  # Connection details, stored as given
    is_active = Column(Boolean, nullable=False, default=True)  # Deactivated rather than deleted
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    account = relationship("Account", back_populates="integrations")
