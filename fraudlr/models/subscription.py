from enum import Enum

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from fraudlr.db.base import Base, generate_id, utcnow


class SubscriptionTier(str, Enum):
    FREE = "FREE"
    STANDARD = "STANDARD"
    PRO = "PRO"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=generate_id)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, unique=True)
    tier = Column(SQLEnum(SubscriptionTier, name="subscription_tier"), nullable=False, default=SubscriptionTier.FREE)
    start_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    csv_uploads_this_month = Column(Integer, nullable=False, default=0)
    usage_period_start = Column(DateTime(timezone=True), nullable=True)  # First instant of the month the counter covers

    account = relationship("Account", back_populates="subscription")
