from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from fraudlr.db.base import Base, generate_id, utcnow


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)  # Always stored lower-cased
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Owned rows go with the account, both through the ORM and the FK ON DELETE CASCADE
    cases = relationship(
        "Case",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Case.created_at.desc()",
    )
    integrations = relationship(
        "Integration",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    subscription = relationship(
        "Subscription",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    def __repr__(self):
        return f"<Account(id={self.id}, email={self.email})>"
