from sqlalchemy import Boolean, Column, String, Integer, DateTime, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examhub.core.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    is_active = Column(Boolean(), default=True)

    # Only ever changed through conditional UPDATEs in crud.user, each paired with a ledger row
    balance = Column(Numeric(12, 2), nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam_attempts = relationship("ExamAttempt", back_populates="user")
    exam_tokens = relationship("ExamToken", back_populates="user")
    balance_transactions = relationship(
        "BalanceTransaction",
        back_populates="user",
        foreign_keys="BalanceTransaction.user_id",
        order_by="BalanceTransaction.id"
    )
