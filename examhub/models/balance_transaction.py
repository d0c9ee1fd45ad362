from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examhub.core.database import Base
from examhub.core.constants import BalanceTransactionTypeEnum

class BalanceTransaction(Base):
    """Append-only ledger row. Rows are inserted by crud.balance_transaction and never updated."""
    __tablename__ = "balance_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False) # Always positive, direction comes from the type
    transaction_type = Column(Enum(BalanceTransactionTypeEnum), nullable=False)
    balance_before = Column(Numeric(12, 2), nullable=False)
    balance_after = Column(Numeric(12, 2), nullable=False)
    attempt_id = Column(Integer, ForeignKey("exam_attempts.id"), nullable=True)
    bank_id = Column(Integer, ForeignKey("question_banks.id"), nullable=True)
    initiator_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", foreign_keys=[user_id], back_populates="balance_transactions")
    initiator = relationship("User", foreign_keys=[initiator_id])
    attempt = relationship("ExamAttempt")
    bank = relationship("QuestionBank")
