from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examhub.core.database import Base

class ExamToken(Base):
    __tablename__ = "exam_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String, unique=True, index=True, nullable=False)
    bank_id = Column(Integer, ForeignKey("question_banks.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime, nullable=True)
    attempt_id = Column(Integer, ForeignKey("exam_attempts.id"), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="exam_tokens")
    bank = relationship("QuestionBank")
    attempt = relationship("ExamAttempt", back_populates="exam_token")
