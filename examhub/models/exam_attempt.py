from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examhub.core.database import Base
from examhub.core.constants import ExamAttemptStatusEnum

class ExamAttempt(Base):
    __tablename__ = "exam_attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    bank_id = Column(Integer, ForeignKey("question_banks.id"), nullable=False, index=True)
    status = Column(Enum(ExamAttemptStatusEnum), nullable=False, default=ExamAttemptStatusEnum.IN_PROGRESS)
    started_at = Column(DateTime, nullable=False)
    finished_at = Column(DateTime, nullable=True)
    score = Column(Integer, nullable=True)
    total = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="exam_attempts")
    bank = relationship("QuestionBank", back_populates="attempts")
    answers = relationship("AttemptAnswer", back_populates="attempt", order_by="AttemptAnswer.id")
    exam_token = relationship("ExamToken", back_populates="attempt", uselist=False)
