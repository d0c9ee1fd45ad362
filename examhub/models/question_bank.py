from sqlalchemy import Column, Integer, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examhub.core.database import Base

class QuestionBank(Base):
    __tablename__ = "question_banks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    year = Column(Integer, nullable=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)

    # Ownership metadata owned by the catalogue service, carried through as-is
    university = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    topic = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    questions = relationship("Question", back_populates="bank", cascade="all, delete-orphan")
    attempts = relationship("ExamAttempt", back_populates="bank")
