from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, or_, and_
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examhub.core.database import Base

class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    bank_id = Column(Integer, ForeignKey("question_banks.id"), nullable=False, index=True)
    text = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    correct_option_id = Column(Integer, nullable=True)
    correct_answer_text = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    bank = relationship("QuestionBank", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.id"
    )
    answers = relationship("AttemptAnswer", back_populates="question")

    @classmethod
    def answer_key_clause(cls):
        # Only says a key is present; QuestionBankService.is_exam_eligible checks it resolves
        return or_(
            cls.correct_option_id.isnot(None),
            and_(cls.correct_answer_text.isnot(None), func.trim(cls.correct_answer_text) != "")
        )


class QuestionOption(Base):
    __tablename__ = "question_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False, index=True)
    text = Column(String, nullable=False)

    question = relationship("Question", back_populates="options")
