from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from examhub.core.constants import ExamAttemptStatusEnum
from examhub.schemas.question import ExamQuestion
from examhub.schemas.question_bank import QuestionBank

class ExamAttemptCreate(BaseModel):
    user_id: int
    token: str = Field(..., min_length=1)

class ExamAttempt(BaseModel):
    id: int
    user_id: int
    bank_id: int
    status: ExamAttemptStatusEnum
    started_at: datetime
    finished_at: Optional[datetime] = None
    score: Optional[int] = None
    total: int = 0

    model_config = ConfigDict(from_attributes=True)

class ExamAttemptRedeemed(BaseModel):
    attempt_id: int
    remaining_balance: Decimal
    attempt: ExamAttempt

class ExamAttemptQuestions(BaseModel):
    attempt_id: int
    questions: List[ExamQuestion]

class AttemptStats(BaseModel):
    answered: int
    correct: int
    wrong: int
    unanswered: int

class ExamAttemptFinished(BaseModel):
    attempt_id: int
    status: ExamAttemptStatusEnum
    score: Optional[int] = None
    total: int
    finished_at: Optional[datetime] = None
    stats: AttemptStats

class ExamAttemptHistoryItem(ExamAttempt):
    bank: QuestionBank
