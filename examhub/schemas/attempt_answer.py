from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from examhub.schemas.question import QuestionOption, QuestionWithAnswerKey

class AttemptAnswerCreate(BaseModel):
    question_id: int
    selected_option_id: int
    user_id: Optional[int] = None

class AttemptAnswer(BaseModel):
    id: int
    attempt_id: int
    question_id: int
    selected_option_id: int
    is_correct: bool

    model_config = ConfigDict(from_attributes=True)

class AttemptAnswerDetail(AttemptAnswer):
    created_at: Optional[datetime] = None
    question: QuestionWithAnswerKey
    selected_option: QuestionOption
