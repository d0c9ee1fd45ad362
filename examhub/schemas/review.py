from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from examhub.schemas.exam_attempt import ExamAttempt, AttemptStats
from examhub.schemas.question import QuestionOption
from examhub.schemas.question_bank import QuestionBank

class AttemptSummary(BaseModel):
    attempt: ExamAttempt
    exam: QuestionBank
    score: int
    total: int
    stats: AttemptStats

class ReviewQuestion(BaseModel):
    id: int
    text: str
    image_url: Optional[str] = None
    options: List[QuestionOption]
    correct_option_id: Optional[int] = None
    correct_option_text: Optional[str] = None

class ReviewItem(BaseModel):
    answer_id: int
    created_at: Optional[datetime] = None
    is_correct: bool
    question: ReviewQuestion
    selected: QuestionOption

class AttemptReview(BaseModel):
    attempt: ExamAttempt
    exam: QuestionBank
    stats: AttemptStats
    items: List[ReviewItem]
