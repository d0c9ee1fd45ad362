from pydantic import BaseModel, ConfigDict
from typing import Optional, List

class QuestionOption(BaseModel):
    id: int
    text: str

    model_config = ConfigDict(from_attributes=True)

class ExamQuestion(BaseModel):
    """A question as presented during an attempt: no correct-answer fields."""
    id: int
    text: str
    image_url: Optional[str] = None
    options: List[QuestionOption] = []
    answered: bool = False
    selected_option_id: Optional[int] = None

class QuestionWithAnswerKey(BaseModel):
    id: int
    text: str
    image_url: Optional[str] = None
    options: List[QuestionOption] = []
    correct_option_id: Optional[int] = None
    correct_answer_text: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
