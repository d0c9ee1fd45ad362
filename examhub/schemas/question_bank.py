from pydantic import BaseModel, ConfigDict
from typing import Optional
from decimal import Decimal

class QuestionBankBase(BaseModel):
    title: str
    year: Optional[int] = None
    price: Decimal = Decimal("0.00")
    university: Optional[str] = None
    subject: Optional[str] = None
    topic: Optional[str] = None

class QuestionBankCreate(QuestionBankBase):
    pass

class QuestionBank(QuestionBankBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
