from examhub.crud.base import CRUDBase
from examhub.models.question_bank import QuestionBank
from examhub.schemas.question_bank import QuestionBankCreate

class CRUDQuestionBank(CRUDBase[QuestionBank, QuestionBankCreate]):
    pass

question_bank = CRUDQuestionBank(QuestionBank)
