from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from examhub.crud.base import CRUDBase
from examhub.models.question import Question, QuestionOption

class CRUDQuestion(CRUDBase[Question, dict]):

    def _query_with_options(self, db: Session):
        return db.query(Question).options(selectinload(Question.options))

    def get(self, db: Session, id: int) -> Optional[Question]:
        return self._query_with_options(db).filter(Question.id == id).first()

    def get_keyed_by_bank(self, db: Session, *, bank_id: int) -> List[Question]:
        return (
            self._query_with_options(db)
            .filter(Question.bank_id == bank_id, Question.answer_key_clause())
            .order_by(Question.id)
            .all()
        )

    def create_with_options(
        self,
        db: Session,
        *,
        bank_id: int,
        text: str,
        options: List[str],
        correct_index: Optional[int] = None,
        correct_answer_text: Optional[str] = None,
        image_url: Optional[str] = None,
        commit: bool = True
    ) -> Question:
        question = Question(
            bank_id=bank_id,
            text=text,
            image_url=image_url,
            correct_answer_text=correct_answer_text,
            options=[QuestionOption(text=option_text) for option_text in options]
        )
        db.add(question)
        db.flush()
        if correct_index is not None:
            # The option id is the key; correct_answer_text stays the text-only fallback
            question.correct_option_id = question.options[correct_index].id
            question.correct_answer_text = None
            db.flush()
        if commit:
            db.commit()
        db.refresh(question)
        return question

question = CRUDQuestion(Question)
