import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from examhub.crud.base import CRUDBase
from examhub.models.attempt_answer import AttemptAnswer
from examhub.models.question import Question

logger = logging.getLogger(__name__)

class CRUDAttemptAnswer(CRUDBase[AttemptAnswer, dict]):

    def _query_with_relationships(self, db: Session):
        return db.query(AttemptAnswer).options(
            selectinload(AttemptAnswer.question).selectinload(Question.options),
            selectinload(AttemptAnswer.selected_option)
        )

    def get_by_attempt_and_question(self, db: Session, *, attempt_id: int,
                                    question_id: int) -> Optional[AttemptAnswer]:
        return (
            db.query(AttemptAnswer)
            .filter(AttemptAnswer.attempt_id == attempt_id)
            .filter(AttemptAnswer.question_id == question_id)
            .first()
        )

    def get_all_by_attempt(self, db: Session, *, attempt_id: int) -> List[AttemptAnswer]:
        return (
            self._query_with_relationships(db)
            .filter(AttemptAnswer.attempt_id == attempt_id)
            .order_by(AttemptAnswer.id)
            .all()
        )

    def count_by_attempt(self, db: Session, *, attempt_id: int) -> int:
        return db.query(AttemptAnswer).filter(AttemptAnswer.attempt_id == attempt_id).count()

    def count_correct_by_attempt(self, db: Session, *, attempt_id: int) -> int:
        return (
            db.query(AttemptAnswer)
            .filter(AttemptAnswer.attempt_id == attempt_id)
            .filter(AttemptAnswer.is_correct.is_(True))
            .count()
        )

    def _apply(self, db: Session, answer: AttemptAnswer, *, selected_option_id: int, is_correct: bool) -> AttemptAnswer:
        answer.selected_option_id = selected_option_id
        answer.is_correct = is_correct
        db.add(answer)
        db.flush()
        db.refresh(answer)
        return answer

    def upsert(
        self, db: Session, *, attempt_id: int, question_id: int, selected_option_id: int, is_correct: bool
    ) -> AttemptAnswer:
        """Write the answer for (attempt, question), overwriting an earlier one."""
        existing_answer = self.get_by_attempt_and_question(
            db, attempt_id=attempt_id, question_id=question_id
        )
        if existing_answer:
            return self._apply(db, existing_answer, selected_option_id=selected_option_id, is_correct=is_correct)

        new_answer = AttemptAnswer(
            attempt_id=attempt_id,
            question_id=question_id,
            selected_option_id=selected_option_id,
            is_correct=is_correct
        )
        try:
            with db.begin_nested():
                db.add(new_answer)
        except IntegrityError:
            # A concurrent request inserted the same pair first; overwrite its row
            logger.info(f"Answer for attempt={attempt_id}, question={question_id} raced an insert, updating instead")
            existing_answer = self.get_by_attempt_and_question(
                db, attempt_id=attempt_id, question_id=question_id
            )
            return self._apply(db, existing_answer, selected_option_id=selected_option_id, is_correct=is_correct)

        db.refresh(new_answer)
        return new_answer

attempt_answer = CRUDAttemptAnswer(AttemptAnswer)
