import random
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from examhub.core.exceptions import BankNotFound
from examhub.crud.question import question as crud_question
from examhub.crud.question_bank import question_bank as crud_question_bank
from examhub.models.attempt_answer import AttemptAnswer
from examhub.models.question import Question, QuestionOption
from examhub.models.question_bank import QuestionBank
from examhub.schemas.question import ExamQuestion, QuestionOption as QuestionOptionSchema
from examhub.utils.text import normalize_answer_text


class QuestionBankService:
    """Read-only access to banks and their exam-eligible questions."""

    def get_bank(self, db: Session, bank_id: int) -> QuestionBank:
        bank = crud_question_bank.get(db, id=bank_id)
        if not bank:
            raise BankNotFound()
        return bank

    def is_exam_eligible(self, question: Question) -> bool:
        """True when at least one of the question's own options would be scored correct.

        A dangling ``correct_option_id`` or a ``correct_answer_text`` that matches
        none of the options leaves the question out of attempts and totals.
        """
        return any(self.is_correct_choice(question, option) for option in question.options)

    def get_eligible_questions(self, db: Session, bank_id: int) -> List[Question]:
        questions = crud_question.get_keyed_by_bank(db, bank_id=bank_id)
        return [question for question in questions if self.is_exam_eligible(question)]

    def count_eligible_questions(self, db: Session, bank_id: int) -> int:
        return len(self.get_eligible_questions(db, bank_id))

    def has_eligible_questions(self, db: Session, bank_id: int) -> bool:
        return any(self.is_exam_eligible(q) for q in crud_question.get_keyed_by_bank(db, bank_id=bank_id))

    def resolve_correct_option(self, question: Question) -> Optional[QuestionOption]:
        """Find the correct option by id first, then by normalised text."""
        if question.correct_option_id is not None:
            for option in question.options:
                if option.id == question.correct_option_id:
                    return option

        target = normalize_answer_text(question.correct_answer_text)
        if target:
            for option in question.options:
                if normalize_answer_text(option.text) == target:
                    return option
        return None

    def is_correct_choice(self, question: Question, option: QuestionOption) -> bool:
        if question.correct_option_id is not None:
            return option.id == question.correct_option_id

        target = normalize_answer_text(question.correct_answer_text)
        return bool(target) and normalize_answer_text(option.text) == target

    def present_questions(
        self, questions: List[Question], answers_by_question: Dict[int, AttemptAnswer]
    ) -> List[ExamQuestion]:
        # Fresh shuffle on every call; no per-attempt order is stored
        presented = []
        for question in questions:
            answer = answers_by_question.get(question.id)
            options = random.sample(list(question.options), k=len(question.options))
            presented.append(ExamQuestion(
                id=question.id,
                text=question.text,
                image_url=question.image_url,
                options=[QuestionOptionSchema.model_validate(o) for o in options],
                answered=answer is not None,
                selected_option_id=answer.selected_option_id if answer else None
            ))
        return presented


question_bank_service = QuestionBankService()
