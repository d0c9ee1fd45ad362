from typing import List, Optional
from sqlalchemy.orm import Session

from examhub.core.constants import ExamAttemptStatusEnum
from examhub.core.exceptions import Forbidden, NotFound
from examhub.crud.attempt_answer import attempt_answer as crud_attempt_answer
from examhub.crud.exam_attempt import exam_attempt as crud_exam_attempt
from examhub.models.exam_attempt import ExamAttempt
from examhub.schemas.attempt_answer import AttemptAnswerDetail
from examhub.schemas.exam_attempt import AttemptStats, ExamAttempt as ExamAttemptSchema, ExamAttemptHistoryItem
from examhub.schemas.question import QuestionOption
from examhub.schemas.question_bank import QuestionBank
from examhub.schemas.review import AttemptReview, AttemptSummary, ReviewItem, ReviewQuestion
from examhub.services.question_bank import question_bank_service


class AttemptReviewService:

    def _get_attempt(self, db: Session, attempt_id: int, user_id: Optional[int] = None) -> ExamAttempt:
        attempt = crud_exam_attempt.get(db, id=attempt_id)
        if not attempt:
            raise NotFound("Attempt not found.")
        if user_id is not None and attempt.user_id != user_id:
            raise Forbidden()
        return attempt

    def _total_for(self, db: Session, attempt: ExamAttempt) -> int:
        if attempt.status == ExamAttemptStatusEnum.FINISHED:
            return attempt.total
        return question_bank_service.count_eligible_questions(db, attempt.bank_id)

    def attempt_stats(self, db: Session, attempt: ExamAttempt) -> AttemptStats:
        """Answered, correct, wrong and unanswered counts.

        ``wrong`` only counts answered questions that were marked incorrect;
        questions never answered are reported under ``unanswered``.
        """
        answered = crud_attempt_answer.count_by_attempt(db, attempt_id=attempt.id)
        correct = crud_attempt_answer.count_correct_by_attempt(db, attempt_id=attempt.id)
        total = self._total_for(db, attempt)
        return AttemptStats(
            answered=answered,
            correct=correct,
            wrong=answered - correct,
            unanswered=max(total - answered, 0)
        )

    def summary(self, db: Session, attempt_id: int, user_id: Optional[int] = None) -> AttemptSummary:
        attempt = self._get_attempt(db, attempt_id, user_id)
        stats = self.attempt_stats(db, attempt)

        if attempt.status == ExamAttemptStatusEnum.FINISHED:
            score, total = attempt.score or 0, attempt.total
        else:
            score, total = stats.correct, self._total_for(db, attempt)

        return AttemptSummary(
            attempt=ExamAttemptSchema.model_validate(attempt),
            exam=QuestionBank.model_validate(attempt.bank),
            score=score,
            total=total,
            stats=stats
        )

    def attempt_answers(self, db: Session, attempt_id: int, user_id: Optional[int] = None) -> List[AttemptAnswerDetail]:
        attempt = self._get_attempt(db, attempt_id, user_id)
        answers = crud_attempt_answer.get_all_by_attempt(db, attempt_id=attempt.id)
        return [AttemptAnswerDetail.model_validate(answer) for answer in answers]

    def review_attempt(self, db: Session, attempt_id: int, user_id: int) -> AttemptReview:
        attempt = self._get_attempt(db, attempt_id, user_id)
        answers = crud_attempt_answer.get_all_by_attempt(db, attempt_id=attempt.id)

        items = []
        for answer in answers:
            question = answer.question
            correct_option = question_bank_service.resolve_correct_option(question)
            items.append(ReviewItem(
                answer_id=answer.id,
                created_at=answer.created_at,
                is_correct=answer.is_correct,
                question=ReviewQuestion(
                    id=question.id,
                    text=question.text,
                    image_url=question.image_url,
                    options=[QuestionOption.model_validate(o) for o in question.options],
                    correct_option_id=correct_option.id if correct_option else question.correct_option_id,
                    correct_option_text=correct_option.text if correct_option else (question.correct_answer_text or None)
                ),
                selected=QuestionOption.model_validate(answer.selected_option)
            ))

        return AttemptReview(
            attempt=ExamAttemptSchema.model_validate(attempt),
            exam=QuestionBank.model_validate(attempt.bank),
            stats=self.attempt_stats(db, attempt),
            items=items
        )

    def user_attempts(
        self, db: Session, user_id: int, status: Optional[ExamAttemptStatusEnum] = None
    ) -> List[ExamAttemptHistoryItem]:
        attempts = crud_exam_attempt.get_all_by_user(db, user_id=user_id, status=status)
        return [ExamAttemptHistoryItem.model_validate(attempt) for attempt in attempts]


attempt_review_service = AttemptReviewService()
