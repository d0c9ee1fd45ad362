import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from examhub.core.constants import ExamAttemptStatusEnum
from examhub.core.exceptions import (
    ExamHubError,
    Forbidden,
    InsufficientBalance,
    InvalidOption,
    InvalidPrice,
    InvalidState,
    InvalidToken,
    NoEligibleQuestions,
    NotFound,
    TokenAlreadyUsed,
    TokenExpired,
    TokenMismatch,
)
from examhub.crud.attempt_answer import attempt_answer as crud_attempt_answer
from examhub.crud.exam_attempt import exam_attempt as crud_exam_attempt
from examhub.crud.exam_token import exam_token as crud_exam_token
from examhub.crud.question import question as crud_question
from examhub.crud.user import user as crud_user
from examhub.models.attempt_answer import AttemptAnswer
from examhub.models.exam_attempt import ExamAttempt
from examhub.models.exam_token import ExamToken
from examhub.schemas.exam_attempt import ExamAttemptFinished
from examhub.schemas.question import ExamQuestion
from examhub.services.attempt_review import attempt_review_service
from examhub.services.ledger import ledger_service, to_money
from examhub.services.question_bank import question_bank_service

logger = logging.getLogger(__name__)


class ExamAttemptService:

    def _get_attempt(self, db: Session, attempt_id: int) -> ExamAttempt:
        attempt = crud_exam_attempt.get(db, id=attempt_id)
        if not attempt:
            raise NotFound("Attempt not found.")
        return attempt

    def _require_ownership(self, attempt: ExamAttempt, user_id: Optional[int]):
        if user_id is not None and attempt.user_id != user_id:
            raise Forbidden()

    def _require_in_progress(self, attempt: ExamAttempt):
        if attempt.status != ExamAttemptStatusEnum.IN_PROGRESS:
            raise InvalidState()

    def _replay_bound_attempt(self, db: Session, token_row: ExamToken) -> Optional[Tuple[ExamAttempt, Decimal]]:
        if token_row.attempt_id is None:
            return None
        attempt = crud_exam_attempt.get(db, id=token_row.attempt_id)
        if not attempt:
            return None
        logger.info(f"Token already bound, returning attempt {attempt.id} for user {token_row.user_id}")
        return attempt, to_money(crud_user.get_balance(db, user_id=token_row.user_id))

    def _debit_and_create_attempt(
        self, db: Session, bank_id: int, user_id: int, now: datetime
    ) -> Tuple[ExamAttempt, Decimal]:
        bank = question_bank_service.get_bank(db, bank_id)

        price = to_money(bank.price)
        if price < 0:
            raise InvalidPrice()

        if not question_bank_service.has_eligible_questions(db, bank_id):
            raise NoEligibleQuestions()

        if price > 0 and not crud_user.debit_balance(db, user_id=user_id, amount=price):
            available = crud_user.get_balance(db, user_id=user_id)
            if available is None:
                raise NotFound("User not found.")
            raise InsufficientBalance(details={"required": str(price), "available": str(to_money(available))})
        if price == 0 and crud_user.get(db, id=user_id) is None:
            raise NotFound("User not found.")

        attempt = crud_exam_attempt.create(
            db,
            obj_in={
                "user_id": user_id,
                "bank_id": bank_id,
                "status": ExamAttemptStatusEnum.IN_PROGRESS,
                "started_at": now,
                "total": 0
            },
            commit=False
        )

        remaining_balance = to_money(crud_user.get_balance(db, user_id=user_id))
        if price > 0:
            ledger_service.record_debit(
                db,
                user_id=user_id,
                amount=price,
                balance_after=remaining_balance,
                attempt_id=attempt.id,
                bank_id=bank_id
            )

        return attempt, remaining_balance

    def redeem_and_create_attempt(self, db: Session, bank_id: int, user_id: int, token: str) -> Tuple[ExamAttempt, Decimal]:
        """Exchange a one-time token for a paid attempt.

        Runs inside the caller's transaction. The token claim and the balance
        debit are both conditional UPDATEs, so two requests racing on the same
        token (or on the same balance) cannot both win. A claim that is not
        followed by a successful debit and attempt creation is released before
        the error propagates, leaving the token redeemable.

        Redeeming a token that is already bound to an attempt returns that
        attempt with the user's current balance instead of failing, which makes
        client retries safe.
        """
        now = datetime.utcnow()

        token_row = crud_exam_token.get_by_token_value(db, token=token)
        if not token_row:
            raise InvalidToken()
        if token_row.bank_id != bank_id or token_row.user_id != user_id:
            raise TokenMismatch()
        if token_row.expires_at < now:
            raise TokenExpired()

        replay = self._replay_bound_attempt(db, token_row)
        if replay:
            return replay

        if not crud_exam_token.claim(db, token_id=token_row.id, now=now):
            # Lost the race: the winner may already have bound its attempt
            token_row = crud_exam_token.get_by_token_value(db, token=token)
            replay = self._replay_bound_attempt(db, token_row) if token_row else None
            if replay:
                return replay
            raise TokenAlreadyUsed()

        try:
            attempt, remaining_balance = self._debit_and_create_attempt(db, bank_id, user_id, now)
        except ExamHubError as exc:
            crud_exam_token.release_claim(db, token_id=token_row.id)
            logger.warning(f"Redemption failed for bank={bank_id}, user={user_id}: {exc.code.value}")
            raise

        crud_exam_token.bind_attempt(db, token_id=token_row.id, attempt_id=attempt.id)

        logger.info(
            f"Attempt {attempt.id} created: bank={bank_id}, user={user_id}, "
            f"remaining balance={remaining_balance}"
        )
        return attempt, remaining_balance

    def get_attempt_questions(self, db: Session, attempt_id: int, user_id: int) -> List[ExamQuestion]:
        attempt = self._get_attempt(db, attempt_id)
        if attempt.user_id != user_id:
            raise Forbidden()
        self._require_in_progress(attempt)

        questions = question_bank_service.get_eligible_questions(db, attempt.bank_id)
        answers = crud_attempt_answer.get_all_by_attempt(db, attempt_id=attempt.id)
        answers_by_question = {answer.question_id: answer for answer in answers}

        return question_bank_service.present_questions(questions, answers_by_question)

    def answer(
        self,
        db: Session,
        attempt_id: int,
        question_id: int,
        selected_option_id: int,
        user_id: Optional[int] = None
    ) -> AttemptAnswer:
        attempt = self._get_attempt(db, attempt_id)
        self._require_ownership(attempt, user_id)
        self._require_in_progress(attempt)

        question = crud_question.get(db, id=question_id)
        if not question or question.bank_id != attempt.bank_id:
            raise NotFound("Question not found.")
        if not question_bank_service.is_exam_eligible(question):
            raise NotFound("Question not found.")

        option = next((o for o in question.options if o.id == selected_option_id), None)
        if option is None:
            raise InvalidOption()

        is_correct = question_bank_service.is_correct_choice(question, option)

        # Holds the attempt row until commit; a concurrent finish either ran first or waits
        if not crud_exam_attempt.lock_in_progress(db, attempt_id=attempt.id):
            raise InvalidState()

        return crud_attempt_answer.upsert(
            db,
            attempt_id=attempt.id,
            question_id=question.id,
            selected_option_id=option.id,
            is_correct=is_correct
        )

    def finish(self, db: Session, attempt_id: int, user_id: Optional[int] = None) -> ExamAttemptFinished:
        """Freeze score and total. A finished attempt is returned as stored."""
        attempt = self._get_attempt(db, attempt_id)
        self._require_ownership(attempt, user_id)

        if attempt.status != ExamAttemptStatusEnum.FINISHED:
            # Flip the status before counting so no answer can land after the count
            if crud_exam_attempt.mark_finished(db, attempt_id=attempt.id, finished_at=datetime.utcnow()):
                total = question_bank_service.count_eligible_questions(db, attempt.bank_id)
                score = crud_attempt_answer.count_correct_by_attempt(db, attempt_id=attempt.id)
                crud_exam_attempt.freeze_score(db, attempt_id=attempt.id, score=score, total=total)
                logger.info(f"Attempt {attempt.id} finished: score={score}/{total}")
            attempt = self._get_attempt(db, attempt_id)

        stats = attempt_review_service.attempt_stats(db, attempt)
        return ExamAttemptFinished(
            attempt_id=attempt.id,
            status=attempt.status,
            score=attempt.score,
            total=attempt.total,
            finished_at=attempt.finished_at,
            stats=stats
        )


exam_attempt_service = ExamAttemptService()
