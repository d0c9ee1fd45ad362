from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from examhub.schemas.response import APIResponse
from examhub.utils import deps
from examhub.schemas.attempt_answer import AttemptAnswer, AttemptAnswerCreate, AttemptAnswerDetail
from examhub.schemas.exam_attempt import ExamAttemptFinished, ExamAttemptQuestions
from examhub.schemas.review import AttemptReview, AttemptSummary
from examhub.services.exam_attempt import exam_attempt_service
from examhub.services.attempt_review import attempt_review_service

router = APIRouter()

@router.get("/{attempt_id}/questions", response_model=APIResponse[ExamAttemptQuestions])
async def get_attempt_questions(
    *,
    db: Session = Depends(deps.get_db),
    attempt_id: int,
    user_id: int = Query(...)
):
    questions = exam_attempt_service.get_attempt_questions(db, attempt_id=attempt_id, user_id=user_id)
    return APIResponse(
        message="Attempt questions retrieved successfully",
        data=ExamAttemptQuestions(attempt_id=attempt_id, questions=questions)
    )


@router.post("/{attempt_id}/answer", response_model=APIResponse[AttemptAnswer])
async def submit_answer(
    *,
    db: Session = Depends(deps.get_transactional_db),
    attempt_id: int,
    answer_in: AttemptAnswerCreate
):
    attempt_answer = exam_attempt_service.answer(
        db,
        attempt_id=attempt_id,
        question_id=answer_in.question_id,
        selected_option_id=answer_in.selected_option_id,
        user_id=answer_in.user_id
    )
    return APIResponse(message="Answer submitted successfully", data=AttemptAnswer.model_validate(attempt_answer))


@router.post("/{attempt_id}/finish", response_model=APIResponse[ExamAttemptFinished])
async def finish_attempt(
    *,
    db: Session = Depends(deps.get_transactional_db),
    attempt_id: int,
    user_id: Optional[int] = Query(None)
):
    result = exam_attempt_service.finish(db, attempt_id=attempt_id, user_id=user_id)
    return APIResponse(message="Exam attempt finished", data=result)


@router.get("/{attempt_id}/summary", response_model=APIResponse[AttemptSummary])
async def get_attempt_summary(
    *,
    db: Session = Depends(deps.get_db),
    attempt_id: int,
    user_id: Optional[int] = Query(None)
):
    summary = attempt_review_service.summary(db, attempt_id=attempt_id, user_id=user_id)
    return APIResponse(message="Attempt summary retrieved successfully", data=summary)


@router.get("/{attempt_id}/answers", response_model=APIResponse[List[AttemptAnswerDetail]])
async def get_attempt_answers(
    *,
    db: Session = Depends(deps.get_db),
    attempt_id: int,
    user_id: Optional[int] = Query(None)
):
    answers = attempt_review_service.attempt_answers(db, attempt_id=attempt_id, user_id=user_id)
    return APIResponse(message="Attempt answers retrieved successfully", data=answers)


@router.get("/{attempt_id}/review", response_model=APIResponse[AttemptReview])
async def review_attempt(
    *,
    db: Session = Depends(deps.get_db),
    attempt_id: int,
    user_id: int = Query(...)
):
    review = attempt_review_service.review_attempt(db, attempt_id=attempt_id, user_id=user_id)
    return APIResponse(message="Attempt review retrieved successfully", data=review)
