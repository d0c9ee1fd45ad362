from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from examhub.schemas.response import APIResponse
from examhub.utils import deps
from examhub.schemas.exam_token import (
    ExamTokenRequest,
    ExamTokenScopedRequest,
    ExamTokenIssued,
    ExamTokenRevoked,
    ExamTokenDeleted,
)
from examhub.schemas.exam_attempt import ExamAttempt, ExamAttemptCreate, ExamAttemptRedeemed
from examhub.services.exam_token import exam_token_service
from examhub.services.exam_attempt import exam_attempt_service

router = APIRouter()

@router.post("/{bank_id}/exam-token", response_model=APIResponse[ExamTokenIssued], status_code=status.HTTP_201_CREATED)
async def create_exam_token(
    *,
    db: Session = Depends(deps.get_transactional_db),
    bank_id: int,
    token_in: ExamTokenRequest
):
    token_row = exam_token_service.issue(
        db, bank_id=bank_id, user_id=token_in.user_id, ttl_minutes=token_in.ttl_minutes
    )
    return APIResponse(
        message="Exam token issued successfully",
        data=ExamTokenIssued(
            token=token_row.token,
            expires_at=token_row.expires_at,
            url=f"/exam-token/{token_row.token}"
        )
    )


@router.post("/{bank_id}/exam-token/revoke", response_model=APIResponse[ExamTokenRevoked])
async def revoke_exam_token(
    *,
    db: Session = Depends(deps.get_transactional_db),
    bank_id: int,
    token_in: ExamTokenScopedRequest
):
    count = exam_token_service.revoke(db, bank_id=bank_id, user_id=token_in.user_id, token=token_in.token)
    return APIResponse(message="Exam token revocation processed", data=ExamTokenRevoked(revoked=count > 0))


@router.post("/{bank_id}/exam-token/delete", response_model=APIResponse[ExamTokenDeleted])
async def delete_exam_token(
    *,
    db: Session = Depends(deps.get_transactional_db),
    bank_id: int,
    token_in: ExamTokenScopedRequest
):
    count = exam_token_service.delete(db, bank_id=bank_id, user_id=token_in.user_id, token=token_in.token)
    return APIResponse(message="Exam token deletion processed", data=ExamTokenDeleted(deleted=count > 0))


@router.post("/{bank_id}/attempts", response_model=APIResponse[ExamAttemptRedeemed], status_code=status.HTTP_201_CREATED)
async def create_attempt_with_token(
    *,
    db: Session = Depends(deps.get_transactional_db),
    bank_id: int,
    attempt_in: ExamAttemptCreate
):
    attempt, remaining_balance = exam_attempt_service.redeem_and_create_attempt(
        db, bank_id=bank_id, user_id=attempt_in.user_id, token=attempt_in.token
    )
    return APIResponse(
        message="Exam attempt ready",
        data=ExamAttemptRedeemed(
            attempt_id=attempt.id,
            remaining_balance=remaining_balance,
            attempt=ExamAttempt.model_validate(attempt)
        )
    )
