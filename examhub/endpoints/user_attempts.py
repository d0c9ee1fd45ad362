from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from examhub.core.constants import ExamAttemptStatusEnum
from examhub.schemas.response import APIResponse
from examhub.schemas.exam_attempt import ExamAttemptHistoryItem
from examhub.services.attempt_review import attempt_review_service
from examhub.utils import deps

router = APIRouter()

@router.get("/{user_id}/attempts", response_model=APIResponse[List[ExamAttemptHistoryItem]])
async def get_user_attempts(
    *,
    db: Session = Depends(deps.get_db),
    user_id: int,
    status: Optional[ExamAttemptStatusEnum] = Query(None)
):
    attempts = attempt_review_service.user_attempts(db, user_id=user_id, status=status)
    return APIResponse(message="User attempts retrieved successfully", data=attempts)
