from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from examhub.models.user import User
from examhub.schemas.response import APIResponse
from examhub.schemas.balance_transaction import BalanceHistory
from examhub.services.ledger import ledger_service
from examhub.utils import deps

router = APIRouter()

@router.get("/balance-history", response_model=APIResponse[BalanceHistory])
async def get_my_balance_history(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
    page: int = Query(1),
    limit: int = Query(20)
):
    history = ledger_service.balance_history(db, user_id=current_user.id, page=page, limit=limit)
    return APIResponse(message="Balance history retrieved successfully", data=history)
