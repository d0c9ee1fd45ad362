from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examhub.schemas.response import APIResponse
from examhub.schemas.balance_transaction import (
    BalanceReconciliation,
    BalanceTopUp,
    BalanceTopUpResult,
    BalanceTransactionSchema,
)
from examhub.services.ledger import ledger_service
from examhub.utils import deps

router = APIRouter(dependencies=[Depends(deps.require_admin_api_key)])

@router.post("/users/{public_id}/top-up", response_model=APIResponse[BalanceTopUpResult])
async def top_up_user_balance(
    *,
    db: Session = Depends(deps.get_transactional_db),
    public_id: str,
    top_up_in: BalanceTopUp
):
    user_id, balance, entry = ledger_service.top_up_by_public_id(
        db, public_id=public_id, amount=top_up_in.amount, note=top_up_in.note
    )
    return APIResponse(
        message="Balance topped up successfully",
        data=BalanceTopUpResult(
            user_id=user_id,
            balance=balance,
            transaction=BalanceTransactionSchema.model_validate(entry)
        )
    )


@router.get("/users/{user_id}/reconcile", response_model=APIResponse[BalanceReconciliation])
async def reconcile_user_balance(
    *,
    db: Session = Depends(deps.get_db),
    user_id: int
):
    result = ledger_service.reconcile(db, user_id=user_id)
    return APIResponse(message="Balance reconciled", data=result)
