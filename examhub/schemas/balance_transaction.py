from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal

from examhub.core.constants import BalanceTransactionTypeEnum
from examhub.crud.base import PaginatedResponse

class BalanceTransactionCreate(BaseModel):
    user_id: int
    amount: Decimal
    transaction_type: BalanceTransactionTypeEnum
    balance_before: Decimal
    balance_after: Decimal
    attempt_id: Optional[int] = None
    bank_id: Optional[int] = None
    initiator_id: Optional[int] = None
    note: Optional[str] = None

class BalanceTransactionSchema(BaseModel):
    id: int
    user_id: int
    amount: Decimal
    transaction_type: BalanceTransactionTypeEnum
    balance_before: Decimal
    balance_after: Decimal
    attempt_id: Optional[int] = None
    bank_id: Optional[int] = None
    initiator_id: Optional[int] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BalanceHistory(PaginatedResponse[BalanceTransactionSchema]):
    """A page of ledger entries plus the current balance."""
    balance: Decimal

class BalanceTopUp(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    note: Optional[str] = None

class BalanceTopUpResult(BaseModel):
    user_id: int
    balance: Decimal
    transaction: BalanceTransactionSchema

class BalanceReconciliation(BaseModel):
    user_id: int
    balance: Decimal
    ledger_balance: Decimal
    entries: int
    consistent: bool
