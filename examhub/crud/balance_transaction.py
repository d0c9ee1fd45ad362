from sqlalchemy.orm import Session
from typing import List

from examhub.crud.base import CRUDBase
from examhub.models.balance_transaction import BalanceTransaction
from examhub.schemas.balance_transaction import BalanceTransactionCreate

class CRUDBalanceTransaction(CRUDBase[BalanceTransaction, BalanceTransactionCreate]):
    """Append and read only. The ledger has no update or delete path."""

    def append(self, db: Session, *, obj_in: BalanceTransactionCreate) -> BalanceTransaction:
        return self.create(db, obj_in=obj_in, commit=False)

    def get_page_by_user(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 20) -> List[BalanceTransaction]:
        return (
            db.query(BalanceTransaction)
            .filter(BalanceTransaction.user_id == user_id)
            .order_by(BalanceTransaction.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_user(self, db: Session, *, user_id: int) -> int:
        return db.query(BalanceTransaction).filter(BalanceTransaction.user_id == user_id).count()

    def get_all_by_user(self, db: Session, *, user_id: int) -> List[BalanceTransaction]:
        return (
            db.query(BalanceTransaction)
            .filter(BalanceTransaction.user_id == user_id)
            .order_by(BalanceTransaction.id)
            .all()
        )

    def get_by_attempt(self, db: Session, *, attempt_id: int) -> List[BalanceTransaction]:
        return (
            db.query(BalanceTransaction)
            .filter(BalanceTransaction.attempt_id == attempt_id)
            .order_by(BalanceTransaction.id)
            .all()
        )

balance_transaction = CRUDBalanceTransaction(BalanceTransaction)
