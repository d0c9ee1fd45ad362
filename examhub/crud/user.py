from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session

from examhub.crud.base import CRUDBase
from examhub.models.user import User

class CRUDUser(CRUDBase[User, dict]):
    def get_by_public_id(self, db: Session, *, public_id: str) -> Optional[User]:
        return db.query(User).filter(User.public_id == public_id).first()

    def get_balance(self, db: Session, *, user_id: int) -> Optional[Decimal]:
        """Read the balance straight from the row, bypassing any stale instance in the session."""
        return db.query(User.balance).filter(User.id == user_id).scalar()

    def debit_balance(self, db: Session, *, user_id: int, amount: Decimal) -> bool:
        """Conditionally subtract ``amount``; only applies while the balance still covers it.

        Returns False when no row matched, i.e. the user is missing or the
        balance is short. Concurrent debits against the same user serialise on
        the row and the loser sees zero affected rows instead of going negative.
        """
        updated = (
            db.query(User)
            .filter(User.id == user_id, User.balance >= amount)
            .update({User.balance: User.balance - amount}, synchronize_session="fetch")
        )
        return updated == 1

    def credit_balance(self, db: Session, *, user_id: int, amount: Decimal) -> bool:
        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .update({User.balance: User.balance + amount}, synchronize_session="fetch")
        )
        return updated == 1

user = CRUDUser(User)
