from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from examhub.crud.base import CRUDBase
from examhub.models.exam_token import ExamToken

class CRUDExamToken(CRUDBase[ExamToken, dict]):
    def get_by_token_value(self, db: Session, *, token: str) -> Optional[ExamToken]:
        return (
            db.query(ExamToken)
            .populate_existing()
            .filter(ExamToken.token == token)
            .first()
        )

    def claim(self, db: Session, *, token_id: int, now: datetime) -> int:
        """Mark the token used only if nobody has used, bound or outlived it yet.

        The affected row count tells the caller whether it won the token.
        """
        return (
            db.query(ExamToken)
            .filter(
                ExamToken.id == token_id,
                ExamToken.used_at.is_(None),
                ExamToken.attempt_id.is_(None),
                ExamToken.expires_at >= now
            )
            .update({ExamToken.used_at: now}, synchronize_session="fetch")
        )

    def release_claim(self, db: Session, *, token_id: int) -> int:
        """Undo a claim that did not lead to an attempt. Bound tokens are left alone."""
        return (
            db.query(ExamToken)
            .filter(ExamToken.id == token_id, ExamToken.attempt_id.is_(None))
            .update({ExamToken.used_at: None}, synchronize_session="fetch")
        )

    def bind_attempt(self, db: Session, *, token_id: int, attempt_id: int) -> int:
        return (
            db.query(ExamToken)
            .filter(ExamToken.id == token_id, ExamToken.attempt_id.is_(None))
            .update({ExamToken.attempt_id: attempt_id}, synchronize_session="fetch")
        )

    def revoke_scoped(self, db: Session, *, bank_id: int, user_id: int, token: str, now: datetime) -> int:
        return (
            db.query(ExamToken)
            .filter(
                ExamToken.bank_id == bank_id,
                ExamToken.user_id == user_id,
                ExamToken.token == token,
                ExamToken.used_at.is_(None)
            )
            .update({ExamToken.used_at: now}, synchronize_session="fetch")
        )

    def delete_scoped(self, db: Session, *, bank_id: int, user_id: int, token: str) -> int:
        return (
            db.query(ExamToken)
            .filter(
                ExamToken.bank_id == bank_id,
                ExamToken.user_id == user_id,
                ExamToken.token == token,
                ExamToken.attempt_id.is_(None)
            )
            .delete(synchronize_session="fetch")
        )

exam_token = CRUDExamToken(ExamToken)
