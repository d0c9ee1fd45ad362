import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from examhub.core.config import settings
from examhub.core.exceptions import NotFound
from examhub.crud.exam_token import exam_token as crud_exam_token
from examhub.crud.question_bank import question_bank as crud_question_bank
from examhub.crud.user import user as crud_user
from examhub.models.exam_token import ExamToken

logger = logging.getLogger(__name__)


class ExamTokenService:

    def _generate_token(self) -> str:
        return secrets.token_hex(settings.EXAM_TOKEN_BYTES)

    def _resolve_ttl(self, ttl_minutes: Optional[int]) -> int:
        if ttl_minutes is None:
            return settings.EXAM_TOKEN_TTL_MINUTES
        return min(max(1, ttl_minutes), settings.EXAM_TOKEN_MAX_TTL_MINUTES)

    def issue(self, db: Session, bank_id: int, user_id: int, ttl_minutes: Optional[int] = None) -> ExamToken:
        """Create a fresh one-time token. Earlier live tokens for the pair stay valid."""
        bank = crud_question_bank.get(db, id=bank_id)
        if not bank:
            raise NotFound("Bank not found.")

        user = crud_user.get(db, id=user_id)
        if not user:
            raise NotFound("User not found.")

        ttl = self._resolve_ttl(ttl_minutes)
        token_row = crud_exam_token.create(
            db,
            obj_in={
                "token": self._generate_token(),
                "bank_id": bank_id,
                "user_id": user_id,
                "expires_at": datetime.utcnow() + timedelta(minutes=ttl)
            },
            commit=False
        )
        logger.info(f"Exam token issued: bank={bank_id}, user={user_id}, ttl={ttl}m")
        return token_row

    def revoke(self, db: Session, bank_id: int, user_id: int, token: str) -> int:
        revoked = crud_exam_token.revoke_scoped(
            db, bank_id=bank_id, user_id=user_id, token=token, now=datetime.utcnow()
        )
        if revoked:
            logger.info(f"Exam token revoked: bank={bank_id}, user={user_id}")
        return revoked

    def delete(self, db: Session, bank_id: int, user_id: int, token: str) -> int:
        deleted = crud_exam_token.delete_scoped(db, bank_id=bank_id, user_id=user_id, token=token)
        if deleted:
            logger.info(f"Exam token deleted: bank={bank_id}, user={user_id}")
        return deleted


exam_token_service = ExamTokenService()
