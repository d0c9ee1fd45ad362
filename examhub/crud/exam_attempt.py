from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import func

from examhub.core.constants import ExamAttemptStatusEnum
from examhub.crud.base import CRUDBase
from examhub.models.exam_attempt import ExamAttempt

class CRUDExamAttempt(CRUDBase[ExamAttempt, dict]):

    def _query_with_relationships(self, db: Session):
        return db.query(ExamAttempt).options(
            selectinload(ExamAttempt.bank)
        )

    def get(self, db: Session, id: int) -> Optional[ExamAttempt]:
        return (
            self._query_with_relationships(db)
            .populate_existing()
            .filter(ExamAttempt.id == id)
            .first()
        )

    def get_all_by_user(
        self,
        db: Session,
        *,
        user_id: int,
        status: Optional[ExamAttemptStatusEnum] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[ExamAttempt]:
        query = self._query_with_relationships(db).filter(ExamAttempt.user_id == user_id)
        if status == ExamAttemptStatusEnum.FINISHED:
            query = query.filter(
                ExamAttempt.status == ExamAttemptStatusEnum.FINISHED,
                ExamAttempt.finished_at.isnot(None)
            )
        elif status == ExamAttemptStatusEnum.IN_PROGRESS:
            query = query.filter(ExamAttempt.status == ExamAttemptStatusEnum.IN_PROGRESS)
        return (
            query
            .order_by(ExamAttempt.started_at.desc(), ExamAttempt.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def lock_in_progress(self, db: Session, *, attempt_id: int) -> int:
        """Touch the row while it is still IN_PROGRESS.

        Answers call this before writing. The UPDATE holds the attempt row (and on
        SQLite the write lock) until the transaction ends, so an answer and a
        finish on the same attempt are applied one after the other. Zero means the
        attempt is gone or was finished in the meantime.
        """
        return (
            db.query(ExamAttempt)
            .filter(
                ExamAttempt.id == attempt_id,
                ExamAttempt.status == ExamAttemptStatusEnum.IN_PROGRESS
            )
            .update({ExamAttempt.updated_at: func.now()}, synchronize_session=False)
        )

    def mark_finished(self, db: Session, *, attempt_id: int, finished_at: datetime) -> int:
        """IN_PROGRESS -> FINISHED. Only one caller gets a row count of 1."""
        return (
            db.query(ExamAttempt)
            .filter(
                ExamAttempt.id == attempt_id,
                ExamAttempt.status == ExamAttemptStatusEnum.IN_PROGRESS
            )
            .update(
                {
                    ExamAttempt.status: ExamAttemptStatusEnum.FINISHED,
                    ExamAttempt.finished_at: finished_at
                },
                synchronize_session="fetch"
            )
        )

    def freeze_score(self, db: Session, *, attempt_id: int, score: int, total: int) -> int:
        return (
            db.query(ExamAttempt)
            .filter(ExamAttempt.id == attempt_id)
            .update({ExamAttempt.score: score, ExamAttempt.total: total}, synchronize_session="fetch")
        )

exam_attempt = CRUDExamAttempt(ExamAttempt)
