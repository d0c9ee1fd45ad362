import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union
from sqlalchemy.orm import Session

from examhub.core.config import settings
from examhub.core.constants import (
    MONEY_QUANTUM,
    BalanceTransactionTypeEnum,
    DEBIT_TRANSACTION_TYPES,
)
from examhub.core.exceptions import InvalidAmount, NotFound
from examhub.crud.balance_transaction import balance_transaction as crud_balance_transaction
from examhub.crud.user import user as crud_user
from examhub.models.balance_transaction import BalanceTransaction
from examhub.schemas.balance_transaction import (
    BalanceHistory,
    BalanceReconciliation,
    BalanceTransactionCreate,
    BalanceTransactionSchema,
)

logger = logging.getLogger(__name__)


def to_money(value: Union[Decimal, float, int, str, None]) -> Decimal:
    return Decimal(str(value if value is not None else 0)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def signed_amount(entry: BalanceTransaction) -> Decimal:
    amount = to_money(entry.amount)
    return -amount if entry.transaction_type in DEBIT_TRANSACTION_TYPES else amount


class LedgerService:
    """Append-only balance ledger.

    Callers change ``users.balance`` with a conditional UPDATE first and then
    record the entry here with the balance read back from the row. The entry
    derives ``balance_before`` from that value and the amount, so each row is a
    faithful before/after snapshot of one balance change.
    """

    def _record(
        self,
        db: Session,
        *,
        user_id: int,
        amount: Decimal,
        transaction_type: BalanceTransactionTypeEnum,
        balance_after: Decimal,
        attempt_id: Optional[int] = None,
        bank_id: Optional[int] = None,
        initiator_id: Optional[int] = None,
        note: Optional[str] = None
    ) -> BalanceTransaction:
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidAmount()

        balance_after = to_money(balance_after)
        if transaction_type in DEBIT_TRANSACTION_TYPES:
            balance_before = balance_after + amount
        else:
            balance_before = balance_after - amount

        entry = crud_balance_transaction.append(
            db,
            obj_in=BalanceTransactionCreate(
                user_id=user_id,
                amount=amount,
                transaction_type=transaction_type,
                balance_before=balance_before,
                balance_after=balance_after,
                attempt_id=attempt_id,
                bank_id=bank_id,
                initiator_id=initiator_id,
                note=note
            )
        )
        logger.info(
            f"Ledger {transaction_type.value}: user={user_id}, amount={amount}, "
            f"balance {balance_before} -> {balance_after}"
        )
        return entry

    def record_debit(
        self,
        db: Session,
        *,
        user_id: int,
        amount: Decimal,
        balance_after: Decimal,
        transaction_type: BalanceTransactionTypeEnum = BalanceTransactionTypeEnum.ATTEMPT_DEBIT,
        attempt_id: Optional[int] = None,
        bank_id: Optional[int] = None,
        note: Optional[str] = None
    ) -> BalanceTransaction:
        if transaction_type not in DEBIT_TRANSACTION_TYPES:
            raise ValueError(f"{transaction_type} is not a debit type")
        return self._record(
            db,
            user_id=user_id,
            amount=amount,
            transaction_type=transaction_type,
            balance_after=balance_after,
            attempt_id=attempt_id,
            bank_id=bank_id,
            note=note
        )

    def record_credit(
        self,
        db: Session,
        *,
        user_id: int,
        amount: Decimal,
        balance_after: Decimal,
        transaction_type: BalanceTransactionTypeEnum = BalanceTransactionTypeEnum.ADMIN_TOPUP,
        initiator_id: Optional[int] = None,
        note: Optional[str] = None
    ) -> BalanceTransaction:
        if transaction_type in DEBIT_TRANSACTION_TYPES:
            raise ValueError(f"{transaction_type} is not a credit type")
        return self._record(
            db,
            user_id=user_id,
            amount=amount,
            transaction_type=transaction_type,
            balance_after=balance_after,
            initiator_id=initiator_id,
            note=note
        )

    def credit(
        self,
        db: Session,
        *,
        user_id: int,
        amount: Decimal,
        transaction_type: BalanceTransactionTypeEnum = BalanceTransactionTypeEnum.ADMIN_TOPUP,
        initiator_id: Optional[int] = None,
        note: Optional[str] = None
    ) -> Tuple[Decimal, BalanceTransaction]:
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidAmount()

        if not crud_user.credit_balance(db, user_id=user_id, amount=amount):
            raise NotFound("User not found.")

        balance_after = to_money(crud_user.get_balance(db, user_id=user_id))
        entry = self.record_credit(
            db,
            user_id=user_id,
            amount=amount,
            balance_after=balance_after,
            transaction_type=transaction_type,
            initiator_id=initiator_id,
            note=note
        )
        return balance_after, entry

    def top_up_by_public_id(
        self, db: Session, *, public_id: str, amount: Decimal, note: Optional[str] = None
    ) -> Tuple[int, Decimal, BalanceTransaction]:
        target = crud_user.get_by_public_id(db, public_id=public_id)
        if not target:
            raise NotFound("User not found.")

        balance, entry = self.credit(
            db,
            user_id=target.id,
            amount=amount,
            transaction_type=BalanceTransactionTypeEnum.ADMIN_TOPUP,
            note=note
        )
        return target.id, balance, entry

    def balance_history(self, db: Session, *, user_id: int, page: int = 1, limit: Optional[int] = None) -> BalanceHistory:
        balance = crud_user.get_balance(db, user_id=user_id)
        if balance is None:
            raise NotFound("User not found.")

        page = max(1, page)
        limit = limit or settings.BALANCE_HISTORY_DEFAULT_LIMIT
        limit = min(settings.BALANCE_HISTORY_MAX_LIMIT, max(1, limit))

        total = crud_balance_transaction.count_by_user(db, user_id=user_id)
        items = crud_balance_transaction.get_page_by_user(
            db, user_id=user_id, skip=(page - 1) * limit, limit=limit
        )
        pages = math.ceil(total / limit) if total else 0

        return BalanceHistory(
            items=[BalanceTransactionSchema.model_validate(item) for item in items],
            total=total,
            page=page,
            size=limit,
            pages=pages,
            has_next=page < pages,
            has_previous=page > 1,
            balance=to_money(balance)
        )

    def reconcile(self, db: Session, *, user_id: int) -> BalanceReconciliation:
        """Replay the ledger and compare it to the stored balance.

        The replay starts from the first entry's ``balance_before`` and also
        checks that every entry starts where the previous one ended.
        """
        balance = crud_user.get_balance(db, user_id=user_id)
        if balance is None:
            raise NotFound("User not found.")
        balance = to_money(balance)

        entries = crud_balance_transaction.get_all_by_user(db, user_id=user_id)
        if not entries:
            return BalanceReconciliation(
                user_id=user_id, balance=balance, ledger_balance=balance, entries=0, consistent=True
            )

        running = to_money(entries[0].balance_before)
        chained = True
        for entry in entries:
            if to_money(entry.balance_before) != running:
                chained = False
            running += signed_amount(entry)
            if to_money(entry.balance_after) != running:
                chained = False

        return BalanceReconciliation(
            user_id=user_id,
            balance=balance,
            ledger_balance=running,
            entries=len(entries),
            consistent=chained and running == balance
        )


ledger_service = LedgerService()
