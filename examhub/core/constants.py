from decimal import Decimal
from enum import Enum


MONEY_QUANTUM = Decimal("0.01")

class ExamAttemptStatusEnum(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"

class BalanceTransactionTypeEnum(str, Enum):
    ATTEMPT_DEBIT = "attempt_debit"
    ADMIN_TOPUP = "admin_topup"
    PAYMENT_CREDIT = "payment_credit"

# Types that take money out of the user's balance. Everything else is a credit.
DEBIT_TRANSACTION_TYPES = frozenset({BalanceTransactionTypeEnum.ATTEMPT_DEBIT})

class ErrorCodeEnum(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_MISMATCH = "TOKEN_MISMATCH"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_ALREADY_USED = "TOKEN_ALREADY_USED"
    BANK_NOT_FOUND = "BANK_NOT_FOUND"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    NO_ELIGIBLE_QUESTIONS = "NO_ELIGIBLE_QUESTIONS"
    INVALID_PRICE = "INVALID_PRICE"
    INVALID_OPTION = "INVALID_OPTION"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    UNAUTHORIZED = "UNAUTHORIZED"
