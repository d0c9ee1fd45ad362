from typing import Any, Dict, Optional
from fastapi import HTTPException, status

from examhub.core.constants import ErrorCodeEnum


class ExamHubError(HTTPException):
    """Client error carrying a machine-readable code next to the HTTP status.

    Every failure of the attempt subsystem is a client error. The global
    exception handler renders ``code`` so callers can tell apart, for example,
    an expired token from one that was already redeemed.
    """
    code: ErrorCodeEnum = ErrorCodeEnum.NOT_FOUND
    status_code_default: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed."

    def __init__(self, detail: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code_default, detail=detail or self.default_detail)
        self.details = details


class NotFound(ExamHubError):
    code = ErrorCodeEnum.NOT_FOUND
    default_detail = "Resource not found."

class Forbidden(ExamHubError):
    code = ErrorCodeEnum.FORBIDDEN
    default_detail = "This attempt does not belong to this user."

class InvalidState(ExamHubError):
    code = ErrorCodeEnum.INVALID_STATE
    default_detail = "Attempt is not in progress."

class InvalidToken(ExamHubError):
    code = ErrorCodeEnum.INVALID_TOKEN
    default_detail = "Token not found."

class TokenMismatch(ExamHubError):
    code = ErrorCodeEnum.TOKEN_MISMATCH
    default_detail = "Token does not belong to this bank and user."

class TokenExpired(ExamHubError):
    code = ErrorCodeEnum.TOKEN_EXPIRED
    default_detail = "Token expired."

class TokenAlreadyUsed(ExamHubError):
    code = ErrorCodeEnum.TOKEN_ALREADY_USED
    default_detail = "Token already used."

class BankNotFound(ExamHubError):
    code = ErrorCodeEnum.BANK_NOT_FOUND
    default_detail = "Bank not found."

class InsufficientBalance(ExamHubError):
    code = ErrorCodeEnum.INSUFFICIENT_BALANCE
    default_detail = "Insufficient balance."

class NoEligibleQuestions(ExamHubError):
    code = ErrorCodeEnum.NO_ELIGIBLE_QUESTIONS
    default_detail = "No questions found for this exam."

class InvalidPrice(ExamHubError):
    code = ErrorCodeEnum.INVALID_PRICE
    default_detail = "Bank price is invalid."

class InvalidOption(ExamHubError):
    code = ErrorCodeEnum.INVALID_OPTION
    default_detail = "Option does not belong to this question."

class InvalidAmount(ExamHubError):
    code = ErrorCodeEnum.INVALID_AMOUNT
    default_detail = "Amount must be positive."

class Unauthorized(ExamHubError):
    code = ErrorCodeEnum.UNAUTHORIZED
    status_code_default = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"
