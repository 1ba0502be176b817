"""
Error taxonomy for the partnership core.
"""
import functools
import logging
from enum import Enum
from typing import Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable reasons the UI can render specific messaging for."""
    ALREADY_PARTNERED = "ALREADY_PARTNERED"
    NOT_AVAILABLE = "NOT_AVAILABLE"
    NO_PREFERENCES = "NO_PREFERENCES"
    NO_MATCHES = "NO_MATCHES"
    LOW_COMPATIBILITY = "LOW_COMPATIBILITY"
    CREATION_FAILED = "CREATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    PARTNERSHIP_NOT_ACTIVE = "PARTNERSHIP_NOT_ACTIVE"
    INVALID_INPUT = "INVALID_INPUT"
    OPERATION_FAILED = "OPERATION_FAILED"


class PartnerHubError(Exception):
    """Base class; every subclass carries an ErrorCode."""
    
    code: ErrorCode = ErrorCode.OPERATION_FAILED
    
    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(PartnerHubError):
    """A required preferences/partnership/goal/task record does not exist."""
    code = ErrorCode.NOT_FOUND


class UnauthorizedError(PartnerHubError):
    """The caller is not a participant allowed to perform the action."""
    code = ErrorCode.NOT_AUTHORIZED


class PreconditionError(PartnerHubError):
    """The action is not allowed in the current state."""
    
    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message, code)


class OperationFailedError(PartnerHubError):
    """The store failed; wraps backend-specific errors."""
    code = ErrorCode.OPERATION_FAILED


class InvalidInputError(PartnerHubError):
    """A value is outside the allowed choices."""
    code = ErrorCode.INVALID_INPUT


E = TypeVar("E", bound=Enum)


def parse_choice(enum_cls: Type[E], value, field: str) -> E:
    """Convert a raw value to an enum member or raise InvalidInputError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidInputError(f"Invalid {field} '{value}'; expected one of: {allowed}")


def wraps_store_errors(action: str):
    """
    Decorator for lookups: re-signal SQLAlchemy errors as OperationFailedError.
    
    Absence is still reported as None by the wrapped function.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Failed to {action}: {e}", exc_info=True)
                raise OperationFailedError(f"Failed to {action}") from e
        return wrapper
    return decorator
