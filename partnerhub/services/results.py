"""
Structured results returned by state-changing service operations.
"""
import functools
import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from .errors import ErrorCode, OperationFailedError, PartnerHubError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """
    Outcome of a public operation.
    
    Attributes:
        success: Whether the action was applied
        message: Human readable summary
        data: The resulting entity on success
        error_code: Reason code on failure
    """
    success: bool
    message: str
    data: Optional[T] = None
    error_code: Optional[ErrorCode] = None
    
    @classmethod
    def ok(cls, data: Any = None, message: str = "OK") -> "OperationResult":
        return cls(success=True, message=message, data=data)
    
    @classmethod
    def fail(cls, error: PartnerHubError) -> "OperationResult":
        return cls(success=False, message=error.message, error_code=error.code)


def guarded_operation(action: str):
    """
    Decorator for service methods that return an OperationResult.
    
    PartnerHubError becomes a failed result. Store errors are logged with
    their traceback, the session is rolled back and the caller gets an
    OPERATION_FAILED result. The decorated method's owner must expose
    ``self.session``.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs) -> OperationResult:
            try:
                return await func(self, *args, **kwargs)
            except PartnerHubError as e:
                logger.warning(f"{action} rejected ({e.code.value}): {e.message}")
                return OperationResult.fail(e)
            except SQLAlchemyError as e:
                logger.error(f"{action} failed: {e}", exc_info=True)
                await self.session.rollback()
                return OperationResult.fail(OperationFailedError(f"Failed to {action}"))
        return wrapper
    return decorator
