# backend/rehome_ops/core/exceptions.py
"""
Domain-specific exceptions for the Rehome operations console.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input validation fails before touching the store."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested record is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific scheduling exceptions


class StoreUnavailableException(ServiceException):
    """
    Raised when the schedule store could not complete a read or write.

    Availability checks must surface this instead of answering "not blocked".
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(
        self,
        operation: str,
        *,
        target: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        details: Dict[str, Any] = {"operation": operation}
        if target:
            details["target"] = target
        if cause is not None:
            details["error"] = str(cause)
        super().__init__(
            message=f"Schedule store unavailable during {operation}"
            + (f" ({target})" if target else ""),
            code="STORE_UNAVAILABLE",
            details=details,
        )
        self.operation = operation
        self.target = target


class ConcurrentModificationException(ConflictException):
    """Raised when the persisted city set diverged from what the operator edited."""

    def __init__(self, schedule_date: date, expected: Iterable[str], actual: Iterable[str]):
        expected_list = sorted(set(expected))
        actual_list = sorted(set(actual))
        super().__init__(
            message=(
                f"Schedule for {schedule_date.isoformat()} changed since it was loaded; "
                "reload and try again"
            ),
            code="CONCURRENT_MODIFICATION",
            details={
                "date": schedule_date.isoformat(),
                "expected_cities": expected_list,
                "actual_cities": actual_list,
            },
        )


class PartialBulkFailureException(BusinessRuleException):
    """Raised in strict mode when some dates of a bulk assignment failed."""

    def __init__(self, succeeded_dates: List[date], failed_dates: List[date]):
        super().__init__(
            message=(
                f"Bulk assignment failed for {len(failed_dates)} of "
                f"{len(succeeded_dates) + len(failed_dates)} dates"
            ),
            code="PARTIAL_BULK_FAILURE",
            details={
                "succeeded_dates": [d.isoformat() for d in succeeded_dates],
                "failed_dates": [d.isoformat() for d in failed_dates],
            },
        )
        self.succeeded_dates = succeeded_dates
        self.failed_dates = failed_dates


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
