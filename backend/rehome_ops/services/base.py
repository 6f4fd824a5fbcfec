# backend/rehome_ops/services/base.py
"""
Base Service Pattern for the Rehome operations console

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Store error translation
- Performance monitoring
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException, ServiceException, StoreUnavailableException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    Provides common patterns for:
    - Database session management
    - Logging
    - Transaction handling
    - Performance monitoring
    """

    def __init__(self, db: Session):
        """
        Initialize base service.

        Args:
            db: Database session
        """
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                self.repository.insert_schedule_assignments(rows)
                # commit is handled automatically
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}")
        except Exception as e:
            self.logger.error(f"Unexpected error in transaction: {str(e)}")
            self.db.rollback()
            raise

    @contextmanager
    def store_operation(self, operation: str, target: Optional[str] = None) -> Iterator[None]:
        """
        Translate data access failures into StoreUnavailableException.

        Usage:
            with self.store_operation("list_date_blocks", target="2025-06-10"):
                blocks = self.repository.list_date_blocks(day)
        """
        try:
            yield
        except (RepositoryException, SQLAlchemyError) as e:
            self.logger.error(
                f"Store failure during {operation}"
                + (f" for {target}" if target else "")
                + f": {str(e)}"
            )
            raise StoreUnavailableException(operation, target=target, cause=e) from e
        except ServiceException as e:
            if isinstance(e, StoreUnavailableException):
                raise
            raise StoreUnavailableException(operation, target=target, cause=e) from e

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("get_calendar_month")
            def get_calendar_month(self, year, month):
                ...
        """

        def decorator(func: F) -> F:
            func._operation_name = operation_name  # type: ignore[attr-defined]
            func._is_measured = True  # type: ignore[attr-defined]

            @wraps(func)
            def wrapper(self, *args, **kwargs):
                start_time = time.time()
                success = False
                error_type = None

                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    elapsed = time.time() - start_time
                    self._record_metric(operation_name, elapsed, success, error_type)

                    # Only log if it's actually slow
                    if elapsed > SLOW_OPERATION_SECONDS and hasattr(self, "logger"):
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )

            return cast(F, wrapper)

        return decorator

    @contextmanager
    def measure_operation_context(self, operation_name: str) -> Iterator[None]:
        """
        Context manager to measure operation performance.

        Usage:
            with self.measure_operation_context("bulk_assign_date"):
                # Do work here
                pass
        """
        start_time = time.time()
        success = False
        error_type = None

        try:
            yield
            success = True
        except Exception as e:
            error_type = type(e).__name__
            raise
        finally:
            elapsed = time.time() - start_time
            self._record_metric(operation_name, elapsed, success, error_type)

            if elapsed > SLOW_OPERATION_SECONDS:
                self.logger.warning(
                    f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                )

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log an operation with context.

        Args:
            operation: Operation name
            **context: Additional context to log
        """
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def _record_metric(
        self, operation: str, elapsed: float, success: bool, error_type: Optional[str] = None
    ) -> None:
        """
        Record performance metrics in Prometheus.

        Args:
            operation: Operation name
            elapsed: Time taken in seconds
            success: Whether operation succeeded
            error_type: Exception class name on failure
        """
        prometheus_metrics.record_service_operation(
            service=self.__class__.__name__,
            operation=operation,
            duration=elapsed,
            status="success" if success else "error",
            error_type=error_type,
        )
