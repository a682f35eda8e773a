"""
Base classes and utilities for the service layer.

This module provides the ServiceResult pattern (inspired by Rust's Result type),
the fixed error code enumeration and the BaseService class for all marketplace
services.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Generic, Optional, TypeVar

from infrastructure.store import StoreException
from marketplace.infra.observability.metrics import store_errors_total

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    A result type that encapsulates success or failure from service operations.

    Inspired by Rust's Result<T, E> type, this provides a clean way to handle
    service operation outcomes without exceptions for expected failures.

    Attributes:
        ok: True if operation succeeded, False otherwise
        value: The success value (present if ok=True)
        error: Error code from ErrorCodes (present if ok=False)
        error_detail: Human-readable error message (present if ok=False)
        details: Optional structured context, e.g. per-item batch errors

    Examples:
        >>> result = service_ok(cart)
        >>> if result.ok:
        ...     return Response(result.value, 200)

        >>> result = service_err(ErrorCodes.NOT_FOUND, "Product not found")
        >>> print(result.error)  # "not_found"
        >>> print(result.error_detail)  # "Product not found"
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None
    details: Optional[dict] = None

    def map(self, func: Callable[[T], Any]) -> "ServiceResult":
        """
        Transform the success value if ok=True, otherwise pass through error.

        Args:
            func: Function to apply to the value

        Returns:
            ServiceResult with transformed value or original error
        """
        if self.ok:
            try:
                return service_ok(func(self.value))
            except Exception as e:
                return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
        return self

    def flat_map(self, func: Callable[[T], "ServiceResult"]) -> "ServiceResult":
        """
        Chain service operations that return ServiceResult.

        Args:
            func: Function that takes value and returns ServiceResult

        Returns:
            Result from func if ok=True, otherwise original error
        """
        if self.ok:
            return func(self.value)
        return self

    def to_dict(self) -> dict:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with 'success' and either 'data' or 'error'
        """
        if self.ok:
            return {"success": True, "data": self.value}
        return {
            "success": False,
            "error": {"code": self.error, "message": self.error_detail, "details": self.details},
        }


def service_ok(value: T) -> ServiceResult[T]:
    """
    Create a successful ServiceResult.

    Args:
        value: The success value

    Returns:
        ServiceResult with ok=True and the value
    """
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "", details: Optional[dict] = None) -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code from ErrorCodes (e.g. "not_found")
        error_detail: Human-readable error message
        details: Optional structured context

    Returns:
        ServiceResult with ok=False and error information

    Example:
        >>> return service_err(ErrorCodes.NOT_FOUND, "Cart item not found")
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error, details=details)


class ErrorCodes:
    """The fixed set of error codes returned by marketplace services."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    INTERNAL_ERROR = "internal_error"
    VALIDATION_ERROR = "validation_error"

    # Requested quantity exceeds stock
    OUT_OF_STOCK = BAD_REQUEST

    ALL = (UNAUTHORIZED, FORBIDDEN, NOT_FOUND, BAD_REQUEST, CONFLICT, INTERNAL_ERROR, VALIDATION_ERROR)


def error_code_for_store_exception(exc: StoreException) -> str:
    """
    Map a store failure's SQLSTATE code onto an ErrorCodes value.

    Args:
        exc: The StoreException raised by a store implementation

    Returns:
        One of the ErrorCodes values
    """
    code = exc.code or ""

    if code == "23505":  # unique_violation
        return ErrorCodes.CONFLICT
    if code in ("42P01", "42703"):  # undefined_table / undefined_column
        return ErrorCodes.INTERNAL_ERROR
    if code == "23503":  # foreign_key_violation
        return ErrorCodes.BAD_REQUEST
    if code in ("23502", "22P02"):  # not_null_violation / invalid_text_representation
        return ErrorCodes.VALIDATION_ERROR
    if code.startswith("28"):  # invalid authorization
        return ErrorCodes.UNAUTHORIZED
    if code.startswith("42"):  # syntax error or access rule violation
        return ErrorCodes.BAD_REQUEST
    return ErrorCodes.INTERNAL_ERROR


def is_positive_int(value: Any) -> bool:
    """True for ints >= 1; bools are rejected."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


class BaseService:
    """
    Base class for all services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator
    - Store error translation at the service boundary

    Usage:
        class WishlistService(BaseService):
            def __init__(self, store):
                super().__init__()
                self.store = store

            @BaseService.log_performance
            def get_wishlist(self, user):
                self.logger.info(f"Fetching wishlist for user {user.id}")
                # ... implementation
    """

    def __init__(self):
        """Initialize base service with logger."""
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time and any errors that occur.

        Args:
            func: The service method to wrap

        Returns:
            Wrapped function with performance logging
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper

    def store_error(self, exc: StoreException, operation: str) -> ServiceResult:
        """
        Log a store failure and convert it into a failed ServiceResult.

        Args:
            exc: The StoreException raised by the store
            operation: Short description used in the log line

        Returns:
            ServiceResult carrying the mapped error code
        """
        error_code = error_code_for_store_exception(exc)
        store_errors_total.labels(code=exc.code or "unknown").inc()
        self.logger.error(
            f"Store error while {operation}: {exc.message} (code={exc.code}, hint={exc.hint})",
            exc_info=True,
        )
        return service_err(error_code, exc.message)

    def unexpected_error(self, exc: Exception, operation: str) -> ServiceResult:
        """Log an uncategorized failure and return internal_error."""
        self.logger.error(f"Unexpected error while {operation}: {str(exc)}", exc_info=True)
        return service_err(ErrorCodes.INTERNAL_ERROR, str(exc))


def parse_int(value: Any) -> Optional[int]:
    """Coerce a query-style value to int; None when it is missing or malformed."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
