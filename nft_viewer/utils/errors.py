"""
Error handling utilities for NFT Viewer.

This module defines the exception taxonomy used across the resolution
pipeline and the decorator that turns those exceptions into CLI exit codes.
"""

import functools
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar, cast

from pydantic import BaseModel

F = TypeVar('F', bound=Callable[..., Any])

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes for the NFT Viewer pipeline."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Contract-call errors
    CONTRACT_CALL_ERROR = "CONTRACT_CALL_ERROR"
    TOKEN_URI_ERROR = "TOKEN_URI_ERROR"

    # Remote fetch errors
    FETCH_ERROR = "FETCH_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    MISSING_FIELD = "MISSING_FIELD"

    # Image errors
    DECODE_ERROR = "DECODE_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


class ErrorResponse(BaseModel):
    """Serializable error summary."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class NFTViewerError(Exception):
    """Base exception for all NFT Viewer errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new NFT Viewer error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return ErrorResponse(
            code=self.code.value,
            message=self.message,
            details=self.details
        ).model_dump()


class ValidationError(NFTViewerError):
    """Exception for invalid user input or configuration."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=details
        )


class ContractCallError(NFTViewerError):
    """Exception for a failed read-only contract call."""

    def __init__(
        self,
        message: str,
        method: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.CONTRACT_CALL_ERROR
    ):
        error_details = details or {}
        error_details["method"] = method

        super().__init__(
            message=message,
            code=code,
            details=error_details
        )
        self.method = method


class TokenUriError(ContractCallError):
    """Exception for a token whose URI cannot be read from the contract."""

    def __init__(
        self,
        message: str,
        token_id: int,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details["token_id"] = str(token_id)

        super().__init__(
            message=message,
            method="tokenURI",
            details=error_details,
            code=ErrorCode.TOKEN_URI_ERROR
        )
        self.token_id = token_id


class FetchError(NFTViewerError):
    """Exception for network or transport failures during a GET."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None
    ):
        details: Dict[str, Any] = {"url": url}
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            code=ErrorCode.FETCH_ERROR,
            details=details
        )
        self.url = url
        self.status_code = status_code


class ParseError(NFTViewerError):
    """Exception for a response body that is not valid JSON."""

    def __init__(
        self,
        message: str,
        url: str
    ):
        super().__init__(
            message=message,
            code=ErrorCode.PARSE_ERROR,
            details={"url": url}
        )
        self.url = url


class MissingFieldError(NFTViewerError):
    """Exception for a metadata field that is absent or of the wrong type."""

    def __init__(
        self,
        field: str,
        expected_type: str,
        context: Optional[str] = None
    ):
        message = f"Metadata field '{field}' is missing or not a {expected_type}"
        if context:
            message = f"{message} ({context})"

        super().__init__(
            message=message,
            code=ErrorCode.MISSING_FIELD,
            details={"field": field, "expected_type": expected_type}
        )
        self.field = field


class DecodeError(NFTViewerError):
    """Exception for bytes that are not a recognized image format."""

    def __init__(
        self,
        message: str,
        url: str
    ):
        super().__init__(
            message=message,
            code=ErrorCode.DECODE_ERROR,
            details={"url": url}
        )
        self.url = url


class StorageError(NFTViewerError):
    """Exception for filesystem failures while saving an image."""

    def __init__(
        self,
        message: str,
        path: str
    ):
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            details={"path": path}
        )
        self.path = path


def handle_cli_errors(func: F) -> F:
    """
    Decorator to turn pipeline errors into a CLI exit status.

    The wrapped coroutine returns an int exit status. Any NFTViewerError is
    logged with its serialized body under the record's ``error`` attribute,
    printed, and mapped to status 1. Everything else propagates.

    Args:
        func: The coroutine function to decorate

    Returns:
        The decorated function
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> int:
        try:
            return await func(*args, **kwargs)
        except NFTViewerError as e:
            logger.error(f"{e.code.value}: {e.message}", extra={"error": e.to_dict()})
            print(f"Error: {e.message}")
            return 1

    return cast(F, wrapper)
