"""
核心功能包
"""

from .exceptions import (
    VoicePairException,
    ValidationError,
    UnknownAudioReferenceError,
    PayloadTooLargeError,
    ParseError,
    StorageError,
    NotFoundError,
    MethodNotAllowedError,
    exception_to_response
)

from .logging import (
    setup_logging,
    get_logger,
    api_logger,
    service_logger,
    storage_logger
)

from .middleware import (
    RequestLoggingMiddleware,
    ExceptionHandlingMiddleware,
    CORSHeadersMiddleware
)

__all__ = [
    # Exceptions
    "VoicePairException",
    "ValidationError",
    "UnknownAudioReferenceError",
    "PayloadTooLargeError",
    "ParseError",
    "StorageError",
    "NotFoundError",
    "MethodNotAllowedError",
    "exception_to_response",

    # Logging
    "setup_logging",
    "get_logger",
    "api_logger",
    "service_logger",
    "storage_logger",

    # Middleware
    "RequestLoggingMiddleware",
    "ExceptionHandlingMiddleware",
    "CORSHeadersMiddleware",
]
