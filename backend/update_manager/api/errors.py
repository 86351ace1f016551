"""Utilities for translating domain errors to HTTP responses."""

from fastapi import HTTPException, status

from update_manager.domain.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)


def to_http(exc: DomainError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    if isinstance(exc, UnauthorizedError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
    if isinstance(exc, StorageError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)


def error_body(exc: DomainError) -> dict:
    """Client-facing error envelope; storage failures only expose a log reference."""
    body = {"error": exc.message}
    if isinstance(exc, StorageError):
        body["details"] = f"Reference: {exc.reference}"
    return body
