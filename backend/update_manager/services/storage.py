"""Helpers for turning database failures into client-safe errors."""

from __future__ import annotations

import logging
import uuid

from update_manager.domain.exceptions import StorageError


def new_reference() -> str:
    """Short id tying a client-facing 500 to its server-side log entry."""
    return uuid.uuid4().hex[:12]


def storage_error(log: logging.Logger | logging.LoggerAdapter, operation: str) -> StorageError:
    """Log the exception being handled under a fresh reference and wrap it.

    Must be called from inside an ``except`` block. The traceback goes to the
    server log only; the client sees the reference.
    """
    reference = new_reference()
    log.exception("Storage failure during %s", operation, extra={"reference": reference})
    return StorageError(reference=reference)
