"""Error hierarchy for the transit pipeline.

Each pipeline stage fails with its own :class:`TransitError` subclass, so
callers can tell "the upload was rejected" apart from "S3 was unreachable"
without parsing messages::

    try:
        transit.upload()
        transit.transform()
        transit.transport()
    except TransitValidationError as exc:
        return 422, exc.message
    except TransitError as exc:
        log.error("upload failed", extra={"extra_fields": exc.to_dict()})
        raise

Every error carries a ``code`` from :class:`ErrorCode`, the ``message``
shown to users, a ``context`` dict with diagnostic detail and, when it
wraps a lower-level exception, ``cause`` (also set as ``__cause__``).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """One code per pipeline stage, plus configuration."""

    IO_ERROR = "IO_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TRANSFORMATION_ERROR = "TRANSFORMATION_ERROR"
    TRANSPORTATION_ERROR = "TRANSPORTATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class TransitError(Exception):
    """Base exception for all transit errors.

    Subclasses only set :attr:`code`.

    Parameters
    ----------
    message:
        What went wrong, suitable for showing to the uploader.
    context:
        Structured detail (paths, URLs, rule failures).  Keys are listed
        on each subclass.
    cause:
        The exception this error wraps, if any.
    """

    code: ErrorCode

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r}{ctx})"

    def to_dict(self) -> dict[str, Any]:
        """Return the error as log-ready fields."""
        fields: dict[str, Any] = {
            "error_code": self.code.value,
            "error": self.message,
            **self.context,
        }
        if self.cause is not None:
            fields["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return fields


class TransitIOError(TransitError):
    """Acquiring a file failed: missing source, failed copy, write or fetch.

    Context keys: ``path``, ``url``, ``target``, ``field``, ``reason``.
    """

    code = ErrorCode.IO_ERROR


class TransitValidationError(TransitError):
    """The upload descriptor reported a failed transfer, or the file broke
    a validator rule.

    Context keys: ``upload_error``, ``tmp_name``, ``failures`` (rule name
    to message), ``path``.
    """

    code = ErrorCode.VALIDATION_ERROR


class TransitTransformationError(TransitError):
    """A transformer failed.  Partial output is already gone from disk.

    Context keys: ``transformer``, ``path``.
    """

    code = ErrorCode.TRANSFORMATION_ERROR


class TransitTransportationError(TransitError):
    """A transporter failed.  Locations written earlier in the same
    ``transport()`` call have been deleted (best effort).

    Context keys: ``path``, ``rolled_back``, ``bucket``, ``key``.
    """

    code = ErrorCode.TRANSPORTATION_ERROR


class TransitConfigurationError(TransitError):
    """A collaborator is missing or was given invalid options.

    Context keys: ``option``.
    """

    code = ErrorCode.CONFIGURATION_ERROR
