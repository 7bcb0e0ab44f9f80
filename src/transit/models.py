"""Public data models for the transit pipeline.

This module contains the source descriptors accepted by the
:class:`~transit.transit.Transit` coordinator, the upload error codes, and
small value types returned by :class:`~transit.file.File`.  All types are
plain dataclasses with no behaviour beyond construction helpers.
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, BinaryIO, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SourceType(str, Enum):
    """Where the coordinator acquires its original file from."""

    UPLOAD = "upload"
    """A browser / multipart upload staged in a temporary file."""

    LOCAL = "local"
    """A file somewhere on the local filesystem."""

    REMOTE = "remote"
    """An ``http://`` or ``https://`` URL fetched with a GET request."""

    STREAM = "stream"
    """A raw request body, named by a query parameter."""


class UploadError(IntEnum):
    """Upload error codes reported by the web server for a multipart file."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


# ---------------------------------------------------------------------------
# Source descriptors
# ---------------------------------------------------------------------------

@dataclass
class UploadDescriptor:
    """Metadata for a single uploaded file.

    Attributes
    ----------
    tmp_name:
        Path of the staged temporary file.
    name:
        Original client-side file name, used to name the final file.
    error:
        Upload error code; anything but ``0`` is a failed transfer.
    size:
        Size reported by the client, informational only.
    type:
        MIME type reported by the client, informational only.
    """

    tmp_name: str
    name: str
    error: int = UploadError.OK
    size: int | None = None
    type: str | None = None

    source_type = SourceType.UPLOAD

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> UploadDescriptor:
        """Build a descriptor from a ``{"tmp_name": ..., "name": ...}`` mapping.

        Missing keys fall back to empty values so that malformed uploads are
        rejected by :meth:`Transit.upload` rather than here.
        """
        return cls(
            tmp_name=str(data.get("tmp_name") or ""),
            name=str(data.get("name") or ""),
            error=int(data.get("error") or 0),
            size=data.get("size"),
            type=data.get("type"),
        )


@dataclass
class LocalSource:
    """A file on the local filesystem to import."""

    path: str

    source_type = SourceType.LOCAL

    def __post_init__(self) -> None:
        self.path = os.fspath(self.path)


@dataclass
class RemoteSource:
    """A remote URL to import."""

    url: str

    source_type = SourceType.REMOTE


@dataclass
class StreamSource:
    """A raw input stream to import.

    Attributes
    ----------
    field:
        Name of the request parameter that holds the destination file name.
    params:
        Request parameters (typically the query string).
    stream:
        Binary file-like object holding the request body.
    """

    field: str
    stream: BinaryIO
    params: Mapping[str, str] = dataclasses.field(default_factory=dict)

    source_type = SourceType.STREAM


Source = Union[UploadDescriptor, LocalSource, RemoteSource, StreamSource]


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Dimensions:
    """Pixel dimensions of an image file."""

    width: int
    height: int
    type: str = ""
