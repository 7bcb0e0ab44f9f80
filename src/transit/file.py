"""File handle for staged pipeline files.

:class:`File` wraps the path of an existing file and exposes the metadata
that validators, transformers and transporters need.  It never holds an
open descriptor; every accessor goes to disk.
"""

from __future__ import annotations

import mimetypes
import os

from PIL import Image, UnidentifiedImageError

from transit.errors import TransitIOError
from transit.models import Dimensions

# Map of magic bytes to MIME types for sniffing.
_MAGIC_BYTES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"RIFF", "image/webp"),  # RIFF....WEBP (check further)
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"BM", "image/bmp"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"ID3", "audio/mpeg"),
    (b"<svg", "image/svg+xml"),
]

_SNIFF_BYTES = 512


def _sniff_mime(data: bytes) -> str | None:
    """Attempt to detect the MIME type from the first bytes of a file."""
    for magic, mime in _MAGIC_BYTES:
        if data[:len(magic)] == magic:
            # Extra check for WEBP: RIFF....WEBP
            if magic == b"RIFF" and data[8:12] != b"WEBP":
                continue
            return mime
    # ISO base media: ....ftyp
    if data[4:8] == b"ftyp":
        return "video/mp4"
    stripped = data.lstrip()
    if stripped.startswith(b"<?xml") and b"<svg" in stripped:
        return "image/svg+xml"
    return None


class File:
    """Handle to an existing file on disk.

    Parameters
    ----------
    path:
        Path of the file.  Must exist and be a regular file.

    Raises
    ------
    TransitIOError
        If *path* does not reference an existing regular file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        path = os.fspath(path)
        if not os.path.isfile(path):
            raise TransitIOError(
                message=f"{path} does not exist",
                context={"path": path},
            )
        self._path: str = os.path.abspath(path)

    def __repr__(self) -> str:
        return f"File({self._path!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, File):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __fspath__(self) -> str:
        return self._path

    # ── Path components ─────────────────────────────────────────────────

    def path(self) -> str:
        """Return the absolute path."""
        return self._path

    def dir(self) -> str:
        """Return the containing directory, with a trailing separator."""
        return os.path.dirname(self._path) + os.sep

    def basename(self) -> str:
        """Return the file name including its extension."""
        return os.path.basename(self._path)

    def name(self) -> str:
        """Return the file name without extension."""
        return os.path.splitext(self.basename())[0]

    def ext(self) -> str:
        """Return the lowercased extension, without the leading dot."""
        return os.path.splitext(self._path)[1][1:].lower()

    # ── Metadata ────────────────────────────────────────────────────────

    def exists(self) -> bool:
        return os.path.isfile(self._path)

    def size(self) -> int:
        """Return the file size in bytes."""
        return os.path.getsize(self._path)

    def type(self) -> str:
        """Return the MIME type.

        The file head is sniffed for well-known signatures first, then the
        extension is consulted, and ``application/octet-stream`` is the
        last resort.
        """
        with open(self._path, "rb") as fh:
            head = fh.read(_SNIFF_BYTES)

        mime_type = _sniff_mime(head)
        if not mime_type:
            mime_type, _ = mimetypes.guess_type(self._path)
        if not mime_type and head and b"\x00" not in head:
            try:
                head.decode("utf-8")
            except UnicodeDecodeError:
                pass
            else:
                mime_type = "text/plain"
        return mime_type or "application/octet-stream"

    def dimensions(self) -> Dimensions | None:
        """Return the image dimensions, or ``None`` if this is not an image."""
        try:
            with Image.open(self._path) as image:
                width, height = image.size
                mime = Image.MIME.get(image.format or "", "")
        except (UnidentifiedImageError, OSError):
            return None
        return Dimensions(width=width, height=height, type=mime)

    # ── Lifecycle ───────────────────────────────────────────────────────

    def delete(self) -> bool:
        """Delete the file.

        Returns ``True`` if the file was removed, ``False`` if it could not
        be (already gone, permission denied, ...).
        """
        try:
            os.unlink(self._path)
        except OSError:
            return False
        return True
