"""Transformer protocol and the Pillow-backed image transformer base.

A transformer takes a :class:`~transit.file.File` and returns a
:class:`~transit.file.File`.  With ``self_apply=False`` it must leave the
input untouched and write a new file; with ``self_apply=True`` it replaces
the input in place.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

from PIL import Image, UnidentifiedImageError

from transit.errors import TransitTransformationError
from transit.file import File
from transit.observability import get_logger
from transit.utils.paths import unique_path

log = get_logger("transit.transformer")

# Formats that accept a ``quality`` save option.
_QUALITY_FORMATS = frozenset({"JPEG", "WEBP"})


@runtime_checkable
class Transformer(Protocol):
    """Interface every transformer must satisfy."""

    def transform(self, file: File, self_apply: bool = False) -> File:
        """Transform *file* and return the resulting file.

        Raises
        ------
        Exception
            Any failure; the coordinator wraps it in
            :class:`~transit.errors.TransitTransformationError`.
        """
        ...


class ImageTransformer(ABC):
    """Base class for transformers that edit an image with Pillow.

    Subclasses implement :meth:`process` and set :attr:`tag`.

    Parameters
    ----------
    prepend:
        Prefix for the derived file name.
    append:
        Suffix for the derived file name.  Defaults to
        ``-<tag>-<width>x<height>`` of the output image.
    quality:
        Save quality for JPEG and WEBP output.
    """

    tag = "transformed"

    def __init__(
        self,
        *,
        prepend: str = "",
        append: str | None = None,
        quality: int | None = None,
    ) -> None:
        self.prepend = prepend
        self.append = append
        self.quality = quality

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @abstractmethod
    def process(self, image: Image.Image) -> Image.Image:
        """Return the edited image; *image* must not be modified."""

    def transform(self, file: File, self_apply: bool = False) -> File:
        try:
            with Image.open(file.path()) as source:
                source.load()
                fmt = source.format
                result = self.process(source)
                if result is source:
                    result = source.copy()

            target = file.path() if self_apply else self._target(file, result)
            result.save(target, format=fmt, **self._save_options(fmt))
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise TransitTransformationError(
                message=f"Failed to transform {file.basename()}: {exc}",
                context={"transformer": type(self).__name__, "path": file.path()},
                cause=exc,
            ) from exc

        log.debug(
            "Image transformed",
            extra={
                "extra_fields": {
                    "op": "transform",
                    "transformer": type(self).__name__,
                    "source": file.path(),
                    "target": target,
                    "self_apply": self_apply,
                    "size": f"{result.width}x{result.height}",
                }
            },
        )
        return File(target)

    def _target(self, file: File, result: Image.Image) -> str:
        append = self.append
        if append is None:
            append = f"-{self.tag}-{result.width}x{result.height}"
        ext = f".{file.ext()}" if file.ext() else ""
        return unique_path(file.dir(), f"{self.prepend}{file.name()}{append}", ext)

    def _save_options(self, fmt: str | None) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.quality is not None and fmt in _QUALITY_FORMATS:
            options["quality"] = self.quality
        return options
