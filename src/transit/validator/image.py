"""Dimension rules for image uploads."""

from __future__ import annotations

from transit.config import DEFAULT_IMAGE_MIMES
from transit.models import Dimensions
from transit.validator.base import RuleValidator


class ImageValidator(RuleValidator):
    """:class:`RuleValidator` with pixel dimension rules.

    Adds ``width``, ``height`` (exact), ``min_width``, ``min_height``,
    ``max_width`` and ``max_height``.  A file Pillow cannot read fails
    every dimension rule.  Given no options, the ``type`` rule accepts
    :data:`~transit.config.DEFAULT_IMAGE_MIMES`.
    """

    def _dimensions(self) -> Dimensions | None:
        return self._file.dimensions()

    def check_width(self, width: int) -> bool:
        dims = self._dimensions()
        return dims is not None and dims.width == int(width)

    def check_height(self, height: int) -> bool:
        dims = self._dimensions()
        return dims is not None and dims.height == int(height)

    def check_min_width(self, width: int) -> bool:
        dims = self._dimensions()
        return dims is not None and dims.width >= int(width)

    def check_min_height(self, height: int) -> bool:
        dims = self._dimensions()
        return dims is not None and dims.height >= int(height)

    def check_max_width(self, width: int) -> bool:
        dims = self._dimensions()
        return dims is not None and dims.width <= int(width)

    def check_max_height(self, height: int) -> bool:
        dims = self._dimensions()
        return dims is not None and dims.height <= int(height)

    def check_type(self, allowed: list[str] | str | None = None) -> bool:
        """Like :meth:`RuleValidator.check_type`; no options means common web images."""
        return super().check_type(allowed or DEFAULT_IMAGE_MIMES)
