"""Bundled image transformers."""

from __future__ import annotations

from PIL import Image, ImageOps

from transit.errors import TransitConfigurationError
from transit.transformer.base import ImageTransformer

_CROP_LOCATIONS = frozenset({"center", "top", "bottom", "left", "right"})
_FLIP_DIRECTIONS = frozenset({"vertical", "horizontal", "both"})


class ResizeTransformer(ImageTransformer):
    """Resize to fit within ``width`` x ``height``.

    With ``aspect=True`` the image keeps its proportions and either bound may
    be ``None``.  Images are never enlarged unless ``expand=True``.
    """

    tag = "resized"

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        *,
        aspect: bool = True,
        expand: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        if width is None and height is None:
            raise TransitConfigurationError(
                message="ResizeTransformer needs a width or a height",
                context={"option": "width"},
            )
        if not aspect and (width is None or height is None):
            raise TransitConfigurationError(
                message="ResizeTransformer needs both width and height when aspect=False",
                context={"option": "aspect"},
            )
        self.width = width
        self.height = height
        self.aspect = aspect
        self.expand = expand

    def process(self, image: Image.Image) -> Image.Image:
        width, height = image.size

        if self.aspect:
            ratios = []
            if self.width is not None:
                ratios.append(self.width / width)
            if self.height is not None:
                ratios.append(self.height / height)
            ratio = min(ratios)
            if not self.expand:
                ratio = min(ratio, 1.0)
            size = (max(1, round(width * ratio)), max(1, round(height * ratio)))
        else:
            size = (self.width, self.height)
            if not self.expand:
                size = (min(size[0], width), min(size[1], height))

        if size == image.size:
            return image
        return image.resize(size, Image.Resampling.LANCZOS)


class CropTransformer(ImageTransformer):
    """Crop a ``width`` x ``height`` region anchored at ``location``.

    ``location`` is one of ``center``, ``top``, ``bottom``, ``left`` or
    ``right``.  The region is clamped to the image bounds.
    """

    tag = "cropped"

    def __init__(self, width: int, height: int, *, location: str = "center", **kwargs) -> None:
        super().__init__(**kwargs)
        if location not in _CROP_LOCATIONS:
            raise TransitConfigurationError(
                message=f"Invalid crop location {location!r}",
                context={"option": "location"},
            )
        self.width = width
        self.height = height
        self.location = location

    def process(self, image: Image.Image) -> Image.Image:
        src_w, src_h = image.size
        width = min(self.width, src_w)
        height = min(self.height, src_h)

        left = (src_w - width) // 2
        top = (src_h - height) // 2
        if self.location == "top":
            top = 0
        elif self.location == "bottom":
            top = src_h - height
        elif self.location == "left":
            left = 0
        elif self.location == "right":
            left = src_w - width

        return image.crop((left, top, left + width, top + height))


class ScaleTransformer(ImageTransformer):
    """Scale both sides by ``percent`` (``50`` halves the image)."""

    tag = "scaled"

    def __init__(self, percent: float, **kwargs) -> None:
        super().__init__(**kwargs)
        if percent <= 0:
            raise TransitConfigurationError(
                message=f"Scale percent must be > 0, got {percent}",
                context={"option": "percent"},
            )
        self.percent = percent

    def process(self, image: Image.Image) -> Image.Image:
        factor = self.percent / 100
        size = (max(1, round(image.width * factor)), max(1, round(image.height * factor)))
        return image.resize(size, Image.Resampling.LANCZOS)


class FlipTransformer(ImageTransformer):
    """Flip ``vertical`` (top to bottom), ``horizontal`` (mirror) or ``both``."""

    tag = "flipped"

    def __init__(self, direction: str = "vertical", **kwargs) -> None:
        super().__init__(**kwargs)
        if direction not in _FLIP_DIRECTIONS:
            raise TransitConfigurationError(
                message=f"Invalid flip direction {direction!r}",
                context={"option": "direction"},
            )
        self.direction = direction

    def process(self, image: Image.Image) -> Image.Image:
        if self.direction in ("vertical", "both"):
            image = ImageOps.flip(image)
        if self.direction in ("horizontal", "both"):
            image = ImageOps.mirror(image)
        return image


class RotateTransformer(ImageTransformer):
    """Rotate counter-clockwise by ``degrees``, growing the canvas to fit."""

    tag = "rotated"

    def __init__(self, degrees: float, **kwargs) -> None:
        super().__init__(**kwargs)
        self.degrees = degrees

    def process(self, image: Image.Image) -> Image.Image:
        return image.rotate(self.degrees, expand=True)
