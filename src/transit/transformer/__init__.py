"""Transformers that derive new files from, or rewrite, the original file.

Exports
-------
Transformer
    Protocol every transformer satisfies.
ImageTransformer
    Pillow-backed base class.
ResizeTransformer, CropTransformer, ScaleTransformer, FlipTransformer, RotateTransformer
    Bundled image operations.
"""

from .base import ImageTransformer, Transformer
from .image import (
    CropTransformer,
    FlipTransformer,
    ResizeTransformer,
    RotateTransformer,
    ScaleTransformer,
)

__all__ = [
    "CropTransformer",
    "FlipTransformer",
    "ImageTransformer",
    "ResizeTransformer",
    "RotateTransformer",
    "ScaleTransformer",
    "Transformer",
]
