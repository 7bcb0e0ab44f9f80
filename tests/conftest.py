"""Shared test fixtures for the transit test suite."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from transit.config import TransitConfig


@pytest.fixture
def staging(tmp_path: Path) -> Path:
    """Empty staging directory for a coordinator."""
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def config(staging: Path) -> TransitConfig:
    """Configuration pointing at the staging directory."""
    return TransitConfig(directory=str(staging))


@pytest.fixture
def make_image(tmp_path: Path):
    """Factory that writes a solid-colour image and returns its path."""

    def _make(
        name: str = "photo.png",
        size: tuple[int, int] = (100, 50),
        directory: Path | None = None,
        color: str = "red",
        fmt: str | None = None,
    ) -> Path:
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(target, format=fmt)
        return target

    return _make
