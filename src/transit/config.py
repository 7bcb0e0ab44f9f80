"""Pipeline configuration for transit.

:class:`TransitConfig` is a plain dataclass that captures every tuneable
knob used by the :class:`~transit.transit.Transit` coordinator.  Instances
are passed to the coordinator and shared by its acquisition steps.

Two module-level constants are exported for callers building validators:

* :data:`DEFAULT_IMAGE_MIMES` -- common web image MIME types.
* :data:`DEFAULT_CHUNK_SIZE` -- read/write buffer size for stream copies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_IMAGE_MIMES: list[str] = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/bmp",
    "image/tiff",
]
"""MIME types produced by the bundled image transformers."""

DEFAULT_CHUNK_SIZE: int = 64 * 1024
"""Buffer size in bytes for remote downloads and stream imports."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class TransitConfig:
    """Complete configuration for a transit pipeline.

    Every parameter has a default, so ``TransitConfig()`` is usable as-is.

    Parameters
    ----------
    directory:
        Staging directory for acquired and transformed files.  ``None``
        means the current working directory.  Can be overridden per
        coordinator with :meth:`Transit.set_directory`.
    upload_tmp_dir:
        If set, upload descriptors are only accepted when their
        ``tmp_name`` resolves inside this directory.  This is the check
        that tells a genuine uploaded file apart from an arbitrary path
        smuggled into the descriptor.
    timeout_seconds:
        HTTP timeout for remote imports.
    follow_redirects:
        Follow HTTP redirects during remote imports.
    http_proxy:
        Optional HTTP/HTTPS proxy URL for remote imports.
    user_agent:
        ``User-Agent`` header sent with remote imports.
    chunk_size:
        Buffer size for remote downloads and stream copies.
    metrics:
        Optional :class:`~transit.observability.MetricsHook` backend.
    """

    # ── Staging ─────────────────────────────────────────────────────────
    directory: str | None = None

    upload_tmp_dir: str | None = None

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    follow_redirects: bool = True

    http_proxy: str | None = None

    user_agent: str = "transit"

    # ── I/O ─────────────────────────────────────────────────────────────
    chunk_size: int = DEFAULT_CHUNK_SIZE

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {self.chunk_size}")
