"""transit -- upload, import, transform and transport files.

Public re-exports
-----------------

* **Coordinator:** :class:`Transit`
* **Configuration:** :class:`TransitConfig`
* **Errors:** Every :class:`TransitError` subclass and :class:`ErrorCode`
* **Models:** Source descriptors, :class:`File`, :class:`Dimensions`
* **Collaborators:** validator, transformer and transporter protocols and
  their bundled implementations

Usage::

    from transit import ResizeTransformer, S3Config, S3Transporter, Transit

    transit = Transit(request_files["image"])
    transit.set_directory("/tmp/uploads")
    transit.add_transformer(ResizeTransformer(300, 300))
    transit.set_transporter(S3Transporter(S3Config(bucket="media")))

    transit.upload()
    transit.transform()
    urls = transit.transport()
"""

from __future__ import annotations

# ── Coordinator ────────────────────────────────────────────────────────
from transit.transit import Transit

# ── Configuration ───────────────────────────────────────────────────────
from transit.config import DEFAULT_CHUNK_SIZE, DEFAULT_IMAGE_MIMES, TransitConfig

# ── Errors ──────────────────────────────────────────────────────────────
from transit.errors import (
    ErrorCode,
    TransitConfigurationError,
    TransitError,
    TransitIOError,
    TransitTransformationError,
    TransitTransportationError,
    TransitValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from transit.file import File
from transit.models import (
    Dimensions,
    LocalSource,
    RemoteSource,
    Source,
    SourceType,
    StreamSource,
    UploadDescriptor,
    UploadError,
)

# ── Collaborators ───────────────────────────────────────────────────────
from transit.transformer import (
    CropTransformer,
    FlipTransformer,
    ImageTransformer,
    ResizeTransformer,
    RotateTransformer,
    ScaleTransformer,
    Transformer,
)
from transit.transporter import (
    LocalTransporter,
    S3Config,
    S3Transporter,
    Transporter,
)
from transit.validator import ImageValidator, RuleValidator, Validator

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Coordinator
    "Transit",
    # Configuration
    "TransitConfig",
    "DEFAULT_IMAGE_MIMES",
    "DEFAULT_CHUNK_SIZE",
    # Errors
    "TransitError",
    "ErrorCode",
    "TransitIOError",
    "TransitValidationError",
    "TransitTransformationError",
    "TransitTransportationError",
    "TransitConfigurationError",
    # Models
    "File",
    "Dimensions",
    "Source",
    "SourceType",
    "UploadDescriptor",
    "UploadError",
    "LocalSource",
    "RemoteSource",
    "StreamSource",
    # Validators
    "Validator",
    "RuleValidator",
    "ImageValidator",
    # Transformers
    "Transformer",
    "ImageTransformer",
    "ResizeTransformer",
    "CropTransformer",
    "ScaleTransformer",
    "FlipTransformer",
    "RotateTransformer",
    # Transporters
    "Transporter",
    "LocalTransporter",
    "S3Config",
    "S3Transporter",
]
