"""Transporters that move pipeline output to its final destination.

Exports
-------
Transporter
    Protocol every transporter satisfies.
LocalTransporter
    Copy into a directory on the local filesystem.
S3Transporter / S3Config
    Upload to Amazon S3 or an S3-compatible service.
"""

from .aws import S3Config, S3Transporter
from .base import Transporter
from .local import LocalTransporter

__all__ = [
    "LocalTransporter",
    "S3Config",
    "S3Transporter",
    "Transporter",
]
