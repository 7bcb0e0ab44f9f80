from .s3 import S3_URL, S3Config, S3Transporter

__all__ = [
    "S3Config",
    "S3Transporter",
    "S3_URL",
]
