"""Transport local files to Amazon S3 (or an S3-compatible endpoint).

Objects are written with ``put_object`` and addressed by a path-style URL::

    https://s3.amazonaws.com/<bucket>/<folder><basename>

:meth:`S3Transporter.delete` accepts that URL, a virtual-hosted-style URL
(``https://<bucket>.s3.amazonaws.com/<key>``), or a bare object key.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from transit.errors import TransitConfigurationError, TransitTransportationError
from transit.file import File
from transit.observability import get_logger
from transit.utils.redact import redact

log = get_logger("transit.transporter.s3")

S3_URL = "https://s3.amazonaws.com"

# s3.amazonaws.com/<bucket>/<key>, also s3.<region>. and s3-<region>. hosts
_PATH_STYLE_RE = re.compile(
    r"^https?://s3(?:[.-][a-z0-9-]+)?\.amazonaws\.com/(?P<bucket>[^/]+)/(?P<key>.+)$",
    re.IGNORECASE,
)

# <bucket>.s3.amazonaws.com/<key>
_VIRTUAL_HOST_RE = re.compile(
    r"^https?://(?P<bucket>.+?)\.s3(?:[.-][a-z0-9-]+)?\.amazonaws\.com/(?P<key>.+)$",
    re.IGNORECASE,
)


@dataclass
class S3Config:
    """Settings for :class:`S3Transporter`.

    Parameters
    ----------
    bucket:
        Target bucket.  **Required.**
    access_key, secret_key:
        Credentials.  Left empty, boto3 resolves them from its usual chain
        (environment, shared config, instance role).  Never logged.
    folder:
        Key prefix prepended to each file's basename, e.g. ``"uploads/"``.
    region:
        Bucket region.
    acl:
        Canned ACL applied to each object.
    storage_class:
        S3 storage class.
    encryption:
        Server-side encryption algorithm (``"AES256"``, ``"aws:kms"``) or
        empty for none.
    metadata:
        User metadata attached to each object.
    endpoint:
        Base URL for returned locations.  Set this for S3-compatible
        services; it is also passed to boto3 as ``endpoint_url``.
    """

    bucket: str = ""
    access_key: str = ""
    secret_key: str = ""
    folder: str = ""
    region: str = "us-east-1"
    acl: str = "public-read"
    storage_class: str = "STANDARD"
    encryption: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    endpoint: str = S3_URL

    def __post_init__(self) -> None:
        if not self.bucket:
            raise TransitConfigurationError(
                message="Please provide an S3 bucket",
                context={"option": "bucket"},
            )
        self.endpoint = self.endpoint.rstrip("/")

    def __repr__(self) -> str:
        """Mask credentials to prevent accidental leakage."""
        safe = redact(dataclasses.asdict(self), self.secret_key or None)
        parts = ", ".join(f"{k}={v!r}" for k, v in safe.items())
        return f"S3Config({parts})"


class S3Transporter:
    """Upload files to S3 and delete them locally once stored.

    Parameters
    ----------
    config:
        Bucket and object settings.
    client:
        A boto3 S3 client.  Built from *config* when omitted.
    """

    def __init__(self, config: S3Config, client: Any | None = None) -> None:
        self._config = config
        self._client = client if client is not None else self._build_client(config)

    @staticmethod
    def _build_client(config: S3Config) -> Any:
        return boto3.client(
            "s3",
            region_name=config.region,
            aws_access_key_id=config.access_key or None,
            aws_secret_access_key=config.secret_key or None,
            endpoint_url=None if config.endpoint == S3_URL else config.endpoint,
        )

    @property
    def config(self) -> S3Config:
        return self._config

    def transport(self, file: File) -> str:
        """Upload *file*, delete it locally, and return its URL.

        Raises
        ------
        TransitTransportationError
            If the upload fails.
        """
        config = self._config
        key = f"{config.folder}{file.basename()}".strip("/")
        params: dict[str, Any] = {
            "Bucket": config.bucket,
            "Key": key,
            "ACL": config.acl,
            "ContentType": file.type(),
            "ServerSideEncryption": config.encryption,
            "StorageClass": config.storage_class,
            "Metadata": config.metadata,
        }
        params = {k: v for k, v in params.items() if v}

        log.debug(
            "Uploading to S3",
            extra={"extra_fields": {"op": "s3_put", **redact(params, config.secret_key or None)}},
        )

        try:
            with open(file.path(), "rb") as body:
                self._client.put_object(Body=body, **params)
        except (BotoCoreError, ClientError, OSError) as exc:
            raise TransitTransportationError(
                message=f"Failed to transport {file.basename()} to Amazon S3",
                context={"path": file.path(), "bucket": config.bucket, "key": key},
                cause=exc,
            ) from exc

        file.delete()

        return f"{config.endpoint}/{config.bucket}/{key}"

    def delete(self, location: str) -> bool:
        """Delete an object by URL or key.  Returns ``False`` on S3 errors."""
        bucket, key = self.parse_url(location)
        try:
            self._client.delete_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            log.warning(
                "S3 delete failed",
                extra={"extra_fields": {"op": "s3_delete", "bucket": bucket, "key": key, "error": str(exc)}},
            )
            return False
        return True

    def parse_url(self, url: str) -> tuple[str, str]:
        """Extract ``(bucket, key)`` from an S3 URL.

        Anything that is not a recognised S3 URL is taken as a key in the
        configured bucket.
        """
        bucket = self._config.bucket
        key = url

        endpoint = self._config.endpoint
        if endpoint != S3_URL and url.startswith(endpoint + "/"):
            rest = url[len(endpoint) + 1:]
            if "/" in rest:
                bucket, key = rest.split("/", 1)
        elif "amazonaws.com" in url.lower():
            match = _PATH_STYLE_RE.match(url) or _VIRTUAL_HOST_RE.match(url)
            if match:
                bucket = match.group("bucket")
                key = match.group("key")

        return bucket, key.strip("/")
