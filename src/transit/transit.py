"""The :class:`Transit` pipeline coordinator.

A coordinator is built around one source and drives it through three
stages::

    transit = Transit(UploadDescriptor(tmp_name=..., name="photo.jpg"))
    transit.set_directory("/var/uploads/tmp")
    transit.set_validator(validator)
    transit.add_transformer(ResizeTransformer(200, 200))
    transit.set_transporter(S3Transporter(S3Config(bucket="media")))

    transit.upload()           # acquisition (+ validation)
    transit.transform()        # derive + self transformers
    urls = transit.transport() # one location per file

``transform()`` and ``transport()`` are all-or-nothing: on the first
failure every artifact produced so far in that stage is deleted before the
error is raised.  Rollback deletes are best effort; a failing delete is
logged and never replaces the original error.

Destination names are resolved by checking for existing files and then
writing, which is not atomic.  Do not point two coordinators at the same
directory if collision-free naming matters.
"""

from __future__ import annotations

import contextlib
import mimetypes
import os
import posixpath
import shutil
import time
from collections.abc import Iterable, Iterator, Mapping
from typing import Any
from urllib.parse import unquote, urlparse

import httpx

from transit.config import TransitConfig
from transit.errors import (
    TransitConfigurationError,
    TransitIOError,
    TransitTransformationError,
    TransitTransportationError,
    TransitValidationError,
)
from transit.file import File
from transit.models import (
    SourceType,
    StreamSource,
    UploadDescriptor,
    UploadError,
)
from transit.observability import NoopMetricsHook, get_logger
from transit.observability.metrics import (
    ACQUIRE_TOTAL,
    ROLLBACK_DELETES_TOTAL,
    TRANSFORM_FAILURE_TOTAL,
    TRANSFORM_TOTAL,
    TRANSPORT_DURATION_MS,
    TRANSPORT_FAILURE_TOTAL,
    TRANSPORT_TOTAL,
)
from transit.transformer.base import Transformer
from transit.transporter.base import Transporter
from transit.utils.paths import split_name, unique_path
from transit.validator.base import Validator

log = get_logger("transit.pipeline")

_UPLOAD_ERROR_MESSAGES: dict[int, str] = {
    UploadError.INI_SIZE: "File exceeds the maximum file size",
    UploadError.FORM_SIZE: "File exceeds the maximum file size",
    UploadError.PARTIAL: "File was only partially uploaded",
    UploadError.NO_FILE: "No file was found for upload",
}


def _upload_error_message(code: int) -> str:
    return _UPLOAD_ERROR_MESSAGES.get(code, "File failed to upload")


def _guess_extension(content_type: str | None) -> str:
    if not content_type:
        return ""
    return mimetypes.guess_extension(content_type.split(";", 1)[0].strip()) or ""


def _client_name(raw: str) -> str:
    """Reduce a client-supplied name to a bare file name.

    Both separators count.  A name that reduces to nothing, "." or ".."
    yields "".
    """
    name = posixpath.basename(raw.replace("\\", "/"))
    return "" if name in ("", ".", "..") else name


class Transit:
    """Acquire, validate, transform and transport a single file.

    Parameters
    ----------
    source:
        What to acquire.  One of :class:`UploadDescriptor` (or a plain
        upload mapping), :class:`LocalSource`, :class:`RemoteSource`,
        :class:`StreamSource`, or a bare path / URL string for
        :meth:`import_from_local` / :meth:`import_from_remote`.
    config:
        Pipeline configuration.  Defaults to ``TransitConfig()``.
    http_client:
        An ``httpx.Client`` used for :meth:`import_from_remote`.  A client
        built from *config* is used (and closed) per import when omitted.
    """

    def __init__(
        self,
        source: Any,
        config: TransitConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        if isinstance(source, Mapping):
            source = UploadDescriptor.from_mapping(source)
        self._data = source
        self._config = config or TransitConfig()
        self._metrics = self._config.metrics or NoopMetricsHook()
        self._http_client = http_client

        self._file: File | None = None
        self._files: list[File] = []
        self._transformers: list[Transformer] = []
        self._self_transformers: list[Transformer] = []
        self._transporter: Transporter | None = None
        self._validator: Validator | None = None

        if self._config.directory:
            self.set_directory(self._config.directory)
        else:
            self._directory = os.path.join(os.getcwd(), "")

    # ── Configuration ───────────────────────────────────────────────────

    def add_transformer(self, transformer: Transformer) -> Transit:
        """Add a transformer that derives a new file from the original."""
        self._transformers.append(transformer)
        return self

    def add_self_transformer(self, transformer: Transformer) -> Transit:
        """Add a transformer that rewrites the original file in place."""
        self._self_transformers.append(transformer)
        return self

    def set_directory(self, path: str | os.PathLike[str]) -> Transit:
        """Set the staging directory, creating it if it does not exist."""
        path = os.path.join(os.path.abspath(os.fspath(path)), "")

        if not os.path.exists(path):
            os.makedirs(path, 0o777, exist_ok=True)
        elif not os.access(path, os.W_OK):
            os.chmod(path, 0o777)

        self._directory = path
        return self

    def set_transporter(self, transporter: Transporter) -> Transit:
        self._transporter = transporter
        return self

    def set_validator(self, validator: Validator) -> Transit:
        self._validator = validator
        return self

    # ── Accessors ───────────────────────────────────────────────────────

    def get_directory(self) -> str:
        return self._directory

    def get_original_file(self) -> File | None:
        """Return the file that was uploaded or imported."""
        return self._file

    def get_transformed_files(self) -> list[File]:
        """Return the files produced by derive transformers."""
        return list(self._files)

    def get_all_files(self) -> list[File]:
        """Return the original file followed by every transformed file."""
        if self._file is None:
            return list(self._files)
        return [self._file, *self._files]

    def get_transporter(self) -> Transporter | None:
        return self._transporter

    def get_validator(self) -> Validator | None:
        return self._validator

    def find_destination(self, file: File | str, overwrite: bool = False) -> str:
        """Find a target path in the staging directory.

        *file* is either a :class:`File` (its name and extension are used)
        or a raw file name.  Unless *overwrite* is set, ``-1``, ``-2``, ...
        is appended to the name until no file exists at the target.
        """
        if isinstance(file, File):
            name = file.name()
            ext = f".{file.ext()}" if file.ext() else ""
        else:
            name, ext = split_name(file)

        return unique_path(self._directory, name, ext, overwrite)

    # ── Acquisition ─────────────────────────────────────────────────────

    def import_from_local(self, overwrite: bool = True, delete: bool = False) -> bool:
        """Copy a local file into the staging directory.

        Parameters
        ----------
        overwrite:
            Replace a same-named file in the staging directory.
        delete:
            Delete the source file after a successful copy.

        Raises
        ------
        TransitIOError
            If the source does not exist or the copy fails.
        """
        path = self._local_path()
        file = File(path)
        target = self.find_destination(file, overwrite)

        # Importing a file that already sits at its own destination.
        if target != file.path():
            try:
                shutil.copyfile(file.path(), target)
            except OSError as exc:
                raise TransitIOError(
                    message=f"Failed to copy {file.basename()} to new location",
                    context={"path": file.path(), "target": target},
                    cause=exc,
                ) from exc

            if delete:
                file.delete()

        self._acquired(SourceType.LOCAL, target)
        return True

    def import_from_remote(self, overwrite: bool = True) -> bool:
        """Download a URL into the staging directory.

        Redirects are followed (per ``config.follow_redirects``) and HTTP
        error statuses are treated as failures.

        Raises
        ------
        TransitIOError
            If the request fails, the body is empty, or the local write
            fails.  A partially written file is removed.
        """
        url = self._remote_url()
        name = _client_name(unquote(urlparse(url).path))
        target: str | None = None
        written = 0

        try:
            with self._open_http_client() as client, client.stream(
                "GET", url, follow_redirects=self._config.follow_redirects
            ) as response:
                response.raise_for_status()
                if not name:
                    name = "remote" + _guess_extension(response.headers.get("content-type"))
                target = self.find_destination(name, overwrite)
                written = self._write_chunks(
                    response.iter_bytes(self._config.chunk_size), target
                )
        except (httpx.HTTPError, OSError) as exc:
            self._discard(target)
            raise TransitIOError(
                message=f"Failed to import {name or url} from remote location",
                context={"url": url},
                cause=exc,
            ) from exc

        if not written:
            self._discard(target)
            raise TransitIOError(
                message=f"Failed to import {name} from remote location",
                context={"url": url, "reason": "empty_body"},
            )

        self._acquired(SourceType.REMOTE, target, url=url, bytes=written)
        return True

    def import_from_stream(self, overwrite: bool = True) -> bool:
        """Copy a raw input stream into the staging directory.

        The destination name comes from ``source.params[source.field]``;
        only its basename is used.

        Raises
        ------
        TransitIOError
            If the named parameter is missing, reduces to no usable file
            name, or the write fails.
        """
        source = self._stream_source()
        filename = source.params.get(source.field)

        if not filename:
            raise TransitIOError(
                message=f"{source.field} was not found in the input stream",
                context={"field": source.field},
            )

        name = _client_name(filename)
        if not name:
            raise TransitIOError(
                message=f"{source.field} is not a valid file name",
                context={"field": source.field, "name": filename},
            )

        target = self.find_destination(name, overwrite)
        try:
            with open(target, "wb") as output:
                shutil.copyfileobj(source.stream, output, self._config.chunk_size)
        except OSError as exc:
            self._discard(target)
            raise TransitIOError(
                message=f"Failed to write {filename} from the input stream",
                context={"field": source.field, "target": target},
                cause=exc,
            ) from exc

        self._acquired(SourceType.STREAM, target)
        return True

    def upload(self, overwrite: bool = False) -> bool:
        """Move an uploaded temporary file into the staging directory.

        Raises
        ------
        TransitValidationError
            If the descriptor has no temporary file, reports a transfer
            error, points at something that is not a genuine uploaded file,
            fails the configured validator, or cannot be moved.
        """
        data = self._upload_descriptor()

        if not data.tmp_name:
            raise TransitValidationError("Invalid file detected for upload")

        if data.error > 0 or not self._is_uploaded_file(data.tmp_name):
            raise TransitValidationError(
                message=_upload_error_message(data.error),
                context={"upload_error": int(data.error), "tmp_name": data.tmp_name},
            )

        if self._validator is not None:
            self._validator.set_file(File(data.tmp_name)).validate()

        name = _client_name(data.name) or os.path.basename(data.tmp_name)
        target = self.find_destination(name, overwrite)

        try:
            os.replace(data.tmp_name, target)
        except OSError:
            try:
                shutil.copyfile(data.tmp_name, target)
            except OSError as exc:
                raise TransitValidationError(
                    message="An unknown error has occurred",
                    context={"tmp_name": data.tmp_name, "target": target},
                    cause=exc,
                ) from exc

        self._acquired(SourceType.UPLOAD, target)
        return True

    # ── Transformation ──────────────────────────────────────────────────

    def transform(self) -> bool:
        """Run derive transformers, then self transformers.

        Raises
        ------
        TransitIOError
            If nothing has been acquired yet.
        TransitTransformationError
            If any transformer fails.  The original file and every derived
            file are deleted first and the coordinator is reset.
        """
        original = self._file
        if original is None:
            raise TransitIOError("No original file detected")

        acquired = original
        transformed: list[File] = []
        # Every working copy a self transformer has produced, oldest first.
        working: list[File] = [original]
        error: Exception | None = None
        failed_by: Transformer | None = None

        for transformer in self._transformers:
            try:
                transformed.append(transformer.transform(original, False))
            except Exception as exc:
                error, failed_by = exc, transformer
                break

        if error is None:
            for transformer in self._self_transformers:
                try:
                    original = transformer.transform(original, True)
                    if original not in working:
                        working.append(original)
                except Exception as exc:
                    error, failed_by = exc, transformer
                    break

        if error is not None:
            leftovers = [*reversed(transformed), *reversed(working)]
            self._rollback_files(leftovers)

            self._file = None
            self._files = []
            self._metrics.increment(TRANSFORM_FAILURE_TOTAL)
            failure = TransitTransformationError(
                message=str(error),
                context={"transformer": type(failed_by).__name__, "path": acquired.path()},
                cause=error,
            )
            log.error(
                "Transformation failed",
                extra={
                    "extra_fields": {
                        "op": "transform",
                        "rolled_back": len(leftovers),
                        **failure.to_dict(),
                    }
                },
            )
            raise failure from error

        self._file = original
        self._files = transformed
        self._metrics.increment(TRANSFORM_TOTAL)
        log.info(
            "Transformation complete",
            extra={
                "extra_fields": {
                    "op": "transform",
                    "path": original.path(),
                    "derived": len(transformed),
                    "self_applied": len(self._self_transformers),
                }
            },
        )
        return True

    # ── Transportation ──────────────────────────────────────────────────

    def transport(self) -> list[str]:
        """Transport the original and every transformed file.

        Returns
        -------
        list[str]
            One location per file, in :meth:`get_all_files` order.

        Raises
        ------
        TransitConfigurationError
            If no transporter has been set.
        TransitIOError
            If there are no files to transport.
        TransitTransportationError
            If any file fails.  Locations already transported in this call
            are deleted first.
        """
        transporter = self._transporter
        if transporter is None:
            raise TransitConfigurationError(
                message="No Transporter has been defined",
                context={"option": "transporter"},
            )

        if self._file is None:
            raise TransitIOError("No files to transport")

        started = time.monotonic()
        locations: list[str] = []
        error: Exception | None = None
        failed: File | None = None

        for file in self.get_all_files():
            try:
                locations.append(transporter.transport(file))
            except Exception as exc:
                error, failed = exc, file
                break

        if error is not None:
            rolled_back = self._rollback_locations(transporter, locations)
            self._metrics.increment(TRANSPORT_FAILURE_TOTAL)
            failure = TransitTransportationError(
                message=str(error),
                context={"path": failed.path(), "rolled_back": rolled_back},
                cause=error,
            )
            log.error(
                "Transportation failed",
                extra={"extra_fields": {"op": "transport", **failure.to_dict()}},
            )
            raise failure from error

        self._metrics.increment(TRANSPORT_TOTAL, len(locations))
        self._metrics.timing(TRANSPORT_DURATION_MS, (time.monotonic() - started) * 1000)
        log.info(
            "Transportation complete",
            extra={"extra_fields": {"op": "transport", "locations": locations}},
        )
        return locations

    # ── Internals ───────────────────────────────────────────────────────

    def _acquired(self, source: SourceType, target: str, **fields: Any) -> None:
        self._file = File(target)
        self._files = []
        self._metrics.increment(ACQUIRE_TOTAL, tags={"source": source.value})
        log.info(
            "File acquired",
            extra={"extra_fields": {"op": "acquire", "source": source.value, "path": target, **fields}},
        )

    def _rollback_files(self, files: Iterable[File]) -> None:
        for file in files:
            self._metrics.increment(ROLLBACK_DELETES_TOTAL, tags={"stage": "transform"})
            if not file.delete():
                log.warning(
                    "Rollback could not delete file",
                    extra={"extra_fields": {"op": "rollback", "path": file.path()}},
                )

    def _rollback_locations(self, transporter: Transporter, locations: list[str]) -> int:
        """Delete transported locations newest-first; return how many succeeded."""
        deleted = 0
        for location in reversed(locations):
            self._metrics.increment(ROLLBACK_DELETES_TOTAL, tags={"stage": "transport"})
            try:
                ok = transporter.delete(location)
            except Exception:
                log.warning(
                    "Rollback delete raised",
                    exc_info=True,
                    extra={"extra_fields": {"op": "rollback", "location": location}},
                )
                continue
            if ok:
                deleted += 1
            else:
                log.warning(
                    "Rollback could not delete location",
                    extra={"extra_fields": {"op": "rollback", "location": location}},
                )
        return deleted

    def _write_chunks(self, chunks: Iterator[bytes], target: str) -> int:
        written = 0
        with open(target, "wb") as fh:
            for chunk in chunks:
                fh.write(chunk)
                written += len(chunk)
        return written

    @staticmethod
    def _discard(target: str | None) -> None:
        if target is not None:
            with contextlib.suppress(OSError):
                os.unlink(target)

    def _open_http_client(self) -> contextlib.AbstractContextManager[httpx.Client]:
        if self._http_client is not None:
            return contextlib.nullcontext(self._http_client)
        config = self._config
        return httpx.Client(
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=config.http_proxy,
            headers={"User-Agent": config.user_agent},
        )

    def _is_uploaded_file(self, path: str) -> bool:
        if not os.path.isfile(path):
            return False
        tmp_dir = self._config.upload_tmp_dir
        if tmp_dir is None:
            return True
        root = os.path.join(os.path.realpath(tmp_dir), "")
        return os.path.realpath(path).startswith(root)

    # ── Source resolution ───────────────────────────────────────────────

    def _source_type(self) -> SourceType | None:
        return getattr(self._data, "source_type", None)

    def _local_path(self) -> str:
        data = self._data
        if isinstance(data, (str, os.PathLike)):
            return os.fspath(data)
        if self._source_type() is SourceType.LOCAL:
            return data.path
        raise self._wrong_source("local path")

    def _remote_url(self) -> str:
        data = self._data
        if isinstance(data, str):
            return data
        if self._source_type() is SourceType.REMOTE:
            return data.url
        raise self._wrong_source("remote URL")

    def _stream_source(self) -> StreamSource:
        if self._source_type() is SourceType.STREAM:
            return self._data
        raise self._wrong_source("stream")

    def _upload_descriptor(self) -> UploadDescriptor:
        if self._source_type() is SourceType.UPLOAD:
            return self._data
        raise self._wrong_source("upload descriptor")

    def _wrong_source(self, expected: str) -> TransitConfigurationError:
        return TransitConfigurationError(
            message=f"Expected a {expected} source, got {type(self._data).__name__}",
            context={"option": "source"},
        )
