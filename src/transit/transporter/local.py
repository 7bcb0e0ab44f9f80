"""Transport files into another directory on the local filesystem."""

from __future__ import annotations

import os
import shutil

from transit.errors import TransitTransportationError
from transit.file import File
from transit.observability import get_logger
from transit.utils.paths import split_name, unique_path

log = get_logger("transit.transporter.local")


class LocalTransporter:
    """Copy files into *directory* and delete the staged originals.

    Parameters
    ----------
    directory:
        Destination directory; created if missing.
    overwrite:
        Replace an existing file of the same name instead of picking a
        ``-N`` suffixed name.
    """

    def __init__(self, directory: str | os.PathLike[str], overwrite: bool = False) -> None:
        self.directory = os.path.join(os.path.abspath(os.fspath(directory)), "")
        self.overwrite = overwrite

    def __repr__(self) -> str:
        return f"LocalTransporter(directory={self.directory!r}, overwrite={self.overwrite!r})"

    def transport(self, file: File) -> str:
        name, ext = split_name(file.basename())
        try:
            os.makedirs(self.directory, exist_ok=True)
            target = unique_path(self.directory, name, ext, self.overwrite)
            shutil.copyfile(file.path(), target)
        except OSError as exc:
            raise TransitTransportationError(
                message=f"Failed to transport {file.basename()} to {self.directory}",
                context={"path": file.path()},
                cause=exc,
            ) from exc

        file.delete()
        log.debug(
            "File transported",
            extra={"extra_fields": {"op": "transport", "source": file.path(), "target": target}},
        )
        return target

    def delete(self, location: str) -> bool:
        path = os.path.abspath(location)
        # Only remove files this transporter could have written.
        if not path.startswith(self.directory):
            return False
        try:
            os.unlink(path)
        except OSError:
            return False
        return True
