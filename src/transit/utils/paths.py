"""Collision-free destination paths.

The existence check and the later write are two separate steps, so two
writers racing on the same directory can still collide.  Callers that need
predictable naming must not share a staging directory between pipelines.
"""

from __future__ import annotations

import os


def split_name(filename: str) -> tuple[str, str]:
    """Split *filename* at its last dot into ``(name, ext)``.

    The extension keeps its leading dot.  A dot in the first position
    (``.env``) is part of the name, not an extension separator.

    >>> split_name("photo.tar.gz")
    ('photo.tar', '.gz')
    >>> split_name(".env")
    ('.env', '')
    """
    pos = filename.rfind(".")
    if pos <= 0:
        return filename, ""
    return filename[:pos], filename[pos:]


def unique_path(directory: str, name: str, ext: str, overwrite: bool = False) -> str:
    """Return ``directory + name + ext``, suffixed with ``-1``, ``-2``, ...
    until it is free, unless *overwrite* is set.

    Parameters
    ----------
    directory:
        Target directory, with a trailing separator.
    name:
        File name without extension.
    ext:
        Extension including its leading dot, or ``""``.
    overwrite:
        Return the base path even if a file already exists there.
    """
    target = f"{directory}{name}{ext}"
    if overwrite:
        return target

    no = 1
    while os.path.exists(target):
        target = f"{directory}{name}-{no}{ext}"
        no += 1
    return target
