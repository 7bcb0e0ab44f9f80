"""Transporter protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from transit.file import File


@runtime_checkable
class Transporter(Protocol):
    """Interface every transporter must satisfy.

    ``transport`` moves a local file to its destination and returns a
    location identifier; ``delete`` removes a previously transported object
    by that identifier.
    """

    def transport(self, file: File) -> str:
        ...

    def delete(self, location: str) -> bool:
        ...
