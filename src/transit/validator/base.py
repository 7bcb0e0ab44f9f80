"""Validator protocol and the rule-based default implementation.

A validator is handed a :class:`~transit.file.File` and checks it against
a list of named rules before an upload is finalised::

    validator = (
        RuleValidator()
        .add_rule("size", "File must be 2 MiB or less", 2 * 1024 * 1024)
        .add_rule("ext", "Only images allowed", ["jpg", "png"])
    )
    validator.set_file(File("/tmp/upload.png")).validate()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from transit.errors import TransitConfigurationError, TransitValidationError
from transit.file import File


@runtime_checkable
class Validator(Protocol):
    """Interface every validator must satisfy."""

    def set_file(self, file: File) -> Validator:
        """Set the file to validate and return ``self`` for chaining."""
        ...

    def validate(self) -> bool:
        """Run all rules.

        Raises
        ------
        TransitValidationError
            Listing the failed rule(s) in ``context["failures"]``.
        """
        ...


@dataclass
class Rule:
    """A rule registered on a :class:`RuleValidator`."""

    name: str
    message: str
    options: Any = None


class RuleValidator:
    """Validator driven by named rules.

    Built-in rules
    --------------
    ``size``
        Maximum size in bytes.
    ``min_size``
        Minimum size in bytes.
    ``ext``
        Extension whitelist (case-insensitive, leading dots ignored).
    ``type``
        MIME whitelist.  Entries without a ``/`` match the top-level type,
        so ``"image"`` accepts ``image/png``.

    Subclasses add rules by defining ``check_<name>(options) -> bool``.
    """

    def __init__(self) -> None:
        self._file: File | None = None
        self._rules: list[Rule] = []

    def add_rule(self, rule: str, message: str, options: Any = None) -> RuleValidator:
        """Register *rule* with a failure *message*.

        Raises
        ------
        TransitConfigurationError
            If no ``check_<rule>`` method exists.
        """
        if self._checker(rule) is None:
            raise TransitConfigurationError(
                message=f"Validation rule {rule!r} does not exist",
                context={"option": rule},
            )
        self._rules.append(Rule(name=rule, message=message, options=options))
        return self

    def get_rules(self) -> list[Rule]:
        return list(self._rules)

    def get_file(self) -> File | None:
        return self._file

    def set_file(self, file: File) -> RuleValidator:
        self._file = file
        return self

    def validate(self) -> bool:
        """Check every rule and raise if any failed.

        All rules are evaluated; the raised error's message is that of the
        first failing rule and ``context["failures"]`` maps every failing
        rule name to its message.
        """
        if self._file is None:
            raise TransitValidationError("No file has been set for validation")

        failures: dict[str, str] = {}
        for rule in self._rules:
            checker = self._checker(rule.name)
            if not checker(rule.options):
                failures[rule.name] = rule.message

        if failures:
            raise TransitValidationError(
                message=next(iter(failures.values())),
                context={"failures": failures, "path": self._file.path()},
            )
        return True

    def _checker(self, rule: str) -> Callable[[Any], bool] | None:
        return getattr(self, f"check_{rule}", None)

    # ── Built-in rules ──────────────────────────────────────────────────

    def check_size(self, max_bytes: int) -> bool:
        return self._file.size() <= int(max_bytes)

    def check_min_size(self, min_bytes: int) -> bool:
        return self._file.size() >= int(min_bytes)

    def check_ext(self, allowed: list[str] | str) -> bool:
        if isinstance(allowed, str):
            allowed = [allowed]
        return self._file.ext() in {a.lower().lstrip(".") for a in allowed}

    def check_type(self, allowed: list[str] | str) -> bool:
        if isinstance(allowed, str):
            allowed = [allowed]
        mime = self._file.type()
        major = mime.split("/", 1)[0]
        for entry in allowed:
            entry = entry.lower()
            if entry == mime or ("/" not in entry and entry == major):
                return True
        return False
