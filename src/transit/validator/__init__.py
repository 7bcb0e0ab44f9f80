"""Validators run against an upload before it is finalised.

Exports
-------
Validator
    Protocol every validator satisfies.
RuleValidator
    Size, extension and MIME-type rules.
ImageValidator
    RuleValidator plus pixel dimension rules.
"""

from .base import Rule, RuleValidator, Validator
from .image import ImageValidator

__all__ = [
    "ImageValidator",
    "Rule",
    "RuleValidator",
    "Validator",
]
