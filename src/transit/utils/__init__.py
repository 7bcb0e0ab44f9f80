from .paths import split_name, unique_path
from .redact import redact

__all__ = [
    "redact",
    "split_name",
    "unique_path",
]
