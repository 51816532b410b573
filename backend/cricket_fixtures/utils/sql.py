"""
SQL utilities for consistent handling of query results.

SQLModel/SQLAlchemy may return aggregate results as a scalar, a 1-tuple/Row,
or None when no rows matched. Use these helpers to coerce them.
"""
from typing import Any


def scalar_int(x: Any, default: int = 0) -> int:
    """Convert COUNT/MAX result to int. Handles int, 1-tuple/Row and None."""
    if isinstance(x, (tuple, list)) or hasattr(x, "_mapping"):
        x = x[0]
    if x is None:
        return default
    return int(x)

