from __future__ import annotations

from ..types import Value

def is_truthy(val: Value) -> bool:
    """Only nil and false are falsey."""
    return val is not None and val is not False
