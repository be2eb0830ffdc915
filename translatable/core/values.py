"""Emptiness rules for translated values.

These are explicit rules, not Python truthiness:

* ``None``, ``""``, ``False`` and empty containers are absent.
* integer ``0`` and ``"0"`` are present, because checkbox-like fields
  legitimately store zero. A zero float or ``Decimal`` is absent.
* Everything else is present.

Index rows use a narrower rule: only ``None`` and ``""`` count as empty, and
only scalars can be indexed.
"""
from decimal import Decimal
from typing import Any, Optional

from translatable.core.exceptions import UnsupportedIndexValueError

INDEXABLE_TYPES = (str, int, float, Decimal, bool)


def has_value(value: Any) -> bool:
    if value is None or value is False:
        return False
    if value == "0":
        return True
    if isinstance(value, int):
        return True
    if isinstance(value, (float, Decimal)):
        return value != 0
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) > 0
    return True


def index_scalar(attribute: str, value: Any) -> Optional[str]:
    """Text stored in the index table for ``value``; ``None`` means no row.

    Structured values raise ``UnsupportedIndexValueError`` instead of being
    stringified.
    """
    if value is None:
        return None
    if not isinstance(value, INDEXABLE_TYPES):
        raise UnsupportedIndexValueError(attribute, value)
    if isinstance(value, bool):
        return "1" if value else "0"
    text = str(value)
    return text or None
