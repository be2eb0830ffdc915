"""Comparison operators accepted by translated filters."""
from typing import Any

from translatable.core.exceptions import UnsupportedOperatorError

_OPERATORS = {
    "=": lambda column, value: column == value,
    "==": lambda column, value: column == value,
    "!=": lambda column, value: column != value,
    "<>": lambda column, value: column != value,
    "<": lambda column, value: column < value,
    "<=": lambda column, value: column <= value,
    ">": lambda column, value: column > value,
    ">=": lambda column, value: column >= value,
    "like": lambda column, value: column.like(value),
    "ilike": lambda column, value: column.ilike(value),
}

SUPPORTED_OPERATORS = sorted(_OPERATORS)


def compare(column: Any, operator: str, value: Any):
    """Build ``column <operator> value`` as a SQL expression."""
    try:
        build = _OPERATORS[operator.lower()]
    except KeyError:
        raise UnsupportedOperatorError(operator, SUPPORTED_OPERATORS) from None
    return build(column, value)
