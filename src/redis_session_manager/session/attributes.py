"""Attribute value encoding.

Session attributes live as fields of a Redis hash, so every value is
stored as a string.  Only the value kinds in ``AttributeValue`` are
accepted; anything richer must be serialized by the caller first.
"""
from __future__ import annotations

from typing import Union

AttributeValue = Union[str, int, float, bool]


def encode_attribute(value: AttributeValue) -> str:
    """Return the stored string form of ``value``.

    Raises
    ------
    TypeError
        If ``value`` is not a ``str``, ``int``, ``float`` or ``bool``.
    """
    # bool first: it is a subclass of int.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(
        f"Unsupported session attribute type {type(value).__name__!r}; "
        "serialize the value to a string first."
    )
