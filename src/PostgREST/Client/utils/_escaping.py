# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal helpers for rendering values into the PostgREST filter grammar."""

from __future__ import annotations

from typing import Any, Iterable, Sequence, Union
from urllib.parse import quote

from ..common.constants import QUERY_SAFE_CHARACTERS, RESERVED_FILTER_CHARACTERS

FilterValue = Union[str, int, float]

_UNIFIABLE_TYPES = (str, int, float)


def escape_string(value: str) -> str:
    """Quote a string value when it contains reserved characters or whitespace.

    Backslashes and double quotes inside a quoted value are escaped with a
    backslash, e.g. ``a,b`` becomes ``"a,b"`` and ``say "hi"`` becomes
    ``"say \\"hi\\""``.
    """
    if not value or not any(ch in RESERVED_FILTER_CHARACTERS or ch.isspace() for ch in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_value(value: Any) -> str:
    """Render a single filter value. Strings are escaped, numbers use ``str()``."""
    if isinstance(value, str):
        return escape_string(value)
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def implode_with_braces(values: Iterable[Any], opening: str = "{", closing: str = "}") -> str:
    """Join formatted values with ``,`` and wrap them, e.g. ``{a,"b c",3}``."""
    return f"{opening}{','.join(format_value(v) for v in values)}{closing}"


def check_unified_value_types(values: Sequence[Any]) -> bool:
    """Return True when every value has the same type and that type is ``str``, ``int`` or ``float``.

    ``bool`` is never accepted even though it subclasses ``int``.
    """
    if not values:
        return True
    first = type(values[0])
    if first not in _UNIFIABLE_TYPES:
        return False
    return all(type(v) is first for v in values)


def encode_query_fragment(fragment: str) -> str:
    """Percent-encode a ``key=value`` fragment for the query string.

    Key and value are encoded separately so only the first ``=`` stays
    literal. Grammar characters such as ``.`` ``,`` ``(`` ``{`` ``*`` are
    kept, while ``#`` ``&`` ``+`` ``%`` and whitespace are encoded, e.g.
    ``co=eq.A&B`` becomes ``co=eq.A%26B``.
    """
    key, sep, value = fragment.partition("=")
    return f"{quote(key, safe=QUERY_SAFE_CHARACTERS)}{sep}{quote(value, safe=QUERY_SAFE_CHARACTERS)}"
