# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Closed sets of PostgREST syntax tokens.

Each member's value is the literal text PostgREST expects in the query string
or in the ``Prefer`` header.

See https://postgrest.org/en/stable/references/api/tables_views.html
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "FilterOperator",
    "LogicOperator",
    "OperatorModifier",
    "OrderDirection",
    "OrderNulls",
    "DataFormat",
    "ReturnFormat",
    "DuplicateResolution",
    "CountType",
    "IsCheck",
    "OverlapType",
]


class FilterOperator(str, Enum):
    """Horizontal filtering operators."""

    EQUAL = "eq"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    NOT_EQUAL = "neq"
    LIKE = "like"
    ILIKE = "ilike"
    MATCH = "match"
    IMATCH = "imatch"
    IN = "in"
    IS = "is"
    IS_DISTINCT_FROM = "isdistinct"
    FULL_TEXT_SEARCH = "fts"
    PLAIN_FULL_TEXT_SEARCH = "plfts"
    PHRASE_FULL_TEXT_SEARCH = "phfts"
    WEBSEARCH_FULL_TEXT_SEARCH = "wfts"
    CONTAINS = "cs"
    CONTAINED_IN = "cd"
    OVERLAP = "ov"
    STRICTLY_LEFT_OF = "sl"
    STRICTLY_RIGHT_OF = "sr"
    NOT_EXTEND_TO_RIGHT = "nxr"
    NOT_EXTEND_TO_LEFT = "nxl"
    ADJACENT = "adj"


class LogicOperator(str, Enum):
    NOT = "not"
    OR = "or"
    AND = "and"


class OperatorModifier(str, Enum):
    ALL = "all"
    ANY = "any"


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class OrderNulls(str, Enum):
    """Placement of NULL values when ordering. ``NONE`` leaves it to the server."""

    NONE = ""
    NULLS_FIRST = "nullsfirst"
    NULLS_LAST = "nullslast"


class DataFormat(str, Enum):
    """Body formats accepted for inserts."""

    JSON = "json"
    CSV = "csv"


class ReturnFormat(str, Enum):
    """``Prefer: return=...`` values. ``NONE`` sends no preference."""

    NONE = ""
    REPRESENTATION = "return=representation"
    HEADERS_ONLY = "return=headers-only"
    MINIMAL = "return=minimal"


class DuplicateResolution(str, Enum):
    """``Prefer: resolution=...`` values used by upserts."""

    NONE = ""
    MERGE = "resolution=merge-duplicates"
    IGNORE = "resolution=ignore-duplicates"


class CountType(str, Enum):
    EXACT = "count=exact"
    PLANNED = "count=planned"
    ESTIMATED = "count=estimated"


class IsCheck(str, Enum):
    """Values accepted by the ``is`` operator."""

    NULL = "null"
    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"


class OverlapType(str, Enum):
    """
    Literal used by the ``ov`` operator.

    ``ARRAY`` renders ``{a,b,...}``; the range kinds render a two-bound range
    literal whose brackets encode bound inclusivity.
    """

    ARRAY = "array"
    RANGE_INCLUSIVE = "[]"
    RANGE_EXCLUSIVE = "()"
    RANGE_LOWER_EXCLUSIVE = "(]"
    RANGE_UPPER_EXCLUSIVE = "[)"
