# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Fluent request builder for PostgREST tables and views.

Each chained call mutates the builder and returns it. Filter calls append one
query-string fragment each; verbs (``select``/``insert``/``upsert``/``update``/
``delete``) set the HTTP method, body and ``Prefer`` directives. The finished
builder is serialized with :meth:`PostgrestRequestBuilder.get_request_data`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from ..common.constants import (
    CONTENT_TYPE_CSV,
    CONTENT_TYPE_JSON,
    HEADER_ACCEPT_PROFILE,
    HEADER_CONTENT_PROFILE,
    HEADER_CONTENT_TYPE,
    HEADER_PREFER,
    PREFER_MISSING_DEFAULT,
    PREFER_SEPARATOR,
)
from ..core import _error_codes as codes
from ..core.errors import DataEncodingError, FilterLogicError, NotUnifiedValuesError
from ..utils._escaping import (
    FilterValue,
    check_unified_value_types,
    encode_query_fragment,
    escape_string,
    format_value,
    implode_with_braces,
)
from ..utils._pandas import dataframe_to_records, records_to_csv
from .condition import LogicOperatorCondition
from .enums import (
    CountType,
    DataFormat,
    DuplicateResolution,
    FilterOperator,
    IsCheck,
    LogicOperator,
    OperatorModifier,
    OrderNulls,
    OverlapType,
    ReturnFormat,
)
from .order_column import OrderColumn

__all__ = ["PostgrestRequestBuilder"]

RequestData = Tuple[str, str, Dict[str, str], str]
Records = Union[Mapping[str, Any], Sequence[Mapping[str, Any]], pd.DataFrame]


@dataclass
class PostgrestRequestBuilder:
    """
    Fluent interface for building a PostgREST request against one table.

    Negation (:meth:`not_`) and modifiers (:meth:`any` / :meth:`all`) apply to
    the next filter call only. Only one verb may be used per builder; build a
    new builder for each request.

    :param schema_name: Schema sent in ``Accept-Profile`` and ``Content-Profile``.
    :type schema_name: str
    :param table_name: Table, view or ``rpc/<function>`` path.
    :type table_name: str

    Example:
        Build a filtered select::

            builder = (PostgrestRequestBuilder("api", "films")
                       .select("title", "year")
                       .gte("year", 1990)
                       .any()
                       .like("title", "*Matrix*", "*Terminator*")
                       .order_by(OrderColumn("year", OrderDirection.DESC))
                       .limit(10))
            method, url, headers, body = builder.get_request_data()
            # url == 'films?select=title,year&year=gte.1990&title=like(any).{*Matrix*,*Terminator*}'
            #        '&order=year.desc&limit=10'
    """

    schema_name: str
    table_name: str
    _filters: List[str] = field(default_factory=list)
    _method: str = ""
    _headers: Dict[str, str] = field(default_factory=dict)
    _body: Optional[str] = None
    _negate_next_filter: bool = False
    _modifier: Optional[OperatorModifier] = None

    def __post_init__(self) -> None:
        self._headers.setdefault(HEADER_ACCEPT_PROFILE, self.schema_name)
        self._headers.setdefault(HEADER_CONTENT_PROFILE, self.schema_name)

    # ------------------------------------------------------------- headers

    @property
    def method(self) -> str:
        """HTTP method chosen by the verb, or ``""`` when no verb was used yet."""
        return self._method

    @property
    def filters(self) -> List[str]:
        return list(self._filters)

    def get_header(self, name: str) -> Optional[str]:
        """
        Get a header value by name.

        :param name: Header name.
        :return: The header value, or None if it is not set.
        :rtype: str or None
        """
        return self._headers.get(name)

    def set_header(self, name: str, value: str) -> "PostgrestRequestBuilder":
        """
        Set a header, replacing any previous value.

        :param name: Header name, e.g. ``"Accept"``.
        :param value: Header value, e.g. ``"text/csv"``.
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        """
        self._headers[name] = value
        return self

    # --------------------------------------------------------------- verbs

    def select(self, *columns: str) -> "PostgrestRequestBuilder":
        """
        Read rows. Appends ``select=c1,c2`` when columns are given.

        :param columns: Columns (or embedded resources) to return.
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder

        Example::

            PostgrestRequestBuilder("api", "films").select("title", "director(name)")
        """
        self._set_method("GET")
        if columns:
            self._filters.append(f"select={','.join(columns)}")
        return self

    def insert(
        self,
        data: Records,
        columns: Optional[Sequence[str]] = None,
        missing_as_default: bool = False,
        data_format: DataFormat = DataFormat.JSON,
        return_format: ReturnFormat = ReturnFormat.NONE,
    ) -> "PostgrestRequestBuilder":
        """
        Insert one row or many rows.

        :param data: A single row mapping, a list of row mappings, or a DataFrame.
        :param columns: Restrict the inserted columns (``columns=c1,c2``).
        :type columns: list[str] or None
        :param missing_as_default: Use column defaults for keys missing from a row.
        :type missing_as_default: bool
        :param data_format: Send the body as JSON or CSV.
        :type data_format: DataFormat
        :param return_format: ``Prefer: return=...`` directive.
        :type return_format: ReturnFormat
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        :raises NotUnifiedValuesError: If ``columns`` mixes value types.
        :raises DataEncodingError: If the data cannot be encoded.

        Example::

            builder.insert(
                [{"a": "x", "b": 1}, {"a": "y"}],
                columns=["a", "b"],
                missing_as_default=True,
                return_format=ReturnFormat.REPRESENTATION,
            )
        """
        fragment = None
        if columns:
            self._require_unified(list(columns))
            fragment = f"columns={implode_with_braces(columns, '', '')}"
        return self._insert(data, missing_as_default, data_format, return_format, fragment=fragment)

    def upsert(
        self,
        data: Records,
        data_format: DataFormat = DataFormat.JSON,
        return_format: ReturnFormat = ReturnFormat.NONE,
        duplicate_resolution: DuplicateResolution = DuplicateResolution.MERGE,
        on_conflict: Optional[Sequence[str]] = None,
    ) -> "PostgrestRequestBuilder":
        """
        Insert rows, resolving conflicts with existing rows.

        :param data: A single row mapping, a list of row mappings, or a DataFrame.
        :param data_format: Send the body as JSON or CSV.
        :param return_format: ``Prefer: return=...`` directive.
        :param duplicate_resolution: Merge or ignore duplicates. ``NONE`` is rejected.
        :type duplicate_resolution: DuplicateResolution
        :param on_conflict: Unique columns used to detect conflicts (``on_conflict=c1,c2``).
        :type on_conflict: list[str] or None
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        :raises FilterLogicError: If ``duplicate_resolution`` is ``NONE``.
        :raises NotUnifiedValuesError: If ``on_conflict`` mixes value types.
        """
        if duplicate_resolution == DuplicateResolution.NONE:
            raise FilterLogicError(
                FilterLogicError.DUPLICATE_RESOLUTION_REQUIRED,
                subcode=codes.FILTER_DUPLICATE_RESOLUTION_REQUIRED,
            )
        fragment = None
        if on_conflict:
            self._require_unified(list(on_conflict))
            fragment = f"on_conflict={implode_with_braces(on_conflict, '', '')}"
        return self._insert(data, False, data_format, return_format, duplicate_resolution, fragment)

    def update(self, data: Mapping[str, Any], return_format: ReturnFormat = ReturnFormat.NONE) -> "PostgrestRequestBuilder":
        """
        Update rows matched by the filters with ``data``.

        :param data: Column/value pairs to set.
        :type data: dict
        :param return_format: ``Prefer: return=...`` directive.
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        :raises DataEncodingError: If ``data`` cannot be encoded as JSON.

        Example::

            builder.update({"b": 11}, ReturnFormat.REPRESENTATION).eq("a", "test1")
        """
        self._check_method_unset("PATCH")
        body = self._encode_json(data)
        self._set_method("PATCH")
        self._headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON
        self._body = body
        self._set_return_format(return_format)
        return self

    def delete(self, return_format: ReturnFormat = ReturnFormat.NONE) -> "PostgrestRequestBuilder":
        """
        Delete rows matched by the filters.

        :param return_format: ``Prefer: return=...`` directive.
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        """
        self._set_method("DELETE")
        self._set_return_format(return_format)
        return self

    # ------------------------------------------------ pagination, counting

    def order_by(self, *columns: OrderColumn) -> "PostgrestRequestBuilder":
        """
        Order results, e.g. ``order=b.desc.nullslast,a.asc``.

        :param columns: One or more columns in priority order.
        :type columns: OrderColumn
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        """
        if not columns:
            raise ValueError("order_by requires at least one column")
        orders = []
        for column in columns:
            order = f"{escape_string(column.name)}.{column.direction.value}"
            if column.nulls != OrderNulls.NONE:
                order += f".{column.nulls.value}"
            orders.append(order)
        self._filters.append(f"order={','.join(orders)}")
        return self

    def limit(self, limit: int) -> "PostgrestRequestBuilder":
        """
        Limit the number of rows returned.

        :param limit: Maximum number of rows.
        :type limit: int
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        """
        if limit < 0:
            raise ValueError("limit must not be negative")
        self._filters.append(f"limit={int(limit)}")
        return self

    def offset(self, offset: int) -> "PostgrestRequestBuilder":
        """Skip the first ``offset`` rows."""
        if offset < 0:
            raise ValueError("offset must not be negative")
        self._filters.append(f"offset={int(offset)}")
        return self

    def count(self, count_type: CountType) -> "PostgrestRequestBuilder":
        """
        Ask PostgREST to count the rows, reported in the ``Content-Range`` header.

        :param count_type: Exact, planned or estimated count.
        :type count_type: CountType
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        """
        self._append_prefer_header(count_type.value)
        return self

    # ----------------------------------------------------- filter modifiers

    def not_(self) -> "PostgrestRequestBuilder":
        """Negate the next filter or logic group."""
        self._negate_next_filter = True
        return self

    def any(self) -> "PostgrestRequestBuilder":
        """Match the next multi-value filter if any value matches."""
        return self._set_modifier(OperatorModifier.ANY)

    def all(self) -> "PostgrestRequestBuilder":
        """Match the next multi-value filter only if all values match."""
        return self._set_modifier(OperatorModifier.ALL)

    # -------------------------------------------------- comparison filters

    def eq(self, column: str, *values: FilterValue) -> "PostgrestRequestBuilder":
        """
        Equality filter, ``column=eq.value``.

        Several values require :meth:`any` or :meth:`all` first and render
        ``column=eq(any).{v1,v2}``.

        :param column: Column name.
        :param values: One or more values of the same type.
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        :raises FilterLogicError: If several values are given without a modifier.
        :raises NotUnifiedValuesError: If the values mix types.
        """
        return self._modifiable_filter(FilterOperator.EQUAL, column, values)

    def gt(self, column: str, *values: FilterValue) -> "PostgrestRequestBuilder":
        """Greater-than filter, ``column=gt.value``."""
        return self._modifiable_filter(FilterOperator.GREATER_THAN, column, values)

    def gte(self, column: str, *values: FilterValue) -> "PostgrestRequestBuilder":
        """Greater-than-or-equal filter, ``column=gte.value``."""
        return self._modifiable_filter(FilterOperator.GREATER_THAN_OR_EQUAL, column, values)

    def lt(self, column: str, *values: FilterValue) -> "PostgrestRequestBuilder":
        """Less-than filter, ``column=lt.value``."""
        return self._modifiable_filter(FilterOperator.LESS_THAN, column, values)

    def lte(self, column: str, *values: FilterValue) -> "PostgrestRequestBuilder":
        """Less-than-or-equal filter, ``column=lte.value``."""
        return self._modifiable_filter(FilterOperator.LESS_THAN_OR_EQUAL, column, values)

    def neq(self, column: str, *values: FilterValue) -> "PostgrestRequestBuilder":
        """Not-equal filter, ``column=neq.value``."""
        return self._modifiable_filter(FilterOperator.NOT_EQUAL, column, values)

    def like(self, column: str, *values: str) -> "PostgrestRequestBuilder":
        """
        Case-sensitive pattern filter. Use ``*`` as the wildcard.

        Example::

            builder.like("title", "*Matrix*")
        """
        return self._modifiable_filter(FilterOperator.LIKE, column, values)

    def ilike(self, column: str, *values: str) -> "PostgrestRequestBuilder":
        """Case-insensitive pattern filter. Use ``*`` as the wildcard."""
        return self._modifiable_filter(FilterOperator.ILIKE, column, values)

    def match(self, column: str, *values: str) -> "PostgrestRequestBuilder":
        """POSIX regular expression filter (``~``)."""
        return self._modifiable_filter(FilterOperator.MATCH, column, values)

    def imatch(self, column: str, *values: str) -> "PostgrestRequestBuilder":
        """Case-insensitive POSIX regular expression filter (``~*``)."""
        return self._modifiable_filter(FilterOperator.IMATCH, column, values)

    def in_(self, column: str, *values: FilterValue) -> "PostgrestRequestBuilder":
        """
        Membership filter, ``column=in.(v1,v2,v3)``. No modifier is needed.

        :raises NotUnifiedValuesError: If the values mix types.
        """
        self._require_values(values)
        self._require_unified(values)
        self._reject_modifier(FilterOperator.IN)
        operator = self._negate_operator(FilterOperator.IN)
        return self._filter_column(column, operator, implode_with_braces(values, "(", ")"))

    def is_(self, column: str, value: IsCheck) -> "PostgrestRequestBuilder":
        """
        Exact equality for ``null``, ``true``, ``false`` and ``unknown``.

        Example::

            builder.is_("deleted_at", IsCheck.NULL)   # deleted_at=is.null
        """
        self._reject_modifier(FilterOperator.IS)
        operator = self._negate_operator(FilterOperator.IS)
        return self._filter_column(column, operator, IsCheck(value).value)

    def isdistinct(self, column: str, value: FilterValue) -> "PostgrestRequestBuilder":
        """``IS DISTINCT FROM`` filter, ``column=isdistinct.value``."""
        self._reject_modifier(FilterOperator.IS_DISTINCT_FROM)
        operator = self._negate_operator(FilterOperator.IS_DISTINCT_FROM)
        return self._filter_column(column, operator, format_value(value))

    # --------------------------------------------------- full text search

    def fts(self, column: str, value: str, language: Optional[str] = None) -> "PostgrestRequestBuilder":
        """
        Full text search using ``to_tsquery``.

        :param column: The ``tsvector`` (or text) column.
        :param value: The query.
        :param language: Optional text search configuration, e.g. ``"english"``.

        Example::

            builder.fts("plot", "Matrix", "english")   # plot=fts(english).Matrix
        """
        return self._fts_filter(FilterOperator.FULL_TEXT_SEARCH, column, value, language)

    def plfts(self, column: str, value: str, language: Optional[str] = None) -> "PostgrestRequestBuilder":
        """Full text search using ``plainto_tsquery``."""
        return self._fts_filter(FilterOperator.PLAIN_FULL_TEXT_SEARCH, column, value, language)

    def phfts(self, column: str, value: str, language: Optional[str] = None) -> "PostgrestRequestBuilder":
        """Full text search using ``phraseto_tsquery``."""
        return self._fts_filter(FilterOperator.PHRASE_FULL_TEXT_SEARCH, column, value, language)

    def wfts(self, column: str, value: str, language: Optional[str] = None) -> "PostgrestRequestBuilder":
        """Full text search using ``websearch_to_tsquery``."""
        return self._fts_filter(FilterOperator.WEBSEARCH_FULL_TEXT_SEARCH, column, value, language)

    # ----------------------------------------------- array and range filters

    def cs(self, column: str, values: Sequence[FilterValue]) -> "PostgrestRequestBuilder":
        """
        Contains filter for arrays, ``column=cs.{1,3}``.

        :param values: Members that must all be present.
        :raises NotUnifiedValuesError: If the values mix types.
        """
        return self._array_filter(FilterOperator.CONTAINS, column, values)

    def cd(self, column: str, values: Sequence[FilterValue]) -> "PostgrestRequestBuilder":
        """Contained-in filter for arrays, ``column=cd.{1,2,3}``."""
        return self._array_filter(FilterOperator.CONTAINED_IN, column, values)

    def ov(self, column: str, overlap_type: OverlapType, *values: FilterValue) -> "PostgrestRequestBuilder":
        """
        Overlap filter for arrays or ranges.

        ``OverlapType.ARRAY`` renders ``{a,b,...}``. The range kinds need
        exactly two bounds and render ``[a,b]``, ``(a,b)``, ``(a,b]`` or ``[a,b)``.

        Example::

            builder.ov("tags", OverlapType.ARRAY, 1, 4, 7)              # tags=ov.{1,4,7}
            builder.ov("during", OverlapType.RANGE_UPPER_EXCLUSIVE, 1, 4)  # during=ov.[1,4)

        :raises FilterLogicError: If a range overlap does not get exactly two values.
        :raises NotUnifiedValuesError: If the values mix types.
        """
        self._require_values(values)
        self._require_unified(values)
        self._reject_modifier(FilterOperator.OVERLAP)
        if overlap_type == OverlapType.ARRAY:
            literal = implode_with_braces(values)
        else:
            if len(values) != 2:
                raise FilterLogicError(
                    "Range overlap requires exactly two bounds",
                    subcode=codes.FILTER_INVALID_RANGE,
                    details={"count": len(values)},
                )
            opening, closing = overlap_type.value
            literal = implode_with_braces(values, opening, closing)
        operator = self._negate_operator(FilterOperator.OVERLAP)
        return self._filter_column(column, operator, literal)

    def sl(self, column: str, lower: FilterValue, upper: FilterValue) -> "PostgrestRequestBuilder":
        """Strictly left of the range, ``column=sl.(lower,upper)``."""
        return self._range_filter(FilterOperator.STRICTLY_LEFT_OF, column, lower, upper)

    def sr(self, column: str, lower: FilterValue, upper: FilterValue) -> "PostgrestRequestBuilder":
        """Strictly right of the range, ``column=sr.(lower,upper)``."""
        return self._range_filter(FilterOperator.STRICTLY_RIGHT_OF, column, lower, upper)

    def nxr(self, column: str, lower: FilterValue, upper: FilterValue) -> "PostgrestRequestBuilder":
        """Does not extend to the right of the range, ``column=nxr.(lower,upper)``."""
        return self._range_filter(FilterOperator.NOT_EXTEND_TO_RIGHT, column, lower, upper)

    def nxl(self, column: str, lower: FilterValue, upper: FilterValue) -> "PostgrestRequestBuilder":
        """Does not extend to the left of the range, ``column=nxl.(lower,upper)``."""
        return self._range_filter(FilterOperator.NOT_EXTEND_TO_LEFT, column, lower, upper)

    def adj(self, column: str, lower: FilterValue, upper: FilterValue) -> "PostgrestRequestBuilder":
        """Adjacent to the range, ``column=adj.(lower,upper)``."""
        return self._range_filter(FilterOperator.ADJACENT, column, lower, upper)

    # ------------------------------------------------------ logic operators

    def and_(self, *conditions: Union[str, LogicOperatorCondition]) -> "PostgrestRequestBuilder":
        """
        Group conditions with ``and``, e.g. ``and=(a.gte.1,a.lte.5)``.

        Conditions are rendered as given; escape string values yourself.
        Nest groups by passing raw strings such as ``"or(b.eq.1,b.eq.2)"``.

        :param conditions: Raw condition strings or :class:`LogicOperatorCondition` objects.
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        """
        return self._logic_filter(LogicOperator.AND, conditions)

    def or_(self, *conditions: Union[str, LogicOperatorCondition]) -> "PostgrestRequestBuilder":
        """
        Group conditions with ``or``, e.g. ``or=(a.eq.1,b.is.null)``.

        Example::

            builder.or_(
                LogicOperatorCondition("age", FilterOperator.LESS_THAN, 18),
                "age.gt.65",
            )
        """
        return self._logic_filter(LogicOperator.OR, conditions)

    def filter_raw(self, fragment: str) -> "PostgrestRequestBuilder":
        """
        Append a pre-built query-string fragment.

        The fragment is given unencoded; it is percent-encoded with the others
        by :meth:`get_request_data`.

        :param fragment: Fragment such as ``"a=eq.1"``.
        :return: Self for method chaining.
        :rtype: PostgrestRequestBuilder
        """
        self._filters.append(fragment)
        return self

    # ------------------------------------------------------------ assembly

    def get_request_data(self) -> RequestData:
        """
        Serialize the request.

        The URL is the table name, followed by ``?`` and the ``&``-joined
        fragments when there are any. Each fragment is percent-encoded, so
        values may contain ``#``, ``&`` or ``+``. A builder without a verb is
        sent as GET.

        :return: ``(method, url, headers, body)``; ``body`` is ``""`` when unset.
        :rtype: tuple[str, str, dict[str, str], str]
        """
        method = self._method or "GET"
        query = "&".join(encode_query_fragment(fragment) for fragment in self._filters)
        url = f"{self.table_name}?{query}" if query else self.table_name
        return method, url, dict(self._headers), self._body or ""

    # ----------------------------------------------------------- internals

    def _check_method_unset(self, method: str) -> None:
        if self._method:
            raise FilterLogicError(
                FilterLogicError.METHOD_ALREADY_SET,
                subcode=codes.FILTER_METHOD_ALREADY_SET,
                details={"current": self._method, "requested": method},
            )

    def _set_method(self, method: str) -> None:
        self._check_method_unset(method)
        self._method = method

    def _set_modifier(self, modifier: OperatorModifier) -> "PostgrestRequestBuilder":
        if self._modifier is not None and self._modifier != modifier:
            raise FilterLogicError(FilterLogicError.BOTH_MODIFIERS_ACTIVE, subcode=codes.FILTER_BOTH_MODIFIERS_ACTIVE)
        self._modifier = modifier
        return self

    def _negate_operator(self, operator: Union[FilterOperator, LogicOperator]) -> str:
        if self._negate_next_filter:
            return f"{LogicOperator.NOT.value}.{operator.value}"
        return operator.value

    def _filter_column(self, column: str, operator: str, value: str) -> "PostgrestRequestBuilder":
        self._filters.append(f"{column}={operator}.{value}")
        self._negate_next_filter = False
        self._modifier = None
        return self

    def _modifiable_filter(
        self, operator: FilterOperator, column: str, values: Sequence[FilterValue]
    ) -> "PostgrestRequestBuilder":
        self._require_values(values)
        self._require_unified(values)
        if len(values) > 1 and self._modifier is None:
            raise FilterLogicError(FilterLogicError.MISSING_MODIFIER, subcode=codes.FILTER_MISSING_MODIFIER)
        token = self._negate_operator(operator)
        if self._modifier is not None:
            return self._filter_column(column, f"{token}({self._modifier.value})", implode_with_braces(values))
        return self._filter_column(column, token, format_value(values[0]))

    def _fts_filter(
        self, operator: FilterOperator, column: str, value: str, language: Optional[str]
    ) -> "PostgrestRequestBuilder":
        self._reject_modifier(operator)
        token = self._negate_operator(operator)
        if language is not None:
            token += f"({language})"
        return self._filter_column(column, token, escape_string(value))

    def _array_filter(
        self, operator: FilterOperator, column: str, values: Sequence[FilterValue]
    ) -> "PostgrestRequestBuilder":
        values = list(values)
        self._require_unified(values)
        self._reject_modifier(operator)
        return self._filter_column(column, self._negate_operator(operator), implode_with_braces(values))

    def _range_filter(
        self, operator: FilterOperator, column: str, lower: FilterValue, upper: FilterValue
    ) -> "PostgrestRequestBuilder":
        self._require_unified([lower, upper])
        self._reject_modifier(operator)
        return self._filter_column(column, self._negate_operator(operator), implode_with_braces((lower, upper), "(", ")"))

    def _logic_filter(
        self, operator: LogicOperator, conditions: Sequence[Union[str, LogicOperatorCondition]]
    ) -> "PostgrestRequestBuilder":
        if not conditions:
            raise FilterLogicError(
                f"{operator.value}() requires at least one condition", subcode=codes.FILTER_EMPTY_VALUES
            )
        token = self._negate_operator(operator)
        self._filters.append(f"{token}=({','.join(str(c) for c in conditions)})")
        self._negate_next_filter = False
        self._modifier = None
        return self

    def _reject_modifier(self, operator: FilterOperator) -> None:
        if self._modifier is not None:
            raise FilterLogicError(
                f"{operator.value} does not support the {self._modifier.value}() modifier",
                subcode=codes.FILTER_MODIFIER_NOT_SUPPORTED,
            )

    @staticmethod
    def _require_values(values: Sequence[Any]) -> None:
        if not values:
            raise FilterLogicError("At least one value is required", subcode=codes.FILTER_EMPTY_VALUES)

    @staticmethod
    def _require_unified(values: Sequence[Any]) -> None:
        if not check_unified_value_types(values):
            raise NotUnifiedValuesError(details={"types": sorted({type(v).__name__ for v in values})})

    def _insert(
        self,
        data: Records,
        missing_as_default: bool,
        data_format: DataFormat,
        return_format: ReturnFormat,
        duplicate_resolution: DuplicateResolution = DuplicateResolution.NONE,
        fragment: Optional[str] = None,
    ) -> "PostgrestRequestBuilder":
        # Nothing is mutated until the body is encoded
        self._check_method_unset("POST")
        body, content_type = self._encode_data(data, data_format)
        self._set_method("POST")
        self._body = body
        self._headers[HEADER_CONTENT_TYPE] = content_type
        if fragment:
            self._filters.append(fragment)
        if missing_as_default:
            self._append_prefer_header(PREFER_MISSING_DEFAULT)
        self._set_return_format(return_format)
        if duplicate_resolution != DuplicateResolution.NONE:
            self._append_prefer_header(duplicate_resolution.value)
        return self

    @staticmethod
    def _encode_data(data: Records, data_format: DataFormat) -> Tuple[str, str]:
        if isinstance(data, pd.DataFrame):
            data = dataframe_to_records(data)
        if data_format == DataFormat.CSV:
            rows = [data] if isinstance(data, Mapping) else list(data)
            try:
                return records_to_csv(rows), CONTENT_TYPE_CSV
            except (TypeError, ValueError) as e:
                raise DataEncodingError(DataEncodingError.CSV_ENCODING_FAILED, subcode=codes.ENCODING_CSV_FAILED) from e
        return PostgrestRequestBuilder._encode_json(data), CONTENT_TYPE_JSON

    @staticmethod
    def _encode_json(data: Any) -> str:
        try:
            return json.dumps(data, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise DataEncodingError(
                DataEncodingError.JSON_ENCODING_FAILED,
                subcode=codes.ENCODING_JSON_FAILED,
                details={"reason": str(e)},
            ) from e

    def _set_return_format(self, return_format: ReturnFormat) -> None:
        if return_format != ReturnFormat.NONE:
            self._append_prefer_header(return_format.value)

    def _append_prefer_header(self, directive: str) -> None:
        current = self._headers.get(HEADER_PREFER)
        self._headers[HEADER_PREFER] = f"{current}{PREFER_SEPARATOR}{directive}" if current else directive
