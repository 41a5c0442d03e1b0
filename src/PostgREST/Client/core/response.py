# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Response wrapper for PostgREST requests.

:class:`PostgrestResponse` exposes the decoded JSON body, the raw body, the
``Content-Range`` bounds used by paging and counting, and query values from the
``Location`` header returned by inserts.

Example::

    response = client.run(client.from_("api", "films").select().count(CountType.EXACT).limit(10))
    rows = response.result()
    print(response.range_start, response.range_end, response.range_total)  # 0 9 120
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import pandas as pd
import requests

from ..common.constants import HEADER_CONTENT_RANGE, HEADER_CONTENT_TYPE, HEADER_LOCATION
from ..utils._pandas import rows_to_dataframe


@dataclass(frozen=True)
class RequestMetadata:
    """
    Diagnostics for one HTTP request.

    :param client_request_id: Client-generated ID passed to telemetry hooks and spans.
    :type client_request_id: :class:`str` | None
    :param http_status_code: HTTP response status code.
    :type http_status_code: :class:`int` | None
    :param timing_ms: Wall-clock duration of the request in milliseconds.
    :type timing_ms: :class:`float` | None
    """

    client_request_id: Optional[str] = None
    http_status_code: Optional[int] = None
    timing_ms: Optional[float] = None


class PostgrestResponse:
    """
    Wraps the :class:`requests.Response` of a successful PostgREST request.

    :param response: The underlying HTTP response.
    :type response: :class:`requests.Response`
    :param metadata: Optional request diagnostics.
    :type metadata: RequestMetadata or None
    """

    def __init__(self, response: requests.Response, metadata: Optional[RequestMetadata] = None) -> None:
        self._response = response
        self.metadata = metadata or RequestMetadata(http_status_code=response.status_code)
        self._range = _parse_content_range(response.headers.get(HEADER_CONTENT_RANGE))

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    @property
    def range_start(self) -> Optional[int]:
        """First row index from ``Content-Range``, or None."""
        return self._range[0]

    @property
    def range_end(self) -> Optional[int]:
        """Last row index from ``Content-Range``, or None."""
        return self._range[1]

    @property
    def range_total(self) -> Optional[int]:
        """Total row count from ``Content-Range`` (needs :meth:`count`), or None."""
        return self._range[2]

    def raw_result(self) -> str:
        """The response body as text."""
        return self._response.text

    def result(self) -> Any:
        """
        Decode the JSON body.

        :return: The decoded value, or None when the body is empty or the
            content type is not JSON (e.g. ``text/csv``).
        :raises ValueError: If a JSON content type carries a malformed body.
        """
        media_type = (self._response.headers.get(HEADER_CONTENT_TYPE) or "").split(";", 1)[0].strip().lower()
        if not media_type.endswith("json"):
            return None
        body = self._response.text
        if not body:
            return None
        return json.loads(body)

    def location(self, field: str) -> Optional[str]:
        """
        Read a column value from the ``Location`` header of an insert.

        PostgREST answers ``Prefer: return=headers-only`` with a header such
        as ``/films?id=eq.42``; ``location("id")`` then returns ``"42"``.

        :param field: Column name to look up.
        :return: The value without its operator prefix, or None if absent.
        :rtype: str or None
        """
        header = self._response.headers.get(HEADER_LOCATION)
        if not header:
            return None
        values = parse_qs(urlsplit(header).query, keep_blank_values=True).get(field)
        if not values:
            return None
        _, _, value = values[0].partition(".")
        return value

    def to_dataframe(self) -> pd.DataFrame:
        """
        Return the JSON rows as a DataFrame.

        A single JSON object becomes a one-row frame; an empty or non-JSON
        body becomes an empty frame.

        :rtype: :class:`pandas.DataFrame`
        :raises TypeError: If the body decodes to something other than an object or a list of objects.
        """
        data = self.result()
        if data is None:
            return pd.DataFrame()
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise TypeError(f"Cannot build a DataFrame from a JSON {type(data).__name__}")
        return rows_to_dataframe(data)

    def __repr__(self) -> str:
        return f"PostgrestResponse(status_code={self.status_code})"


def _parse_content_range(header: Optional[str]) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """Parse ``0-24/120``, ``*/120`` or ``0-24/*`` into ``(start, end, total)``."""
    if not header:
        return None, None, None
    bounds, _, total = header.strip().partition("/")
    start = end = None
    if bounds and bounds != "*" and "-" in bounds:
        low, _, high = bounds.partition("-")
        if low.isdigit() and high.isdigit():
            start, end = int(low), int(high)
    return start, end, int(total) if total.isdigit() else None


__all__ = ["PostgrestResponse", "RequestMetadata"]
