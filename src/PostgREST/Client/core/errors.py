# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exception hierarchy for the PostgREST client.

Every error raised by the package derives from :class:`PostgrestError`, which
carries a stable ``code``/``subcode`` pair and a ``details`` mapping so callers
can branch on failures without parsing messages.

- :class:`FilterLogicError`: invalid modifier, negation or value-count combination.
- :class:`NotUnifiedValuesError`: values of different primitive types in one filter.
- :class:`DataEncodingError`: a request body could not be encoded.
- :class:`FailedAuthError`: token parsing or stored procedure login failed.
- :class:`ProtocolError`: the transport failed or PostgREST answered with an error status.
"""

from __future__ import annotations

import datetime as _dt
import json
from typing import Any, Dict, Optional

import requests

from . import _error_codes as codes


class PostgrestError(Exception):
    """Base structured error for the PostgREST client."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class FilterLogicError(PostgrestError):
    MISSING_MODIFIER = "Multiple values are only allowed with all() or any() modifier"
    BOTH_MODIFIERS_ACTIVE = "all() and any() modifier cannot be used together"
    DUPLICATE_RESOLUTION_REQUIRED = "Duplicate resolution required for upsert()"
    INVALID_CONDITION = "A condition cannot use a modifier and a full text search language together"
    METHOD_ALREADY_SET = "Only one of select(), insert(), upsert(), update(), delete() may be used per request"

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="filter_logic_error", subcode=subcode, details=details, source="client")


class NotUnifiedValuesError(PostgrestError):
    NOT_UNIFIED_ARRAY = "All values must be of the same type (str, int or float)"

    def __init__(
        self,
        message: str = NOT_UNIFIED_ARRAY,
        *,
        subcode: Optional[str] = codes.NOT_UNIFIED_ARRAY,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="not_unified_values", subcode=subcode, details=details, source="client")


class DataEncodingError(PostgrestError):
    JSON_ENCODING_FAILED = "Data could not be encoded as JSON"
    CSV_ENCODING_FAILED = "Data could not be encoded as CSV"

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="data_encoding_error", subcode=subcode, details=details, source="client")


class FailedAuthError(PostgrestError):
    """
    Authentication failed.

    Raised for malformed tokens, tokens without an ``exp`` claim, login
    responses without a ``token`` field, and failed login requests. When the
    failure was caused by another exception it is available as ``__cause__``.
    """

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="failed_auth", subcode=subcode, details=details, source="client")


class ProtocolError(PostgrestError):
    """
    A request failed at the transport or HTTP level.

    When the failure carries an HTTP response, the status code, reason phrase
    and raw body are recorded, and PostgREST's JSON error envelope
    (``{"code", "message", "details", "hint"}``) is parsed when present.

    :param message: Human readable message.
    :type message: :class:`str`
    :param status_code: HTTP status of the failed response, if any.
    :type status_code: :class:`int` | None
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        reason_phrase: Optional[str] = None,
        response_body: Optional[str] = None,
        postgrest_error_code: Optional[str] = None,
        postgrest_error_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if reason_phrase is not None:
            d["reason_phrase"] = reason_phrase
        if postgrest_error_code is not None:
            d["postgrest_error_code"] = postgrest_error_code
        if postgrest_error_message is not None:
            d["postgrest_error_message"] = postgrest_error_message
        super().__init__(
            message,
            code="http_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server" if status_code is not None else "transport",
            is_transient=is_transient,
        )
        self.reason_phrase = reason_phrase
        self.response_body = response_body
        self.postgrest_error_code = postgrest_error_code
        self.postgrest_error_message = postgrest_error_message

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ProtocolError":
        """
        Build a :class:`ProtocolError` describing a transport exception.

        :param exc: The exception raised by ``requests`` (or any other transport error).
        :return: The wrapped error. Callers raise it with ``from exc``.
        :rtype: ProtocolError
        """
        response = getattr(exc, "response", None)
        if response is None:
            if isinstance(exc, requests.exceptions.Timeout):
                subcode = codes.TRANSPORT_TIMEOUT
            elif isinstance(exc, requests.exceptions.ConnectionError):
                subcode = codes.TRANSPORT_CONNECTION
            else:
                subcode = codes.TRANSPORT_OTHER
            return cls(str(exc) or exc.__class__.__name__, is_transient=subcode != codes.TRANSPORT_OTHER, subcode=subcode)
        return cls.from_response(response, fallback_message=str(exc))

    @classmethod
    def from_response(cls, response: Any, fallback_message: Optional[str] = None) -> "ProtocolError":
        """Build a :class:`ProtocolError` from an HTTP error response."""
        status = getattr(response, "status_code", None)
        reason = getattr(response, "reason", None)
        body = getattr(response, "text", None) or ""

        pg_code: Optional[str] = None
        pg_message: Optional[str] = None
        extra: Dict[str, Any] = {}
        try:
            envelope = json.loads(body) if body else None
        except ValueError:
            envelope = None
        if isinstance(envelope, dict):
            if envelope.get("code") is not None:
                pg_code = str(envelope["code"])
            if envelope.get("message") is not None:
                pg_message = str(envelope["message"])
            for key in ("details", "hint"):
                if envelope.get(key) is not None:
                    extra[key] = envelope[key]

        if pg_code is not None and pg_message is not None:
            message = f"({pg_code}) {pg_message}"
        else:
            message = fallback_message or f"HTTP {status} {reason or ''}".strip()

        return cls(
            message,
            status_code=status,
            is_transient=status in codes.TRANSIENT_STATUS_CODES,
            subcode=codes.http_subcode(status) if status is not None else None,
            reason_phrase=reason,
            response_body=body,
            postgrest_error_code=pg_code,
            postgrest_error_message=pg_message,
            details=extra,
        )


__all__ = [
    "PostgrestError",
    "FilterLogicError",
    "NotUnifiedValuesError",
    "DataEncodingError",
    "FailedAuthError",
    "ProtocolError",
]
