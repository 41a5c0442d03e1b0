# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest
import requests

from PostgREST.Client.core import _error_codes as codes
from PostgREST.Client.core.errors import (
    DataEncodingError,
    FailedAuthError,
    FilterLogicError,
    NotUnifiedValuesError,
    PostgrestError,
    ProtocolError,
)


@pytest.mark.parametrize(
    "error",
    [
        FilterLogicError("x"),
        NotUnifiedValuesError(),
        DataEncodingError("x"),
        FailedAuthError("x"),
        ProtocolError("x"),
    ],
)
def test_all_errors_share_base(error):
    assert isinstance(error, PostgrestError)
    assert set(error.to_dict()) == {
        "message",
        "code",
        "subcode",
        "status_code",
        "details",
        "source",
        "is_transient",
        "timestamp",
    }


def test_not_unified_defaults():
    err = NotUnifiedValuesError()
    assert err.code == "not_unified_values"
    assert err.subcode == codes.NOT_UNIFIED_ARRAY
    assert err.source == "client"


class TestProtocolErrorFromResponse:
    def test_postgrest_envelope(self, response_factory):
        response = response_factory(
            409,
            {"code": "23505", "message": "duplicate key", "details": "Key (a)=(1) exists", "hint": None},
            reason="Conflict",
        )
        err = ProtocolError.from_response(response)
        assert str(err) == "(23505) duplicate key"
        assert err.status_code == 409
        assert err.subcode == codes.HTTP_409
        assert err.reason_phrase == "Conflict"
        assert err.postgrest_error_code == "23505"
        assert err.postgrest_error_message == "duplicate key"
        assert err.details["details"] == "Key (a)=(1) exists"
        assert "hint" not in err.details
        assert err.source == "server"
        assert err.is_transient is False
        assert '"23505"' in err.response_body

    def test_non_json_body(self, response_factory):
        err = ProtocolError.from_response(response_factory(502, "Bad gateway", reason="Bad Gateway"))
        assert err.status_code == 502
        assert err.is_transient is True
        assert err.postgrest_error_code is None
        assert err.response_body == "Bad gateway"
        assert "502" in err.message

    def test_envelope_without_code_uses_fallback(self, response_factory):
        err = ProtocolError.from_response(response_factory(400, {"message": "bad"}), fallback_message="oops")
        assert err.message == "oops"
        assert err.postgrest_error_message == "bad"


class TestProtocolErrorFromException:
    def test_timeout(self):
        err = ProtocolError.from_exception(requests.exceptions.ReadTimeout("slow"))
        assert err.subcode == codes.TRANSPORT_TIMEOUT
        assert err.is_transient is True
        assert err.status_code is None
        assert err.source == "transport"

    def test_connection_error(self):
        err = ProtocolError.from_exception(requests.exceptions.ConnectionError("refused"))
        assert err.subcode == codes.TRANSPORT_CONNECTION

    def test_other_error(self):
        err = ProtocolError.from_exception(requests.exceptions.InvalidURL("bad url"))
        assert err.subcode == codes.TRANSPORT_OTHER
        assert err.is_transient is False

    def test_exception_with_response(self, response_factory):
        response = response_factory(503, {"code": "PGRST000", "message": "unavailable"})
        exc = requests.exceptions.HTTPError("503 Server Error", response=response)
        err = ProtocolError.from_exception(exc)
        assert err.status_code == 503
        assert err.is_transient is True
        assert str(err) == "(PGRST000) unavailable"
