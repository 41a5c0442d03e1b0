# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_406 = "http_406"
HTTP_409 = "http_409"
HTTP_416 = "http_416"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

TRANSIENT_STATUS_CODES = {429, 502, 503, 504}

# Transport failures without an HTTP response
TRANSPORT_CONNECTION = "transport_connection"
TRANSPORT_TIMEOUT = "transport_timeout"
TRANSPORT_OTHER = "transport_other"

# Filter logic subcodes
FILTER_MISSING_MODIFIER = "filter_missing_modifier"
FILTER_BOTH_MODIFIERS_ACTIVE = "filter_both_modifiers_active"
FILTER_DUPLICATE_RESOLUTION_REQUIRED = "filter_duplicate_resolution_required"
FILTER_INVALID_CONDITION = "filter_invalid_condition"
FILTER_METHOD_ALREADY_SET = "filter_method_already_set"
FILTER_INVALID_RANGE = "filter_invalid_range"
FILTER_EMPTY_VALUES = "filter_empty_values"
FILTER_MODIFIER_NOT_SUPPORTED = "filter_modifier_not_supported"

# Value unification subcodes
NOT_UNIFIED_ARRAY = "not_unified_array"

# Data encoding subcodes
ENCODING_JSON_FAILED = "encoding_json_failed"
ENCODING_CSV_FAILED = "encoding_csv_failed"

# Authentication subcodes
AUTH_INVALID_TOKEN = "auth_invalid_token"
AUTH_BASE64_DECODE_FAILED = "auth_base64_decode_failed"
AUTH_MISSING_EXP = "auth_missing_exp"
AUTH_MISSING_TOKEN = "auth_missing_token"
AUTH_REQUEST_FAILED = "auth_request_failed"

def http_subcode(status_code: int) -> str:
    """Return the ``http_<status>`` subcode for a response status."""
    return f"http_{status_code}"
