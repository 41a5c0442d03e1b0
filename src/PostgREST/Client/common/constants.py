# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for PostgREST request headers, content types and telemetry attributes.
"""

# Schema selection headers
HEADER_ACCEPT_PROFILE = "Accept-Profile"
HEADER_CONTENT_PROFILE = "Content-Profile"

HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CONTENT_RANGE = "Content-Range"
HEADER_LOCATION = "Location"
HEADER_PREFER = "Prefer"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_CSV = "text/csv"

PREFER_MISSING_DEFAULT = "missing=default"
"""Use column defaults for keys missing from inserted rows."""

PREFER_SEPARATOR = ", "

# Stored procedures live under this path prefix
RPC_PATH_PREFIX = "rpc/"

DEFAULT_SCHEMA = "public"

# Characters that carry meaning in the PostgREST filter grammar
RESERVED_FILTER_CHARACTERS = frozenset(',.:()"\\')

# Characters left literal when percent-encoding query fragments
QUERY_SAFE_CHARACTERS = ".,(){}[]\"*:"

# OpenTelemetry semantic attribute names
OTEL_ATTR_DB_SYSTEM = "db.system"
OTEL_ATTR_DB_OPERATION = "db.operation"
OTEL_ATTR_DB_NAMESPACE = "db.namespace"
OTEL_ATTR_HTTP_METHOD = "http.request.method"
OTEL_ATTR_HTTP_URL = "url.full"
OTEL_ATTR_HTTP_STATUS_CODE = "http.response.status_code"
OTEL_ATTR_POSTGREST_TABLE = "postgrest.table"
OTEL_ATTR_POSTGREST_REQUEST_ID = "postgrest.client_request_id"
