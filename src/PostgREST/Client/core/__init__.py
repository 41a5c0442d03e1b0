# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure for the PostgREST client.

This module contains authentication state, configuration, the HTTP
transport, telemetry, error handling and the response wrapper.
"""

from .response import PostgrestResponse, RequestMetadata

__all__ = [
    "PostgrestResponse",
    "RequestMetadata",
]
