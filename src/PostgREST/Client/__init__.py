# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Python client for PostgREST.

Example::

    from PostgREST.Client import PostgrestClient

    with PostgrestClient("https://db.example.com") as client:
        rows = client.run(client.from_("api", "films").select().eq("year", 1999)).result()
"""

from .client import PostgrestClient
from .core.config import ClientAuthConfig, PostgrestConfig

__version__ = "0.1.0"

__all__ = ["PostgrestClient", "PostgrestConfig", "ClientAuthConfig", "__version__"]
