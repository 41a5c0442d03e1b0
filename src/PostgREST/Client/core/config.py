# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from ..common.constants import DEFAULT_SCHEMA

if TYPE_CHECKING:
    from .telemetry import TelemetryConfig

@dataclass(frozen=True)
class PostgrestConfig:
    """
    Transport settings for :class:`~PostgREST.Client.client.PostgrestClient`.

    :param http_timeout: Request timeout in seconds (default: 15). Also used as
        the expiry safety margin when checking the stored token.
    :type http_timeout: float
    :param telemetry: Optional tracing, metrics, logging and hook settings.
    :type telemetry: ~PostgREST.Client.core.telemetry.TelemetryConfig or None
    """

    http_timeout: float = 15.0
    telemetry: Optional["TelemetryConfig"] = None

    @classmethod
    def from_env(cls) -> "PostgrestConfig":
        """
        Create a configuration instance with default settings.

        :return: Configuration instance with default values.
        :rtype: ~PostgREST.Client.core.config.PostgrestConfig
        """
        # Environment-free defaults
        return cls(http_timeout=15.0, telemetry=None)

@dataclass(frozen=True)
class ClientAuthConfig:
    """
    How the client logs in through a PostgREST stored procedure.

    The login is ``POST <auth_schema_name>.rpc/<auth_function_name>`` with
    ``auth_arguments`` as the JSON body; the response must carry a ``token``.

    :param auth_schema_name: Schema holding the login function (default: ``public``).
    :type auth_schema_name: str
    :param auth_function_name: Login function name (default: ``login``).
    :type auth_function_name: str
    :param auth_arguments: Arguments sent to the login function, e.g. email and password.
    :type auth_arguments: dict or None
    :param auto_auth: Log in automatically before requests when the token is missing or near expiry.
    :type auto_auth: bool
    :param auto_auth_grace: Seconds before expiry at which auto-auth refreshes the token.
    :type auto_auth_grace: int

    Example::

        ClientAuthConfig(
            auth_schema_name="api",
            auth_function_name="login",
            auth_arguments={"email": "me@example.com", "pass": "secret"},
            auto_auth=True,
        )
    """

    auth_schema_name: str = DEFAULT_SCHEMA
    auth_function_name: str = "login"
    auth_arguments: Optional[Dict[str, Any]] = None
    auto_auth: bool = False
    auto_auth_grace: int = 300

__all__ = ["PostgrestConfig", "ClientAuthConfig"]
