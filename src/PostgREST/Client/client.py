# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Mapping, Optional

import requests

from .common.constants import DEFAULT_SCHEMA, HEADER_AUTHORIZATION, RPC_PATH_PREFIX
from .core import _error_codes as codes
from .core._auth import _AuthManager
from .core._http import _HttpClient
from .core.config import ClientAuthConfig, PostgrestConfig
from .core.errors import FailedAuthError, PostgrestError, ProtocolError
from .core.response import PostgrestResponse, RequestMetadata
from .core.telemetry import create_telemetry_manager
from .models.request_builder import PostgrestRequestBuilder

logger = logging.getLogger(__name__)


class PostgrestClient:
    """
    Client for a PostgREST server.

    Build requests with :meth:`from_`, send them with :meth:`run`, and call
    stored procedures with :meth:`call`. Authentication goes through a
    PostgREST login function that returns a JWT, see :class:`ClientAuthConfig`.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager reuses one HTTP session for all
        requests and closes it afterwards::

            with PostgrestClient("https://db.example.com", auth_config=auth) as client:
                client.auth()
                rows = client.run(client.from_("api", "films").select()).result()

    **Without Context Manager**:
        Requests are sent without a shared session unless one is passed in.
        Call ``close()`` when done::

            client = PostgrestClient("https://db.example.com")
            try:
                client.run(client.from_("api", "films").delete().eq("id", 42))
            finally:
                client.close()

    :param base_url: Root URL of the PostgREST server. Trailing slashes are removed.
    :type base_url: :class:`str`
    :param config: Transport and telemetry settings. Defaults to
        :meth:`~PostgREST.Client.core.config.PostgrestConfig.from_env`.
    :type config: ~PostgREST.Client.core.config.PostgrestConfig or None
    :param auth_config: Login function and auto-auth settings.
    :type auth_config: ~PostgREST.Client.core.config.ClientAuthConfig or None
    :param session: Optional caller-owned :class:`requests.Session`. It is used
        but never closed by the client.
    :type session: :class:`requests.Session` or None

    :raises ValueError: If ``base_url`` is empty.

    Example:
        Auto-auth with a login function::

            auth = ClientAuthConfig(
                auth_schema_name="api",
                auth_function_name="login",
                auth_arguments={"email": "me@example.com", "pass": "secret"},
                auto_auth=True,
            )
            with PostgrestClient("https://db.example.com", auth_config=auth) as client:
                builder = (client.from_("api", "todos")
                           .insert({"task": "write docs"}, return_format=ReturnFormat.HEADERS_ONLY))
                todo_id = client.run(builder).location("id")
    """

    def __init__(
        self,
        base_url: str = "http://localhost/",
        config: Optional[PostgrestConfig] = None,
        auth_config: Optional[ClientAuthConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        if not self._base_url:
            raise ValueError("base_url is required.")
        self._config = config or PostgrestConfig.from_env()
        self._auth_config = auth_config or ClientAuthConfig()
        self._auth_manager = _AuthManager(
            self._config.http_timeout,
            auto_auth=self._auth_config.auto_auth,
            auto_auth_grace=self._auth_config.auto_auth_grace,
        )
        self._telemetry = create_telemetry_manager(self._config.telemetry)
        self._http: Optional[_HttpClient] = None
        self._session: Optional[requests.Session] = session
        self._owns_session: bool = False

    def __enter__(self) -> "PostgrestClient":
        """
        Enter the context manager, creating an HTTP session if none was given.

        :return: The client instance.
        :rtype: PostgrestClient
        """
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
            self._http = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Release the session created by the context manager.

        A session passed to the constructor is left open. Safe to call
        multiple times.
        """
        self._http = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    def _get_http(self) -> _HttpClient:
        if self._http is None:
            self._http = _HttpClient(timeout=self._config.http_timeout, session=self._session)
        return self._http

    # ------------------------------------------------------------- requests

    def from_(self, schema_name: str, table_name: str) -> PostgrestRequestBuilder:
        """
        Start a request against ``schema_name.table_name``.

        :param schema_name: Schema exposed by PostgREST, sent as the profile headers.
        :type schema_name: :class:`str`
        :param table_name: Table or view name.
        :type table_name: :class:`str`
        :return: A new request builder.
        :rtype: ~PostgREST.Client.models.request_builder.PostgrestRequestBuilder
        """
        return PostgrestRequestBuilder(schema_name, table_name)

    def run(self, builder: PostgrestRequestBuilder, skip_auth: bool = False) -> PostgrestResponse:
        """
        Send the request described by ``builder``.

        With auto-auth enabled, the token is refreshed first when it is
        missing or about to expire. The ``Authorization`` header is attached
        whenever a token is stored.

        :param builder: The finished request builder.
        :type builder: ~PostgREST.Client.models.request_builder.PostgrestRequestBuilder
        :param skip_auth: Send without refreshing the token first.
        :type skip_auth: :class:`bool`
        :return: The wrapped response.
        :rtype: ~PostgREST.Client.core.response.PostgrestResponse
        :raises FailedAuthError: If the automatic login fails.
        :raises ProtocolError: If the transport fails or the server answers with status >= 400.
        """
        method, url, headers, body = builder.get_request_data()
        return self._execute(
            method,
            url,
            headers,
            body,
            skip_auth=skip_auth,
            operation="rpc" if builder.table_name.startswith(RPC_PATH_PREFIX) else "request",
            schema_name=builder.schema_name,
            table_name=builder.table_name,
        )

    def call(
        self,
        function_name: str,
        params: Optional[Mapping[str, Any]] = None,
        schema_name: str = DEFAULT_SCHEMA,
        skip_auth: bool = False,
    ) -> PostgrestResponse:
        """
        Call a stored procedure with ``POST rpc/<function_name>``.

        :param function_name: Function name.
        :type function_name: :class:`str`
        :param params: Named arguments, sent as a JSON object.
        :type params: :class:`dict` or None
        :param schema_name: Schema holding the function.
        :type schema_name: :class:`str`
        :param skip_auth: Send without refreshing the token first.
        :type skip_auth: :class:`bool`
        :return: The wrapped response.
        :rtype: ~PostgREST.Client.core.response.PostgrestResponse

        Example::

            total = client.call("add_them", {"a": 1, "b": 2}, schema_name="api").result()
        """
        builder = self.from_(schema_name, f"{RPC_PATH_PREFIX}{function_name}")
        builder.insert(dict(params or {}))
        return self.run(builder, skip_auth=skip_auth)

    # --------------------------------------------------------- authentication

    def auth(self) -> None:
        """
        Log in with the configured login function and store the returned token.

        :raises FailedAuthError: If the request fails or the response has no token.
        """
        self._auth()

    def _auth(self) -> None:
        cfg = self._auth_config
        try:
            response = self.call(
                cfg.auth_function_name,
                cfg.auth_arguments,
                schema_name=cfg.auth_schema_name,
                skip_auth=True,
            )
        except ProtocolError as e:
            raise FailedAuthError(
                f"Login request failed: {e.message}",
                subcode=codes.AUTH_REQUEST_FAILED,
                details={"status_code": e.status_code},
            ) from e
        except (PostgrestError, ValueError) as e:
            raise FailedAuthError(
                f"Login request failed: {e}",
                subcode=codes.AUTH_REQUEST_FAILED,
            ) from e

        body = response.raw_result()
        missing_token = FailedAuthError(
            f"Login response has no token: {body}",
            subcode=codes.AUTH_MISSING_TOKEN,
            details={"body": body},
        )
        try:
            result = response.result()
        except ValueError as e:
            raise missing_token from e
        if not isinstance(result, dict) or "token" not in result:
            raise missing_token
        self._auth_manager.set_auth_token(result["token"])
        logger.debug("Authenticated via %s.%s", cfg.auth_schema_name, cfg.auth_function_name)

    def is_authenticated(self) -> bool:
        """Whether the stored token is valid beyond the configured safety margin."""
        return self._auth_manager.is_authenticated()

    def set_auth_token(self, token: str) -> None:
        """
        Use an externally obtained JWT.

        :param token: The JWT. Its payload must carry an ``exp`` claim.
        :type token: :class:`str`
        :raises FailedAuthError: If the token cannot be decoded or has no ``exp``.
        """
        self._auth_manager.set_auth_token(token)

    def enable_auto_auth(self, grace: int = 300) -> None:
        """
        Log in automatically when the token is missing or expires within ``grace`` seconds.

        :param grace: Seconds before expiry at which the token is refreshed.
        :type grace: :class:`int`
        """
        self._auth_manager.enable_auto_auth(grace)

    def disable_auto_auth(self) -> None:
        self._auth_manager.disable_auto_auth()

    @property
    def token_expiration_time(self) -> int:
        """Expiry of the stored token as a Unix timestamp, 0 when none is stored."""
        return self._auth_manager.token_expiration_time

    # ------------------------------------------------------------ transport

    def _execute(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: str,
        *,
        skip_auth: bool,
        operation: str,
        schema_name: Optional[str] = None,
        table_name: Optional[str] = None,
    ) -> PostgrestResponse:
        if not skip_auth:
            self._auth_manager.refresh_if_due(self._auth)

        headers = {**self._telemetry.get_additional_headers(), **headers}
        if self._auth_manager.auth_header:
            headers[HEADER_AUTHORIZATION] = self._auth_manager.auth_header

        full_url = f"{self._base_url}/{url}"
        client_request_id = str(uuid.uuid4())
        started = time.perf_counter()
        with self._telemetry.trace_request(
            operation, method, full_url, client_request_id, schema_name=schema_name, table_name=table_name
        ) as ctx:
            try:
                response = self._get_http()._request(
                    method, full_url, headers=headers, data=body.encode("utf-8") if body else None
                )
            except requests.exceptions.RequestException as e:
                raise ProtocolError.from_exception(e) from e

            self._telemetry.record_response(ctx, response.status_code, response_size=len(response.content or b""))
            if response.status_code >= 400:
                raise ProtocolError.from_response(response)

        return PostgrestResponse(
            response,
            RequestMetadata(
                client_request_id=client_request_id,
                http_status_code=response.status_code,
                timing_ms=(time.perf_counter() - started) * 1000,
            ),
        )


__all__ = ["PostgrestClient"]
