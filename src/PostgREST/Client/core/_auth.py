# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
JWT token state and single-flight refresh for the PostgREST client.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import threading
import time
from typing import Callable, Optional

from . import _error_codes as codes
from .errors import FailedAuthError

logger = logging.getLogger(__name__)


class _AuthManager:
    """
    Holds the bearer token and decides when it must be refreshed.

    A refresh runs at most once at a time. Callers that queue up behind a
    running refresh reuse its outcome: they return once it succeeded, or
    re-raise the same :class:`FailedAuthError` when it failed.

    :param timeout: HTTP timeout in seconds, used as an expiry safety margin.
    :type timeout: float
    :param auto_auth: Refresh automatically before requests.
    :type auto_auth: bool
    :param auto_auth_grace: Seconds before expiry at which auto-auth refreshes.
    :type auto_auth_grace: int
    """

    def __init__(self, timeout: float, auto_auth: bool = False, auto_auth_grace: int = 300) -> None:
        self.timeout = timeout
        self.auto_auth = auto_auth
        self.auto_auth_grace = auto_auth_grace
        self.token_expiration_time = 0
        self.auth_header: Optional[str] = None
        self.currently_in_reauth = False
        self._lock = threading.Lock()
        self._generation = 0
        self._last_error: Optional[FailedAuthError] = None

    def is_authenticated(self, now: Optional[float] = None) -> bool:
        """
        Whether the stored token stays valid past the safety margin.

        The margin is the HTTP timeout plus the auto-auth grace period when
        auto-auth is on, or twice the HTTP timeout otherwise.
        """
        if now is None:
            now = time.time()
        margin = self.auto_auth_grace if self.auto_auth else self.timeout
        return now + self.timeout + margin < self.token_expiration_time

    def set_auth_token(self, token: str) -> None:
        """
        Store ``token`` and read its expiry from the ``exp`` claim.

        The signature is not verified.

        :param token: A JWT of the form ``header.payload.signature``.
        :type token: str
        :raises FailedAuthError: If the token is malformed or has no ``exp`` claim.
        """
        parts = token.split(".") if isinstance(token, str) else []
        if len(parts) != 3:
            raise FailedAuthError("invalid token provided", subcode=codes.AUTH_INVALID_TOKEN)

        payload = parts[1] + "=" * (-len(parts[1]) % 4)
        try:
            decoded = base64.b64decode(payload, altchars=b"-_", validate=True)
        except (binascii.Error, ValueError) as e:
            raise FailedAuthError("failed to base64 decode token", subcode=codes.AUTH_BASE64_DECODE_FAILED) from e

        try:
            claims = json.loads(decoded)
        except ValueError as e:
            raise FailedAuthError("invalid token provided", subcode=codes.AUTH_INVALID_TOKEN) from e
        if not isinstance(claims, dict) or "exp" not in claims:
            raise FailedAuthError("no key exp in token", subcode=codes.AUTH_MISSING_EXP)

        try:
            expiration = int(claims["exp"])
        except (TypeError, ValueError) as e:
            raise FailedAuthError(
                "invalid token provided", subcode=codes.AUTH_INVALID_TOKEN, details={"exp": claims["exp"]}
            ) from e

        self.token_expiration_time = expiration
        self.auth_header = f"Bearer {token}"
        logger.debug("Stored bearer token expiring at %d", expiration)

    def enable_auto_auth(self, grace: int = 300) -> None:
        self.auto_auth = True
        self.auto_auth_grace = grace

    def disable_auto_auth(self) -> None:
        self.auto_auth = False
        self.auto_auth_grace = 0

    def refresh_if_due(self, refresh: Callable[[], None]) -> None:
        """
        Run ``refresh`` when auto-auth is on and the token is missing or near expiry.

        :param refresh: Performs the login and stores the new token.
        :raises FailedAuthError: If the refresh (or the one this call waited for) failed.
        """
        if not self.auto_auth or self.is_authenticated():
            return

        generation = self._generation
        with self._lock:
            if self._generation != generation:
                # A refresh finished while this caller waited for the lock
                if self._last_error is not None:
                    raise self._last_error
                return
            if self.is_authenticated():
                return

            logger.debug("Token missing or about to expire, refreshing")
            self.currently_in_reauth = True
            try:
                refresh()
                self._last_error = None
            except FailedAuthError as e:
                self._last_error = e
                raise
            finally:
                self._generation += 1
                self.currently_in_reauth = False
