# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Thin HTTP transport with a default timeout and optional session support.

Requests are sent exactly once; failures propagate as
:class:`requests.exceptions.RequestException` for the client to wrap.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)


class _HttpClient:
    """
    Send HTTP requests through ``requests`` with a default timeout.

    :param timeout: Default request timeout in seconds, applied when a call
        does not pass its own.
    :type timeout: :class:`float` | None
    :param session: Optional requests.Session for connection pooling. If provided,
        all requests use this session for connection reuse.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.default_timeout: Optional[float] = timeout
        self._session = session

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute one HTTP request.

        :param method: HTTP method (GET, POST, PATCH, DELETE).
        :type method: :class:`str`
        :param url: Absolute target URL.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers and data.
        :return: HTTP response object, whatever its status.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If the request cannot be completed.
        """
        if "timeout" not in kwargs and self.default_timeout is not None:
            kwargs["timeout"] = self.default_timeout
        logger.debug("%s %s", method, url)
        if self._session is not None:
            return self._session.request(method, url, **kwargs)
        return requests.request(method, url, **kwargs)

    def close(self) -> None:
        """
        Close the session, if any. Safe to call multiple times.
        """
        if self._session is not None:
            self._session.close()
            self._session = None
