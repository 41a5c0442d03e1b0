# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures for PostgREST client tests.

No PostgREST server is needed: HTTP traffic goes through :class:`DummyHTTP`,
which replays canned ``requests.Response`` objects and records every call.
"""

import base64
import json
import threading
import time

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from PostgREST.Client.client import PostgrestClient
from PostgREST.Client.core.config import ClientAuthConfig, PostgrestConfig


def make_response(status=200, body=None, headers=None, reason="OK"):
    """Build a real ``requests.Response`` without touching the network."""
    r = requests.Response()
    r.status_code = status
    r.reason = reason
    r.headers = CaseInsensitiveDict(headers or {})
    if isinstance(body, (dict, list)):
        r._content = json.dumps(body).encode("utf-8")
        r.headers.setdefault("Content-Type", "application/json; charset=utf-8")
    else:
        r._content = (body or "").encode("utf-8")
    r.encoding = "utf-8"
    return r


def make_jwt(exp=None, **claims):
    """Encode an unsigned JWT. ``exp`` is omitted when None."""

    def segment(obj):
        raw = json.dumps(obj).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    payload = dict(claims)
    if exp is not None:
        payload["exp"] = exp
    return f"{segment({'alg': 'HS256', 'typ': 'JWT'})}.{segment(payload)}.signature"


class DummyHTTP:
    """Replays queued responses (or raises queued exceptions) and records calls."""

    def __init__(self, responses=None):
        self._responses = list(responses or [])
        self.calls = []
        self._lock = threading.Lock()

    def _request(self, method, url, **kwargs):
        with self._lock:
            self.calls.append((method, url, kwargs))
            if not self._responses:
                raise AssertionError("No more responses")
            item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(method, url, **kwargs)
        return item

    def close(self):
        pass


@pytest.fixture
def jwt_factory():
    """Factory for unsigned JWTs."""
    return make_jwt


@pytest.fixture
def valid_token():
    """A token that expires in one hour."""
    return make_jwt(int(time.time()) + 3600)


@pytest.fixture
def test_config():
    """Test configuration with a short timeout."""
    return PostgrestConfig(http_timeout=5)


@pytest.fixture
def auth_config():
    """Login via ``api.login`` with email and password."""
    return ClientAuthConfig(
        auth_schema_name="api",
        auth_function_name="login",
        auth_arguments={"email": "me@example.com", "pass": "secret"},
    )


@pytest.fixture
def sample_base_url():
    return "https://db.example.com"


@pytest.fixture
def client_factory(sample_base_url, test_config, auth_config):
    """Build a client whose transport is a :class:`DummyHTTP` with ``responses``."""

    def build(responses=None, auth=None, config=None):
        client = PostgrestClient(sample_base_url, config=config or test_config, auth_config=auth or auth_config)
        client._http = DummyHTTP(responses)
        return client

    return build


@pytest.fixture
def response_factory():
    """Factory for canned ``requests.Response`` objects."""
    return make_response
