# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for token parsing and expiry checks."""

import base64
import threading
import time

import pytest

from PostgREST.Client.core import _error_codes as codes
from PostgREST.Client.core._auth import _AuthManager
from PostgREST.Client.core.errors import FailedAuthError


class TestSetAuthToken:
    def test_valid_token(self, jwt_factory):
        manager = _AuthManager(timeout=15)
        token = jwt_factory(1_900_000_000, role="web_user")
        manager.set_auth_token(token)
        assert manager.token_expiration_time == 1_900_000_000
        assert manager.auth_header == f"Bearer {token}"

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d"])
    def test_wrong_segment_count(self, token):
        with pytest.raises(FailedAuthError) as exc:
            _AuthManager(timeout=15).set_auth_token(token)
        assert str(exc.value) == "invalid token provided"
        assert exc.value.subcode == codes.AUTH_INVALID_TOKEN

    def test_bad_base64(self):
        with pytest.raises(FailedAuthError) as exc:
            _AuthManager(timeout=15).set_auth_token("head.!!!!.sig")
        assert str(exc.value) == "failed to base64 decode token"
        assert exc.value.subcode == codes.AUTH_BASE64_DECODE_FAILED

    def test_missing_exp(self, jwt_factory):
        with pytest.raises(FailedAuthError) as exc:
            _AuthManager(timeout=15).set_auth_token(jwt_factory(role="anon"))
        assert str(exc.value) == "no key exp in token"
        assert exc.value.subcode == codes.AUTH_MISSING_EXP

    def test_payload_not_json(self):
        payload = base64.urlsafe_b64encode(b"not json").rstrip(b"=").decode()
        with pytest.raises(FailedAuthError) as exc:
            _AuthManager(timeout=15).set_auth_token(f"h.{payload}.s")
        assert exc.value.subcode == codes.AUTH_INVALID_TOKEN

    def test_failed_token_keeps_previous_state(self, jwt_factory):
        manager = _AuthManager(timeout=15)
        manager.set_auth_token(jwt_factory(1_900_000_000))
        with pytest.raises(FailedAuthError):
            manager.set_auth_token("bad")
        assert manager.token_expiration_time == 1_900_000_000


class TestIsAuthenticated:
    def test_never_authenticated(self):
        assert _AuthManager(timeout=15).is_authenticated() is False
        assert _AuthManager(timeout=15).token_expiration_time == 0

    def test_margin_without_auto_auth(self):
        manager = _AuthManager(timeout=15)
        manager.token_expiration_time = 1000
        assert manager.is_authenticated(now=969) is True
        assert manager.is_authenticated(now=970) is False

    def test_margin_with_auto_auth(self):
        manager = _AuthManager(timeout=15, auto_auth=True, auto_auth_grace=300)
        manager.token_expiration_time = 1000
        assert manager.is_authenticated(now=684) is True
        assert manager.is_authenticated(now=685) is False

    def test_enable_disable_auto_auth(self):
        manager = _AuthManager(timeout=15)
        manager.enable_auto_auth(60)
        assert manager.auto_auth is True
        assert manager.auto_auth_grace == 60
        manager.disable_auto_auth()
        assert manager.auto_auth is False
        assert manager.auto_auth_grace == 0


class TestRefreshIfDue:
    def test_no_refresh_without_auto_auth(self):
        calls = []
        _AuthManager(timeout=15).refresh_if_due(lambda: calls.append(1))
        assert calls == []

    def test_no_refresh_when_token_valid(self, jwt_factory):
        manager = _AuthManager(timeout=15, auto_auth=True)
        manager.set_auth_token(jwt_factory(int(time.time()) + 3600))
        calls = []
        manager.refresh_if_due(lambda: calls.append(1))
        assert calls == []

    def test_refresh_when_due(self, jwt_factory):
        manager = _AuthManager(timeout=15, auto_auth=True)
        seen = []

        def refresh():
            seen.append(manager.currently_in_reauth)
            manager.set_auth_token(jwt_factory(int(time.time()) + 3600))

        manager.refresh_if_due(refresh)
        assert seen == [True]
        assert manager.currently_in_reauth is False
        assert manager.is_authenticated() is True

    def test_failure_clears_flag(self):
        manager = _AuthManager(timeout=15, auto_auth=True)

        def refresh():
            raise FailedAuthError("nope")

        with pytest.raises(FailedAuthError):
            manager.refresh_if_due(refresh)
        assert manager.currently_in_reauth is False

    def test_concurrent_callers_share_one_refresh(self, jwt_factory):
        manager = _AuthManager(timeout=15, auto_auth=True)
        started = threading.Event()
        release = threading.Event()
        calls = []

        def refresh():
            calls.append(1)
            started.set()
            release.wait(5)
            manager.set_auth_token(jwt_factory(int(time.time()) + 3600))

        first = threading.Thread(target=manager.refresh_if_due, args=(refresh,))
        first.start()
        assert started.wait(5)
        others = [threading.Thread(target=manager.refresh_if_due, args=(refresh,)) for _ in range(4)]
        for t in others:
            t.start()
        release.set()
        for t in [first, *others]:
            t.join(5)
        assert calls == [1]

    def test_waiters_reuse_failure(self):
        manager = _AuthManager(timeout=15, auto_auth=True)
        started = threading.Event()
        release = threading.Event()
        failure = FailedAuthError("login rejected")
        calls = []
        errors = []

        def refresh():
            calls.append(1)
            started.set()
            release.wait(5)
            raise failure

        def run():
            try:
                manager.refresh_if_due(refresh)
            except FailedAuthError as e:
                errors.append(e)

        first = threading.Thread(target=run)
        first.start()
        assert started.wait(5)
        waiter = threading.Thread(target=run)
        waiter.start()
        # Give the waiter time to block on the lock before releasing the refresh
        time.sleep(0.1)
        release.set()
        first.join(5)
        waiter.join(5)
        assert calls == [1]
        assert errors == [failure, failure]
