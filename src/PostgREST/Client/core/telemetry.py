# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Telemetry for the PostgREST client.

Optional OpenTelemetry tracing and metrics, stdlib logging, and a hook
protocol for custom telemetry providers.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generator,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from ..common.constants import (
    OTEL_ATTR_DB_NAMESPACE,
    OTEL_ATTR_DB_OPERATION,
    OTEL_ATTR_DB_SYSTEM,
    OTEL_ATTR_HTTP_METHOD,
    OTEL_ATTR_HTTP_STATUS_CODE,
    OTEL_ATTR_HTTP_URL,
    OTEL_ATTR_POSTGREST_REQUEST_ID,
    OTEL_ATTR_POSTGREST_TABLE,
)

# Optional OpenTelemetry imports
try:
    from opentelemetry import metrics, trace
    from opentelemetry.trace import Status, StatusCode

    _OTEL_AVAILABLE = True
except ImportError:
    _OTEL_AVAILABLE = False
    trace = None  # type: ignore
    metrics = None  # type: ignore
    Status = None  # type: ignore
    StatusCode = None  # type: ignore

_INSTRUMENTATION_NAME = "PostgREST.Client"
_SCHEMA_URL = "https://opentelemetry.io/schemas/1.21.0"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelemetryConfig:
    """Telemetry settings. Everything is off by default.

    Example:
        Tracing and request logging::

            config = PostgrestConfig(
                telemetry=TelemetryConfig(enable_tracing=True, enable_logging=True)
            )

        Custom hook::

            config = PostgrestConfig(
                telemetry=TelemetryConfig(hooks=[MyTimingHook()])
            )
    """

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False

    log_level: str = "WARNING"
    logger_name: str = "PostgREST.Client"

    hooks: List["TelemetryHook"] = field(default_factory=list)


@dataclass
class RequestContext:
    """Context passed to telemetry hooks for each HTTP request."""

    client_request_id: str
    method: str
    url: str
    operation: str  # "request" or "rpc"
    schema_name: Optional[str] = None
    table_name: Optional[str] = None

    start_time: float = field(default_factory=time.perf_counter)

    # Free-form state shared between hooks
    custom_data: Dict[str, Any] = field(default_factory=dict)

    _span: Any = field(default=None, repr=False)


@dataclass
class ResponseContext:
    """Response information passed to telemetry hooks."""

    status_code: int
    duration_ms: float
    response_size: Optional[int] = None
    error: Optional[Exception] = None


@runtime_checkable
class TelemetryHook(Protocol):
    """Protocol for custom telemetry hooks.

    Every method is optional; implement only what you need. Exceptions raised
    by a hook are logged and never reach the request.

    Example:
        class StatsdHook:
            def __init__(self, statsd):
                self.statsd = statsd

            def on_request_end(self, request: RequestContext, response: ResponseContext):
                self.statsd.timing(f"postgrest.{request.operation}", response.duration_ms)
    """

    def on_request_start(self, context: RequestContext) -> None:
        ...

    def on_request_end(self, request: RequestContext, response: ResponseContext) -> None:
        ...

    def on_request_error(self, request: RequestContext, error: Exception) -> None:
        ...

    def get_additional_headers(self) -> Dict[str, str]:
        ...


class TelemetryManager:
    """Instruments requests according to a :class:`TelemetryConfig`.

    This class is internal and not part of the public API.
    """

    def __init__(self, config: Optional[TelemetryConfig] = None) -> None:
        self._config = config or TelemetryConfig()
        self._tracer: Optional[Any] = None
        self._meter: Optional[Any] = None
        self._logger: Optional[logging.Logger] = None
        self._hooks = list(self._config.hooks)

        self._request_duration: Optional[Any] = None
        self._request_count: Optional[Any] = None
        self._error_count: Optional[Any] = None

        self._initialize()

    @property
    def is_tracing_enabled(self) -> bool:
        return self._config.enable_tracing and _OTEL_AVAILABLE

    @property
    def is_metrics_enabled(self) -> bool:
        return self._config.enable_metrics and _OTEL_AVAILABLE

    def _initialize(self) -> None:
        if self.is_tracing_enabled:
            self._tracer = trace.get_tracer(_INSTRUMENTATION_NAME, schema_url=_SCHEMA_URL)

        if self.is_metrics_enabled:
            self._meter = metrics.get_meter(_INSTRUMENTATION_NAME, schema_url=_SCHEMA_URL)
            self._request_duration = self._meter.create_histogram(
                name="postgrest.client.request.duration",
                description="Duration of PostgREST requests",
                unit="ms",
            )
            self._request_count = self._meter.create_counter(
                name="postgrest.client.request.count",
                description="Number of PostgREST requests",
                unit="1",
            )
            self._error_count = self._meter.create_counter(
                name="postgrest.client.error.count",
                description="Number of failed PostgREST requests",
                unit="1",
            )

        if self._config.enable_logging:
            self._logger = logging.getLogger(self._config.logger_name)
            self._logger.setLevel(getattr(logging, self._config.log_level.upper()))

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        client_request_id: str,
        schema_name: Optional[str] = None,
        table_name: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        """Open a traced request context.

        Usage:
            with telemetry.trace_request("request", "GET", url, req_id, "api", "films") as ctx:
                response = http._request(...)
                telemetry.record_response(ctx, response.status_code)
        """
        ctx = RequestContext(
            client_request_id=client_request_id,
            method=method,
            url=url,
            operation=operation,
            schema_name=schema_name,
            table_name=table_name,
        )
        self._dispatch("on_request_start", ctx)

        span = None
        if self._tracer:
            span_name = f"PostgREST {operation}"
            if table_name:
                span_name = f"{span_name} {table_name}"
            attributes: Dict[str, Any] = {
                OTEL_ATTR_DB_SYSTEM: "postgresql",
                OTEL_ATTR_DB_OPERATION: operation,
                OTEL_ATTR_HTTP_METHOD: method,
                OTEL_ATTR_HTTP_URL: url,
                OTEL_ATTR_POSTGREST_REQUEST_ID: client_request_id,
            }
            if schema_name:
                attributes[OTEL_ATTR_DB_NAMESPACE] = schema_name
            if table_name:
                attributes[OTEL_ATTR_POSTGREST_TABLE] = table_name
            span = self._tracer.start_span(span_name, kind=trace.SpanKind.CLIENT, attributes=attributes)
            ctx._span = span

        try:
            yield ctx
        except Exception as e:
            if span:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
            self._dispatch("on_request_error", ctx, e)
            raise
        finally:
            if span:
                span.end()

    def record_response(
        self,
        ctx: RequestContext,
        status_code: int,
        response_size: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> None:
        """Record span attributes, metrics and a log line, then notify hooks."""
        duration_ms = (time.perf_counter() - ctx.start_time) * 1000
        response = ResponseContext(
            status_code=status_code,
            duration_ms=duration_ms,
            response_size=response_size,
            error=error,
        )

        if ctx._span:
            ctx._span.set_attribute(OTEL_ATTR_HTTP_STATUS_CODE, status_code)

        if self._request_duration:
            attributes: Dict[str, Any] = {
                "operation": ctx.operation,
                "method": ctx.method,
                "status_code": status_code,
            }
            if ctx.table_name:
                attributes["table"] = ctx.table_name
            self._request_duration.record(duration_ms, attributes)
            self._request_count.add(1, attributes)
            if status_code >= 400:
                self._error_count.add(1, attributes)

        if self._logger:
            level = logging.WARNING if status_code >= 400 else logging.DEBUG
            self._logger.log(
                level,
                "%s %s %s %d %.1fms",
                ctx.operation,
                ctx.method,
                ctx.url,
                status_code,
                duration_ms,
                extra={"client_request_id": ctx.client_request_id},
            )

        self._dispatch("on_request_end", ctx, response)

    def _dispatch(self, name: str, *args: Any) -> None:
        for hook in self._hooks:
            callback = getattr(hook, name, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                logger.debug("Telemetry hook %r failed in %s", hook, name, exc_info=True)

    def get_additional_headers(self) -> Dict[str, str]:
        """Collect additional headers from all hooks."""
        headers: Dict[str, str] = {}
        for hook in self._hooks:
            if not hasattr(hook, "get_additional_headers"):
                continue
            try:
                hook_headers = hook.get_additional_headers()
            except Exception:
                logger.debug("Telemetry hook %r failed in get_additional_headers", hook, exc_info=True)
                continue
            if hook_headers:
                headers.update(hook_headers)
        return headers


class NoOpTelemetryManager:
    """Stand-in used when telemetry is disabled."""

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        client_request_id: str,
        schema_name: Optional[str] = None,
        table_name: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        yield RequestContext(
            client_request_id=client_request_id,
            method=method,
            url=url,
            operation=operation,
            schema_name=schema_name,
            table_name=table_name,
        )

    def record_response(self, *args: Any, **kwargs: Any) -> None:
        pass

    def get_additional_headers(self) -> Dict[str, str]:
        return {}


def create_telemetry_manager(
    config: Optional[TelemetryConfig],
) -> Union[TelemetryManager, NoOpTelemetryManager]:
    """Return a :class:`TelemetryManager` when anything is enabled, else a no-op manager."""
    if config is None:
        return NoOpTelemetryManager()
    if not (config.enable_tracing or config.enable_metrics or config.enable_logging or config.hooks):
        return NoOpTelemetryManager()
    return TelemetryManager(config)


__all__ = [
    "TelemetryConfig",
    "TelemetryHook",
    "TelemetryManager",
    "NoOpTelemetryManager",
    "RequestContext",
    "ResponseContext",
    "create_telemetry_manager",
]
