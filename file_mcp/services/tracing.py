"""Span runner backed by an explicitly constructed Sentry client.

A :class:`Tracer` is built once at startup and handed to every tool handler.
Each invocation runs inside :meth:`Tracer.run_traced`, which opens a
:class:`Span`, lets the body decorate it, and guarantees the span ends with a
terminal status.  When a DSN is configured every span is mirrored onto a Sentry
transaction and shipped by the SDK's background transport; without one the
tracer still records spans locally so behaviour does not change.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Literal, Mapping, TypeVar, Union

import sentry_sdk

from file_mcp.config import Settings

logger = logging.getLogger("mcp.tracing")

T = TypeVar("T")

AttributeValue = Union[str, int, float, bool]
SpanStatus = Literal["unset", "ok", "error"]
SpanListener = Callable[["Span"], None]

# Sentry has no plain "error" span status.
_SENTRY_STATUS = {"ok": "ok", "error": "internal_error"}


class Span:
    """Mutable tracing record for one tool invocation."""

    def __init__(
        self,
        name: str,
        op: str,
        attributes: Mapping[str, AttributeValue] | None = None,
        transaction: Any | None = None,
    ) -> None:
        self.name = name
        self.op = op
        self.attributes: dict[str, AttributeValue] = {}
        self.status: SpanStatus = "unset"
        self._transaction = transaction
        if attributes:
            self.set_attributes(attributes)

    def set_attribute(self, key: str, value: AttributeValue) -> None:
        self.attributes[key] = value
        if self._transaction is not None:
            self._transaction.set_data(key, value)

    def set_attributes(self, attributes: Mapping[str, AttributeValue]) -> None:
        for key, value in attributes.items():
            self.set_attribute(key, value)

    def set_status(self, status: SpanStatus) -> None:
        if status not in _SENTRY_STATUS:
            raise ValueError(f"Span status must be 'ok' or 'error', got {status!r}")
        self.status = status
        if self._transaction is not None:
            self._transaction.set_status(_SENTRY_STATUS[status])

    def __repr__(self) -> str:
        return f"Span(name={self.name!r}, op={self.op!r}, status={self.status!r})"


class Tracer:
    """Runs units of work inside spans and forwards exceptions to Sentry.

    Args:
        client: A configured ``sentry_sdk.Client``, or ``None`` to disable
            remote reporting.
    """

    def __init__(self, client: sentry_sdk.Client | None = None) -> None:
        self.client = client
        self._listeners: list[SpanListener] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "Tracer":
        """Build a tracer from application settings."""
        if not settings.sentry_dsn:
            logger.info("SENTRY_DSN not set; remote tracing disabled")
            return cls(client=None)

        client = sentry_sdk.Client(
            dsn=settings.sentry_dsn,
            environment=settings.app_env,
            release=f"{settings.mcp_server_name}@{settings.mcp_server_version}",
            traces_sample_rate=settings.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry_profiles_sample_rate,
        )
        logger.info("Sentry tracing enabled (environment=%s)", settings.app_env)
        return cls(client=client)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def add_listener(self, listener: SpanListener) -> None:
        """Call *listener* with every span once it has been finalized."""
        self._listeners.append(listener)

    @contextmanager
    def _sentry_scope(self) -> Iterator[Any | None]:
        if self.client is None:
            yield None
            return
        with sentry_sdk.new_scope() as scope:
            scope.set_client(self.client)
            yield scope

    async def run_traced(
        self,
        name: str,
        op: str,
        attributes: Mapping[str, AttributeValue] | None,
        body: Callable[[Span], Awaitable[T]],
    ) -> T:
        """Await ``body(span)`` inside a span and return its result unchanged.

        The span is marked ``ok`` on normal completion unless the body already
        chose a status.  Bodies are expected to contain their own failures; one
        that raises anyway leaves the span ``error`` and the exception
        propagates.
        """
        with self._sentry_scope() as scope:
            if scope is None:
                span = Span(name, op, attributes)
                return await self._run(span, body)
            with scope.start_transaction(name=name, op=op) as transaction:
                span = Span(name, op, attributes, transaction=transaction)
                return await self._run(span, body)

    async def _run(self, span: Span, body: Callable[[Span], Awaitable[T]]) -> T:
        try:
            result = await body(span)
        except BaseException:
            if span.status == "unset":
                span.set_status("error")
            raise
        else:
            if span.status == "unset":
                span.set_status("ok")
            return result
        finally:
            self._finish(span)

    def _finish(self, span: Span) -> None:
        logger.debug("span %s (%s) finished status=%s", span.name, span.op, span.status)
        for listener in self._listeners:
            listener(span)

    def capture_exception(self, exc: BaseException) -> None:
        """Forward *exc* to the exception sink (no-op when tracing is disabled)."""
        with self._sentry_scope() as scope:
            if scope is not None:
                scope.capture_exception(exc)

    def close(self, timeout: float = 2.0) -> None:
        """Flush pending events and shut the client down."""
        if self.client is not None:
            self.client.close(timeout=timeout)
