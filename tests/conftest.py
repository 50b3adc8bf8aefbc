"""Shared pytest fixtures – a local tracer that records finished spans."""

from __future__ import annotations

import pytest

from file_mcp.mcp.server import build_registry
from file_mcp.services.tracing import Span, Tracer


@pytest.fixture
def spans() -> list[Span]:
    """Spans finished by the ``tracer`` fixture, in completion order."""
    return []


@pytest.fixture
def tracer(spans) -> Tracer:
    """Tracer with remote reporting disabled."""
    t = Tracer(client=None)
    t.add_listener(spans.append)
    return t


@pytest.fixture
def registry(tracer):
    """Registry wired to the recording tracer."""
    return build_registry(tracer)
