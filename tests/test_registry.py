"""Tests for the tool registry and parameter contracts."""

from __future__ import annotations

import pytest

from file_mcp.mcp.registry import (
    DuplicateToolError,
    ToolDefinition,
    ToolRegistry,
    ToolValidationError,
    UnknownToolError,
)
from file_mcp.schemas.common import Envelope
from file_mcp.schemas.files import ReadFileParams


async def _echo(params: ReadFileParams) -> Envelope:
    return Envelope.from_text(params.file_path)


def test_duplicate_registration_fails():
    registry = ToolRegistry()
    definition = ToolDefinition("echo", "Echo the path", ReadFileParams, _echo)
    registry.register(definition)
    with pytest.raises(DuplicateToolError):
        registry.register(definition)


def test_registry_lists_file_tools(registry):
    assert registry.names == ["createfile", "readfile", "listfiles"]
    assert len(registry) == 3
    assert "readfile" in registry


def test_input_schemas_use_wire_names(registry):
    schemas = {tool.name: tool.inputSchema for tool in registry.list_tools()}

    assert set(schemas["createfile"]["properties"]) == {"filePath", "content"}
    assert sorted(schemas["createfile"]["required"]) == ["content", "filePath"]
    assert schemas["readfile"]["required"] == ["filePath"]
    assert schemas["listfiles"]["required"] == ["path"]
    for schema in schemas.values():
        assert schema["type"] == "object"
        for prop in schema["properties"].values():
            assert prop["type"] == "string"
            assert prop["description"]


@pytest.mark.asyncio
async def test_dispatch_runs_handler():
    registry = ToolRegistry()
    registry.register(ToolDefinition("echo", "Echo the path", ReadFileParams, _echo))

    envelope = await registry.dispatch("echo", {"filePath": "/tmp/x"})
    assert envelope.content[0].text == "/tmp/x"


@pytest.mark.asyncio
async def test_dispatch_unknown_tool(registry):
    with pytest.raises(UnknownToolError, match="deletefile"):
        await registry.dispatch("deletefile", {"filePath": "/tmp/x"})


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "arguments",
    [
        {},
        {"filePath": "/tmp/x"},
        {"filePath": 12, "content": "x"},
        {"filePath": "/tmp/x", "content": None},
        {"filePath": "", "content": "x"},
        {"filePath": "bad\x00path", "content": "x"},
    ],
)
async def test_dispatch_rejects_invalid_arguments(registry, spans, arguments):
    """Contract violations fail the call before any handler or span runs."""
    with pytest.raises(ToolValidationError) as excinfo:
        await registry.dispatch("createfile", arguments)

    assert excinfo.value.tool == "createfile"
    assert spans == []


@pytest.mark.asyncio
async def test_dispatch_create_and_read(registry, tmp_path, spans):
    target = tmp_path / "via_registry.txt"

    await registry.dispatch("createfile", {"filePath": str(target), "content": "payload"})
    envelope = await registry.dispatch("readfile", {"filePath": str(target)})

    assert envelope.content[0].text == "payload"
    assert [s.status for s in spans] == ["ok", "ok"]


@pytest.mark.asyncio
async def test_every_invocation_finalizes_span(registry, tmp_path, spans):
    calls = [
        ("createfile", {"filePath": str(tmp_path / "f.txt"), "content": "1"}),
        ("readfile", {"filePath": str(tmp_path / "f.txt")}),
        ("readfile", {"filePath": str(tmp_path / "missing")}),
        ("listfiles", {"path": str(tmp_path)}),
        ("listfiles", {"path": str(tmp_path / "missing")}),
    ]
    for name, arguments in calls:
        envelope = await registry.dispatch(name, arguments)
        assert len(envelope.content) == 1

    assert [s.status for s in spans] == ["ok", "ok", "error", "ok", "error"]
