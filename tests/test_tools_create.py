"""Tests for the createfile handler."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from file_mcp.mcp.tools import handle_create_file, handle_read_file
from file_mcp.schemas.files import CreateFileParams, ReadFileParams


def _text(envelope) -> str:
    assert len(envelope.content) == 1
    assert envelope.content[0].type == "text"
    return envelope.content[0].text


@pytest.mark.asyncio
async def test_create_then_read_round_trip(tmp_path, tracer):
    """Content written by createfile comes back unchanged from readfile."""
    target = tmp_path / "note.txt"
    content = "héllo\nwörld\r\n\ttabs and ünïcode ✓"

    created = await handle_create_file(
        CreateFileParams(filePath=str(target), content=content), tracer
    )
    size = len(content.encode("utf-8"))
    assert _text(created) == f"File created successfully at: {target}\nSize: {size} bytes"

    read = await handle_read_file(ReadFileParams(filePath=str(target)), tracer)
    assert _text(read) == content


@pytest.mark.asyncio
async def test_create_makes_missing_parents(tmp_path, tracer, spans):
    target = tmp_path / "a" / "b" / "c" / "deep.txt"

    envelope = await handle_create_file(
        CreateFileParams(filePath=str(target), content="x"), tracer
    )

    assert _text(envelope).startswith("File created successfully")
    assert target.parent.is_dir()
    span = spans[-1]
    assert span.attributes["directory.created"] is True
    assert span.attributes["file.directory"] == str(target.parent)


@pytest.mark.asyncio
async def test_create_overwrites_existing_file(tmp_path, tracer):
    target = tmp_path / "same.txt"
    await handle_create_file(CreateFileParams(filePath=str(target), content="first version"), tracer)
    await handle_create_file(CreateFileParams(filePath=str(target), content="second"), tracer)

    read = await handle_read_file(ReadFileParams(filePath=str(target)), tracer)
    assert _text(read) == "second"


@pytest.mark.asyncio
async def test_create_empty_content(tmp_path, tracer, spans):
    target = tmp_path / "empty.txt"
    envelope = await handle_create_file(CreateFileParams(filePath=str(target), content=""), tracer)

    assert _text(envelope).endswith("Size: 0 bytes")
    assert target.read_bytes() == b""
    assert spans[-1].attributes["file.size"] == 0


@pytest.mark.asyncio
async def test_create_success_span_attributes(tmp_path, tracer, spans):
    target = tmp_path / "span.txt"
    await handle_create_file(CreateFileParams(filePath=str(target), content="abc"), tracer)

    span = spans[-1]
    assert span.name == "createFile"
    assert span.op == "tool.createfile"
    assert span.status == "ok"
    assert span.attributes["file.path"] == str(target)
    assert span.attributes["file.content.length"] == 3
    assert span.attributes["file.size"] == 3
    assert span.attributes["operation.duration_ms"] >= 0


@pytest.mark.asyncio
async def test_mkdir_failure_is_recorded_not_fatal(tmp_path, tracer, spans):
    """A failing directory create only annotates the span."""
    target = tmp_path / "kept.txt"
    with patch(
        "file_mcp.mcp.tools.filesystem.ensure_directory",
        side_effect=PermissionError("mkdir refused"),
    ):
        envelope = await handle_create_file(
            CreateFileParams(filePath=str(target), content="data"), tracer
        )

    assert _text(envelope).startswith("File created successfully")
    span = spans[-1]
    assert span.status == "ok"
    assert span.attributes["directory.creation.error"] == "mkdir refused"
    assert "directory.created" not in span.attributes


@pytest.mark.asyncio
async def test_create_failure_returns_error_envelope(tmp_path, tracer, spans):
    """Writing over a directory fails inside the handler, not out of it."""
    target = tmp_path / "is_a_dir"
    target.mkdir()

    with patch.object(tracer, "capture_exception") as capture:
        envelope = await handle_create_file(
            CreateFileParams(filePath=str(target), content="nope"), tracer
        )

    assert _text(envelope).startswith("Error creating file: ")
    span = spans[-1]
    assert span.status == "error"
    assert span.attributes["error.message"]
    assert "Traceback" in span.attributes["error.stack"]
    capture.assert_called_once()
    assert isinstance(capture.call_args.args[0], OSError)
