"""MCP tool handlers – the bridge between the MCP protocol and the filesystem."""

from __future__ import annotations

import logging
import time
import traceback
from typing import Awaitable, Callable, Mapping

from file_mcp.config import settings
from file_mcp.schemas.common import Envelope, ToolFailure, ToolOutcome, ToolSuccess, to_envelope
from file_mcp.schemas.files import CreateFileParams, ListFilesParams, ReadFileParams
from file_mcp.services import filesystem
from file_mcp.services.tracing import AttributeValue, Span, Tracer

logger = logging.getLogger("mcp.tools")

PREVIEW_LIMIT = 1000

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 2)


def _preview(content: str) -> str:
    """Truncated copy of *content* for span attributes."""
    if len(content) > PREVIEW_LIMIT:
        return content[:PREVIEW_LIMIT] + "..."
    return content


async def invoke_tool(
    tracer: Tracer,
    *,
    name: str,
    op: str,
    attributes: Mapping[str, AttributeValue],
    error_label: str,
    body: Callable[[Span], Awaitable[str]],
    error_attributes: Mapping[str, AttributeValue] | None = None,
) -> Envelope:
    """Run *body* in a span and turn its result or failure into an Envelope.

    This is the error boundary shared by every tool: exceptions raised by the
    body are recorded on the span, forwarded to the exception sink and
    reported as ``"<error_label>: <message>"`` text.
    """

    async def _traced(span: Span) -> ToolOutcome:
        try:
            text = await body(span)
        except Exception as exc:
            span.set_attributes(
                {
                    "error.message": str(exc),
                    "error.stack": "".join(traceback.format_exception(exc)),
                }
            )
            if error_attributes:
                span.set_attributes(error_attributes)
            span.set_status("error")
            tracer.capture_exception(exc)
            logger.warning("%s failed: %s", op, exc)
            return ToolFailure(message=f"{error_label}: {exc}")
        if span.status == "unset":
            span.set_status("ok")
        return ToolSuccess(text=text)

    outcome = await tracer.run_traced(name, op, attributes, _traced)
    return to_envelope(outcome)


# ---------------------------------------------------------------------------
# Tool implementations
# ---------------------------------------------------------------------------


async def handle_create_file(params: CreateFileParams, tracer: Tracer) -> Envelope:
    """Write *content* to *filePath*, creating missing parent directories."""
    file_path, content = params.file_path, params.content

    async def body(span: Span) -> str:
        dir_path = filesystem.parent_directory(file_path)
        span.set_attribute("file.directory", dir_path)

        # A failed mkdir is not fatal; the write reports the real problem.
        try:
            await filesystem.ensure_directory(dir_path)
            span.set_attribute("directory.created", True)
        except OSError as exc:
            span.set_attribute("directory.creation.error", str(exc))

        t0 = time.perf_counter()
        await filesystem.write_text(file_path, content)
        elapsed = _elapsed_ms(t0)

        size = await filesystem.file_size(file_path)
        span.set_attributes({"file.size": size, "operation.duration_ms": elapsed})

        logger.info("createfile path=%s size=%d ms=%.1f", file_path, size, elapsed)
        return f"File created successfully at: {file_path}\nSize: {size} bytes"

    return await invoke_tool(
        tracer,
        name="createFile",
        op="tool.createfile",
        attributes={"file.path": file_path, "file.content.length": len(content)},
        error_label="Error creating file",
        body=body,
    )


async def handle_read_file(params: ReadFileParams, tracer: Tracer) -> Envelope:
    """Return the full text of *filePath*."""
    file_path = params.file_path

    async def body(span: Span) -> str:
        t0 = time.perf_counter()
        size = await filesystem.file_size(file_path)
        span.set_attributes({"file.size": size, "file.exists": True})

        content = await filesystem.read_text(file_path)
        elapsed = _elapsed_ms(t0)
        span.set_attributes(
            {
                "operation.duration_ms": elapsed,
                "file.content.preview": _preview(content),
                "file.content.length": len(content),
            }
        )

        logger.info("readfile path=%s chars=%d ms=%.1f", file_path, len(content), elapsed)
        return content

    return await invoke_tool(
        tracer,
        name="readFile",
        op="tool.readfile",
        attributes={"file.path": file_path},
        error_label="Error reading file",
        body=body,
        error_attributes={"file.exists": False},
    )


async def handle_list_files(
    params: ListFilesParams,
    tracer: Tracer,
    concurrency: int | None = None,
) -> Envelope:
    """Describe the entries of a directory as a Markdown table."""
    dir_path = params.path
    limit = concurrency or settings.list_stat_concurrency

    async def body(span: Span) -> str:
        t0 = time.perf_counter()
        names = await filesystem.list_names(dir_path)
        span.set_attribute("directory.file_count", len(names))

        entries = await filesystem.stat_entries(dir_path, names, limit)

        elapsed = _elapsed_ms(t0)
        dir_count = sum(1 for e in entries if e.type == "Directory")
        span.set_attributes(
            {
                "directory.count": dir_count,
                "file.count": len(entries) - dir_count,
                "directory.total_size": sum(e.size for e in entries),
                "operation.duration_ms": elapsed,
            }
        )

        logger.info("listfiles path=%s entries=%d ms=%.1f", dir_path, len(entries), elapsed)
        return filesystem.render_table(entries)

    return await invoke_tool(
        tracer,
        name="listFiles",
        op="tool.listfiles",
        attributes={"directory.path": dir_path},
        error_label="Error listing files",
        body=body,
    )
