"""MCP server bootstrap – registers the file tools and runs the stdio transport."""

from __future__ import annotations

import asyncio
import functools
import logging
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from file_mcp.config import Settings, settings
from file_mcp.mcp.registry import ToolDefinition, ToolRegistry
from file_mcp.mcp.tools import handle_create_file, handle_list_files, handle_read_file
from file_mcp.schemas.files import CreateFileParams, ListFilesParams, ReadFileParams
from file_mcp.services.tracing import Tracer

logger = logging.getLogger("mcp.server")

# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------


def build_registry(tracer: Tracer, config: Settings = settings) -> ToolRegistry:
    """Register the file tools, each bound to *tracer*."""
    registry = ToolRegistry()
    registry.register(
        ToolDefinition(
            name="createfile",
            description=(
                "Create a file with the given content, creating missing parent "
                "directories. Overwrites an existing file."
            ),
            params_model=CreateFileParams,
            handler=functools.partial(handle_create_file, tracer=tracer),
        )
    )
    registry.register(
        ToolDefinition(
            name="readfile",
            description="Read a file and return its full text content.",
            params_model=ReadFileParams,
            handler=functools.partial(handle_read_file, tracer=tracer),
        )
    )
    registry.register(
        ToolDefinition(
            name="listfiles",
            description=(
                "List the entries of a directory as a Markdown table with name, "
                "size in bytes, and type (File or Directory)."
            ),
            params_model=ListFilesParams,
            handler=functools.partial(
                handle_list_files,
                tracer=tracer,
                concurrency=config.list_stat_concurrency,
            ),
        )
    )
    return registry


# ---------------------------------------------------------------------------
# Server factory
# ---------------------------------------------------------------------------


def create_mcp_server(registry: ToolRegistry, config: Settings = settings) -> Server:
    """Create and configure the MCP server instance."""
    server = Server(config.mcp_server_name, version=config.mcp_server_version)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return registry.list_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict | None) -> list[TextContent]:
        # Unknown tools and invalid arguments propagate; the SDK reports them
        # as isError results instead of envelopes.
        envelope = await registry.dispatch(name, arguments or {})
        return [TextContent(type="text", text=block.text) for block in envelope.content]

    return server


# ---------------------------------------------------------------------------
# Entry-point: run MCP server over stdio
# ---------------------------------------------------------------------------


async def run_mcp_server(config: Settings = settings) -> None:
    """Start the MCP server using stdio transport."""
    tracer = Tracer.from_settings(config)
    server = create_mcp_server(build_registry(tracer, config), config)
    logger.info(
        "Starting MCP server '%s' v%s (stdio)",
        config.mcp_server_name,
        config.mcp_server_version,
    )

    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        tracer.close()


def main() -> None:
    """CLI entry-point."""
    # stdout carries the protocol
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(run_mcp_server())


if __name__ == "__main__":
    main()
