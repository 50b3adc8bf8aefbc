"""MCP transports, tool registry and tool handlers."""
