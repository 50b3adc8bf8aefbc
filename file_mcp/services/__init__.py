"""Filesystem and tracing services used by the tool handlers."""
