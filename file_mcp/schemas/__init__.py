"""Pydantic schemas for tool parameters and responses."""

from file_mcp.schemas.common import Envelope, TextBlock, ToolFailure, ToolOutcome, ToolSuccess
from file_mcp.schemas.files import CreateFileParams, FileEntry, ListFilesParams, ReadFileParams

__all__ = [
    "Envelope",
    "TextBlock",
    "ToolFailure",
    "ToolOutcome",
    "ToolSuccess",
    "CreateFileParams",
    "FileEntry",
    "ListFilesParams",
    "ReadFileParams",
]
