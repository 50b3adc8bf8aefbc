"""Tool registry: name → parameter contract + handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from mcp.types import Tool
from pydantic import BaseModel, ValidationError

from file_mcp.schemas.common import Envelope

logger = logging.getLogger("mcp.registry")

ToolHandler = Callable[[Any], Awaitable[Envelope]]


class DuplicateToolError(ValueError):
    """Raised when two tools are registered under the same name."""


class UnknownToolError(LookupError):
    """Raised when a call names a tool that is not registered."""


class ToolValidationError(ValueError):
    """Raised when call arguments do not satisfy the tool's contract."""

    def __init__(self, tool: str, errors: ValidationError) -> None:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in errors.errors()
        )
        super().__init__(f"Invalid arguments for tool '{tool}': {details}")
        self.tool = tool
        self.errors = errors


@dataclass(frozen=True)
class ToolDefinition:
    """Immutable description of one tool."""

    name: str
    description: str
    params_model: type[BaseModel]
    handler: ToolHandler

    def to_mcp_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.params_model.model_json_schema(by_alias=True),
        )


class ToolRegistry:
    """In-memory registry of tools, populated once at startup."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> None:
        if definition.name in self._tools:
            raise DuplicateToolError(f"Tool '{definition.name}' is already registered")
        self._tools[definition.name] = definition
        logger.info("Registered tool %s", definition.name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolDefinition:
        definition = self._tools.get(name)
        if definition is None:
            raise UnknownToolError(
                f"Tool '{name}' is not registered. Available tools: {self.names}"
            )
        return definition

    def list_tools(self) -> list[Tool]:
        return [definition.to_mcp_tool() for definition in self._tools.values()]

    async def dispatch(self, name: str, arguments: dict[str, Any] | None) -> Envelope:
        """Validate *arguments* against the tool's contract and run its handler.

        Raises:
            UnknownToolError: no tool is registered under *name*.
            ToolValidationError: *arguments* do not match the contract.
        """
        definition = self.get(name)
        try:
            params = definition.params_model.model_validate(arguments or {})
        except ValidationError as exc:
            logger.warning("Rejected call to %s: %d validation error(s)", name, exc.error_count())
            raise ToolValidationError(name, exc) from exc
        return await definition.handler(params)
