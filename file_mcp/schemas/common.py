"""Shared response envelope and internal tool outcome types."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field


class TextBlock(BaseModel):
    """One typed unit of response text."""

    type: Literal["text"] = "text"
    text: str


class Envelope(BaseModel):
    """Standard envelope for every tool result, success or failure."""

    content: list[TextBlock] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "Envelope":
        return cls(content=[TextBlock(text=text)])


class ToolSuccess(BaseModel):
    """Body of a tool that completed normally."""

    text: str


class ToolFailure(BaseModel):
    """Body of a tool whose I/O failed; *message* is shown to the caller."""

    message: str


ToolOutcome = Union[ToolSuccess, ToolFailure]


def to_envelope(outcome: ToolOutcome) -> Envelope:
    """Convert an internal outcome into the wire envelope.

    Failures are reported as plain text; the envelope carries no success flag.
    """
    if isinstance(outcome, ToolFailure):
        return Envelope.from_text(outcome.message)
    return Envelope.from_text(outcome.text)
