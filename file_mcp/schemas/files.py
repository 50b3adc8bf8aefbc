"""Parameter contracts for the file tools and the listing row schema."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _check_path(value: str) -> str:
    if not value:
        raise ValueError("path must be a non-empty string")
    if "\x00" in value:
        raise ValueError("path must not contain NUL bytes")
    return value


class CreateFileParams(BaseModel):
    """Arguments accepted by ``createfile``."""

    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(
        ..., alias="filePath", description="Path where the file should be created"
    )
    content: str = Field(..., description="Content to write to the file")

    @field_validator("file_path")
    @classmethod
    def _validate_file_path(cls, value: str) -> str:
        return _check_path(value)


class ReadFileParams(BaseModel):
    """Arguments accepted by ``readfile``."""

    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(..., alias="filePath", description="Path to the file to read")

    @field_validator("file_path")
    @classmethod
    def _validate_file_path(cls, value: str) -> str:
        return _check_path(value)


class ListFilesParams(BaseModel):
    """Arguments accepted by ``listfiles``."""

    path: str = Field(..., description="Directory whose entries should be listed")

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: str) -> str:
        return _check_path(value)


class FileEntry(BaseModel):
    """One row of a directory listing."""

    name: str
    size: int = Field(..., ge=0, description="Size in bytes")
    type: Literal["File", "Directory"]
