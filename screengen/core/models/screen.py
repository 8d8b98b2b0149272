"""
Screen descriptor — one normalized CSV row, the unit of work.
"""

from __future__ import annotations

from enum import Enum
from pathlib import PureWindowsPath
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Created(str, Enum):
    """Idempotency marker stored in the CSV ``created`` column."""

    YES = "y"
    NO = "n"


# Characters that cannot appear in a name used verbatim in file paths.
_UNSAFE_NAME_CHARS = set('/\\:*?"<>|\0')


class ScreenDescriptor(BaseModel):
    """A typed CSV row.

    ``index`` is the zero-based data row position in the source CSV and
    is how the ``created`` marker is written back.
    """

    index: int = 0
    name: str
    directory: str
    route: str = ""
    route_mock_sample: str = ""
    is_get: bool = False
    has_req_body: bool = False
    request_args: list[str] = Field(default_factory=list)
    response_sample: Any = None
    request_sample: Any = None
    created: Created = Created.NO
    controller: str = "none"
    chunk: str = ""

    # Pass-through columns used by mock-API templates
    type: str = "GET"
    description: str = ""
    parent: str = ""

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        if value in (".", "..") or any(ch in _UNSAFE_NAME_CHARS for ch in value):
            raise ValueError(f"name is not filesystem-safe: {value!r}")
        return value

    @field_validator("directory")
    @classmethod
    def _check_directory(cls, value: str) -> str:
        # Must stay under the family's base directory.
        if not value.strip():
            raise ValueError("directory must not be empty")
        posix = value.replace("\\", "/")
        if posix.startswith("/") or PureWindowsPath(value).drive:
            raise ValueError(f"directory must be relative: {value!r}")
        if ".." in posix.split("/"):
            raise ValueError(f"directory must not contain '..': {value!r}")
        return value

    @property
    def is_created(self) -> bool:
        return self.created is Created.YES

    def to_context(self) -> dict[str, Any]:
        """Template context for this screen."""
        context = self.model_dump(mode="python", exclude={"index"})
        context["created"] = self.created.value
        return context
