"""
Generated file model — what a family produces for one screen or bulk pass.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class WriteMode(str, Enum):
    """How a rendered file lands on disk."""

    OVERWRITE = "overwrite"
    APPEND = "append"
    FAIL_IF_EXISTS = "fail"


class GeneratedFile(BaseModel):
    """A rendered artifact staged in memory before it is written.

    Attributes:
        path:        Absolute target path.
        content:     Full rendered content.
        mode:        Write policy for the target.
        template_id: Template the content was rendered from.
    """

    path: str
    content: str
    mode: WriteMode = WriteMode.FAIL_IF_EXISTS
    template_id: str = ""
