"""
Error taxonomy for a generator run.

Stage-scoped errors (CSV load, registry update, CSV write-back) abort
the run. Row-scoped errors are captured per row and the batch goes on.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for every error raised by screengen."""


class ParseError(GeneratorError):
    """The CSV source is malformed."""


class DataError(GeneratorError):
    """A CSV row cannot be turned into a screen descriptor."""


class TemplateNotFoundError(GeneratorError):
    """A template id does not resolve to a template resource."""


class ConflictError(GeneratorError):
    """A target file already exists and the write mode forbids clobbering it."""


class StorageError(GeneratorError):
    """A filesystem read, write or mkdir failed."""
