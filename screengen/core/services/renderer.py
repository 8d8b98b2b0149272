"""
Template renderer — Jinja2 over named template resources.

Template ids are paths relative to the templates root without the
``.j2`` suffix, e.g. ``vue/BaseView``. Sources are read once per id per
renderer instance.

The delimiter pair is an argument of every ``render()`` call. Targets
that use ``{{ }}`` themselves (Vue) are rendered with ``<% %>`` so their
own syntax passes through untouched. Block tags stay ``{% %}``.

Unresolved placeholders render as an empty string, including attribute
access on missing values (``{{ missing.field }}``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from jinja2 import (
    ChainableUndefined,
    Environment,
    Template,
    TemplateError,
    TemplateSyntaxError,
    Undefined,
)

from screengen.core.errors import DataError, StorageError, TemplateNotFoundError
from screengen.core.models.config import DEFAULT_DELIMITERS

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".j2"


def _finalize(value: Any) -> Any:
    """Render Python values the way the generated JS/TS/JSON expects."""
    if value is None or isinstance(value, Undefined):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return value


def _json_filter(value: Any, indent: int | None = None) -> str:
    """Always valid JSON: missing values become ``null``, compact unless indented."""
    if isinstance(value, Undefined):
        value = None
    if indent is None:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(value, indent=indent, ensure_ascii=False)


class TemplateRenderer:
    """Renders template ids against a context mapping."""

    def __init__(self, templates_root: Path):
        self.templates_root = Path(templates_root)
        self._sources: dict[str, str] = {}
        self._compiled: dict[tuple[str, tuple[str, str]], Template] = {}
        self._environments: dict[tuple[str, str], Environment] = {}

    # ── Resolution ─────────────────────────────────────────────

    def template_path(self, template_id: str) -> Path:
        return self.templates_root / f"{template_id}{TEMPLATE_SUFFIX}"

    def exists(self, template_id: str) -> bool:
        return self.template_path(template_id).is_file()

    def list_templates(self) -> list[str]:
        """All template ids under the templates root."""
        if not self.templates_root.is_dir():
            return []
        return sorted(
            p.relative_to(self.templates_root).with_suffix("").as_posix()
            for p in self.templates_root.rglob(f"*{TEMPLATE_SUFFIX}")
        )

    def _source(self, template_id: str) -> str:
        if template_id in self._sources:
            return self._sources[template_id]

        path = self.template_path(template_id)
        if not path.is_file():
            raise TemplateNotFoundError(f"Template not found: {template_id} ({path})")
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read template {path}: {e}") from e

        logger.debug("Loaded template %s from %s", template_id, path)
        self._sources[template_id] = source
        return source

    # ── Rendering ──────────────────────────────────────────────

    def _environment(self, delimiters: tuple[str, str]) -> Environment:
        env = self._environments.get(delimiters)
        if env is None:
            start, end = delimiters
            env = Environment(
                variable_start_string=start,
                variable_end_string=end,
                undefined=ChainableUndefined,
                finalize=_finalize,
                keep_trailing_newline=True,
                autoescape=False,
            )
            env.filters["json"] = _json_filter
            self._environments[delimiters] = env
        return env

    def render(
        self,
        template_id: str,
        context: dict[str, Any],
        delimiters: tuple[str, str] = DEFAULT_DELIMITERS,
    ) -> str:
        """Render ``template_id`` with ``context``.

        Raises:
            TemplateNotFoundError: No template resource for the id.
            DataError: The template source is not valid template syntax.
        """
        delimiters = tuple(delimiters)
        key = (template_id, delimiters)
        template = self._compiled.get(key)
        if template is None:
            source = self._source(template_id)
            try:
                template = self._environment(delimiters).from_string(source)
            except TemplateSyntaxError as e:
                raise DataError(f"Template {template_id} line {e.lineno}: {e.message}") from e
            self._compiled[key] = template

        try:
            return template.render(**context)
        except TemplateError as e:
            raise DataError(f"Cannot render {template_id}: {e}") from e
