"""
renderer.py

Responsibility: Render a `RepoManifest` into the human-editable document the
user edits.

Rules:
- Output is the manifest as a JSON object with a one-line `//` comment before
  each key documenting the field.
- Values go through the `json` filter, so every value is a valid JSON literal
  on a single line (newlines and `//` inside strings are escaped or quoted).
- Rendering is pure: same manifest, same text.

This module intentionally does NOT know about editors, files, or parsing.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from create_gh_repo.manifest import RepoManifest

MANIFEST_TEMPLATE = "manifest.json.j2"


class RenderError(RuntimeError):
    pass


def _json_literal(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        loader=PackageLoader("create_gh_repo", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    env.filters["json"] = _json_literal
    return env


def render_manifest(manifest: RepoManifest) -> str:
    """
    Render `manifest` into commented JSON text.

    Reparsing the result with `relaxed_json.parse_manifest` yields an equal
    manifest.
    """
    try:
        template = _environment().get_template(MANIFEST_TEMPLATE)
        return template.render(manifest=manifest)
    except TemplateError as e:
        raise RenderError(f"Failed rendering template: {MANIFEST_TEMPLATE}") from e
