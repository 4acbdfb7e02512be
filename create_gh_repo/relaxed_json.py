"""
relaxed_json.py

Responsibility: Parse the edited manifest document back into a `RepoManifest`.

The document is JSON except that, on any line, everything from the first `//`
outside a string literal to the end of that line is commentary. Parsing runs
in two stages:

1. `strip_comments` scans line by line with a two-state (in/out of a string
   literal) scanner and keeps only the structural text.
2. The kept text is decoded by the strict `json` decoder and converted with
   `RepoManifest.from_mapping`.

Stage 1 failures raise `GrammarFailure`; stage 2 failures raise `Malformed`.
There is no best-effort recovery.
"""

from __future__ import annotations

import json

from create_gh_repo.manifest import ManifestError, RepoManifest

COMMENT_MARKER = "//"
BOM = "\ufeff"


class ParseError(ValueError):
    pass


class GrammarFailure(ParseError):
    """The comment stripper could not consume the whole document."""


class Malformed(ParseError):
    """The document, once stripped, is not a valid manifest object."""


def _strip_line(line: str, lineno: int) -> str:
    quoted = False
    escaped = False
    i = 0
    while i < len(line):
        ch = line[i]
        if quoted:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                quoted = False
        elif ch == '"':
            quoted = True
        elif line.startswith(COMMENT_MARKER, i):
            return line[:i]
        i += 1

    if quoted:
        # JSON strings cannot span lines, so there is no way to tell where
        # commentary would start.
        raise GrammarFailure(f"Unterminated string literal on line {lineno}")
    return line


def strip_comments(text: str) -> str:
    """
    Remove `//` commentary from `text`.

    Line breaks are preserved so decoder error positions still point at the
    user's lines. Only "\\n" separates lines; other Unicode line separators
    may legitimately appear inside string values.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    kept: list[str] = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        kept.append(_strip_line(line, lineno))
    return "\n".join(kept)


def parse_manifest(text: str, *, base: RepoManifest | None = None) -> RepoManifest:
    """
    Parse an edited manifest document.

    Fields missing from the document keep their value from `base` (or the
    defaults).
    """
    stripped = strip_comments(text)

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise Malformed(f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}") from e

    if not isinstance(data, dict):
        raise Malformed(f"Expected a JSON object at the top level, got {type(data).__name__}")

    try:
        return RepoManifest.from_mapping(data, base=base)
    except ManifestError as e:
        raise Malformed(str(e)) from e


def parse_manifest_bytes(data: bytes, *, base: RepoManifest | None = None) -> RepoManifest:
    """Decode the saved document as UTF-8 (a leading BOM is allowed) and parse it."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise Malformed(f"Document is not valid UTF-8 (byte {e.start}): {e.reason}") from e
    return parse_manifest(text, base=base)
