"""
manifest.py

Responsibility: the typed repository parameters edited by the user and sent to
GitHub's "create repository" endpoint.

Every field has a default so an untouched manifest can always be rendered.
Manifests are immutable; callers replace them wholesale.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping


class ManifestError(ValueError):
    pass


# Omitted from the API payload when empty; GitHub rejects "" for these.
_OPTIONAL_STRINGS = ("homepage", "gitignore_template", "license_template")


@dataclass(frozen=True)
class RepoManifest:
    """Repository parameters for `POST /user/repos`."""

    name: str = "repo-name"
    description: str = ""
    homepage: str = ""
    private: bool = False
    has_issues: bool = True
    has_wiki: bool = False
    has_downloads: bool = False
    auto_init: bool = True
    gitignore_template: str = ""
    license_template: str = ""

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base: RepoManifest | None = None) -> RepoManifest:
        """
        Build a manifest from `data`, starting from `base` (or the defaults).

        Keys absent from `data` keep the base value. Unknown keys and values of
        the wrong type raise ManifestError.
        """
        start = base if base is not None else cls()
        types = {f.name: f.type for f in fields(cls)}

        unknown = sorted(str(k) for k in data if k not in types)
        if unknown:
            raise ManifestError(f"Unknown field(s): {', '.join(unknown)}")

        updates: dict[str, Any] = {}
        for key, value in data.items():
            expected = types[key]
            if expected == "bool":
                # bool is checked exactly; JSON 0/1 must not pass as a flag.
                if not isinstance(value, bool):
                    raise ManifestError(f"`{key}` must be true or false, got {value!r}")
            elif expected == "str":
                if not isinstance(value, str):
                    raise ManifestError(f"`{key}` must be a string, got {value!r}")
            updates[key] = value

        return replace(start, **updates)

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the GitHub API."""
        payload = asdict(self)
        for key in _OPTIONAL_STRINGS:
            if not payload[key]:
                del payload[key]
        return payload
