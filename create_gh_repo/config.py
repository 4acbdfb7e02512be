"""
config.py

Responsibility: Resolve CLI flags, environment variables and the optional YAML
config file into a single `CommandOptions` value.

Precedence, highest first: CLI flags, environment, config file, built-in
defaults. The resolved value is passed explicitly to everything downstream;
nothing below the CLI reads the environment for these settings.

Config file (YAML, every key optional):

    editor: vim
    username: octocat
    org: my-org
    api_base: https://api.github.com
    defaults:            # manifest field defaults
      private: true
      license_template: mit
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from create_gh_repo.manifest import ManifestError, RepoManifest

DEFAULT_API_BASE = "https://api.github.com"
CONFIG_ENV = "CREATE_GH_REPO_CONFIG"

_CONFIG_KEYS = ("editor", "username", "org", "api_base", "defaults")


class ConfigError(ValueError):
    pass


class GitMode(enum.Enum):
    CREATE = "create"
    CLONE = "clone"
    REMOTES = "remotes"
    PUSH = "push"


@dataclass(frozen=True)
class FileConfig:
    """Settings read from the YAML config file."""

    editor: str | None = None
    username: str | None = None
    org: str | None = None
    api_base: str | None = None
    defaults: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CommandOptions:
    editor: str
    auth: str
    mode: GitMode
    token_auth: bool = True
    username: str | None = None
    directory: str | None = None
    org: str | None = None
    api_base: str = DEFAULT_API_BASE
    dry_run: bool = False
    manifest_defaults: RepoManifest = field(default_factory=RepoManifest)


def default_config_path(environ: Mapping[str, str]) -> Path:
    if environ.get(CONFIG_ENV):
        return Path(environ[CONFIG_ENV]).expanduser()
    base = environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return Path(base) / "create-gh-repo" / "config.yaml"


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"`{key}` must be a string when provided.")
    return value.strip() or None


def load_config_file(path: str | Path) -> FileConfig:
    """
    Parse the YAML config file at `path`.

    A missing file yields an empty `FileConfig`.
    """
    p = Path(path)
    if not p.exists():
        return FileConfig()

    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {p} must be a mapping/object at the top level.")

    unknown = sorted(str(k) for k in data if k not in _CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"Unknown key(s) in config file {p}: {', '.join(unknown)}")

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError("`defaults` must be an object/mapping when provided.")

    return FileConfig(
        editor=_optional_str(data, "editor"),
        username=_optional_str(data, "username"),
        org=_optional_str(data, "org"),
        api_base=_optional_str(data, "api_base"),
        defaults=dict(defaults),
    )


def _first(*values: str | None) -> str | None:
    for v in values:
        if v:
            return v
    return None


def resolve_options(args: Any, environ: Mapping[str, str], file_config: FileConfig | None = None) -> CommandOptions:
    """
    Merge parsed CLI arguments, `environ` and `file_config` into CommandOptions.

    `args` is the argparse namespace from `cli._build_parser`.
    """
    fc = file_config if file_config is not None else FileConfig()

    editor = _first(args.editor, environ.get("VISUAL"), environ.get("EDITOR"), fc.editor)
    username = _first(args.username, environ.get("GITHUB_USERNAME"), fc.username)
    password = _first(args.password, environ.get("GITHUB_PASSWORD"))
    token = _first(args.token, environ.get("GITHUB_TOKEN"))

    # --password forces basic auth; otherwise a token wins over GITHUB_PASSWORD.
    token_auth = not args.password and (bool(token) or not password)
    if token_auth:
        auth = token
    elif username:
        auth = f"{username}:{password}"
    else:
        raise ConfigError("Missing parameter: username (required with a password)")

    if not auth:
        raise ConfigError("Missing parameter: authentication (use --token or set GITHUB_TOKEN)")
    if not editor:
        raise ConfigError("Missing parameter: editor (use --editor or set EDITOR)")

    try:
        manifest_defaults = RepoManifest.from_mapping(fc.defaults)
    except ManifestError as e:
        raise ConfigError(f"Invalid manifest defaults in config file: {e}") from e

    return CommandOptions(
        editor=editor,
        auth=auth,
        mode=GitMode(args.mode),
        token_auth=token_auth,
        username=username,
        directory=args.directory,
        org=_first(args.org, fc.org),
        api_base=_first(fc.api_base) or DEFAULT_API_BASE,
        dry_run=bool(args.dry_run),
        manifest_defaults=manifest_defaults,
    )
