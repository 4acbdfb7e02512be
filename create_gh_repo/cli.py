"""
cli.py

Responsibility: CLI entrypoint for create-gh-repo.

High-level flow:
1) Resolve options (flags > environment > config file)
2) Let the user edit the repository manifest in their editor
3) Create the repository via the GitHub REST API
4) Run the git action for the selected mode (clone / remotes / push)

This module should orchestrate behavior but keep concerns isolated:
- Editing: `session.py`
- GitHub API: `github_client.py`
- git: `git_ops.py`
"""

from __future__ import annotations

import argparse
import json
import os
from dataclasses import replace
from pathlib import Path

from create_gh_repo import __version__, git_ops
from create_gh_repo.config import (
    CommandOptions,
    ConfigError,
    GitMode,
    default_config_path,
    load_config_file,
    resolve_options,
)
from create_gh_repo.github_client import GitHubClient, GitHubError, RepoInfo
from create_gh_repo.log import configure_logging, get_logger
from create_gh_repo.manifest import RepoManifest
from create_gh_repo.relaxed_json import GrammarFailure, Malformed
from create_gh_repo.renderer import RenderError
from create_gh_repo.session import Aborted, EditorError, SessionError, edit_manifest
from create_gh_repo.watcher import WatchError

log = get_logger("cli")

_ABORT_MESSAGES = {
    "editor-failed": "Aborted: the editor exited with an error.",
    "not-saved": "Aborted: the manifest was not saved.",
}


def _initial_manifest(options: CommandOptions) -> RepoManifest:
    manifest = options.manifest_defaults
    if options.mode is GitMode.CLONE and options.directory:
        manifest = replace(manifest, name=Path(options.directory).resolve().name)
    elif options.mode in (GitMode.REMOTES, GitMode.PUSH):
        manifest = replace(manifest, name=git_ops.repo_name(options.directory))
    if options.mode is GitMode.PUSH:
        # Pushing existing history into an auto-initialised repo would be rejected.
        manifest = replace(manifest, auto_init=False)
    return manifest


def _git_action(options: CommandOptions, repo: RepoInfo) -> None:
    auth = {"auth": options.auth, "token_auth": options.token_auth}
    if options.mode is GitMode.CREATE:
        print(repo.clone_url)
    elif options.mode is GitMode.CLONE:
        path = git_ops.clone(repo.clone_url, options.directory, **auth)
        log.info("Repository cloned into: %s", path)
    elif options.mode is GitMode.REMOTES:
        path = git_ops.sync_remote(repo.clone_url, options.directory, **auth)
        log.info("Remote 'origin' of %s set to %s", path, repo.clone_url)
    elif options.mode is GitMode.PUSH:
        git_ops.sync_remote(repo.clone_url, options.directory, **auth)
        path = git_ops.push(options.directory, **auth)
        log.info("Pushed %s to %s", path, repo.clone_url)


def run_cmd(args: argparse.Namespace) -> int:
    environ = os.environ
    config_path = Path(args.config) if args.config else default_config_path(environ)
    options = resolve_options(args, environ, load_config_file(config_path))

    outcome = edit_manifest(_initial_manifest(options), options.editor)
    if isinstance(outcome, Aborted):
        log.error(_ABORT_MESSAGES.get(outcome.reason, "Aborted."))
        return 1
    manifest = outcome.manifest

    if options.dry_run:
        print(json.dumps(manifest.to_payload(), indent=2, ensure_ascii=False))
        return 0

    gh = GitHubClient(options.auth, token_auth=options.token_auth, api_base=options.api_base)
    repo = gh.create_repo(manifest, org=options.org)
    log.info("Repository created: %s", repo.html_url)

    _git_action(options, repo)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="create-gh-repo",
        description="Create new repositories on GitHub from the command line",
        epilog=(
            "<username>, <token>, and <password> may alternatively be supplied by setting the "
            "GITHUB_USERNAME, GITHUB_TOKEN, or GITHUB_PASSWORD environment variables."
        ),
    )
    p.add_argument(
        "mode",
        nargs="?",
        default=GitMode.CLONE.value,
        choices=[m.value for m in GitMode],
        help="What to do after creating the repository (default: clone)",
    )
    p.add_argument("directory", nargs="?", default=None, help="Target directory for git operations")

    who = p.add_mutually_exclusive_group()
    who.add_argument("-u", "--user", dest="username", default=None, help="Your GitHub account username")
    who.add_argument(
        "-t", "--token", default=None, help="A personal access token with permission to create repositories"
    )
    p.add_argument("-p", "--password", default=None, help="The password to your GitHub account (requires --user)")
    p.add_argument("-e", "--editor", default=None, help="The command to run to edit the repository manifest")
    p.add_argument("--org", default=None, help="Create the repository in this organization")
    p.add_argument("--config", default=None, help="Config file (default: $XDG_CONFIG_HOME/create-gh-repo/config.yaml)")
    p.add_argument("--dry-run", action="store_true", help="Print the edited manifest instead of creating the repository")

    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(quiet=args.quiet, verbose=args.verbose)
    try:
        return int(run_cmd(args))
    except GrammarFailure as e:
        log.error("Could not read the manifest: %s", e)
    except Malformed as e:
        log.error("Invalid manifest: %s", e)
    except (ConfigError, RenderError, WatchError, EditorError, SessionError, GitHubError, git_ops.GitError, OSError) as e:
        log.error("error: %s", e)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
