"""
git_ops.py

Responsibility: The local version-control step after a repository is created.

- clone: clone the new repository into a fresh directory
- sync_remote: point an existing local repository's `origin` at it and fetch
- push: push the local repository's current branch to `origin`

All commands run through the `git` executable. Credentials, when given, are
passed per command as an HTTP header and never written to `.git/config`.
"""

from __future__ import annotations

import base64
import subprocess
from pathlib import Path
from urllib.parse import urlparse

from create_gh_repo.log import get_logger

log = get_logger("git")


class GitError(RuntimeError):
    pass


def _auth_args(auth: str | None, token_auth: bool) -> list[str]:
    if not auth:
        return []
    # GitHub accepts a token as the password for the x-access-token user.
    userpass = f"x-access-token:{auth}" if token_auth else auth
    encoded = base64.b64encode(userpass.encode("utf-8")).decode("ascii")
    return ["-c", f"http.extraHeader=Authorization: Basic {encoded}"]


def _run(
    args: list[str],
    *,
    cwd: Path | None = None,
    auth_args: list[str] | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """
    Run `git <args>`, raising a GitError on failure when `check` is set.
    """
    cmd = ["git", *(auth_args or []), *args]
    log.debug("git %s", " ".join(args))
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        raise GitError(f"Failed to run git: {e}") from e
    if check and result.returncode != 0:
        raise GitError(f"Command failed: git {' '.join(args)}\n\n{result.stdout}")
    return result


def _is_empty_dir(path: Path) -> bool:
    return path.is_dir() and not any(path.iterdir())


def default_clone_dir(clone_url: str) -> str:
    """`https://github.com/owner/name.git` -> `name`."""
    segments = [s for s in urlparse(clone_url).path.split("/") if s]
    if not segments:
        raise GitError(f"Cannot derive a directory name from {clone_url!r}")
    stem = Path(segments[-1]).stem
    if not stem:
        raise GitError(f"Cannot derive a directory name from {clone_url!r}")
    return stem


def find_repository(target_dir: str | None = None) -> Path:
    """Return the work tree root containing `target_dir` (default: cwd)."""
    start = Path(target_dir) if target_dir else Path.cwd()
    if not start.is_dir():
        raise GitError(f"Target directory is invalid: {start}")
    result = _run(["rev-parse", "--show-toplevel"], cwd=start, check=False)
    if result.returncode != 0:
        raise GitError(f"Not inside a git work tree: {start}")
    return Path(result.stdout.strip())


def repo_name(target_dir: str | None = None) -> str:
    return find_repository(target_dir).name


def clone(clone_url: str, target_dir: str | None = None, *, auth: str | None = None, token_auth: bool = True) -> Path:
    """
    Clone `clone_url` into `target_dir`, or a directory named after the repo.

    Refuses to clone into an existing, non-empty directory.
    """
    path = Path(target_dir or default_clone_dir(clone_url)).resolve()
    if path.exists() and not _is_empty_dir(path):
        raise GitError(f"Target directory is invalid: {path} exists and is not empty")

    _run(["clone", clone_url, str(path)], auth_args=_auth_args(auth, token_auth))
    return path


def _current_branch(repo: Path) -> str | None:
    result = _run(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=repo, check=False)
    return result.stdout.strip() if result.returncode == 0 else None


def sync_remote(
    clone_url: str, target_dir: str | None = None, *, auth: str | None = None, token_auth: bool = True
) -> Path:
    """
    Set (or add) `origin` to `clone_url` in an existing repository and fetch.

    The current branch tracks `origin/<branch>` afterwards when that branch
    exists on the remote.
    """
    repo = find_repository(target_dir)

    if _run(["remote", "get-url", "origin"], cwd=repo, check=False).returncode == 0:
        _run(["remote", "set-url", "origin", clone_url], cwd=repo)
    else:
        _run(["remote", "add", "origin", clone_url], cwd=repo)
    _run(["fetch", "origin"], cwd=repo, auth_args=_auth_args(auth, token_auth))

    branch = _current_branch(repo)
    if branch:
        upstream = f"origin/{branch}"
        exists = _run(["rev-parse", "--verify", "--quiet", f"refs/remotes/{upstream}"], cwd=repo, check=False)
        if exists.returncode == 0:
            result = _run(["branch", f"--set-upstream-to={upstream}", branch], cwd=repo, check=False)
            if result.returncode != 0:
                log.debug("Could not set upstream %s: %s", upstream, result.stdout.strip())
    return repo


def push(target_dir: str | None = None, *, auth: str | None = None, token_auth: bool = True) -> Path:
    """Push the current branch to `origin` and track it."""
    repo = find_repository(target_dir)
    _run(["push", "-u", "origin", "HEAD"], cwd=repo, auth_args=_auth_args(auth, token_auth))
    return repo
