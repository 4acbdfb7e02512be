"""
session.py

Responsibility: Run one edit session for a `RepoManifest`.

render -> write scratch file -> start watcher -> run editor (blocking) ->
stop watcher -> decide -> parse

The edit only counts when the editor exits successfully AND the watcher saw a
write to the scratch file. A failed exit wins over an observed write. The
scratch file and its private directory are removed on every exit path.
"""

from __future__ import annotations

import enum
import shlex
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, Union

from create_gh_repo.log import get_logger
from create_gh_repo.manifest import RepoManifest
from create_gh_repo.relaxed_json import parse_manifest_bytes
from create_gh_repo.renderer import render_manifest
from create_gh_repo.watcher import WriteWatcher

log = get_logger("session")

SCRATCH_NAME = "repository.json"


class EditorError(RuntimeError):
    pass


class SessionError(RuntimeError):
    pass


class SessionState(enum.Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    EDITING = "editing"
    DECIDING = "deciding"
    PARSING = "parsing"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass(frozen=True)
class Saved:
    manifest: RepoManifest


@dataclass(frozen=True)
class Aborted:
    reason: str


EditOutcome = Union[Saved, Aborted]

ABORT_EDITOR_FAILED = "editor-failed"
ABORT_NOT_SAVED = "not-saved"


class Watcher(Protocol):
    def observe(self) -> object: ...

    def stop(self) -> bool: ...


def run_editor(editor: str, path: Path) -> int:
    """
    Run `<editor> <path>` in the foreground and return its exit code.

    The editor inherits stdin/stdout/stderr and may run for as long as the
    user likes; there is no timeout.
    """
    cmd = shlex.split(editor)
    if not cmd:
        raise EditorError("No editor command configured (use --editor or set EDITOR).")
    cmd.append(str(path))
    log.debug("Launching editor: %s", shlex.join(cmd))
    try:
        return subprocess.run(cmd, check=False).returncode
    except OSError as e:
        raise EditorError(f"Failed to launch editor {cmd[0]!r}: {e}") from e


class EditSession:
    def __init__(
        self,
        editor: str,
        *,
        watcher_factory: Callable[[Path], Watcher] = WriteWatcher,
        run_editor: Callable[[str, Path], int] = run_editor,
    ) -> None:
        self.editor = editor
        self.state = SessionState.IDLE
        self.scratch_path: Path | None = None
        self._watcher_factory = watcher_factory
        self._run_editor = run_editor

    def _enter(self, state: SessionState) -> None:
        log.debug("Edit session: %s -> %s", self.state.value, state.value)
        self.state = state

    def _cleanup(self, scratch_dir: Path) -> None:
        try:
            shutil.rmtree(scratch_dir)
        except OSError as e:
            log.warning("Could not remove scratch file %s: %s", self.scratch_path, e)

    def run(self, manifest: RepoManifest) -> EditOutcome:
        if self.state is not SessionState.IDLE:
            raise SessionError("An edit session can only run once.")

        self._enter(SessionState.RENDERING)
        try:
            text = render_manifest(manifest)
        except Exception:
            self._enter(SessionState.FAILED)
            raise

        try:
            scratch_dir = Path(tempfile.mkdtemp(prefix="create-gh-repo-"))
        except OSError:
            self._enter(SessionState.FAILED)
            raise
        self.scratch_path = scratch_dir / SCRATCH_NAME

        try:
            return self._edit(manifest, text, self.scratch_path)
        except Exception:
            self._enter(SessionState.FAILED)
            raise
        finally:
            self._cleanup(scratch_dir)

    def _edit(self, manifest: RepoManifest, text: str, path: Path) -> EditOutcome:
        path.write_text(text, encoding="utf-8")

        self._enter(SessionState.EDITING)
        watcher = self._watcher_factory(path)
        watcher.observe()
        try:
            exit_code = self._run_editor(self.editor, path)
        finally:
            written = watcher.stop()

        self._enter(SessionState.DECIDING)
        if exit_code != 0:
            log.debug("Editor exited with status %s", exit_code)
            self._enter(SessionState.ABORTED)
            return Aborted(ABORT_EDITOR_FAILED)
        if not written:
            self._enter(SessionState.ABORTED)
            return Aborted(ABORT_NOT_SAVED)

        self._enter(SessionState.PARSING)
        edited = parse_manifest_bytes(path.read_bytes(), base=manifest)
        self._enter(SessionState.COMPLETED)
        return Saved(edited)


def edit_manifest(manifest: RepoManifest, editor: str) -> EditOutcome:
    """Let the user edit `manifest` in `editor`."""
    return EditSession(editor).run(manifest)
