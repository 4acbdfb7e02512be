"""
create_gh_repo package

This package implements create-gh-repo as a CLI-first utility.

Key responsibilities are split across modules:
- `manifest.py`: the repository parameters sent to GitHub
- `renderer.py`: render a manifest into a commented, human-editable document
- `relaxed_json.py`: strip `//` commentary and decode the edited document
- `watcher.py`: observe the scratch file for writes while the editor runs
- `session.py`: one render -> edit -> decide -> parse cycle
- `github_client.py`: isolated GitHub REST API interactions (repo creation)
- `git_ops.py`: clone / remote sync / push through the `git` executable
- `config.py`: CLI flags, environment and config file -> `CommandOptions`
- `cli.py`: CLI entrypoint and orchestration (edit -> create -> git)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
