"""Tests for CLI wiring with the editor, GitHub API and git stubbed out."""

import json
from pathlib import Path

import pytest

from create_gh_repo import cli
from create_gh_repo.github_client import GitHubError, RepoInfo
from create_gh_repo.manifest import RepoManifest
from create_gh_repo.relaxed_json import GrammarFailure, Malformed, parse_manifest_bytes
from create_gh_repo.session import Aborted, Saved

REPO = RepoInfo(
    owner="octocat",
    name="svc",
    html_url="https://github.com/octocat/svc",
    clone_url="https://github.com/octocat/svc.git",
    default_branch="main",
)


class Recorder:
    def __init__(self):
        self.edited_with = None
        self.created = None
        self.git = []
        self.outcome = Saved


@pytest.fixture
def rec(monkeypatch):
    r = Recorder()
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)

    def fake_edit(manifest, editor):
        r.edited_with = (manifest, editor)
        return r.outcome(manifest)

    class FakeClient:
        def __init__(self, auth, *, token_auth, api_base):
            r.client_args = (auth, token_auth, api_base)

        def create_repo(self, manifest, *, org=None):
            r.created = (manifest, org)
            return REPO

    monkeypatch.setattr(cli, "edit_manifest", fake_edit)
    monkeypatch.setattr(cli, "GitHubClient", FakeClient)
    monkeypatch.setattr(cli.git_ops, "clone", lambda url, d, **kw: r.git.append(("clone", url, d, kw)) or Path("svc"))
    monkeypatch.setattr(cli.git_ops, "sync_remote", lambda url, d, **kw: r.git.append(("sync", url, d, kw)) or Path("."))
    monkeypatch.setattr(cli.git_ops, "push", lambda d, **kw: r.git.append(("push", d, kw)) or Path("."))
    monkeypatch.setattr(cli.git_ops, "repo_name", lambda d: "existing-project")
    monkeypatch.setenv("GITHUB_TOKEN", "tok")
    monkeypatch.setenv("EDITOR", "vim")
    return r


def test_clone_mode_prefills_name_from_directory(rec, tmp_path):
    target = tmp_path / "new-service"
    assert cli.main(["clone", str(target)]) == 0
    manifest, editor = rec.edited_with
    assert manifest.name == "new-service"
    assert editor == "vim"
    assert rec.created == (manifest, None)
    assert rec.git == [("clone", REPO.clone_url, str(target), {"auth": "tok", "token_auth": True})]


def test_default_mode_is_clone(rec):
    assert cli.main([]) == 0
    assert rec.edited_with[0] == RepoManifest()
    assert rec.git[0][0] == "clone"


def test_create_mode_prints_clone_url(rec, capsys):
    assert cli.main(["create", "--org", "acme"]) == 0
    assert rec.created[1] == "acme"
    assert rec.git == []
    assert capsys.readouterr().out.strip() == REPO.clone_url


def test_remotes_mode_syncs_origin(rec):
    assert cli.main(["remotes", "."]) == 0
    assert rec.edited_with[0].name == "existing-project"
    assert [g[0] for g in rec.git] == ["sync"]


def test_push_mode_disables_auto_init_then_pushes(rec):
    assert cli.main(["push"]) == 0
    manifest = rec.edited_with[0]
    assert manifest.name == "existing-project"
    assert manifest.auto_init is False
    assert [g[0] for g in rec.git] == ["sync", "push"]


def test_dry_run_prints_payload_and_skips_api(rec, capsys):
    rec.outcome = lambda m: Saved(RepoManifest(name="dry", description="d"))
    assert cli.main(["--dry-run"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["name"] == "dry"
    assert rec.created is None
    assert rec.git == []


def test_abort_exits_nonzero_without_creating(rec):
    rec.outcome = lambda m: Aborted("not-saved")
    assert cli.main([]) == 1
    assert rec.created is None
    assert rec.git == []


@pytest.mark.parametrize("error", [Malformed("bad"), GrammarFailure("worse")])
def test_parse_errors_exit_nonzero(rec, error):
    def outcome(m):
        raise error

    rec.outcome = outcome
    assert cli.main([]) == 1
    assert rec.created is None


def test_api_error_exits_nonzero(rec, monkeypatch):
    class FailingClient:
        def __init__(self, *args, **kwargs):
            pass

        def create_repo(self, manifest, *, org=None):
            raise GitHubError("GitHub API error 422")

    monkeypatch.setattr(cli, "GitHubClient", FailingClient)
    assert cli.main([]) == 1
    assert rec.git == []


def test_missing_token_exits_nonzero(rec, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN")
    assert cli.main([]) == 1
    assert rec.edited_with is None


def test_config_file_defaults_reach_the_editor(rec, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("defaults:\n  private: true\n", encoding="utf-8")
    assert cli.main(["create", "--config", str(cfg)]) == 0
    assert rec.edited_with[0].private is True


def test_unknown_mode_is_a_usage_error(rec):
    with pytest.raises(SystemExit) as exc:
        cli.main(["rebase"])
    assert exc.value.code == 2


def test_undecodable_save_exits_nonzero(rec):
    def outcome(m):
        return Saved(parse_manifest_bytes(b'{"name": "\xff"}', base=m))

    rec.outcome = outcome
    assert cli.main(["create", "--dry-run"]) == 1
    assert rec.created is None
