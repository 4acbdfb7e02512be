"""Tests for the GitHub client with requests stubbed out."""

import pytest
import requests

from create_gh_repo import github_client
from create_gh_repo.github_client import GitHubClient, GitHubError
from create_gh_repo.manifest import RepoManifest


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


CREATED = {
    "name": "svc",
    "owner": {"login": "octocat"},
    "html_url": "https://github.com/octocat/svc",
    "clone_url": "https://github.com/octocat/svc.git",
    "default_branch": "main",
}


class _Calls(list):
    pass


@pytest.fixture
def api(monkeypatch):
    recorded = _Calls()
    recorded.responses = []

    def fake_request(method, url, **kwargs):
        recorded.append({"method": method, "url": url, **kwargs})
        return recorded.responses.pop(0)

    monkeypatch.setattr(github_client.requests, "request", fake_request)
    return recorded


def test_create_repo_for_user(api):
    api.responses.append(FakeResponse(201, CREATED))
    repo = GitHubClient("tok").create_repo(RepoManifest(name="svc", private=True))

    call = api[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.github.com/user/repos"
    assert call["headers"]["Authorization"] == "Bearer tok"
    assert call["auth"] is None
    assert call["json"]["name"] == "svc"
    assert call["json"]["private"] is True
    assert "homepage" not in call["json"]

    assert repo.owner == "octocat"
    assert repo.clone_url == "https://github.com/octocat/svc.git"
    assert repo.default_branch == "main"


def test_create_repo_for_org(api):
    api.responses.append(FakeResponse(201, {**CREATED, "owner": {"login": "acme"}}))
    repo = GitHubClient("tok", api_base="https://ghe.example.com/api/v3/").create_repo(RepoManifest(name="svc"), org="acme")
    assert api[0]["url"] == "https://ghe.example.com/api/v3/orgs/acme/repos"
    assert repo.owner == "acme"


def test_basic_auth_uses_requests_auth(api):
    api.responses.append(FakeResponse(201, CREATED))
    GitHubClient("octocat:pw", token_auth=False).create_repo(RepoManifest(name="svc"))
    assert api[0]["auth"] == ("octocat", "pw")
    assert "Authorization" not in api[0]["headers"]


def test_basic_auth_requires_username_and_password():
    with pytest.raises(GitHubError):
        GitHubClient("no-colon", token_auth=False)


def test_empty_credentials_are_rejected():
    with pytest.raises(GitHubError):
        GitHubClient("  ")


def test_api_error_includes_validation_details(api):
    api.responses.append(
        FakeResponse(422, {"message": "Repository creation failed.", "errors": [{"message": "name already exists on this account"}]})
    )
    with pytest.raises(GitHubError, match="422.*name already exists"):
        GitHubClient("tok").create_repo(RepoManifest(name="svc"))


def test_api_error_without_json_body(api):
    api.responses.append(FakeResponse(502, None, text="Bad gateway"))
    with pytest.raises(GitHubError, match="Bad gateway"):
        GitHubClient("tok").create_repo(RepoManifest(name="svc"))


def test_network_failure_is_a_github_error(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(github_client.requests, "request", boom)
    with pytest.raises(GitHubError, match="connection refused"):
        GitHubClient("tok").create_repo(RepoManifest(name="svc"))
