"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads

Proxies are taken from HTTP_PROXY / HTTPS_PROXY, which `requests` honours.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from create_gh_repo import __version__
from create_gh_repo.log import get_logger
from create_gh_repo.manifest import RepoManifest

log = get_logger("github")


class GitHubError(RuntimeError):
    pass


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    name: str
    html_url: str
    clone_url: str
    default_branch: str


class GitHubClient:
    def __init__(self, auth: str, *, token_auth: bool = True, api_base: str = "https://api.github.com") -> None:
        if not auth.strip():
            raise GitHubError("GitHub credentials are required.")
        if not token_auth and ":" not in auth:
            raise GitHubError("Basic authentication must be given as 'username:password'.")
        self._auth = auth
        self._token_auth = token_auth
        self._api_base = api_base.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"create-gh-repo/{__version__}",
        }
        if self._token_auth:
            headers["Authorization"] = f"Bearer {self._auth}"
        return headers

    def _basic_auth(self) -> tuple[str, str] | None:
        if self._token_auth:
            return None
        username, password = self._auth.split(":", 1)
        return username, password

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> Any:
        url = f"{self._api_base}{path}"
        log.debug("%s %s", method, url)
        try:
            r = requests.request(
                method, url, headers=self._headers(), auth=self._basic_auth(), json=json_body, timeout=30
            )
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed {method} {path}: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            raise GitHubError(f"GitHub API error {r.status_code} {method} {path}: {_error_message(payload)}")
        return r.json()

    def create_repo(self, manifest: RepoManifest, *, org: str | None = None) -> RepoInfo:
        """
        Create a new repository under either:
        - the authenticated user (no `org`), OR
        - the organization `org`.

        This method uses the GitHub REST API only; git operations are handled elsewhere.
        """
        path = f"/orgs/{org}/repos" if org else "/user/repos"
        data = self._request("POST", path, json_body=manifest.to_payload())

        owner = (data.get("owner") or {}).get("login") or org or ""
        return RepoInfo(
            owner=owner,
            name=data.get("name") or manifest.name,
            html_url=data["html_url"],
            clone_url=data["clone_url"],
            default_branch=data.get("default_branch") or "main",
        )


def _error_message(payload: Any) -> str:
    if not isinstance(payload, dict):
        return str(payload)
    message = str(payload.get("message", payload))
    # Validation failures carry the useful detail in `errors`.
    details = [e.get("message") or e.get("code") for e in payload.get("errors") or [] if isinstance(e, dict)]
    details = [str(d) for d in details if d]
    if details:
        message = f"{message} ({'; '.join(details)})"
    return message
