import pytest


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's credentials, editor and config file out of every test."""
    for name in ("GITHUB_USERNAME", "GITHUB_TOKEN", "GITHUB_PASSWORD", "EDITOR", "VISUAL", "XDG_CONFIG_HOME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CREATE_GH_REPO_CONFIG", str(tmp_path / "no-config.yaml"))
