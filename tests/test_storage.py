import stat

import pytest

from slackcli import storage
from slackcli.utils import AuthError, NotFoundError


class TestSaveWorkspace:
    def test_first_workspace_becomes_default(self, credentials_file) -> None:
        assert storage.save_workspace("T1", "acme", "xoxp-1") is True
        assert storage.save_workspace("T2", "beta", "xoxc-2", cookie="xoxd") is False

        workspaces = {ws["workspace_id"]: ws for ws in storage.list_workspaces()}
        assert workspaces["T1"]["is_default"]
        assert workspaces["T1"]["auth_type"] == "standard"
        assert workspaces["T2"]["auth_type"] == "browser"

    def test_file_is_owner_only(self, credentials_file) -> None:
        storage.save_workspace("T1", "acme", "xoxp-1")
        assert stat.S_IMODE(credentials_file.stat().st_mode) == 0o600


class TestGetCredentials:
    def test_env_token_wins(self, credentials_file, monkeypatch) -> None:
        storage.save_workspace("T1", "acme", "xoxp-file")
        monkeypatch.setenv("SLACK_TOKEN", "xoxc-env")
        monkeypatch.setenv("SLACK_COOKIE", "xoxd-env")

        assert storage.get_credentials() == {"token": "xoxc-env", "cookie": "xoxd-env"}

    def test_explicit_workspace_by_name(self, credentials_file) -> None:
        storage.save_workspace("T1", "acme", "xoxp-1")
        storage.save_workspace("T2", "Beta", "xoxp-2")

        assert storage.get_credentials("beta")["token"] == "xoxp-2"
        assert storage.get_credentials()["token"] == "xoxp-1"

    def test_nothing_configured(self, credentials_file) -> None:
        with pytest.raises(AuthError) as excinfo:
            storage.get_credentials()
        assert "auth login" in excinfo.value.hint

    def test_unknown_workspace(self, credentials_file) -> None:
        storage.save_workspace("T1", "acme", "xoxp-1")
        with pytest.raises(AuthError):
            storage.get_credentials("nope")


class TestDefaultAndRemove:
    def test_use_switches_default(self, credentials_file) -> None:
        storage.save_workspace("T1", "acme", "xoxp-1")
        storage.save_workspace("T2", "beta", "xoxp-2")

        storage.set_default_workspace("T2")

        assert storage.get_credentials()["token"] == "xoxp-2"

    def test_removing_default_promotes_another(self, credentials_file) -> None:
        storage.save_workspace("T1", "acme", "xoxp-1")
        storage.save_workspace("T2", "beta", "xoxp-2")

        storage.remove_workspace("acme")

        assert [ws["workspace_id"] for ws in storage.list_workspaces() if ws["is_default"]] == ["T2"]

    def test_unknown_workspace_raises(self, credentials_file) -> None:
        with pytest.raises(NotFoundError):
            storage.remove_workspace("T9")
        with pytest.raises(NotFoundError):
            storage.set_default_workspace("T9")
