"""Tests for the dangit command line."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from dangit.cli import main
from dangit.config import Config
from dangit.github import AuthError, FetchError
from dangit.models import ItemKind, Notification, WorkItem
from dangit.navigation import Snapshot


def _snapshot() -> Snapshot:
    return Snapshot(
        created_issues=(WorkItem(url="https://github.com/o/x/issues/1", title="Bug", repository="x"),),
        assigned_issues=(WorkItem(url="https://github.com/o/x/issues/1", title="Bug", repository="x"),),
        assigned_prs=(
            WorkItem(url="https://github.com/o/a/pull/2", title="Fix", repository="a", kind=ItemKind.PULL_REQUEST),
        ),
        notifications=(
            Notification(title="Ping", subject_api_url="https://api.github.com/repos/o/x/issues/1"),
        ),
    )


class TestListCommand:
    @patch("dangit.cli.load_config", return_value=Config())
    @patch("dangit.cli.fetch_snapshot")
    @patch("dangit.cli.get_token", return_value="tok")
    def test_prints_grouped_items(self, mock_token, mock_fetch, mock_config):
        mock_fetch.return_value = _snapshot()
        result = CliRunner().invoke(main, ["list"])

        assert result.exit_code == 0, result.output
        assert "Notifications (1)" in result.output
        assert "Ping → https://github.com/o/x/issues/1" in result.output
        # Repositories sorted, the duplicate issue printed once
        assert result.output.index("a:") < result.output.index("x:")
        assert result.output.count("x: Bug") == 1

    @patch("dangit.cli.load_config", return_value=Config())
    @patch("dangit.cli.fetch_snapshot")
    @patch("dangit.cli.get_token", return_value="tok")
    def test_org_option(self, mock_token, mock_fetch, mock_config):
        mock_fetch.return_value = Snapshot()
        result = CliRunner().invoke(main, ["list", "--org", "acme"])

        assert result.exit_code == 0, result.output
        client = mock_fetch.call_args[0][0]
        assert client.organization == "acme"
        assert "Nothing open" in result.output

    @patch("dangit.cli.load_config", return_value=Config())
    @patch("dangit.cli.fetch_snapshot", side_effect=FetchError("GET https://api.github.com/notifications returned HTTP 502"))
    @patch("dangit.cli.get_token", return_value="tok")
    def test_fetch_error_exits(self, mock_token, mock_fetch, mock_config):
        result = CliRunner().invoke(main, ["list"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "502" in result.output

    @patch("dangit.cli.load_config", return_value=Config())
    @patch("dangit.cli.get_token", side_effect=AuthError("gh is not installed"))
    def test_missing_token_exits(self, mock_token, mock_config):
        result = CliRunner().invoke(main, ["list"])
        assert result.exit_code == 1
        assert "gh is not installed" in result.output


class TestMainCommand:
    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "dangit v" in result.output

    @patch("dangit.cli.DashboardApp")
    @patch("dangit.cli.load_config", return_value=Config(transition_duration=0.25))
    @patch("dangit.cli.fetch_snapshot")
    @patch("dangit.cli.get_token", return_value="tok")
    def test_runs_dashboard(self, mock_token, mock_fetch, mock_config, mock_app):
        snapshot = _snapshot()
        mock_fetch.return_value = snapshot
        mock_app.return_value = MagicMock()

        result = CliRunner().invoke(main, ["--org", "acme"])

        assert result.exit_code == 0, result.output
        assert mock_fetch.call_args[0][0].organization == "acme"
        args, kwargs = mock_app.call_args
        assert args == (snapshot,)
        assert kwargs["transition_duration"] == 0.25
        mock_app.return_value.run.assert_called_once()


class TestConfigCommand:
    def test_set_and_show(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "config.toml"
            with patch("dangit.config.CONFIG_FILE", config_file), \
                 patch("dangit.config.CONFIG_DIR", Path(tmpdir)), \
                 patch("dangit.cli.CONFIG_FILE", config_file), \
                 patch.dict("os.environ", {}, clear=True):
                runner = CliRunner()
                result = runner.invoke(main, ["config", "--org", "acme", "--transition-duration", "0"])
                assert result.exit_code == 0, result.output
                assert "Configuration saved" in result.output

                result = runner.invoke(main, ["config", "--show"])
                assert result.exit_code == 0, result.output
                assert "acme" in result.output

                result = runner.invoke(main, ["config", "--clear-org"])
                assert result.exit_code == 0, result.output
                assert "organization" not in config_file.read_text()

    @pytest.mark.parametrize("duration", ["inf", "nan", "-1", "3600"])
    @patch("dangit.cli.save_config")
    @patch("dangit.cli.load_config", return_value=Config())
    def test_transition_duration_out_of_range_rejected(self, mock_config, mock_save, duration):
        result = CliRunner().invoke(main, ["config", "--transition-duration", duration])
        assert result.exit_code != 0
        assert "--transition-duration" in result.output
        mock_save.assert_not_called()

    def test_org_and_clear_org_conflict(self):
        result = CliRunner().invoke(main, ["config", "--org", "acme", "--clear-org"])
        assert result.exit_code != 0
        assert "mutually exclusive" in result.output
