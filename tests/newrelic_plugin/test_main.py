"""Tests for the CLI entry point."""

import logging
from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.newrelic_plugin.errors import PreconditionError, TransportError
from src.newrelic_plugin.main import (
    EXIT_PRECONDITION,
    EXIT_TRANSPORT,
    build_parser,
    main,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the CLI's stderr handler so each test binds to its own capture."""
    yield
    logger = logging.getLogger("src")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def argv(settings_file) -> list[str]:
    return [
        "-u", "https://example.com",
        "-k", "abc123",
        "-h", "web1.example.com",
        "--config", str(settings_file),
    ]


class TestParser:
    def test_short_flags(self):
        args = build_parser().parse_args(["-u", "https://example.com", "-k", "abc", "-h", "web1"])
        assert args.base_url == "https://example.com"
        assert args.key == "abc"
        assert args.host == "web1"
        assert args.pid == 0
        assert args.verbose is False

    def test_required_flags(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-u", "https://example.com"])


class TestMain:
    @patch("src.newrelic_plugin.main.collect")
    def test_prints_response(self, mock_collect, argv, capsys):
        mock_collect.return_value = MagicMock(response='{"status":"ok"}')

        assert main(argv) == 0

        assert capsys.readouterr().out.strip() == '{"status":"ok"}'
        kwargs = mock_collect.call_args.kwargs
        assert kwargs["base_url"] == "https://example.com"
        assert kwargs["key"] == "abc123"
        assert kwargs["host"] == "web1.example.com"

    @patch("src.newrelic_plugin.main.collect")
    def test_silent_when_nothing_to_send(self, mock_collect, argv, capsys):
        mock_collect.return_value = None

        assert main(argv) == 0

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    @patch("src.newrelic_plugin.main.collect")
    def test_precondition_failure(self, mock_collect, argv, capsys):
        mock_collect.side_effect = PreconditionError("Agent not ready")

        assert main(argv) == EXIT_PRECONDITION

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Agent not ready" in captured.err

    @patch("src.newrelic_plugin.main.collect")
    def test_transport_failure(self, mock_collect, argv, capsys):
        mock_collect.side_effect = TransportError("Request failed")

        assert main(argv) == EXIT_TRANSPORT
        assert "Request failed" in capsys.readouterr().err

    @patch("httpx.post")
    @patch("src.common.http_client.HTTPClient.get_json")
    def test_end_to_end(self, mock_get_json, mock_post, argv, sample_stats, capsys):
        mock_get_json.return_value = sample_stats
        mock_post.return_value = MagicMock(status_code=200, text='{"status":"ok"}')

        assert main(argv + ["--pid", "99"]) == 0

        assert capsys.readouterr().out.strip() == '{"status":"ok"}'
        mock_get_json.assert_called_once_with(
            "https://example.com/new-relic-rpm-plugin/abc123"
        )
        assert mock_post.call_args.kwargs["headers"]["X-License-Key"] == "abc123"

    @patch("httpx.post")
    @patch("src.common.http_client.HTTPClient.get_json")
    def test_empty_host_fails_before_sending(
        self, mock_get_json, mock_post, settings_file, sample_stats
    ):
        mock_get_json.return_value = sample_stats

        code = main([
            "-u", "https://example.com",
            "-k", "abc123",
            "-h", "",
            "--config", str(settings_file),
        ])

        assert code == EXIT_PRECONDITION
        mock_post.assert_not_called()

    @patch("httpx.post")
    @patch("src.common.http_client.HTTPClient.get_json")
    def test_unreachable_api(self, mock_get_json, mock_post, argv, sample_stats):
        mock_get_json.return_value = sample_stats
        mock_post.side_effect = httpx.ConnectError("Name or service not known")

        assert main(argv) == EXIT_TRANSPORT

    @patch("httpx.post")
    @patch("src.common.http_client.HTTPClient.get_json")
    def test_all_zero_stats_are_silent(self, mock_get_json, mock_post, argv, capsys):
        mock_get_json.return_value = {"total_users": 0, "total_nodes": 0, "total_comments": 0}

        assert main(argv) == 0

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""
        mock_post.assert_not_called()


class TestSettingsErrors:
    @patch("src.newrelic_plugin.main.collect")
    def test_invalid_setting_value(self, mock_collect, argv, settings_file, capsys):
        settings_file.write_text("plugin:\n  metric_duration: 0\n", encoding="utf-8")

        assert main(argv) == EXIT_PRECONDITION

        assert "Invalid settings" in capsys.readouterr().err
        mock_collect.assert_not_called()

    @patch("src.newrelic_plugin.main.collect")
    def test_malformed_yaml(self, mock_collect, argv, settings_file, capsys):
        settings_file.write_text("api: [unclosed\n", encoding="utf-8")

        assert main(argv) == EXIT_PRECONDITION

        assert "Invalid settings" in capsys.readouterr().err
        mock_collect.assert_not_called()

    @pytest.mark.parametrize(
        "name, value",
        [("NEW_RELIC_METRIC_DURATION", "0"), ("NEW_RELIC_TIMEOUT", "soon")],
    )
    @patch("src.newrelic_plugin.main.collect")
    def test_invalid_env_override(self, mock_collect, name, value, argv, monkeypatch, capsys):
        monkeypatch.setenv(name, value)

        assert main(argv) == EXIT_PRECONDITION

        assert "Invalid settings" in capsys.readouterr().err
        mock_collect.assert_not_called()

    @patch("src.newrelic_plugin.main.collect")
    def test_missing_config_file(self, mock_collect, tmp_path, capsys):
        missing = tmp_path / "nope.yaml"

        code = main([
            "-u", "https://example.com",
            "-k", "abc123",
            "-h", "web1.example.com",
            "--config", str(missing),
        ])

        assert code == EXIT_PRECONDITION
        assert "Settings file not found" in capsys.readouterr().err
        mock_collect.assert_not_called()


class TestLoggerName:
    def test_logger_is_under_package_tree(self):
        from src.newrelic_plugin import main as cli

        assert cli.logger.name == "src.newrelic_plugin.main"
