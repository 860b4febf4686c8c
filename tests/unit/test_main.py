"""Unit tests for the command-line entry point."""

from unittest.mock import patch

import pytest

from toolbridge_server.__main__ import main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in ("TOOLBRIDGE_MAX_STEPS", "TOOLBRIDGE_API_KEY", "TOOLBRIDGE_PORT"):
        monkeypatch.delenv(name, raising=False)


def test_invalid_cli_setting_exits_cleanly(monkeypatch):
    monkeypatch.setattr("sys.argv", ["toolbridge-server", "--max-steps", "0"])

    with patch("toolbridge_server.__main__.uvicorn.run") as mock_run:
        assert main() == 1

    mock_run.assert_not_called()


def test_invalid_env_setting_exits_cleanly(monkeypatch):
    monkeypatch.setenv("TOOLBRIDGE_MAX_STEPS", "0")
    monkeypatch.setattr("sys.argv", ["toolbridge-server"])

    with patch("toolbridge_server.__main__.uvicorn.run") as mock_run:
        assert main() == 1

    mock_run.assert_not_called()


def test_missing_api_key_exits_cleanly(monkeypatch):
    monkeypatch.setattr("sys.argv", ["toolbridge-server"])

    with patch("toolbridge_server.__main__.uvicorn.run") as mock_run:
        assert main() == 1

    mock_run.assert_not_called()


def test_starts_server(monkeypatch):
    monkeypatch.setenv("TOOLBRIDGE_API_KEY", "test-key")
    monkeypatch.setattr(
        "sys.argv", ["toolbridge-server", "--port", "4000", "--max-steps", "3"]
    )

    with patch("toolbridge_server.__main__.uvicorn.run") as mock_run:
        assert main() == 0

    mock_run.assert_called_once()
    assert mock_run.call_args.kwargs["port"] == 4000
    app = mock_run.call_args.args[0]
    assert app.state.settings.max_steps == 3
