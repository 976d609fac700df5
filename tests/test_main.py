# tests/test_main.py
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from varnish_admin import NetworkError
from varnish_admin.main import cli, load_cli_config


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_admin():
    admin = MagicMock()
    admin.__enter__.return_value = admin
    admin.__exit__.return_value = False
    with (
        patch("varnish_admin.main.load_cli_config") as load,
        patch("varnish_admin.main.VarnishAdmin") as admin_cls,
    ):
        admin_cls.from_config.return_value = admin
        yield admin, load


def test_status_running(runner, mock_admin):
    admin, _ = mock_admin
    admin.status.return_value = True

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0
    assert result.output.strip() == "running"
    admin.__exit__.assert_called_once()


def test_status_stopped_exit_code(runner, mock_admin):
    admin, _ = mock_admin
    admin.status.return_value = False

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 3
    assert result.output.strip() == "stopped"


def test_start_exit_code(runner, mock_admin):
    """start 总是返回 True，退出码应为 0"""
    admin, _ = mock_admin
    admin.start.return_value = True

    result = runner.invoke(cli, ["start"])

    assert result.exit_code == 0
    admin.start.assert_called_once_with()


def test_purge_joins_expression(runner, mock_admin):
    admin, _ = mock_admin
    admin.purge.return_value = ""

    result = runner.invoke(cli, ["purge", "req.url", "~", "^/news"])

    assert result.exit_code == 0
    admin.purge.assert_called_once_with("req.url ~ ^/news")


def test_purge_url(runner, mock_admin):
    admin, _ = mock_admin
    admin.purge_url.return_value = ""

    result = runner.invoke(cli, ["purge-url", "^/img/"])

    assert result.exit_code == 0
    admin.purge_url.assert_called_once_with("^/img/")


def test_error_exit_code(runner, mock_admin):
    admin, _ = mock_admin
    admin.__enter__.side_effect = NetworkError("无法连接")

    result = runner.invoke(cli, ["stop"])

    assert result.exit_code == 1


def test_config_and_profile_options(runner, mock_admin, tmp_path):
    admin, load = mock_admin
    admin.session.banner = "Varnish Cache CLI 1.0"
    config_file = tmp_path / "config.toml"
    config_file.write_text('host = "h"\n', encoding="utf-8")

    result = runner.invoke(
        cli, ["--config", str(config_file), "--profile", "edge", "banner"]
    )

    assert result.exit_code == 0
    assert "Varnish Cache CLI 1.0" in result.output
    load.assert_called_once_with(config_file, "edge")


def test_load_cli_config_without_dotenv(tmp_path, monkeypatch):
    """测试当前目录没有 .env 时不传入路径 (不产生多余警告)"""
    monkeypatch.chdir(tmp_path)
    with patch("varnish_admin.main.load_config_from_env") as load_env:
        load_cli_config(None, "default")
    load_env.assert_called_once_with(None)


def test_load_cli_config_with_dotenv(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("VARNISH_HOST=h\n", encoding="utf-8")
    with patch("varnish_admin.main.load_config_from_env") as load_env:
        load_cli_config(None, "default")
    load_env.assert_called_once_with(tmp_path / ".env")
