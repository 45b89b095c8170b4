from typer.testing import CliRunner

from wm_cli.__main__ import app


runner = CliRunner()


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "--plain" in result.stdout
    for command in ["add", "import", "list", "show", "reset", "locate", "map", "session", "export", "config"]:
        assert command in result.stdout


def test_add_help_lists_kinds() -> None:
    result = runner.invoke(app, ["add", "--help"])
    assert result.exit_code == 0
    assert "running" in result.stdout
    assert "cycling" in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.stdout


def test_json_and_plain_are_mutually_exclusive() -> None:
    result = runner.invoke(app, ["--json", "--plain", "list", "--help"])
    assert result.exit_code == 2
    assert "mutually exclusive" in result.stdout
