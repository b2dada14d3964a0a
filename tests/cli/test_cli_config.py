import json

from historycache.cli import main

from .utils import logger_to_stderr


def test_config_check_json_success(capsys, tmp_path):
    config_text = """
[scope]
url = "https://api.devnet.example.com"
cluster = "devnet"

[history]
page_size = 5

[provider]
base_url = "https://listing.example.com"
api_key = "env:LISTING_TOKEN"
"""
    config_file = tmp_path / "config.toml"
    config_file.write_text(config_text)

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check", "--format", "json"])

    assert exit_code == 0

    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload["status"] == "ok"
    assert payload["warnings"] == []
    assert payload["config_path"].endswith("config.toml")


def test_config_check_warnings(capsys, tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[web]\nenabled = true\n")

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 0
    captured = capsys.readouterr()
    assert "No scope block configured" in captured.err
    assert "No provider block configured" in captured.err
    assert "Web API is enabled without authentication" in captured.err


def test_config_check_missing_file(capsys, tmp_path):
    missing_path = tmp_path / "absent.toml"

    with logger_to_stderr():
        exit_code = main(["--config", str(missing_path), "config", "check"])

    assert exit_code == 2

    captured = capsys.readouterr()
    assert "Configuration error (missing_file" in captured.err
    assert str(missing_path) in captured.err


def test_config_check_invalid_toml(capsys, tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[history\n")

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 1
    assert "invalid_format" in capsys.readouterr().err


def test_config_check_validation_error(capsys, tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("unknown_field = 42\n")

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 3

    captured = capsys.readouterr()
    assert "validation_error" in captured.err
    assert "Extra inputs are not permitted" in captured.err


def test_config_explain_text_output(capsys):
    with logger_to_stderr():
        exit_code = main(["config", "explain"])

    assert exit_code == 0

    captured = capsys.readouterr()
    assert "Configuration schema" in captured.err
    assert "history.page_size" in captured.err
    assert "history.tags.signature" in captured.err
    assert "scope.cluster" in captured.err


def test_config_explain_json_output(capsys):
    exit_code = main(["config", "explain", "--format", "json"])

    assert exit_code == 0
    fields = {field["name"]: field for field in json.loads(capsys.readouterr().out)["fields"]}
    assert fields["history.page_size"]["default"] == 5
    assert fields["scope.cluster"]["default"] == "mainnet-beta"
    assert fields["scope.url"]["required"] is True
