"""Tests for the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from stubs import StubConnection, entity_payload, token_response

from wikibase_edit import cli


@pytest.fixture(autouse=True)
def _keep_log_sinks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda verbose=False: None)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "wikibase.yml"
    path.write_text(
        "WIKIBASE_API_URL: https://wikibase.example.org/w/api.php\n"
        "WIKIBASE_SITE_IRI: http://wikibase.example.org/entity/\n"
    )
    return path


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"labels": {"en": {"language": "en", "value": "Douglas Adams"}}}))
    return path


def _use_connection(monkeypatch: pytest.MonkeyPatch, connection: StubConnection) -> None:
    monkeypatch.setattr(
        cli, "ApiConnection", SimpleNamespace(from_settings=lambda settings: connection)
    )


def test_parser_requires_a_single_selector() -> None:
    parser = cli.build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["edit", "--id", "Q42", "--new", "item", "--data", "x.json"])

    parsed = parser.parse_args(
        ["edit", "--title", "Berlin", "--site", "dewiki", "--data", "-", "--bot"]
    )
    assert parsed.title == "Berlin"
    assert parsed.site == "dewiki"
    assert parsed.bot is True
    assert parsed.base_revision == 0


def test_edit_prints_document(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    config_file: Path,
    data_file: Path,
) -> None:
    connection = StubConnection([token_response("t"), {"success": 1, "entity": entity_payload()}])
    _use_connection(monkeypatch, connection)

    exit_code = cli._run_cli(
        [
            "--config", str(config_file),
            "edit", "--id", "Q42", "--data", str(data_file), "--summary", "cli edit",
        ]
    )

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["id"] == "Q42"
    assert printed["type"] == "item"
    assert connection.calls[1]["summary"] == "cli edit"
    assert json.loads(connection.calls[1]["data"])["labels"]["en"]["value"] == "Douglas Adams"


def test_edit_without_entity_in_response_exits_nonzero(
    monkeypatch: pytest.MonkeyPatch, config_file: Path, data_file: Path
) -> None:
    _use_connection(monkeypatch, StubConnection([token_response("t"), {"success": 1}]))

    exit_code = cli._run_cli(
        ["--config", str(config_file), "edit", "--new", "item", "--data", str(data_file)]
    )

    assert exit_code == 1


def test_site_without_title_is_rejected(
    monkeypatch: pytest.MonkeyPatch, config_file: Path, data_file: Path
) -> None:
    connection = StubConnection([])
    _use_connection(monkeypatch, connection)

    exit_code = cli._run_cli(
        [
            "--config", str(config_file),
            "edit", "--id", "Q42", "--site", "enwiki", "--data", str(data_file),
        ]
    )

    assert exit_code == 2
    assert connection.calls == []


def test_missing_config_exits_with_usage_error(tmp_path: Path, data_file: Path) -> None:
    exit_code = cli._run_cli(
        [
            "--config", str(tmp_path / "missing.yml"),
            "edit", "--id", "Q42", "--data", str(data_file),
        ]
    )

    assert exit_code == 2
