import json
from pathlib import Path

from click.testing import CliRunner

from knowdoc.cli import load_settings, main

SAMPLES = Path(__file__).parent / "samples"


def test_cli_prints_sorted_json():
    runner = CliRunner()
    result = runner.invoke(main, [str(SAMPLES / "shapes.js")])
    assert result.exit_code == 0, result.output

    data = json.loads(result.output)
    assert [c["description"] for c in data] == [
        "A point on the plane.",
        "Distance to the origin.",
        "Mirror the point.",
        "Scale a point.",
    ]
    assert "ast" not in data[0]["context"]
    assert data[0]["constructor_comment"]["tags"][0]["name"] == "x"
    assert data[0]["context"]["sort_key"] == "00000000 00000006"


def test_cli_exported_directory(tmp_path: Path):
    (tmp_path / "b.js").write_text("/** B */\nexport function b() {}\n")
    (tmp_path / "a.js").write_text("/** A */\nexport function a() {}\n/** local */\nfunction c() {}\n")

    runner = CliRunner()
    result = runner.invoke(main, ["--document-exported", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert [c["description"] for c in json.loads(result.output)] == ["A", "B"]


def test_cli_config_file(tmp_path: Path):
    (tmp_path / "x.js").write_text("/** X */\nexport function x() {}\n/** local */\nfunction y() {}\n")
    config = tmp_path / "knowdoc.toml"
    config.write_text("document_exported = true\n")

    runner = CliRunner()
    result = runner.invoke(main, ["--config", str(config), str(tmp_path / "x.js")])
    assert result.exit_code == 0, result.output
    assert [c["description"] for c in json.loads(result.output)] == ["X"]


def test_load_settings_env(monkeypatch):
    monkeypatch.setenv("KNOWDOC_DOCUMENT_EXPORTED", "true")
    assert load_settings().document_exported is True
    assert load_settings(document_exported=False).document_exported is False
