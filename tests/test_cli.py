from __future__ import annotations

import json

import pytest

from gallformers import cli


@pytest.fixture
def glossary_file(tmp_path):
    path = tmp_path / "glossary.yaml"
    path.write_text(
        "- id: 1\n  word: bud\n  definition: an undeveloped shoot\n"
        "- id: 2\n  word: bud gall\n  definition: a gall formed from a bud\n",
        encoding="utf-8",
    )
    return str(path)


def test_link_and_export_json(glossary_file, tmp_path) -> None:
    out = tmp_path / "segments.json"

    code = cli.main(["A bud gall and a bud", "--glossary", glossary_file, "--export", str(out)])

    assert code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [s["text"] for s in data] == ["A ", "bud gall", " and a ", "bud"]
    assert data[1]["href"] == "/glossary/#bud-gall"


def test_export_markdown_same_document(glossary_file, tmp_path) -> None:
    out = tmp_path / "segments.md"

    code = cli.main(["bud", "-g", glossary_file, "--same-document", "-e", str(out)])

    assert code == 0
    assert out.read_text(encoding="utf-8") == '[bud](#bud "an undeveloped shoot")'


def test_link_from_file(glossary_file, tmp_path) -> None:
    text = tmp_path / "description.txt"
    text.write_text("Bud Gall\n", encoding="utf-8")
    out = tmp_path / "segments.json"

    assert cli.main(["--file", str(text), "-g", glossary_file, "-F", "segments", "-e", str(out)]) == 0
    assert [s["type"] for s in json.loads(out.read_text(encoding="utf-8"))] == ["link", "text"]


def test_list_glossary(glossary_file, capsys) -> None:
    assert cli.main(["--list", "--glossary", glossary_file]) == 0
    assert "bud-gall" in capsys.readouterr().out


def test_missing_glossary_fails(tmp_path) -> None:
    assert cli.main(["bud", "--glossary", str(tmp_path / "missing.yaml")]) == 1


def test_missing_text_file_fails(glossary_file, tmp_path) -> None:
    assert cli.main(["--file", str(tmp_path / "missing.txt"), "-g", glossary_file]) == 1


def test_bad_config_fails(tmp_path) -> None:
    assert cli.main(["bud", "--config", str(tmp_path / "missing.yaml")]) == 1


def test_interactive_commands(glossary_file, monkeypatch: pytest.MonkeyPatch) -> None:
    inputs = iter(["/help", "/list", "a bud", "/exit"])
    monkeypatch.setattr(cli.console, "input", lambda prompt="": next(inputs))

    assert cli.main(["--glossary", glossary_file]) == 0


def test_unknown_glossary_source_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GALLFORMERS_GLOSSARY_SOURCE", "prisma")
    assert cli.main(["bud"]) == 1


def test_http_source_without_url_fails(tmp_path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("glossary:\n  source: http\n", encoding="utf-8")

    assert cli.main(["bud", "--config", str(config)]) == 1


def test_interactive_same_document(glossary_file, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    inputs = iter(["a bud", "/exit"])
    monkeypatch.setattr(cli.console, "input", lambda prompt="": next(inputs))

    assert cli.main(["--glossary", glossary_file, "--same-document", "--format", "markdown"]) == 0

    out = capsys.readouterr().out
    assert '[bud](#bud "an undeveloped shoot")' in out
    assert "/glossary/#bud" not in out


def test_list_glossary_disambiguates_anchors(tmp_path, capsys) -> None:
    path = tmp_path / "glossary.yaml"
    path.write_text("- id: 1\n  word: leaf vein\n- id: 2\n  word: leaf-vein\n", encoding="utf-8")

    assert cli.main(["--list", "--glossary", str(path)]) == 0
    assert "leaf-vein-2" in capsys.readouterr().out
