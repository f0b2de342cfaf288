from __future__ import annotations

import logging

import pytest

from gallformers.core.config import APIConfig, GallformersConfig, GlossaryConfig

ENV_VARS = [
    "GALLFORMERS_GLOSSARY_SOURCE",
    "GALLFORMERS_GLOSSARY_PATH",
    "GALLFORMERS_GLOSSARY_URL",
    "GALLFORMERS_GLOSSARY_TIMEOUT",
    "GALLFORMERS_API_HOST",
    "GALLFORMERS_API_PORT",
    "GALLFORMERS_LOG_LEVEL",
    "GALLFORMERS_DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = GallformersConfig()
    assert config.glossary.source == "yaml"
    assert config.glossary.path is None
    assert config.api.port == 8000
    assert config.api.cors_origins == ["*"]
    assert config.log_level == "INFO"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GALLFORMERS_GLOSSARY_SOURCE", "HTTP")
    monkeypatch.setenv("GALLFORMERS_GLOSSARY_URL", "https://example.org/api/glossary")
    monkeypatch.setenv("GALLFORMERS_GLOSSARY_TIMEOUT", "3")
    monkeypatch.setenv("GALLFORMERS_API_HOST", "127.0.0.1")
    monkeypatch.setenv("GALLFORMERS_API_PORT", "9000")
    monkeypatch.setenv("GALLFORMERS_LOG_LEVEL", "warning")

    config = GallformersConfig()

    assert config.glossary.source == "http"
    assert config.glossary.url == "https://example.org/api/glossary"
    assert config.glossary.timeout == 3
    assert config.api.host == "127.0.0.1"
    assert config.api.port == 9000
    assert config.log_level == "WARNING"


def test_debug_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GALLFORMERS_DEBUG", "yes")
    config = GallformersConfig()
    assert config.api.debug is True
    assert config.log_level == "DEBUG"


def test_save_and_load_round_trip(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    config = GallformersConfig(
        glossary=GlossaryConfig(source="yaml", path="glossary.yaml"),
        api=APIConfig(port=8080, cors_origins=["https://gallformers.org"]),
        log_level="DEBUG",
    )
    config.save_to_file(str(path))

    loaded = GallformersConfig.load_from_file(str(path))

    assert loaded.glossary == config.glossary
    assert loaded.api == config.api
    assert loaded.log_level == "DEBUG"


def test_env_wins_over_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("api:\n  port: 8080\n", encoding="utf-8")
    monkeypatch.setenv("GALLFORMERS_API_PORT", "9001")

    assert GallformersConfig.load_from_file(str(path)).api.port == 9001


def test_load_rejects_unknown_keys(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("glossary:\n  database: postgres\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Failed to load config"):
        GallformersConfig.load_from_file(str(path))


def test_load_missing_file(tmp_path) -> None:
    with pytest.raises(ValueError):
        GallformersConfig.load_from_file(str(tmp_path / "nope.yaml"))


def test_malformed_integer_env_keeps_default(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    monkeypatch.setenv("GALLFORMERS_API_PORT", "eighty")
    monkeypatch.setenv("GALLFORMERS_GLOSSARY_TIMEOUT", "")

    with caplog.at_level(logging.WARNING, logger="gallformers.core.config"):
        config = GallformersConfig()

    assert config.api.port == 8000
    assert config.glossary.timeout == 10
    assert "GALLFORMERS_API_PORT" in caplog.text
