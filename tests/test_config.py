import logging
from pathlib import Path

import pytest

from dayflow import config


def test_data_dir_honours_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DAYFLOW_HOME", str(tmp_path / "plans"))
    assert config.data_dir() == tmp_path / "plans"


def test_data_dir_defaults_to_home(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DAYFLOW_HOME", raising=False)
    assert config.data_dir().name == ".dayflow"


def test_configure_logging_reads_level(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    monkeypatch.setenv("DAYFLOW_LOG_LEVEL", "debug")
    config.configure_logging()
    assert captured["level"] == logging.DEBUG

    config.configure_logging("nonsense")
    assert captured["level"] == logging.WARNING
