from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    """Point the user config directory at a temporary location."""
    home = tmp_path / "config-home"
    home.mkdir()
    monkeypatch.setenv("WORKSTYLE_CONFIG_HOME", str(home))
    return home


@pytest.fixture
def write_config(config_home):
    def _write(text: str) -> Path:
        app_dir = config_home / "workstyle"
        app_dir.mkdir(exist_ok=True)
        cfg = app_dir / "config.toml"
        cfg.write_text(text.strip() + "\n", encoding="utf-8")
        return cfg

    return _write
