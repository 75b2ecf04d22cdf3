import logging

import pytest

from daemon_config import CONFIG_NAME, GameModeConfig


@pytest.fixture
def config_dir(tmp_path):
    d = tmp_path / "etc"
    d.mkdir()
    return d


@pytest.fixture
def write_config(config_dir):
    """Write the INI text to the config file and return its path."""

    def _write(text: str, directory=None):
        path = (directory or config_dir) / CONFIG_NAME
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_config(config_dir):
    created = []

    def _make(search_dirs=None, **kwargs):
        cfg = GameModeConfig.create(
            search_dirs=[str(config_dir)] if search_dirs is None else search_dirs, **kwargs
        )
        created.append(cfg)
        return cfg

    yield _make
    for cfg in created:
        cfg.destroy()


@pytest.fixture
def config(make_config):
    cfg = make_config()
    cfg.init()
    return cfg


@pytest.fixture
def info_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="daemon_config")
    return caplog
