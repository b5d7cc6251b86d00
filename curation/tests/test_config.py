from __future__ import annotations

import importlib
from pathlib import Path
from unittest.mock import patch

import curation.listing.config as listing_config


def test_listing_config_loads_dotenv_and_reads_env(monkeypatch):
    monkeypatch.setenv("CURATION_SNAPSHOT_TTL", "5")
    monkeypatch.setenv("CURATION_DEBOUNCE_SECONDS", "0.1")
    try:
        with patch("dotenv.load_dotenv") as load:
            importlib.reload(listing_config)
        env_path = Path(load.call_args.args[0])
        assert env_path.name == ".env"
        assert env_path.parent == Path(listing_config.__file__).resolve().parent.parent.parent

        assert listing_config.DEFAULT_LISTING_CONFIG.snapshot_ttl == 5.0
        assert listing_config.DEFAULT_LISTING_CONFIG.debounce_seconds == 0.1
    finally:
        monkeypatch.delenv("CURATION_SNAPSHOT_TTL")
        monkeypatch.delenv("CURATION_DEBOUNCE_SECONDS")
        importlib.reload(listing_config)
