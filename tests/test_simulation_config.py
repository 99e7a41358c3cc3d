"""
Tests for src/simulation/config.py module.

Tests cover:
- SpawnConfig defaults and from_dict
- load_config from YAML
- setup_logging
"""

import logging

import pytest
import yaml

from src.simulation.config import (
    DEFAULT_CANCEL_REASON,
    SpawnConfig,
    load_config,
    setup_logging,
)


class TestSpawnConfig:
    """Tests for SpawnConfig."""

    def test_default_values(self):
        config = SpawnConfig()
        assert config.parallel is True
        assert config.n_workers is None
        assert config.cancel_reason == DEFAULT_CANCEL_REASON
        assert config.progress_interval == 10000
        assert config.log_level == "INFO"

    def test_from_dict(self):
        config = SpawnConfig.from_dict({"parallel": False, "n_workers": 2})
        assert config.parallel is False
        assert config.n_workers == 2

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="n_agents"):
            SpawnConfig.from_dict({"n_agents": 5})


class TestLoadConfig:
    """Tests for load_config."""

    def test_spawn_section(self, tmp_path):
        path = tmp_path / "spawn.yaml"
        path.write_text(yaml.dump({"spawn": {"n_people": 50, "random_seed": 3}}))
        config = load_config(path)
        assert config.n_people == 50
        assert config.random_seed == 3

    def test_flat_file(self, tmp_path):
        """Keys may also sit at the top level."""
        path = tmp_path / "flat.yaml"
        path.write_text("cancel_reason: closed for an event\n")
        assert load_config(path).cancel_reason == "closed for an event"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == SpawnConfig()

    def test_empty_spawn_section_gives_defaults(self, tmp_path):
        path = tmp_path / "bare.yaml"
        path.write_text("spawn:\n")
        assert load_config(path) == SpawnConfig()

    def test_non_mapping_section_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("spawn:\n  - parallel\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_creates_log_directory(self, tmp_path):
        log_file = tmp_path / "logs" / "spawn.log"
        root = logging.getLogger()
        saved = root.handlers[:]
        saved_level = root.level
        root.handlers = []
        try:
            setup_logging(SpawnConfig(log_file=str(log_file)))
            assert log_file.parent.exists()
            assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved
            root.setLevel(saved_level)
