"""
Configuration and logging setup for trip spawning runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

DEFAULT_CANCEL_REASON = "traffic pattern modifier cancelled this trip"


@dataclass
class SpawnConfig:
    """Configuration for validating and committing a batch of trips."""

    # Validation
    parallel: bool = True
    n_workers: Optional[int] = None  # None lets the executor decide

    # Finalization
    cancel_reason: str = DEFAULT_CANCEL_REASON
    progress_interval: int = 10000  # log every N plans committed

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Demo scenario
    random_seed: int = 42
    n_people: int = 1000

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpawnConfig:
        """Build a config from a plain dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)


def load_config(config_path: Path) -> SpawnConfig:
    """Load configuration from a YAML file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}")

    # An empty "spawn:" section means all defaults
    section = data["spawn"] if "spawn" in data else data
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ValueError(f"spawn section must be a mapping, got {section!r}")
    return SpawnConfig.from_dict(section)


def setup_logging(config: SpawnConfig, verbose: bool = False) -> None:
    """Setup logging based on configuration."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper())

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(config.log_file)
            if config.log_file
            else logging.NullHandler(),
        ],
    )
