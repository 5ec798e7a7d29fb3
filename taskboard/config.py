# Task board configuration.
# Override defaults via taskboard.yaml, environment variables or CLI args.

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .activation import PointerActivation

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent.parent / "taskboard.yaml"


@dataclass
class BoardConfig:
    """Runtime configuration for the board engine and its HTTP API."""

    # Storage
    db_path: str = "~/.local/share/taskboard/board.db"

    # HTTP API
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    # Drag activation: hold this long, moving less than this, to pick up
    activation_delay_ms: int = 250
    activation_tolerance_px: float = 5.0

    def resolve_paths(self):
        """Apply environment overrides and expand ~."""
        env_db = os.environ.get("TASKBOARD_DB")
        if env_db:
            self.db_path = env_db
        self.db_path = str(Path(self.db_path).expanduser())

    def pointer_activation(self) -> PointerActivation:
        return PointerActivation(self.activation_delay_ms, self.activation_tolerance_px)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "BoardConfig":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        known = {f.name for f in fields(cls)}
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
                logger.warning(f"Ignoring unreadable config {cfg_path}: {e}")
                cfg = cls()
        else:
            cfg = cls()
        cfg.resolve_paths()
        return cfg
