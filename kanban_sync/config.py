# Kanban sync — configuration
# Override paths and endpoints via config.yaml, environment or CLI args.

import logging
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

CONFIG_PATH = Path(__file__).parent / "config.yaml"

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Runtime configuration for the kanban server and editor sessions."""

    # Server side: the Document Store file
    state_file: str = "./data/state.json"
    host: str = "127.0.0.1"
    port: int = 3000
    max_body_bytes: int = 2 * 1024 * 1024

    # Client side
    server_url: Optional[str] = "http://127.0.0.1:3000"  # None = local file store
    request_timeout: float = 2.0
    cache_path: str = "~/.local/share/kanban-sync/state-cache.json"

    # Behavior
    quiet_period_ms: int = 800
    export_filename: str = "kanban-export.json"

    def resolve_paths(self):
        """Expand ~ in file paths."""
        self.state_file = str(Path(self.state_file).expanduser())
        self.cache_path = str(Path(self.cache_path).expanduser())

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
            except Exception as e:
                logger.warning(f"Config unreadable ({cfg_path}), using defaults: {e}")
                cfg = cls()
        else:
            cfg = cls()
        cfg.resolve_paths()
        return cfg
