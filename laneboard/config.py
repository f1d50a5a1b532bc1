# laneboard — configuration
# Grid size, item height and the initial board come from board.yaml.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .grid import validate_step
from .schema import BoardConfigError, DEFAULT_STEP_SIZE, ITEM_HEIGHT
from .scheduler import Scheduler

CONFIG_PATH = Path("board.yaml")
CONFIG_ENV = "LANEBOARD_CONFIG"


@dataclass
class BoardConfig:
    """Runtime configuration for one board."""

    # Grid
    step_size: int = DEFAULT_STEP_SIZE
    item_height: int = ITEM_HEIGHT

    # Layout — lanes as rows instead of columns
    vertical: bool = False

    # Initial board, supplied by the embedding application
    lanes: List[Any] = field(default_factory=list)
    items: List[Dict[str, Any]] = field(default_factory=list)

    def validate(self) -> "BoardConfig":
        validate_step(self.step_size)
        if isinstance(self.item_height, bool) or not isinstance(self.item_height, int) or self.item_height <= 0:
            raise BoardConfigError(f"item_height must be a positive integer, got {self.item_height!r}")
        if not isinstance(self.lanes, list) or not isinstance(self.items, list):
            raise BoardConfigError("lanes and items must be lists")
        if not isinstance(self.vertical, bool):
            raise BoardConfigError(f"vertical must be true or false, got {self.vertical!r}")
        return self

    def build_scheduler(self) -> Scheduler:
        """Create a Scheduler for this board. Raises BoardConfigError on bad data."""
        self.validate()
        return Scheduler(
            lanes=self.lanes,
            items=self.items,
            step_size=self.step_size,
            item_height=self.item_height,
            vertical=self.vertical,
        )

    @classmethod
    def load(cls, path: Optional[str] = None) -> "BoardConfig":
        """
        Load config from YAML, falling back to defaults when no file exists.

        Resolution order: explicit ``path``, $LANEBOARD_CONFIG, ./board.yaml.
        An explicit path that does not exist is an error; a malformed file is
        always an error.
        """
        explicit = path or os.environ.get(CONFIG_ENV)
        cfg_path = Path(explicit) if explicit else CONFIG_PATH
        if not cfg_path.exists():
            if explicit:
                raise BoardConfigError(f"Config file not found: {cfg_path}")
            return cls()

        try:
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise BoardConfigError(f"Invalid YAML in {cfg_path}: {e}") from e
        if not isinstance(data, dict):
            raise BoardConfigError(f"{cfg_path}: top level must be a mapping")

        unknown = sorted(k for k in data if k not in cls.__dataclass_fields__)
        if unknown:
            raise BoardConfigError(f"{cfg_path}: unknown keys {unknown}")
        return cls(**data).validate()
