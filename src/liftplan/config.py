"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

from .utils.units import WeightUnit

DEFAULT_DATA_DIR = Path.cwd() / "data"
_LOG_FORMATS = ("json", "text")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    data_dir: Path = DEFAULT_DATA_DIR
    weight_unit: WeightUnit = WeightUnit.KG
    log_format: str = "text"
    log_level: str = "WARNING"
    history_limit: int = 50

    @property
    def db_path(self) -> Path:
        return self.data_dir / "liftplan.db"

    @classmethod
    def from_env(cls) -> "Config":
        data_dir = os.environ.get("LIFTPLAN_DATA_DIR")

        unit = os.environ.get("LIFTPLAN_WEIGHT_UNIT", "kg").lower()
        try:
            weight_unit = WeightUnit(unit)
        except ValueError:
            raise ValueError(f"LIFTPLAN_WEIGHT_UNIT must be 'kg' or 'lbs', got {unit!r}") from None

        log_format = os.environ.get("LIFTPLAN_LOG_FORMAT", "text").lower()
        if log_format not in _LOG_FORMATS:
            raise ValueError(f"LIFTPLAN_LOG_FORMAT must be 'json' or 'text', got {log_format!r}")

        log_level = os.environ.get("LIFTPLAN_LOG_LEVEL", "WARNING").upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"LIFTPLAN_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")

        raw_limit = os.environ.get("LIFTPLAN_HISTORY_LIMIT", "50")
        try:
            history_limit = int(raw_limit)
        except ValueError:
            raise ValueError(f"LIFTPLAN_HISTORY_LIMIT must be an integer, got {raw_limit!r}") from None
        if history_limit < 1:
            raise ValueError("LIFTPLAN_HISTORY_LIMIT must be at least 1")

        return cls(
            data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
            weight_unit=weight_unit,
            log_format=log_format,
            log_level=log_level,
            history_limit=history_limit,
        )
