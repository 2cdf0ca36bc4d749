"""
Board configuration.

Loads board.yaml to tune the board. If no config file exists, returns
defaults matching the stock behaviour:

    data_dir: ./shiftboard-data        # JsonFileStorage directory
    setting_key: bed_manager_data      # settings key of the rotation blob
    sync_keywords: ["베드"]            # marks a task as rotation-related
    success_clear_seconds: 1.0
    error_clear_seconds: 2.0
    recent_threshold_hours: 48         # routine generator "recently serviced" window
    default_rotation:
      count: 10
      interval: 7
      routine_day: 4                   # 0=Sun .. 6=Sat
      cols: 5

Invalid values fall back to their defaults with a warning.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from shiftboard.lib.constants import (
    MAX_DISPLAY_COLUMNS,
    MAX_INTERVAL_DAYS,
    MAX_POOL_SIZE,
    RECENT_THRESHOLD_HOURS,
    ROTATION_SETTING_KEY,
)
from shiftboard.lib.types import RotationConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "board.yaml"
DEFAULT_DATA_DIR = "shiftboard-data"
DEFAULT_SYNC_KEYWORDS = ["베드"]


@dataclass
class BoardConfig:
    """Board configuration from board.yaml."""
    data_dir: Path = field(default_factory=lambda: Path(DEFAULT_DATA_DIR))
    setting_key: str = ROTATION_SETTING_KEY
    sync_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_SYNC_KEYWORDS))
    success_clear_seconds: float = 1.0
    error_clear_seconds: float = 2.0
    recent_threshold_hours: int = RECENT_THRESHOLD_HOURS
    default_rotation: RotationConfig = field(default_factory=RotationConfig)


def _positive_number(data: dict, key: str, default):
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        logger.warning(f"Invalid {key} '{value}', using {default}")
        return default
    return value


def _bounded_int(data: dict, key: str, default: int, low: int, high: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        logger.warning(f"Invalid default_rotation.{key} '{value}', using {default}")
        return default
    return value


def _parse_rotation(data) -> RotationConfig:
    base = RotationConfig()
    if not isinstance(data, dict):
        if data is not None:
            logger.warning(f"Invalid default_rotation '{data}', using defaults")
        return base
    return RotationConfig(
        pool_size=_bounded_int(data, "count", base.pool_size, 1, MAX_POOL_SIZE),
        interval_days=_bounded_int(data, "interval", base.interval_days, 1, MAX_INTERVAL_DAYS),
        routine_weekday=_bounded_int(data, "routine_day", base.routine_weekday, 0, 6),
        display_columns=_bounded_int(data, "cols", base.display_columns, 1, MAX_DISPLAY_COLUMNS),
    )


def _parse_keywords(data: dict) -> list[str]:
    keywords = data.get("sync_keywords", DEFAULT_SYNC_KEYWORDS)
    if not isinstance(keywords, list) or not all(isinstance(k, str) and k.strip() for k in keywords) \
            or not keywords:
        logger.warning(f"Invalid sync_keywords '{keywords}', using {DEFAULT_SYNC_KEYWORDS}")
        return list(DEFAULT_SYNC_KEYWORDS)
    return [k.strip() for k in keywords]


def parse_board_config(data: dict, base_dir: Optional[Path] = None) -> BoardConfig:
    """Build BoardConfig from a parsed mapping. Relative data_dir resolves against base_dir."""
    data_dir = Path(data.get("data_dir") or DEFAULT_DATA_DIR)
    if base_dir is not None and not data_dir.is_absolute():
        data_dir = base_dir / data_dir

    setting_key = data.get("setting_key", ROTATION_SETTING_KEY)
    if not isinstance(setting_key, str) or not setting_key.strip():
        logger.warning(f"Invalid setting_key '{setting_key}', using {ROTATION_SETTING_KEY}")
        setting_key = ROTATION_SETTING_KEY

    return BoardConfig(
        data_dir=data_dir,
        setting_key=setting_key,
        sync_keywords=_parse_keywords(data),
        success_clear_seconds=float(_positive_number(data, "success_clear_seconds", 1.0)),
        error_clear_seconds=float(_positive_number(data, "error_clear_seconds", 2.0)),
        recent_threshold_hours=int(_positive_number(data, "recent_threshold_hours", RECENT_THRESHOLD_HOURS)),
        default_rotation=_parse_rotation(data.get("default_rotation")),
    )


def load_board_config(config_dir: Optional[Path]) -> BoardConfig:
    """Load board.yaml from `config_dir` and return BoardConfig.

    If config_dir is None or the file doesn't exist, returns defaults.
    """
    if config_dir is None:
        return BoardConfig()

    config_path = Path(config_dir) / CONFIG_FILENAME
    if not config_path.exists():
        return BoardConfig(data_dir=Path(config_dir) / DEFAULT_DATA_DIR)

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return BoardConfig(data_dir=Path(config_dir) / DEFAULT_DATA_DIR)

    if not isinstance(data, dict):
        logger.warning(f"Failed to parse {config_path}: expected a mapping")
        return BoardConfig(data_dir=Path(config_dir) / DEFAULT_DATA_DIR)

    return parse_board_config(data, base_dir=Path(config_dir))
