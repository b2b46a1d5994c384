import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".codereels"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

SRS_DEFAULTS = {
    "default_ease_factor": 2.5,
    "min_ease_factor": 1.3,
    "max_ease_factor": 3.0,
    "again_ease_penalty": 0.2,
    "hard_ease_penalty": 0.15,
    "easy_ease_bonus": 0.15,
    "hard_multiplier": 1.2,
    "easy_multiplier": 1.3,
    "easy_step_multiplier": 1.5,
    "learning_steps": [1, 3, 7],
    "relearn_interval_days": 1,
    "max_interval_days": 180,
    "max_mastery_level": 5,
}

def _env_float(name: str, fallback: Any) -> float:
    return float(os.getenv(name, fallback))

def _env_int(name: str, fallback: Any) -> int:
    return int(os.getenv(name, fallback))

def load_config() -> Dict[str, Any]:
    """Load config from ~/.codereels/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    srs_cfg = {**SRS_DEFAULTS, **config.get("srs", {})}
    steps = os.getenv("SRS_LEARNING_STEPS")
    config["srs"] = {
        "default_ease_factor": _env_float("SRS_DEFAULT_EASE_FACTOR", srs_cfg["default_ease_factor"]),
        "min_ease_factor": _env_float("SRS_MIN_EASE_FACTOR", srs_cfg["min_ease_factor"]),
        "max_ease_factor": _env_float("SRS_MAX_EASE_FACTOR", srs_cfg["max_ease_factor"]),
        "again_ease_penalty": _env_float("SRS_AGAIN_EASE_PENALTY", srs_cfg["again_ease_penalty"]),
        "hard_ease_penalty": _env_float("SRS_HARD_EASE_PENALTY", srs_cfg["hard_ease_penalty"]),
        "easy_ease_bonus": _env_float("SRS_EASY_EASE_BONUS", srs_cfg["easy_ease_bonus"]),
        "hard_multiplier": _env_float("SRS_HARD_MULTIPLIER", srs_cfg["hard_multiplier"]),
        "easy_multiplier": _env_float("SRS_EASY_MULTIPLIER", srs_cfg["easy_multiplier"]),
        "easy_step_multiplier": _env_float("SRS_EASY_STEP_MULTIPLIER", srs_cfg["easy_step_multiplier"]),
        "learning_steps": (
            [int(step) for step in steps.split(",") if step.strip()]
            if steps
            else [int(step) for step in srs_cfg["learning_steps"]]
        ),
        "relearn_interval_days": _env_int("SRS_RELEARN_INTERVAL_DAYS", srs_cfg["relearn_interval_days"]),
        "max_interval_days": _env_int("SRS_MAX_INTERVAL_DAYS", srs_cfg["max_interval_days"]),
        "max_mastery_level": _env_int("SRS_MAX_MASTERY_LEVEL", srs_cfg["max_mastery_level"]),
        "timezone": os.getenv("CODEREELS_TIMEZONE", srs_cfg.get("timezone", "")),
    }
    server_cfg = config.get("server", {})
    config["server"] = {
        "host": os.getenv("CODEREELS_HOST", server_cfg.get("host", "127.0.0.1")),
        "port": _env_int("CODEREELS_PORT", server_cfg.get("port", 8000)),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('srs', 'max_interval_days')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
