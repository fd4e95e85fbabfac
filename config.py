"""
Project configuration and constants.
"""
from pathlib import Path
import json
from typing import Any, Dict, Optional


# Project root (repo root in dev)
PROJECT_ROOT = Path(__file__).resolve().parent

SETTINGS_FILE = PROJECT_ROOT / "settings.json"

# Default planning parameters (can be overridden via settings.json)
DEFAULT_PLANT_CAPACITY_PERCENT = 100.0
DEFAULT_TARGET_DAILY_REQUIREMENT = 0.0
DEFAULT_LEAD_TIME_DAYS = 3
DEFAULT_STANDARD_STOCK_CENTRE = 0.0
DEFAULT_STANDARD_STOCK_GATE = 0.0
DEFAULT_SEASON_TOTAL_DAYS = 150
DEFAULT_SEASONAL_CRUSHING_CAPACITY = 0.0

ENGINE_DEFAULTS: Dict[str, Any] = {
    "plant_capacity_percent": DEFAULT_PLANT_CAPACITY_PERCENT,
    "target_daily_requirement": DEFAULT_TARGET_DAILY_REQUIREMENT,
    "center_code_remap": {},
    "standard_stock_centre": DEFAULT_STANDARD_STOCK_CENTRE,
    "standard_stock_gate": DEFAULT_STANDARD_STOCK_GATE,
    "available_stock_centre": 0.0,
    "available_stock_gate": 0.0,
    "plant_start_date": None,
    "season_total_days": DEFAULT_SEASON_TOTAL_DAYS,
    "seasonal_crushing_capacity": DEFAULT_SEASONAL_CRUSHING_CAPACITY,
    "constraints": [],
}


# ============================================================
# Settings Management
# ============================================================

def load_settings(settings_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings.json.

    Args:
        settings_file: Override path (defaults to SETTINGS_FILE)

    Returns:
        Settings dict (empty if the file is missing or unreadable)
    """
    path = Path(settings_file) if settings_file is not None else SETTINGS_FILE
    if not path.exists():
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}  # Fallback to defaults
    return settings if isinstance(settings, dict) else {}


def get_engine_defaults(settings_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Engine parameter defaults merged with the "engine" section of settings.json.

    Unknown keys in settings.json are ignored.

    Returns:
        Dict keyed like CalculationInputs fields
    """
    defaults = {k: (v.copy() if isinstance(v, (dict, list)) else v) for k, v in ENGINE_DEFAULTS.items()}
    overrides = load_settings(settings_file).get("engine", {})
    if isinstance(overrides, dict):
        for key, value in overrides.items():
            if key in defaults:
                defaults[key] = value
    return defaults
