"""
Data Manager for Crew Rotation Engine
Handles saving and loading of the allowance policy and per-crew rate cards
"""
import json
import logging
import os
from datetime import datetime
from typing import Dict, Optional
from pydantic import ValidationError
from models.constants import SETTINGS_FILE
from models.data_models import AllowanceConfig, CrewRateCard
from core.exceptions import ConfigurationError, FileOperationError

logger = logging.getLogger(__name__)

def ensure_data_directory(path: str = SETTINGS_FILE):
    """Ensure the directory holding a settings file exists."""
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)

def _read_settings(path: str) -> Dict:
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Settings file {path} is not valid JSON: {e}")
    except OSError as e:
        logger.error(f"Failed to read settings: {e}")
        raise FileOperationError(f"Failed to read settings: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")
    return data

def _write_settings(data: Dict, path: str) -> None:
    try:
        ensure_data_directory(path)
        with open(path, 'w') as f:
            json.dump(data, f, indent=2, default=str)
    except OSError as e:
        logger.error(f"Failed to save settings: {e}")
        raise FileOperationError(f"Failed to save settings: {e}")

def load_allowance_config(path: str = SETTINGS_FILE) -> AllowanceConfig:
    """
    Load the allowance policy from the settings file.
    A missing file or missing "allowances" section yields the default policy.
    """
    if not os.path.exists(path):
        logger.info(f"No settings file at {path}, using default allowance policy")
        return AllowanceConfig()

    data = _read_settings(path)
    try:
        return AllowanceConfig(**data.get("allowances", {}))
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid allowance settings in {path}: {e}")

def save_allowance_config(config: AllowanceConfig, path: str = SETTINGS_FILE) -> None:
    """Save the allowance policy, keeping other sections of the settings file."""
    data = _read_settings(path) if os.path.exists(path) else {}
    data["allowances"] = config.model_dump(mode="json")
    data["last_updated"] = datetime.now().isoformat()
    _write_settings(data, path)

def load_rate_cards(path: str = SETTINGS_FILE) -> Dict[str, CrewRateCard]:
    """Load per-crew rate overrides keyed by crew id."""
    if not os.path.exists(path):
        return {}

    data = _read_settings(path)
    cards = {}
    try:
        for item in data.get("rate_cards", []):
            card = CrewRateCard(**item)
            cards[card.crew_id] = card
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid rate card in {path}: {e}")
    return cards

def save_rate_cards(cards: Dict[str, CrewRateCard], path: str = SETTINGS_FILE) -> None:
    data = _read_settings(path) if os.path.exists(path) else {}
    data["rate_cards"] = [card.model_dump(mode="json") for card in cards.values()]
    data["last_updated"] = datetime.now().isoformat()
    _write_settings(data, path)

def initialize_default_settings(path: str = SETTINGS_FILE) -> Optional[AllowanceConfig]:
    """Write the default allowance policy if no settings file exists yet."""
    if os.path.exists(path):
        return None
    config = AllowanceConfig()
    save_allowance_config(config, path)
    return config
