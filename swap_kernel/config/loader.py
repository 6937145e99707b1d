"""
Config Loader — reads settings and swap triggers from JSON.

Trigger entries are arrays:
  [SpEffectIDTrigger, ParamIDTrigger, ParamIDOffset]
  [SpEffectIDTrigger, ParamIDTrigger, ParamIDOffset, IsPermanent]
where -1 means "no requirement". IsPermanent defaults to false.

Any invalid entry aborts loading; no partial configuration is returned.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from swap_kernel.models.config import SwapperConfig
from swap_kernel.models.slots import EquipmentType
from swap_kernel.models.trigger import SwapTrigger

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration file is missing or malformed."""
    pass


SETTING_KEYS = {
    "ProcessSearchTimeoutMs": "process_search_timeout_ms",
    "ProcessSearchIntervalMs": "process_search_interval_ms",
    "MonitorIntervalMs": "monitor_interval_ms",
    "GameLoadedIntervalMs": "game_loaded_interval_ms",
    "SpEffectTriggerCooldownMs": "sp_effect_trigger_cooldown_ms",
}

TRIGGER_KEYS = {
    "LeftWeaponTriggers": ("left_weapon_triggers", EquipmentType.WEAPON),
    "RightWeaponTriggers": ("right_weapon_triggers", EquipmentType.WEAPON),
    "HeadArmorTriggers": ("head_armor_triggers", EquipmentType.ARMOR),
    "BodyArmorTriggers": ("body_armor_triggers", EquipmentType.ARMOR),
    "ArmsArmorTriggers": ("arms_armor_triggers", EquipmentType.ARMOR),
    "LegsArmorTriggers": ("legs_armor_triggers", EquipmentType.ARMOR),
    "RingTriggers": ("ring_triggers", EquipmentType.RING),
}

LEGACY_KEYS = {
    "LeftSpEffectTriggers": "LeftWeaponTriggers",
    "RightSpEffectTriggers": "RightWeaponTriggers",
}

PERMITTED_KEYS = {"__doc__"}


def parse_trigger(entry: Any, equip_type: EquipmentType, trigger_id: str) -> SwapTrigger:
    """Build a SwapTrigger from a JSON array entry."""
    if not isinstance(entry, list) or len(entry) not in (3, 4):
        raise ConfigError(
            f"Invalid swap trigger entry {trigger_id}. Should be "
            f"[SpEffectIDTrigger, ParamIDTrigger, ParamIDOffset, IsPermanent = false]. "
            f"IsPermanent can be omitted."
        )

    sp_effect_id, param_id, offset = entry[0], entry[1], entry[2]
    is_permanent = entry[3] if len(entry) == 4 else False

    for name, value in (
        ("SpEffectIDTrigger", sp_effect_id),
        ("ParamIDTrigger", param_id),
        ("ParamIDOffset", offset),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Invalid {name} in {trigger_id}: expected an integer, got {value!r}.")
    if not isinstance(is_permanent, bool):
        raise ConfigError(f"Invalid IsPermanent in {trigger_id}: expected true or false.")

    if sp_effect_id == -1 and param_id == -1:
        raise ConfigError(
            f"Invalid swap trigger entry {trigger_id}. At least one of "
            f"SpEffectIDTrigger or ParamIDTrigger must be set to a non-negative value."
        )
    if sp_effect_id < -1:
        raise ConfigError(f"Invalid SpEffectIDTrigger in {trigger_id}. Must be -1 or greater.")
    if param_id < -1:
        raise ConfigError(f"Invalid ParamIDTrigger in {trigger_id}. Must be -1 or greater.")

    try:
        return SwapTrigger(
            id=trigger_id,
            equip_type=equip_type,
            sp_effect_id=None if sp_effect_id == -1 else sp_effect_id,
            param_id=None if param_id == -1 else param_id,
            param_id_offset=offset,
            is_permanent=is_permanent,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid swap trigger entry {trigger_id}: {e}") from e


def parse_config(data: Dict[str, Any]) -> SwapperConfig:
    """Validate a decoded JSON object into a SwapperConfig."""
    if not isinstance(data, dict):
        raise ConfigError("Config JSON must be an object.")

    for legacy, replacement in LEGACY_KEYS.items():
        if legacy in data:
            raise ConfigError(
                f"Legacy key '{legacy}' found in JSON. Please rename it to '{replacement}'."
            )

    fields: Dict[str, Any] = {}
    for key, field in SETTING_KEYS.items():
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Invalid value type for key: {key}. Expected an integer.")
        fields[field] = value

    for key, (field, equip_type) in TRIGGER_KEYS.items():
        if key not in data:
            logger.info("No swap triggers of type '%s' found in JSON.", key)
            continue
        entries = data[key]
        if not isinstance(entries, list):
            raise ConfigError(f"'{key}' must be a list of swap trigger entries.")
        triggers: List[SwapTrigger] = [
            parse_trigger(entry, equip_type, f"{key}[{i}]")
            for i, entry in enumerate(entries)
        ]
        logger.info("Found %d triggers of type '%s' in JSON.", len(triggers), key)
        fields[field] = triggers

    known = set(SETTING_KEYS) | set(TRIGGER_KEYS) | PERMITTED_KEYS
    for key in data:
        if key not in known:
            logger.warning("Ignoring unrecognized key in JSON: %s", key)

    try:
        return SwapperConfig(**fields)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


def load_config(path: Union[str, Path]) -> SwapperConfig:
    """Read, validate and log the config at `path`. Raises ConfigError."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to open JSON file: {path}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"JSON parse error in {path}: {e}") from e

    config = parse_config(data)
    logger.info("Loaded settings and swap triggers from file: %s", path)
    log_config(config)
    return config


def log_config(config: SwapperConfig) -> None:
    """Log every setting and trigger at INFO."""
    logger.info("Process search timeout: %d ms", config.process_search_timeout_ms)
    logger.info("Process search interval: %d ms", config.process_search_interval_ms)
    logger.info("Monitor interval: %d ms", config.monitor_interval_ms)
    logger.info("Game loaded interval: %d ms", config.game_loaded_interval_ms)
    logger.info("SpEffect trigger cooldown: %d ms", config.sp_effect_trigger_cooldown_ms)
    for label, _, triggers in config.trigger_groups():
        for trigger in triggers:
            logger.info("%s Trigger -- %s", label, trigger.describe())
