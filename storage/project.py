"""
Project documents: the config and load list saved as JSON.

Keys follow the camelCase layout of existing project files so older documents
open unchanged.
"""
import datetime
import json
import logging
from typing import List, Tuple

from core.models import InputMode, LibraryItem, LoadItem, LoadType, ProjectConfig, type_label

logger = logging.getLogger(__name__)

PROJECT_VERSION = "1.0"

# Python attribute -> document key
LOAD_KEYS = {
    "id": "id",
    "name": "name",
    "type": "type",
    "input_mode": "inputMode",
    "power_kw": "powerKw",
    "rated_amps": "ratedAmps",
    "use_system_voltage": "useSystemVoltage",
    "voltage": "voltage",
    "quantity": "quantity",
    "kx": "kx",
    "cos_phi": "cosPhi",
    "uses_24v": "uses24V",
    "current_24v": "current24V",
}

LIBRARY_KEYS = {attr: key for attr, key in LOAD_KEYS.items() if attr not in ("id", "quantity")}
LIBRARY_KEYS["lib_id"] = "libId"

CONFIG_KEYS = {
    "system_voltage": "systemVoltage",
    "margin_factor": "marginFactor",
    "cable_safety_factor": "cableSafetyFactor",
    "default_cos_phi": "defaultCosPhi",
}


class ProjectFormatError(ValueError):
    pass


def _encode(value):
    if isinstance(value, InputMode):
        return value.value
    if isinstance(value, LoadType):
        return type_label(value)
    return value


def _to_document(obj, keys: dict) -> dict:
    return {key: _encode(getattr(obj, attr)) for attr, key in keys.items()}


def _from_document(cls, data: dict, keys: dict):
    kwargs = {attr: data[key] for attr, key in keys.items() if key in data}
    return cls(**kwargs)


def load_to_dict(item: LoadItem) -> dict:
    return _to_document(item, LOAD_KEYS)


def load_from_dict(data: dict) -> LoadItem:
    return _from_document(LoadItem, data, LOAD_KEYS)


def library_item_to_dict(item: LibraryItem) -> dict:
    return _to_document(item, LIBRARY_KEYS)


def library_item_from_dict(data: dict) -> LibraryItem:
    # Hand-written library files may omit the id, it is re-issued on load anyway
    return _from_document(LibraryItem, {"libId": "", **data}, LIBRARY_KEYS)


def config_to_dict(config: ProjectConfig) -> dict:
    return _to_document(config, CONFIG_KEYS)


def config_from_dict(data: dict) -> ProjectConfig:
    return _from_document(ProjectConfig, data, CONFIG_KEYS)


def dump_project(config: ProjectConfig, loads: List[LoadItem], timestamp: datetime.datetime = None) -> str:
    """Serializes a project as an indented JSON document."""
    if timestamp is None:
        timestamp = datetime.datetime.now(datetime.timezone.utc)
    document = {
        "version": PROJECT_VERSION,
        "timestamp": timestamp.isoformat(),
        "config": config_to_dict(config),
        "loads": [load_to_dict(item) for item in loads],
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def parse_project(text: str) -> Tuple[ProjectConfig, List[LoadItem]]:
    """Reads a project document back into (config, loads)."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProjectFormatError(f"Project file is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not data.get("config") or "loads" not in data:
        raise ProjectFormatError("Invalid project file: 'config' and 'loads' are required")

    try:
        config = config_from_dict(data["config"])
        loads = [load_from_dict(row) for row in data["loads"]]
    except (TypeError, AttributeError) as e:
        raise ProjectFormatError(f"Invalid project file: {e}") from e

    logger.info("Loaded project v%s with %d loads", data.get("version", "?"), len(loads))
    return config, loads


def save_project_file(path, config: ProjectConfig, loads: List[LoadItem]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(dump_project(config, loads))
    logger.info("Project saved to %s", path)


def load_project_file(path) -> Tuple[ProjectConfig, List[LoadItem]]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_project(f.read())
