"""
Reusable equipment library.

Templates are kept by a repository object handed to whoever needs it; the
calculation engine never touches them. Names are unique inside a library.
"""
import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from core.models import LibraryItem, LoadItem, LoadType, type_label
from standards.iec_tables import DEFAULT_LIBRARY
from storage.project import library_item_from_dict, library_item_to_dict

logger = logging.getLogger(__name__)

LIBRARY_PATH_ENV = "LOADCALC_LIBRARY_PATH"
UNCATEGORIZED = "Uncategorized"


def default_library_path() -> Path:
    env = os.environ.get(LIBRARY_PATH_ENV)
    if env:
        return Path(env)
    return Path.home() / ".loadcalc" / "library.json"


def new_lib_id() -> str:
    return f"lib-{uuid.uuid4().hex[:12]}"


def new_load_id() -> str:
    return uuid.uuid4().hex


def default_library() -> List[LibraryItem]:
    return [LibraryItem(**entry) for entry in DEFAULT_LIBRARY]


def clean_library(items: Iterable[LibraryItem]) -> List[LibraryItem]:
    """Drops nameless entries, keeps the last entry per name and re-issues every lib_id."""
    by_name: Dict[str, LibraryItem] = {}
    for item in items:
        if item is None or not item.name:
            continue
        by_name[item.name] = item

    return [replace(item, lib_id=new_lib_id()) for item in by_name.values()]


def library_item_from_load(item: LoadItem, lib_id: Optional[str] = None) -> LibraryItem:
    return LibraryItem(
        lib_id=lib_id or new_lib_id(),
        name=item.name,
        type=item.type,
        input_mode=item.input_mode,
        power_kw=item.power_kw,
        rated_amps=item.rated_amps,
        use_system_voltage=item.use_system_voltage,
        voltage=item.voltage,
        kx=item.kx,
        cos_phi=item.cos_phi,
        uses_24v=item.uses_24v,
        current_24v=item.current_24v,
    )


def load_from_library_item(item: LibraryItem, load_id: Optional[str] = None) -> LoadItem:
    """New project row from a template; quantity starts at 1 and lib_id is not carried over."""
    return LoadItem(
        id=load_id or new_load_id(),
        name=item.name,
        type=item.type,
        input_mode=item.input_mode,
        power_kw=item.power_kw,
        rated_amps=item.rated_amps,
        use_system_voltage=item.use_system_voltage,
        voltage=item.voltage,
        quantity=1,
        kx=item.kx,
        cos_phi=item.cos_phi,
        uses_24v=item.uses_24v,
        current_24v=item.current_24v,
    )


def group_library(items: Iterable[LibraryItem]) -> Dict[str, List[LibraryItem]]:
    """Groups templates by type; known types first in their usual order, then free labels A-Z."""
    groups: Dict[str, List[LibraryItem]] = {}
    for item in items:
        label = type_label(item.type) or UNCATEGORIZED
        groups.setdefault(label, []).append(item)

    standard_order = [t.value for t in LoadType]

    def sort_key(label):
        if label in standard_order:
            return (0, standard_order.index(label), "")
        return (1, 0, label.casefold())

    return {label: groups[label] for label in sorted(groups, key=sort_key)}


class LibraryRepository(ABC):

    @abstractmethod
    def _read(self) -> List[LibraryItem]:
        pass

    @abstractmethod
    def _write(self, items: List[LibraryItem]) -> None:
        pass

    def list(self) -> List[LibraryItem]:
        return list(self._read())

    def get(self, lib_id: str) -> Optional[LibraryItem]:
        for item in self._read():
            if item.lib_id == lib_id:
                return item
        return None

    def find_by_name(self, name: str) -> Optional[LibraryItem]:
        for item in self._read():
            if item.name == name:
                return item
        return None

    def save_item(self, load: LoadItem) -> LibraryItem:
        """Stores a load as a template, replacing every entry with the same name."""
        items = self._read()
        kept = [item for item in items if item.name != load.name]
        replaced = len(items) - len(kept)
        new_item = library_item_from_load(load)
        self._write(kept + [new_item])
        if replaced:
            logger.info("Library entry '%s' overwritten (%d old)", load.name, replaced)
        return new_item

    def delete(self, lib_id: str) -> bool:
        if not lib_id:
            return False
        items = self._read()
        kept = [item for item in items if item.lib_id != lib_id]
        if len(kept) == len(items):
            return False
        self._write(kept)
        return True

    def import_items(self, items: Iterable[LibraryItem]) -> List[LibraryItem]:
        """Merges templates from a library document; same-named entries are replaced."""
        merged = clean_library(list(self._read()) + list(items))
        self._write(merged)
        return merged


class InMemoryLibraryRepository(LibraryRepository):

    def __init__(self, items: Optional[Iterable[LibraryItem]] = None):
        self._items = clean_library(items) if items is not None else clean_library(default_library())

    def _read(self) -> List[LibraryItem]:
        return list(self._items)

    def _write(self, items: List[LibraryItem]) -> None:
        self._items = list(items)


class JsonFileLibraryRepository(LibraryRepository):
    """Library stored as a JSON array; a missing file starts from the presets."""

    def __init__(self, path=None):
        self.path = Path(path) if path is not None else default_library_path()
        self._items = clean_library(self._load())

    def _load(self) -> List[LibraryItem]:
        if not self.path.exists():
            return default_library()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
            return [library_item_from_dict(r) for r in records if isinstance(r, dict) and r.get("name")]
        except (OSError, ValueError, TypeError) as e:
            logger.error("Failed to load library %s: %s", self.path, e)
            return []

    def _read(self) -> List[LibraryItem]:
        return list(self._items)

    def _write(self, items: List[LibraryItem]) -> None:
        self._items = list(items)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([library_item_to_dict(item) for item in self._items], f, indent=2, ensure_ascii=False)
        logger.debug("Library written: %d items -> %s", len(self._items), self.path)


def parse_library_document(text: str) -> List[LibraryItem]:
    records = json.loads(text)
    return [library_item_from_dict(r) for r in records if isinstance(r, dict) and r.get("name")]


def dump_library_document(items: Iterable[LibraryItem]) -> str:
    return json.dumps([library_item_to_dict(item) for item in items], indent=2, ensure_ascii=False)
