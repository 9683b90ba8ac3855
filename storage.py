"""JSON persistence for the boss checklist.

Three documents live next to each other in the working directory: the
``config.json`` bootstrap file, the static boss catalog and the save file
holding the completed ``(region, boss)`` pairs. Every failure is raised as a
:class:`ChecklistError` subclass so the caller decides what is fatal.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Set, Tuple, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Pair = Tuple[str, str]

CONFIG_PATH = Path("config.json")
DEFAULT_CONFIG: Dict[str, str] = {
    "checklist_path": "boss_data.json",
    "default_save": "default_save.json",
}
COMPLETED_KEY = "completed"


class ChecklistError(Exception):
    """Base error for everything the persistence layer raises."""

    def __init__(self, message: str, path: PathLike):
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class DataUnavailableError(ChecklistError):
    """A file is missing, unreadable or not of the expected structure."""


class SaveError(ChecklistError):
    """Writing a file failed."""


@dataclass
class Config:
    checklist_path: str = DEFAULT_CONFIG["checklist_path"]
    default_save: str = DEFAULT_CONFIG["default_save"]


@dataclass(frozen=True)
class CatalogEntry:
    region: str
    bosses: Tuple[str, ...] = field(default_factory=tuple)


def _read_json(path: Path) -> object:
    try:
        with path.open(encoding="utf-8") as file:
            return json.load(file)
    except FileNotFoundError as exc:
        raise DataUnavailableError("File not found", path) from exc
    except json.JSONDecodeError as exc:
        raise DataUnavailableError(f"Invalid JSON ({exc.msg}, line {exc.lineno})", path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise DataUnavailableError(f"Could not read file ({exc})", path) from exc


def _write_json(path: Path, payload: object) -> None:
    try:
        with path.open("w", encoding="utf-8") as file:
            json.dump(payload, file, ensure_ascii=False, indent=2)
    except OSError as exc:
        raise SaveError(f"Could not write file ({exc})", path) from exc


def _create_if_missing(path: Path, payload: object) -> None:
    if path.exists():
        return
    logger.info("Creating default %s", path)
    _write_json(path, payload)


def load_config(path: PathLike = CONFIG_PATH) -> Config:
    """Read the config file, writing one with default values on first run."""
    path = Path(path)
    _create_if_missing(path, DEFAULT_CONFIG)
    loaded = _read_json(path)
    if not isinstance(loaded, dict):
        raise DataUnavailableError("Config must be a JSON object", path)
    values: Dict[str, str] = {}
    for key in DEFAULT_CONFIG:
        value = loaded.get(key)
        if not isinstance(value, str):
            raise DataUnavailableError(f"Config field {key!r} must be a string", path)
        values[key] = value
    return Config(**values)


def load_catalog(path: PathLike) -> List[CatalogEntry]:
    path = Path(path)
    loaded = _read_json(path)
    if not isinstance(loaded, list):
        raise DataUnavailableError("Catalog must be a JSON array", path)
    catalog: List[CatalogEntry] = []
    for index, raw in enumerate(loaded):
        if not isinstance(raw, dict):
            raise DataUnavailableError(f"Catalog entry {index} must be an object", path)
        region = raw.get("region")
        bosses = raw.get("bosses")
        if not isinstance(region, str):
            raise DataUnavailableError(f"Catalog entry {index} has no string 'region'", path)
        if not isinstance(bosses, list) or not all(isinstance(boss, str) for boss in bosses):
            raise DataUnavailableError(
                f"Catalog entry {index} 'bosses' must be an array of strings", path
            )
        catalog.append(CatalogEntry(region=region, bosses=tuple(bosses)))
    return catalog


def load_completion_set(path: PathLike) -> Set[Pair]:
    """Read the completed pairs, creating an empty save file on first run."""
    path = Path(path)
    _create_if_missing(path, {COMPLETED_KEY: []})
    loaded = _read_json(path)
    if not isinstance(loaded, dict) or not isinstance(loaded.get(COMPLETED_KEY), list):
        raise DataUnavailableError(f"Save file must be an object with a {COMPLETED_KEY!r} array", path)
    completed: Set[Pair] = set()
    for pair in loaded[COMPLETED_KEY]:
        if (
            not isinstance(pair, list)
            or len(pair) != 2
            or not all(isinstance(part, str) for part in pair)
        ):
            raise DataUnavailableError(f"Invalid completed entry {pair!r}", path)
        completed.add((pair[0], pair[1]))
    return completed


def write_completion_set(path: PathLike, completed: Iterable[Pair]) -> None:
    """Overwrite the whole save file with ``completed``."""
    path = Path(path)
    pairs = sorted(set(completed))
    _write_json(path, {COMPLETED_KEY: [list(pair) for pair in pairs]})
    logger.debug("Saved %d completed boss(es) to %s", len(pairs), path)
