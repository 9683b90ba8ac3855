"""Checklist rows, region filtering and the application state they live in."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Set

import storage
from storage import CatalogEntry, Pair, PathLike

ALL_REGIONS = "All"


@dataclass
class TableRow:
    region: str
    name: str
    checked: bool = False
    visible: bool = True

    @property
    def key(self) -> Pair:
        return (self.region, self.name)


@dataclass
class AppState:
    """Everything the window mutates between two events.

    ``rows`` is built once and keeps its length for the lifetime of the
    state; only the ``checked`` and ``visible`` flags of its rows change.
    """

    save_path: Path
    rows: List[TableRow]
    regions: List[str] = field(default_factory=lambda: [ALL_REGIONS])
    region_filter: str = ALL_REGIONS
    boss_filter: str = ""
    dirty: bool = False


def build_rows(catalog: Iterable[CatalogEntry], completed: Set[Pair]) -> List[TableRow]:
    rows: List[TableRow] = []
    for entry in catalog:
        for boss in entry.bosses:
            rows.append(
                TableRow(
                    region=entry.region,
                    name=boss,
                    checked=(entry.region, boss) in completed,
                )
            )
    return rows


def derive_region_index(rows: Iterable[TableRow]) -> List[str]:
    regions = {row.region for row in rows}
    regions.add(ALL_REGIONS)
    return sorted(regions)


def apply_filter(rows: Iterable[TableRow], region_selector: str, search_term: str) -> None:
    """Recompute ``visible`` for every row.

    A row is visible when its region matches the selector exactly (or the
    selector is ``"All"``) and the lowercased search term occurs in its
    lowercased name or region.
    """
    term = search_term.lower()
    for row in rows:
        region_match = region_selector == ALL_REGIONS or row.region == region_selector
        text_match = term in row.name.lower() or term in row.region.lower()
        row.visible = region_match and text_match


def completion_set_from_rows(rows: Iterable[TableRow]) -> Set[Pair]:
    return {row.key for row in rows if row.checked}


def save_completion_set(path: PathLike, rows: Iterable[TableRow]) -> None:
    storage.write_completion_set(path, completion_set_from_rows(rows))


def load_app_state(config_path: PathLike = storage.CONFIG_PATH) -> AppState:
    """Load config, save file and catalog into a fresh :class:`AppState`.

    Raises :class:`storage.ChecklistError` when any of the files cannot be
    read, parsed or (on first run) created.
    """
    config = storage.load_config(config_path)
    completed = storage.load_completion_set(config.default_save)
    catalog = storage.load_catalog(config.checklist_path)
    rows = build_rows(catalog, completed)
    state = AppState(
        save_path=Path(config.default_save),
        rows=rows,
        regions=derive_region_index(rows),
    )
    refresh(state)
    return state


def refresh(state: AppState) -> List[int]:
    """Apply the current filters and return the visible row indexes."""
    apply_filter(state.rows, state.region_filter, state.boss_filter)
    return [index for index, row in enumerate(state.rows) if row.visible]


def toggle(state: AppState, index: int, checked: bool) -> bool:
    row = state.rows[index]
    if row.checked == checked:
        return False
    row.checked = checked
    state.dirty = True
    return True


def set_all(state: AppState, checked: bool) -> int:
    """Set the completion flag of every visible row; return how many changed."""
    changed = 0
    for index, row in enumerate(state.rows):
        if row.visible and toggle(state, index, checked):
            changed += 1
    return changed


def commit(state: AppState) -> bool:
    """Write the save file if anything changed since the last commit.

    ``dirty`` is cleared only after a successful write, so a failed save is
    retried by the next commit.
    """
    if not state.dirty:
        return False
    save_completion_set(state.save_path, state.rows)
    state.dirty = False
    return True
