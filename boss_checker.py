"""Tkinter window for ticking off bosses region by region.

The window owns one :class:`checklist.AppState`. Every user event (a region
pick, a keystroke in the search box, a checkbox click) updates that state,
re-renders the tree from it and saves to disk right away when a completion
flag changed.
"""

from __future__ import annotations

import logging
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Dict, List, Optional

from ttkwidgets import CheckboxTreeview

import checklist
from checklist import AppState
from storage import ChecklistError

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Boss Checker"
WINDOW_SIZE = "600x500"


class TreeManager:
    """Mirror the visible rows of an :class:`AppState` into a checkbox tree.

    Item ids are the row indexes as strings. Hidden rows are detached rather
    than deleted so their checkbox tags survive a filter change.
    """

    def __init__(self, tree: CheckboxTreeview, state: AppState):
        self.tree = tree
        self.state = state
        self._next_direction: Dict[str, bool] = {}
        self._last_sort_column: Optional[str] = None
        self._last_sort_ascending: bool = True

    def populate(self) -> None:
        for index, row in enumerate(self.state.rows):
            self.tree.insert(
                "",
                "end",
                iid=str(index),
                text=row.name,
                values=(row.region,),
                tags=("checked" if row.checked else "unchecked",),
            )

    def sort(self, column: str, ascending: Optional[bool] = None) -> None:
        if ascending is None:
            ascending = self._next_direction.get(column, True)
        self._next_direction[column] = not ascending
        self._last_sort_column = column
        self._last_sort_ascending = ascending
        self.render(checklist.refresh(self.state))

    def _ordered(self, indexes: List[int]) -> List[int]:
        column = self._last_sort_column
        if column is None:
            return indexes
        rows = self.state.rows
        ordered = list(indexes)
        if column == "name":
            ordered.sort(key=lambda i: rows[i].name.casefold())
        elif column == "region":
            ordered.sort(key=lambda i: rows[i].region.casefold())
        elif column == "completed":
            ordered.sort(key=lambda i: rows[i].name.casefold())
            ordered.sort(key=lambda i: rows[i].checked)
        if not self._last_sort_ascending:
            ordered.reverse()
        return ordered

    def render(self, visible: List[int]) -> None:
        tree = self.tree
        children = tree.get_children()
        if children:
            tree.detach(*children)
        for position, index in enumerate(self._ordered(visible)):
            iid = str(index)
            tree.move(iid, "", position)
            tree.change_state(iid, "checked" if self.state.rows[index].checked else "unchecked")

    def is_checked(self, index: int) -> bool:
        return self.tree.tag_has("checked", str(index))


class BossChecker(tk.Tk):
    """Main application window."""

    def __init__(self, state: AppState) -> None:
        super().__init__()
        self.title(WINDOW_TITLE)
        self.geometry(WINDOW_SIZE)

        self.app_state = state

        self.region_var = tk.StringVar(value=state.region_filter)
        self.boss_var = tk.StringVar(value=state.boss_filter)

        self._build_layout()
        self._render()

        self.region_var.trace_add("write", self._on_filter_changed)
        self.boss_var.trace_add("write", self._on_filter_changed)

    # ------------------------------------------------------------------
    # Layout construction helpers
    # ------------------------------------------------------------------
    def _build_layout(self) -> None:
        container = ttk.Frame(self, padding=12)
        container.pack(fill="both", expand=True)
        container.columnconfigure(0, weight=1)
        container.rowconfigure(2, weight=1)

        header = ttk.Frame(container)
        header.grid(column=0, row=0, sticky="ew")
        header.columnconfigure(2, weight=1)

        region_box = ttk.Combobox(
            header,
            textvariable=self.region_var,
            state="readonly",
            values=self.app_state.regions,
            width=26,
        )
        region_box.grid(column=0, row=0, sticky="w")
        self.region_box = region_box

        boss_label = ttk.Label(header, text="Boss:")
        boss_label.grid(column=1, row=0, sticky="w", padx=(12, 6))
        boss_entry = ttk.Entry(header, textvariable=self.boss_var)
        boss_entry.grid(column=2, row=0, sticky="ew")

        info_label = ttk.Label(
            container,
            text="Changes are saved immediately when you click the checkboxes.",
        )
        info_label.grid(column=0, row=1, sticky="w", pady=(10, 0))

        tree_container = ttk.Frame(container)
        tree_container.grid(column=0, row=2, sticky="nsew", pady=(12, 0))
        tree_container.columnconfigure(0, weight=1)
        tree_container.rowconfigure(0, weight=1)
        tree = self._create_tree(tree_container, ("region",))
        tree.column("#0", anchor="w", width=320, stretch=True)
        tree.column("region", anchor="w", width=200, stretch=False)
        tree.bind("<ButtonRelease-1>", self._on_tree_click, True)
        self.tree = tree

        manager = TreeManager(tree, self.app_state)
        tree.heading("#0", text="Boss", command=lambda: manager.sort("name"))
        tree.heading("region", text="Region", command=lambda: manager.sort("region"))
        manager.populate()
        self.manager = manager

        button_frame = ttk.Frame(container)
        button_frame.grid(column=0, row=3, sticky="e", pady=(12, 0))
        buttons = (
            ("Sort by Completion", lambda: manager.sort("completed")),
            ("Check Visible", lambda: self._set_visible(True)),
            ("Uncheck Visible", lambda: self._set_visible(False)),
        )
        for index, (text, command) in enumerate(buttons):
            button = ttk.Button(button_frame, text=text, command=command)
            button.grid(column=index, row=0, padx=(0 if index == 0 else 6, 0))

    def _create_tree(self, container: ttk.Frame, columns: tuple[str, ...]) -> CheckboxTreeview:
        tree = CheckboxTreeview(container, columns=columns, show="tree headings", selectmode="none")
        tree.grid(column=0, row=0, sticky="nsew")
        yscroll = ttk.Scrollbar(container, orient="vertical", command=tree.yview)
        yscroll.grid(column=1, row=0, sticky="ns")
        tree.configure(yscrollcommand=yscroll.set)
        xscroll = ttk.Scrollbar(container, orient="horizontal", command=tree.xview)
        xscroll.grid(column=0, row=1, sticky="ew")
        tree.configure(xscrollcommand=xscroll.set)
        return tree

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------
    def _on_filter_changed(self, *_args: object) -> None:
        self.app_state.region_filter = self.region_var.get()
        self.app_state.boss_filter = self.boss_var.get()
        self._render()

    def _on_tree_click(self, event: tk.Event) -> None:
        if event.widget is not self.tree:
            return
        element = self.tree.identify("element", event.x, event.y)
        if "image" not in element:
            return
        self.after_idle(self._commit_tree_state)

    def _commit_tree_state(self) -> None:
        for index, row in enumerate(self.app_state.rows):
            if row.visible:
                checklist.toggle(self.app_state, index, self.manager.is_checked(index))
        self._render()

    def _set_visible(self, checked: bool) -> None:
        checklist.set_all(self.app_state, checked)
        self._render()

    def _render(self) -> None:
        self.manager.render(checklist.refresh(self.app_state))
        self._save_if_dirty()

    def _save_if_dirty(self) -> None:
        try:
            checklist.commit(self.app_state)
        except ChecklistError as exc:
            logger.error("Saving progress failed: %s", exc)
            messagebox.showerror(
                "Save Failed",
                f"Could not save your progress.\n{exc}",
                parent=self,
            )


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        state = checklist.load_app_state()
    except ChecklistError as exc:
        logger.error("Startup failed: %s", exc)
        root = tk.Tk()
        root.withdraw()
        messagebox.showerror(WINDOW_TITLE, f"Could not load the checklist.\n{exc}", parent=root)
        root.destroy()
        return 1
    app = BossChecker(state)
    app.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
