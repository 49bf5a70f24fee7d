"""
Selection State

Current project, current scene and the set of selected shot ids.
Shot selection has set semantics: ids are unique and unordered.
"""

from __future__ import annotations
from typing import Any, Callable, FrozenSet, Iterable, List, Optional


SelectionListener = Callable[['SelectionStore'], None]


class SelectionStore:
    """Shared selection slice. Every mutation is synchronous."""

    def __init__(self):
        self._current_project: Optional[Any] = None
        self._current_scene: Optional[Any] = None
        self._selected_shots: FrozenSet[str] = frozenset()
        self._listeners: List[SelectionListener] = []

    @property
    def current_project(self) -> Optional[Any]:
        return self._current_project

    @property
    def current_scene(self) -> Optional[Any]:
        return self._current_scene

    @property
    def selected_shots(self) -> FrozenSet[str]:
        return self._selected_shots

    def set_current_project(self, project: Optional[Any]):
        self._current_project = project
        self._notify()

    def set_current_scene(self, scene: Optional[Any]):
        self._current_scene = scene
        self._notify()

    def set_selected_shots(self, shot_ids: Iterable[str]):
        self._selected_shots = frozenset(shot_ids)
        self._notify()

    def toggle_shot(self, shot_id: str) -> bool:
        """Flip membership of ``shot_id``; returns membership afterwards."""
        if shot_id in self._selected_shots:
            self._selected_shots = self._selected_shots - {shot_id}
        else:
            self._selected_shots = self._selected_shots | {shot_id}
        self._notify()
        return shot_id in self._selected_shots

    def is_selected(self, shot_id: str) -> bool:
        return shot_id in self._selected_shots

    def clear_shots(self):
        self.set_selected_shots(())

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)
