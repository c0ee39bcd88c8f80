"""
Form state store - flat answers record and per-step snapshots
"""

import copy
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Set

from loguru import logger


class FormStateStore:
    """
    Holds the live form data and the step history

    Every update replaces the whole record with a new dict, and values are
    copied on the way in and on the way out, form_data included. A dict
    stored here is never mutated afterwards, so history entries can share it
    with the live form.
    """

    def __init__(self, initial_values: Optional[Mapping[str, Any]] = None, initial_step: int = 0):
        values = copy.deepcopy(dict(initial_values or {}))
        self.step_index = initial_step
        self._form: Dict[str, Any] = values
        self._history: Dict[int, Dict[str, Any]] = {initial_step: values}
        self._touched: Set[str] = set()

    @property
    def form_data(self) -> Mapping[str, Any]:
        """Read-only copy of the live form; nested values are detached from the store"""
        return MappingProxyType(copy.deepcopy(self._form))

    @property
    def touched(self) -> frozenset:
        return frozenset(self._touched)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._form)

    def value_for(self, name: str, default: Any = None) -> Any:
        return copy.deepcopy(self._form.get(name, default))

    def set_field(self, name: str, value: Any) -> Mapping[str, Any]:
        """Replace one value and record the result as the current step's snapshot"""
        updated = {**self._form, name: copy.deepcopy(value)}
        self._form = updated
        self._history[self.step_index] = updated
        self._touched.add(name)
        return self.form_data

    def snapshot(self, index: Optional[int] = None) -> None:
        """Record the live form as the snapshot of a step being left"""
        index = self.step_index if index is None else index
        self._history[index] = self._form

    def restore_step(self, index: int) -> bool:
        """
        Make index the current step, restoring its snapshot if one exists

        A step visited for the first time keeps the live form, which already
        holds every answer given so far.

        Returns:
            True if a snapshot was restored
        """
        self.step_index = index
        snapshot = self._history.get(index)
        if snapshot is None:
            logger.debug(f"No snapshot for step {index}, keeping current form data")
            return False
        self._form = snapshot
        return True

    def has_snapshot(self, index: int) -> bool:
        return index in self._history

    def snapshot_of(self, index: int) -> Optional[Dict[str, Any]]:
        snapshot = self._history.get(index)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def clear(self) -> None:
        """Discard form data and history"""
        self._form = {}
        self._history = {}
        self._touched = set()
