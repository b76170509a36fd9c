# bufcycle/ui/SelectionKeys.py
"""Direct-selection key bindings for the cycle display.

Keys 1..9 (or F1..F9) jump to the entry shown with that number in the most
recent cycle list. The key set is chosen once from static configuration.
"""

import enum
import logging
from typing import TYPE_CHECKING, Callable, Union

if TYPE_CHECKING:
    from bufcycle.core.CycleAdapter import CycleAdapter

SELECTION_COUNT = 9
ACTION_PREFIX = "select_buffer_"


class SelectionMode(enum.Enum):
    DIGITS = "digits"
    FUNCTION = "function"
    NONE = "none"

    @classmethod
    def parse(cls, value: Union[str, "SelectionMode", None]) -> "SelectionMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logging.warning("Unknown selection key mode %r; selection keys disabled.", value)
            return cls.NONE


def selection_bindings(mode: Union[str, SelectionMode]) -> dict[str, str]:
    """Maps ``select_buffer_N`` action names to key specs for `mode`."""
    mode = SelectionMode.parse(mode)
    if mode is SelectionMode.DIGITS:
        return {f"{ACTION_PREFIX}{n}": str(n) for n in range(1, SELECTION_COUNT + 1)}
    if mode is SelectionMode.FUNCTION:
        return {f"{ACTION_PREFIX}{n}": f"f{n}" for n in range(1, SELECTION_COUNT + 1)}
    return {}


class SelectionKeyMap:
    """The selection actions and their key specs, built once.

    Attributes:
        mode (SelectionMode): Which key family is bound.
        bindings (dict[str, str]): Action name -> key spec.
    """

    def __init__(self, adapter: "CycleAdapter", mode: Union[str, SelectionMode]) -> None:
        self.adapter = adapter
        self.mode = SelectionMode.parse(mode)
        self.bindings = selection_bindings(self.mode)
        logging.debug("Selection keys (%s): %s", self.mode.value, self.bindings)

    def _selector(self, rank: int) -> Callable[[], bool]:
        def select() -> bool:
            return self.adapter.select(rank)

        select.__name__ = f"{ACTION_PREFIX}{rank}"
        return select

    def actions(self) -> dict[str, Callable[[], bool]]:
        """Action name -> zero-argument callable, for every bound key."""
        return {
            name: self._selector(int(name[len(ACTION_PREFIX):]))
            for name in self.bindings
        }
