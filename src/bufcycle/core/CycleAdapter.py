# bufcycle/core/CycleAdapter.py
"""CycleAdapter.py
====================
Wraps the host's cycle provider so that every "next/previous buffer" step
also shows the upcoming candidates as a numbered list.

The provider still decides which buffer comes next; this module only keeps
its own rotated copy of the cyclic list, renders what remains of it, and lets
the selection keys jump straight to a rendered entry.
"""

import logging
from typing import TYPE_CHECKING, Optional

from bufcycle.core.Buffers import Buffer, CycleOptions, CycleProvider
from bufcycle.core.HostInterface import CYCLE_COMMANDS
from bufcycle.core.Lifecycle import CycleSession, LifecycleController
from bufcycle.core.ListRenderer import DisplayWindow, ListRenderer, row_budget
from bufcycle.utils.utils import CycleSettings

if TYPE_CHECKING:
    from bufcycle.core.HostInterface import EditorHost

NEXT_HEADER = "Next buffers: "
PREVIOUS_HEADER = "Previous buffers: "
FALLBACK_TEXT = "this buffer"
SEPARATOR_CHAR = "─"


# ==================== CycleAdapter Class ====================
class CycleAdapter:
    """Class CycleAdapter
    ====================
    Implements the `cycle_next`, `cycle_previous` and `select_buffer_N`
    commands.

    Attributes:
        host (EditorHost): Switches buffers and shows transient messages.
        provider (CycleProvider): Computes the next/previous buffer.
        renderer (ListRenderer): Formats the remaining candidates.
        lifecycle (LifecycleController): Activated by every cycle step.
        settings (CycleSettings): Static configuration.
        session (CycleSession): Shared with `lifecycle`.
    """

    def __init__(
        self,
        host: "EditorHost",
        provider: CycleProvider,
        renderer: ListRenderer,
        lifecycle: LifecycleController,
        settings: CycleSettings,
        session: Optional[CycleSession] = None,
    ) -> None:
        self.host = host
        self.provider = provider
        self.renderer = renderer
        self.lifecycle = lifecycle
        self.settings = settings
        self.session = session if session is not None else lifecycle.session

    # ---------------------- Commands --------------------
    def advance(self) -> bool:
        """Switches to the next buffer of the cycle and lists what follows."""
        return self._cycle(backward=False)

    def retreat(self) -> bool:
        """Switches to the previous buffer of the cycle and lists what precedes."""
        return self._cycle(backward=True)

    def select(self, rank: int) -> bool:
        """Switches to the entry displayed with `rank` in the latest window.

        Returns:
            bool: True if the view changed.
        """
        target = self.session.window.item(rank)
        if target is None or not target.live:
            logging.debug("Selection %d has no entry in window of %d.", rank, len(self.session.window))
            self.host.show_transient_message(f"No buffer at position {rank}", self._timeout())
            return False

        self.host.switch_to_buffer(target)
        cycle = self.session.cycle_list
        if target in cycle:
            # rotate head-to-tail until the selected buffer leads the cycle
            while cycle[0] is not target:
                cycle.append(cycle.pop(0))
        self.host.show_transient_message(f"Switched to {target.name}", self._timeout())
        logging.debug("Selected buffer %r at rank %d.", target.name, rank)
        return True

    # ---------------------- Internals --------------------
    def _timeout(self) -> Optional[float]:
        return float(self.settings.timeout) if self.settings.timeout > 0 else None

    def _cycle(self, backward: bool) -> bool:
        self.lifecycle.activate()

        options = CycleOptions(configuration=self.settings.configuration, sorting=False)
        continuing = self.host.last_command in CYCLE_COMMANDS
        in_flight = self.session.cycle_list if continuing else None

        if backward:
            target, cycle = self.provider.previous_buffer(in_flight, options)
        else:
            target, cycle = self.provider.next_buffer(in_flight, options)

        if target is None or not cycle:
            self.session.cycle_list = []
            self.session.window = DisplayWindow()
            self.host.show_transient_message("No buffers", self._timeout())
            return False

        leaving = cycle[0]
        if not backward and self.host.current_buffer is not None:
            self.host.bury_buffer(self.host.current_buffer)
        self.host.switch_to_buffer(target, norecord=True)

        if backward:
            rotated = cycle[-1:] + cycle[:-1]
        else:
            rotated = cycle[1:] + cycle[:1]
        self.session.cycle_list = rotated

        remaining = [buf for buf in rotated if buf is not leaving]
        self.host.show_transient_message(
            self._message(remaining, backward), self._timeout()
        )
        logging.debug(
            "Cycle %s: %r -> %r (%d candidates).",
            "previous" if backward else "next",
            leaving.name, target.name, len(remaining),
        )
        return True

    def _message(self, remaining: list[Buffer], backward: bool) -> str:
        rows, cols = self.host.frame_size()
        header_lines = 2 if self.settings.separator else 1
        budget = row_budget(rows, self.settings.height_fraction, header_lines)
        header = PREVIOUS_HEADER if backward else NEXT_HEADER

        rendered = self.renderer.render(
            remaining, backward=backward, budget=budget, width=cols,
            label=lambda buf: buf.name,
        )
        if rendered is None:
            self.session.window = DisplayWindow()
            body = header + FALLBACK_TEXT
        else:
            self.session.window = rendered.window
            body = f"{header}\n{rendered.text}"

        if self.settings.separator:
            return f"{SEPARATOR_CHAR * max(1, cols)}\n{body}"
        return body
