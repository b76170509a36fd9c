# bufcycle/core/Lifecycle.py
"""Lifecycle Module
==================
Activation and deactivation of the buffer-cycling display.

The mode becomes active on any cycle command. While active it keeps a
fixed set of host features switched off, because they paint over the echo
area, and it owns two timers:

- an idle watcher that runs after every command and deactivates the mode as
  soon as the completed command was not a cycle command;
- an optional one-second countdown tick, shown in the lighter, that
  deactivates the mode when it reaches zero.

Every (re-)activation cancels both timers before scheduling them again, so at
most one of each is ever pending.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from bufcycle.core.HostInterface import CYCLE_COMMANDS
from bufcycle.core.ListRenderer import DisplayWindow
from bufcycle.core.Scheduler import TimerHandle
from bufcycle.utils.utils import CycleSettings

if TYPE_CHECKING:
    from bufcycle.core.Buffers import Buffer
    from bufcycle.core.HostInterface import EditorHost


class LifecycleState(enum.Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


@dataclass
class CycleSession:
    """All mutable state of the cycling feature, owned by one editor.

    Attributes:
        state: Current lifecycle state.
        remaining: Seconds left on the countdown (0 when none is running).
        cycle_list: Cached cyclic list, current buffer first.
        window: The most recently rendered display window.
        suppressed: Host features this activation switched off.
        idle_handle: Pending idle watcher, if any.
        tick_handle: Pending countdown tick, if any.
    """

    state: LifecycleState = LifecycleState.INACTIVE
    remaining: int = 0
    cycle_list: list["Buffer"] = field(default_factory=list)
    window: DisplayWindow[Any] = field(default_factory=DisplayWindow)
    suppressed: list[str] = field(default_factory=list)
    idle_handle: Optional[TimerHandle] = None
    tick_handle: Optional[TimerHandle] = None


# ==================== LifecycleController Class ====================
class LifecycleController:
    """Class LifecycleController
    ===========================
    Drives `CycleSession.state` between INACTIVE and ACTIVE.

    Attributes:
        host (EditorHost): Provides features, scheduler and `last_command`.
        settings (CycleSettings): Static configuration.
        session (CycleSession): Shared state, also used by `CycleAdapter`.
    """

    TICK_SECONDS = 1.0

    def __init__(
        self,
        host: "EditorHost",
        settings: CycleSettings,
        session: Optional[CycleSession] = None,
    ) -> None:
        self.host = host
        self.settings = settings
        self.session = session if session is not None else CycleSession()

    @property
    def is_active(self) -> bool:
        return self.session.state is LifecycleState.ACTIVE

    # ---------------------- Activation --------------------
    def activate(self) -> None:
        """Enters ACTIVE, or re-arms the timers when already active."""
        session = self.session
        if not self.is_active:
            session.suppressed = []
            for name in self.settings.suppress_features:
                feature = self.host.features.get(name)
                if feature is not None and feature.is_enabled:
                    feature.disable()
                    session.suppressed.append(name)
            session.state = LifecycleState.ACTIVE
            logging.debug("Cycle mode activated; suppressed features: %s", session.suppressed)

        self._cancel_timers()
        session.idle_handle = self.host.scheduler.call_when_idle(self._on_idle)
        if self.settings.timeout > 0:
            session.remaining = self.settings.timeout
            session.tick_handle = self.host.scheduler.call_every(self.TICK_SECONDS, self._on_tick)
        self.host.request_redraw()

    def deactivate(self) -> None:
        """Leaves ACTIVE: cancels timers and restores suppressed features."""
        session = self.session
        if not self.is_active:
            return
        self._cancel_timers()
        for name in session.suppressed:
            feature = self.host.features.get(name)
            if feature is not None:
                feature.enable()
        logging.debug("Cycle mode deactivated; restored features: %s", session.suppressed)
        session.suppressed = []
        session.remaining = 0
        session.window = DisplayWindow()
        session.state = LifecycleState.INACTIVE
        self.host.request_redraw()

    def _cancel_timers(self) -> None:
        session = self.session
        if session.idle_handle is not None:
            session.idle_handle.cancel()
            session.idle_handle = None
        if session.tick_handle is not None:
            session.tick_handle.cancel()
            session.tick_handle = None

    # ---------------------- Timer callbacks --------------------
    def _on_idle(self) -> None:
        self.session.idle_handle = None
        if self.host.last_command in CYCLE_COMMANDS:
            self.session.idle_handle = self.host.scheduler.call_when_idle(self._on_idle)
            return
        logging.debug("Idle after %r; leaving cycle mode.", self.host.last_command)
        self.deactivate()

    def _on_tick(self) -> None:
        session = self.session
        session.remaining = max(0, session.remaining - 1)
        if session.remaining == 0:
            logging.debug("Cycle countdown elapsed.")
            self.deactivate()
            return
        self.host.request_redraw()

    # ---------------------- Status indicator --------------------
    def lighter(self) -> str:
        """Text for the status bar: empty when inactive."""
        if not self.is_active:
            return ""
        if self.settings.show_countdown and self.session.remaining > 0:
            return f"{self.settings.lighter}[{self.session.remaining}]"
        return self.settings.lighter
