# bufcycle/core/HostInterface.py
"""The operations the cycling feature needs from its host editor."""

from typing import Optional, Protocol

from bufcycle.core.Buffers import Buffer
from bufcycle.core.Features import FeatureRegistry
from bufcycle.core.Scheduler import TimerScheduler

CYCLE_COMMANDS = frozenset({"cycle_next", "cycle_previous"})


class EditorHost(Protocol):
    """Host collaborator consumed by `LifecycleController` and `CycleAdapter`.

    Attributes:
        last_command: Name of the previously completed command, if any.
        features: Toggleable host features.
        scheduler: Main-thread timer facility.
    """

    last_command: Optional[str]
    features: FeatureRegistry
    scheduler: TimerScheduler

    @property
    def current_buffer(self) -> Optional[Buffer]: ...

    def switch_to_buffer(self, buf: Buffer, norecord: bool = False) -> None: ...

    def bury_buffer(self, buf: Buffer) -> None: ...

    def show_transient_message(self, text: str, timeout: Optional[float] = None) -> None: ...

    def frame_size(self) -> tuple[int, int]: ...

    def request_redraw(self) -> None: ...
