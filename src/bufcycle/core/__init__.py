# src/bufcycle/core/__init__.py
"""Public facade for bufcycle.core: re-export main classes from CamelCase modules.

Keeps Java-like file names (Buffers.py, Lifecycle.py, ...),
but provides flat imports for convenience and stability.
"""

from .Buffers import Buffer, BufferRing, CycleConfiguration, CycleOptions  # noqa: F401
from .CycleAdapter import CycleAdapter  # noqa: F401
from .Features import FeatureRegistry, HostFeature  # noqa: F401
from .HostInterface import CYCLE_COMMANDS, EditorHost  # noqa: F401
from .Lifecycle import CycleSession, LifecycleController, LifecycleState  # noqa: F401
from .ListRenderer import DisplayWindow, ListRenderer, RenderedList, row_budget  # noqa: F401
from .Scheduler import TimerHandle, TimerScheduler  # noqa: F401
from .Viewer import BufferViewer  # noqa: F401


__all__ = [
    "Buffer",
    "BufferRing",
    "CycleConfiguration",
    "CycleOptions",
    "CycleAdapter",
    "FeatureRegistry",
    "HostFeature",
    "CYCLE_COMMANDS",
    "EditorHost",
    "CycleSession",
    "LifecycleController",
    "LifecycleState",
    "DisplayWindow",
    "ListRenderer",
    "RenderedList",
    "row_budget",
    "TimerHandle",
    "TimerScheduler",
    "BufferViewer",
]
