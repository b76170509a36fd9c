# bufcycle/core/Buffers.py
"""Buffers.py
===================
The host's buffer list.

`BufferRing` keeps every open `Buffer` in most-recently-used order and exposes
the cyclic "next/previous buffer" computation through the `CycleProvider`
protocol. Filtering and sorting policy live here, in named configurations,
so that the cycling feature only ever wraps the provider and never
reimplements the policy.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence


@dataclass(eq=False)
class Buffer:
    """A named, read-only text buffer, optionally visiting a file."""

    name: str
    lines: list[str] = field(default_factory=lambda: [""])
    path: Optional[str] = None
    encoding: str = "utf-8"
    live: bool = True
    cursor_y: int = 0
    cursor_x: int = 0
    scroll_top: int = 0

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class CycleOptions:
    """How the provider should build a fresh cycle list.

    `configuration` names one of the ring's configurations (None means the
    ring default). `sorting` False keeps the raw MRU order.
    """

    configuration: Optional[str] = None
    sorting: bool = False


@dataclass(frozen=True)
class CycleConfiguration:
    name: str
    dont_show: Optional[re.Pattern] = None
    must_show: Optional[re.Pattern] = None
    sort: str = "none"

    def shows(self, buf: Buffer) -> bool:
        if self.must_show and self.must_show.search(buf.name):
            return True
        return not (self.dont_show and self.dont_show.search(buf.name))


CycleResult = tuple[Optional[Buffer], list[Buffer]]


class CycleProvider(Protocol):
    """Pluggable capability that computes the next/previous buffer of a cycle."""

    def next_buffer(
        self, cycle_list: Optional[Sequence[Buffer]], options: CycleOptions
    ) -> CycleResult: ...

    def previous_buffer(
        self, cycle_list: Optional[Sequence[Buffer]], options: CycleOptions
    ) -> CycleResult: ...


def _compile(pattern: Any, config_name: str, key: str) -> Optional[re.Pattern]:
    if not pattern:
        return None
    try:
        return re.compile(str(pattern))
    except re.error as e:
        logging.warning(
            "Invalid %s regex %r in buffer configuration %r: %s. Ignored.",
            key, pattern, config_name, e,
        )
        return None


# ==================== BufferRing Class ====================
class BufferRing:
    """Class BufferRing
    ====================
    The host's list of open buffers.

    Attributes:
        order (list[Buffer]): Live buffers, most recently used first.
        current (Optional[Buffer]): The buffer shown in the view. It is tracked
            separately from `order` so a switch can skip MRU bookkeeping.
        configurations (dict[str, CycleConfiguration]): Named filter/sort sets.
        default_configuration (str): Configuration used when none is requested.
    """

    SORT_KEYS = {
        "name": lambda buf: buf.name.lower(),
        "path": lambda buf: (buf.path or "").lower(),
    }

    def __init__(self, config: Optional[dict[str, Any]] = None) -> None:
        section = (config or {}).get("buffers", {})
        self.order: list[Buffer] = []
        self.current: Optional[Buffer] = None
        self.configurations: dict[str, CycleConfiguration] = {"all": CycleConfiguration("all")}
        for name, spec in (section.get("configurations") or {}).items():
            spec = spec or {}
            self.configurations[name] = CycleConfiguration(
                name=name,
                dont_show=_compile(spec.get("dont_show"), name, "dont_show"),
                must_show=_compile(spec.get("must_show"), name, "must_show"),
                sort=str(spec.get("sort", "none")),
            )
        self.default_configuration: str = section.get("default_configuration", "all")
        if self.default_configuration not in self.configurations:
            logging.warning(
                "Unknown default buffer configuration %r; using 'all'.",
                self.default_configuration,
            )
            self.default_configuration = "all"

    def __len__(self) -> int:
        return len(self.order)

    def __iter__(self):
        return iter(self.order)

    # --- Buffer list maintenance ---
    def add(self, buf: Buffer) -> Buffer:
        """Adds `buf` at the front of the MRU order and makes it current."""
        if buf in self.order:
            self.order.remove(buf)
        self.order.insert(0, buf)
        self.current = buf
        logging.debug("BufferRing: added %r (%d buffers).", buf.name, len(self.order))
        return buf

    def find(self, name: str) -> Optional[Buffer]:
        for buf in self.order:
            if buf.name == name:
                return buf
        return None

    def unique_name(self, base: str) -> str:
        """Returns `base`, or `base<N>` when a buffer already uses the name."""
        if not self.find(base):
            return base
        n = 2
        while self.find(f"{base}<{n}>"):
            n += 1
        return f"{base}<{n}>"

    def switch_to(self, buf: Buffer, norecord: bool = False) -> None:
        """Makes `buf` current; unless `norecord`, moves it to the MRU front."""
        if not buf.live or buf not in self.order:
            logging.warning("BufferRing: refusing to switch to dead buffer %r.", buf.name)
            return
        self.current = buf
        if not norecord:
            self.order.remove(buf)
            self.order.insert(0, buf)

    def bury(self, buf: Buffer) -> None:
        """Moves `buf` to the end of the MRU order."""
        if buf in self.order:
            self.order.remove(buf)
            self.order.append(buf)

    def kill(self, buf: Buffer) -> Optional[Buffer]:
        """Removes `buf` from the ring. Returns the new current buffer."""
        if buf not in self.order:
            return self.current
        self.order.remove(buf)
        buf.live = False
        if self.current is buf:
            self.current = self.order[0] if self.order else None
        logging.debug("BufferRing: killed %r.", buf.name)
        return self.current

    # --- Cycling ---
    def configuration(self, name: Optional[str]) -> CycleConfiguration:
        if name and name in self.configurations:
            return self.configurations[name]
        if name:
            logging.debug("Unknown cycle configuration %r; using default.", name)
        return self.configurations[self.default_configuration]

    def buffer_list(self, options: Optional[CycleOptions] = None) -> list[Buffer]:
        """Current buffer first, then the others passing the configuration filters."""
        options = options or CycleOptions()
        conf = self.configuration(options.configuration)
        others = [b for b in self.order if b is not self.current and conf.shows(b)]
        if options.sorting and conf.sort in self.SORT_KEYS:
            others.sort(key=self.SORT_KEYS[conf.sort])
        return ([self.current] if self.current else []) + others

    def _cycle_list(
        self, cycle_list: Optional[Sequence[Buffer]], options: CycleOptions
    ) -> list[Buffer]:
        if cycle_list:
            buffers = [b for b in cycle_list if b.live and b in self.order]
            if buffers:
                return buffers
        return self.buffer_list(options)

    def next_buffer(
        self, cycle_list: Optional[Sequence[Buffer]], options: CycleOptions
    ) -> CycleResult:
        """Returns the buffer after the head of the cycle list, and the list used."""
        buffers = self._cycle_list(cycle_list, options)
        if not buffers:
            return self.current, []
        target = buffers[1] if len(buffers) > 1 else buffers[0]
        return target, buffers

    def previous_buffer(
        self, cycle_list: Optional[Sequence[Buffer]], options: CycleOptions
    ) -> CycleResult:
        """Returns the last buffer of the cycle list, and the list used."""
        buffers = self._cycle_list(cycle_list, options)
        if not buffers:
            return self.current, []
        return buffers[-1], buffers
