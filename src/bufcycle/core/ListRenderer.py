# bufcycle/core/ListRenderer.py
"""ListRenderer.py
====================
Turns an ordered sequence of cycle candidates into the numbered block shown
in the echo area.

The block is bounded: never more than nine entries (one per selection key),
never more than the configured maximum, and never more rows than the echo
area may take from the frame. With the slant style enabled every entry is
indented a little more than the one above it.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

from bufcycle.utils.utils import MAX_SELECTION_ROWS, truncate_to_width

T = TypeVar("T")


def row_budget(frame_rows: int, height_fraction: float, header_lines: int = 1) -> int:
    """Rows the list may use: a share of the frame minus the header lines."""
    return max(1, int(frame_rows * height_fraction) - header_lines)


@dataclass(frozen=True)
class DisplayWindow(Generic[T]):
    """The bounded ``(rank, item)`` projection of a candidate list."""

    entries: tuple[tuple[int, T], ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def item(self, rank: int) -> Optional[T]:
        """Returns the item displayed with `rank`, or None when there is none."""
        if 1 <= rank <= len(self.entries):
            return self.entries[rank - 1][1]
        return None

    def items(self) -> list[T]:
        return [item for _, item in self.entries]


@dataclass(frozen=True)
class RenderedList(Generic[T]):
    window: DisplayWindow[T]
    text: str


class ListRenderer:
    """Formats candidate lists as ``"{rank}. {indent}{label}"`` lines.

    Args:
        max_rows: Configured maximum, clamped to ``1..9``.
        slant: Indent each entry by ``(rank - 1) * indent_step`` spaces.
        indent_step: Spaces added per rank when `slant` is on.
    """

    def __init__(self, max_rows: int = MAX_SELECTION_ROWS, slant: bool = False, indent_step: int = 2) -> None:
        self.max_rows = min(max(1, int(max_rows)), MAX_SELECTION_ROWS)
        self.slant = slant
        self.indent_step = max(0, indent_step)

    def limit(self, count: int, budget: Optional[int] = None) -> int:
        limit = min(self.max_rows, MAX_SELECTION_ROWS, count)
        if budget is not None:
            limit = min(limit, max(0, budget))
        return limit

    def window(
        self, items: Sequence[T], backward: bool = False, budget: Optional[int] = None
    ) -> DisplayWindow[T]:
        ordered = list(reversed(items)) if backward else list(items)
        shown = ordered[: self.limit(len(ordered), budget)]
        return DisplayWindow(tuple((rank, item) for rank, item in enumerate(shown, start=1)))

    def format_line(self, rank: int, label: str) -> str:
        indent = " " * ((rank - 1) * self.indent_step) if self.slant else ""
        return f"{rank}. {indent}{label}"

    def render(
        self,
        items: Sequence[T],
        backward: bool = False,
        budget: Optional[int] = None,
        width: Optional[int] = None,
        label: Callable[[T], str] = str,
    ) -> Optional[RenderedList[T]]:
        """Renders `items` into numbered lines.

        Returns None when there is nothing to cycle through (at most one item).
        """
        if len(items) <= 1:
            return None
        window = self.window(items, backward=backward, budget=budget)
        lines = []
        for rank, item in window.entries:
            line = self.format_line(rank, str(label(item)))
            if width is not None:
                line = truncate_to_width(line, max(0, width))
            lines.append(line)
        return RenderedList(window=window, text="\n".join(lines))
