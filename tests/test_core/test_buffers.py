# tests/test_core/test_buffers.py
"""Unit tests for `BufferRing`, the buffer list and cycle provider."""

import pytest

from bufcycle.core.Buffers import Buffer, BufferRing, CycleOptions

CONFIG = {
    "buffers": {
        "default_configuration": "files",
        "configurations": {
            "files": {"dont_show": r"^\*.*\*$", "must_show": r"^\*notes\*$", "sort": "name"},
            "broken": {"dont_show": "([", "sort": "path"},
        },
    }
}


@pytest.fixture
def ring() -> BufferRing:
    ring = BufferRing(CONFIG)
    for name in ["zulu", "*scratch*", "*notes*", "mike", "alpha"]:
        ring.add(Buffer(name=name, path=f"/tmp/{name}"))
    # MRU order: alpha, mike, *notes*, *scratch*, zulu
    return ring


def names(buffers) -> list[str]:
    return [buf.name for buf in buffers]


class TestMaintenance:
    def test_add_puts_buffer_first_and_current(self, ring: BufferRing) -> None:
        assert names(ring.order) == ["alpha", "mike", "*notes*", "*scratch*", "zulu"]
        assert ring.current.name == "alpha"
        assert len(ring) == 5

    def test_switch_records_unless_norecord(self, ring: BufferRing) -> None:
        zulu = ring.find("zulu")
        ring.switch_to(zulu, norecord=True)
        assert ring.current is zulu
        assert names(ring.order)[0] == "alpha"

        ring.switch_to(zulu)
        assert names(ring.order)[0] == "zulu"

    def test_bury_moves_to_end(self, ring: BufferRing) -> None:
        ring.bury(ring.find("alpha"))
        assert names(ring.order)[-1] == "alpha"

    def test_kill_marks_dead_and_picks_new_current(self, ring: BufferRing) -> None:
        alpha = ring.current
        new_current = ring.kill(alpha)
        assert not alpha.live
        assert new_current.name == "mike"
        assert ring.find("alpha") is None

    def test_switch_to_dead_buffer_is_refused(self, ring: BufferRing) -> None:
        mike = ring.find("mike")
        ring.kill(mike)
        ring.switch_to(mike)
        assert ring.current.name == "alpha"

    def test_unique_name(self, ring: BufferRing) -> None:
        assert ring.unique_name("new") == "new"
        assert ring.unique_name("mike") == "mike<2>"
        ring.add(Buffer(name="mike<2>"))
        assert ring.unique_name("mike") == "mike<3>"


class TestConfigurations:
    def test_all_always_exists(self) -> None:
        assert "all" in BufferRing({}).configurations
        assert BufferRing({}).default_configuration == "all"

    def test_unknown_default_falls_back_to_all(self) -> None:
        ring = BufferRing({"buffers": {"default_configuration": "nope"}})
        assert ring.default_configuration == "all"

    def test_invalid_regex_is_ignored(self, ring: BufferRing) -> None:
        assert ring.configurations["broken"].dont_show is None

    def test_filters_apply_and_must_show_wins(self, ring: BufferRing) -> None:
        listed = ring.buffer_list(CycleOptions(configuration="files"))
        assert names(listed) == ["alpha", "mike", "*notes*", "zulu"]

    def test_unknown_configuration_uses_default(self, ring: BufferRing) -> None:
        listed = ring.buffer_list(CycleOptions(configuration="missing"))
        assert "*scratch*" not in names(listed)

    def test_all_configuration_keeps_everything(self, ring: BufferRing) -> None:
        listed = ring.buffer_list(CycleOptions(configuration="all"))
        assert names(listed) == ["alpha", "mike", "*notes*", "*scratch*", "zulu"]

    def test_sorting_only_when_requested(self, ring: BufferRing) -> None:
        ring.switch_to(ring.find("mike"), norecord=True)
        raw = ring.buffer_list(CycleOptions(configuration="files", sorting=False))
        ordered = ring.buffer_list(CycleOptions(configuration="files", sorting=True))
        assert names(raw) == ["mike", "alpha", "*notes*", "zulu"]
        assert names(ordered) == ["mike", "*notes*", "alpha", "zulu"]


class TestCycleProvider:
    def test_next_and_previous_from_fresh_list(self, ring: BufferRing) -> None:
        options = CycleOptions(configuration="all")
        target, cycle = ring.next_buffer(None, options)
        assert target.name == "mike"
        assert names(cycle) == ["alpha", "mike", "*notes*", "*scratch*", "zulu"]

        target, _ = ring.previous_buffer(None, options)
        assert target.name == "zulu"

    def test_in_flight_list_is_continued_without_dead_buffers(self, ring: BufferRing) -> None:
        in_flight = [ring.find("zulu"), ring.find("alpha"), ring.find("mike")]
        ring.kill(ring.find("alpha"))

        target, cycle = ring.next_buffer(in_flight, CycleOptions())

        assert names(cycle) == ["zulu", "mike"]
        assert target.name == "mike"

    def test_single_buffer_cycles_to_itself(self) -> None:
        ring = BufferRing({})
        only = ring.add(Buffer(name="only"))
        assert ring.next_buffer(None, CycleOptions()) == (only, [only])
        assert ring.previous_buffer(None, CycleOptions()) == (only, [only])

    def test_empty_ring(self) -> None:
        ring = BufferRing({})
        assert ring.next_buffer(None, CycleOptions()) == (None, [])
        assert ring.previous_buffer(None, CycleOptions()) == (None, [])
