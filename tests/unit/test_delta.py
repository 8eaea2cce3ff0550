"""Tests for OcflDelta and the OcflActions accumulator."""

from __future__ import annotations

from typing import Any

import pytest

from ocflkit.config import OcflConfig
from ocflkit.core.actions import OcflActions
from ocflkit.core.delta import OcflDelta
from ocflkit.core.errors import VersionNotFound
from ocflkit.core.ocfl_object import OcflObject
from ocflkit.models.actions import PATH_ACTIONS


def _object_with_states(config: OcflConfig, *states: dict[str, list[str]]) -> OcflObject:
    """Build an object whose versions hold exactly the given state blocks."""
    obj = OcflObject(config=config)
    obj.id = "info:delta"
    for number, state in enumerate(states, start=1):
        block = OcflObject.create_version_block()
        block["state"] = state
        obj.set_version(number, block)
        for digest, paths in state.items():
            if digest not in obj.manifest:
                obj.manifest[digest] = [f"{obj.version_name(number)}/content/{paths[0]}"]
    return obj


class TestOcflActions:
    def test_empty_categories_dropped(self):
        actions = OcflActions()
        actions.add("d1", "a.txt")
        assert actions.all() == {"add": {"d1": ["a.txt"]}}

    def test_paths_unique_per_digest(self):
        actions = OcflActions()
        actions.copy("d1", "b.txt")
        actions.copy("d1", "b.txt")
        assert actions.all() == {"copy": {"d1": ["b.txt"]}}

    def test_category_order(self):
        actions = OcflActions()
        actions.delete("d3", "c.txt")
        actions.add("d1", "a.txt")
        actions.update_manifest("d1", "a.txt")
        assert list(actions.all()) == ["update_manifest", "add", "delete"]

    def test_fixity_first_value_wins(self):
        actions = OcflActions()
        actions.fixity("d1", "md5", "m1")
        actions.fixity("d1", "md5", "m2")
        assert actions.all() == {"fixity": {"md5": {"d1": "m1"}}}

    def test_all_is_a_copy(self):
        actions = OcflActions()
        actions.add("d1", "a.txt")
        actions.all()["add"]["d1"].append("x")
        assert actions.all() == {"add": {"d1": ["a.txt"]}}


class TestOcflDelta:
    def test_add_scenario(self, config: OcflConfig):
        obj = _object_with_states(
            config,
            {"d1": ["a.txt"]},
            {"d1": ["a.txt"], "d2": ["b.txt"]},
        )
        assert OcflDelta(obj).previous(2) == {"add": {"d2": ["b.txt"]}}

    def test_copy_scenario(self, config: OcflConfig):
        obj = _object_with_states(
            config,
            {"d1": ["a.txt"]},
            {"d1": ["a.txt", "a_copy.txt"]},
        )
        assert OcflDelta(obj).previous(2) == {"copy": {"d1": ["a_copy.txt"]}}

    def test_update(self, config: OcflConfig):
        obj = _object_with_states(config, {"d1": ["a.txt"]}, {"d2": ["a.txt"]})
        assert OcflDelta(obj).previous(2) == {"update": {"d2": ["a.txt"]}}

    def test_move(self, config: OcflConfig):
        obj = _object_with_states(config, {"d1": ["a.txt"]}, {"d1": ["b.txt"]})
        assert OcflDelta(obj).previous(2) == {"move": {"d1": ["a.txt", "b.txt"]}}

    def test_delete_of_vanished_digest(self, config: OcflConfig):
        obj = _object_with_states(
            config,
            {"d1": ["a.txt"], "d2": ["b.txt"]},
            {"d1": ["a.txt"]},
        )
        assert OcflDelta(obj).previous(2) == {"delete": {"d2": ["b.txt"]}}

    def test_delete_of_one_copy(self, config: OcflConfig):
        obj = _object_with_states(
            config,
            {"d1": ["a.txt", "a_copy.txt"]},
            {"d1": ["a.txt"]},
        )
        assert OcflDelta(obj).previous(2) == {"delete": {"d1": ["a_copy.txt"]}}

    def test_fewer_paths_with_new_one(self, config: OcflConfig):
        obj = _object_with_states(config, {"d1": ["a", "b"]}, {"d1": ["c"]})
        assert OcflDelta(obj).previous(2) == {
            "copy": {"d1": ["c"]},
            "delete": {"d1": ["a", "b"]},
        }

    def test_more_paths_with_lost_one(self, config: OcflConfig):
        obj = _object_with_states(config, {"d1": ["a", "b"]}, {"d1": ["a", "c", "d"]})
        assert OcflDelta(obj).previous(2) == {
            "copy": {"d1": ["c", "d"]},
            "delete": {"d1": ["b"]},
        }

    def test_swapped_paths_are_updates(self, config: OcflConfig):
        obj = _object_with_states(
            config,
            {"d1": ["a"], "d2": ["b"]},
            {"d1": ["b"], "d2": ["a"]},
        )
        assert OcflDelta(obj).previous(2) == {"update": {"d1": ["b"], "d2": ["a"]}}

    def test_unchanged_version_is_empty(self, config: OcflConfig):
        obj = _object_with_states(config, {"d1": ["a.txt"]}, {"d1": ["a.txt"]})
        assert OcflDelta(obj).previous(2) == {}

    def test_version_one_is_all_adds(self, config: OcflConfig):
        obj = _object_with_states(
            config,
            {"d1": ["a.txt", "a_copy.txt"], "d2": ["b.txt"]},
            {"d2": ["b.txt"]},
        )
        assert OcflDelta(obj).previous(1) == {
            "add": {"d1": ["a.txt", "a_copy.txt"], "d2": ["b.txt"]}
        }

    def test_include_manifest(self, config: OcflConfig):
        obj = _object_with_states(
            config,
            {"d1": ["a.txt"]},
            {"d1": ["a.txt"], "d2": ["dir/b.txt"]},
        )
        delta = OcflDelta(obj, include_manifest=True).previous(2)
        assert delta == {
            "update_manifest": {"d2": ["dir/b.txt"]},
            "add": {"d2": ["dir/b.txt"]},
        }

    def test_all_and_stored_records(self, config: OcflConfig):
        obj = _object_with_states(config, {"d1": ["a.txt"]}, {"d1": ["b.txt"]})
        engine = OcflDelta(obj)
        records = engine.all()
        assert list(records) == ["v0001", "v0002"]
        assert records["v0002"] == {"move": {"d1": ["a.txt", "b.txt"]}}
        records["v0002"].clear()
        assert engine.delta["v0002"] == {"move": {"d1": ["a.txt", "b.txt"]}}

    @pytest.mark.parametrize("version", [0, -1, 3])
    def test_unknown_version_raises(self, config: OcflConfig, version: int):
        obj = _object_with_states(config, {"d1": ["a.txt"]}, {"d1": ["a.txt"]})
        with pytest.raises(VersionNotFound):
            OcflDelta(obj).previous(version)

    def test_built_by_mutations(self, config: OcflConfig):
        obj = OcflObject(config=config)
        obj.id = "info:delta"
        obj.add_file("a.txt", "d1", 1)
        obj.add_file("b.txt", "d2", 1)
        obj.add_file("c.txt", "d3", 1)
        obj.copy_file("a.txt", "a2.txt", 2)
        obj.move_file("b.txt", "moved/b.txt", 2)
        obj.update_file("c.txt", "d4", 2)
        assert OcflDelta(obj).previous(2) == {
            "update": {"d4": ["c.txt"]},
            "copy": {"d1": ["a2.txt"]},
            "move": {"d2": ["b.txt", "moved/b.txt"]},
        }

    def test_simultaneous_copy_in_and_delete_out_reads_as_move(self, config: OcflConfig):
        # Known limitation: copying a.txt to b.txt while deleting a.txt cannot be
        # told apart from renaming a.txt to b.txt.
        obj = _object_with_states(config, {"d1": ["a.txt"]}, {"d1": ["b.txt"]})
        assert "move" in OcflDelta(obj).previous(2)


class TestDeltaConservation:
    """Every changed path shows up under exactly one path action."""

    CASES: list[tuple[dict[str, list[str]], dict[str, list[str]]]] = [
        ({"d1": ["a"]}, {"d1": ["a"], "d2": ["b"]}),
        ({"d1": ["a"], "d2": ["b"]}, {"d3": ["a"], "d2": ["b", "c"]}),
        ({"d1": ["a", "b"], "d2": ["c"]}, {"d1": ["a"], "d4": ["c"], "d5": ["e"]}),
        ({"d1": ["a"], "d2": ["b"]}, {"d1": ["x"], "d2": ["b", "y"]}),
        ({"d1": ["a", "b"]}, {"d1": ["c"]}),
        ({"d1": ["a", "b"]}, {"d1": ["a", "c", "d"]}),
        ({"d1": ["a"], "d2": ["b"]}, {"d1": ["b"], "d2": ["a"]}),
        ({"d1": ["a"], "d2": ["b", "c"]}, {"d1": ["b", "x"], "d2": ["c"]}),
    ]

    @staticmethod
    def _paths(record: dict[str, Any]) -> list[str]:
        paths = []
        for action, entries in record.items():
            if action in {kind.value for kind in PATH_ACTIONS}:
                for digest_paths in entries.values():
                    paths.extend(digest_paths)
        return paths

    @pytest.mark.parametrize(("before", "after"), CASES)
    def test_conservation(self, config: OcflConfig, before, after):
        obj = _object_with_states(config, before, after)
        record = OcflDelta(obj).previous(2)

        before_files = {p: d for d, ps in before.items() for p in ps}
        after_files = {p: d for d, ps in after.items() for p in ps}
        changed = {
            p for p in before_files.keys() | after_files.keys()
            if before_files.get(p) != after_files.get(p)
        }
        paths = self._paths(record)
        assert sorted(paths) == sorted(changed)
