"""
Tests for CellRegistry
"""

import pytest

from cartcells.domain.errors import RegistryUnavailable
from cartcells.domain.identity import group_id_for
from cartcells.services.cell_registry import CellRegistry
from conftest import ALICE, BOB, h, make_cell


class TestCellRegistry:

    def test_register_returns_group_id(self):
        registry = CellRegistry()
        cell = make_cell("a")

        group_id = registry.register(cell, (cell.backing_id, 100))

        assert group_id == group_id_for(h("a"), 100)
        assert registry.list() == [(group_id, cell)]

    def test_list_keeps_insertion_order(self):
        registry = CellRegistry()
        ids = [registry.register(make_cell(label), (h(label), 1)) for label in ("c", "a", "b")]

        assert [gid for gid, _ in registry.list()] == ids

    def test_register_same_identity_overwrites(self):
        registry = CellRegistry()
        first = make_cell("a")
        second = make_cell("a", agent=BOB)

        registry.register(first, (h("a"), 1))
        registry.register(second, (h("a"), 1))

        assert len(registry) == 1
        assert registry.list()[0][1] == second

    def test_list_is_snapshot(self):
        registry = CellRegistry()
        registry.register(make_cell("a"), (h("a"), 1))
        snapshot = registry.list()

        registry.register(make_cell("b"), (h("b"), 2))

        assert len(snapshot) == 1

    def test_replace_all_drops_unknown_cells(self):
        registry = CellRegistry()
        old = registry.register(make_cell("a"), (h("a"), 1))
        new_cell = make_cell("b")

        registry.replace_all([("g-b", new_cell)])

        assert old not in registry
        assert registry.list() == [("g-b", new_cell)]

    def test_replace_from_clones(self):
        registry = CellRegistry()
        registry.replace_from_clones(
            [
                {"cart_dna_hash": h("a"), "agent_key": ALICE, "created_at": 10},
                {"cart_dna_hash": h("b"), "agent_key": BOB, "created_at": 20, "dna_hash": h("base")},
            ]
        )

        entries = registry.list()
        assert [gid for gid, _ in entries] == [group_id_for(h("a"), 10), group_id_for(h("b"), 20)]
        assert entries[1][1].cell_id == (h("b"), BOB)
        assert entries[1][1].network_seed == ""

    def test_replace_from_malformed_clones(self):
        registry = CellRegistry()
        registry.register(make_cell("a"), (h("a"), 1))

        with pytest.raises(RegistryUnavailable):
            registry.replace_from_clones([{"agent_key": ALICE}])

        assert len(registry) == 1
