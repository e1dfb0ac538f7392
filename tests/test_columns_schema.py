from __future__ import annotations

import enum

import pytest

from senselog.core.columns import MISSING, ColumnRegistry
from senselog.core.schema import SchemaBuilder, enumerate_names, is_sentinel_name
from senselog.errors import (
    ColumnOutOfRangeError,
    DuplicateColumnError,
    EmptyColumnNameError,
    RegistryFrozenError,
    SchemaError,
)


class Zone(enum.Enum):
    Lobby = 0
    RoomA = 1
    Max = 2


class Bone(enum.IntEnum):
    Hand_Start = 0
    Hand_Wrist = 0
    Hand_Thumb = 1
    Hand_MaxSkinnable = 2
    Hand_End = 2


def test_registry_assigns_indices_in_order() -> None:
    reg = ColumnRegistry()
    assert reg.add("a") == 0
    assert reg.add("b") == 1
    assert reg.names == ("a", "b")
    assert reg.count() == 2
    assert reg.index_of("b") == 1
    assert reg.index_of("zzz") is None
    assert reg.try_index("zzz") == MISSING


def test_registry_rejects_duplicates_and_empty_names() -> None:
    reg = ColumnRegistry(["a"])
    with pytest.raises(DuplicateColumnError):
        reg.add("a")
    with pytest.raises(EmptyColumnNameError):
        reg.add("  ")
    with pytest.raises(SchemaError):
        reg.add("")


def test_registry_lookup_is_case_sensitive() -> None:
    reg = ColumnRegistry(["Time"])
    assert reg.index_of("time") is None
    reg.add("time")
    assert reg.index_of("time") == 1


def test_frozen_registry_rejects_add() -> None:
    reg = ColumnRegistry(["a"]).freeze()
    assert reg.frozen
    with pytest.raises(RegistryFrozenError):
        reg.add("b")


def test_name_at_out_of_range() -> None:
    reg = ColumnRegistry(["a", "b"])
    with pytest.raises(ColumnOutOfRangeError):
        reg.name_at(2)
    with pytest.raises(IndexError):
        reg.name_at(-1)


def test_index_stability_after_build() -> None:
    reg = (
        SchemaBuilder()
        .add("timeSinceStartup")
        .add_group("Pos", ["x", "y", "z"])
        .add_range("Bone", 0, 3)
        .add_from_enumerable("TimeInZone", Zone)
        .build()
    )
    for i in range(reg.count()):
        assert reg.index_of(reg.name_at(i)) == i


def test_builder_count_matches_names_added() -> None:
    builder = SchemaBuilder().add("t").add_group("Pos", ["x", "y"]).add_range("Bone", 5, 4)
    assert len(builder) == 7
    reg = builder.build()
    assert reg.count() == 7
    assert reg.names == ("t", "Pos_x", "Pos_y", "Bone_05", "Bone_06", "Bone_07", "Bone_08")


def test_add_group_without_prefix_keeps_items() -> None:
    reg = SchemaBuilder().add_group("", ["Jaw_Drop", "Tongue_Out"]).build()
    assert reg.names == ("Jaw_Drop", "Tongue_Out")


def test_add_group_rejects_empty_item() -> None:
    with pytest.raises(EmptyColumnNameError):
        SchemaBuilder().add_group("Pos", ["x", ""])


def test_add_range_validates_arguments() -> None:
    with pytest.raises(ValueError):
        SchemaBuilder().add_range("Bone", 0, -1)
    reg = SchemaBuilder().add_range("Bone", 0, 0).add("x").build()
    assert reg.names == ("x",)
    assert SchemaBuilder().add_range("F", 9, 2, index_width=3).pending == ("F_009", "F_010")


def test_add_from_enumerable_skips_markers() -> None:
    reg = SchemaBuilder().add_from_enumerable("TimeInZone", Zone).build()
    assert reg.names == ("TimeInZone_Lobby", "TimeInZone_RoomA")


def test_enumerate_names_keeps_aliases_but_drops_markers() -> None:
    assert enumerate_names(Bone) == ["Hand_Wrist", "Hand_Thumb"]
    assert enumerate_names(["A", "Invalid", "B", "Count"]) == ["A", "B"]
    assert is_sentinel_name("XRHand_End")
    assert not is_sentinel_name("Ending")


def test_build_fails_on_repeated_name() -> None:
    builder = SchemaBuilder().add_group("Pos", ["x", "y"]).add("Pos_x")
    with pytest.raises(DuplicateColumnError) as info:
        builder.build()
    assert info.value.name == "Pos_x"


def test_registry_equality_uses_names() -> None:
    a = SchemaBuilder().add_group("Pos", ["x", "y"]).build()
    b = ColumnRegistry(["Pos_x", "Pos_y"])
    assert a == b
    assert a != ColumnRegistry(["Pos_y", "Pos_x"])
