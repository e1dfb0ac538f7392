from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import pytest

from senselog.dataio.dynamic_tables import DynamicTableRegistry, TableRecordMixin, TableRow
from senselog.errors import RegistryNotInitializedError, SchemaConflictError, SchemaError, TableFileCollisionError


@dataclass
class ChoiceEvent(TableRecordMixin):
    table_name: ClassVar[str] = "Choice"
    Trial: int
    Outcome: str


@dataclass
class RecordA(TableRecordMixin):
    table_name: ClassVar[str] = "T"
    X: int
    Y: int


@dataclass
class RecordB(TableRecordMixin):
    table_name: ClassVar[str] = "T"
    X: int
    Z: int


@dataclass
class Empty(TableRecordMixin):
    table_name: ClassVar[str] = "Nothing"


def test_choice_table_created_on_first_write(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    tables.write(ChoiceEvent(Trial=3, Outcome="Win"))
    tables.close_all()

    path = tmp_path / "Choice.csv"
    assert path.read_text(encoding="utf-8") == "Trial,Outcome\n3,Win\n"


def test_conflicting_layout_fails_without_writing(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    tables.write(RecordA(X=1, Y=2))

    with pytest.raises(SchemaConflictError) as info:
        tables.write(RecordB(X=1, Z=3))
    tables.close_all()

    message = str(info.value)
    assert "RecordA" in message and "RecordB" in message
    assert "'Y'" in message and "'Z'" in message
    assert info.value.expected == ("X", "Y")
    assert info.value.actual == ("X", "Z")
    assert (tmp_path / "T.csv").read_text(encoding="utf-8") == "X,Y\n1,2\n"


def test_same_layout_from_other_type_is_accepted(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    tables.write(RecordA(X=1, Y=2))
    tables.write(TableRow("T", X=5, Y=6))
    tables.close_all()
    assert (tmp_path / "T.csv").read_text(encoding="utf-8") == "X,Y\n1,2\n5,6\n"


def test_prefix_and_sanitized_names(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path, ",", "2025.09.14_15-08")
    tables.write(TableRow("Trial:Start/End", Block=1))
    assert tables.path_for("Trial:Start/End") == tmp_path / "2025.09.14_15-08_Trial_Start_End.csv"
    assert tables.table_names() == ["Trial:Start/End"]
    tables.close_all()
    assert (tmp_path / "2025.09.14_15-08_Trial_Start_End.csv").exists()


def test_names_sanitizing_to_the_same_file_collide(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    tables.write(TableRow("A/B", X=1))

    with pytest.raises(TableFileCollisionError) as info:
        tables.write(TableRow("A:B", X=2))
    assert info.value.owner == "A/B"
    assert info.value.path == tmp_path / "A_B.csv"
    assert not tables.is_open("A:B")
    tables.close_all()
    assert (tmp_path / "A_B.csv").read_text(encoding="utf-8") == "X\n1\n"


def test_closing_a_table_releases_its_file(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    tables.write(TableRow("A/B", X=1))
    tables.close("A/B")
    tables.write(TableRow("A:B", X=2))
    tables.close_all()
    assert (tmp_path / "A_B.csv").read_text(encoding="utf-8") == "X\n2\n"


def test_reserved_file_is_never_opened_as_a_table(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path, ",", "P01")
    tables.reserve(tmp_path / "P01_ContinuousData.csv", "ContinuousData")
    with pytest.raises(TableFileCollisionError):
        tables.write(TableRow("ContinuousData", X=1))
    tables.close_all()
    assert not (tmp_path / "P01_ContinuousData.csv").exists()


def test_registry_reports_open_tables(tmp_path) -> None:
    with DynamicTableRegistry(tmp_path) as tables:
        tables.write(ChoiceEvent(Trial=1, Outcome="Lose"))
        assert tables.is_open("Choice")
        assert tables.columns("Choice") == ("Trial", "Outcome")
        assert tables.defining_type("Choice").endswith("ChoiceEvent")
        assert len(tables) == 1
        tables.close("Choice")
        assert not tables.is_open("Choice")
        tables.close("Unknown")
        tables.close("")
    assert len(tables) == 0


def test_reopening_closed_table_truncates_by_default(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    tables.write(ChoiceEvent(Trial=1, Outcome="A"))
    tables.close("Choice")
    tables.write(ChoiceEvent(Trial=2, Outcome="B"))
    tables.close_all()
    assert (tmp_path / "Choice.csv").read_text(encoding="utf-8") == "Trial,Outcome\n2,B\n"


def test_append_mode_keeps_existing_rows(tmp_path) -> None:
    first = DynamicTableRegistry(tmp_path, append=True)
    first.write(ChoiceEvent(Trial=1, Outcome="A"))
    first.close_all()
    second = DynamicTableRegistry(tmp_path, append=True)
    second.write(ChoiceEvent(Trial=2, Outcome="B"))
    second.close_all()
    assert (tmp_path / "Choice.csv").read_text(encoding="utf-8") == "Trial,Outcome\n1,A\n2,B\n"


def test_write_requires_initialize() -> None:
    tables = DynamicTableRegistry()
    assert not tables.initialized
    with pytest.raises(RegistryNotInitializedError):
        tables.write(ChoiceEvent(Trial=1, Outcome="A"))
    with pytest.raises(RegistryNotInitializedError):
        tables.path_for("Choice")


def test_initialize_rejects_empty_directory() -> None:
    with pytest.raises(ValueError):
        DynamicTableRegistry().initialize("  ")


def test_empty_table_name_is_rejected(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    with pytest.raises(ValueError):
        tables.write(TableRow("", X=1))
    with pytest.raises(ValueError):
        tables.write(None)


def test_record_without_fields_is_a_schema_error(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path)
    with pytest.raises(SchemaError):
        tables.write(Empty())
    assert not (tmp_path / "Nothing.csv").exists()


def test_mixin_requires_dataclass() -> None:
    class NotADataclass(TableRecordMixin):
        table_name = "X"

    with pytest.raises(TypeError):
        NotADataclass().table_fields()


def test_values_are_formatted_and_escaped(tmp_path) -> None:
    tables = DynamicTableRegistry(tmp_path, ";")
    tables.write(TableRow("Notes", Text="a;b", Score=0.5, Ok=True, Missing=None))
    tables.close_all()
    assert (tmp_path / "Notes.csv").read_text(encoding="utf-8") == 'Text;Score;Ok;Missing\n"a;b";0.5;true;\n'
