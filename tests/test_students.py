from __future__ import annotations

import pytest

from attendance_service.errors import (
    DuplicateStudentError,
    StorageError,
    StudentNotFoundError,
    ValidationError,
)
from attendance_service.storage import LocalStore, STUDENTS_KEY
from attendance_service.students import StudentRegistry


def test_register_trims_and_persists(config, store):
    registry = StudentRegistry(store)

    student = registry.register("  S1 ", " Ada Lovelace ", " CS ", [0.1, 0.2], "data:image/jpeg;base64,xx")

    assert (student.id, student.name, student.course) == ("S1", "Ada Lovelace", "CS")
    saved = LocalStore(config.store_file).get_item(STUDENTS_KEY)
    assert saved[0]["faceDescriptor"] == pytest.approx([0.1, 0.2])
    assert saved[0]["registeredAt"]


@pytest.mark.parametrize("fields", [("", "Ada", "CS"), ("S1", "   ", "CS"), ("S1", "Ada", "")])
def test_register_requires_all_fields(store, fields):
    with pytest.raises(ValidationError, match="fill all fields"):
        StudentRegistry(store).register(*fields, [0.1])


def test_register_requires_captured_face(store):
    with pytest.raises(ValidationError, match="capture face"):
        StudentRegistry(store).register("S1", "Ada", "CS", None)


def test_register_rejects_duplicate_id(store):
    registry = StudentRegistry(store)
    registry.register("S1", "Ada", "CS", [0.1])

    with pytest.raises(DuplicateStudentError):
        registry.register("S1", "Someone Else", "Math", [0.2])
    assert len(registry) == 1


def test_search_is_case_insensitive_on_id_name_and_course(store):
    registry = StudentRegistry(store)
    registry.register("S1", "Ada Lovelace", "Computer Science", [0.1])
    registry.register("M7", "Carl Gauss", "Mathematics", [0.2])

    assert [s.id for s in registry.search("lovelace")] == ["S1"]
    assert [s.id for s in registry.search("m7")] == ["M7"]
    assert [s.id for s in registry.search("SCIENCE")] == ["S1"]
    assert len(registry.search("")) == 2
    assert registry.search("nobody") == []


def test_delete_and_get(store):
    registry = StudentRegistry(store)
    registry.register("S1", "Ada", "CS", [0.1])

    assert registry.delete("S1").name == "Ada"
    with pytest.raises(StudentNotFoundError):
        registry.get("S1")
    with pytest.raises(StudentNotFoundError):
        registry.delete("S1")


def test_corrupt_store_reads_as_empty(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    assert StudentRegistry(LocalStore(str(path))).all() == []


def test_store_write_failure_raises_and_keeps_memory(tmp_path):
    store = LocalStore(str(tmp_path / "missing-dir" / "store.json"))
    registry = StudentRegistry(store)

    with pytest.raises(StorageError):
        registry.register("S1", "Ada", "CS", [0.1])
    assert len(registry) == 0
    assert store.get_item(STUDENTS_KEY) is None


def test_store_remove_and_clear(store):
    store.set_item("a", 1)
    store.set_item("b", 2)

    store.remove_item("a")
    assert store.get_item("a") is None
    assert store.get_item("b") == 2

    store.clear()
    assert store.get_item("b") is None


def _failing_flush():
    raise StorageError("disk full")


def test_remove_item_failure_keeps_value(store):
    store.set_item("a", 1)
    store._flush = _failing_flush

    with pytest.raises(StorageError):
        store.remove_item("a")
    assert store.get_item("a") == 1


def test_clear_failure_keeps_values(store):
    store.set_item("a", 1)
    store._flush = _failing_flush

    with pytest.raises(StorageError):
        store.clear()
    assert store.get_item("a") == 1
