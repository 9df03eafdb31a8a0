from __future__ import annotations

import pytest

from attendance_service.models import Student
from attendance_service.recognition.matching import euclidean_distance, find_best_match


def _student(student_id: str, descriptor) -> Student:
    return Student(
        id=student_id,
        name=f"Student {student_id}",
        course="CS",
        face_descriptor=descriptor,
        photo=None,
        registered_at="2026-10-17T09:00:00",
    )


def test_euclidean_distance():
    assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)
    assert euclidean_distance([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == 0.0


def test_euclidean_distance_rejects_length_mismatch():
    with pytest.raises(ValueError):
        euclidean_distance([0.0, 0.0], [0.0, 0.0, 0.0])


def test_best_match_picks_smallest_distance_under_threshold():
    students = [
        _student("far", [0.5, 0.0]),
        _student("near", [0.1, 0.0]),
        _student("mid", [0.3, 0.0]),
    ]

    student, distance = find_best_match([0.0, 0.0], students, threshold=0.6)

    assert student.id == "near"
    assert distance == pytest.approx(0.1)


def test_no_match_when_everyone_is_at_or_beyond_threshold():
    students = [_student("a", [0.6, 0.0]), _student("b", [1.0, 0.0])]

    student, distance = find_best_match([0.0, 0.0], students, threshold=0.6)

    assert student is None
    assert distance == 0.6


def test_tie_goes_to_first_registered():
    students = [_student("first", [0.2, 0.0]), _student("second", [-0.2, 0.0])]

    student, _ = find_best_match([0.0, 0.0], students, threshold=0.6)

    assert student.id == "first"


def test_students_without_or_with_foreign_descriptors_are_skipped():
    students = [
        _student("no-face", None),
        _student("other-model", [0.0, 0.0, 0.0]),
        _student("ok", [0.2, 0.0]),
    ]

    student, _ = find_best_match([0.0, 0.0], students, threshold=0.6)

    assert student.id == "ok"


def test_no_students():
    assert find_best_match([0.0, 0.0], [], threshold=0.6) == (None, 0.6)
