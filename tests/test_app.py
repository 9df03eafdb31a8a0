from __future__ import annotations

from attendance_service.app import create_app
from attendance_service.storage import LocalStore, RECORDS_KEY
from attendance_service.system import AttendanceSystem


def _register(client, student_id="S1", name="Ada", course="CS"):
    assert client.post("/api/capture").status_code == 200
    return client.post("/api/students", json={"id": student_id, "name": name, "course": course})


def test_health(client):
    body = client.get("/health").get_json()

    assert body["status"] == "ok"
    assert body["station"] == "test"
    assert body["modelsLoaded"] is True
    assert body["webcam"] is True
    assert body["recognizing"] is False


def test_register_view_search_delete(client):
    response = _register(client)
    assert response.status_code == 201
    assert "faceDescriptor" not in response.get_json()

    assert client.get("/api/students/S1").get_json()["name"] == "Ada"

    listing = client.get("/api/students?search=ad").get_json()
    assert [s["id"] for s in listing["students"]] == ["S1"]
    assert listing["total"] == 1
    assert client.get("/api/students?search=zzz").get_json()["students"] == []

    assert client.delete("/api/students/S1").status_code == 200
    assert client.get("/api/students/S1").status_code == 404


def test_register_errors(client):
    response = client.post("/api/students", json={"id": "S1", "name": "Ada", "course": "CS"})
    assert response.status_code == 422
    assert "capture face" in response.get_json()["error"]

    assert _register(client).status_code == 201
    duplicate = _register(client, name="Other")
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"] == "Student ID already exists"

    assert client.post("/api/students", data="nope").status_code == 422


def test_capture_without_face(client, analyzer):
    analyzer.descriptors = []

    response = client.post("/api/capture")

    assert response.status_code == 422


def test_subject_selection_and_attendance(client, system):
    _register(client)
    system.recognize_face([0.1, 0.2, 0.3, 0.4])

    subjects = client.get("/api/subjects").get_json()
    assert subjects["selected"] == "math"
    assert [s["code"] for s in subjects["subjects"]] == ["math", "physics"]

    records = client.get("/api/attendance").get_json()["records"]
    assert [r["studentId"] for r in records] == ["S1"]
    assert records[0]["status"] == "Present"

    assert client.put("/api/subjects/selected", json={"subject": "physics"}).status_code == 200
    assert client.get("/api/attendance").get_json()["records"] == []
    assert client.put("/api/subjects/selected", json={"subject": "art"}).status_code == 422
    assert client.get("/api/attendance?subject=art").status_code == 422


def test_statistics_and_status(client, system):
    _register(client)
    system.recognize_face([0.1, 0.2, 0.3, 0.4])

    stats = client.get("/api/statistics").get_json()
    assert stats["totalStudents"] == 1
    assert stats["presentToday"] == 1
    assert stats["attendanceRate"] == 100
    assert stats["rating"] == "good"

    status = client.get("/api/status").get_json()
    assert status["lastConfirmation"]["studentName"] == "Ada"
    assert status["lastConfirmation"]["subject"] == "Mathematics"
    assert " | " in status["datetime"]


def test_recognition_start_stop(client):
    assert client.post("/api/recognition/start").status_code == 409

    _register(client)
    assert client.post("/api/recognition/start").get_json()["started"] is True
    assert client.post("/api/recognition/stop").get_json()["stopped"] is True


def test_exports(client):
    assert client.get("/api/export/students.csv").status_code == 404

    _register(client)
    csv_response = client.get("/api/export/students.csv")
    assert csv_response.status_code == 200
    assert csv_response.mimetype == "text/csv"
    assert "attendance_students_" in csv_response.headers["Content-Disposition"]
    assert csv_response.get_data(as_text=True).splitlines()[1].startswith('"S1","Ada","CS"')

    summary = client.get("/api/export/summary.txt")
    assert summary.status_code == 200
    assert 'filename="attendance_summary.txt"' in summary.headers["Content-Disposition"]
    assert "Registered students: 1" in summary.get_data(as_text=True)


def test_instructions_shown_once(client):
    assert client.get("/api/instructions").get_json() == {"show": True}
    assert client.get("/api/instructions").get_json() == {"show": False}


def test_clear_all_data(client, system, config):
    _register(client)
    system.recognize_face([0.1, 0.2, 0.3, 0.4])

    assert client.delete("/api/data").get_json() == {"cleared": True}
    assert client.get("/api/students").get_json()["total"] == 0
    assert LocalStore(config.store_file).get_item(RECORDS_KEY) == []


def test_video_feed_without_webcam(config, store, analyzer):
    app = create_app(AttendanceSystem(config, store, analyzer, webcam=None))

    response = app.test_client().get("/video_feed")

    assert response.status_code == 503
    assert response.get_json()["error"] == "Webcam not available"


def test_status_includes_recent_history(client):
    client.post("/api/capture")

    history = client.get("/api/status").get_json()["history"]

    assert [h["level"] for h in history[-2:]] == ["loading", "success"]
