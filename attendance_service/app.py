"""
Flask application for HTTP API.

Provides:
- GET /health: Service health check
- GET /video_feed: MJPEG webcam preview
- /api/...: Registration, recognition, attendance and export endpoints
"""

import time
from datetime import datetime
from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from .errors import AttendanceError, ValidationError
from .logging_config import get_logger
from .reports import (
    SUMMARY_FILENAME,
    attendance_summary,
    students_csv,
    students_csv_filename,
)
from .streaming import generate_mjpeg_frames
from .system import AttendanceSystem
from .utils.timing import display_datetime, format_uptime

logger = get_logger(__name__)


def _attachment(body: str, mimetype: str, filename: str) -> Response:
    return Response(
        body,
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )


def create_app(system: AttendanceSystem) -> Flask:
    """
    Create and configure Flask application.

    Args:
        system: Attendance system served by the app

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    CORS(app)
    app.config['ATTENDANCE_SYSTEM'] = system

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error: AttendanceError):
        return jsonify({'error': str(error)}), error.status_code

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError('Expected a JSON object body')
        return data

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'station': system.config.station_id,
            'uptime': format_uptime(time.time() - system.started_at),
            'modelsLoaded': system.models_loaded,
            'webcam': system.webcam_active,
            'recognizing': system.is_recognizing,
        })

    @app.route('/video_feed')
    def video_feed():
        """Stream MJPEG preview."""
        if not system.webcam_active:
            return jsonify({'error': 'Webcam not available'}), 503
        return Response(
            generate_mjpeg_frames(system.preview),
            mimetype='multipart/x-mixed-replace; boundary=frame'
        )

    @app.route('/api/status')
    def status():
        return jsonify({
            'status': system.status.current(),
            'datetime': display_datetime(datetime.now()),
            'lastConfirmation': system.status.last_confirmation(),
            'history': system.status.history()[-10:],
            'recognizing': system.is_recognizing,
            'modelsLoaded': system.models_loaded,
            'captureReady': system.pending_capture is not None,
        })

    @app.route('/api/instructions')
    def instructions():
        return jsonify({'show': system.first_visit()})

    @app.route('/api/subjects')
    def subjects():
        return jsonify({
            'subjects': [{'code': code, 'label': label} for code, label in system.subjects.items()],
            'selected': system.selected_subject,
        })

    @app.route('/api/subjects/selected', methods=['PUT'])
    def select_subject():
        code = system.select_subject(str(_json_body().get('subject', '')))
        return jsonify({'selected': code})

    @app.route('/api/capture', methods=['POST'])
    def capture():
        pending = system.capture_face()
        return jsonify({
            'captured': True,
            'photo': pending.image,
            'descriptorLength': len(pending.descriptor),
            'demoMode': not system.models_loaded,
        })

    @app.route('/api/students', methods=['GET'])
    def list_students():
        term = request.args.get('search', '')
        found = system.students.search(term)
        return jsonify({
            'students': [s.summary() for s in found],
            'total': len(system.students),
        })

    @app.route('/api/students', methods=['POST'])
    def register_student():
        data = _json_body()
        student = system.register_student(
            str(data.get('id', '')),
            str(data.get('name', '')),
            str(data.get('course', '')),
        )
        return jsonify(student.summary()), 201

    @app.route('/api/students/<student_id>', methods=['GET'])
    def view_student(student_id: str):
        return jsonify(system.students.get(student_id).summary())

    @app.route('/api/students/<student_id>', methods=['DELETE'])
    def delete_student(student_id: str):
        student = system.delete_student(student_id)
        return jsonify({'deleted': student.id})

    @app.route('/api/attendance')
    def attendance():
        subject = request.args.get('subject') or system.selected_subject
        if subject not in system.subjects:
            raise ValidationError(f'Unknown subject: {subject}')
        records = system.today_attendance(subject)
        return jsonify({
            'subject': subject,
            'subjectText': system.subjects[subject],
            'records': [r.to_dict() for r in records],
        })

    @app.route('/api/statistics')
    def statistics():
        return jsonify(system.statistics())

    @app.route('/api/recognition/start', methods=['POST'])
    def start_recognition():
        started = system.start_recognition()
        return jsonify({'recognizing': True, 'started': started})

    @app.route('/api/recognition/stop', methods=['POST'])
    def stop_recognition():
        stopped = system.stop_recognition()
        return jsonify({'recognizing': False, 'stopped': stopped})

    @app.route('/api/export/students.csv')
    def export_students():
        now = datetime.now()
        body = students_csv(system.students.all())
        system.status.update('✅ Data exported successfully', 'success')
        return _attachment(body, 'text/csv', students_csv_filename(now))

    @app.route('/api/export/summary.txt')
    def export_summary():
        body = attendance_summary(
            system.students.all(),
            system.ledger.all(),
            list(system.subjects.items()),
            datetime.now(),
        )
        return _attachment(body, 'text/plain', SUMMARY_FILENAME)

    @app.route('/api/data', methods=['DELETE'])
    def clear_all():
        system.clear_all()
        return jsonify({'cleared': True})

    return app
