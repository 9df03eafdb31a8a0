from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

import numpy as np
import pytest

from attendance_service.app import create_app
from attendance_service.config import Config, parse_subjects
from attendance_service.face_app import DemoAnalyzer, Detection
from attendance_service.storage import LocalStore
from attendance_service.system import AttendanceSystem


def make_config(tmp_path, **overrides) -> Config:
    config = Config(
        station_id="test",
        http_host="127.0.0.1",
        http_port=5001,
        camera_index=0,
        frame_width=640,
        frame_height=480,
        store_file=str(tmp_path / "store.json"),
        match_threshold=0.6,
        recognition_interval_seconds=0.01,
        insightface_model="buffalo_l",
        insightface_det_size=(640, 640),
        demo_mode=False,
        descriptor_size=4,
        demo_mark_probability=0.7,
        face_image_size=200,
        face_image_quality=80,
        subjects=parse_subjects("math:Mathematics,physics:Physics"),
        debug_mode=False,
    )
    return replace(config, **overrides)


class FakeWebcam:
    """Returns the same grey frame on every read."""

    def __init__(self, width: int = 640, height: int = 480):
        self.frame = np.full((height, width, 3), 127, dtype=np.uint8)
        self.is_open = True
        self.reads = 0

    def read(self) -> np.ndarray:
        self.reads += 1
        return self.frame.copy()

    def release(self) -> None:
        self.is_open = False


class FakeAnalyzer:
    """Face analyzer that returns a scripted list of descriptors."""

    models_loaded = True

    def __init__(self, descriptors: Optional[List[List[float]]] = None):
        self.descriptors = descriptors or []

    def _detection(self, descriptor, index: int) -> Detection:
        x = 50 + index * 120
        return Detection(
            bbox=np.array([x, 50, x + 100, 150], dtype=np.float32),
            score=0.9 - index * 0.1,
            descriptor=np.asarray(descriptor, dtype=np.float32),
        )

    def detect_all(self, frame):
        return [self._detection(d, i) for i, d in enumerate(self.descriptors)]

    def detect_single(self, frame):
        detections = self.detect_all(frame)
        return max(detections, key=lambda d: d.score) if detections else None


@pytest.fixture
def config(tmp_path) -> Config:
    return make_config(tmp_path)


@pytest.fixture
def store(config) -> LocalStore:
    return LocalStore(config.store_file)


@pytest.fixture
def webcam() -> FakeWebcam:
    return FakeWebcam()


@pytest.fixture
def analyzer() -> FakeAnalyzer:
    return FakeAnalyzer([[0.1, 0.2, 0.3, 0.4]])


@pytest.fixture
def system(config, store, analyzer, webcam) -> AttendanceSystem:
    system = AttendanceSystem(config, store, analyzer, webcam, rng=np.random.default_rng(7))
    yield system
    system.shutdown()


@pytest.fixture
def demo_system(config, store, webcam) -> AttendanceSystem:
    rng = np.random.default_rng(7)
    system = AttendanceSystem(
        config, store, DemoAnalyzer(config.descriptor_size, rng=rng), webcam, rng=rng
    )
    yield system
    system.shutdown()


@pytest.fixture
def client(system):
    app = create_app(system)
    app.config["TESTING"] = True
    return app.test_client()
