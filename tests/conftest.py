from datetime import datetime, timezone

import pytest

from orrery.scenario_loader import parse_scenario
from orrery.time_model import DateDisplay

START_DATE = datetime(2024, 3, 20, 0, 0, 0, tzinfo=timezone.utc)


class FakeScene:
    """Records what the universe asks of the renderer."""

    def __init__(self, ready=None):
        self.ready = ready
        self.calls = []
        self.bodies = []
        self.central_body = None
        self.dimension = None
        self.camera_settings = None

    def create_stage(self, scenario):
        self.calls.append("create_stage")
        return self.ready

    def add_body(self, body):
        self.bodies.append(body)

    def set_central_body(self, body):
        self.central_body = body

    def set_dimension(self, outer, inner, largest_radius):
        self.dimension = (outer, inner, largest_radius)

    def set_camera_defaults(self, settings):
        self.camera_settings = settings

    def draw(self):
        self.calls.append("draw")

    def update_camera(self):
        self.calls.append("update_camera")

    def on_date_reset(self):
        self.calls.append("on_date_reset")

    def kill(self):
        self.calls.append("kill")


SUN = {"mass": 1.98847e30, "radius": 696342}
EARTH = {
    "mass": 5.972e24,
    "radius": 6371,
    "orbit": {"a": 149598261, "e": 0.0167, "w": 102.9, "M": 357.5},
}
MOON = {
    "mass": 7.342e22,
    "radius": 1737.4,
    "relative_to": "Earth",
    "orbit": {"a": 384399, "e": 0.0549, "i": 5.1, "M": 135.3},
}


@pytest.fixture
def make_scenario():
    def _make(bodies=None, **options):
        data = {"bodies": bodies if bodies is not None else {"Sun": SUN, "Earth": EARTH}}
        data.update(options)
        return parse_scenario(data, "test")
    return _make


@pytest.fixture
def fake_scene():
    return FakeScene()


@pytest.fixture
def date_display():
    return DateDisplay(START_DATE)
