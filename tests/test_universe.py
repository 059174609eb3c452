from concurrent.futures import Future
from datetime import timedelta

import pytest

from orrery.constants import KM, USE_PHYSICS_BY_DEFAULT
from orrery.errors import ScenarioError
from orrery.physics import Ticker
from orrery.settings import DATE_ID, DELTA_T_ID, START_ID
from orrery.time_model import DateDisplay
from orrery.universe import SimulationState, Universe

from conftest import EARTH, MOON, START_DATE, SUN, FakeScene


def make_universe(scene, date_display):
    return Universe(lambda: scene, Ticker(), date_display)


@pytest.fixture
def universe(fake_scene, date_display, make_scenario):
    u = make_universe(fake_scene, date_display)
    u.init(make_scenario())
    return u


def test_init_reaches_paused_and_draws_once(universe, fake_scene, date_display):
    assert universe.state is SimulationState.PAUSED
    assert fake_scene.calls == ["create_stage", "draw"]
    assert [b.name for b in fake_scene.bodies] == ["Sun", "Earth"]
    assert fake_scene.central_body.name == "Sun"
    assert date_display.get_date() == START_DATE


def test_init_twice_is_an_error(universe, make_scenario):
    with pytest.raises(RuntimeError):
        universe.init(make_scenario())


def test_inconsistent_scenario_leaves_universe_untouched(fake_scene, date_display, make_scenario):
    u = make_universe(fake_scene, date_display)
    scenario = make_scenario({"Sun": SUN, "Moon": MOON})
    with pytest.raises(ScenarioError):
        u.init(scenario)
    assert u.state is SimulationState.UNINITIALIZED
    assert u.scene is None
    assert fake_scene.calls == []


def test_massless_orbit_without_period_is_rejected(fake_scene, date_display, make_scenario):
    u = make_universe(fake_scene, date_display)
    with pytest.raises(ScenarioError, match="period"):
        u.init(make_scenario({"A": {"mass": 0}, "B": {"mass": 0, "orbit": {"a": 10}}}))
    assert u.state is SimulationState.UNINITIALIZED
    assert u.scene is None
    assert u.registry is None
    assert fake_scene.calls == []


class BrokenStageScene(FakeScene):
    def create_stage(self, scenario):
        super().create_stage(scenario)
        raise RuntimeError("no display")


def test_failed_setup_is_rolled_back(fake_scene, date_display, make_scenario):
    broken = BrokenStageScene()
    u = make_universe(broken, date_display)
    with pytest.raises(RuntimeError, match="no display"):
        u.init(make_scenario())

    assert broken.calls == ["create_stage", "kill"]
    assert u.state is SimulationState.UNINITIALIZED
    assert u.scene is None
    assert u.registry is None
    assert u.scenario is None
    assert u.settings == {}
    assert u.ticker.bodies == []

    u.scene_factory = lambda: fake_scene
    u.init(make_scenario())
    assert u.state is SimulationState.PAUSED


def test_scene_pending_keeps_universe_ready(date_display, make_scenario):
    ready = Future()
    scene = FakeScene(ready)
    u = make_universe(scene, date_display)
    assert u.init(make_scenario()) is ready

    assert u.state is SimulationState.READY
    assert u.frame_tick()
    u.play()
    assert u.state is SimulationState.READY
    assert scene.calls == ["create_stage"]

    ready.set_result(scene)
    assert u.state is SimulationState.PAUSED
    assert scene.calls == ["create_stage", "draw"]


def test_failed_scene_never_leaves_ready(date_display, make_scenario):
    ready = Future()
    u = make_universe(FakeScene(ready), date_display)
    u.init(make_scenario())
    ready.set_exception(RuntimeError("no display"))
    assert u.state is SimulationState.READY


def test_paused_frame_draws_only_on_request(universe, fake_scene):
    fake_scene.calls.clear()
    assert universe.frame_tick()
    assert fake_scene.calls == ["update_camera"]

    universe.request_draw()
    universe.frame_tick()
    universe.frame_tick()
    assert fake_scene.calls == ["update_camera", "update_camera", "draw", "update_camera"]
    assert not universe.draw_requested


def test_playing_advances_time_and_shows_date(universe, fake_scene, date_display):
    earth = universe.get_body("Earth")
    before = earth.position
    fake_scene.calls.clear()

    universe.play()
    universe.frame_tick()
    universe.frame_tick()

    assert universe.time.epoch_time == 2 * 3600.0
    assert date_display.get_date() == START_DATE + timedelta(hours=2)
    assert fake_scene.calls == ["update_camera", "draw"] * 2
    assert earth.position != before


def test_toggle_and_stop(universe, fake_scene):
    universe.toggle_play()
    assert universe.is_playing()
    fake_scene.calls.clear()
    universe.stop()
    assert universe.state is SimulationState.PAUSED
    assert fake_scene.calls == ["update_camera", "draw"]
    universe.toggle_play()
    universe.stop(skip_render=True)
    assert fake_scene.calls == ["update_camera", "draw"]


def test_kill_is_terminal(universe, fake_scene, date_display):
    universe.play()
    universe.kill()
    universe.kill()
    assert fake_scene.calls.count("kill") == 1
    assert date_display.get_date() is None
    assert universe.killed

    calls = list(fake_scene.calls)
    assert universe.frame_tick() is False
    universe.play()
    universe.reset(START_DATE)
    assert universe.state is SimulationState.KILLED
    assert fake_scene.calls == calls
    assert universe.get_body("Sun") is None


def test_reset_is_ignored_while_playing(universe, fake_scene):
    universe.play()
    universe.frame_tick()
    universe.reset(START_DATE + timedelta(days=3))
    assert "on_date_reset" not in fake_scene.calls
    assert universe.time.epoch_time == 3600.0


def test_reset_matches_a_fresh_start_at_that_date(fake_scene, date_display, make_scenario):
    bodies = {"Sun": SUN, "Earth": EARTH, "Moon": MOON}
    target = START_DATE + timedelta(days=40)

    u = make_universe(fake_scene, date_display)
    u.init(make_scenario(bodies))
    u.play()
    for _ in range(5):
        u.frame_tick()
    u.pause()
    u.reset(target)

    fresh = make_universe(FakeScene(), DateDisplay(target))
    fresh.init(make_scenario(bodies))

    assert "on_date_reset" in fake_scene.calls
    assert u.draw_requested
    assert date_display.get_date() == target
    assert u.time.epoch_time == 0.0
    for name in bodies:
        assert u.get_body(name).position == pytest.approx(fresh.get_body(name).position)
        assert u.get_body(name).velocity == pytest.approx(fresh.get_body(name).velocity)


def test_date_change_pauses_then_resets(universe, date_display):
    target = START_DATE + timedelta(days=1)
    universe.play()
    universe.on_date_change(target)
    assert universe.state is SimulationState.PAUSED
    assert date_display.get_date() == target


def test_dimensions_come_from_orbits_and_radii(fake_scene, date_display, make_scenario):
    u = make_universe(fake_scene, date_display)
    u.init(make_scenario({
        "Sun": {"mass": 100, "radius": 1},
        "A": {"mass": 1, "radius": 5, "orbit": {"a": 10, "period": 1}},
        "B": {"mass": 1, "radius": 2, "orbit": {"a": 50, "period": 2}},
        "C": {"mass": 0, "relative_to": "A", "orbit": {"a": 1, "period": 0.1}},
    }))
    assert fake_scene.dimension == (50 * KM, 10 * KM, 5 * KM)
    assert u.size == 50 * KM


def test_masses_forced_unless_calculate_all(make_scenario, date_display):
    u = make_universe(FakeScene(), date_display)
    u.init(make_scenario())
    assert u.get_body("Earth").mass == 1.0
    assert u.get_body("Sun").mass == SUN["mass"]

    full = make_universe(FakeScene(), DateDisplay(START_DATE))
    full.init(make_scenario(calculate_all=True))
    assert full.get_body("Earth").mass == EARTH["mass"]


def test_scenario_settings_reach_ticker_and_camera(fake_scene, date_display, make_scenario):
    u = make_universe(fake_scene, date_display)
    u.init(make_scenario(
        seconds_per_tick={"min": 0, "max": 100, "initial": 50},
        calculations_per_tick=4,
        default_gui_settings={"camera": {"follow": "Earth", "meters_per_pixel": 1e8}},
        forced_gui_settings={"camera": {"follow": "Sun"}},
    ), {"camera": {"meters_per_pixel": 5e8}})
    assert u.ticker.get_delta_t() == 50
    assert u.ticker.calculations_per_tick == 4
    assert fake_scene.camera_settings == {"follow": "Sun", "meters_per_pixel": 5e8}


def test_use_physics_default_and_override(make_scenario, date_display):
    u = make_universe(FakeScene(), date_display)
    u.init(make_scenario())
    assert u.use_physics is USE_PHYSICS_BY_DEFAULT

    kinematic = make_universe(FakeScene(), DateDisplay(START_DATE))
    kinematic.init(make_scenario(use_physics=False))
    assert kinematic.use_physics is False


def test_controls(universe):
    controls = universe.controls()
    assert set(controls) == {START_ID, DATE_ID, DELTA_T_ID}
    assert controls[DELTA_T_ID].kind == "slider"
    assert controls[DELTA_T_ID].initial == universe.scenario.seconds_per_tick
    assert controls[DATE_ID].initial == START_DATE
    assert controls[START_ID].initial is False

    controls[DELTA_T_ID].on_change(7200)
    assert universe.ticker.get_delta_t() == 7200
    controls[START_ID].on_change(True)
    assert universe.is_playing()


def test_central_alias(universe):
    assert universe.get_body("central") is universe.get_body("Sun")
    assert universe.get_body() is universe.get_body("Sun")
    assert universe.get_scene() is not None


def test_start_control_follows_the_requested_state(universe):
    start = universe.controls()[START_ID]
    universe.play()
    start.on_change(True)
    assert universe.is_playing()
    start.on_change(False)
    assert universe.state is SimulationState.PAUSED
    start.on_change(False)
    assert universe.state is SimulationState.PAUSED
    start.on_change(None)
    assert universe.is_playing()


def test_date_picked_while_scene_loads_is_kept(date_display, make_scenario):
    ready = Future()
    scene = FakeScene(ready)
    u = make_universe(scene, date_display)
    u.init(make_scenario())
    target = START_DATE + timedelta(days=12)

    u.on_date_change(target)
    assert u.state is SimulationState.READY
    assert "on_date_reset" in scene.calls
    assert date_display.get_date() == target

    ready.set_result(scene)
    assert u.state is SimulationState.PAUSED
    assert date_display.get_date() == target
    assert u.time.display_date() == target
