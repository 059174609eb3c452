import pytest

from orrery.barycenter import accumulate_mass_center, set_barycenter, should_balance
from orrery.data_models import Body


def make_central(mass=1e30, **kw):
    body = Body("Sun", mass, **kw)
    body.is_central = True
    return body


def test_single_body_balances_central_velocity_and_position():
    central = make_central(1000.0)
    planet = Body("Planet", 1.0, position=(100.0, 0.0, 0.0), velocity=(0.0, 30.0, 0.0))

    assert set_barycenter(central, [central, planet])

    assert central.velocity == pytest.approx((0.0, -30.0 / 1000.0, 0.0))
    assert central.position == pytest.approx((-100.0 / 1000.0, 0.0, 0.0))


def test_central_speed_is_mass_ratio_times_body_speed():
    central = make_central(5.0e30)
    planet = Body("Planet", 2.0e24, position=(1.5e11, 0.0, 0.0), velocity=(3.0e3, 4.0e3, 0.0))
    set_barycenter(central, [planet])
    vx, vy, vz = central.velocity
    assert (vx * vx + vy * vy + vz * vz) ** 0.5 == pytest.approx(2.0e24 / 5.0e30 * 5.0e3)
    assert vx < 0 and vy < 0


def test_mass_center_is_weighted_average():
    center = accumulate_mass_center([
        Body("A", 1.0, position=(0.0, 0.0, 0.0), velocity=(1.0, 0.0, 0.0)),
        Body("B", 3.0, position=(4.0, 0.0, 0.0), velocity=(0.0, 2.0, 0.0)),
    ])
    assert center.mass == 4.0
    assert center.pos == pytest.approx((3.0, 0.0, 0.0))
    assert center.momentum == pytest.approx((1.0, 6.0, 0.0))


@pytest.mark.parametrize("use_physics, use_barycenter, still", [
    (False, True, False),
    (True, False, False),
    (True, True, True),
])
def test_skipped_when_disabled(use_physics, use_barycenter, still):
    central = make_central(1000.0, is_still=still)
    planet = Body("Planet", 1.0, position=(100.0, 0.0, 0.0), velocity=(0.0, 30.0, 0.0))

    assert not set_barycenter(central, [planet], use_physics, use_barycenter)
    assert central.position == (0.0, 0.0, 0.0)
    assert central.velocity == (0.0, 0.0, 0.0)
    assert planet.velocity == (0.0, 30.0, 0.0)
    assert not should_balance(central, use_physics, use_barycenter)


def test_zero_mass_is_a_no_op():
    central = make_central(1000.0)
    probe = Body("Probe", 0.0, position=(5.0, 0.0, 0.0), velocity=(0.0, 1.0, 0.0))
    assert not set_barycenter(central, [probe])
    assert central.velocity == (0.0, 0.0, 0.0)
    assert probe.position == (5.0, 0.0, 0.0)


def test_no_other_bodies_is_a_no_op():
    central = make_central(1000.0)
    assert not set_barycenter(central, [central])


def test_dominant_central_body_is_center_of_rotation():
    central = make_central(1e30)
    planet = Body("Planet", 1.0, position=(1e11, 0.0, 0.0), velocity=(0.0, 3e4, 0.0))
    set_barycenter(central, [planet])

    assert planet.position == pytest.approx((1e11 + central.position[0], 0.0, 0.0))
    assert planet.velocity == pytest.approx((0.0, 3e4 + central.velocity[1], 0.0))


def test_comparable_mass_detaches_from_central_frame():
    central = make_central(6e24)
    central.name = "Earth"
    moon = Body("Moon", 7e22, relative_to="Earth", position=(3.8e8, 0.0, 0.0), velocity=(0.0, 1e3, 0.0))
    set_barycenter(central, [moon])

    assert moon.relative_to is None
    # position stays in the (now barycentric) frame; velocity picks up the central body's motion
    assert moon.position == (3.8e8, 0.0, 0.0)
    assert moon.velocity == pytest.approx((0.0, 1e3 * (1 - 7e22 / 6e24), 0.0))


def test_satellites_of_other_bodies_are_left_alone():
    central = make_central(1e30)
    earth = Body("Earth", 6e24, position=(1.5e11, 0.0, 0.0), velocity=(0.0, 3e4, 0.0))
    moon = Body("Moon", 7e22, relative_to="Earth", position=(1.504e11, 0.0, 0.0), velocity=(0.0, 3.1e4, 0.0))
    set_barycenter(central, [earth, moon])

    assert moon.relative_to == "Earth"
    assert moon.position == (1.504e11, 0.0, 0.0)
    assert moon.velocity == (0.0, 3.1e4, 0.0)
    assert earth.velocity != (0.0, 3e4, 0.0)
