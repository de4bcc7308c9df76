"""Tests for the iron particle pool."""
import logging

import numpy as np
import pytest

from constants import DEFAULT_FILING_TINT
from particle import ParticleSystem
from vector import Bounds, magnitude

BOUNDS = Bounds(800.0, 600.0)


def make_particles(count=50, seed=0, **overrides):
    params = {'particle_count': count}
    params.update(overrides)
    return ParticleSystem(params, BOUNDS, np.random.default_rng(seed))


class TestInitialState:
    def test_shapes(self):
        p = make_particles(count=10)
        assert p.positions.shape == (10, 2)
        assert p.velocities.shape == (10, 2)
        assert p.accelerations.shape == (10, 2)
        assert p.tints.shape == (10, 4)

    def test_spawn_inside_bounds(self):
        p = make_particles(count=500)
        assert BOUNDS.contains(p.positions).all()
        assert np.all(np.abs(p.velocities) <= 1.0)
        assert not p.accelerations.any()

    def test_default_tint(self):
        p = make_particles(count=3)
        np.testing.assert_array_equal(p.tints, [DEFAULT_FILING_TINT] * 3)

    def test_rgb_tint_gets_opaque_alpha(self):
        p = make_particles(count=2, particle_tint=[10, 20, 30])
        np.testing.assert_array_equal(p.tints[0], [10, 20, 30, 255])

    def test_bad_tint_falls_back(self, caplog):
        with caplog.at_level(logging.ERROR):
            p = make_particles(count=2, particle_tint=[999, 'x'])
        np.testing.assert_array_equal(p.tints[0], DEFAULT_FILING_TINT)
        assert "particle_tint" in caplog.text

    def test_rejects_non_positive_max_speed(self):
        with pytest.raises(ValueError):
            make_particles(max_speed=0.0)


class TestAccumulateForce:
    def test_forces_add_up(self):
        p = make_particles(count=4)
        p.accumulate_force(np.ones((4, 2)))
        p.accumulate_force(np.full((4, 2), 0.5))
        np.testing.assert_allclose(p.accelerations, 1.5)


class TestStep:
    def test_integration_order(self):
        p = make_particles(count=1)
        p.positions[0] = [100.0, 100.0]
        p.velocities[0] = [1.0, 0.0]
        p.accumulate_force(np.array([[0.5, 2.0]]))
        p.step(BOUNDS, frame_counter=1)

        # Moved by the undamped velocity, then damped for the next frame.
        np.testing.assert_allclose(p.positions[0], [101.5, 102.0])
        np.testing.assert_allclose(p.velocities[0], [1.5 * 0.95, 2.0 * 0.95])
        assert not p.accelerations.any()

    def test_speed_clamped_before_move(self):
        p = make_particles(count=1)
        p.positions[0] = [400.0, 300.0]
        p.velocities[0] = [0.0, 0.0]
        p.accumulate_force(np.array([[30.0, 40.0]]))
        p.step(BOUNDS, frame_counter=1)
        np.testing.assert_allclose(p.positions[0], [400.0 + 4.8, 300.0 + 6.4])
        assert magnitude(p.velocities[0]) == pytest.approx(8.0 * 0.95)

    def test_speed_invariant_under_large_forces(self):
        p = make_particles(count=200, seed=3)
        rng = np.random.default_rng(11)
        for frame in range(1, 50):
            p.accumulate_force(rng.normal(scale=50.0, size=(200, 2)))
            p.step(BOUNDS, frame)
            assert np.all(p.speeds() <= p.max_speed + 1e-9)

    def test_leaving_bounds_resets(self):
        p = make_particles(count=1)
        p.positions[0] = [799.0, 300.0]
        p.velocities[0] = [5.0, 0.0]
        p.step(BOUNDS, frame_counter=1)
        assert BOUNDS.contains(p.positions).all()
        np.testing.assert_array_equal(p.velocities[0], [0.0, 0.0])

    def test_always_inside_after_step(self):
        p = make_particles(count=300, seed=4)
        rng = np.random.default_rng(12)
        for frame in range(1, 100):
            p.accumulate_force(rng.normal(scale=5.0, size=(300, 2)))
            p.step(BOUNDS, frame)
            assert BOUNDS.contains(p.positions).all()

    def test_stochastic_reset_on_trigger_frame(self):
        p = make_particles(count=20, reset_probability=1.0)
        p.step(BOUNDS, frame_counter=600)
        np.testing.assert_array_equal(p.velocities, np.zeros((20, 2)))

    def test_no_stochastic_reset_off_trigger_frame(self):
        p = make_particles(count=20, reset_probability=1.0)
        p.positions[:] = [400.0, 300.0]
        p.velocities[:] = [1.0, 0.0]
        p.step(BOUNDS, frame_counter=599)
        np.testing.assert_allclose(p.velocities, np.tile([0.95, 0.0], (20, 1)))

    def test_custom_reset_interval(self):
        p = make_particles(count=5, reset_probability=1.0, reset_interval=10)
        p.step(BOUNDS, frame_counter=20)
        assert not p.velocities.any()

    def test_zero_probability_never_resets_inside(self):
        p = make_particles(count=5, reset_probability=0.0)
        p.positions[:] = [400.0, 300.0]
        p.velocities[:] = [0.0, 1.0]
        p.step(BOUNDS, frame_counter=600)
        np.testing.assert_allclose(p.positions, np.tile([400.0, 301.0], (5, 1)))


class TestReset:
    def test_reset_mask(self):
        p = make_particles(count=4)
        p.velocities[:] = 1.0
        p.accelerations[:] = 2.0
        mask = np.array([True, False, True, False])
        p.reset(BOUNDS, mask)
        np.testing.assert_array_equal(p.velocities[mask], 0.0)
        np.testing.assert_array_equal(p.velocities[~mask], 1.0)
        # Reset leaves the accumulator alone.
        np.testing.assert_array_equal(p.accelerations, 2.0)

    def test_reset_all(self):
        p = make_particles(count=30)
        p.reset(BOUNDS)
        assert not p.velocities.any()
        assert BOUNDS.contains(p.positions).all()
