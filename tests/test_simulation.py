"""Tests for the simulation orchestration."""
import numpy as np
import pytest

from simulation import ParticleSnapshot, Simulation


def small_params(**overrides):
    params = {
        'seed': 123,
        'width': 400,
        'height': 300,
        'magnet_count': 3,
        'particle_count': 150,
    }
    params.update(overrides)
    return params


class TestConstruction:
    @pytest.mark.parametrize("key", ['width', 'height', 'magnet_count', 'particle_count'])
    def test_rejects_non_positive(self, key):
        with pytest.raises(ValueError):
            Simulation(small_params(**{key: 0}))

    @pytest.mark.parametrize("key, value", [('magnet_count', 0.5), ('particle_count', 0.9)])
    def test_rejects_fractional_counts_below_one(self, key, value):
        with pytest.raises(ValueError):
            Simulation(small_params(**{key: value}))

    def test_fractional_counts_truncated(self):
        sim = Simulation(small_params(magnet_count=2.7, particle_count=10.2))
        assert sim.particles.particle_count == 10
        assert sim.snapshot().positions.shape == (10, 2)
        sim.step()

    def test_rejects_negative_bounds(self):
        with pytest.raises(ValueError):
            Simulation(small_params(width=-10))

    def test_defaults(self):
        sim = Simulation({'seed': 1})
        assert sim.bounds == (800.0, 600.0)
        assert sim.particles.particle_count == 2000
        assert sim.particles.max_speed == 8.0
        assert sim.frame_counter == 1


class TestStep:
    def test_frame_counter_advances(self):
        sim = Simulation(small_params())
        for _ in range(5):
            sim.step()
        assert sim.frame_counter == 6

    def test_invariants_hold_every_step(self):
        sim = Simulation(small_params())
        for _ in range(200):
            sim.step()
            assert np.all(sim.particles.speeds() <= sim.particles.max_speed + 1e-9)
            assert sim.bounds.contains(sim.particles.positions).all()
            assert np.all(np.isfinite(sim.particles.positions))
            assert not sim.particles.accelerations.any()

    def test_deterministic_for_seed(self):
        a = Simulation(small_params())
        b = Simulation(small_params())
        for _ in range(60):
            a.step()
            b.step()
        np.testing.assert_array_equal(a.particles.positions, b.particles.positions)
        np.testing.assert_array_equal(a.particles.velocities, b.particles.velocities)

    def test_different_seeds_diverge(self):
        a = Simulation(small_params(seed=1))
        b = Simulation(small_params(seed=2))
        a.step()
        b.step()
        assert not np.array_equal(a.particles.positions, b.particles.positions)

    def test_particles_are_deflected(self):
        sim = Simulation(small_params(particle_count=50))
        sim.particles.velocities[:] = 0.0
        sim.step()
        assert sim.particles.velocities.any()

    def test_forced_reset_on_frame_600(self):
        sim = Simulation(small_params(reset_probability=1.0))
        for _ in range(599):
            sim.step()
        assert sim.particles.velocities.any()
        sim.step()
        np.testing.assert_array_equal(sim.particles.velocities, 0.0)


class TestSnapshot:
    def test_contents(self):
        sim = Simulation(small_params())
        sim.step()
        snap = sim.snapshot()
        assert isinstance(snap, ParticleSnapshot)
        assert snap.positions.shape == (150, 2)
        assert snap.headings.shape == (150,)
        assert snap.tints.shape == (150, 4)
        np.testing.assert_array_equal(snap.positions, sim.particles.positions)
        np.testing.assert_allclose(
            snap.headings,
            np.arctan2(sim.particles.velocities[:, 1], sim.particles.velocities[:, 0])
        )

    def test_read_only(self):
        sim = Simulation(small_params())
        snap = sim.snapshot()
        with pytest.raises(ValueError):
            snap.positions[0, 0] = 1.0
        with pytest.raises(ValueError):
            snap.tints[0, 0] = 1

    def test_detached_from_state(self):
        sim = Simulation(small_params())
        snap = sim.snapshot()
        before = snap.positions.copy()
        sim.step()
        np.testing.assert_array_equal(snap.positions, before)

    def test_iter_particles(self):
        sim = Simulation(small_params(particle_count=4))
        items = list(sim.iter_particles())
        assert len(items) == 4
        position, angle, tint = items[0]
        assert len(position) == 2
        assert isinstance(angle, float)
        assert tint == (200, 200, 255, 150)

    def test_magnets_not_exposed(self):
        sim = Simulation(small_params())
        assert not hasattr(sim, 'magnets')
        assert 'magnet' not in ParticleSnapshot._fields
