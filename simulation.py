# simulation.py
"""
Handles the core simulation loop.

This module defines the Simulation class, which owns the magnet walkers and
the iron particles and advances them by one frame at a time: magnets walk
first, then every particle gathers the force of every magnet and integrates.
The renderer only ever sees read-only particle snapshots; the magnets stay
invisible.
"""
import logging
import numpy as np
from typing import Dict, Any, Iterator, NamedTuple, Tuple
from magnet import MagnetSystem
from noise_field import PerlinNoise
from particle import ParticleSystem
from vector import Bounds, heading

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, params: Dict[str, Any]):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "seed": int
#         - "width": float, "height": float (default 800 x 600)
#         - "magnet_count": int, "particle_count": int
#         - plus the keys read by MagnetSystem, ParticleSystem and PerlinNoise.
#     - Outputs: None
#     - Side Effects: Builds the noise field, magnets and particles from a
#       single seed.
#     - Raises: ValueError if width, height or either count is not positive.
#
#   - step(self) -> None:
#     - Side Effects: Walks magnets, updates particles, increments
#       self.frame_counter.
#     - Invariants: Magnet state is not modified while particle forces are
#       computed. Particle and magnet counts never change.
#
#   - snapshot(self) -> ParticleSnapshot:
#     - Outputs: read-only copies of positions (N, 2), headings (N,) and
#       tints (N, 4).


class ParticleSnapshot(NamedTuple):
    positions: np.ndarray
    headings: np.ndarray
    tints: np.ndarray


def _read_only(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


class Simulation:
    """
    Owns the magnet and particle pools and steps them frame by frame.
    """
    def __init__(self, params: Dict[str, Any]):
        """
        Initializes the simulation environment.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
        """
        self.seed = params.get('seed')
        self.bounds = Bounds(
            float(params.get('width', 800)),
            float(params.get('height', 600))
        )
        # Pools are sized from the truncated counts, so those are what get checked.
        magnet_count = int(params.get('magnet_count', 5))
        particle_count = int(params.get('particle_count', 2000))

        # Validate sizes before allocating anything.
        if self.bounds.width <= 0 or self.bounds.height <= 0:
            msg = (
                f"Configuration error: simulation bounds must be positive, "
                f"got {self.bounds.width}x{self.bounds.height}."
            )
            logging.critical(msg)
            raise ValueError(msg)
        if magnet_count <= 0 or particle_count <= 0:
            msg = (
                f"Configuration error: magnet_count and particle_count must be positive, "
                f"got {magnet_count} and {particle_count}."
            )
            logging.critical(msg)
            raise ValueError(msg)

        params = dict(params, magnet_count=magnet_count, particle_count=particle_count)

        # One master seed feeds independent streams for each component, so a
        # fixed seed reproduces the whole run.
        noise_seed, magnet_seed, particle_seed = np.random.SeedSequence(self.seed).spawn(3)
        noise = PerlinNoise(np.random.default_rng(noise_seed), params)
        self._magnets = MagnetSystem(params, self.bounds, np.random.default_rng(magnet_seed), noise)
        self.particles = ParticleSystem(params, self.bounds, np.random.default_rng(particle_seed))

        # Mirrors a host frame count, which starts at 1 on the first frame.
        self.frame_counter = 1

        logging.info(
            f"Simulation initialized: {self.bounds.width:.0f}x{self.bounds.height:.0f}, "
            f"{self._magnets.magnet_count} magnets, {self.particles.particle_count} particles, "
            f"seed {self.seed}."
        )

    def step(self) -> None:
        """
        Executes one frame of the simulation.
        """
        # 1. Move the walkers. This must finish before any particle reads them.
        self._magnets.walk()

        # 2. Field of every magnet at every particle (Numba, parallel over particles)
        forces = self._magnets.force_at(self.particles.positions)
        self.particles.accumulate_force(forces)

        # 3. Integrate, clamp and reset
        self.particles.step(self.bounds, self.frame_counter)

        self.frame_counter += 1

    def snapshot(self) -> ParticleSnapshot:
        """
        Read-only view of what a renderer needs to draw each particle.
        """
        return ParticleSnapshot(
            positions=_read_only(self.particles.positions.copy()),
            headings=_read_only(heading(self.particles.velocities)),
            tints=_read_only(self.particles.tints.copy()),
        )

    def iter_particles(self) -> Iterator[Tuple[Tuple[float, float], float, Tuple[int, ...]]]:
        """Yields (position, heading, tint) for every particle."""
        snap = self.snapshot()
        for pos, angle, tint in zip(snap.positions, snap.headings, snap.tints):
            yield (float(pos[0]), float(pos[1])), float(angle), tuple(int(c) for c in tint)
