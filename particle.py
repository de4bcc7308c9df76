# particle.py
"""
Manages the state of all iron particles in the simulation.

This module defines the ParticleSystem class, which stores particle
kinetic state (position, velocity, accumulated force) in NumPy arrays and
applies integration, damping, boundary resets and the periodic stochastic
reset that keeps filings from clumping at the south poles forever.
"""
import logging
import numpy as np
from typing import Dict, Any, Optional
from constants import DEFAULT_FILING_TINT
from vector import Bounds, clamp_magnitude, magnitude

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, params: Dict[str, Any], bounds: Bounds, rng: np.random.Generator):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "particle_count": int (default 2000)
#         - "max_speed": float (default 8.0)
#         - "damping": float (default 0.95)
#         - "reset_interval": int (default 600)
#         - "reset_probability": float (default 0.1)
#         - "particle_tint": [r, g, b] or [r, g, b, a]
#           (default constants.DEFAULT_FILING_TINT)
#       - bounds: Bounds used for the initial spawn.
#       - rng: Generator for spawns, resets and the stochastic reset draw.
#     - Outputs: None
#     - Side Effects: Initializes internal NumPy arrays for particle state.
#     - Invariants:
#       - self.positions, self.velocities, self.accelerations are (N, 2) float64.
#       - self.tints is (N, 4) uint8.
#
#   - accumulate_force(self, forces) -> None:
#     - Side Effects: Adds forces to self.accelerations.
#
#   - step(self, bounds: Bounds, frame_counter: int) -> None:
#     - Side Effects: Integrates one frame and clears self.accelerations.
#     - Invariants: |velocity| <= max_speed and every position lies within
#       bounds once the call returns.
#
#   - reset(self, bounds: Bounds, mask=None) -> None:
#     - Side Effects: Re-spawns the selected particles uniformly within bounds
#       with zero velocity. Accelerations are left as they are.


class ParticleSystem:
    """
    A container for all iron particles, managing their state via NumPy arrays.
    """
    def __init__(self, params: Dict[str, Any], bounds: Bounds, rng: np.random.Generator):
        """
        Initializes the particle system.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
            bounds (Bounds): The rectangle particles are spawned in.
            rng (np.random.Generator): Source of all particle randomness.
        """
        self.particle_count = int(params.get('particle_count', 2000))
        self.max_speed = float(params.get('max_speed', 8.0))
        self.damping = float(params.get('damping', 0.95))
        self.reset_interval = int(params.get('reset_interval', 600))
        self.reset_probability = float(params.get('reset_probability', 0.1))
        self.rng = rng

        if self.max_speed <= 0 or self.reset_interval <= 0:
            msg = (
                f"Configuration error: max_speed and reset_interval must be positive; "
                f"got {self.max_speed} and {self.reset_interval}."
            )
            logging.critical(msg)
            raise ValueError(msg)

        # Initialize particle state arrays
        self.positions = bounds.sample(self.rng, self.particle_count)
        self.velocities = self.rng.uniform(-1.0, 1.0, size=(self.particle_count, 2))
        self.accelerations = np.zeros((self.particle_count, 2), dtype=np.float64)

        tint = self._parse_tint(params.get('particle_tint'))
        self.tints = np.tile(tint, (self.particle_count, 1))

        logging.info(f"ParticleSystem initialized with {self.particle_count} particles.")
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Velocities shape: {self.velocities.shape}, "
            f"Tints shape: {self.tints.shape}"
        )

    @staticmethod
    def _parse_tint(config_tint) -> np.ndarray:
        """Parses an RGB or RGBA tint from config, falling back to the default."""
        if config_tint is None:
            return np.asarray(DEFAULT_FILING_TINT, dtype=np.uint8)
        try:
            values = [int(c) for c in config_tint]
            if len(values) == 3:
                values.append(255)
            if len(values) != 4 or not all(0 <= c <= 255 for c in values):
                raise ValueError(f"expected 3 or 4 channels in 0-255, got {config_tint!r}")
        except (ValueError, TypeError) as e:
            logging.error(f"Could not parse particle_tint from config: {e}. Falling back to default tint.")
            return np.asarray(DEFAULT_FILING_TINT, dtype=np.uint8)
        return np.asarray(values, dtype=np.uint8)

    def accumulate_force(self, forces: np.ndarray) -> None:
        self.accelerations += forces

    def step(self, bounds: Bounds, frame_counter: int) -> None:
        """
        Advances every particle by one frame.
        """
        # 1. Apply accumulated force and cap the speed
        self.velocities += self.accelerations
        self.velocities = clamp_magnitude(self.velocities, self.max_speed)

        # 2. Move, then damp so friction shapes the next frame's start velocity
        self.positions += self.velocities
        self.velocities *= self.damping

        # 3. Clear the scratch accumulator
        self.accelerations.fill(0.0)

        # 4. Particles that left the rectangle are re-spawned
        needs_reset = ~bounds.contains(self.positions)

        # 5. Periodic stirring, independent of whether a particle is well-behaved
        if frame_counter % self.reset_interval == 0:
            needs_reset |= self.rng.random(self.particle_count) < self.reset_probability

        if needs_reset.any():
            self.reset(bounds, needs_reset)

    def reset(self, bounds: Bounds, mask: Optional[np.ndarray] = None) -> None:
        """
        Re-spawns the selected particles (all of them when mask is None).
        """
        if mask is None:
            mask = np.ones(self.particle_count, dtype=bool)
        count = int(np.count_nonzero(mask))
        self.positions[mask] = bounds.sample(self.rng, count)
        self.velocities[mask] = 0.0

    def speeds(self) -> np.ndarray:
        return magnitude(self.velocities)
