# magnet.py
"""
Invisible dipole walkers that deflect the iron particles.

This module defines the MagnetSystem class, which stores every magnet's
position, noise phases and orientation in NumPy arrays, moves the magnets
along smooth noise-driven paths, and evaluates the two-pole force field they
exert on arbitrary query points.
"""
import logging
import numpy as np
from numba import jit, prange
from typing import Dict, Any, Optional, Tuple
from noise_field import PerlinNoise
from vector import Bounds, from_angle

# --- Data Contracts ---
#
# class MagnetSystem:
#   - __init__(self, params, bounds, rng, noise):
#     - Inputs:
#       - params: Simulation parameters from config.json.
#         - "magnet_count": int (default 5)
#         - "pole_separation": float (default 60.0)
#         - "magnet_strength": float (default 100.0)
#         - "min_pole_distance": float (default 5.0)
#         - "max_pole_distance": float (default 100.0)
#         - "phase_step": float (default 0.005)
#         - "angle_step": float (default 0.01)
#       - bounds: Bounds the walkers roam over.
#       - rng: Generator for initial positions, phases and angles.
#       - noise: PerlinNoise field sampled by walk().
#     - Invariants:
#       - self.positions is (M, 2) float64, self.phases is (M, 2) float64,
#         self.angles is (M,) float64.
#
#   - walk(self) -> None:
#     - Side Effects: Sets positions from the noise field, then advances
#       angles and phases. Phases only ever increase.
#
#   - force_at(self, points, index=None) -> ndarray:
#     - Inputs: points of shape (2,) or (N, 2); optional single magnet index.
#     - Outputs: force of the same shape, summed over the selected magnets.
#     - Side Effects: None.
#     - Invariants: finite for any finite input, including points on a pole.
#
#   - pole_magnitude(self, distance) -> float or ndarray:
#     - Outputs: strength / clamp(distance, min_pole_distance, max_pole_distance)**2,
#       the per-pole magnitude force_at applies. Logged at DEBUG on init.


@jit(nopython=True, parallel=True)
def _dipole_forces_numba(points, centers, angles, half_separation, strength,
                         min_distance, max_distance):
    """
    Numba-jitted dipole field evaluation.

    Every query point is independent, so the outer loop is a prange. Each
    iteration only reads magnet state and writes its own output row.
    """
    point_count = points.shape[0]
    magnet_count = centers.shape[0]
    forces = np.zeros((point_count, 2), dtype=np.float64)

    for i in prange(point_count):
        px = points[i, 0]
        py = points[i, 1]
        fx = 0.0
        fy = 0.0

        for j in range(magnet_count):
            angle = angles[j]
            north_x = centers[j, 0] + half_separation * np.cos(angle)
            north_y = centers[j, 1] + half_separation * np.sin(angle)
            south_x = centers[j, 0] + half_separation * np.cos(angle + np.pi)
            south_y = centers[j, 1] + half_separation * np.sin(angle + np.pi)

            # North pole pushes the point away from it
            dx = px - north_x
            dy = py - north_y
            length = np.sqrt(dx * dx + dy * dy)
            if length > 0.0:
                dist = min(max(length, min_distance), max_distance)
                scale = strength / (dist * dist) / length
                fx += dx * scale
                fy += dy * scale

            # South pole pulls the point towards it
            dx = south_x - px
            dy = south_y - py
            length = np.sqrt(dx * dx + dy * dy)
            if length > 0.0:
                dist = min(max(length, min_distance), max_distance)
                scale = strength / (dist * dist) / length
                fx += dx * scale
                fy += dy * scale

        forces[i, 0] = fx
        forces[i, 1] = fy
    return forces


class MagnetSystem:
    """
    A fixed pool of dipole walkers stored as NumPy arrays.
    """
    def __init__(self, params: Dict[str, Any], bounds: Bounds,
                 rng: np.random.Generator, noise: PerlinNoise):
        self.magnet_count = int(params.get('magnet_count', 5))
        self.pole_separation = float(params.get('pole_separation', 60.0))
        self.strength = float(params.get('magnet_strength', 100.0))
        self.min_distance = float(params.get('min_pole_distance', 5.0))
        self.max_distance = float(params.get('max_pole_distance', 100.0))
        self.phase_step = float(params.get('phase_step', 0.005))
        self.angle_step = float(params.get('angle_step', 0.01))
        self.bounds = bounds
        self.noise = noise

        if not 0.0 < self.min_distance <= self.max_distance:
            msg = (
                f"Configuration error: pole distance limits must satisfy "
                f"0 < min_pole_distance <= max_pole_distance; got "
                f"{self.min_distance} and {self.max_distance}."
            )
            logging.critical(msg)
            raise ValueError(msg)

        # Positions are overwritten by the first walk(); starting them inside
        # the bounds keeps force_at meaningful before that.
        self.positions = bounds.sample(rng, self.magnet_count)
        self.phases = rng.uniform(0.0, 1000.0, size=(self.magnet_count, 2))
        self.angles = rng.uniform(0.0, 2.0 * np.pi, size=self.magnet_count)

        logging.info(f"MagnetSystem initialized with {self.magnet_count} magnets.")
        logging.debug(
            f"Magnet pole separation {self.pole_separation}, strength {self.strength}, "
            f"distance clamp [{self.min_distance}, {self.max_distance}], "
            f"pole force range [{self.pole_magnitude(np.inf):.4g}, {self.pole_magnitude(0.0):.4g}]."
        )

    def walk(self) -> None:
        """
        Moves every magnet to the point its noise phases map to, then rotates
        it and advances the phases.
        """
        drift = self.noise.sample(self.phases)
        self.positions[:, 0] = drift[:, 0] * self.bounds.width
        self.positions[:, 1] = drift[:, 1] * self.bounds.height

        self.angles += self.angle_step
        self.phases += self.phase_step

    def pole_magnitude(self, distance):
        """
        Inverse-square magnitude of a single pole at the given distance, with
        the distance clamped to [min_distance, max_distance]. Matches the
        per-pole magnitude used inside force_at.
        """
        dist = np.clip(distance, self.min_distance, self.max_distance)
        return self.strength / (dist * dist)

    def pole_positions(self) -> Tuple[np.ndarray, np.ndarray]:
        """Returns (north, south) pole locations, each of shape (M, 2)."""
        offset = from_angle(self.angles) * (self.pole_separation / 2.0)
        south_offset = from_angle(self.angles + np.pi) * (self.pole_separation / 2.0)
        return self.positions + offset, self.positions + south_offset

    def force_at(self, points, index: Optional[int] = None) -> np.ndarray:
        """
        Force exerted on each query point by all magnets, or only by the
        magnet at `index` when one is given.
        """
        points = np.asarray(points, dtype=np.float64)
        single = points.ndim == 1
        query = np.ascontiguousarray(np.atleast_2d(points))

        if index is None:
            centers, angles = self.positions, self.angles
        else:
            centers = self.positions[[index]]
            angles = self.angles[[index]]

        forces = _dipole_forces_numba(
            query, np.ascontiguousarray(centers), np.ascontiguousarray(angles),
            self.pole_separation / 2.0, self.strength,
            self.min_distance, self.max_distance
        )
        return forces[0] if single else forces
