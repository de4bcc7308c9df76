# vector.py
"""
Vector helpers for 2D simulation state.

All functions operate on NumPy arrays whose last axis holds (x, y), so the
same call works for a single vector of shape (2,) and for a whole pool of
shape (N, 2). This module also defines the Bounds rectangle used for
boundary checks and uniform re-spawning.
"""
import numpy as np
from typing import NamedTuple

# --- Data Contracts ---
#
# magnitude(v) -> ndarray of shape v.shape[:-1]
# normalize(v) -> ndarray of shape v.shape
#   - Invariants: zero-length vectors stay zero. Never returns NaN.
# clamp_magnitude(v, max_magnitude) -> ndarray of shape v.shape
#   - Invariants: magnitude(result) <= max_magnitude (up to float rounding).
# heading(v) -> ndarray of shape v.shape[:-1], radians in (-pi, pi].
# from_angle(angle) -> ndarray of shape angle.shape + (2,), unit vectors.
#
# class Bounds(width, height):
#   - contains(points) -> bool ndarray, True where 0 <= x <= width and
#     0 <= y <= height.
#   - sample(rng, n) -> (n, 2) float64 ndarray of uniform points.


def magnitude(v: np.ndarray) -> np.ndarray:
    """Euclidean length along the last axis."""
    return np.linalg.norm(v, axis=-1)


def normalize(v: np.ndarray) -> np.ndarray:
    """Returns unit vectors, leaving zero-length vectors as zero."""
    v = np.asarray(v, dtype=np.float64)
    length = magnitude(v)[..., np.newaxis]
    # Divide only where the length is non-zero; elsewhere keep the zeros.
    return np.divide(v, length, out=np.zeros_like(v), where=length > 0)


def clamp_magnitude(v: np.ndarray, max_magnitude: float) -> np.ndarray:
    """
    Scales down any vector longer than max_magnitude to exactly that length.
    Shorter vectors are returned unchanged.
    """
    v = np.array(v, dtype=np.float64)
    length = magnitude(v)
    over = length > max_magnitude
    if np.ndim(over) == 0:
        return normalize(v) * max_magnitude if over else v
    v[over] = normalize(v[over]) * max_magnitude
    return v


def heading(v: np.ndarray) -> np.ndarray:
    """Angle of each vector measured from the +x axis."""
    v = np.asarray(v, dtype=np.float64)
    return np.arctan2(v[..., 1], v[..., 0])


def from_angle(angle) -> np.ndarray:
    """Unit vector(s) pointing along the given angle(s)."""
    angle = np.asarray(angle, dtype=np.float64)
    return np.stack((np.cos(angle), np.sin(angle)), axis=-1)


class Bounds(NamedTuple):
    """Axis-aligned simulation rectangle anchored at the origin."""
    width: float
    height: float

    def contains(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64)
        x = points[..., 0]
        y = points[..., 1]
        return (x >= 0) & (x <= self.width) & (y >= 0) & (y <= self.height)

    def sample(self, rng: np.random.Generator, n: int) -> np.ndarray:
        return rng.uniform(low=[0, 0], high=[self.width, self.height], size=(n, 2))
