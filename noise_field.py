# noise_field.py
"""
Seeded one-dimensional coherent noise.

PerlinNoise follows the classic Processing-style value noise: a table of
random values in [0, 1) sampled at integer lattice points, blended with a
cosine ease curve and summed over several octaves of doubling frequency and
falling amplitude. The result is continuous in its input, which is what the
magnet walkers need for smooth wandering.
"""
import logging
import numpy as np
from numba import jit
from typing import Dict, Any

# --- Data Contracts ---
#
# class PerlinNoise:
#   - __init__(self, rng: np.random.Generator, params: Dict[str, Any]):
#     - Inputs:
#       - rng: Generator used once to fill the lattice table.
#       - params: Simulation parameters from config.json.
#         - "noise_octaves": int (default 4)
#         - "noise_falloff": float in (0, 0.5] (default 0.5)
#     - Side Effects: Builds the lattice table.
#
#   - sample(self, xs) -> ndarray:
#     - Inputs: scalar or array of any shape.
#     - Outputs: float64 array of the same shape with values in [0, 1).
#     - Invariants: deterministic for a given table; |n(x + h) - n(x)| is
#       bounded by pi * |h| for the default octaves/falloff.

# Table length must be a power of two so lattice indices wrap with a mask.
TABLE_SIZE = 4096


@jit(nopython=True)
def _perlin_1d_numba(table, xs, octaves, falloff):
    """
    Numba-jitted octave sum over a flat array of sample points.
    Negative inputs are mirrored, as in the Processing implementation.
    """
    size_mask = table.shape[0] - 1
    out = np.empty(xs.shape[0], dtype=np.float64)

    for i in range(xs.shape[0]):
        x = abs(xs[i])
        xi = int(np.floor(x))
        xf = x - xi

        total = 0.0
        amplitude = 0.5
        for _ in range(octaves):
            # Cosine ease between the two neighbouring lattice values
            ease = 0.5 * (1.0 - np.cos(xf * np.pi))
            a = table[xi & size_mask]
            b = table[(xi + 1) & size_mask]
            total += (a + ease * (b - a)) * amplitude

            amplitude *= falloff
            xi <<= 1
            xf *= 2.0
            if xf >= 1.0:
                xi += 1
                xf -= 1.0

        out[i] = total
    return out


class PerlinNoise:
    """
    A seeded, smooth scalar noise field indexed by a real phase.
    """
    def __init__(self, rng: np.random.Generator, params: Dict[str, Any]):
        self.octaves = int(params.get('noise_octaves', 4))
        self.falloff = float(params.get('noise_falloff', 0.5))

        # With falloff <= 0.5 the amplitudes sum below 1, keeping output in [0, 1).
        if self.octaves < 1 or not 0.0 < self.falloff <= 0.5:
            msg = (
                f"Configuration error: noise_octaves must be >= 1 and noise_falloff "
                f"must lie in (0, 0.5]; got {self.octaves} and {self.falloff}."
            )
            logging.critical(msg)
            raise ValueError(msg)

        self.table = rng.random(TABLE_SIZE)

        logging.debug(
            f"PerlinNoise table built ({TABLE_SIZE} entries, "
            f"{self.octaves} octaves, falloff {self.falloff})."
        )

    def sample(self, xs) -> np.ndarray:
        xs = np.asarray(xs, dtype=np.float64)
        flat = np.ascontiguousarray(xs.ravel())
        values = _perlin_1d_numba(self.table, flat, self.octaves, self.falloff)
        return values.reshape(xs.shape)
