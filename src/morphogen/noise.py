"""
Lattice value noise.

Hash-based 3D value noise with a quintic fade curve and trilinear
interpolation of the 8 lattice-corner values. All functions accept scalars
or numpy arrays and evaluate element-wise, so a whole sampling grid is
processed in one call.

Integer arithmetic is signed 64-bit with wrap-around, which the lattice hash
depends on.
"""

import numpy as np

_HASH_X = 374761393
_HASH_Y = 668265263
_HASH_Z = 1274126177
_HASH_MIX = 1274126177
_HASH_MASK = 0x7FFFFFFF


def _wrap_int64(value: int) -> np.int64:
    """Map an arbitrary Python int onto the signed 64-bit range."""
    value = int(value) & ((1 << 64) - 1)
    if value >= 1 << 63:
        value -= 1 << 64
    return np.int64(value)


def fade(t):
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a, b, t):
    return a + t * (b - a)


def lattice_hash(x, y, z) -> np.ndarray:
    """
    Hash integer lattice coordinates to [0, 1].

    Multiplicative/XOR mix, not cryptographic.
    """
    x = np.atleast_1d(np.asarray(x, dtype=np.int64))
    y = np.atleast_1d(np.asarray(y, dtype=np.int64))
    z = np.atleast_1d(np.asarray(z, dtype=np.int64))
    with np.errstate(over='ignore'):
        h = x * _HASH_X + y * _HASH_Y + z * _HASH_Z
        h = (h ^ (h >> 13)) * _HASH_MIX
    return (h & _HASH_MASK).astype(np.float64) / float(_HASH_MASK)


def value_noise3d(x, y, z, seed: int = 0):
    """
    Evaluate 3D value noise.

    Args:
        x, y, z: Sample coordinates (scalars or same-shape arrays)
        seed: Offset added to the lattice coordinates; different seeds give
            decorrelated fields

    Returns:
        Noise in [-1, 1] with the shape of the inputs (float for scalars)
    """
    scalar = np.ndim(x) == 0 and np.ndim(y) == 0 and np.ndim(z) == 0
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    y = np.atleast_1d(np.asarray(y, dtype=np.float64))
    z = np.atleast_1d(np.asarray(z, dtype=np.float64))

    fx, fy, fz = np.floor(x), np.floor(y), np.floor(z)
    offset = _wrap_int64(seed)
    with np.errstate(over='ignore'):
        xi = fx.astype(np.int64) + offset
        yi = fy.astype(np.int64) + offset
        zi = fz.astype(np.int64) + offset
        xi1, yi1, zi1 = xi + 1, yi + 1, zi + 1

    u = fade(x - fx)
    v = fade(y - fy)
    w = fade(z - fz)

    aaa = lattice_hash(xi, yi, zi)
    aab = lattice_hash(xi, yi, zi1)
    aba = lattice_hash(xi, yi1, zi)
    abb = lattice_hash(xi, yi1, zi1)
    baa = lattice_hash(xi1, yi, zi)
    bab = lattice_hash(xi1, yi, zi1)
    bba = lattice_hash(xi1, yi1, zi)
    bbb = lattice_hash(xi1, yi1, zi1)

    result = lerp(
        lerp(lerp(aaa, baa, u), lerp(aba, bba, u), v),
        lerp(lerp(aab, bab, u), lerp(abb, bbb, u), v),
        w
    )
    result = result * 2.0 - 1.0

    if scalar:
        return float(result[0])
    return result


def fractal_noise3d(x, y, z, frequencies, amplitudes, seed: int = 0):
    """
    Sum octaves of value noise.

    Octave k samples at ``p * frequencies[k]`` with seed ``seed + k`` and is
    weighted by ``amplitudes[k]``.
    """
    if len(frequencies) != len(amplitudes):
        raise ValueError("frequencies and amplitudes must have the same length")
    total = 0.0
    for k, (freq, amp) in enumerate(zip(frequencies, amplitudes)):
        total = total + value_noise3d(x * freq, y * freq, z * freq, seed=seed + k) * amp
    return total
