import numpy as np

TWO_PI = 2 * np.pi

# Angles this close to a region boundary are treated as sitting on it
_SNAP_TOLERANCE = 1e-9


def normalize_angle(x):
    """Map angles into [0, 2pi), snapping float noise at 0/2pi and pi"""
    t = np.mod(np.asarray(x, dtype=float), TWO_PI)
    t = np.where(np.abs(t - TWO_PI) < _SNAP_TOLERANCE, 0.0, t)
    t = np.where(np.abs(t - np.pi) < _SNAP_TOLERANCE, np.pi, t)
    return t


def _unwrap(result, x):
    # Scalars in, Python floats out
    return float(result) if np.ndim(x) == 0 else result


def sine_wave(x):
    return _unwrap(np.sin(normalize_angle(x)), x)


def square_wave(x):
    t = normalize_angle(x)
    return _unwrap(np.where(t < np.pi, 1.0, -1.0), x)


def triangle_wave(x):
    # -1 at the seam, +1 at pi
    s = normalize_angle(x) / TWO_PI
    return _unwrap(2 * np.abs(2 * (s - np.floor(s + 0.5))) - 1, x)


def sawtooth_wave(x):
    t = normalize_angle(x)
    return _unwrap(t / np.pi - 1, x)


WAVE_FUNCTIONS = {
    'sine': sine_wave,
    'square': square_wave,
    'triangle': triangle_wave,
    'sawtooth': sawtooth_wave,
}


def get_wave_function(wave_type: str):
    try:
        return WAVE_FUNCTIONS[wave_type]
    except KeyError:
        raise ValueError(f"Unknown wave type: {wave_type!r}") from None
