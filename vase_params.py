import json
import logging
import math
import numpy as np
from dataclasses import dataclass, asdict, fields, replace
from typing import Dict, Any, Optional, Tuple

logger = logging.getLogger(__name__)

WAVE_TYPES = ("sine", "square", "triangle", "sawtooth")
TWIST_RATES = ("linear", "exponential")
TWIST_DIRECTIONS = ("clockwise", "counterclockwise")
NOISE_TYPES = ("none", "perlin", "simplex", "voronoi")

DEFAULT_RADIUS_FORMULA = "r"
DEFAULT_VERTICAL_FORMULA = "y"


class ParameterContractViolation(ValueError):
    """Structural parameters that cannot produce a mesh."""


class ImportDecodeError(ValueError):
    """A configuration payload that could not be decoded."""


@dataclass(frozen=True)
class VaseParameters:
    # Basic shape
    height: float = 200.0
    top_diameter: float = 80.0
    bottom_diameter: float = 100.0

    # Rim tabs
    top_tab_height: float = 0.0
    bottom_tab_height: float = 0.0

    # Radial waves
    radial_wave_type: str = "sine"
    radial_frequency: float = 5.0
    radial_amplitude: float = 10.0

    # Vertical waves
    vertical_wave_type: str = "sine"
    vertical_frequency: float = 3.0
    vertical_amplitude: float = 5.0

    # Twist
    twist_angle: float = 0.0  # degrees
    twist_rate: str = "linear"
    twist_direction: str = "clockwise"

    # Surface features
    surface_noise_type: str = "none"
    surface_noise_scale: float = 1.0
    surface_noise_amount: float = 0.0

    # Mesh settings
    radial_segments: int = 128
    vertical_segments: int = 128

    # Custom formulas
    radius_formula: str = DEFAULT_RADIUS_FORMULA
    vertical_deformation_formula: str = DEFAULT_VERTICAL_FORMULA

    @property
    def has_tabs(self) -> bool:
        return self.top_tab_height > 0 or self.bottom_tab_height > 0

    def validate(self):
        """Reject parameter sets the surface builder cannot sample"""
        problems = []

        for name in ("height", "top_diameter", "bottom_diameter"):
            value = getattr(self, name)
            if not _is_finite_number(value) or value <= 0:
                problems.append(f"{name} must be > 0 (got {value!r})")

        for name in ("top_tab_height", "bottom_tab_height"):
            value = getattr(self, name)
            if not _is_finite_number(value) or value < 0:
                problems.append(f"{name} must be >= 0 (got {value!r})")

        for name, minimum in (("radial_segments", 3), ("vertical_segments", 1)):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < minimum:
                problems.append(f"{name} must be an integer >= {minimum} (got {value!r})")

        for name in ("radial_frequency", "radial_amplitude", "vertical_frequency",
                     "vertical_amplitude", "twist_angle", "surface_noise_scale",
                     "surface_noise_amount"):
            if not _is_finite_number(getattr(self, name)):
                problems.append(f"{name} must be a finite number (got {getattr(self, name)!r})")

        for name, allowed in (("radial_wave_type", WAVE_TYPES),
                              ("vertical_wave_type", WAVE_TYPES),
                              ("twist_rate", TWIST_RATES),
                              ("twist_direction", TWIST_DIRECTIONS),
                              ("surface_noise_type", NOISE_TYPES)):
            if getattr(self, name) not in allowed:
                problems.append(f"{name} must be one of {allowed} (got {getattr(self, name)!r})")

        for name in ("radius_formula", "vertical_deformation_formula"):
            if not isinstance(getattr(self, name), str):
                problems.append(f"{name} must be a string")

        if problems:
            raise ParameterContractViolation("; ".join(problems))
        return self


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return math.isfinite(value)


DEFAULT_PARAMETERS = VaseParameters()

# Slider ranges of the interactive control panel
PARAMETER_BOUNDS: Dict[str, Tuple[float, float]] = {
    'height': (50, 500),
    'top_diameter': (20, 200),
    'bottom_diameter': (20, 200),
    'top_tab_height': (0, 50),
    'bottom_tab_height': (0, 50),
    'radial_frequency': (1, 20),
    'radial_amplitude': (0, 50),
    'vertical_frequency': (1, 20),
    'vertical_amplitude': (0, 50),
    'twist_angle': (0, 720),
    'surface_noise_scale': (0.1, 5),
    'surface_noise_amount': (0, 20),
    'radial_segments': (16, 256),
    'vertical_segments': (16, 256),
}

# Integer ranges drawn by randomize_parameters
RANDOMIZE_RANGES: Dict[str, Tuple[int, int]] = {
    'height': (100, 300),
    'top_diameter': (40, 120),
    'bottom_diameter': (60, 140),
    'radial_frequency': (3, 8),
    'radial_amplitude': (5, 20),
    'vertical_frequency': (2, 6),
    'vertical_amplitude': (3, 15),
    'twist_angle': (0, 360),
}

_FIELD_TYPES = {f.name: f.type for f in fields(VaseParameters)}


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# Configurations saved by the browser editor use camelCase keys
FIELD_ALIASES: Dict[str, str] = {_camel_case(name): name for name in _FIELD_TYPES}
FIELD_ALIASES['twistAngleDegrees'] = 'twist_angle'


def _coerce(name: str, value: Any):
    kind = _FIELD_TYPES[name]
    if kind in (int, "int"):
        if isinstance(value, bool):
            raise ImportDecodeError(f"{name}: expected an integer, got {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ImportDecodeError(f"{name}: expected an integer, got {value!r}") from None
        if not number.is_integer():
            raise ImportDecodeError(f"{name}: expected an integer, got {value!r}")
        return int(number)
    if kind in (float, "float"):
        if isinstance(value, bool):
            raise ImportDecodeError(f"{name}: expected a number, got {value!r}")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ImportDecodeError(f"{name}: expected a number, got {value!r}") from None
    if not isinstance(value, str):
        raise ImportDecodeError(f"{name}: expected a string, got {value!r}")
    return value


def parameters_to_json(params: VaseParameters) -> str:
    return json.dumps(asdict(params), indent=2)


def parameters_from_json(text: str) -> VaseParameters:
    """Decode a JSON payload, filling missing fields from the defaults"""
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ImportDecodeError(f"Invalid configuration JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ImportDecodeError("Configuration must be a JSON object")

    values = {}
    for key, value in payload.items():
        name = key if key in _FIELD_TYPES else FIELD_ALIASES.get(key)
        if name is None:
            logger.warning(f"Ignoring unknown configuration field: {key}")
            continue
        # a snake_case key wins over its camelCase alias
        if name != key and name in payload:
            continue
        values[name] = _coerce(name, value)

    return replace(DEFAULT_PARAMETERS, **values)


class VaseParameterStore:
    """Holds the current parameter set and applies edits to it"""

    def __init__(self, parameters: Optional[VaseParameters] = None):
        self._parameters = (parameters or DEFAULT_PARAMETERS).validate()

    @property
    def parameters(self) -> VaseParameters:
        return self._parameters

    def set_parameter(self, key: str, value):
        if key not in _FIELD_TYPES:
            raise KeyError(f"Unknown vase parameter: {key}")
        self._parameters = replace(self._parameters, **{key: value}).validate()
        return self._parameters

    def reset_parameters(self):
        self._parameters = DEFAULT_PARAMETERS
        return self._parameters

    def randomize_parameters(self, rng: Optional[np.random.Generator] = None):
        rng = rng if rng is not None else np.random.default_rng()
        updates = {}
        for name, (low, high) in RANDOMIZE_RANGES.items():
            value = int(rng.integers(low, high + 1))
            updates[name] = value if _FIELD_TYPES[name] in (int, "int") else float(value)

        self._parameters = replace(self._parameters, **updates).validate()
        return self._parameters

    def export_configuration(self) -> str:
        return parameters_to_json(self._parameters)

    def import_configuration(self, config: str):
        # The current parameters stay untouched unless the payload decodes and validates
        try:
            new_params = parameters_from_json(config).validate()
        except ParameterContractViolation as e:
            raise ImportDecodeError(f"Imported parameters are invalid: {e}") from e

        self._parameters = new_params
        return self._parameters
